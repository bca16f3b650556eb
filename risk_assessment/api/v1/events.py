"""POST /v1/events/scoring-complete - HTTP transport for inbound scoring events"""

from typing import Any, Dict
from fastapi import APIRouter, Body, Depends

from risk_assessment.api.v1.schemas import EventAckResponse
from risk_assessment.api.dependencies import get_event_handler
from risk_assessment.services.events import ScoringEventHandler

router = APIRouter()


@router.post("/events/scoring-complete", response_model=EventAckResponse, status_code=202)
async def scoring_complete(
    payload: Dict[str, Any] = Body(...),
    handler: ScoringEventHandler = Depends(get_event_handler),
):
    """
    Accept a scoring-complete event and run the risk assessment.

    Always acknowledged: pipeline failures come back as an ERROR decision and
    malformed events are dropped without an assessment.
    """
    assessment = await handler.handle(payload)
    if assessment is None:
        return EventAckResponse()

    return EventAckResponse(assessment_id=str(assessment.id), decision=assessment.decision.value)
