"""Risk assessment query and reassessment endpoints"""

import uuid
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from risk_assessment.api.v1.schemas import AssessmentResponse
from risk_assessment.api.dependencies import get_assessment_service, get_request_id
from risk_assessment.domain.exceptions import ReassessmentNotSupportedError
from risk_assessment.services.risk_assessment import RiskAssessmentService

router = APIRouter()


def parse_application_id(application_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(application_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid application ID format")


@router.get("/assessments/{application_id}", response_model=AssessmentResponse)
async def get_assessment(
    application_id: str,
    request: Request,
    service: RiskAssessmentService = Depends(get_assessment_service),
):
    """
    Retrieve the latest risk assessment for an application.

    Served from cache when possible, falling back to the database.
    """
    app_uuid = parse_application_id(application_id)

    try:
        assessment = await service.get_risk_assessment(app_uuid)
    except Exception as e:
        logging.error(f"Assessment lookup failed: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Assessment storage unavailable")

    if assessment is None:
        raise HTTPException(status_code=404, detail="Assessment not found")

    return AssessmentResponse.from_domain(assessment)


@router.post("/assessments/{application_id}/reassess", response_model=AssessmentResponse)
async def reassess(
    application_id: str,
    request: Request,
    service: RiskAssessmentService = Depends(get_assessment_service),
):
    """Trigger reassessment of an application (not supported yet)."""
    app_uuid = parse_application_id(application_id)

    try:
        assessment = await service.reassess_risk(app_uuid)
    except ReassessmentNotSupportedError as e:
        logging.warning(f"Reassessment rejected: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=501, detail=str(e))

    return AssessmentResponse.from_domain(assessment)
