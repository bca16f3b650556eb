"""Inbound scoring-complete event handling"""

import logging
from typing import Any, Mapping, Optional
from pydantic import ValidationError
from risk_assessment.domain.events import ScoringCompleteEvent
from risk_assessment.domain.models import Decision, RiskAssessment
from risk_assessment.infrastructure.observability.metrics import MetricsSink, NullMetricsSink
from risk_assessment.services.risk_assessment import RiskAssessmentService

logger = logging.getLogger(__name__)


class ScoringEventHandler:
    """
    Consumes scoring-complete events and triggers an assessment.

    Every event is acknowledged: malformed payloads are logged and dropped,
    pipeline failures are already absorbed into an ERROR assessment.
    """

    def __init__(self, service: RiskAssessmentService, metrics: MetricsSink | None = None):
        self._service = service
        self._metrics = metrics or NullMetricsSink()

    async def handle(self, payload: Mapping[str, Any]) -> Optional[RiskAssessment]:
        try:
            event = ScoringCompleteEvent.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Discarding malformed scoring event: {e.error_count()} validation errors")
            self._metrics.increment("scoring_events", status="error")
            return None

        logger.info("Received scoring-complete event", extra={"application_id": str(event.application_id)})
        assessment = await self._service.assess_risk(event.to_application())

        status = "error" if assessment.decision == Decision.ERROR else "success"
        self._metrics.increment("scoring_events", status=status)
        return assessment
