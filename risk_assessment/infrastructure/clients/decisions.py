"""Decision event publisher - delivers final decisions to the downstream webhook"""

import logging
import httpx
from risk_assessment.config import settings
from risk_assessment.domain.events import DecisionEvent
from risk_assessment.domain.models import RiskAssessment
from risk_assessment.infrastructure.observability.metrics import MetricsSink, NullMetricsSink

logger = logging.getLogger(__name__)


class DecisionPublisher:
    """Client for sending decision events to the decision-events consumer"""

    def __init__(
        self,
        webhook_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        metrics: MetricsSink | None = None,
        timeout: float | None = None,
    ):
        self.webhook_url = webhook_url or settings.decision_webhook_url
        self.timeout = timeout or settings.http_timeout_seconds
        self._http_client = http_client
        self._metrics = metrics or NullMetricsSink()

    async def publish_decision(self, assessment: RiskAssessment) -> None:
        """
        Publish the decision for a persisted assessment.

        Single attempt, no retry: the outcome is counted under
        decision_events{status} and failures are re-raised to the caller's
        background runner for logging.
        """
        event = DecisionEvent.from_assessment(assessment)
        payload = event.model_dump(mode="json", by_alias=True)

        try:
            if self._http_client is not None:
                await self._post(self._http_client, payload)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    await self._post(client, payload)
        except (httpx.HTTPStatusError, httpx.RequestError):
            self._metrics.increment("decision_events", status="error")
            raise

        self._metrics.increment("decision_events", status="success")
        logger.info(
            "Sent decision event",
            extra={
                "application_id": str(assessment.application_id),
                "assessment_id": str(assessment.id),
                "decision": event.decision,
            },
        )

    async def _post(self, client: httpx.AsyncClient, payload: dict) -> None:
        response = await client.post(
            self.webhook_url,
            json=payload,
            headers={"X-Event-Key": payload["applicationId"]},
            timeout=self.timeout,
        )
        response.raise_for_status()
