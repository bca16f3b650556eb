"""Risk assessment orchestration - fan out, score, persist, cache, publish"""

import asyncio
import logging
import time
import uuid
from concurrent.futures import Executor
from datetime import timedelta
from functools import partial
from typing import Any, Callable, Optional, TypeVar
from risk_assessment.domain.computations import analyze_collateral, calculate_debt_ratio, perform_fraud_check
from risk_assessment.domain.exceptions import AssessmentTimeoutError, ReassessmentNotSupportedError
from risk_assessment.domain.models import ApplicationInput, Decision, RiskAssessment
from risk_assessment.domain.scoring import score_application
from risk_assessment.infrastructure.background import BackgroundRunner
from risk_assessment.infrastructure.cache.store import CacheCodec, CacheStore, assessment_cache_key
from risk_assessment.infrastructure.clients.decisions import DecisionPublisher
from risk_assessment.infrastructure.database.store import AssessmentStore
from risk_assessment.infrastructure.observability.logging import log_assessment
from risk_assessment.infrastructure.observability.metrics import MetricsSink, NullMetricsSink
from risk_assessment.services.credit_bureau import CreditBureauGateway

logger = logging.getLogger(__name__)

T = TypeVar("T")

ASSESSMENT_CACHE_TTL = timedelta(hours=24)
ASSESSMENT_TIMEOUT_SECONDS = 45.0


class RiskAssessmentService:
    """
    Orchestrates a single risk assessment.

    Flow:
    1. Credit report, debt ratio, collateral and fraud check run concurrently
    2. Results are normalized, weighted and compared against the approval threshold
    3. The assessment is persisted
    4. Cache update and decision event are spawned without blocking the response
    Any failure or deadline breach yields a persisted-if-possible ERROR assessment.
    """

    def __init__(
        self,
        credit_bureau: CreditBureauGateway,
        store: AssessmentStore,
        cache: CacheStore,
        publisher: DecisionPublisher,
        runner: BackgroundRunner,
        executor: Executor,
        metrics: MetricsSink | None = None,
        timeout_seconds: float = ASSESSMENT_TIMEOUT_SECONDS,
        cache_ttl: timedelta = ASSESSMENT_CACHE_TTL,
    ):
        self._credit_bureau = credit_bureau
        self._store = store
        self._cache = cache
        self._publisher = publisher
        self._runner = runner
        self._executor = executor
        self._metrics = metrics or NullMetricsSink()
        self._timeout_seconds = timeout_seconds
        self._cache_ttl = cache_ttl
        self._codec = CacheCodec(RiskAssessment)

    async def assess_risk(self, application: ApplicationInput) -> RiskAssessment:
        """Run the full pipeline; always returns an assessment, never raises."""
        started = time.perf_counter()
        logger.info(
            "Starting risk assessment",
            extra={"application_id": str(application.application_id), "customer_id": application.customer_id},
        )

        try:
            assessment = await asyncio.wait_for(self._run_pipeline(application, started), timeout=self._timeout_seconds)
        except asyncio.TimeoutError:
            error = AssessmentTimeoutError(f"risk assessment timed out after {self._timeout_seconds}s")
            assessment = await self._handle_failure(application, error, started)
        except Exception as e:
            assessment = await self._handle_failure(application, e, started)

        self._metrics.increment("assessments", decision=assessment.decision.value)
        self._metrics.observe("assessment_duration_seconds", time.perf_counter() - started)
        log_assessment(assessment, application.customer_id)
        return assessment

    async def _run_pipeline(self, application: ApplicationInput, started: float) -> RiskAssessment:
        # 1. Fan out the four independent inputs
        report, debt_ratio, collateral, fraud = await asyncio.gather(
            self._credit_bureau.get_credit_report(application.customer_id, application.application_id),
            self._offload(calculate_debt_ratio, application.income, application.loan_amount),
            self._offload(analyze_collateral, application.loan_amount, application.loan_purpose),
            self._offload(perform_fraud_check, application.application_id, application.customer_id),
        )

        # 2. Score and decide
        risk_score, factors, decision, reason = score_application(application, report, debt_ratio, collateral, fraud)

        assessment = RiskAssessment(
            application_id=application.application_id,
            credit_score=report.credit_score,
            debt_ratio=debt_ratio.percentage,
            risk_score=risk_score,
            decision=decision,
            decision_reason=reason,
            processing_time_ms=elapsed_ms(started),
            risk_factors=factors,
        )

        # 3. Persist (main write; failures surface into the ERROR path)
        saved = await self._store.save_assessment(assessment)

        # 4. Best-effort side effects
        self._runner.spawn(self._cache_assessment(saved), name="assessment_cache_write")
        self._runner.spawn(self._publisher.publish_decision(saved), name="decision_publish")
        return saved

    async def _offload(self, func: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, partial(func, *args))

    async def _handle_failure(self, application: ApplicationInput, error: Exception, started: float) -> RiskAssessment:
        logger.error(
            f"Error during risk assessment: {error}",
            extra={"application_id": str(application.application_id)},
        )
        assessment = RiskAssessment(
            application_id=application.application_id,
            decision=Decision.ERROR,
            decision_reason=f"Processing error: {error}",
            processing_time_ms=elapsed_ms(started),
        )

        try:
            await self._store.save_assessment(assessment)
        except Exception as e:
            logger.error(
                f"Failed to persist ERROR assessment: {e}",
                extra={"application_id": str(application.application_id)},
            )
        return assessment

    async def _cache_assessment(self, assessment: RiskAssessment) -> None:
        await self._cache.set(
            assessment_cache_key(assessment.application_id),
            self._codec.encode(assessment),
            self._cache_ttl,
        )
        logger.info("Cached risk assessment", extra={"application_id": str(assessment.application_id)})

    async def get_risk_assessment(self, application_id: uuid.UUID) -> Optional[RiskAssessment]:
        """Cache-aside read; None when the application has never been assessed."""
        cache_key = assessment_cache_key(application_id)

        try:
            data = await self._cache.get(cache_key)
            cached = self._codec.decode(data) if data else None
        except Exception as e:
            logger.error(f"Failed to read risk assessment cache: {e}", extra={"application_id": str(application_id)})
            cached = None

        if cached is not None:
            logger.info("Cache hit for risk assessment", extra={"application_id": str(application_id)})
            self._metrics.increment("assessment_cache_requests", status="hit")
            return cached

        logger.info("Cache miss for risk assessment, reading database", extra={"application_id": str(application_id)})
        self._metrics.increment("assessment_cache_requests", status="miss")

        assessment = await self._store.find_assessment(application_id)
        if assessment is None:
            logger.warning("No risk assessment found", extra={"application_id": str(application_id)})
            return None

        self._runner.spawn(self._cache_assessment(assessment), name="assessment_cache_backfill")
        return assessment

    async def reassess_risk(self, application_id: uuid.UUID) -> RiskAssessment:
        logger.warning("Reassessment requested but not supported", extra={"application_id": str(application_id)})
        raise ReassessmentNotSupportedError(f"Reassessment for application ID {application_id} not implemented yet.")


def elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
