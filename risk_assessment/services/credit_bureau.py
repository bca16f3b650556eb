"""Cache-aside, fault-tolerant access to central bank credit reports"""

import logging
import time
import uuid
from datetime import timedelta
from risk_assessment.domain.exceptions import CentralBankAPIError
from risk_assessment.domain.models import CreditReport, CREDIT_STATUS_FALLBACK, utcnow
from risk_assessment.infrastructure.background import BackgroundRunner
from risk_assessment.infrastructure.cache.store import CacheCodec, CacheStore, credit_cache_key
from risk_assessment.infrastructure.clients.central_bank import CentralBankClient
from risk_assessment.infrastructure.observability.metrics import MetricsSink, NullMetricsSink
from risk_assessment.infrastructure.resilience.bulkhead import Bulkhead
from risk_assessment.infrastructure.resilience.circuit_breaker import CircuitBreaker
from risk_assessment.infrastructure.resilience.errors import ResilienceError
from risk_assessment.infrastructure.resilience.retry import Retry, RetryConfig
from risk_assessment.services.audit import (
    AuditLogger,
    CENTRAL_BANK_CACHE_HIT,
    CENTRAL_BANK_ERROR,
    CENTRAL_BANK_FALLBACK,
    CENTRAL_BANK_NO_DATA,
    CENTRAL_BANK_SUCCESS,
)

logger = logging.getLogger(__name__)

CREDIT_CACHE_TTL = timedelta(hours=1)
FALLBACK_DETAILS = "Service temporarily unavailable. Please try again later."


class CreditBureauGateway:
    """
    Fetches credit reports for the risk pipeline. Never raises.

    Flow:
    1. Serve from cache (credit:{customer_id}) when present
    2. Otherwise call the central bank under bulkhead -> circuit breaker -> retry
    3. Cache good reports for an hour; degrade to a fallback report on failure
    """

    def __init__(
        self,
        client: CentralBankClient,
        cache: CacheStore,
        audit: AuditLogger,
        runner: BackgroundRunner,
        bulkhead: Bulkhead | None = None,
        breaker: CircuitBreaker | None = None,
        retry: Retry | None = None,
        metrics: MetricsSink | None = None,
        cache_ttl: timedelta = CREDIT_CACHE_TTL,
    ):
        self._client = client
        self._cache = cache
        self._audit = audit
        self._runner = runner
        self._metrics = metrics or NullMetricsSink()
        self._bulkhead = bulkhead or Bulkhead("central_bank")
        self._breaker = breaker or CircuitBreaker("central_bank", metrics=self._metrics)
        self._retry = retry or Retry("central_bank", RetryConfig(retry_on=(CentralBankAPIError,)))
        self._codec = CacheCodec(CreditReport)
        self._cache_ttl = cache_ttl

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    async def get_credit_report(self, customer_id: str, application_id: uuid.UUID) -> CreditReport:
        cache_key = credit_cache_key(customer_id)

        cached = await self._read_cache(cache_key)
        if cached is not None:
            logger.info("Cache hit for credit report", extra={"customer_id": customer_id})
            self._metrics.increment("credit_cache_requests", status="hit")
            now = utcnow()
            self._audit.record(application_id, CENTRAL_BANK_CACHE_HIT, now, now, 200, cached=True)
            return cached

        logger.info("Cache miss for credit report, calling central bank", extra={"customer_id": customer_id})
        self._metrics.increment("credit_cache_requests", status="miss")

        try:
            async with self._bulkhead:
                report = await self._breaker.call(self._retry.call, self._fetch_attempt, customer_id, application_id)
        except (ResilienceError, CentralBankAPIError) as e:
            return self._fallback(customer_id, application_id, e)
        except Exception as e:
            logger.exception("Unexpected error fetching credit report", extra={"customer_id": customer_id})
            return self._fallback(customer_id, application_id, e)

        if report.credit_score > 0:
            self._runner.spawn(self._write_cache(cache_key, report), name="credit_cache_write")

        return report

    async def _fetch_attempt(self, customer_id: str, application_id: uuid.UUID) -> CreditReport:
        """One network attempt, audited whatever the outcome"""
        request_time = utcnow()
        started = time.perf_counter()
        try:
            report = await self._client.fetch_credit_report(customer_id)
        except CentralBankAPIError as e:
            logger.error(f"Error fetching credit report: {e}", extra={"customer_id": customer_id})
            self._metrics.increment("central_bank_calls", outcome="error")
            self._audit.record(application_id, CENTRAL_BANK_ERROR, request_time, utcnow(), e.status_code)
            raise
        finally:
            self._metrics.observe("central_bank_latency_seconds", time.perf_counter() - started)

        if report.credit_score > 0:
            self._metrics.increment("central_bank_calls", outcome="success")
            self._audit.record(application_id, CENTRAL_BANK_SUCCESS, request_time, utcnow(), 200)
        else:
            logger.warning(
                "Received no/invalid credit score from central bank",
                extra={"customer_id": customer_id, "credit_status": report.status},
            )
            self._metrics.increment("central_bank_calls", outcome="no_data")
            self._audit.record(application_id, CENTRAL_BANK_NO_DATA, request_time, utcnow(), 200)
        return report

    def _fallback(self, customer_id: str, application_id: uuid.UUID, error: Exception) -> CreditReport:
        logger.warning(
            f"Central bank fallback: {error}",
            extra={"customer_id": customer_id, "application_id": str(application_id)},
        )
        self._metrics.increment("central_bank_calls", outcome="fallback")
        now = utcnow()
        self._audit.record(application_id, CENTRAL_BANK_FALLBACK, now, now, 503)
        return CreditReport(
            customer_id=customer_id,
            credit_score=0,
            status=CREDIT_STATUS_FALLBACK,
            details=FALLBACK_DETAILS,
        )

    async def _read_cache(self, key: str) -> CreditReport | None:
        try:
            data = await self._cache.get(key)
            return self._codec.decode(data) if data else None
        except Exception as e:
            logger.error(f"Failed to read credit report cache: {e}", extra={"cache_key": key})
            return None

    async def _write_cache(self, key: str, report: CreditReport) -> None:
        await self._cache.set(key, self._codec.encode(report), self._cache_ttl)
        logger.info("Cached credit report", extra={"customer_id": report.customer_id})
