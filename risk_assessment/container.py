"""Wiring of the service graph from settings"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import timedelta
import httpx
from sqlalchemy.engine import Engine
from risk_assessment.config import Settings
from risk_assessment.domain.exceptions import CentralBankAPIError
from risk_assessment.infrastructure.background import BackgroundRunner
from risk_assessment.infrastructure.cache.store import RedisCacheStore
from risk_assessment.infrastructure.clients.central_bank import CentralBankClient
from risk_assessment.infrastructure.clients.decisions import DecisionPublisher
from risk_assessment.infrastructure.database.models import Base
from risk_assessment.infrastructure.database.session import create_db_engine, create_session_factory
from risk_assessment.infrastructure.database.store import AssessmentStore
from risk_assessment.infrastructure.observability.metrics import MetricsSink, PrometheusMetricsSink
from risk_assessment.infrastructure.resilience.bulkhead import Bulkhead, BulkheadConfig
from risk_assessment.infrastructure.resilience.circuit_breaker import CircuitBreaker, CircuitBreakerConfig
from risk_assessment.infrastructure.resilience.retry import Retry, RetryConfig
from risk_assessment.services.audit import AuditLogger
from risk_assessment.services.credit_bureau import CreditBureauGateway
from risk_assessment.services.events import ScoringEventHandler
from risk_assessment.services.risk_assessment import RiskAssessmentService


def bulkhead_config(settings: Settings) -> BulkheadConfig:
    return BulkheadConfig(
        max_concurrent_calls=settings.bulkhead_max_concurrent_calls,
        max_wait_seconds=settings.bulkhead_max_wait_seconds,
    )


def circuit_breaker_config(settings: Settings) -> CircuitBreakerConfig:
    return CircuitBreakerConfig(
        sliding_window_size=settings.breaker_sliding_window_size,
        minimum_number_of_calls=settings.breaker_minimum_number_of_calls,
        failure_rate_threshold=settings.breaker_failure_rate_threshold,
        wait_duration_in_open_seconds=settings.breaker_wait_duration_in_open_seconds,
        permitted_calls_in_half_open=settings.breaker_permitted_calls_in_half_open,
    )


def retry_config(settings: Settings) -> RetryConfig:
    return RetryConfig(
        max_attempts=settings.retry_max_attempts,
        initial_backoff_seconds=settings.retry_initial_backoff_seconds,
        backoff_multiplier=settings.retry_backoff_multiplier,
        retry_on=(CentralBankAPIError,),
    )


@dataclass
class ServiceContainer:
    """Long-lived collaborators shared by every request"""

    assessment_service: RiskAssessmentService
    event_handler: ScoringEventHandler
    credit_bureau: CreditBureauGateway
    runner: BackgroundRunner
    executor: ThreadPoolExecutor
    http_client: httpx.AsyncClient | None = None
    cache: RedisCacheStore | None = None
    engine: Engine | None = None

    async def aclose(self, drain_timeout: float = 10.0) -> None:
        await self.runner.drain(timeout=drain_timeout)
        if self.http_client is not None:
            await self.http_client.aclose()
        if self.cache is not None:
            await self.cache.close()
        self.executor.shutdown(wait=True)
        if self.engine is not None:
            self.engine.dispose()


def build_container(settings: Settings, metrics: MetricsSink | None = None) -> ServiceContainer:
    """Create the production service graph, ensuring the schema exists"""
    metrics = metrics or PrometheusMetricsSink()

    engine = create_db_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    executor = ThreadPoolExecutor(max_workers=settings.worker_pool_size, thread_name_prefix="risk-worker")
    store = AssessmentStore(create_session_factory(engine), executor)

    cache = RedisCacheStore.from_url(settings.redis_url)
    http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    runner = BackgroundRunner(metrics)

    credit_bureau = CreditBureauGateway(
        client=CentralBankClient(settings.central_bank_api_base, settings.http_timeout_seconds, http_client),
        cache=cache,
        audit=AuditLogger(store, runner),
        runner=runner,
        bulkhead=Bulkhead("central_bank", bulkhead_config(settings)),
        breaker=CircuitBreaker("central_bank", circuit_breaker_config(settings), metrics=metrics),
        retry=Retry("central_bank", retry_config(settings)),
        metrics=metrics,
        cache_ttl=timedelta(seconds=settings.credit_cache_ttl_seconds),
    )

    service = RiskAssessmentService(
        credit_bureau=credit_bureau,
        store=store,
        cache=cache,
        publisher=DecisionPublisher(settings.decision_webhook_url, http_client, metrics, settings.http_timeout_seconds),
        runner=runner,
        executor=executor,
        metrics=metrics,
        timeout_seconds=settings.assessment_timeout_seconds,
        cache_ttl=timedelta(seconds=settings.assessment_cache_ttl_seconds),
    )

    return ServiceContainer(
        assessment_service=service,
        event_handler=ScoringEventHandler(service, metrics),
        credit_bureau=credit_bureau,
        runner=runner,
        executor=executor,
        http_client=http_client,
        cache=cache,
        engine=engine,
    )
