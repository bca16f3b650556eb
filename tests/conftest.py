"""Pytest fixtures for testing"""

import uuid
import pytest
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from decimal import Decimal
from typing import Dict, Generator, List, Tuple
from sqlalchemy.orm import sessionmaker
from risk_assessment.domain.exceptions import CentralBankAPIError
from risk_assessment.domain.models import ApplicationInput, CreditReport
from risk_assessment.infrastructure.background import BackgroundRunner
from risk_assessment.infrastructure.database.models import Base
from risk_assessment.infrastructure.database.session import create_db_engine, create_session_factory
from risk_assessment.infrastructure.database.store import AssessmentStore
from risk_assessment.infrastructure.resilience.bulkhead import Bulkhead, BulkheadConfig
from risk_assessment.infrastructure.resilience.circuit_breaker import CircuitBreaker, CircuitBreakerConfig
from risk_assessment.infrastructure.resilience.retry import Retry, RetryConfig
from risk_assessment.services.audit import AuditLogger
from risk_assessment.services.credit_bureau import CreditBureauGateway


class InMemoryCacheStore:
    """CacheStore fake that records TTLs and can be told to fail"""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.ttls: Dict[str, timedelta] = {}
        self.fail_reads = False
        self.fail_writes = False

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise ConnectionError("cache unavailable")
        return self.data.get(key)

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        if self.fail_writes:
            raise ConnectionError("cache unavailable")
        self.data[key] = value
        self.ttls[key] = ttl


class RecordingMetricsSink:
    """MetricsSink that remembers every increment and observation"""

    def __init__(self):
        self.counts: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], int] = defaultdict(int)
        self.observations: Dict[str, List[float]] = defaultdict(list)

    def increment(self, name: str, /, **labels: str) -> None:
        self.counts[(name, tuple(sorted(labels.items())))] += 1

    def observe(self, name: str, value: float) -> None:
        self.observations[name].append(value)

    def count(self, name: str, /, **labels: str) -> int:
        return self.counts[(name, tuple(sorted(labels.items())))]


class FakeCentralBankClient:
    """Scripted central bank: each call pops the next outcome (report or exception)"""

    def __init__(self, outcomes: list | None = None, default: CreditReport | Exception | None = None):
        self.outcomes = list(outcomes or [])
        self.default = default
        self.calls = 0

    async def fetch_credit_report(self, customer_id: str) -> CreditReport:
        self.calls += 1
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if outcome is None:
            outcome = CreditReport(customer_id=customer_id, credit_score=750, status="ACTIVE", details="Good")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


async def no_sleep(seconds: float) -> None:
    return None


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def api_error(status_code: int = 500) -> CentralBankAPIError:
    return CentralBankAPIError(f"Central bank API error: {status_code}", status_code=status_code)


@pytest.fixture
def session_factory() -> Generator[sessionmaker, None, None]:
    """In-memory SQLite database shared across worker threads"""
    engine = create_db_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    try:
        yield create_session_factory(engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def executor() -> Generator[ThreadPoolExecutor, None, None]:
    # Single worker keeps the shared SQLite connection single-threaded
    pool = ThreadPoolExecutor(max_workers=1)
    try:
        yield pool
    finally:
        pool.shutdown(wait=True)


@pytest.fixture
def store(session_factory: sessionmaker, executor: ThreadPoolExecutor) -> AssessmentStore:
    return AssessmentStore(session_factory, executor)


@pytest.fixture
def metrics() -> RecordingMetricsSink:
    return RecordingMetricsSink()


@pytest.fixture
def cache() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def runner(metrics: RecordingMetricsSink) -> BackgroundRunner:
    return BackgroundRunner(metrics)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def bank() -> FakeCentralBankClient:
    return FakeCentralBankClient()


@pytest.fixture
def breaker(clock: FakeClock, metrics: RecordingMetricsSink) -> CircuitBreaker:
    config = CircuitBreakerConfig(
        sliding_window_size=10,
        minimum_number_of_calls=5,
        failure_rate_threshold=0.5,
        wait_duration_in_open_seconds=30.0,
        permitted_calls_in_half_open=2,
    )
    return CircuitBreaker("central_bank", config, clock=clock, metrics=metrics)


@pytest.fixture
def gateway(
    bank: FakeCentralBankClient,
    cache: InMemoryCacheStore,
    store: AssessmentStore,
    runner: BackgroundRunner,
    breaker: CircuitBreaker,
    metrics: RecordingMetricsSink,
) -> CreditBureauGateway:
    return CreditBureauGateway(
        client=bank,
        cache=cache,
        audit=AuditLogger(store, runner),
        runner=runner,
        bulkhead=Bulkhead("central_bank", BulkheadConfig(max_concurrent_calls=5, max_wait_seconds=0.1)),
        breaker=breaker,
        retry=Retry("central_bank", RetryConfig(max_attempts=3, retry_on=(CentralBankAPIError,)), sleep=no_sleep),
        metrics=metrics,
    )


@pytest.fixture
def application() -> ApplicationInput:
    """Reference application: income 5000, loan 10000, neutral weight"""
    return ApplicationInput(
        application_id=uuid.uuid4(),
        customer_id="cust123",
        loan_amount=Decimal("10000"),
        income=Decimal("5000"),
        loan_purpose="Home renovation",
        initial_score_weight=1.0,
    )
