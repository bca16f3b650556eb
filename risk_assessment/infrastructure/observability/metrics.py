"""Prometheus metrics for monitoring decisions, cache efficiency, and external call health"""

from typing import Dict, Protocol
from prometheus_client import Counter, Histogram

# Cache metrics
credit_cache_requests_counter = Counter(
    "risk_credit_cache_requests_total",
    "Central bank credit report cache lookups",
    ["status"],  # hit | miss
)

assessment_cache_requests_counter = Counter(
    "risk_assessment_cache_requests_total",
    "Risk assessment cache lookups",
    ["status"],  # hit | miss
)

# Central bank API metrics
central_bank_calls_counter = Counter(
    "risk_central_bank_calls_total",
    "Central bank API call outcomes",
    ["outcome"],  # success | no_data | error | fallback
)

central_bank_latency_histogram = Histogram(
    "risk_central_bank_latency_seconds",
    "Central bank API response time per attempt",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

circuit_breaker_transitions_counter = Counter(
    "risk_circuit_breaker_transitions_total",
    "Circuit breaker state transitions",
    ["breaker", "state"],
)

# Decision metrics
assessments_counter = Counter(
    "risk_assessments_total",
    "Risk assessments completed",
    ["decision"],  # APPROVED | REJECTED | ERROR
)

assessment_duration_histogram = Histogram(
    "risk_assessment_duration_seconds",
    "End-to-end risk assessment pipeline time",
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 45.0],
)

# Messaging metrics
decision_events_counter = Counter(
    "risk_decision_events_total",
    "Decision events published",
    ["status"],  # success | error
)

scoring_events_counter = Counter(
    "risk_scoring_events_total",
    "Scoring-complete events consumed",
    ["status"],  # success | error
)

# Fire-and-forget work
background_tasks_counter = Counter(
    "risk_background_tasks_total",
    "Detached background task outcomes",
    ["task", "status"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)

COUNTERS: Dict[str, Counter] = {
    "credit_cache_requests": credit_cache_requests_counter,
    "assessment_cache_requests": assessment_cache_requests_counter,
    "central_bank_calls": central_bank_calls_counter,
    "circuit_breaker_transitions": circuit_breaker_transitions_counter,
    "assessments": assessments_counter,
    "decision_events": decision_events_counter,
    "scoring_events": scoring_events_counter,
    "background_tasks": background_tasks_counter,
}

HISTOGRAMS: Dict[str, Histogram] = {
    "central_bank_latency_seconds": central_bank_latency_histogram,
    "assessment_duration_seconds": assessment_duration_histogram,
}


class MetricsSink(Protocol):
    """Destination for counters and timings emitted by the pipeline"""

    def increment(self, name: str, /, **labels: str) -> None: ...

    def observe(self, name: str, value: float) -> None: ...


class PrometheusMetricsSink:
    """Sink backed by the module-level Prometheus collectors"""

    def increment(self, name: str, /, **labels: str) -> None:
        counter = COUNTERS[name]
        if labels:
            counter.labels(**labels).inc()
        else:
            counter.inc()

    def observe(self, name: str, value: float) -> None:
        HISTOGRAMS[name].observe(value)


class NullMetricsSink:
    """Discards everything"""

    def increment(self, name: str, /, **labels: str) -> None:
        pass

    def observe(self, name: str, value: float) -> None:
        pass
