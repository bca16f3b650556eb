"""
Circuit Breaker Pattern Implementation

Stops calling a failing dependency for a cool-down period once the failure
ratio over its most recent calls crosses a threshold.
"""

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, Dict, TypeVar
from risk_assessment.infrastructure.observability.metrics import MetricsSink, NullMetricsSink
from risk_assessment.infrastructure.resilience.errors import CircuitOpenError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation, requests pass through
    OPEN = "open"  # Failure ratio exceeded, requests short-circuited
    HALF_OPEN = "half_open"  # Trial calls probing recovery


@dataclass
class CircuitBreakerConfig:
    """
    Configuration for circuit breaker.

    Attributes:
        sliding_window_size: Number of most recent call outcomes considered.
        minimum_number_of_calls: Outcomes required before the ratio is evaluated.
        failure_rate_threshold: Failure ratio (0-1) that opens the circuit.
        wait_duration_in_open_seconds: Time spent OPEN before probing recovery.
        permitted_calls_in_half_open: Trial calls admitted while HALF_OPEN.
    """

    sliding_window_size: int = 10
    minimum_number_of_calls: int = 5
    failure_rate_threshold: float = 0.5
    wait_duration_in_open_seconds: float = 30.0
    permitted_calls_in_half_open: int = 3


class CircuitBreaker:
    """
    Count-based circuit breaker.

    States:
    - CLOSED: Calls pass through; outcomes recorded in a sliding window
    - OPEN: Calls fail fast with CircuitOpenError, the protected function is never invoked
    - HALF_OPEN: A limited number of trial calls; any failure reopens, all succeeding closes

    Example:
        ```python
        breaker = CircuitBreaker("central_bank")
        report = await breaker.call(client.fetch_credit_report, customer_id)
        ```
    """

    def __init__(
        self,
        name: str,
        config: CircuitBreakerConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        metrics: MetricsSink | None = None,
    ):
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._clock = clock
        self._metrics = metrics or NullMetricsSink()
        self._state = CircuitState.CLOSED
        self._outcomes: Deque[bool] = deque(maxlen=self.config.sliding_window_size)
        self._opened_at: float | None = None
        self._half_open_admitted = 0
        self._half_open_successes = 0
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_rate(self) -> float:
        """Failure ratio over the current window (0.0 when empty)."""
        if not self._outcomes:
            return 0.0
        failures = sum(1 for ok in self._outcomes if not ok)
        return failures / len(self._outcomes)

    def _transition_to(self, new_state: CircuitState) -> None:
        if self._state == new_state:
            return

        old_state = self._state
        self._state = new_state
        self._half_open_admitted = 0
        self._half_open_successes = 0

        if new_state == CircuitState.OPEN:
            self._opened_at = self._clock()
        elif new_state == CircuitState.CLOSED:
            self._opened_at = None
            self._outcomes.clear()

        logger.warning(
            f"Circuit breaker '{self.name}' state change: {old_state.value} -> {new_state.value}",
            extra={
                "circuit_breaker": self.name,
                "old_state": old_state.value,
                "new_state": new_state.value,
            },
        )
        self._metrics.increment("circuit_breaker_transitions", breaker=self.name, state=new_state.value)

    def _threshold_reached(self) -> bool:
        minimum = min(self.config.minimum_number_of_calls, self.config.sliding_window_size)
        if len(self._outcomes) < minimum:
            return False
        return self.failure_rate >= self.config.failure_rate_threshold

    async def _before_call(self) -> None:
        """Admit or reject a call, moving OPEN -> HALF_OPEN once the wait has elapsed."""
        async with self._lock:
            if self._state == CircuitState.OPEN:
                elapsed = self._clock() - (self._opened_at or 0.0)
                wait = self.config.wait_duration_in_open_seconds
                if elapsed < wait:
                    raise CircuitOpenError(
                        f"Circuit breaker '{self.name}' is open. Retry after {wait - elapsed:.1f}s",
                        retry_after=wait - elapsed,
                    )
                self._transition_to(CircuitState.HALF_OPEN)

            if self._state == CircuitState.HALF_OPEN:
                if self._half_open_admitted >= self.config.permitted_calls_in_half_open:
                    raise CircuitOpenError(f"Circuit breaker '{self.name}' is half-open and saturated with trial calls")
                self._half_open_admitted += 1

    async def _on_success(self) -> None:
        async with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._half_open_successes += 1
                if self._half_open_successes >= self.config.permitted_calls_in_half_open:
                    self._transition_to(CircuitState.CLOSED)
            elif self._state == CircuitState.CLOSED:
                self._outcomes.append(True)

    async def _on_failure(self) -> None:
        async with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._transition_to(CircuitState.OPEN)
            elif self._state == CircuitState.CLOSED:
                self._outcomes.append(False)
                if self._threshold_reached():
                    self._transition_to(CircuitState.OPEN)

    async def _on_cancel(self) -> None:
        async with self._lock:
            if self._state == CircuitState.HALF_OPEN and self._half_open_admitted > 0:
                self._half_open_admitted -= 1

    async def call(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """
        Execute an async function through the circuit breaker.

        Raises:
            CircuitOpenError: If the circuit rejects the call
            Exception: Original exception from func (recorded as a failure)
        """
        await self._before_call()

        try:
            result = await func(*args, **kwargs)
        except asyncio.CancelledError:
            await self._on_cancel()
            raise
        except Exception:
            await self._on_failure()
            raise

        await self._on_success()
        return result

    def reset(self) -> None:
        """Reset circuit breaker to initial state."""
        self._state = CircuitState.CLOSED
        self._opened_at = None
        self._outcomes.clear()
        self._half_open_admitted = 0
        self._half_open_successes = 0
        logger.info(f"Circuit breaker '{self.name}' reset")

    def get_status(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "state": self._state.value,
            "failure_rate": self.failure_rate,
            "window_calls": len(self._outcomes),
        }
