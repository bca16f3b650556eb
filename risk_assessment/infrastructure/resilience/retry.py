"""Retry policy with exponential backoff"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """
    Retry configuration.

    Attributes:
        max_attempts: Total attempts including the first one.
        initial_backoff_seconds: Wait before the second attempt.
        backoff_multiplier: Growth factor applied to each subsequent wait.
        retry_on: Exception types that trigger another attempt.
    """

    max_attempts: int = 3
    initial_backoff_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    retry_on: Tuple[Type[BaseException], ...] = (Exception,)

    def backoff_for(self, attempt: int) -> float:
        """Wait after the given failed attempt (1-based): 0.5s, 1s, 2s, ..."""
        return self.initial_backoff_seconds * (self.backoff_multiplier ** (attempt - 1))


class Retry:
    """
    Re-invokes a failing async call until it succeeds or attempts run out.

    The last exception is re-raised once attempts are exhausted, so an outer
    circuit breaker sees a single failure per exhausted sequence.
    """

    def __init__(
        self,
        name: str,
        config: RetryConfig | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.name = name
        self.config = config or RetryConfig()
        self._sleep = sleep

    async def call(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        attempt = 0
        while True:
            attempt += 1
            try:
                return await func(*args, **kwargs)
            except self.config.retry_on as e:
                if attempt >= self.config.max_attempts:
                    logger.warning(
                        f"Retry '{self.name}' exhausted after {attempt} attempts: {e}",
                        extra={"retry": self.name, "attempt": attempt},
                    )
                    raise

                backoff = self.config.backoff_for(attempt)
                logger.info(
                    f"Retry '{self.name}' attempt {attempt} failed, retrying in {backoff:.2f}s: {e}",
                    extra={"retry": self.name, "attempt": attempt},
                )
                await self._sleep(backoff)
