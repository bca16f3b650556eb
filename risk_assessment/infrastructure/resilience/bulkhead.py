"""Bulkhead - bounds concurrent in-flight calls to one dependency"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any
from risk_assessment.infrastructure.resilience.errors import BulkheadFullError

logger = logging.getLogger(__name__)


@dataclass
class BulkheadConfig:
    """
    Attributes:
        max_concurrent_calls: Slots available to callers at once.
        max_wait_seconds: How long a caller may queue for a slot (0 = reject immediately).
    """

    max_concurrent_calls: int = 25
    max_wait_seconds: float = 0.5


class Bulkhead:
    """
    Semaphore-backed concurrency limiter.

    Example:
        ```python
        async with bulkhead:
            await client.fetch_credit_report(customer_id)
        ```
    """

    def __init__(self, name: str, config: BulkheadConfig | None = None):
        self.name = name
        self.config = config or BulkheadConfig()
        self._semaphore = asyncio.Semaphore(self.config.max_concurrent_calls)
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def available(self) -> int:
        return self.config.max_concurrent_calls - self._in_flight

    async def acquire(self) -> None:
        # locked() is True when no slot is free right now
        if self.config.max_wait_seconds <= 0 and self._semaphore.locked():
            raise BulkheadFullError(f"Bulkhead '{self.name}' is full ({self.config.max_concurrent_calls} in flight)")

        # Acquire in this task so a timeout racing a release cannot strand a permit
        try:
            async with asyncio.timeout(self.config.max_wait_seconds or None):
                await self._semaphore.acquire()
        except TimeoutError as e:
            logger.warning(
                f"Bulkhead '{self.name}' rejected call after waiting {self.config.max_wait_seconds}s",
                extra={"bulkhead": self.name},
            )
            raise BulkheadFullError(
                f"Bulkhead '{self.name}' is full ({self.config.max_concurrent_calls} in flight)"
            ) from e

        self._in_flight += 1

    def release(self) -> None:
        self._in_flight -= 1
        self._semaphore.release()

    async def __aenter__(self) -> "Bulkhead":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> bool:
        self.release()
        return False
