"""Detached fire-and-forget work with failure accounting"""

import asyncio
import logging
from typing import Any, Coroutine, Set
from risk_assessment.infrastructure.observability.metrics import MetricsSink, NullMetricsSink

logger = logging.getLogger(__name__)


class BackgroundRunner:
    """
    Spawns best-effort tasks the caller does not await.

    Failures are logged and counted under background_tasks{task, status}
    and never propagate back into the request path. Tasks are held by strong
    reference until they finish so the event loop cannot drop them.
    """

    def __init__(self, metrics: MetricsSink | None = None):
        self._metrics = metrics or NullMetricsSink()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        task = asyncio.create_task(self._run(coro, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, coro: Coroutine[Any, Any, Any], name: str) -> None:
        try:
            await coro
        except asyncio.CancelledError:
            self._metrics.increment("background_tasks", task=name, status="cancelled")
            raise
        except Exception as e:
            logger.error(f"Background task '{name}' failed: {e}", extra={"task": name})
            self._metrics.increment("background_tasks", task=name, status="error")
        else:
            self._metrics.increment("background_tasks", task=name, status="success")

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for every in-flight task (used at shutdown and in tests)."""
        while self._tasks:
            pending = list(self._tasks)
            _, not_done = await asyncio.wait(pending, timeout=timeout)
            if not_done:
                logger.warning(f"{len(not_done)} background tasks still running after {timeout}s, cancelling")
                for task in not_done:
                    task.cancel()
                await asyncio.gather(*not_done, return_exceptions=True)
                return
