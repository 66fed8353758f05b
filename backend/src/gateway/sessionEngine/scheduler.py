"""Clock and interval scheduling primitives used by the session store.

Both are injected so tests can advance time and fire sweeps by hand instead
of waiting on real timers.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScheduledJob(Protocol):
    def cancel(self) -> None:  # pragma: no cover - interface
        ...

    async def wait(self) -> None:  # pragma: no cover - interface
        ...


class Scheduler(Protocol):
    def call_every(
        self, interval: float, callback: Callable[[], object]
    ) -> ScheduledJob:  # pragma: no cover - interface
        ...


class AsyncioJob:
    def __init__(self, task: asyncio.Task):
        self._task = task

    def cancel(self) -> None:
        if not self._task.done():
            self._task.cancel()

    async def wait(self) -> None:
        """Block until the task has finished unwinding after :meth:`cancel`."""
        await asyncio.wait([self._task])

    @property
    def cancelled(self) -> bool:
        return self._task.cancelled() or self._task.done()


class AsyncioScheduler:
    """Runs a callback every ``interval`` seconds on the running event loop."""

    def call_every(self, interval: float, callback: Callable[[], object]) -> AsyncioJob:
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run(interval, callback))
        return AsyncioJob(task)

    async def _run(self, interval: float, callback: Callable[[], object]) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                callback()
            except Exception:
                logger.exception("Scheduled callback failed")
