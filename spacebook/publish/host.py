"""
Minimal background-task host.

Plays the role a mobile OS plays for background fetch: tasks are registered
under a name with a minimum interval and invoked repeatedly on the event
loop. Each invocation reports a ``FetchResult``; the host backs off (doubling
up to ``max_interval``) while a task keeps reporting NO_DATA and returns to
the minimum interval as soon as it reports NEW_DATA.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from spacebook.publish.background import FetchResult

logger = logging.getLogger(__name__)

BackgroundTask = Callable[[], Awaitable[FetchResult]]


def next_delay(
    current: float, result: FetchResult, minimum: float, maximum: float
) -> float:
    if result is FetchResult.NEW_DATA:
        return minimum
    if result is FetchResult.NO_DATA:
        return min(current * 2, maximum)
    return current


class BackgroundTaskHost:
    def __init__(
        self,
        max_interval: Optional[float] = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        from config.settings import settings

        self.max_interval = (
            max_interval if max_interval is not None else settings.publish_max_interval_seconds
        )
        self._sleep = sleep
        self._tasks: dict[str, asyncio.Task] = {}

    def is_registered(self, name: str) -> bool:
        task = self._tasks.get(name)
        return task is not None and not task.done()

    def register(
        self, name: str, task: BackgroundTask, minimum_interval: float
    ) -> asyncio.Task:
        """Start invoking ``task`` every ``minimum_interval`` seconds or slower."""
        if self.is_registered(name):
            raise ValueError(f"Background task already registered: {name!r}")
        runner = asyncio.create_task(
            self._run(name, task, minimum_interval), name=f"background:{name}"
        )
        self._tasks[name] = runner
        logger.info("Registered background task %s (every %.0fs+)", name, minimum_interval)
        return runner

    async def unregister(self, name: str) -> bool:
        """Stop a registered task. Returns True if it was running."""
        runner = self._tasks.pop(name, None)
        if runner is None or runner.done():
            return False
        runner.cancel()
        try:
            await runner
        except asyncio.CancelledError:
            pass
        logger.info("Unregistered background task %s", name)
        return True

    async def _run(self, name: str, task: BackgroundTask, minimum: float) -> None:
        delay = minimum
        while True:
            try:
                result = await task()
            except Exception:
                logger.exception("Background task %s crashed", name)
                result = FetchResult.FAILED
            delay = next_delay(delay, result, minimum, max(minimum, self.max_interval))
            logger.debug("Background task %s → %s, next run in %.0fs", name, result.value, delay)
            await self._sleep(delay)
