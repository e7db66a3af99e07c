# services/translation/rate_limiter.py
"""
FIFO queue that throttles calls to the free translation endpoint.

At most ``concurrency`` tasks run at once and consecutive task *starts* are
spaced at least ``min_interval`` seconds apart.  Every caller gets its own
result or exception back; one failing task never affects the others.
"""

import asyncio
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Deque, Set

from loguru import logger
from prometheus_client import Gauge

LIMITER_QUEUE_DEPTH = Gauge("translation_limiter_queue_depth", "Tasks waiting for a provider slot")
LIMITER_ACTIVE = Gauge("translation_limiter_active", "Provider calls currently running")

TaskFactory = Callable[[], Awaitable[Any]]


@dataclass
class QueueItem:
    task: TaskFactory
    future: "asyncio.Future[Any]"


class RateLimiter:
    def __init__(
        self,
        concurrency: int = 2,
        min_interval: float = 0.16,
        clock: Callable[[], float] = time.monotonic,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.concurrency = concurrency
        self.min_interval = max(0.0, min_interval)
        self._clock = clock
        self._queue: Deque[QueueItem] = deque()
        self._active = 0
        self._last_start = float("-inf")
        self._runners: Set["asyncio.Task[None]"] = set()

    @property
    def active(self) -> int:
        return self._active

    @property
    def pending(self) -> int:
        return len(self._queue)

    async def schedule(self, task: TaskFactory) -> Any:
        """Queue ``task`` (a zero-arg coroutine factory) and await its result."""
        future: "asyncio.Future[Any]" = asyncio.get_running_loop().create_future()
        self._queue.append(QueueItem(task=task, future=future))
        LIMITER_QUEUE_DEPTH.set(len(self._queue))
        self._pump()
        return await future

    def _pump(self) -> None:
        while self._active < self.concurrency and self._queue:
            item = self._queue.popleft()
            if item.future.cancelled():
                continue
            self._active += 1
            LIMITER_ACTIVE.set(self._active)
            runner = asyncio.ensure_future(self._run(item))
            self._runners.add(runner)
            runner.add_done_callback(self._runners.discard)
        LIMITER_QUEUE_DEPTH.set(len(self._queue))

    def _reserve_start(self) -> float:
        # Reserve the slot before sleeping so two runners never share one.
        now = self._clock()
        start_at = max(now, self._last_start + self.min_interval)
        self._last_start = start_at
        return start_at - now

    async def _run(self, item: QueueItem) -> None:
        try:
            wait = self._reserve_start()
            if wait > 0:
                await asyncio.sleep(wait)
            result = await item.task()
            if not item.future.done():
                item.future.set_result(result)
        except asyncio.CancelledError:
            if not item.future.done():
                item.future.cancel()
            raise
        except Exception as exc:
            logger.debug(f"Rate-limited task failed: {exc}")
            if not item.future.done():
                item.future.set_exception(exc)
        finally:
            self._active -= 1
            LIMITER_ACTIVE.set(self._active)
            self._pump()
