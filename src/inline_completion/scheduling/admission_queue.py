"""
Rate-limited admission queue for backend calls.

At most one task is in flight at any time; after a task settles the queue
waits a minimum gap (40 ms by default) before admitting the next one. Tasks
are serviced strictly in submission order. Foreground completions and
prefetches share one FIFO lane unless the optional priority lane is enabled,
in which case queued foreground tasks are admitted before queued prefetches.
"""

import asyncio
import functools
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

import structlog

from inline_completion.models.enums import QueueLane
from inline_completion.monitoring.metrics import admission_queue_depth
from inline_completion.scheduling.clock import Clock, resolve_clock

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass
class QueuedTask:
    """A pending backend invocation awaiting its admission slot."""

    task: Callable[[], Awaitable[Any]]
    future: asyncio.Future
    lane: QueueLane = QueueLane.FOREGROUND


class AdmissionQueue:
    """
    Serializes backend calls with a minimum inter-call delay.

    Failures propagate only to the submitting caller; queued siblings are
    unaffected. A caller that gives up while still queued (its await is
    cancelled) is dropped without ever running.

    Attributes:
        min_delay: Gap in seconds between a task settling and the next start
        priority_lane: Whether foreground tasks overtake queued prefetches
    """

    max_concurrent = 1

    def __init__(
        self,
        min_delay: float = 0.04,
        clock: Optional[Clock] = None,
        priority_lane: bool = False,
    ):
        self.min_delay = min_delay
        self.priority_lane = priority_lane
        self._clock = resolve_clock(clock)
        self._foreground: deque[QueuedTask] = deque()
        self._prefetch: deque[QueuedTask] = deque()
        self._executing = 0
        self._running: set[asyncio.Task] = set()

    @property
    def executing(self) -> int:
        return self._executing

    @property
    def pending(self) -> int:
        return len(self._foreground) + len(self._prefetch)

    async def execute(
        self,
        task: Callable[[], Awaitable[T]],
        lane: QueueLane = QueueLane.FOREGROUND,
    ) -> T:
        """
        Submit a task and wait for its result.

        Args:
            task: Zero-argument coroutine factory; called once admitted
            lane: Lane the task belongs to (only matters with priority_lane)

        Returns:
            Whatever the task returns

        Raises:
            Whatever the task raises
        """
        future = asyncio.get_running_loop().create_future()
        queued = QueuedTask(task=task, future=future, lane=lane)
        if self.priority_lane and lane is QueueLane.PREFETCH:
            self._prefetch.append(queued)
        else:
            self._foreground.append(queued)
        admission_queue_depth.set(self.pending)
        self._process_queue()
        return await future

    def _next_task(self) -> Optional[QueuedTask]:
        while self._foreground or self._prefetch:
            queued = (self._foreground or self._prefetch).popleft()
            if queued.future.done():
                # Caller went away while queued
                continue
            return queued
        return None

    def _process_queue(self) -> None:
        while self._executing < self.max_concurrent:
            queued = self._next_task()
            if queued is None:
                break
            self._executing += 1
            runner = asyncio.ensure_future(self._run(queued))
            self._running.add(runner)
            runner.add_done_callback(functools.partial(self._settle, queued))
        admission_queue_depth.set(self.pending)

    async def _run(self, queued: QueuedTask) -> None:
        try:
            result = await queued.task()
        except Exception as exc:
            if not queued.future.done():
                queued.future.set_exception(exc)
        else:
            if not queued.future.done():
                queued.future.set_result(result)

    def _settle(self, queued: QueuedTask, runner: asyncio.Task) -> None:
        # Runs even when the runner was cancelled before its first step
        self._running.discard(runner)
        if not queued.future.done():
            queued.future.cancel()
        self._executing -= 1
        self._clock.call_later(self.min_delay, self._process_queue)

    async def drain(self) -> None:
        """Cancel queued and running tasks (used on shutdown)."""
        for lane in (self._foreground, self._prefetch):
            while lane:
                queued = lane.popleft()
                if not queued.future.done():
                    queued.future.cancel()
        for runner in list(self._running):
            runner.cancel()
        if self._running:
            await asyncio.gather(*self._running, return_exceptions=True)
        admission_queue_depth.set(0)
        logger.debug("Admission queue drained")
