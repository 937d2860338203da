"""
Injectable clock and timer scheduler.

Everything in the engine that depends on time (cache TTL, session idle expiry,
the admission gap, response timeouts) goes through a Clock, so tests can move
virtual time forward with ManualClock.advance() instead of sleeping.
"""

import asyncio
import heapq
import itertools
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional


class TimerHandle(ABC):
    """Handle to a scheduled callback."""
    
    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. Idempotent."""


class Clock(ABC):
    """Monotonic time source plus one-shot timers."""
    
    @abstractmethod
    def now(self) -> float:
        """Current time in seconds (monotonic, arbitrary epoch)."""
    
    @abstractmethod
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        """Run callback(*args) after `delay` seconds."""
    
    async def sleep(self, delay: float) -> None:
        """Suspend the current task for `delay` seconds of this clock's time."""
        future = asyncio.get_running_loop().create_future()
        handle = self.call_later(delay, _resolve, future)
        try:
            await future
        finally:
            handle.cancel()


def _resolve(future: asyncio.Future) -> None:
    if not future.done():
        future.set_result(None)


class _LoopTimerHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle
    
    def cancel(self) -> None:
        self._handle.cancel()


class SystemClock(Clock):
    """Wall-clock implementation backed by the running asyncio loop."""
    
    def now(self) -> float:
        return time.monotonic()
    
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        loop = asyncio.get_running_loop()
        return _LoopTimerHandle(loop.call_later(max(0.0, delay), callback, *args))
    
    async def sleep(self, delay: float) -> None:
        await asyncio.sleep(delay)


class ManualTimer(TimerHandle):
    def __init__(self, deadline: float, callback: Callable[..., Any], args: tuple):
        self.deadline = deadline
        self.callback = callback
        self.args = args
        self.cancelled = False
    
    def cancel(self) -> None:
        self.cancelled = True


class ManualClock(Clock):
    """
    Virtual clock for tests.
    
    Time only moves when advance() is called; due timers fire in deadline
    order (ties in scheduling order) with now() set to their deadline.
    """
    
    def __init__(self, start: float = 0.0):
        self._now = start
        self._timers: list[tuple[float, int, ManualTimer]] = []
        self._seq = itertools.count()
    
    def now(self) -> float:
        return self._now
    
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        timer = ManualTimer(self._now + max(0.0, delay), callback, args)
        heapq.heappush(self._timers, (timer.deadline, next(self._seq), timer))
        return timer
    
    def advance(self, seconds: float) -> None:
        """Move time forward, firing every timer that comes due."""
        target = self._now + seconds
        while self._timers and self._timers[0][0] <= target:
            deadline, _, timer = heapq.heappop(self._timers)
            if timer.cancelled:
                continue
            self._now = deadline
            timer.callback(*timer.args)
        self._now = target
    
    @property
    def pending_timers(self) -> int:
        return sum(1 for _, _, timer in self._timers if not timer.cancelled)


def resolve_clock(clock: Optional[Clock]) -> Clock:
    return clock if clock is not None else SystemClock()
