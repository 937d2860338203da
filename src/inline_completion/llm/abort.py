"""
Cancellation tokens and the per-call abort guard.

A backend call can be aborted by three triggers: its response timeout, an
external signal supplied by the caller, or supersession by a newer request.
Whichever fires first determines the classification; later triggers are
no-ops.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from inline_completion.llm.exceptions import (
    CompletionAbortedError,
    CompletionError,
    CompletionTimeoutError,
)
from inline_completion.models.enums import AbortReason
from inline_completion.scheduling.clock import Clock, TimerHandle, resolve_clock

logger = structlog.get_logger(__name__)

T = TypeVar("T")

AbortCallback = Callable[[AbortReason], None]


class CancellationToken:
    """
    One-shot cancellation signal carrying the reason it fired.

    cancel() is idempotent: the first call records the reason and notifies
    listeners, every later call returns False and changes nothing.
    """

    def __init__(self):
        self._reason: Optional[AbortReason] = None
        self._callbacks: list[AbortCallback] = []

    @property
    def cancelled(self) -> bool:
        return self._reason is not None

    @property
    def reason(self) -> Optional[AbortReason]:
        return self._reason

    def cancel(self, reason: AbortReason = AbortReason.EXTERNAL) -> bool:
        if self._reason is not None:
            return False
        self._reason = reason
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(reason)
        return True

    def add_callback(self, callback: AbortCallback) -> Callable[[], None]:
        """
        Register a listener; returns a function that unregisters it.

        If the token already fired the callback runs immediately.
        """
        if self._reason is not None:
            callback(self._reason)
            return lambda: None
        self._callbacks.append(callback)

        def remove() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return remove

    def link(self, other: "CancellationToken", reason: Optional[AbortReason] = None) -> Callable[[], None]:
        """Cancel this token when `other` fires, optionally overriding the reason."""
        return other.add_callback(lambda fired: self.cancel(reason or fired))


class AbortGuard:
    """
    Binds one backend call to a timeout and an optional external signal.

    Usage:
        with AbortGuard(timeout_ms=10000, external_signal=token) as guard:
            raw = await guard.run(lambda: session.prompt(text))

    If an abort fires while the call is running, the call's task is cancelled
    and run() raises CompletionTimeoutError (timeout) or
    CompletionAbortedError (external / superseded). Timers and signal links
    are released on every exit path.
    """

    def __init__(
        self,
        timeout_ms: int = 10000,
        external_signal: Optional[CancellationToken] = None,
        clock: Optional[Clock] = None,
    ):
        self.timeout_ms = timeout_ms
        self.token = CancellationToken()
        self._clock = resolve_clock(clock)
        self._timer: Optional[TimerHandle] = None
        self._unlink: Optional[Callable[[], None]] = None
        self._task: Optional[asyncio.Future] = None
        self._external_signal = external_signal

    def __enter__(self) -> "AbortGuard":
        self._timer = self._clock.call_later(self.timeout_ms / 1000, self.abort, AbortReason.TIMEOUT)
        if self._external_signal is not None:
            self._unlink = self._external_signal.add_callback(self.abort)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def aborted(self) -> bool:
        return self.token.cancelled

    @property
    def reason(self) -> Optional[AbortReason]:
        return self.token.reason

    def abort(self, reason: AbortReason = AbortReason.EXTERNAL) -> None:
        if not self.token.cancel(reason):
            return
        logger.debug("Backend call aborted", reason=reason.value)
        if self._task is not None and not self._task.done():
            self._task.cancel()

    def error(self) -> CompletionError:
        """Typed error for the abort that fired."""
        if self.reason is AbortReason.TIMEOUT:
            return CompletionTimeoutError(details={"timeout_ms": self.timeout_ms})
        return CompletionAbortedError(self.reason or AbortReason.EXTERNAL)

    async def run(self, factory: Callable[[], Awaitable[T]]) -> T:
        if self.aborted:
            raise self.error()
        self._task = asyncio.ensure_future(factory())
        try:
            return await self._task
        except asyncio.CancelledError:
            if self.aborted:
                raise self.error() from None
            raise
        finally:
            self._task = None

    def close(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._unlink is not None:
            self._unlink()
            self._unlink = None
