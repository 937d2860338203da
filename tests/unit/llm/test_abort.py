"""Unit tests for cancellation tokens and the abort guard."""

import asyncio

import pytest

from inline_completion.llm.abort import AbortGuard, CancellationToken
from inline_completion.llm.exceptions import CompletionAbortedError, CompletionTimeoutError
from inline_completion.models.enums import AbortReason


class TestCancellationToken:

    def test_initial_state(self):
        token = CancellationToken()
        assert token.cancelled is False
        assert token.reason is None

    def test_first_cancel_wins(self):
        token = CancellationToken()

        assert token.cancel(AbortReason.SUPERSEDED) is True
        assert token.cancel(AbortReason.TIMEOUT) is False
        assert token.reason is AbortReason.SUPERSEDED

    def test_callbacks_run_once(self):
        token = CancellationToken()
        seen = []
        token.add_callback(seen.append)

        token.cancel(AbortReason.EXTERNAL)
        token.cancel(AbortReason.TIMEOUT)

        assert seen == [AbortReason.EXTERNAL]

    def test_callback_after_cancel_runs_immediately(self):
        token = CancellationToken()
        token.cancel(AbortReason.TIMEOUT)
        seen = []

        token.add_callback(seen.append)

        assert seen == [AbortReason.TIMEOUT]

    def test_remove_callback(self):
        token = CancellationToken()
        seen = []
        remove = token.add_callback(seen.append)
        remove()
        remove()

        token.cancel()

        assert seen == []

    def test_link_propagates_reason(self):
        parent = CancellationToken()
        child = CancellationToken()
        child.link(parent)

        parent.cancel(AbortReason.SUPERSEDED)

        assert child.reason is AbortReason.SUPERSEDED

    def test_link_overrides_reason(self):
        parent = CancellationToken()
        child = CancellationToken()
        child.link(parent, AbortReason.EXTERNAL)

        parent.cancel(AbortReason.TIMEOUT)

        assert child.reason is AbortReason.EXTERNAL

    def test_unlink(self):
        parent = CancellationToken()
        child = CancellationToken()
        unlink = child.link(parent)
        unlink()

        parent.cancel()

        assert child.cancelled is False


class TestAbortGuard:

    @pytest.mark.asyncio
    async def test_returns_result(self, manual_clock):
        async def answer():
            return "done"

        with AbortGuard(1000, clock=manual_clock) as guard:
            assert await guard.run(answer) == "done"
        assert manual_clock.pending_timers == 0

    @pytest.mark.asyncio
    async def test_timeout(self, manual_clock):
        with AbortGuard(500, clock=manual_clock) as guard:
            task = asyncio.create_task(guard.run(lambda: manual_clock.sleep(10)))
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            manual_clock.advance(0.5)

            with pytest.raises(CompletionTimeoutError) as exc_info:
                await task

        assert guard.reason is AbortReason.TIMEOUT
        assert exc_info.value.details == {"timeout_ms": 500}

    @pytest.mark.asyncio
    async def test_external_signal(self, manual_clock):
        signal = CancellationToken()
        with AbortGuard(10000, external_signal=signal, clock=manual_clock) as guard:
            task = asyncio.create_task(guard.run(lambda: manual_clock.sleep(10)))
            await asyncio.sleep(0)
            signal.cancel(AbortReason.SUPERSEDED)

            with pytest.raises(CompletionAbortedError) as exc_info:
                await task

        assert exc_info.value.reason is AbortReason.SUPERSEDED

    @pytest.mark.asyncio
    async def test_first_trigger_wins(self, manual_clock):
        signal = CancellationToken()
        with AbortGuard(100, external_signal=signal, clock=manual_clock) as guard:
            task = asyncio.create_task(guard.run(lambda: manual_clock.sleep(10)))
            await asyncio.sleep(0)
            manual_clock.advance(0.1)
            signal.cancel(AbortReason.EXTERNAL)

            with pytest.raises(CompletionTimeoutError):
                await task

        assert guard.reason is AbortReason.TIMEOUT

    @pytest.mark.asyncio
    async def test_already_cancelled_signal_never_starts(self, manual_clock):
        signal = CancellationToken()
        signal.cancel(AbortReason.EXTERNAL)
        started = []

        async def work():
            started.append(True)
            return "x"

        with AbortGuard(1000, external_signal=signal, clock=manual_clock) as guard:
            with pytest.raises(CompletionAbortedError):
                await guard.run(work)

        assert started == []

    @pytest.mark.asyncio
    async def test_errors_propagate_unchanged(self, manual_clock):
        async def fail():
            raise ValueError("bad")

        with AbortGuard(1000, clock=manual_clock) as guard:
            with pytest.raises(ValueError):
                await guard.run(fail)

    def test_exit_releases_timer_and_signal(self, manual_clock):
        signal = CancellationToken()

        with AbortGuard(1000, external_signal=signal, clock=manual_clock):
            assert manual_clock.pending_timers == 1

        assert manual_clock.pending_timers == 0
        assert signal._callbacks == []
