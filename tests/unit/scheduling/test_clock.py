"""Unit tests for the injectable clocks."""

import asyncio

import pytest

from inline_completion.scheduling.clock import ManualClock, SystemClock, resolve_clock


class TestManualClock:
    """Virtual time only moves on advance()."""

    def test_now_starts_at_origin(self):
        assert ManualClock().now() == 0.0
        assert ManualClock(start=10.0).now() == 10.0

    def test_timers_fire_in_deadline_order(self, manual_clock):
        fired = []
        manual_clock.call_later(2.0, fired.append, "late")
        manual_clock.call_later(1.0, fired.append, "early")
        manual_clock.call_later(1.0, fired.append, "early-second")

        manual_clock.advance(5.0)

        assert fired == ["early", "early-second", "late"]
        assert manual_clock.now() == 5.0

    def test_timer_sees_its_deadline(self, manual_clock):
        seen = []
        manual_clock.call_later(1.5, lambda: seen.append(manual_clock.now()))

        manual_clock.advance(3.0)

        assert seen == [1.5]

    def test_not_yet_due(self, manual_clock):
        fired = []
        manual_clock.call_later(1.0, fired.append, "x")

        manual_clock.advance(0.5)

        assert fired == []
        assert manual_clock.pending_timers == 1

    def test_cancelled_timer_never_fires(self, manual_clock):
        fired = []
        handle = manual_clock.call_later(1.0, fired.append, "x")
        handle.cancel()
        handle.cancel()

        manual_clock.advance(2.0)

        assert fired == []
        assert manual_clock.pending_timers == 0

    def test_timer_scheduled_by_callback(self, manual_clock):
        """A callback may schedule another timer within the same advance."""
        fired = []
        manual_clock.call_later(1.0, lambda: manual_clock.call_later(1.0, fired.append, "chained"))

        manual_clock.advance(2.0)

        assert fired == ["chained"]

    @pytest.mark.asyncio
    async def test_sleep_resumes_on_advance(self, manual_clock):
        sleeper = asyncio.create_task(manual_clock.sleep(1.0))
        await asyncio.sleep(0)
        assert not sleeper.done()

        manual_clock.advance(1.0)
        await sleeper

        assert manual_clock.pending_timers == 0


class TestSystemClock:

    @pytest.mark.asyncio
    async def test_call_later_runs_on_loop(self):
        clock = SystemClock()
        done = asyncio.Event()

        clock.call_later(0.001, done.set)

        await asyncio.wait_for(done.wait(), timeout=1.0)

    @pytest.mark.asyncio
    async def test_cancel(self):
        clock = SystemClock()
        fired = []

        handle = clock.call_later(0.001, fired.append, "x")
        handle.cancel()
        await asyncio.sleep(0.01)

        assert fired == []

    def test_monotonic(self):
        clock = SystemClock()
        assert clock.now() <= clock.now()


def test_resolve_clock():
    manual = ManualClock()
    assert resolve_clock(manual) is manual
    assert isinstance(resolve_clock(None), SystemClock)
