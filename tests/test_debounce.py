"""
Tests for the input debouncer.
"""

import asyncio
import gc

import pytest

from app.core.debounce import Debouncer


class Recorder:
    def __init__(self):
        self.calls = []

    async def __call__(self, value):
        self.calls.append(value)
        return value


class TestDebouncer:
    """Test Debouncer trigger and cancel behavior."""

    def test_rapid_input_runs_once_with_latest_value(self):
        """Typing "i", "in", "inc" within the window searches once, for "inc"."""
        recorder = Recorder()

        async def scenario():
            debouncer = Debouncer(0.05, recorder)
            for value in ("i", "in", "inc"):
                debouncer.trigger(value)
                await asyncio.sleep(0.01)
            return await debouncer.flush()

        assert asyncio.run(scenario()) == "inc"
        assert recorder.calls == ["inc"]

    def test_quiet_period_between_inputs_runs_each(self):
        recorder = Recorder()

        async def scenario():
            debouncer = Debouncer(0.01, recorder)
            debouncer.trigger("first")
            await debouncer.flush()
            debouncer.trigger("second")
            await debouncer.flush()

        asyncio.run(scenario())
        assert recorder.calls == ["first", "second"]

    def test_cancel_drops_pending_call(self):
        recorder = Recorder()

        async def scenario():
            debouncer = Debouncer(0.02, recorder)
            debouncer.trigger("pending")
            assert debouncer.pending is True
            debouncer.cancel()
            await asyncio.sleep(0.05)
            return debouncer

        debouncer = asyncio.run(scenario())
        assert recorder.calls == []
        assert debouncer.pending is False

    def test_flush_without_pending_call(self):
        async def scenario():
            return await Debouncer(0.01, Recorder()).flush()

        assert asyncio.run(scenario()) is None

    def test_failure_without_flush_is_retrieved(self):
        """A failing callback nobody awaits does not reach the loop's exception handler."""
        reported = []

        async def failing(value):
            raise RuntimeError("socket closed")

        async def scenario():
            asyncio.get_running_loop().set_exception_handler(lambda loop, context: reported.append(context))
            debouncer = Debouncer(0, failing)
            debouncer.trigger("x")
            await asyncio.sleep(0.01)
            debouncer.cancel()
            gc.collect()

        asyncio.run(scenario())
        assert reported == []

    def test_flush_still_raises_callback_error(self):
        async def failing(value):
            raise RuntimeError("boom")

        async def scenario():
            debouncer = Debouncer(0, failing)
            debouncer.trigger("x")
            await debouncer.flush()

        with pytest.raises(RuntimeError):
            asyncio.run(scenario())
