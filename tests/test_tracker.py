"""Unit tests for playback position tracking.

WHY: The tracker is the only thing between a chatty media source and the
active-cue lookup. Repeated samples must not cause repeated work; a stop
must really stop (including from inside a callback); a missing source must
not blow up the host.

HOW: Tests are organized by concern:
  - TestSourceKind: classification by shape
  - TestPushSource: subscribe/unsubscribe and de-duplication
  - TestPullSource: polling through a fake scheduler
  - TestStopInsideCallback: dispatch ends immediately on stop()
  - TestEventLoopPolling: the default scheduler is the running loop
  - TestSeek: forwarding seeks to the source

RULES:
- Pull-source tests use FakeScheduler, which runs timers on demand
- No test depends on wall-clock timing except TestEventLoopPolling
"""

import asyncio
import logging
import math

import pytest

from transcript_sync.core.tracker import PositionTracker, SourceKind, source_kind


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeHandle:
    def __init__(self, delay, callback, args):
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """call_later() records timers; run_next() fires the oldest one."""

    def __init__(self):
        self.pending = []

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(delay, callback, args)
        self.pending.append(handle)
        return handle

    def run_next(self):
        handle = self.pending.pop(0)
        if not handle.cancelled:
            handle.callback(*handle.args)


class PushSource:
    def __init__(self):
        self.listeners = []
        self.seeks = []

    def subscribe(self, on_time):
        self.listeners.append(on_time)
        return lambda: self.listeners.remove(on_time)

    def emit(self, time):
        for listener in list(self.listeners):
            listener(time)

    def seek(self, time):
        self.seeks.append(time)


class PullSource:
    def __init__(self, samples):
        self.samples = list(samples)

    def get_current_time(self):
        return self.samples.pop(0)


class BrokenPullSource:
    def get_current_time(self):
        raise RuntimeError("player gone")


def _collect(tracker):
    seen = []
    tracker.on_change(seen.append)
    return seen


# ---------------------------------------------------------------------------
# TestSourceKind
# ---------------------------------------------------------------------------


class TestSourceKind:
    """Sources are classified by the operations they offer."""

    def test_push(self):
        assert source_kind(PushSource()) is SourceKind.PUSH

    def test_pull(self):
        assert source_kind(PullSource([])) is SourceKind.PULL

    def test_push_preferred_when_both(self):
        class Both(PushSource):
            def get_current_time(self):
                return 0.0

        assert source_kind(Both()) is SourceKind.PUSH

    @pytest.mark.parametrize("source", [None, object(), 42])
    def test_unusable(self, source):
        assert source_kind(source) is None

    def test_start_without_source_returns_false(self, caplog):
        tracker = PositionTracker()
        with caplog.at_level(logging.WARNING):
            assert tracker.start() is False
        assert not tracker.is_tracking
        assert "No usable position source" in caplog.text


# ---------------------------------------------------------------------------
# TestPushSource
# ---------------------------------------------------------------------------


class TestPushSource:
    """Push sources notify the tracker directly."""

    def test_start_subscribes(self):
        source = PushSource()
        tracker = PositionTracker(source)
        assert tracker.start() is True
        assert tracker.kind is SourceKind.PUSH
        assert len(source.listeners) == 1

    def test_repeats_are_dropped(self):
        source = PushSource()
        tracker = PositionTracker(source)
        seen = _collect(tracker)
        tracker.start()
        for time in [1.0, 1.0, 2.0, 2.0, 1.5]:
            source.emit(time)
        assert seen == [1.0, 2.0, 1.5]

    def test_first_sample_always_notifies(self):
        source = PushSource()
        tracker = PositionTracker(source)
        seen = _collect(tracker)
        tracker.start()
        source.emit(0.0)
        assert seen == [0.0]

    def test_invalid_samples_are_ignored(self):
        source = PushSource()
        tracker = PositionTracker(source)
        seen = _collect(tracker)
        tracker.start()
        for time in [math.nan, None, "1.0", True, 3.0]:
            source.emit(time)
        assert seen == [3.0]

    def test_stop_unsubscribes(self):
        source = PushSource()
        tracker = PositionTracker(source)
        tracker.start()
        tracker.stop()
        assert source.listeners == []
        assert not tracker.is_tracking
        assert tracker.kind is None

    def test_start_and_stop_are_idempotent(self):
        source = PushSource()
        tracker = PositionTracker(source)
        assert tracker.start() is True
        assert tracker.start() is True
        assert len(source.listeners) == 1
        tracker.stop()
        tracker.stop()
        assert source.listeners == []

    def test_samples_ignored_when_not_tracking(self):
        tracker = PositionTracker(PushSource())
        seen = _collect(tracker)
        tracker.handle_time(4.0)
        assert seen == []

    def test_last_time_survives_restart(self):
        source = PushSource()
        tracker = PositionTracker(source)
        seen = _collect(tracker)
        tracker.start()
        source.emit(5.0)
        tracker.stop()
        tracker.start()
        source.emit(5.0)
        source.emit(6.0)
        assert seen == [5.0, 6.0]
        assert tracker.last_time == 6.0

    def test_remover_detaches_callback(self):
        source = PushSource()
        tracker = PositionTracker(source)
        seen = []
        remove = tracker.on_change(seen.append)
        tracker.start()
        source.emit(1.0)
        remove()
        source.emit(2.0)
        assert seen == [1.0]


# ---------------------------------------------------------------------------
# TestPullSource
# ---------------------------------------------------------------------------


class TestPullSource:
    """Pull sources are polled on the scheduler."""

    def test_polls_at_interval_and_dedupes(self):
        scheduler = FakeScheduler()
        tracker = PositionTracker(
            PullSource([1.0, 1.0, 1.0, 2.0]), poll_interval_ms=100, scheduler=scheduler,
        )
        seen = _collect(tracker)
        assert tracker.start() is True
        assert tracker.kind is SourceKind.PULL
        assert scheduler.pending[0].delay == pytest.approx(0.1)
        for _ in range(4):
            scheduler.run_next()
        assert seen == [1.0, 2.0]

    def test_each_tick_schedules_the_next(self):
        scheduler = FakeScheduler()
        tracker = PositionTracker(PullSource([1.0, 2.0]), scheduler=scheduler)
        tracker.start()
        scheduler.run_next()
        assert len(scheduler.pending) == 1

    def test_stop_cancels_pending_timer(self):
        scheduler = FakeScheduler()
        tracker = PositionTracker(PullSource([1.0]), scheduler=scheduler)
        tracker.start()
        handle = scheduler.pending[0]
        tracker.stop()
        assert handle.cancelled

    def test_default_interval(self, monkeypatch):
        monkeypatch.setattr("transcript_sync.config.POLL_INTERVAL_MS", 250)
        tracker = PositionTracker(PullSource([]))
        assert tracker.poll_interval_ms == pytest.approx(250)

    def test_source_error_is_logged_and_polling_continues(self, caplog):
        scheduler = FakeScheduler()
        tracker = PositionTracker(BrokenPullSource(), scheduler=scheduler)
        seen = _collect(tracker)
        tracker.start()
        with caplog.at_level(logging.ERROR):
            scheduler.run_next()
        assert seen == []
        assert "failed to report its time" in caplog.text
        assert len(scheduler.pending) == 1

    def test_no_event_loop_returns_false(self):
        tracker = PositionTracker(PullSource([1.0]))
        assert tracker.start() is False
        assert not tracker.is_tracking


# ---------------------------------------------------------------------------
# TestStopInsideCallback
# ---------------------------------------------------------------------------


class TestStopInsideCallback:
    """stop() during dispatch prevents every further callback."""

    def test_remaining_listeners_are_skipped(self):
        source = PushSource()
        tracker = PositionTracker(source)
        second = []
        tracker.on_change(lambda time: tracker.stop())
        tracker.on_change(second.append)
        tracker.start()
        source.emit(1.0)
        assert second == []
        assert source.listeners == []

    def test_no_reschedule_after_stop_in_callback(self):
        scheduler = FakeScheduler()
        tracker = PositionTracker(PullSource([1.0]), scheduler=scheduler)
        tracker.on_change(lambda time: tracker.stop())
        tracker.start()
        scheduler.run_next()
        assert scheduler.pending == []

    def test_restart_in_callback_keeps_a_single_timer(self):
        scheduler = FakeScheduler()
        tracker = PositionTracker(PullSource([1.0, 2.0]), scheduler=scheduler)
        restarts = []

        def restart(time):
            if not restarts:
                restarts.append(time)
                tracker.stop()
                tracker.start()

        tracker.on_change(restart)
        tracker.start()
        scheduler.run_next()
        assert restarts == [1.0]
        assert len(scheduler.pending) == 1

        tracker.stop()
        assert all(handle.cancelled for handle in scheduler.pending)


# ---------------------------------------------------------------------------
# TestEventLoopPolling
# ---------------------------------------------------------------------------


class TestEventLoopPolling:
    """Without an explicit scheduler the running asyncio loop is used."""

    def test_polls_on_running_loop(self):
        class Clock:
            def get_current_time(self):
                return 3.0

        tracker = PositionTracker(Clock(), poll_interval_ms=5)
        seen = _collect(tracker)

        async def scenario():
            assert tracker.start() is True
            await asyncio.sleep(0.1)
            tracker.stop()

        asyncio.run(scenario())
        assert seen == [3.0]


# ---------------------------------------------------------------------------
# TestSeek
# ---------------------------------------------------------------------------


class TestSeek:
    """seek() forwards to sources that support it."""

    def test_seek_forwards(self):
        source = PushSource()
        tracker = PositionTracker(source)
        assert tracker.seek(12) is True
        assert source.seeks == [12.0]

    def test_seek_unsupported(self):
        assert PositionTracker(PullSource([])).seek(1.0) is False
        assert PositionTracker().seek(1.0) is False

    @pytest.mark.parametrize("time", [-1.0, math.nan, "5", True])
    def test_seek_invalid_time(self, time):
        source = PushSource()
        assert PositionTracker(source).seek(time) is False
        assert source.seeks == []
