"""Tests for the single-threaded event dispatcher."""

import threading
from datetime import timedelta

import pytest

from work_timer.dispatcher import Dispatcher, EventKind
from work_timer.errors import DispatcherClosedError, StoreError
from work_timer.session_log import SessionLog
from work_timer.tracker import Tracker


@pytest.fixture
def running_dispatcher(tracker):
    """A dispatcher consuming events on a background thread."""
    ticks = []
    dispatcher = Dispatcher(tracker, on_tick=ticks.append)
    thread = threading.Thread(target=dispatcher.run_until_shutdown, daemon=True)
    thread.start()
    yield dispatcher, ticks
    if not dispatcher.closed:
        dispatcher.submit(EventKind.SHUTDOWN_REQUESTED, timeout=5)
    thread.join(timeout=5)


def test_toggle_events_drive_the_tracker(running_dispatcher, clock):
    dispatcher, _ = running_dispatcher
    snapshot = dispatcher.submit(EventKind.TOGGLE_REQUESTED, timeout=5)
    assert snapshot.running
    clock.advance(125)
    snapshot = dispatcher.submit(EventKind.TOGGLE_REQUESTED, timeout=5)
    assert not snapshot.running
    assert snapshot.today_seconds == 125
    assert len(dispatcher.tracker.session_log) == 1


def test_start_and_stop_events_are_idempotent(running_dispatcher, clock):
    dispatcher, _ = running_dispatcher
    dispatcher.submit(EventKind.START_REQUESTED, timeout=5)
    dispatcher.submit(EventKind.START_REQUESTED, timeout=5)
    clock.advance(5)
    dispatcher.submit(EventKind.STOP_REQUESTED, timeout=5)
    dispatcher.submit(EventKind.STOP_REQUESTED, timeout=5)
    assert len(dispatcher.tracker.session_log) == 1


def test_suspend_forces_stop_at_the_suspend_instant(running_dispatcher, clock):
    dispatcher, _ = running_dispatcher
    t0 = clock.now
    dispatcher.submit(EventKind.START_REQUESTED, timeout=5)
    clock.advance(3600)
    snapshot = dispatcher.submit(
        EventKind.SUSPEND_REQUESTED, at=t0 + timedelta(seconds=60), timeout=5
    )
    assert not snapshot.running
    (interval,) = dispatcher.tracker.session_log.intervals
    assert interval.end == t0 + timedelta(seconds=60)


def test_tick_reports_a_snapshot_without_mutating(running_dispatcher, clock):
    dispatcher, ticks = running_dispatcher
    dispatcher.submit(EventKind.START_REQUESTED, timeout=5)
    clock.advance(7)
    dispatcher.submit(EventKind.TICK_ELAPSED, timeout=5)
    assert ticks[-1].live_seconds == 7
    assert dispatcher.tracker.is_running
    assert len(dispatcher.tracker.session_log) == 0


def test_shutdown_records_the_running_session_and_closes(tracker, clock):
    dispatcher = Dispatcher(tracker)
    dispatcher.post(EventKind.START_REQUESTED)
    shutdown = dispatcher.post(EventKind.SHUTDOWN_REQUESTED)
    late = dispatcher.post(EventKind.TOGGLE_REQUESTED)

    dispatcher.run_until_shutdown()

    assert shutdown.future.result(timeout=1).running is False
    assert len(tracker.session_log) == 1
    assert tracker.session_log.intervals[0].start == clock.now
    with pytest.raises(DispatcherClosedError):
        late.future.result(timeout=1)
    with pytest.raises(DispatcherClosedError):
        dispatcher.post(EventKind.TOGGLE_REQUESTED)


def test_store_failure_is_fatal(tmp_path, clock):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    tracker = Tracker(SessionLog(blocker / "work_times.csv"), clock=clock)
    dispatcher = Dispatcher(tracker)
    dispatcher.post(EventKind.START_REQUESTED)
    clock.advance(1)
    stop = dispatcher.post(EventKind.STOP_REQUESTED)

    with pytest.raises(StoreError):
        dispatcher.run_until_shutdown()

    with pytest.raises(StoreError):
        stop.future.result(timeout=1)
    assert dispatcher.closed


def test_interrupt_fails_the_pending_request_and_propagates(tracker, monkeypatch):
    dispatcher = Dispatcher(tracker)

    def interrupted(event):
        raise KeyboardInterrupt

    monkeypatch.setattr(dispatcher, "handle", interrupted)
    toggle = dispatcher.post(EventKind.TOGGLE_REQUESTED)

    with pytest.raises(KeyboardInterrupt):
        dispatcher.run_until_shutdown()

    with pytest.raises(DispatcherClosedError):
        toggle.future.result(timeout=1)
    assert dispatcher.closed
