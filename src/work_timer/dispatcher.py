"""Single-threaded event loop that owns every tracker transition."""

from __future__ import annotations

import enum
import logging
import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from .errors import DispatcherClosedError
from .models import TrackerSnapshot
from .tracker import Tracker

logger = logging.getLogger(__name__)

_POLL_SECONDS = 0.5


class EventKind(enum.Enum):
    TOGGLE_REQUESTED = "toggle"
    START_REQUESTED = "start"
    STOP_REQUESTED = "stop"
    SUSPEND_REQUESTED = "suspend"
    SHUTDOWN_REQUESTED = "shutdown"
    TICK_ELAPSED = "tick"


@dataclass(slots=True)
class Event:
    kind: EventKind
    at: Optional[datetime] = None
    future: Future = field(default_factory=Future)


_USER_REQUESTS = frozenset(
    {EventKind.TOGGLE_REQUESTED, EventKind.START_REQUESTED, EventKind.STOP_REQUESTED}
)


class Dispatcher:
    """Consume events posted from any thread and apply them on one thread.

    Only the thread running :meth:`run_until_shutdown` calls tracker
    transitions, so start, stop and append never interleave.
    """

    def __init__(
        self,
        tracker: Tracker,
        on_tick: Optional[Callable[[TrackerSnapshot], None]] = None,
    ) -> None:
        self.tracker = tracker
        self._on_tick = on_tick
        # Returns the last instant the machine was seen awake when it has slept
        # since the previous call, else None.
        self.sleep_check: Optional[Callable[[], Optional[datetime]]] = None
        self._queue: "queue.Queue[Event]" = queue.Queue()
        self._closed = threading.Event()
        self._post_lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def post(self, kind: EventKind, at: Optional[datetime] = None) -> Event:
        event = Event(kind=kind, at=at)
        with self._post_lock:
            if self._closed.is_set():
                raise DispatcherClosedError("the timer is shutting down")
            self._queue.put(event)
        return event

    def submit(
        self,
        kind: EventKind,
        at: Optional[datetime] = None,
        timeout: Optional[float] = None,
    ) -> TrackerSnapshot:
        """Post an event and wait for the loop to apply it."""
        return self.post(kind, at).future.result(timeout=timeout)

    def run_until_shutdown(self) -> None:
        logger.info("Dispatcher running.")
        try:
            while True:
                try:
                    event = self._queue.get(timeout=_POLL_SECONDS)
                except queue.Empty:
                    # Ctrl-C is only delivered between waits on Windows.
                    continue
                try:
                    snapshot = self.handle(event)
                except BaseException as exc:
                    if not isinstance(exc, Exception):
                        exc = DispatcherClosedError("the timer was interrupted")
                    event.future.set_exception(exc)
                    raise
                event.future.set_result(snapshot)
                if event.kind is EventKind.SHUTDOWN_REQUESTED:
                    break
        finally:
            self._close()
            logger.info("Dispatcher stopped.")

    def handle(self, event: Event) -> TrackerSnapshot:
        kind = event.kind
        if kind in _USER_REQUESTS and self.sleep_check is not None:
            asleep_since = self.sleep_check()
            if asleep_since is not None:
                self.tracker.suspend(at=asleep_since)
        if kind is EventKind.TOGGLE_REQUESTED:
            self.tracker.toggle()
        elif kind is EventKind.START_REQUESTED:
            self.tracker.start()
        elif kind is EventKind.STOP_REQUESTED:
            self.tracker.stop()
        elif kind is EventKind.SUSPEND_REQUESTED:
            self.tracker.suspend(at=event.at)
        elif kind is EventKind.SHUTDOWN_REQUESTED:
            if self.tracker.is_running:
                logger.info("Shutdown: closing the running session.")
            self.tracker.stop(at=event.at)
        elif kind is EventKind.TICK_ELAPSED:
            snapshot = self.tracker.snapshot()
            logger.debug("Tick: running=%s today=%ds", snapshot.running, snapshot.today_seconds)
            if self._on_tick is not None:
                self._on_tick(snapshot)
            return snapshot
        return self.tracker.snapshot()

    def _close(self) -> None:
        with self._post_lock:
            self._closed.set()
        while True:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                break
            event.future.set_exception(DispatcherClosedError("the timer stopped before handling the request"))
