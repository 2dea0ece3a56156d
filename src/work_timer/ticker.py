"""Once-per-second display tick and sleep detection."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Optional

from .config import TimerSettings
from .dispatcher import Dispatcher, EventKind
from .errors import DispatcherClosedError
from .tracker import Clock
from .timestamps import local_now

logger = logging.getLogger(__name__)


class Ticker:
    """Posts tick events at a fixed interval from a background thread.

    A wall-clock jump longer than ``settings.sleep_gap`` between two ticks
    means the machine was asleep; the running session is then closed at the
    last instant the ticker saw the machine awake. The dispatcher runs the
    same check before every user request, so a toggle that arrives before
    the first tick after waking still sees the gap.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        settings: TimerSettings,
        clock: Clock = local_now,
    ) -> None:
        self._dispatcher = dispatcher
        self._settings = settings
        self._clock = clock
        self._last_seen: Optional[datetime] = None
        self._seen_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        dispatcher.sleep_check = self.poll

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        with self._seen_lock:
            self._last_seen = self._clock()
        self._thread = threading.Thread(target=self._run_loop, name="ticker", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread:
            thread.join(timeout=5)

    def observe(self, now: datetime) -> Optional[datetime]:
        """Record ``now``; return the last instant seen awake if the machine slept since."""
        with self._seen_lock:
            last_seen, self._last_seen = self._last_seen, now
        if last_seen is None or now - last_seen <= self._settings.sleep_gap:
            return None
        logger.info(
            "Clock jumped %.0f seconds; treating as system sleep since %s.",
            (now - last_seen).total_seconds(),
            last_seen.isoformat(),
        )
        return last_seen

    def poll(self) -> Optional[datetime]:
        return self.observe(self._clock())

    def check(self, now: datetime) -> None:
        """Run one tick: report a sleep gap if there was one, then tick."""
        asleep_since = self.observe(now)
        if asleep_since is not None:
            self._dispatcher.post(EventKind.SUSPEND_REQUESTED, at=asleep_since)
        self._dispatcher.post(EventKind.TICK_ELAPSED)

    def _run_loop(self) -> None:
        interval = self._settings.tick_interval.total_seconds()
        # Sleep in an interruptible manner.
        while not self._stop_event.wait(interval):
            try:
                self.check(self._clock())
            except DispatcherClosedError:
                break
