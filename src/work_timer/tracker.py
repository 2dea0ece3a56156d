"""Work/pause state machine on top of the session log."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Union

from .models import Interval, TrackerSnapshot
from .session_log import SessionLog
from .timestamps import local_now

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass(frozen=True, slots=True)
class Idle:
    pause_start: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class Running:
    last_start: datetime


TrackerState = Union[Idle, Running]


def _rounded_seconds(delta: timedelta) -> int:
    return int(delta.total_seconds() + 0.5)


class Tracker:
    """Single active session at a time; every stop appends one interval.

    All reads and transitions hold one re-entrant lock, so the display thread
    can read while the dispatcher thread toggles.
    """

    def __init__(self, session_log: SessionLog, clock: Clock = local_now) -> None:
        self.session_log = session_log
        self._clock = clock
        self._state: TrackerState = Idle()
        self._lock = threading.RLock()

    @property
    def state(self) -> TrackerState:
        with self._lock:
            return self._state

    @property
    def is_running(self) -> bool:
        with self._lock:
            return isinstance(self._state, Running)

    def can_exit(self) -> bool:
        return not self.is_running

    def start(self) -> None:
        with self._lock:
            if isinstance(self._state, Running):
                return
            self._state = Running(last_start=self._clock())
            logger.info("Started working at %s", self._state.last_start.isoformat())

    def stop(self, at: Optional[datetime] = None) -> None:
        """Close the running session, ending it at ``at`` (default: now)."""
        with self._lock:
            state = self._state
            if not isinstance(state, Running):
                return
            end = at if at is not None else self._clock()
            if end <= state.last_start:
                logger.warning(
                    "Clock went backwards (start %s, end %s); closing session with minimal length.",
                    state.last_start.isoformat(),
                    end.isoformat(),
                )
                end = state.last_start + timedelta(microseconds=1)
            interval = Interval(start=state.last_start, end=end)
            self.session_log.append(interval)
            self._state = Idle(pause_start=end)
            logger.info(
                "Stopped working at %s after %d seconds", end.isoformat(), interval.rounded_seconds
            )

    def suspend(self, at: Optional[datetime] = None) -> None:
        """Close the running session at ``at`` if it started before that instant.

        A session started after ``at`` began after the machine woke up and is
        left running.
        """
        with self._lock:
            state = self._state
            if isinstance(state, Running) and at is not None and state.last_start >= at:
                logger.info(
                    "Session started at %s, after the suspend at %s; keeping it.",
                    state.last_start.isoformat(),
                    at.isoformat(),
                )
                return
            self.stop(at=at)

    def toggle(self) -> None:
        with self._lock:
            if isinstance(self._state, Running):
                self.stop()
            else:
                self.start()

    def sessions_on(self, day: date) -> list[Interval]:
        with self._lock:
            return self.session_log.intervals_on(day)

    def live_elapsed_seconds(self, now: Optional[datetime] = None) -> int:
        with self._lock:
            state = self._state
            if not isinstance(state, Running):
                return 0
            return _rounded_seconds((now or self._clock()) - state.last_start)

    def pause_elapsed_seconds(self, now: Optional[datetime] = None) -> Optional[int]:
        with self._lock:
            state = self._state
            if not isinstance(state, Idle) or state.pause_start is None:
                return None
            return _rounded_seconds((now or self._clock()) - state.pause_start)

    def today_total_seconds(self, now: Optional[datetime] = None) -> int:
        with self._lock:
            now = now or self._clock()
            return self.session_log.today_seconds(now) + self.live_elapsed_seconds(now)

    def snapshot(self, now: Optional[datetime] = None) -> TrackerSnapshot:
        with self._lock:
            now = now or self._clock()
            return TrackerSnapshot(
                running=isinstance(self._state, Running),
                today_seconds=self.today_total_seconds(now),
                live_seconds=self.live_elapsed_seconds(now),
                pause_seconds=self.pause_elapsed_seconds(now),
                taken_at=now,
            )
