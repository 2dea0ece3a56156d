"""Domain models for recorded work sessions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True, slots=True)
class Interval:
    """A finished work session, from ``start`` up to (not including) ``end``."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("interval bounds must be timezone-aware")
        if self.end <= self.start:
            raise ValueError(
                f"interval must end after it starts ({self.start.isoformat()} >= {self.end.isoformat()})"
            )

    @property
    def duration_seconds(self) -> float:
        return (self.end - self.start).total_seconds()

    @property
    def rounded_seconds(self) -> int:
        # Half-up; durations are always positive so truncation is a floor.
        return int(self.duration_seconds + 0.5)


@dataclass(frozen=True, slots=True)
class TrackerSnapshot:
    """Consistent read of the tracker used by the display and the control API."""

    running: bool
    today_seconds: int
    live_seconds: int
    pause_seconds: Optional[int]
    taken_at: datetime

    @property
    def can_exit(self) -> bool:
        return not self.running
