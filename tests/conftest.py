"""Pytest fixtures for work timer tests."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from work_timer.session_log import SessionLog
from work_timer.tracker import Tracker


class FakeClock:
    """Deterministic stand-in for ``local_now``."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


def local(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> datetime:
    """An aware datetime in the machine's local zone."""
    return datetime(year, month, day, hour, minute, second).astimezone()


@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    return tmp_path / "work_times.csv"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(local(2024, 3, 4, 9, 0, 0))


@pytest.fixture
def session_log(log_path: Path) -> SessionLog:
    return SessionLog.load(log_path)


@pytest.fixture
def tracker(session_log: SessionLog, clock: FakeClock) -> Tracker:
    return Tracker(session_log, clock=clock)
