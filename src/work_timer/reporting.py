"""Human-readable output for the console."""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path
from typing import Optional, TextIO

from .models import TrackerSnapshot
from .session_log import SessionLog


class SummaryPrinter:
    """Render the sessions recorded for one day."""

    def __init__(self, log_path: Path) -> None:
        self.log_path = Path(log_path)

    def print_daily_summary(self, day: date) -> None:
        session_log = SessionLog.load(self.log_path)
        intervals = session_log.intervals_on(day)
        if not intervals:
            print("No work recorded for the selected day.")
            return

        total = sum(interval.rounded_seconds for interval in intervals)
        print(f"Summary for {day.strftime('%Y-%m-%d')}")
        print("-" * 40)
        for interval in intervals:
            start = interval.start.astimezone()
            end = interval.end.astimezone()
            print(
                f"  {start:%H:%M:%S} - {end:%H:%M:%S}  {format_duration(interval.rounded_seconds)}"
            )
        print("-" * 40)
        count = len(intervals)
        print(f"Worked {format_clock(total)} ({count} session{'' if count == 1 else 's'})")


def format_clock(seconds: int) -> str:
    """Hours and minutes, rounded to the nearest minute."""
    minutes = (seconds + 30) // 60
    return f"{minutes // 60}:{minutes % 60:02d}"


def format_duration(seconds: float) -> str:
    total_seconds = int(round(seconds))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def status_line(running: bool, today_seconds: int, pause_seconds: Optional[int] = None) -> str:
    parts = ["Working" if running else "Pause", f"Worked {format_clock(today_seconds)} today"]
    if not running and pause_seconds is not None:
        parts.append(f"Pausing for {format_clock(pause_seconds)}")
    return " | ".join(parts)


def render_status(snapshot: TrackerSnapshot) -> str:
    return status_line(snapshot.running, snapshot.today_seconds, snapshot.pause_seconds)


class ConsoleStatusRenderer:
    """Keep a single status line up to date on an interactive console."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout
        self._width = 0

    def __call__(self, snapshot: TrackerSnapshot) -> None:
        line = render_status(snapshot)
        padding = " " * max(self._width - len(line), 0)
        self._width = len(line)
        self._stream.write(f"\r{line}{padding}")
        self._stream.flush()

    def finish(self) -> None:
        if self._width:
            self._stream.write("\n")
            self._stream.flush()
            self._width = 0
