"""Plain-text storage for finished work sessions."""

from __future__ import annotations

import logging
import os
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Optional

from .errors import ParseError, StoreError
from .models import Interval
from .timestamps import format_timestamp, local_day, parse_timestamp

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = ","


class SessionLog:
    """Ordered intervals backed by a ``<start>,<end>`` file, one per line.

    The file is rewritten in full on every change so a reader never sees a
    half-written log.
    """

    def __init__(self, path: Path, intervals: Iterable[Interval] = ()) -> None:
        self.path = Path(path)
        self._intervals: list[Interval] = list(intervals)
        self._today_cache: Optional[tuple[date, int]] = None

    @classmethod
    def load(cls, path: Path) -> "SessionLog":
        path = Path(path)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            logger.info("No work log at %s yet; starting empty.", path)
            return cls(path)
        except OSError as exc:
            raise StoreError(path, f"cannot read work log ({exc.strerror or exc})") from exc

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise StoreError(path, "work log is not valid UTF-8") from exc

        intervals = [
            parse_line(path, number, line)
            for number, line in enumerate(text.split("\n"), start=1)
            if line.strip()
        ]
        # Stable, keyed on start only; equal starts keep file order.
        intervals.sort(key=lambda interval: interval.start)
        logger.info("Loaded %d sessions from %s", len(intervals), path)
        return cls(path, intervals)

    @property
    def intervals(self) -> tuple[Interval, ...]:
        return tuple(self._intervals)

    def __len__(self) -> int:
        return len(self._intervals)

    def append(self, interval: Interval) -> None:
        self._intervals.append(interval)
        self._today_cache = None
        try:
            self.persist()
        except BaseException:
            # Memory must not claim a session the file does not have.
            self._intervals.pop()
            raise

    def persist(self) -> None:
        payload = "".join(format_line(interval) for interval in self._intervals)
        directory = self.path.parent
        tmp_name: Optional[str] = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                newline="",
                dir=directory,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise StoreError(self.path, f"cannot write work log ({exc.strerror or exc})") from exc
        logger.debug("Wrote %d sessions to %s", len(self._intervals), self.path)

    def intervals_on(self, day: date) -> list[Interval]:
        """Return the intervals attributed to ``day`` (by local start date)."""
        return [interval for interval in self._intervals if local_day(interval.start) == day]

    def today_seconds(self, reference: datetime) -> int:
        day = local_day(reference)
        if self._today_cache is not None and self._today_cache[0] == day:
            return self._today_cache[1]
        total = sum(interval.rounded_seconds for interval in self.intervals_on(day))
        self._today_cache = (day, total)
        return total


def parse_line(path: Path, line_number: int, line: str) -> Interval:
    """Decode one non-blank log line, raising :class:`ParseError` on any defect."""
    stripped = line.rstrip("\r")
    parts = stripped.split(FIELD_SEPARATOR)
    if len(parts) != 2:
        raise ParseError(
            path, line_number, stripped, "each line must have 2 parts separated by a comma"
        )
    try:
        start = parse_timestamp(parts[0])
        end = parse_timestamp(parts[1])
        return Interval(start=start, end=end)
    except ValueError as exc:
        raise ParseError(path, line_number, stripped, str(exc)) from exc


def format_line(interval: Interval) -> str:
    return f"{format_timestamp(interval.start)}{FIELD_SEPARATOR}{format_timestamp(interval.end)}\n"
