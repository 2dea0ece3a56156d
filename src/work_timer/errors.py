"""Exceptions raised by the work timer."""

from __future__ import annotations

from pathlib import Path


class WorkLogError(Exception):
    """Base class for every error the timer reports to the user."""


class ParseError(WorkLogError):
    """A line of the work log could not be decoded."""

    def __init__(self, path: Path, line_number: int, line: str, reason: str) -> None:
        self.path = Path(path)
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"{self.path}, line {line_number}: {reason}: {line!r}")


class StoreError(WorkLogError):
    """The work log exists but could not be read, or could not be written."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class InstanceUnavailableError(WorkLogError):
    """No running timer answered on the control address."""


class DispatcherClosedError(WorkLogError):
    """An event was posted after the dispatcher stopped consuming events."""


class ControlServerError(WorkLogError):
    """The control API could not be started."""
