"""RFC 3339 timestamp helpers for the work log."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta

_RFC3339_PATTERN = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[Tt]"
    r"(?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d{1,9}))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})$"
)


def local_now() -> datetime:
    """Return the current time as an aware datetime in the local zone."""
    return datetime.now().astimezone()


def format_timestamp(value: datetime) -> str:
    """Render ``value`` as RFC 3339, using ``Z`` for UTC."""
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"timestamp must carry a UTC offset: {value!r}")
    text = value.isoformat(timespec="auto")
    if value.utcoffset() == timedelta(0):
        text = text[: -len("+00:00")] + "Z"
    return text


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC 3339 timestamp.

    Fractions finer than a microsecond are truncated. Timestamps without an
    offset are rejected.
    """
    match = _RFC3339_PATTERN.match(text)
    if not match:
        raise ValueError(f"not an RFC 3339 timestamp: {text!r}")

    fraction = (match.group("fraction") or "")[:6].ljust(6, "0")
    offset = match.group("offset")
    if offset in ("Z", "z"):
        offset = "+00:00"
    try:
        return datetime.fromisoformat(
            f"{match.group('date')}T{match.group('time')}.{fraction}{offset}"
        )
    except ValueError as exc:
        raise ValueError(f"not a valid timestamp: {text!r}") from exc


def local_day(value: datetime) -> date:
    return value.astimezone().date()

