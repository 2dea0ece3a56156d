"""Tests for RFC 3339 encoding of log timestamps."""

from datetime import datetime, timedelta, timezone

import pytest

from work_timer.timestamps import format_timestamp, local_day, parse_timestamp


def test_parse_utc_with_z_suffix():
    parsed = parse_timestamp("2024-01-01T09:00:00Z")
    assert parsed == datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc)
    assert parsed.utcoffset() == timedelta(0)


def test_parse_keeps_the_recorded_offset():
    parsed = parse_timestamp("2024-01-01T09:00:00+02:00")
    assert parsed.utcoffset() == timedelta(hours=2)
    assert parsed == datetime(2024, 1, 1, 7, 0, 0, tzinfo=timezone.utc)


def test_parse_truncates_nanoseconds():
    parsed = parse_timestamp("2024-01-01T09:00:00.123456789-05:00")
    assert parsed.microsecond == 123456


def test_parse_pads_short_fractions():
    assert parse_timestamp("2024-01-01T09:00:00.5Z").microsecond == 500000


@pytest.mark.parametrize(
    "text",
    [
        "garbage",
        "",
        "2024-01-01T09:00:00",
        "2024-01-01 09:00:00Z",
        "2024-13-01T09:00:00Z",
        "2024-01-01T09:00:00Z ",
        " 2024-01-01T09:00:00Z",
    ],
)
def test_parse_rejects_invalid_text(text):
    with pytest.raises(ValueError):
        parse_timestamp(text)


def test_format_uses_z_for_utc_and_omits_zero_fraction():
    value = datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc)
    assert format_timestamp(value) == "2024-01-01T09:00:00Z"


def test_format_keeps_offset_and_fraction():
    value = datetime(2024, 1, 1, 9, 0, 0, 250000, tzinfo=timezone(timedelta(hours=-3)))
    text = format_timestamp(value)
    assert text == "2024-01-01T09:00:00.250000-03:00"
    assert parse_timestamp(text) == value


def test_format_rejects_naive_datetimes():
    with pytest.raises(ValueError):
        format_timestamp(datetime(2024, 1, 1, 9, 0, 0))


def test_local_day_uses_the_local_zone():
    value = datetime(2024, 1, 1, 12, 0, 0).astimezone()
    assert local_day(value) == value.date()
    assert local_day(value.astimezone(timezone.utc)) == value.date()
