"""Clock-time, ISO-date and duration parsing."""

from __future__ import annotations

import pytest

from tripslot.modules.scheduling.time_utils import (
    clamp_minute,
    day_of_week_from_iso_date,
    enumerate_iso_dates,
    format_minutes_to_hhmm,
    is_iso_date_string,
    parse_duration_to_minutes,
    parse_time_to_minutes,
)


@pytest.mark.parametrize("text, expected", [
    ("09:00", 540),
    ("9:05", 545),
    ("23:59", 1439),
    ("10:30:45", 630),
    (" 07:15 ", 435),
])
def test_parse_time_accepts_clock_formats(text, expected):
    assert parse_time_to_minutes(text) == expected


@pytest.mark.parametrize("text", ["24:00", "12:60", "12:00:60", "noon", "", None, 900, "1200"])
def test_parse_time_rejects_garbage(text):
    assert parse_time_to_minutes(text) is None


def test_format_minutes_pads_and_clamps():
    assert format_minutes_to_hhmm(0) == "00:00"
    assert format_minutes_to_hhmm(605) == "10:05"
    assert format_minutes_to_hhmm(1440) == "23:59"
    assert format_minutes_to_hhmm(-30) == "00:00"


def test_clamp_minute_floors_into_day():
    assert clamp_minute(59.9) == 59
    assert clamp_minute(-1) == 0
    assert clamp_minute(2000) == 1440


def test_iso_date_validation():
    assert is_iso_date_string("2024-02-29")
    assert not is_iso_date_string("2023-02-29")
    assert not is_iso_date_string("2024-6-1")
    assert not is_iso_date_string(None)


def test_day_of_week_is_sunday_based():
    assert day_of_week_from_iso_date("2024-06-01") == 6   # Saturday
    assert day_of_week_from_iso_date("2024-06-02") == 0   # Sunday
    assert day_of_week_from_iso_date("2024-06-03") == 1   # Monday


def test_enumerate_iso_dates_inclusive_and_capped():
    assert enumerate_iso_dates("2024-06-01", "2024-06-03") == ["2024-06-01", "2024-06-02", "2024-06-03"]
    assert enumerate_iso_dates("2024-06-01", "2024-06-30", max_days=2) == ["2024-06-01", "2024-06-02"]
    assert enumerate_iso_dates("2024-06-03", "2024-06-01") == []
    assert enumerate_iso_dates("bad", "2024-06-01") == []


@pytest.mark.parametrize("value, expected", [
    (45, 45),
    (90.7, 90),
    ("90 min", 90),
    ("1.5 h", 90),
    ("2 hours", 120),
    ("1:30", 90),
    ("75", 75),
])
def test_parse_duration_variants(value, expected):
    assert parse_duration_to_minutes(value) == expected


@pytest.mark.parametrize("value", [0, -10, True, float("nan"), "soon", "", None])
def test_parse_duration_rejects_non_positive_or_unknown(value):
    assert parse_duration_to_minutes(value) is None
