"""
modules/scheduling/time_utils.py
--------------------------------
Time-of-day and calendar-date helpers shared by every scheduling component.

All times are integer minutes from midnight.  ISO dates are handled as plain
calendar dates (no timezone), so the weekday of "2026-01-05" is always Monday
regardless of where the process runs.
"""

from __future__ import annotations

import math
import re
from datetime import date, timedelta
from typing import Any

from tripslot import config

_TIME_RE     = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MINUTES_TEXT_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*(?:m|min|mins|minute|minutes)$", re.IGNORECASE)
_HOURS_TEXT_RE   = re.compile(r"^(\d+(?:\.\d+)?)\s*(?:h|hr|hrs|hour|hours)$", re.IGNORECASE)
_PLAIN_NUMBER_RE = re.compile(r"^(\d+(?:\.\d+)?)$")

MINUTES_PER_DAY: int = 24 * 60


def clamp_minute(value: float) -> int:
    """Floor *value* and clamp it into [0, 1440]."""
    return max(0, min(MINUTES_PER_DAY, int(math.floor(value))))


def parse_time_to_minutes(text: Any) -> int | None:
    """
    Parse ``H:MM`` / ``HH:MM`` / ``HH:MM:SS`` into minutes from midnight.

    Returns None for anything else, including out-of-range hours (> 23),
    minutes (> 59) or seconds (> 59).  Seconds are ignored.
    """
    if not isinstance(text, str):
        return None
    match = _TIME_RE.match(text.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    seconds = int(match.group(3)) if match.group(3) is not None else 0
    if hours > 23 or minutes > 59 or seconds > 59:
        return None
    return hours * 60 + minutes


def format_minutes_to_hhmm(minutes: float) -> str:
    """Format minutes from midnight as zero-padded ``HH:MM`` (clamped to 00:00–23:59)."""
    mins = max(0, min(int(minutes), MINUTES_PER_DAY - 1))
    return f"{mins // 60:02d}:{mins % 60:02d}"


def is_iso_date_string(value: Any) -> bool:
    """True iff *value* is a ``YYYY-MM-DD`` string naming a real calendar date."""
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def day_of_week_from_iso_date(iso_date: str) -> int:
    """
    Weekday of an ISO date with 0 = Sunday .. 6 = Saturday.

    The caller must have checked the string with is_iso_date_string();
    a malformed date raises ValueError.
    """
    return (date.fromisoformat(iso_date).weekday() + 1) % 7


def enumerate_iso_dates(
    from_date: str,
    to_date: str,
    max_days: int = config.DEFAULT_MAX_DAYS,
) -> list[str]:
    """
    Ordered ISO dates from *from_date* to *to_date* inclusive, at most
    *max_days* of them.  Empty when either date is malformed or to < from.
    """
    if not is_iso_date_string(from_date) or not is_iso_date_string(to_date):
        return []
    start = date.fromisoformat(from_date)
    end   = date.fromisoformat(to_date)
    if end < start or max_days <= 0:
        return []

    out: list[str] = []
    current = start
    while current <= end and len(out) < max_days:
        out.append(current.isoformat())
        current += timedelta(days=1)
    return out


def parse_duration_to_minutes(value: Any) -> int | None:
    """
    Parse a loose duration into whole minutes.

    Accepts numbers (minutes), ``"90 min"``, ``"1.5 h"``, ``"1:30"`` /
    ``"1:30:00"`` and bare numeric strings.  Returns None for anything
    non-positive or unrecognised.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        minutes = int(math.floor(value))
        return minutes if minutes > 0 else None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    match = _MINUTES_TEXT_RE.match(text)
    if match:
        minutes = int(math.floor(float(match.group(1))))
        return minutes if minutes > 0 else None

    match = _HOURS_TEXT_RE.match(text)
    if match:
        minutes = int(round(float(match.group(1)) * 60))
        return minutes if minutes > 0 else None

    match = _TIME_RE.match(text)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        seconds = int(match.group(3) or 0)
        total = hours * 60 + minutes + round(seconds / 60)
        return total if total > 0 else None

    match = _PLAIN_NUMBER_RE.match(text)
    if match:
        minutes = int(math.floor(float(match.group(1))))
        return minutes if minutes > 0 else None

    return None
