"""
modules/scheduling/open_hours.py
--------------------------------
Opening-hours resolver.

  get_open_intervals_for_day()         raw rows → merged OpenInterval list
  is_open_for_window()                 containment test for [start, end)
  auto_correct_to_next_open_interval() shift a window into an open interval

Rows that close before they open (overnight hours) are dropped rather than
split across midnight; see DESIGN.md.
"""

from __future__ import annotations

from typing import Iterable, Optional

from tripslot.modules.scheduling.time_utils import clamp_minute
from tripslot.schemas.schedule import OpenHoursCorrection, OpenHoursRow, OpenInterval


def _to_minutes(hour: Optional[int], minute: Optional[int]) -> int | None:
    if hour is None or minute is None:
        return None
    if not (0 <= hour <= 23) or not (0 <= minute <= 59):
        return None
    return hour * 60 + minute


def merge_intervals(intervals: Iterable[OpenInterval]) -> list[OpenInterval]:
    """Sort by start and merge overlapping or touching intervals."""
    ordered = sorted(
        (iv for iv in intervals if iv.end_minute > iv.start_minute),
        key=lambda iv: (iv.start_minute, iv.end_minute),
    )
    merged: list[OpenInterval] = []
    for iv in ordered:
        if merged and iv.start_minute <= merged[-1].end_minute:
            last = merged[-1]
            merged[-1] = OpenInterval(last.start_minute, max(last.end_minute, iv.end_minute))
            continue
        merged.append(iv)
    return merged


def get_open_intervals_for_day(
    rows: Iterable[OpenHoursRow] | None,
    day_of_week: int,
) -> list[OpenInterval]:
    """
    Merged open intervals for *day_of_week* (0 = Sunday .. 6 = Saturday).

    Rows for other weekdays, rows with missing/out-of-range fields,
    zero-length rows and rows whose close precedes their open are ignored.
    """
    if not (0 <= day_of_week <= 6) or not rows:
        return []

    intervals: list[OpenInterval] = []
    for row in rows:
        if row is None or row.day != day_of_week:
            continue
        open_min  = _to_minutes(row.open_hour, row.open_minute)
        close_min = _to_minutes(row.close_hour, row.close_minute)
        if open_min is None or close_min is None:
            continue
        if close_min <= open_min:
            continue
        intervals.append(OpenInterval(clamp_minute(open_min), clamp_minute(close_min)))

    return merge_intervals(intervals)


def is_open_for_window(intervals: list[OpenInterval], start_min: int, end_min: int) -> bool:
    """True iff one merged interval fully contains [start_min, end_min)."""
    start = clamp_minute(start_min)
    end   = clamp_minute(end_min)
    if end <= start or not intervals:
        return False
    return any(start >= iv.start_minute and end <= iv.end_minute for iv in intervals)


def auto_correct_to_next_open_interval(
    intervals: list[OpenInterval],
    start_min: int,
    end_min: int,
) -> OpenHoursCorrection | None:
    """
    Move [start_min, end_min) so it lies inside an open interval.

    Order of preference:
      1. The window already fits → returned unchanged.
      2. The earliest interval starting at or after start_min that is long
         enough → window begins at that interval's start.
      3. Otherwise the latest interval before start_min that is long enough
         → window ends at that interval's close.
    Returns None when no interval can hold the duration at all.
    """
    duration = max(1, end_min - start_min)
    if is_open_for_window(intervals, start_min, end_min):
        return OpenHoursCorrection(start_min, end_min)

    fitting = [iv for iv in intervals if iv.end_minute - iv.start_minute >= duration]
    if not fitting:
        return None

    for iv in fitting:
        if iv.start_minute >= start_min:
            return OpenHoursCorrection(iv.start_minute, iv.start_minute + duration)

    # Nothing opens later; fall back to the latest slot that still fits.
    last = fitting[-1]
    new_start = min(start_min, last.end_minute - duration)
    return OpenHoursCorrection(new_start, new_start + duration)
