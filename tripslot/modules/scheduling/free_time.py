"""
modules/scheduling/free_time.py
-------------------------------
Subtract busy intervals (fixed blocks) from a day window.
"""

from __future__ import annotations

from typing import Iterable

from tripslot import config
from tripslot.modules.scheduling.open_hours import merge_intervals
from tripslot.modules.scheduling.time_utils import clamp_minute
from tripslot.schemas.schedule import FixedBlock, FreeWindow, OpenInterval


def compute_free_windows(
    day_start_min: int,
    day_end_min: int,
    busy: Iterable[tuple[int, int]],
    min_window_minutes: int = config.MIN_FREE_WINDOW_MINUTES,
) -> list[FreeWindow]:
    """
    Ordered gaps of [day_start_min, day_end_min] not covered by *busy*.

    Busy intervals are merged first (touching boundaries coalesce) and
    clipped to the day.  Gaps shorter than *min_window_minutes* are dropped.
    """
    start = clamp_minute(day_start_min)
    end   = clamp_minute(day_end_min)
    if end <= start:
        return []

    merged = merge_intervals(OpenInterval(int(s), int(e)) for s, e in busy)

    free: list[FreeWindow] = []
    cursor = start
    for iv in merged:
        if iv.start_minute >= end:
            break
        busy_start = max(start, iv.start_minute)
        busy_end   = min(end, iv.end_minute)
        if busy_end <= cursor:
            continue
        if busy_start > cursor:
            free.append(FreeWindow(cursor, busy_start))
        cursor = max(cursor, busy_end)
        if cursor >= end:
            break
    if cursor < end:
        free.append(FreeWindow(cursor, end))

    return [w for w in free if w.length >= min_window_minutes]


def busy_minutes(blocks: Iterable[FixedBlock]) -> int:
    """Total minutes covered by *blocks* (overlaps counted once)."""
    merged = merge_intervals(OpenInterval(b.start_minute, b.end_minute) for b in blocks)
    return sum(iv.end_minute - iv.start_minute for iv in merged)
