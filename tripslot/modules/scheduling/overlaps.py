"""
modules/scheduling/overlaps.py
------------------------------
Human-readable warnings for planned activities that collide with calendar
blocks (flights, hotel check-ins, reservations, ...).

Only reports; never moves anything.  Rows with a blank date or an
unparseable / empty time range are skipped silently.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from tripslot.modules.scheduling.time_utils import format_minutes_to_hhmm, parse_time_to_minutes

MIN_WARNINGS = 1
MAX_WARNINGS = 25

BLOCK_KIND_LABELS: dict[str, str] = {
    "flight":          "Flight",
    "train":           "Train",
    "hotel_check_in":  "Hotel check-in",
    "hotel_check_out": "Hotel check-out",
    "reservation":     "Reservation",
    "custom":          "Custom event",
}


@dataclass(frozen=True)
class PlannedItem:
    id: str
    name: str
    date: str
    start_time: str
    end_time: str


@dataclass(frozen=True)
class CalendarBlock:
    id: str
    title: str
    date: str
    start_time: str
    end_time: str
    kind: Optional[str] = None


def block_kind_label(kind: Optional[str]) -> str:
    key = (kind or "custom").strip().lower()
    return BLOCK_KIND_LABELS.get(key, key.replace("_", " ").capitalize() or "Custom event")


def _time_range(start: str, end: str) -> tuple[int, int] | None:
    s, e = parse_time_to_minutes(start), parse_time_to_minutes(end)
    if s is None or e is None or e <= s:
        return None
    return s, e


def build_overlap_warnings(
    planned: Iterable[PlannedItem],
    blocks: Iterable[CalendarBlock],
    max_warnings: int = 8,
) -> list[str]:
    """
    One warning per (planned item, block) pair that overlaps on the same date.

    Pairs beyond *max_warnings* (clamped to [1, 25]) are counted and reported
    in a single trailing line.
    """
    cap = max(MIN_WARNINGS, min(MAX_WARNINGS, int(max_warnings)))

    blocks_by_date: dict[str, list[tuple[int, int, str, Optional[str]]]] = {}
    for block in blocks:
        day = (block.date or "").strip()
        span = _time_range(block.start_time, block.end_time)
        if not day or span is None:
            continue
        title = (block.title or "").strip() or "Custom event"
        blocks_by_date.setdefault(day, []).append((span[0], span[1], title, block.kind))
    for day_blocks in blocks_by_date.values():
        day_blocks.sort(key=lambda b: (b[0], b[1], b[2]))

    warnings: list[str] = []
    suppressed = 0
    for item in planned:
        day = (item.date or "").strip()
        day_blocks = blocks_by_date.get(day)
        span = _time_range(item.start_time, item.end_time)
        if not day_blocks or span is None:
            continue
        start, end = span
        for b_start, b_end, title, kind in day_blocks:
            if not (start < b_end and end > b_start):
                continue
            if len(warnings) >= cap:
                suppressed += 1
                continue
            warnings.append(
                f'Overlap on {day}: "{item.name}" '
                f"({format_minutes_to_hhmm(start)}-{format_minutes_to_hhmm(end)}) "
                f'overlaps {block_kind_label(kind)} "{title}" '
                f"({format_minutes_to_hhmm(b_start)}-{format_minutes_to_hhmm(b_end)})."
            )

    if suppressed:
        warnings.append(f"Overlap warnings omitted for {suppressed} other item(s).")
    return warnings
