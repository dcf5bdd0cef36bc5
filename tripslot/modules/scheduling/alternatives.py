"""
modules/scheduling/alternatives.py
----------------------------------
Ranks swap-in candidates for one already-scheduled slot.

Score = max(0, 10 − km from target)
      + 1.5 × shared type tags
      + 3   when the venue is known to be open for the whole slot

A candidate known to be closed for the slot is dropped.  Only unscheduled
candidates (or ones sitting in exactly the target's slot) from the same
destination are eligible.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

from tripslot.modules.scheduling.open_hours import get_open_intervals_for_day, is_open_for_window
from tripslot.modules.scheduling.time_utils import (
    day_of_week_from_iso_date,
    is_iso_date_string,
    parse_time_to_minutes,
)
from tripslot.modules.tool_usage.distance_tool import distance_meters
from tripslot.schemas.schedule import Coordinates, OpenHoursRow

MAX_ALTERNATIVES      = 3
PROXIMITY_RANGE_KM    = 10.0
SHARED_TAG_WEIGHT     = 1.5
OPEN_DURING_SLOT_BONUS = 3.0


@dataclass(frozen=True)
class SlotActivity:
    """An itinerary activity as seen by the alternatives ranker."""
    id: str
    name: str = ""
    destination_id: Optional[str] = None
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    type_tags: tuple[str, ...] = ()
    coordinates: Optional[Coordinates] = None
    open_hours: Optional[tuple[OpenHoursRow, ...]] = None

    @property
    def is_unscheduled(self) -> bool:
        return self.date is None and self.start_time is None and self.end_time is None


@dataclass
class SlotAlternative:
    id: str
    score: float
    distance_meters: Optional[float] = None
    is_open_during_slot: Optional[bool] = None
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "score": round(self.score, 3),
            "distance_meters": None if self.distance_meters is None else round(self.distance_meters, 1),
            "is_open_during_slot": self.is_open_during_slot,
            "reasons": list(self.reasons),
        }


def _normalize_tags(tags: Iterable[str]) -> list[str]:
    return [t.strip().lower() for t in tags if t and t.strip()]


def _format_km(meters: float) -> str:
    # half-up rounding to one decimal
    return f"{math.floor(meters / 100 + 0.5) / 10} km"


def _same_slot(candidate: SlotActivity, target: SlotActivity) -> bool:
    return bool(
        candidate.date and candidate.start_time and candidate.end_time
        and candidate.date == target.date
        and candidate.start_time == target.start_time
        and candidate.end_time == target.end_time
    )


def rank_slot_alternatives(
    target: SlotActivity,
    candidates: Iterable[SlotActivity],
    max_alternatives: int = MAX_ALTERNATIVES,
) -> list[SlotAlternative]:
    """Best alternatives for *target*'s slot, sorted by score desc, distance asc, id asc."""
    limit = max(1, min(MAX_ALTERNATIVES, int(max_alternatives)))
    target_tags = set(_normalize_tags(target.type_tags))

    slot_start = parse_time_to_minutes(target.start_time)
    slot_end = parse_time_to_minutes(target.end_time)
    has_slot = (
        is_iso_date_string(target.date)
        and slot_start is not None
        and slot_end is not None
        and slot_end > slot_start
    )
    weekday = day_of_week_from_iso_date(target.date) if has_slot else None

    scored: list[SlotAlternative] = []
    for cand in candidates:
        cand_id = (cand.id or "").strip()
        if not cand_id or cand_id == target.id:
            continue
        if target.destination_id and cand.destination_id != target.destination_id:
            continue
        if not (cand.is_unscheduled or _same_slot(cand, target)):
            continue

        score = 0.0
        reasons: list[str] = []

        dist = None
        if target.coordinates is not None and cand.coordinates is not None:
            dist = distance_meters(target.coordinates, cand.coordinates)
            score += max(0.0, PROXIMITY_RANGE_KM - dist / 1000)
            reasons.append(f"Nearby ({_format_km(dist)})")

        shared = sum(1 for t in _normalize_tags(cand.type_tags) if t in target_tags)
        if shared:
            score += shared * SHARED_TAG_WEIGHT
            reasons.append("Similar vibe")

        is_open = None
        if has_slot and cand.open_hours:
            intervals = get_open_intervals_for_day(cand.open_hours, weekday)
            if intervals:
                is_open = is_open_for_window(intervals, slot_start, slot_end)
                if not is_open:
                    continue
                score += OPEN_DURING_SLOT_BONUS
                reasons.append("Open during that time")

        scored.append(SlotAlternative(cand_id, score, dist, is_open, reasons))

    scored.sort(key=lambda s: (
        -s.score,
        s.distance_meters if s.distance_meters is not None else math.inf,
        s.id,
    ))
    return scored[:limit]
