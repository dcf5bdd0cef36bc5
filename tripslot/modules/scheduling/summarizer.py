"""
modules/scheduling/summarizer.py
--------------------------------
Turns a run's raw placements into per-day plans the caller can show.
Pure derivation; nothing here changes a placement.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from tripslot.modules.scheduling.preferences import ResolvedPreferences
from tripslot.modules.scheduling.themes import primary_theme_from_types
from tripslot.schemas.schedule import Candidate, DayPlan, DayPlanItem, Placement, UpdateOperation

LOCKED_OVERFLOW_NOTE = "Some items couldn't fit into this day."


def build_rationale(
    prefs: ResolvedPreferences,
    requested_theme: Optional[str] = None,
    locked_overflow: bool = False,
) -> str:
    if requested_theme and requested_theme != "mixed":
        rationale = f"Focused on {requested_theme} and kept things close together when possible."
    else:
        rationale = f"Planned a {prefs.pace} day within your {prefs.day_start}-{prefs.day_end} window."
    if locked_overflow:
        rationale = f"{rationale} {LOCKED_OVERFLOW_NOTE}"
    return rationale


def build_day_plans(
    placements: Iterable[Placement],
    candidates_by_id: Mapping[str, Candidate],
    prefs: ResolvedPreferences,
    requested_theme: Optional[str] = None,
    locked_overflow_dates: Iterable[str] = (),
) -> list[DayPlan]:
    """One DayPlan per date that received at least one placement, in date order."""
    by_date: dict[str, list[Placement]] = {}
    for p in placements:
        by_date.setdefault(p.date, []).append(p)

    overflow = set(locked_overflow_dates)
    plans: list[DayPlan] = []
    for day in sorted(by_date):
        items = [
            DayPlanItem(
                id=p.id,
                title=candidates_by_id[p.id].name if p.id in candidates_by_id else p.id,
                start_time=p.start_time,
                end_time=p.end_time,
                theme=primary_theme_from_types(candidates_by_id[p.id].type_tags) if p.id in candidates_by_id else None,
            )
            for p in sorted(by_date[day], key=lambda p: (p.start_minute, p.id))
        ]
        plans.append(DayPlan(
            date=day,
            rationale=build_rationale(prefs, requested_theme, day in overflow),
            items=items,
        ))
    return plans


def build_update_operations(placements: Iterable[Placement]) -> list[UpdateOperation]:
    return [
        UpdateOperation(id=p.id, date=p.date, start_time=p.start_time, end_time=p.end_time)
        for p in placements
    ]
