"""
modules/scheduling/preferences.py
---------------------------------
Scheduling-preference resolution and inference.

  resolve_preferences()                   SchedulingPreferences → numeric knobs
  infer_preferences_from_activities()     typical window / pace / interests
                                          from an already-scheduled history
  extract_preference_hints_from_message() pace + interest hints in free text
  merge_preferences()                     explicit fields win over inferred
"""

from __future__ import annotations

import re
import statistics
from collections import Counter
from dataclasses import dataclass, replace
from typing import Any, Iterable, Optional

from tripslot import config
from tripslot.modules.scheduling.themes import classify_themes_from_types
from tripslot.modules.scheduling.time_utils import (
    format_minutes_to_hhmm,
    is_iso_date_string,
    parse_time_to_minutes,
)
from tripslot.schemas.schedule import SchedulingPreferences

_RELAXED_RE = re.compile(r"\b(relaxed|chill|easy|slow)\b")
_PACKED_RE  = re.compile(r"\b(packed|busy|full|intense)\b")
_INTEREST_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("shopping", re.compile(r"\b(shopping|shops|mall)\b")),
    ("food",     re.compile(r"\b(food|eat|restaurant|cafe|coffee|dinner|lunch)\b")),
    ("sights",   re.compile(r"\b(museum|gallery|sight|landmark|attraction|historic)\b")),
)


@dataclass(frozen=True)
class ResolvedPreferences:
    """Numeric knobs derived from SchedulingPreferences for one run."""
    day_start_min: int
    day_end_min: int
    daily_cap: int
    buffer_min: int
    meters_per_minute: float
    pace: str
    travel_mode: str
    interests: tuple[str, ...]

    @property
    def day_start(self) -> str:
        return format_minutes_to_hhmm(self.day_start_min)

    @property
    def day_end(self) -> str:
        return format_minutes_to_hhmm(self.day_end_min)


def pick_day_window(prefs: SchedulingPreferences) -> tuple[int, int]:
    """
    Usable day window in minutes.  Unparseable ends fall back to the
    configured defaults; a window of an hour or less resets to the defaults.
    """
    default_start = parse_time_to_minutes(config.DEFAULT_DAY_START)
    default_end   = parse_time_to_minutes(config.DEFAULT_DAY_END)
    if default_start is None or default_end is None or default_end <= default_start:
        default_start, default_end = 9 * 60, 18 * 60
    start = parse_time_to_minutes(prefs.day_start)
    end   = parse_time_to_minutes(prefs.day_end)
    start = default_start if start is None else start
    end   = default_end if end is None else end
    if end <= start + config.MIN_DAY_WINDOW_MINUTES:
        return default_start, default_end
    return start, end


def resolve_preferences(prefs: SchedulingPreferences | None = None) -> ResolvedPreferences:
    prefs = prefs or SchedulingPreferences()
    pace = prefs.pace if prefs.pace in config.PACE_DAILY_CAPS else config.DEFAULT_PACE
    mode = prefs.travel_mode if prefs.travel_mode in config.TRAVEL_MODE_BUFFERS else config.DEFAULT_TRAVEL_MODE
    start, end = pick_day_window(prefs)
    return ResolvedPreferences(
        day_start_min=start,
        day_end_min=end,
        daily_cap=config.PACE_DAILY_CAPS[pace],
        buffer_min=config.TRAVEL_MODE_BUFFERS[mode],
        meters_per_minute=config.TRAVEL_MODE_METERS_PER_MINUTE[mode],
        pace=pace,
        travel_mode=mode,
        interests=tuple(prefs.interests),
    )


# ── Inference from history ───────────────────────────────────────────────────

def _median_minute(values: list[int]) -> Optional[int]:
    if not values:
        return None
    return int(round(statistics.median(values)))


def _infer_pace(counts_by_day: list[int]) -> str:
    if not counts_by_day:
        return "moderate"
    avg = sum(counts_by_day) / len(counts_by_day)
    if avg >= 6:
        return "packed"
    if avg <= 3:
        return "relaxed"
    return "moderate"


def infer_preferences_from_activities(rows: Iterable[dict[str, Any]]) -> SchedulingPreferences:
    """
    Infer a typical day window, pace and top-3 interests from activities the
    traveller has already scheduled.

    Each row is ``{"date": "YYYY-MM-DD", "start_time": "HH:MM[:SS]",
    "end_time": ..., "types": [...]}``; rows without a valid date are ignored.
    """
    starts: list[int] = []
    ends: list[int] = []
    per_day: Counter[str] = Counter()
    interest_scores: Counter[str] = Counter()
    first_seen: dict[str, int] = {}

    for row in rows or ():
        if not isinstance(row, dict) or not is_iso_date_string(row.get("date")):
            continue
        start = parse_time_to_minutes(row.get("start_time"))
        end   = parse_time_to_minutes(row.get("end_time"))
        if start is not None:
            starts.append(start)
        if end is not None:
            ends.append(end)
        per_day[row["date"]] += 1
        for theme in classify_themes_from_types(row.get("types")):
            interest_scores[theme] += 1
            first_seen.setdefault(theme, len(first_seen))

    start_median = _median_minute(starts)
    end_median   = _median_minute(ends)
    interests = sorted(interest_scores, key=lambda k: (-interest_scores[k], first_seen[k]))[:3]

    return SchedulingPreferences(
        day_start=format_minutes_to_hhmm(9 * 60 if start_median is None else start_median),
        day_end=format_minutes_to_hhmm(18 * 60 if end_median is None else end_median),
        pace=_infer_pace(list(per_day.values())),
        travel_mode=config.DEFAULT_TRAVEL_MODE,
        interests=tuple(interests),
    )


def extract_preference_hints_from_message(message: str | None) -> dict[str, Any]:
    """Explicit pace / interest hints found in a chat message."""
    text = str(message or "").lower()
    hints: dict[str, Any] = {}
    if _RELAXED_RE.search(text):
        hints["pace"] = "relaxed"
    if _PACKED_RE.search(text):
        hints["pace"] = "packed"
    interests = [key for key, pattern in _INTEREST_PATTERNS if pattern.search(text)]
    if interests:
        hints["interests"] = tuple(interests)
    return hints


def merge_preferences(
    inferred: SchedulingPreferences,
    explicit: dict[str, Any] | None = None,
) -> SchedulingPreferences:
    """Overlay non-empty explicit fields on top of *inferred*."""
    if not explicit:
        return inferred
    allowed = {"day_start", "day_end", "pace", "travel_mode", "interests"}
    updates = {k: v for k, v in explicit.items() if k in allowed and v not in (None, "", (), [])}
    if "interests" in updates:
        raw = updates["interests"]
        raw = (raw,) if isinstance(raw, str) else raw
        updates["interests"] = tuple(str(i).strip().lower() for i in raw if str(i).strip())
    return replace(inferred, **updates)
