"""
schemas/schedule.py
-------------------
Dataclass definitions for every record the scheduling engine reads or
produces.

Time-of-day values are integer minutes since midnight in [0, 1440].
Dates are ISO-8601 strings (YYYY-MM-DD).  Weekdays use 0 = Sunday .. 6 = Saturday.

Input records (Candidate, FixedBlock, SchedulingPreferences) are frozen:
the engine never mutates them and always returns new output records.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Optional


class CandidateState(str, Enum):
    """Lifecycle of a candidate during one scheduling run."""
    pending         = "PENDING"
    assigned_to_day = "ASSIGNED_TO_DAY"
    ordered         = "ORDERED"
    placed          = "PLACED"
    spilled         = "SPILLED_TO_NEXT_DAY"
    unplaced        = "UNPLACED"


# ── Geometry / hours ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


@dataclass(frozen=True)
class OpenHoursRow:
    """One raw opening-hours row as stored by the activity lookup."""
    day: int                       # 0 = Sunday .. 6 = Saturday
    open_hour: Optional[int] = None
    open_minute: Optional[int] = None
    close_hour: Optional[int] = None
    close_minute: Optional[int] = None


@dataclass(frozen=True)
class OpenInterval:
    """Half-open [start_minute, end_minute) span during which a venue is open."""
    start_minute: int
    end_minute: int


@dataclass(frozen=True)
class OpenHoursCorrection:
    new_start_minute: int
    new_end_minute: int


@dataclass(frozen=True)
class FreeWindow:
    """Unoccupied span of a day, after fixed blocks have been subtracted."""
    start_minute: int
    end_minute: int

    @property
    def length(self) -> int:
        return self.end_minute - self.start_minute


# ── Inputs ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Candidate:
    """
    An activity eligible for automatic time-slot assignment.

    duration_minutes is already clamped to [15, 480] by the validator.
    locked_date is a hard pin; preferred_date only seeds the day assignment
    and may spill to later dates.
    """
    id: str
    name: str
    duration_minutes: int
    coordinates: Optional[Coordinates] = None
    type_tags: tuple[str, ...] = ()
    preferred_date: Optional[str] = None
    locked_date: Optional[str] = None
    open_hours: Optional[tuple[OpenHoursRow, ...]] = None


@dataclass(frozen=True)
class FixedBlock:
    """Already-occupied time range on a date; placements must not overlap it."""
    date: str
    start_minute: int
    end_minute: int
    coordinates: Optional[Coordinates] = None


@dataclass(frozen=True)
class SchedulingPreferences:
    day_start: str = "09:00"
    day_end: str = "18:00"
    pace: str = "moderate"             # relaxed | moderate | packed
    travel_mode: str = "walking"       # walking | bicycling | driving | transit
    interests: tuple[str, ...] = ()


# ── Outputs ──────────────────────────────────────────────────────────────────

@dataclass
class Placement:
    id: str
    date: str
    start_minute: int
    end_minute: int
    start_time: str
    end_time: str
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class UnplacedItem:
    id: str
    reason: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class RejectedRow:
    """An input row dropped at the boundary because it could not be normalised."""
    index: int
    id: str
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class UpdateOperation:
    """Generic update the caller persists for each placement."""
    id: str
    date: str
    start_time: str
    end_time: str
    op: str = "update_activity"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DayPlanItem:
    id: str
    title: str
    start_time: str
    end_time: str
    theme: Optional[str] = None


@dataclass
class DayPlan:
    date: str
    rationale: str
    items: list[DayPlanItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ScheduleResult:
    """Top-level output of one scheduling run."""
    placements: list[Placement] = field(default_factory=list)
    unplaced: list[UnplacedItem] = field(default_factory=list)
    rejected: list[RejectedRow] = field(default_factory=list)
    day_plans: list[DayPlan] = field(default_factory=list)
    operations: list[UpdateOperation] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "placements": [p.to_dict() for p in self.placements],
            "unplaced":   [u.to_dict() for u in self.unplaced],
            "rejected":   [r.to_dict() for r in self.rejected],
            "day_plans":  [d.to_dict() for d in self.day_plans],
            "operations": [o.to_dict() for o in self.operations],
        }
