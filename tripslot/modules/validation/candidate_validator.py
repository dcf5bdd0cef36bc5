"""
modules/validation/candidate_validator.py
------------------------------------------
Boundary normalisation applied once, before any scheduling work.

Raw rows from the activity lookup, fixed-block provider and preferences
provider arrive as loosely-typed dicts (camelCase or snake_case keys) or as
the dataclasses in schemas/schedule.py.  Each is turned into a strongly-typed
record here, or rejected with a collected reason.  Nothing downstream
coerces values again.

  Candidate:
    ✓ Non-empty id (required; duplicates rejected)
    ✓ Name (synthesised as "Activity <id>" when blank)
    ✓ Coordinates finite, lat in [-90, 90], lng in [-180, 180] (else dropped)
    ✓ Duration parsed and clamped to [15, 480] (default 60)
    ✓ preferred/locked dates are valid ISO dates (else dropped)
    ✓ Opening-hours rows with weekday 0..6 and in-range hour/minute

  Fixed block:
    ✓ Valid ISO date
    ✓ start/end (minutes or HH:MM) clamped to [0, 1440], end > start

  Preferences:
    ✓ pace ∈ relaxed|moderate|packed ("balanced" → moderate)
    ✓ travel_mode ∈ walking|bicycling|driving|transit
    ✓ day window parseable (else defaults)

Usage:
    from tripslot.modules.validation import normalize_candidates

    candidates, rejected = normalize_candidates(rows)
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from tripslot import config
from tripslot.modules.scheduling.time_utils import (
    clamp_minute,
    format_minutes_to_hhmm,
    is_iso_date_string,
    parse_duration_to_minutes,
    parse_time_to_minutes,
)
from tripslot.schemas.schedule import (
    Candidate,
    Coordinates,
    FixedBlock,
    OpenHoursRow,
    RejectedRow,
    SchedulingPreferences,
)

logger = logging.getLogger(__name__)

_PACE_ALIASES = {"balanced": "moderate", "normal": "moderate"}


# ── Result dataclass ───────────────────────────────────────────────────────────

@dataclass
class ValidationResult:
    """
    Outcome of a single normalisation.

    Attributes:
        valid:    True iff there are zero errors (the row is usable).
        errors:   Reasons the row was rejected.
        warnings: Fields that were dropped or clamped while keeping the row.
        record:   The input record (for logging purposes).
    """
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    record: dict = field(default_factory=dict, repr=False)

    def __bool__(self) -> bool:
        return self.valid


# ── Field helpers ──────────────────────────────────────────────────────────────

def _as_mapping(raw: Any) -> dict[str, Any]:
    if isinstance(raw, Mapping):
        return dict(raw)
    if dataclasses.is_dataclass(raw) and not isinstance(raw, type):
        return {f.name: getattr(raw, f.name) for f in dataclasses.fields(raw)}
    return {}


def _pick(record: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in record and record[name] is not None:
            return record[name]
    return None


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _finite_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _int_in_range(value: Any, low: int, high: int) -> int | None:
    number = _finite_number(value)
    if number is None or number != int(number):
        return None
    number = int(number)
    return number if low <= number <= high else None


def coerce_coordinates(raw: Any) -> tuple[Coordinates | None, str | None]:
    """
    Parse ``{"lat": .., "lng"|"lon": ..}`` (or a Coordinates instance).

    Returns (coordinates, warning).  Absent input is (None, None); invalid
    input is (None, reason).
    """
    if raw is None:
        return None, None
    if isinstance(raw, Coordinates):
        lat, lng = raw.lat, raw.lng
    elif isinstance(raw, Mapping):
        lat, lng = raw.get("lat"), _pick(raw, "lng", "lon")
    else:
        return None, f"coordinates={raw!r} must be an object with lat/lng"

    lat_f, lng_f = _finite_number(lat), _finite_number(lng)
    if lat_f is None or lng_f is None:
        return None, f"coordinates must be finite numbers (got lat={lat!r}, lng={lng!r})"
    if not (-90.0 <= lat_f <= 90.0) or not (-180.0 <= lng_f <= 180.0):
        return None, f"coordinates ({lat_f}, {lng_f}) are outside the valid lat/lng range"
    return Coordinates(lat_f, lng_f), None


def coerce_open_hours(raw: Any, warnings: list[str] | None = None) -> tuple[OpenHoursRow, ...] | None:
    """Keep only well-formed opening-hours rows; problems are appended to *warnings*."""
    if warnings is None:
        warnings = []
    if raw is None:
        return None
    if not isinstance(raw, (list, tuple)):
        warnings.append(f"open_hours={raw!r} must be a list; ignored")
        return None

    rows: list[OpenHoursRow] = []
    for i, item in enumerate(raw):
        rec = _as_mapping(item)
        day   = _int_in_range(rec.get("day"), 0, 6)
        o_h   = _int_in_range(_pick(rec, "open_hour", "openHour"), 0, 23)
        o_m   = _int_in_range(_pick(rec, "open_minute", "openMinute"), 0, 59)
        c_h   = _int_in_range(_pick(rec, "close_hour", "closeHour"), 0, 23)
        c_m   = _int_in_range(_pick(rec, "close_minute", "closeMinute"), 0, 59)
        if None in (day, o_h, o_m, c_h, c_m):
            warnings.append(f"open_hours[{i}] is malformed; dropped")
            continue
        rows.append(OpenHoursRow(day=day, open_hour=o_h, open_minute=o_m, close_hour=c_h, close_minute=c_m))
    return tuple(rows)


def _coerce_minute(record: Mapping[str, Any], minute_keys: tuple[str, ...], time_keys: tuple[str, ...]) -> int | None:
    minutes = _finite_number(_pick(record, *minute_keys))
    if minutes is not None:
        return clamp_minute(minutes)
    parsed = parse_time_to_minutes(_pick(record, *time_keys))
    return clamp_minute(parsed) if parsed is not None else None


# ── Candidate ──────────────────────────────────────────────────────────────────

def normalize_candidate(raw: Any) -> tuple[Candidate | None, ValidationResult]:
    """Build a Candidate from *raw* or explain why it cannot be used."""
    record = _as_mapping(raw)
    errors: list[str] = []
    warnings: list[str] = []

    cand_id = _text(_pick(record, "id", "itinerary_activity_id", "itineraryActivityId"))
    if not cand_id:
        errors.append("id must not be empty or NULL")
        return None, ValidationResult(valid=False, errors=errors, record=record)

    name = _text(_pick(record, "name", "title")) or f"Activity {cand_id}"

    coords, warning = coerce_coordinates(_pick(record, "coordinates", "coords"))
    if warning:
        warnings.append(warning)

    raw_duration = _pick(record, "duration_minutes", "durationMinutes", "durationMin", "duration")
    duration = parse_duration_to_minutes(raw_duration)
    if duration is None:
        if raw_duration is not None:
            warnings.append(f"duration={raw_duration!r} is not a positive duration; using default")
        duration = config.DEFAULT_DURATION_MINUTES
    clamped = max(config.MIN_DURATION_MINUTES, min(config.MAX_DURATION_MINUTES, duration))
    if clamped != duration:
        warnings.append(f"duration={duration} clamped to {clamped}")

    dates: dict[str, str | None] = {}
    for field_name, keys in (
        ("preferred_date", ("preferred_date", "preferredDate")),
        ("locked_date",    ("locked_date", "lockedDate")),
    ):
        value = _pick(record, *keys)
        if value is not None and not is_iso_date_string(value):
            warnings.append(f"{field_name}={value!r} is not a valid ISO-8601 date; ignored")
            value = None
        dates[field_name] = value

    tags_raw = _pick(record, "type_tags", "typeTags", "types") or ()
    if isinstance(tags_raw, str):
        tags_raw = (tags_raw,)
    type_tags = tuple(str(t).strip() for t in tags_raw if str(t or "").strip())

    open_hours = coerce_open_hours(_pick(record, "open_hours", "openHours"), warnings)

    cand = Candidate(
        id=cand_id,
        name=name,
        duration_minutes=clamped,
        coordinates=coords,
        type_tags=type_tags,
        preferred_date=dates["preferred_date"],
        locked_date=dates["locked_date"],
        open_hours=open_hours,
    )
    return cand, ValidationResult(valid=True, warnings=warnings, record=record)


def normalize_candidates(rows: Iterable[Any]) -> tuple[list[Candidate], list[RejectedRow]]:
    """
    Normalise every row; returns (candidates in input order, rejected rows).
    A repeated id keeps its first occurrence.
    """
    candidates: list[Candidate] = []
    rejected: list[RejectedRow] = []
    seen: set[str] = set()

    for index, raw in enumerate(rows or ()):
        cand, result = normalize_candidate(raw)
        if cand is not None and cand.id in seen:
            result = ValidationResult(valid=False, errors=[f"duplicate id {cand.id!r}"], record=result.record)
            cand = None
        if cand is None:
            row_id = _text(_pick(result.record, "id", "itinerary_activity_id", "itineraryActivityId"))
            rejected.append(RejectedRow(index=index, id=row_id, errors=result.errors))
            logger.warning("Rejected candidate #%d %r: %s", index, row_id, "; ".join(result.errors))
            continue
        for warning in result.warnings:
            logger.debug("Candidate %r: %s", cand.id, warning)
        seen.add(cand.id)
        candidates.append(cand)

    if rejected:
        logger.warning(
            "%d/%d candidate rows rejected; %d passed.",
            len(rejected), len(rejected) + len(candidates), len(candidates),
        )
    return candidates, rejected


# ── Fixed block ────────────────────────────────────────────────────────────────

def normalize_fixed_block(raw: Any) -> tuple[FixedBlock | None, ValidationResult]:
    record = _as_mapping(raw)
    errors: list[str] = []

    block_date = record.get("date")
    if not is_iso_date_string(block_date):
        errors.append(f"date={block_date!r} is not a valid ISO-8601 date")

    start = _coerce_minute(record, ("start_minute", "startMinute", "startMin"), ("start_time", "startTime"))
    end   = _coerce_minute(record, ("end_minute", "endMinute", "endMin"), ("end_time", "endTime"))
    if start is None or end is None:
        errors.append("start/end must be minutes or HH:MM strings")
    elif end <= start:
        errors.append(f"end ({format_minutes_to_hhmm(end)}) must be after start ({format_minutes_to_hhmm(start)})")

    coords, warning = coerce_coordinates(_pick(record, "coordinates", "coords"))
    warnings = [warning] if warning else []

    if errors:
        return None, ValidationResult(valid=False, errors=errors, warnings=warnings, record=record)
    return (
        FixedBlock(date=block_date, start_minute=start, end_minute=end, coordinates=coords),
        ValidationResult(valid=True, warnings=warnings, record=record),
    )


def normalize_fixed_blocks(rows: Iterable[Any]) -> list[FixedBlock]:
    """Normalise fixed blocks; unusable rows are logged and dropped."""
    blocks: list[FixedBlock] = []
    for index, raw in enumerate(rows or ()):
        block, result = normalize_fixed_block(raw)
        if block is None:
            logger.warning("Dropped fixed block #%d: %s", index, "; ".join(result.errors))
            continue
        blocks.append(block)
    return blocks


# ── Preferences ────────────────────────────────────────────────────────────────

def normalize_preferences(raw: Any) -> SchedulingPreferences:
    """
    Build SchedulingPreferences from a dict / dataclass / None, replacing
    unknown enum values with the configured defaults.  The day window is
    validated later by resolve_preferences().
    """
    record = _as_mapping(raw)

    pace = str(record.get("pace") or config.DEFAULT_PACE).strip().lower()
    pace = _PACE_ALIASES.get(pace, pace)
    if pace not in config.PACE_VALUES:
        logger.warning("Unknown pace %r; using %r", pace, config.DEFAULT_PACE)
        pace = config.DEFAULT_PACE

    mode = str(_pick(record, "travel_mode", "travelMode") or config.DEFAULT_TRAVEL_MODE).strip().lower()
    if mode not in config.TRAVEL_MODE_VALUES:
        logger.warning("Unknown travel mode %r; using %r", mode, config.DEFAULT_TRAVEL_MODE)
        mode = config.DEFAULT_TRAVEL_MODE

    day_start = _pick(record, "day_start", "dayStart")
    day_end   = _pick(record, "day_end", "dayEnd")
    interests_raw = record.get("interests") or ()
    if isinstance(interests_raw, str):
        interests_raw = (interests_raw,)
    interests = tuple(str(i).strip().lower() for i in interests_raw if str(i or "").strip())

    return SchedulingPreferences(
        day_start=str(day_start) if day_start is not None else config.DEFAULT_DAY_START,
        day_end=str(day_end) if day_end is not None else config.DEFAULT_DAY_END,
        pace=pace,
        travel_mode=mode,
        interests=interests,
    )
