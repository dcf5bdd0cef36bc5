"""
api/routes/schedule.py
----------------------
POST /v1/schedule/auto
POST /v1/schedule/overlaps
POST /v1/schedule/alternatives

Thin adapters over the pure engine: request bodies are parsed by pydantic,
candidate / block rows are handed to the engine untouched (it normalises
them itself) and results are returned as plain JSON.

The travel-time cache and the perf logger are process-wide and built on
first use; tests replace them through app.dependency_overrides.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from tripslot import config
from tripslot.modules.observability.logger import StructuredLogger
from tripslot.modules.scheduling.alternatives import SlotActivity, rank_slot_alternatives
from tripslot.modules.scheduling.day_packer import schedule_activities
from tripslot.modules.scheduling.overlaps import CalendarBlock, PlannedItem, build_overlap_warnings
from tripslot.modules.scheduling.themes import infer_day_theme_from_message
from tripslot.modules.scheduling.time_utils import enumerate_iso_dates
from tripslot.modules.tool_usage.travel_cache import InMemoryTravelTimeCache, TravelTimeCache
from tripslot.modules.validation import coerce_coordinates, coerce_open_hours

logger = logging.getLogger(__name__)

router = APIRouter()

SESSION_ID_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"

# ── Shared resources ───────────────────────────────────────────────────────────

_travel_cache: Optional[TravelTimeCache] = None
_perf_logger: Optional[StructuredLogger] = None


def get_travel_cache() -> TravelTimeCache:
    global _travel_cache
    if _travel_cache is None:
        if config.USE_REDIS_TRAVEL_CACHE:
            from tripslot.db.redis_client import RedisTravelTimeCache
            _travel_cache = RedisTravelTimeCache()
            logger.info("Travel-time cache: Redis at %s:%d", config.REDIS_HOST, config.REDIS_PORT)
        else:
            _travel_cache = InMemoryTravelTimeCache()
            logger.info("Travel-time cache: in-memory")
    return _travel_cache


def get_perf_logger() -> Optional[StructuredLogger]:
    global _perf_logger
    if config.ENABLE_PERF_LOG and _perf_logger is None:
        _perf_logger = StructuredLogger()
    return _perf_logger


# ── Request schemas ────────────────────────────────────────────────────────────

class AutoScheduleRequest(BaseModel):
    candidates:   list[dict[str, Any]] = Field(default_factory=list)
    fixed_blocks: list[dict[str, Any]] = Field(default_factory=list)
    date_pool:    list[str] = Field(default_factory=list, description="ISO-8601 dates YYYY-MM-DD")
    date_from:    Optional[str] = Field(None, description="Used with date_to when date_pool is empty")
    date_to:      Optional[str] = None
    preferences:  Optional[dict[str, Any]] = None
    strategy:     Literal["kmeans", "grid"] = "kmeans"
    requested_theme: Optional[str] = None
    message:      Optional[str] = Field(None, description="Chat text; used to infer a theme when none is given")
    max_operations: int = Field(config.DEFAULT_MAX_OPERATIONS, ge=0)
    session_id:   str = Field("default", pattern=SESSION_ID_PATTERN)


class PlannedItemIn(BaseModel):
    id: str
    name: str
    date: str
    start_time: str
    end_time: str


class CalendarBlockIn(BaseModel):
    id: str
    title: str = ""
    kind: Optional[str] = None
    date: str
    start_time: str
    end_time: str


class OverlapRequest(BaseModel):
    planned: list[PlannedItemIn] = Field(default_factory=list)
    blocks:  list[CalendarBlockIn] = Field(default_factory=list)
    max_warnings: int = 8


class SlotActivityIn(BaseModel):
    id: str
    name: str = ""
    destination_id: Optional[str] = None
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    type_tags: list[str] = Field(default_factory=list)
    coordinates: Optional[dict[str, Any]] = None     # {"lat": .., "lng": ..}
    open_hours: Optional[list[dict[str, Any]]] = None


class AlternativesRequest(BaseModel):
    target: SlotActivityIn
    candidates: list[SlotActivityIn] = Field(default_factory=list)
    max_alternatives: int = 3


# ── Converters ─────────────────────────────────────────────────────────────────

def _to_slot_activity(body: SlotActivityIn) -> SlotActivity:
    coords, _ = coerce_coordinates(body.coordinates)
    return SlotActivity(
        id=body.id.strip(),
        name=body.name,
        destination_id=body.destination_id,
        date=body.date,
        start_time=body.start_time,
        end_time=body.end_time,
        type_tags=tuple(body.type_tags),
        coordinates=coords,
        open_hours=coerce_open_hours(body.open_hours),
    )


# ── Routes ─────────────────────────────────────────────────────────────────────

@router.post("/auto", summary="Auto-schedule candidates into free time")
def auto_schedule(
    req: AutoScheduleRequest,
    travel_cache: TravelTimeCache = Depends(get_travel_cache),
    perf_logger: Optional[StructuredLogger] = Depends(get_perf_logger),
) -> dict:
    date_pool = list(req.date_pool)
    if not date_pool and req.date_from and req.date_to:
        date_pool = enumerate_iso_dates(req.date_from, req.date_to, config.DEFAULT_MAX_DAYS)

    theme = (req.requested_theme or "").strip().lower() or infer_day_theme_from_message(req.message)

    try:
        result = schedule_activities(
            req.candidates,
            fixed_blocks=req.fixed_blocks,
            date_pool=date_pool,
            preferences=req.preferences,
            strategy=req.strategy,
            requested_theme=theme,
            max_operations=req.max_operations,
            travel_cache=travel_cache,
            perf_logger=perf_logger,
            session_id=req.session_id,
        )
    finally:
        if perf_logger is not None:
            perf_logger.close(req.session_id)
    return {"requested_theme": theme, **result.to_dict()}


@router.post("/overlaps", summary="Warn about planned items overlapping calendar blocks")
def overlaps(req: OverlapRequest) -> dict:
    warnings = build_overlap_warnings(
        [PlannedItem(**p.model_dump()) for p in req.planned],
        [CalendarBlock(**b.model_dump()) for b in req.blocks],
        max_warnings=req.max_warnings,
    )
    return {"warnings": warnings}


@router.post("/alternatives", summary="Rank swap-in alternatives for one slot")
def alternatives(req: AlternativesRequest) -> dict:
    ranked = rank_slot_alternatives(
        _to_slot_activity(req.target),
        [_to_slot_activity(c) for c in req.candidates],
        max_alternatives=req.max_alternatives,
    )
    return {"alternatives": [a.to_dict() for a in ranked]}
