"""
modules/tool_usage/distance_tool.py
-------------------------------------
Travel-time tool using the Haversine formula with a configurable speed.
No external HTTP calls are made.

Config knobs (config.py):
  DEFAULT_METERS_PER_MINUTE     -- walking speed (default: 75 m/min ≈ 4.5 km/h)
  MAX_TRAVEL_MINUTES            -- upper clamp for one leg (90)
  MISSING_COORD_TRAVEL_MINUTES  -- fallback when a coordinate is unknown (10)
  SAME_SPOT_TRAVEL_MINUTES      -- fallback when both points coincide (5)
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from tripslot import config
from tripslot.modules.tool_usage.travel_cache import TravelTimeCache
from tripslot.schemas.schedule import Coordinates

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pure maths
# ---------------------------------------------------------------------------


def distance_meters(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two points (Haversine formula) in metres."""
    r = config.EARTH_RADIUS_METERS
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lam = math.radians(b.lng - a.lng)
    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    )
    return 2 * r * math.asin(min(1.0, math.sqrt(h)))


def estimate_travel_minutes(
    origin: Optional[Coordinates],
    destination: Optional[Coordinates],
    meters_per_minute: float = config.DEFAULT_METERS_PER_MINUTE,
) -> int:
    """
    Whole minutes to cover the straight line origin → destination.

    ceil(distance / speed) clamped to [0, MAX_TRAVEL_MINUTES].  Returns
    MISSING_COORD_TRAVEL_MINUTES when either end is unknown and
    SAME_SPOT_TRAVEL_MINUTES when the two points coincide.
    """
    if origin is None or destination is None:
        return config.MISSING_COORD_TRAVEL_MINUTES
    meters = distance_meters(origin, destination)
    if not math.isfinite(meters) or meters <= 0:
        return config.SAME_SPOT_TRAVEL_MINUTES
    speed = max(1.0, float(meters_per_minute))
    return max(0, min(config.MAX_TRAVEL_MINUTES, math.ceil(meters / speed)))


def centroid(points: list[Coordinates]) -> Coordinates | None:
    """Arithmetic mean of *points* (None for an empty list)."""
    if not points:
        return None
    return Coordinates(
        lat=sum(p.lat for p in points) / len(points),
        lng=sum(p.lng for p in points) / len(points),
    )


# ---------------------------------------------------------------------------
# DistanceTool
# ---------------------------------------------------------------------------


class DistanceTool:
    """
    Computes travel minutes between coordinates using the Haversine formula
    plus a constant speed.  An optional caller-owned TravelTimeCache is
    consulted before computing and filled afterwards.
    """

    def __init__(
        self,
        meters_per_minute: float = config.DEFAULT_METERS_PER_MINUTE,
        cache: TravelTimeCache | None = None,
    ) -> None:
        self.meters_per_minute = max(1.0, float(meters_per_minute))
        self.cache = cache

    def travel_minutes(
        self,
        origin: Optional[Coordinates],
        destination: Optional[Coordinates],
    ) -> int:
        """Return travel time in minutes (see estimate_travel_minutes)."""
        if origin is None or destination is None or self.cache is None:
            return estimate_travel_minutes(origin, destination, self.meters_per_minute)

        key = self._cache_key(origin, destination)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        minutes = estimate_travel_minutes(origin, destination, self.meters_per_minute)
        self.cache.set(key, minutes)
        return minutes

    def distance(self, origin: Coordinates, destination: Coordinates) -> float:
        """Return Haversine distance in metres."""
        return distance_meters(origin, destination)

    # -------------------------------------------------------------------------
    # Private
    # -------------------------------------------------------------------------

    def _cache_key(self, origin: Coordinates, destination: Coordinates) -> str:
        return (
            f"travel:{origin.lat:.6f},{origin.lng:.6f}:"
            f"{destination.lat:.6f},{destination.lng:.6f}:{self.meters_per_minute:g}"
        )
