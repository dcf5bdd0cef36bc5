"""
config.py
---------
Central configuration for the tripslot scheduling engine.
Every value can be overridden from the environment (or a .env file that
sits next to this module).  Nothing here is mutated at runtime.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the package directory (if it exists).  Won't override vars
# already set in the shell.
_env_path = Path(__file__).parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=False)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# ── Day window ────────────────────────────────────────────────────────────────
DEFAULT_DAY_START: str = os.getenv("DEFAULT_DAY_START", "09:00")
DEFAULT_DAY_END:   str = os.getenv("DEFAULT_DAY_END",   "18:00")
# A day window shorter than this is treated as nonsensical and reset.
MIN_DAY_WINDOW_MINUTES: int = 60

# ── Candidate durations (minutes) ─────────────────────────────────────────────
MIN_DURATION_MINUTES:     int = 15
MAX_DURATION_MINUTES:     int = 8 * 60
DEFAULT_DURATION_MINUTES: int = int(os.getenv("DEFAULT_DURATION_MINUTES", "60"))

# ── Free time ─────────────────────────────────────────────────────────────────
MIN_FREE_WINDOW_MINUTES: int = 10

# ── Travel estimate ───────────────────────────────────────────────────────────
# Haversine + constant speed; no routing API is consulted.
EARTH_RADIUS_METERS:          float = 6_371_000.0
DEFAULT_METERS_PER_MINUTE:    float = float(os.getenv("DEFAULT_METERS_PER_MINUTE", "75"))  # ~4.5 km/h
MAX_TRAVEL_MINUTES:           int   = 90
MISSING_COORD_TRAVEL_MINUTES: int   = 10
SAME_SPOT_TRAVEL_MINUTES:     int   = 5

TRAVEL_MODE_METERS_PER_MINUTE: dict[str, float] = {
    "walking":   DEFAULT_METERS_PER_MINUTE,
    "bicycling": 250.0,
    "driving":   500.0,
    "transit":   400.0,
}

# ── Preferences ───────────────────────────────────────────────────────────────
PACE_VALUES:        tuple[str, ...] = ("relaxed", "moderate", "packed")
TRAVEL_MODE_VALUES: tuple[str, ...] = ("walking", "bicycling", "driving", "transit")
DEFAULT_PACE:        str = os.getenv("DEFAULT_PACE", "moderate")
DEFAULT_TRAVEL_MODE: str = os.getenv("DEFAULT_TRAVEL_MODE", "walking")

PACE_DAILY_CAPS: dict[str, int] = {
    "relaxed":  3,
    "moderate": 4,
    "packed":   6,
}

# Buffer between consecutive stops, per travel mode.
TRAVEL_MODE_BUFFERS: dict[str, int] = {
    "walking":   15,
    "bicycling": 10,
    "driving":   10,
    "transit":   15,
}

# ── Clustering ────────────────────────────────────────────────────────────────
GRID_RESOLUTION_DEG:    float = float(os.getenv("GRID_RESOLUTION_DEG", "0.02"))
KMEANS_MAX_ITERATIONS:  int   = 8
THEME_MATCH_WEIGHT:     int   = 10
INTEREST_MATCH_WEIGHT:  int   = 3

# ── Run budgets ───────────────────────────────────────────────────────────────
DEFAULT_MAX_OPERATIONS: int = int(os.getenv("DEFAULT_MAX_OPERATIONS", "200"))
DEFAULT_MAX_DAYS:       int = int(os.getenv("DEFAULT_MAX_DAYS", "14"))

# ── Travel-time cache ─────────────────────────────────────────────────────────
TRAVEL_CACHE_TTL_SECONDS: int = int(os.getenv("TRAVEL_CACHE_TTL_SECONDS", "3600"))
TRAVEL_CACHE_MAX_ENTRIES: int = int(os.getenv("TRAVEL_CACHE_MAX_ENTRIES", "5000"))
USE_REDIS_TRAVEL_CACHE:   bool = _env_bool("USE_REDIS_TRAVEL_CACHE", "false")

# ── Redis ─────────────────────────────────────────────────────────────────────
REDIS_HOST:     str = os.getenv("REDIS_HOST",     "localhost")
REDIS_PORT:     int = int(os.getenv("REDIS_PORT", "6379"))
REDIS_DB:       int = int(os.getenv("REDIS_DB",   "0"))
REDIS_PASSWORD: str = os.getenv("REDIS_PASSWORD", "")

# ── Observability ─────────────────────────────────────────────────────────────
LOGS_DIR:        str  = os.getenv("LOGS_DIR", str(Path(__file__).resolve().parent.parent / "logs"))
ENABLE_PERF_LOG: bool = _env_bool("ENABLE_PERF_LOG", "false")

# ── API ───────────────────────────────────────────────────────────────────────
API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))
CORS_ORIGINS: list[str] = (
    os.getenv("CORS_ORIGINS", "").split(",") if os.getenv("CORS_ORIGINS") else ["*"]
)
