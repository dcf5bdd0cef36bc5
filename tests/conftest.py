"""Pytest fixtures for offline scheduling tests."""

from __future__ import annotations

import fnmatch
import os
from typing import Any, Dict

import pytest

# Keep config deterministic regardless of a developer's .env.
os.environ.setdefault("USE_REDIS_TRAVEL_CACHE", "false")
os.environ.setdefault("ENABLE_PERF_LOG", "false")

from tripslot.schemas.schedule import Candidate, Coordinates, FixedBlock  # noqa: E402

SATURDAY = "2024-06-01"
SUNDAY = "2024-06-02"
MONDAY = "2024-06-03"


class FakeRedis:
    """In-memory stand-in for redis.Redis covering the calls the cache makes."""

    def __init__(self) -> None:
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}

    def get(self, key: str) -> str | None:
        return self.store.get(key)

    def setex(self, key: str, ttl: int, value: str) -> None:
        self.store[key] = value
        self.ttls[key] = ttl

    def scan_iter(self, pattern: str):
        return [k for k in list(self.store) if fnmatch.fnmatch(k, pattern)]

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                self.ttls.pop(key, None)
                removed += 1
        return removed


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def make_candidate():
    """Factory for Candidate records with sensible defaults."""

    def _factory(
        cand_id: str,
        lat: float | None = None,
        lng: float | None = None,
        duration: int = 60,
        **kwargs: Any,
    ) -> Candidate:
        coords = Coordinates(lat, lng) if lat is not None and lng is not None else None
        kwargs.setdefault("name", f"Activity {cand_id}")
        return Candidate(id=cand_id, duration_minutes=duration, coordinates=coords, **kwargs)

    return _factory


@pytest.fixture
def make_block():
    def _factory(date: str, start: int, end: int, lat: float | None = None, lng: float | None = None) -> FixedBlock:
        coords = Coordinates(lat, lng) if lat is not None and lng is not None else None
        return FixedBlock(date=date, start_minute=start, end_minute=end, coordinates=coords)

    return _factory
