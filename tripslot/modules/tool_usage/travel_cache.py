"""
modules/tool_usage/travel_cache.py
----------------------------------
Caller-owned travel-time caches.

A cache is created by the caller, passed into one or more scheduling runs
and discarded by the caller.  Entries expire after an explicit TTL and the
in-memory variant evicts least-recently-used keys when full.

The Redis-backed variant lives in db/redis_client.py.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Callable, Protocol

from tripslot import config


class TravelTimeCache(Protocol):
    """Minimal interface the DistanceTool needs."""

    def get(self, key: str) -> int | None: ...

    def set(self, key: str, minutes: int) -> None: ...


class InMemoryTravelTimeCache:
    """Thread-safe TTL + LRU cache of travel minutes keyed by string."""

    def __init__(
        self,
        ttl_seconds: float = config.TRAVEL_CACHE_TTL_SECONDS,
        max_entries: int = config.TRAVEL_CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0 (got {ttl_seconds!r})")
        if max_entries <= 0:
            raise ValueError(f"max_entries must be > 0 (got {max_entries!r})")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: OrderedDict[str, tuple[float, int]] = OrderedDict()  # key -> (expires_at, minutes)

    # ── public API ────────────────────────────────────────────────────────

    def get(self, key: str) -> int | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, minutes = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return minutes

    def set(self, key: str, minutes: int) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + self.ttl_seconds, int(minutes))
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        with self._lock:
            now = self._clock()
            stale = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
            for k in stale:
                del self._entries[k]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
