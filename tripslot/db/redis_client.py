"""
db/redis_client.py
-------------------
redis-py backed travel-time cache.

Key schema:

  travel:{lat1},{lng1}:{lat2},{lng2}:{meters_per_minute}
       Type : String (int as text)
       TTL  : TRAVEL_CACHE_TTL_SECONDS (default 3,600 s)
       Value: travel minutes  e.g. "18"

Unlike a process-wide singleton, each RedisTravelTimeCache is built and
owned by the caller and handed to the scheduling run explicitly.

Environment variables (set in config.py):
    REDIS_HOST                default: localhost
    REDIS_PORT                default: 6379
    REDIS_DB                  default: 0
    REDIS_PASSWORD            default: ""  (empty = no auth)
    TRAVEL_CACHE_TTL_SECONDS  default: 3600
"""

from __future__ import annotations

from typing import Any

import redis

from tripslot import config


def build_redis_client() -> redis.Redis:
    """Create a Redis client from config (decode_responses=True)."""
    kwargs: dict[str, Any] = {
        "host":             config.REDIS_HOST,
        "port":             config.REDIS_PORT,
        "db":               config.REDIS_DB,
        "decode_responses": True,   # return str, not bytes
    }
    if config.REDIS_PASSWORD:
        kwargs["password"] = config.REDIS_PASSWORD
    return redis.Redis(**kwargs)


class RedisTravelTimeCache:
    """TravelTimeCache implementation storing entries with SETEX."""

    def __init__(
        self,
        client: redis.Redis | None = None,
        ttl_seconds: int = config.TRAVEL_CACHE_TTL_SECONDS,
        prefix: str = "tripslot",
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0 (got {ttl_seconds!r})")
        self.client = client or build_redis_client()
        self.ttl_seconds = int(ttl_seconds)
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def get(self, key: str) -> int | None:
        """Return cached minutes, or None on a miss."""
        val = self.client.get(self._key(key))
        return int(val) if val is not None else None

    def set(self, key: str, minutes: int) -> None:
        """Write one entry with the configured TTL."""
        self.client.setex(self._key(key), self.ttl_seconds, str(int(minutes)))

    def invalidate(self) -> int:
        """
        Delete every key under this cache's prefix.

        Returns: number of keys deleted.
        """
        keys = list(self.client.scan_iter(f"{self.prefix}:*"))
        if keys:
            return self.client.delete(*keys)
        return 0
