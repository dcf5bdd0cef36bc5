"""
db/
----
Storage helpers for the scheduling engine.

The engine itself persists nothing.  This package only offers an optional
Redis backing for the caller-owned travel-time cache:

  Redis (redis-py): volatile hot cache
    tripslot:travel:{lat1},{lng1}:{lat2},{lng2}:{mpm}  TTL = TRAVEL_CACHE_TTL_SECONDS

Public exports:
    from tripslot.db import RedisTravelTimeCache, build_redis_client
"""
from tripslot.db.redis_client import RedisTravelTimeCache, build_redis_client

__all__ = ["RedisTravelTimeCache", "build_redis_client"]
