"""Redis client for performance snapshots and cached statistics."""

import json
import logging
from typing import Any

from redis.asyncio import Redis

from app.core.config import settings

logger = logging.getLogger(__name__)

# Async Redis client
_redis_client: Redis | None = None


async def get_redis() -> Redis:
    """Get or create async Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = Redis.from_url(
            settings.redis_url,
            decode_responses=True,
        )
    return _redis_client


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.close()
        _redis_client = None


class RequestTimingStore:
    """Per-path request timings, one hash per path.

    Fields: ``count``, ``total_ms`` and ``max_ms``. Entries expire after a day
    without traffic so the report only covers recently served paths.
    """

    PREFIX = "perf:route:"
    INDEX_KEY = "perf:routes"
    TTL_SECONDS = 86400

    @classmethod
    async def record(cls, method: str, path: str, duration_ms: float) -> None:
        """Add one request to the path statistics."""
        redis = await get_redis()
        route = f"{method} {path}"
        key = f"{cls.PREFIX}{route}"

        current_max = await redis.hget(key, "max_ms")
        pipe = redis.pipeline()
        pipe.hincrby(key, "count", 1)
        pipe.hincrbyfloat(key, "total_ms", duration_ms)
        if current_max is None or duration_ms > float(current_max):
            pipe.hset(key, "max_ms", duration_ms)
        pipe.expire(key, cls.TTL_SECONDS)
        pipe.sadd(cls.INDEX_KEY, route)
        await pipe.execute()

    @classmethod
    async def get_report(cls) -> dict[str, Any]:
        """Summarize recorded routes, slowest average first."""
        redis = await get_redis()
        routes = await redis.smembers(cls.INDEX_KEY)

        endpoints = []
        total_requests = 0
        for route in routes:
            data = await redis.hgetall(f"{cls.PREFIX}{route}")
            if not data:
                await redis.srem(cls.INDEX_KEY, route)
                continue
            count = int(data.get("count", 0))
            total_ms = float(data.get("total_ms", 0.0))
            total_requests += count
            endpoints.append(
                {
                    "route": route,
                    "count": count,
                    "averageMs": round(total_ms / count, 2) if count else 0.0,
                    "maxMs": round(float(data.get("max_ms", 0.0)), 2),
                }
            )

        endpoints.sort(key=lambda item: item["averageMs"], reverse=True)
        return {
            "totalRequests": total_requests,
            "trackedEndpoints": len(endpoints),
            "endpoints": endpoints,
        }


class StatsCache:
    """TTL cache for expensive aggregate queries with hit/miss accounting."""

    PREFIX = "stats_cache:"
    HITS_KEY = "stats_cache_meta:hits"
    MISSES_KEY = "stats_cache_meta:misses"

    @classmethod
    async def get(cls, name: str) -> dict[str, Any] | None:
        """Return a cached payload, or None on a miss."""
        redis = await get_redis()
        raw = await redis.get(f"{cls.PREFIX}{name}")
        if raw is None:
            await redis.incr(cls.MISSES_KEY)
            return None
        await redis.incr(cls.HITS_KEY)
        return json.loads(raw)

    @classmethod
    async def set(
        cls, name: str, payload: dict[str, Any], ttl: int | None = None
    ) -> None:
        """Store a JSON-serializable payload."""
        redis = await get_redis()
        await redis.setex(
            f"{cls.PREFIX}{name}",
            ttl or settings.performance_cache_ttl_seconds,
            json.dumps(payload, default=str),
        )
        logger.debug(f"Cached stats payload: {name}")

    @classmethod
    async def invalidate(cls, name: str) -> None:
        redis = await get_redis()
        await redis.delete(f"{cls.PREFIX}{name}")

    @classmethod
    async def get_stats(cls) -> dict[str, Any]:
        """Get cache statistics."""
        redis = await get_redis()
        hits = int(await redis.get(cls.HITS_KEY) or 0)
        misses = int(await redis.get(cls.MISSES_KEY) or 0)

        cursor = 0
        keys = 0
        while True:
            cursor, batch = await redis.scan(cursor, match=f"{cls.PREFIX}*", count=1000)
            keys += len(batch)
            if cursor == 0:
                break

        lookups = hits + misses
        return {
            "hits": hits,
            "misses": misses,
            "hitRate": round(hits / lookups * 100, 1) if lookups else 0.0,
            "cachedKeys": keys,
        }
