"""Redis caching utilities for read-heavy endpoints.

Provides a decorator for caching expensive aggregate queries (analytics)
and a pattern-based invalidation helper called after batch writes.

Redis being unavailable is never fatal: the decorated function runs
uncached and a warning is logged.  ``settings.cache_enabled = False``
bypasses Redis entirely (tests, local development without Redis).
"""

import functools
import hashlib
import json
import logging
from datetime import date, datetime
from typing import Callable, Optional

import redis.asyncio as redis
from app.config import settings

logger = logging.getLogger(__name__)

# Global Redis connection pool
_redis_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Get or create Redis client connection."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=20,
        )
    return _redis_client


async def close_redis():
    """Close Redis connection (call on app shutdown)."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def cache_key(*args, **kwargs) -> str:
    """Deterministic hash of the arguments; ``"default"`` when there are none."""
    if not args and not kwargs:
        return "default"

    key_data = json.dumps({"args": args, "kwargs": kwargs}, sort_keys=True)
    return hashlib.md5(key_data.encode()).hexdigest()


def _cacheable_kwargs(kwargs: dict) -> dict:
    # Injected dependencies (AsyncSession, ...) and _private params are skipped
    out = {}
    for k, v in kwargs.items():
        if k.startswith("_"):
            continue
        if isinstance(v, (int, str, bool, float, type(None))):
            out[k] = v
        elif isinstance(v, (date, datetime)):
            out[k] = v.isoformat()
    return out


def _serialize(result):
    if hasattr(result, "model_dump"):
        return result.model_dump(mode="json")
    if isinstance(result, list) and result and hasattr(result[0], "model_dump"):
        return [item.model_dump(mode="json") for item in result]
    return result


def cached(ttl: int = 300, prefix: str = "cache"):
    """Decorator to cache an async function's JSON-serialisable result.

    Cache keys: {prefix}:{function_name}:{kwargs_hash}

    Example:
        @cached(ttl=120, prefix="analytics")
        async def production_analytics(db: AsyncSession = Depends(get_db)):
            ...
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            if not settings.cache_enabled:
                return await func(*args, **kwargs)

            key = f"{prefix}:{func.__name__}:{cache_key(**_cacheable_kwargs(kwargs))}"

            try:
                redis_client = await get_redis()
                cached_value = await redis_client.get(key)
                if cached_value:
                    logger.debug(f"Cache HIT: {key}")
                    return json.loads(cached_value)
            except redis.RedisError as e:
                logger.warning(f"Redis error (falling back to uncached): {e}")
                return await func(*args, **kwargs)

            logger.debug(f"Cache MISS: {key}")
            result = await func(*args, **kwargs)

            try:
                await redis_client.setex(key, ttl, json.dumps(_serialize(result)))
            except redis.RedisError as e:
                logger.warning(f"Failed to store cache key {key}: {e}")

            return result

        return wrapper

    return decorator


async def invalidate_cache(pattern: str):
    """Delete cache keys matching a Redis glob pattern, e.g. ``"analytics:*"``."""
    if not settings.cache_enabled:
        return

    try:
        redis_client = await get_redis()
        keys = [key async for key in redis_client.scan_iter(match=pattern)]
        if keys:
            await redis_client.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cache keys matching {pattern}")
    except redis.RedisError as e:
        logger.warning(f"Failed to invalidate cache: {e}")
