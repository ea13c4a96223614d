"""Tests for caching functionality.

Redis is replaced by an in-memory fake so the cached path can be exercised
without a server.
"""

import fnmatch

import pytest
import redis.asyncio as redis

from app.config import settings
from app.utils import cache
from app.utils.cache import _cacheable_kwargs, cache_key, cached, invalidate_cache


class FakeRedis:
    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key):
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl

    async def scan_iter(self, match="*"):
        for key in list(self.store):
            if fnmatch.fnmatch(key, match):
                yield key

    async def delete(self, *keys):
        for key in keys:
            self.store.pop(key, None)


class BrokenRedis:
    async def get(self, key):
        raise redis.ConnectionError("connection refused")

    async def setex(self, key, ttl, value):
        raise redis.ConnectionError("connection refused")

    async def scan_iter(self, match="*"):
        raise redis.ConnectionError("connection refused")
        yield  # pragma: no cover


@pytest.fixture
def fake_redis(monkeypatch):
    client = FakeRedis()

    async def get_fake():
        return client

    monkeypatch.setattr(settings, "cache_enabled", True)
    monkeypatch.setattr(cache, "get_redis", get_fake)
    return client


@pytest.fixture
def broken_redis(monkeypatch):
    async def get_broken():
        return BrokenRedis()

    monkeypatch.setattr(settings, "cache_enabled", True)
    monkeypatch.setattr(cache, "get_redis", get_broken)


@pytest.mark.cache
class TestCacheUtility:
    """Cache helpers that do not need a Redis server."""

    def test_cache_key_generation(self):
        key1 = cache_key(limit=50, offset=0)
        key2 = cache_key(offset=0, limit=50)
        key3 = cache_key(limit=100, offset=0)

        assert key1 == key2
        assert key1 != key3
        assert cache_key() == "default"

    def test_cacheable_kwargs_skip_dependencies(self):
        class FakeSession:
            pass

        kwargs = _cacheable_kwargs({"db": FakeSession(), "stage": "fruiting", "_internal": 1})
        assert kwargs == {"stage": "fruiting"}

    @pytest.mark.asyncio
    async def test_disabled_cache_calls_through(self):
        assert settings.cache_enabled is False
        call_count = 0

        @cached(ttl=10, prefix="test")
        async def expensive_function(arg1: int):
            nonlocal call_count
            call_count += 1
            return {"result": arg1}

        assert await expensive_function(arg1=1) == {"result": 1}
        assert await expensive_function(arg1=1) == {"result": 1}
        assert call_count == 2

    @pytest.mark.asyncio
    async def test_invalidate_is_noop_when_disabled(self):
        await invalidate_cache("analytics:*")


@pytest.mark.cache
@pytest.mark.asyncio
class TestCachedDecorator:
    async def test_hit_and_miss(self, fake_redis):
        call_count = 0

        @cached(ttl=10, prefix="test")
        async def expensive_function(arg1: int, arg2: str):
            nonlocal call_count
            call_count += 1
            return {"result": arg1 + len(arg2)}

        # First call - cache MISS
        assert await expensive_function(arg1=10, arg2="hello") == {"result": 15}
        assert call_count == 1

        # Second call - cache HIT
        assert await expensive_function(arg1=10, arg2="hello") == {"result": 15}
        assert call_count == 1

        # Different args - cache MISS
        assert await expensive_function(arg1=20, arg2="world") == {"result": 25}
        assert call_count == 2

        assert all(key.startswith("test:expensive_function:") for key in fake_redis.store)
        assert set(fake_redis.ttls.values()) == {10}

    async def test_pydantic_results_are_stored_as_json(self, fake_redis):
        from app.schemas.analytics import MonthlyYieldOut

        @cached(ttl=60, prefix="analytics")
        async def monthly():
            return [MonthlyYieldOut(month="2025-04", harvested_kg=2.5, damaged_kg=0.1, batch_count=1)]

        first = await monthly()
        assert first[0].month == "2025-04"
        second = await monthly()
        assert second == [
            {"month": "2025-04", "harvested_kg": 2.5, "damaged_kg": 0.1, "batch_count": 1}
        ]

    async def test_invalidation(self, fake_redis):
        fake_redis.store.update(
            {"analytics:a:1": "1", "analytics:b:2": "2", "other:c:3": "3"}
        )
        await invalidate_cache("analytics:*")
        assert list(fake_redis.store) == ["other:c:3"]

    async def test_redis_errors_fall_back_to_uncached(self, broken_redis):
        call_count = 0

        @cached(ttl=10, prefix="test")
        async def expensive_function():
            nonlocal call_count
            call_count += 1
            return {"ok": True}

        assert await expensive_function() == {"ok": True}
        assert await expensive_function() == {"ok": True}
        assert call_count == 2

        # invalidation failures are logged, not raised
        await invalidate_cache("test:*")
