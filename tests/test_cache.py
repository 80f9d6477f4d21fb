"""Tests for the cache policy manager.

Test Strategy:
1. TTL boundaries for every tournament state
2. Multi-tournament TTL picks the most volatile tournament
3. Cache key determinism and fixed dimension order
4. In-memory backend expiry
5. Policy degrades to a miss / dropped write when the backend fails
6. Redis backend wraps redis errors
"""
from datetime import timedelta

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from esports_stats.core.exceptions import CacheBackendError
from esports_stats.services.cache import (
    CachePolicy,
    InMemoryCacheBackend,
    RedisCacheBackend,
    build_cache_key,
    ttl_for,
    ttl_for_many,
)
from esports_stats.utils.timezone import utc_now


class TestTtlPolicy:

    @pytest.mark.parametrize("offset,expected", [
        (None, 300),
        (timedelta(days=1), 3600),
        (timedelta(days=2), 3600),
        (timedelta(days=3), 604800),
        (timedelta(days=10), 604800),
        (timedelta(days=30), 604800),
        (timedelta(days=31), 2592000),
        (timedelta(days=40), 2592000),
        (-timedelta(days=1), 300),
    ])
    def test_ttl_by_end_date(self, offset, expected):
        now = utc_now()
        date_end = None if offset is None else now - offset

        assert ttl_for(date_end, now) == expected

    def test_ended_today_is_recent(self):
        now = utc_now()

        assert ttl_for(now - timedelta(hours=3), now) == 3600

    def test_many_takes_the_shortest(self):
        now = utc_now()
        date_ends = [now - timedelta(days=40), now - timedelta(days=10), None]

        assert ttl_for_many(date_ends, now) == 300
        assert ttl_for_many(date_ends[:2], now) == 604800

    def test_many_with_nothing_is_live(self):
        assert ttl_for_many([]) == 300


class TestCacheKey:

    def test_deterministic_regardless_of_argument_order(self):
        first = build_cache_key("champions", tournament="X", player="Y")
        second = build_cache_key("champions", player="Y", tournament="X")

        assert first == second == "champions:player:Y:tournament:X"

    def test_fixed_dimension_order(self):
        key = build_cache_key("players", limit=10, team="G2 Esports", page=2, player="Caps", tournament="T")

        assert key == "players:player:Caps:team:G2 Esports:tournament:T:page:2:limit:10"

    def test_no_dimensions(self):
        assert build_cache_key("players") == "players:all"

    def test_dimensions_are_keyword_only(self):
        with pytest.raises(TypeError):
            build_cache_key("players", "Caps")


class TestInMemoryBackend:

    @pytest.mark.asyncio
    async def test_set_and_get(self):
        backend = InMemoryCacheBackend()
        await backend.set("k", "v", 60)

        assert await backend.get("k") == "v"
        assert 0 < await backend.ttl("k") <= 60

    @pytest.mark.asyncio
    async def test_expired_entry_is_a_miss(self):
        backend = InMemoryCacheBackend()
        await backend.set("k", "v", 0)

        assert await backend.get("k") is None
        assert await backend.ttl("k") is None


class FailingBackend:
    async def get(self, key):
        raise CacheBackendError("connection refused")

    async def set(self, key, value, ttl):
        raise CacheBackendError("connection refused")


class TestCachePolicy:

    @pytest.mark.asyncio
    async def test_round_trips_json(self):
        policy = CachePolicy(InMemoryCacheBackend())
        await policy.set("k", {"champions": [{"champion": "Azir"}]}, 60)

        assert await policy.get("k") == {"champions": [{"champion": "Azir"}]}

    @pytest.mark.asyncio
    async def test_undecodable_entry_is_a_miss(self):
        backend = InMemoryCacheBackend()
        await backend.set("k", "{not json", 60)

        assert await CachePolicy(backend).get("k") is None

    @pytest.mark.asyncio
    async def test_backend_failure_is_a_miss(self):
        policy = CachePolicy(FailingBackend())

        assert await policy.get("k") is None

    @pytest.mark.asyncio
    async def test_backend_failure_on_write_is_swallowed(self):
        policy = CachePolicy(FailingBackend())

        await policy.set("k", {"a": 1}, 60)

    @pytest.mark.asyncio
    async def test_disabled_policy_never_touches_backend(self):
        backend = InMemoryCacheBackend()
        policy = CachePolicy(backend, enabled=False)
        await policy.set("k", {"a": 1}, 60)

        assert await backend.get("k") is None
        assert await policy.get("k") is None

    @pytest.mark.asyncio
    async def test_no_backend_means_disabled(self):
        policy = CachePolicy(None)

        assert policy.enabled is False
        assert await policy.get("k") is None


class BrokenRedis:
    async def get(self, key):
        raise RedisConnectionError("Connection refused")

    async def setex(self, key, ttl, value):
        raise RedisConnectionError("Connection refused")


class TestRedisBackend:

    @pytest.mark.asyncio
    async def test_get_wraps_redis_errors(self):
        backend = RedisCacheBackend(BrokenRedis())

        with pytest.raises(CacheBackendError):
            await backend.get("k")

    @pytest.mark.asyncio
    async def test_set_wraps_redis_errors(self):
        backend = RedisCacheBackend(BrokenRedis())

        with pytest.raises(CacheBackendError):
            await backend.set("k", "v", 60)
