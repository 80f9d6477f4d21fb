"""
Cache policy manager.

Results are cached in an external key-value store with a TTL chosen from the
temporal state of the tournament(s) they cover:

    no end date / ends in the future   ->       300 s
    ended <= 2 days ago                ->     3,600 s
    ended 3-30 days ago                ->   604,800 s
    ended > 30 days ago                -> 2,592,000 s

Live tournaments still get score corrections, finished ones are immutable.
There is no invalidation: entries live until they expire. Caching is
advisory, so backend failures degrade to recomputation.

Backends:
- RedisCacheBackend: redis.asyncio, used when REDIS_URL is configured
- InMemoryCacheBackend: process-local TTL dict for development and tests
"""
import asyncio
import json
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, Optional, Protocol, Tuple

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from esports_stats.core.config import settings
from esports_stats.core.exceptions import CacheBackendError
from esports_stats.utils.timezone import days_since, utc_now

logger = logging.getLogger(__name__)

# Fixed order of cache key dimensions
CACHE_KEY_DIMENSIONS = ("player", "team", "tournament", "page", "limit", "date_from", "date_to")


# =============================================================================
# TTL POLICY
# =============================================================================

def ttl_for(date_end: Optional[datetime], now: Optional[datetime] = None) -> int:
    """
    TTL in seconds for a result covering a tournament ending at ``date_end``.

    Examples:
        >>> ttl_for(None)
        300
        >>> ttl_for(utc_now() - timedelta(days=40))
        2592000
    """
    if date_end is None:
        return settings.CACHE_TTL_LIVE

    elapsed = days_since(date_end, now)
    if elapsed < 0:
        return settings.CACHE_TTL_LIVE
    if elapsed <= settings.CACHE_RECENT_DAYS:
        return settings.CACHE_TTL_RECENT
    if elapsed <= settings.CACHE_SETTLING_DAYS:
        return settings.CACHE_TTL_SETTLING
    return settings.CACHE_TTL_ARCHIVED


def ttl_for_many(date_ends: Iterable[Optional[datetime]], now: Optional[datetime] = None) -> int:
    """TTL for a result covering several tournaments: the most volatile one wins."""
    ttls = [ttl_for(date_end, now) for date_end in date_ends]
    return min(ttls) if ttls else settings.CACHE_TTL_LIVE


def build_cache_key(
    kind: str,
    *,
    player: Optional[str] = None,
    team: Optional[str] = None,
    tournament: Optional[str] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> str:
    """
    Deterministic cache key from the query dimensions.

    Dimensions are keyword-only and always concatenated in the same order,
    so two calls with the same effective filters produce the same key.

    Examples:
        >>> build_cache_key("champions", tournament="LEC 2024 Spring", player="Caps")
        'champions:player:Caps:tournament:LEC 2024 Spring'
        >>> build_cache_key("players")
        'players:all'
    """
    values = {
        "player": player,
        "team": team,
        "tournament": tournament,
        "page": page,
        "limit": limit,
        "date_from": date_from.isoformat() if date_from else None,
        "date_to": date_to.isoformat() if date_to else None,
    }
    parts = [f"{dim}:{values[dim]}" for dim in CACHE_KEY_DIMENSIONS if values[dim] is not None]
    return f"{kind}:{':'.join(parts)}" if parts else f"{kind}:all"


# =============================================================================
# BACKENDS
# =============================================================================

class CacheBackend(Protocol):
    """Minimal key-value cache contract."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str, ttl: int) -> None: ...


class InMemoryCacheBackend:
    """Process-local cache with per-entry expiry."""

    def __init__(self):
        self._cache: Dict[str, Tuple[str, datetime]] = {}  # key -> (value, expiry)
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            if key in self._cache:
                value, expiry = self._cache[key]
                if utc_now() < expiry:
                    return value
                del self._cache[key]
        return None

    async def set(self, key: str, value: str, ttl: int) -> None:
        expiry = utc_now() + timedelta(seconds=ttl)
        async with self._lock:
            self._cache[key] = (value, expiry)

    async def ttl(self, key: str) -> Optional[int]:
        """Seconds left for a key, None if missing or expired."""
        async with self._lock:
            entry = self._cache.get(key)
        if entry is None:
            return None
        remaining = int((entry[1] - utc_now()).total_seconds())
        return remaining if remaining > 0 else None

    async def close(self) -> None:
        async with self._lock:
            self._cache.clear()


class RedisCacheBackend:
    """redis.asyncio backend; Redis errors surface as CacheBackendError."""

    def __init__(self, client: aioredis.Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCacheBackend":
        return cls(aioredis.from_url(url, decode_responses=True))

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._client.get(key)
        except RedisError as exc:
            raise CacheBackendError(f"GET {key} failed: {exc}") from exc

    async def set(self, key: str, value: str, ttl: int) -> None:
        try:
            await self._client.setex(key, ttl, value)
        except RedisError as exc:
            raise CacheBackendError(f"SETEX {key} failed: {exc}") from exc

    async def close(self) -> None:
        await self._client.aclose()


def create_cache_backend() -> CacheBackend:
    """Backend selected from settings: Redis when REDIS_URL is set, otherwise in-process."""
    if settings.REDIS_URL:
        logger.info("Using Redis cache backend")
        return RedisCacheBackend.from_url(settings.REDIS_URL)
    logger.info("REDIS_URL not set, using in-memory cache backend")
    return InMemoryCacheBackend()


# =============================================================================
# POLICY MANAGER
# =============================================================================

class CachePolicy:
    """
    Mediates reads and writes against the cache backend.

    Values are stored as JSON. A failing backend never fails the request:
    a failed read is a miss, a failed write is logged and dropped.
    """

    def __init__(self, backend: Optional[CacheBackend], enabled: bool = True):
        self.backend = backend
        self.enabled = enabled and backend is not None

    async def get(self, key: str) -> Optional[Any]:
        if not self.enabled:
            return None
        try:
            raw = await self.backend.get(key)
        except CacheBackendError as exc:
            logger.warning(f"Cache read failed, treating as miss: {exc}")
            return None

        if raw is None:
            logger.debug(f"Cache MISS for key: {key}")
            return None

        try:
            value = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning(f"Cache entry {key} is not valid JSON, treating as miss: {exc}")
            return None
        logger.debug(f"Cache HIT for key: {key}")
        return value

    async def set(self, key: str, value: Any, ttl: int) -> None:
        if not self.enabled:
            return
        try:
            await self.backend.set(key, json.dumps(value, default=str), ttl)
        except CacheBackendError as exc:
            logger.warning(f"Cache write failed, result not cached: {exc}")
            return
        logger.debug(f"Cache SET for key: {key} with TTL {ttl}s")
