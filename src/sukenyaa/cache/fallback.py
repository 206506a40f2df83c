"""Two-tier cache: shared external store over an in-process store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from redis import asyncio as aioredis

from sukenyaa.cache.interfaces import Cache
from sukenyaa.cache.memory import InMemoryCache
from sukenyaa.cache.redis_cache import RedisCache
from sukenyaa.shared.enums import BackendKind
from sukenyaa.shared.exceptions import CacheBackendError
from sukenyaa.shared.models import CacheStats

if TYPE_CHECKING:
    from sukenyaa.config import Settings

logger = logging.getLogger(__name__)


class FallbackCache:
    """Compose an external cache with a local one.

    Implements the ``Cache`` protocol. Writes go to both tiers. Reads prefer
    the external tier and fall back to the local tier when the external one
    fails. Backend failures are logged and never reach the caller.
    """

    def __init__(self, primary: Cache, local: Cache) -> None:
        self._primary = primary
        self._local = local

    async def get(self, key: str) -> Any | None:
        try:
            return await self._primary.get(key)
        except CacheBackendError as exc:
            logger.warning("cache backend degraded, reading %s from memory: %s", key, exc)
            return await self._local.get(key)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        await self._local.set(key, value, ttl)
        try:
            await self._primary.set(key, value, ttl)
        except CacheBackendError as exc:
            logger.warning("cache backend degraded, %s kept in memory only: %s", key, exc)

    async def delete(self, key: str) -> None:
        await self._local.delete(key)
        try:
            await self._primary.delete(key)
        except CacheBackendError as exc:
            logger.warning("cache backend degraded, delete of %s skipped: %s", key, exc)

    async def clear(self) -> None:
        await self._local.clear()
        try:
            await self._primary.clear()
        except CacheBackendError as exc:
            logger.warning("cache backend degraded, clear skipped: %s", exc)

    async def stats(self) -> CacheStats:
        try:
            primary = await self._primary.stats()
        except CacheBackendError as exc:
            logger.warning("cache backend degraded, reporting memory stats: %s", exc)
            return await self._local.stats()
        return CacheStats(entry_count=primary.entry_count, backend_kind=BackendKind.TIERED)

    async def close(self) -> None:
        await self._local.close()
        try:
            await self._primary.close()
        except Exception as exc:
            logger.debug("error closing cache backend: %s", exc)


async def create_cache(settings: Settings) -> Cache:
    """Build the cache described by ``settings``.

    Without ``redis_url``, or when the URL is malformed or Redis does not
    answer a ping, only the in-process tier is used.
    """
    local = InMemoryCache(max_entries=settings.cache_max_entries)
    if not settings.redis_url:
        logger.info("redis URL not provided, using in-memory cache only")
        return local

    redis: aioredis.Redis | None = None
    try:
        redis = aioredis.from_url(settings.redis_url, decode_responses=True)
        await redis.ping()
    except Exception as exc:
        logger.warning("redis unavailable at startup (%s): %s", settings.redis_url, exc)
        if redis is not None:
            await redis.aclose()
        return local

    logger.info("using redis cache at %s", settings.redis_url)
    return FallbackCache(RedisCache(redis, key_prefix=settings.cache_key_prefix), local)
