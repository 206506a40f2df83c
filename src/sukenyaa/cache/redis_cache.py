"""Redis TTL cache shared between processes."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError
from redis import asyncio as aioredis
from redis.exceptions import RedisError

from sukenyaa.shared.enums import BackendKind
from sukenyaa.shared.exceptions import CacheBackendError
from sukenyaa.shared.models import CacheEntry, CacheStats

logger = logging.getLogger(__name__)


class RedisCache:
    """Redis-backed cache storing JSON ``CacheEntry`` envelopes.

    Implements the ``Cache`` protocol. Entries are written with ``SETEX`` so
    Redis expires them on its own; the envelope TTL is checked again on read.
    Every Redis failure surfaces as ``CacheBackendError``.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        *,
        key_prefix: str = "sukenyaa:cache:",
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the Redis cache.

        Args:
            redis: Redis client instance
            key_prefix: Namespace prepended to every key
            clock: Epoch-seconds clock used for envelope timestamps
        """
        self.redis = redis
        self.key_prefix = key_prefix
        self._clock = clock

    async def get(self, key: str) -> Any | None:
        """Retrieve a cached value.

        Args:
            key: Cache key without prefix

        Returns:
            Cached value or None if absent, expired or unreadable
        """
        full_key = f"{self.key_prefix}{key}"
        try:
            raw = await self.redis.get(full_key)
            if raw is None:
                return None
            try:
                entry = CacheEntry.model_validate_json(raw)
            except ValidationError:
                logger.warning("discarding unreadable cache entry %s", full_key)
                await self.redis.delete(full_key)
                return None
            if entry.is_expired(self._clock()):
                await self.redis.delete(full_key)
                return None
            return entry.payload
        except (RedisError, OSError) as exc:
            raise CacheBackendError(f"redis get failed for {full_key}: {exc}") from exc

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Store a value with TTL.

        Args:
            key: Cache key without prefix
            value: JSON-serialisable value
            ttl: Time-to-live in seconds
        """
        full_key = f"{self.key_prefix}{key}"
        entry = CacheEntry(payload=value, created_at=self._clock(), ttl=ttl)
        try:
            await self.redis.setex(full_key, ttl, entry.model_dump_json())
        except (RedisError, OSError) as exc:
            raise CacheBackendError(f"redis set failed for {full_key}: {exc}") from exc

    async def delete(self, key: str) -> None:
        full_key = f"{self.key_prefix}{key}"
        try:
            await self.redis.delete(full_key)
        except (RedisError, OSError) as exc:
            raise CacheBackendError(f"redis delete failed for {full_key}: {exc}") from exc

    async def clear(self) -> None:
        """Delete every key under this cache's prefix (other data in the DB is kept)."""
        try:
            keys = [k async for k in self.redis.scan_iter(match=f"{self.key_prefix}*")]
            if keys:
                await self.redis.delete(*keys)
            logger.info("cleared %d redis cache entr(ies)", len(keys))
        except (RedisError, OSError) as exc:
            raise CacheBackendError(f"redis clear failed: {exc}") from exc

    async def stats(self) -> CacheStats:
        try:
            count = 0
            async for _key in self.redis.scan_iter(match=f"{self.key_prefix}*"):
                count += 1
        except (RedisError, OSError) as exc:
            raise CacheBackendError(f"redis stats failed: {exc}") from exc
        return CacheStats(entry_count=count, backend_kind=BackendKind.REDIS)

    async def close(self) -> None:
        await self.redis.aclose()
