"""In-process TTL cache with a bounded entry count."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from sukenyaa.shared.enums import BackendKind
from sukenyaa.shared.models import CacheEntry, CacheStats

logger = logging.getLogger(__name__)


class InMemoryCache:
    """Dict-backed cache living in the current process.

    Implements the ``Cache`` protocol. Expired entries are removed lazily
    when read. Once ``max_entries`` is exceeded the oldest inserted entry is
    evicted first.
    """

    def __init__(self, *, max_entries: int = 1000, clock: Callable[[], float] = time.time) -> None:
        self._max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            self._entries.pop(key, None)
            logger.debug("memory cache entry expired: %s", key)
            return None
        return entry.payload

    async def set(self, key: str, value: Any, ttl: int) -> None:
        # Re-setting a key counts as a fresh insertion for eviction order.
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(payload=value, created_at=self._clock(), ttl=ttl)
        while len(self._entries) > self._max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug("memory cache evicted %s", oldest)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def clear(self) -> None:
        self._entries.clear()

    async def stats(self) -> CacheStats:
        return CacheStats(entry_count=len(self._entries), backend_kind=BackendKind.MEMORY)

    async def close(self) -> None:
        self._entries.clear()
