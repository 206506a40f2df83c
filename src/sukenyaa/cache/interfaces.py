"""Interfaces for the cache module."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from sukenyaa.shared.models import CacheStats


@runtime_checkable
class Cache(Protocol):
    """Protocol for key/value stores with per-entry TTL.

    Values must be JSON-serialisable. An expired entry reads as absent.
    """

    async def get(self, key: str) -> Any | None:
        """Return the cached value, or None when absent or expired."""
        ...

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds."""
        ...

    async def delete(self, key: str) -> None:
        ...

    async def clear(self) -> None:
        ...

    async def stats(self) -> CacheStats:
        ...

    async def close(self) -> None:
        ...
