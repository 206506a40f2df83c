"""Tests for InMemoryCache."""

from __future__ import annotations

import pytest

from sukenyaa.cache.interfaces import Cache
from sukenyaa.cache.memory import InMemoryCache
from sukenyaa.shared.enums import BackendKind


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> InMemoryCache:
    return InMemoryCache(max_entries=3, clock=clock)


class TestInMemoryCache:
    def test_implements_protocol(self, cache: InMemoryCache) -> None:
        assert isinstance(cache, Cache)

    async def test_round_trip(self, cache: InMemoryCache) -> None:
        await cache.set("k", {"items": [1, 2]}, 60)
        assert await cache.get("k") == {"items": [1, 2]}

    async def test_miss(self, cache: InMemoryCache) -> None:
        assert await cache.get("absent") is None

    async def test_expires_after_ttl(self, cache: InMemoryCache, clock: FakeClock) -> None:
        await cache.set("k", "v", 60)
        clock.now += 60
        assert await cache.get("k") == "v"
        clock.now += 1
        assert await cache.get("k") is None
        assert (await cache.stats()).entry_count == 0

    async def test_fifo_eviction(self, cache: InMemoryCache) -> None:
        for key in ("a", "b", "c", "d"):
            await cache.set(key, key, 60)
        assert await cache.get("a") is None
        assert [await cache.get(k) for k in ("b", "c", "d")] == ["b", "c", "d"]

    async def test_reset_moves_key_to_back(self, cache: InMemoryCache) -> None:
        for key in ("a", "b", "c"):
            await cache.set(key, key, 60)
        await cache.set("a", "a2", 60)
        await cache.set("d", "d", 60)
        assert await cache.get("b") is None
        assert await cache.get("a") == "a2"

    async def test_delete_and_clear(self, cache: InMemoryCache) -> None:
        await cache.set("a", 1, 60)
        await cache.set("b", 2, 60)
        await cache.delete("a")
        assert await cache.get("a") is None
        await cache.delete("missing")
        await cache.clear()
        assert await cache.get("b") is None

    async def test_stats(self, cache: InMemoryCache) -> None:
        await cache.set("a", 1, 60)
        await cache.set("b", 2, 60)
        stats = await cache.stats()
        assert stats.entry_count == 2
        assert stats.backend_kind == BackendKind.MEMORY
