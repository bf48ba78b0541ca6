from types import SimpleNamespace

import pytest

from db import cache as cache_module
from db.cache import InMemoryCacheStorage
from middleware import rate_limit as rate_limit_module
from middleware.rate_limit import InMemoryRateLimiterStorage


@pytest.mark.asyncio
async def test_cache_returns_stored_bytes():
    cache = InMemoryCacheStorage()

    await cache.set('/api/v1/movies', b'{"data":[]}', ttl=60)

    assert await cache.get('/api/v1/movies') == b'{"data":[]}'
    assert await cache.get('/api/v1/movies?page=2') is None


@pytest.mark.asyncio
async def test_cache_expires_entries(monkeypatch):
    now = 1000.0
    monkeypatch.setattr(
        cache_module, 'time', SimpleNamespace(monotonic=lambda: now),
    )
    cache = InMemoryCacheStorage()
    await cache.set('key', b'value', ttl=10)

    now = 1011.0

    assert await cache.get('key') is None
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_cache_evicts_least_recently_used():
    cache = InMemoryCacheStorage(max_size=2)
    await cache.set('first', b'1', ttl=60)
    await cache.set('second', b'2', ttl=60)
    await cache.get('first')

    await cache.set('third', b'3', ttl=60)

    assert await cache.get('second') is None
    assert await cache.get('first') == b'1'
    assert await cache.get('third') == b'3'


@pytest.mark.asyncio
async def test_cache_clear():
    cache = InMemoryCacheStorage()
    await cache.set('key', b'value', ttl=60)

    await cache.clear()

    assert len(cache) == 0


@pytest.mark.asyncio
async def test_limiter_counts_within_window():
    limiter = InMemoryRateLimiterStorage()

    results = [await limiter.hit('default:127.0.0.1', 60) for _ in range(3)]

    assert [count for count, _ in results] == [1, 2, 3]
    assert all(0 < reset_in <= 60 for _, reset_in in results)


@pytest.mark.asyncio
async def test_limiter_keys_are_independent():
    limiter = InMemoryRateLimiterStorage()

    await limiter.hit('write:127.0.0.1', 30)
    await limiter.hit('write:127.0.0.1', 30)

    assert (await limiter.hit('default:127.0.0.1', 60))[0] == 1


@pytest.mark.asyncio
async def test_limiter_resets_after_window(monkeypatch):
    now = 500.0
    monkeypatch.setattr(
        rate_limit_module, 'time', SimpleNamespace(monotonic=lambda: now),
    )
    limiter = InMemoryRateLimiterStorage()
    await limiter.hit('default:10.0.0.1', 60)
    await limiter.hit('default:10.0.0.1', 60)

    now = 561.0

    assert await limiter.hit('default:10.0.0.1', 60) == (1, 60)
