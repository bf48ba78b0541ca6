"""Хранилища кеша ответов: Redis или память процесса."""
from abc import ABC, abstractmethod
from collections import OrderedDict
import logging
import time

from redis.asyncio import Redis


class CacheStorage(ABC):
    """Хранилище ключ-значение с временем жизни записей."""

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        ...

    @abstractmethod
    async def set(self, key: str, value: bytes, ttl: int) -> None:
        ...

    @abstractmethod
    async def clear(self) -> None:
        ...

    async def close(self) -> None:
        return None


class RedisCacheStorage(CacheStorage):
    """Кеш в Redis. Ключи изолированы пространством имен приложения."""

    def __init__(self, redis: Redis, namespace: str) -> None:
        self._redis = redis
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return f'{self._namespace}:{key}'

    async def get(self, key: str) -> bytes | None:
        return await self._redis.get(self._key(key))

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        await self._redis.set(self._key(key), value, ex=ttl)

    async def clear(self) -> None:
        """Удаляет только ключи своего пространства имен."""
        keys = [key async for key in self._redis.scan_iter(
            match=self._key('*'),
        )]
        if keys:
            await self._redis.delete(*keys)


class InMemoryCacheStorage(CacheStorage):
    """Кеш в памяти процесса с TTL и вытеснением давно не используемых
    записей (LRU).

    Используется, когда Redis недоступен. Не разделяется между
    экземплярами приложения.
    """

    def __init__(self, max_size: int = 1000) -> None:
        self._cache: OrderedDict[str, tuple[bytes, float]] = OrderedDict()
        self._max_size = max_size
        self._logger = logging.getLogger(__name__)

    async def get(self, key: str) -> bytes | None:
        item = self._cache.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at <= time.monotonic():
            del self._cache[key]
            return None
        self._cache.move_to_end(key)
        return value

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        self._cache[key] = (value, time.monotonic() + ttl)
        self._cache.move_to_end(key)
        while len(self._cache) > self._max_size:
            evicted, _ = self._cache.popitem(last=False)
            self._logger.debug(f'Из кеша вытеснен ключ {evicted}.')

    async def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
