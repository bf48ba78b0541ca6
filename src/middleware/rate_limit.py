"""Ограничение частоты запросов по адресу клиента.

Действуют две независимые политики: мягкая для чтения и строгая для
изменяющих запросов (POST, PUT, PATCH). Каждая считает запросы в
фиксированном окне.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from http import HTTPStatus
import logging
import math
import time
from typing import Sequence

from fastapi import Request, Response
from redis.asyncio import Redis
from starlette.middleware.base import BaseHTTPMiddleware

from api.errors import error_response

TOO_MANY_REQUESTS_MESSAGE = 'Слишком много запросов, попробуйте позже'
WRITE_METHODS = frozenset({'POST', 'PUT', 'PATCH'})
EXEMPT_PATHS = ('/health', '/metrics', '/api/openapi')

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitPolicy:
    name: str
    window_seconds: int
    limit: int


class RateLimiterStorage(ABC):
    """Счетчики запросов в окне."""

    @abstractmethod
    async def hit(self, key: str, window: int) -> tuple[int, int]:
        """Учитывает запрос.

        Args:
            key: ключ счетчика.
            window: длина окна в секундах.

        Returns:
            Число запросов в текущем окне, включая этот, и число секунд
            до сброса окна.
        """

    async def close(self) -> None:
        return None


class RedisRateLimiterStorage(RateLimiterStorage):
    """Счетчики в Redis, общие для всех экземпляров приложения."""

    def __init__(self, redis: Redis, prefix: str = 'ratelimit') -> None:
        self._redis = redis
        self._prefix = prefix

    async def hit(self, key: str, window: int) -> tuple[int, int]:
        redis_key = f'{self._prefix}:{key}'
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.incr(redis_key)
            pipe.expire(redis_key, window, nx=True)
            pipe.ttl(redis_key)
            count, _, ttl = await pipe.execute()
        return count, ttl if ttl > 0 else window


class InMemoryRateLimiterStorage(RateLimiterStorage):
    """Счетчики в памяти процесса."""

    # При каком числе ключей чистить истекшие окна.
    purge_threshold = 10_000

    def __init__(self) -> None:
        self._hits: dict[str, tuple[int, float]] = {}

    def _purge(self, now: float) -> None:
        self._hits = {
            key: value for key, value in self._hits.items() if value[1] > now
        }

    async def hit(self, key: str, window: int) -> tuple[int, int]:
        now = time.monotonic()
        if len(self._hits) >= self.purge_threshold:
            self._purge(now)

        count, reset_at = self._hits.get(key, (0, now + window))
        if reset_at <= now:
            count, reset_at = 0, now + window
        count += 1
        self._hits[key] = (count, reset_at)
        return count, max(1, math.ceil(reset_at - now))

    async def close(self) -> None:
        self._hits.clear()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Отклоняет запросы сверх лимита ответом 429.

    Хранилище счетчиков берется из app.state.rate_limiter. Если хранилище
    недоступно, запрос пропускается без ограничения.
    """

    def __init__(
        self,
        app,
        default_policy: RateLimitPolicy,
        write_policy: RateLimitPolicy,
        exempt_paths: Sequence[str] = EXEMPT_PATHS,
    ) -> None:
        super().__init__(app)
        self._default_policy = default_policy
        self._write_policy = write_policy
        self._exempt_paths = tuple(exempt_paths)

    def _is_exempt(self, path: str) -> bool:
        return any(exempt in path for exempt in self._exempt_paths)

    def _policy_for(self, method: str) -> RateLimitPolicy:
        if method in WRITE_METHODS:
            return self._write_policy
        return self._default_policy

    async def dispatch(self, request: Request, call_next) -> Response:
        storage = getattr(request.app.state, 'rate_limiter', None)
        if storage is None or self._is_exempt(request.url.path):
            return await call_next(request)

        policy = self._policy_for(request.method)
        client = request.client.host if request.client else 'unknown'
        try:
            count, reset_in = await storage.hit(
                f'{policy.name}:{client}',
                policy.window_seconds,
            )
        except Exception as error:
            _logger.error(f'Ошибка хранилища ограничителя запросов: {error}')
            return await call_next(request)

        headers = {
            'RateLimit-Limit': str(policy.limit),
            'RateLimit-Remaining': str(max(policy.limit - count, 0)),
            'RateLimit-Reset': str(reset_in),
        }
        if count > policy.limit:
            _logger.warning(
                f'Превышен лимит запросов ({policy.name}): {client} '
                f'{request.method} {request.url.path}',
            )
            return error_response(
                HTTPStatus.TOO_MANY_REQUESTS,
                TOO_MANY_REQUESTS_MESSAGE,
                headers={**headers, 'Retry-After': str(reset_in)},
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
