from dataclasses import dataclass
from http import HTTPStatus
import logging
from typing import Callable, Sequence

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

KeyGenerator = Callable[[Request], str]

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheRule:
    """Какой путь кешировать.

    Attributes:
        path: путь запроса, для которого кешируется ответ.
        ttl: время жизни записи в секундах. None означает значение
            по умолчанию для приложения.
        key: функция построения ключа кеша по запросу. По умолчанию
            ключом служат путь и строка запроса.
    """
    path: str
    ttl: int | None = None
    key: KeyGenerator | None = None


def default_cache_key(request: Request) -> str:
    if request.url.query:
        return f'{request.url.path}?{request.url.query}'
    return request.url.path


class ResponseCacheMiddleware(BaseHTTPMiddleware):
    """Кеширует успешные ответы на GET-запросы.

    При попадании в кеш ответ отдается сразу, без вызова обработчика.
    Хранилище берется из app.state.cache. Ошибки хранилища не прерывают
    запрос: он обрабатывается без кеша.
    """

    def __init__(
        self,
        app,
        rules: Sequence[CacheRule],
        default_ttl: int,
    ) -> None:
        super().__init__(app)
        self._rules = {rule.path.rstrip('/') or '/': rule for rule in rules}
        self._default_ttl = default_ttl

    def _match(self, path: str) -> CacheRule | None:
        return self._rules.get(path.rstrip('/') or '/')

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method != 'GET':
            return await call_next(request)

        rule = self._match(request.url.path)
        storage = getattr(request.app.state, 'cache', None)
        if rule is None or storage is None:
            return await call_next(request)

        cache_key = rule.key(request) if rule.key else default_cache_key(request)
        try:
            cached = await storage.get(cache_key)
        except Exception as error:
            _logger.error(f'Ошибка при получении данных из кеша: {error}')
            return await call_next(request)

        if cached is not None:
            _logger.debug(f'Ответ для ключа {cache_key} взят из кеша.')
            return Response(
                content=cached,
                status_code=HTTPStatus.OK,
                media_type='application/json',
            )

        response = await call_next(request)
        if not HTTPStatus.OK <= response.status_code < 300:
            return response

        body = b''.join([chunk async for chunk in response.body_iterator])
        try:
            await storage.set(
                cache_key,
                body,
                rule.ttl or self._default_ttl,
            )
        except Exception as error:
            _logger.error(f'Ошибка при кешировании результата: {error}')

        return Response(
            content=body,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )
