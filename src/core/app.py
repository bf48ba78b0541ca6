import asyncio
import contextlib
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from redis.asyncio import Redis

from api.errors import register_exception_handlers
from api.v1 import director, movie
from core.config import Environment, settings
from db import elastic, redis
from db.cache import CacheStorage, InMemoryCacheStorage, RedisCacheStorage
from middleware.cache import CacheRule, ResponseCacheMiddleware
from middleware.headers import (
    RequestIdMiddleware,
    ResponseTimeMiddleware,
    SecurityHeadersMiddleware,
)
from middleware.rate_limit import (
    InMemoryRateLimiterStorage,
    RateLimiterStorage,
    RateLimitMiddleware,
    RateLimitPolicy,
    RedisRateLimiterStorage,
)

# Кешируемые ответы.
CACHE_RULES = (
    CacheRule(path='/api/v1/movies'),
)

# Служебные заголовки, доступные клиенту при кросс-доменных запросах.
EXPOSED_HEADERS = [
    settings.request_id_header_name,
    settings.response_time_header_name,
    'RateLimit-Limit',
    'RateLimit-Remaining',
    'RateLimit-Reset',
    'Retry-After',
]

_logger = logging.getLogger(__name__)


def build_storages(
    client: Redis | None,
) -> tuple[CacheStorage, RateLimiterStorage]:
    """Хранилища кеша и ограничителя запросов для клиента Redis."""
    if client is None:
        return (
            InMemoryCacheStorage(max_size=settings.max_item_in_cache),
            InMemoryRateLimiterStorage(),
        )
    return (
        RedisCacheStorage(client, namespace=settings.project_name),
        RedisRateLimiterStorage(client),
    )


async def shutdown(app: FastAPI) -> None:
    """Очищает кеш и закрывает соединения."""
    cache: CacheStorage | None = getattr(app.state, 'cache', None)
    if cache is not None:
        await cache.clear()
        await cache.close()
    limiter: RateLimiterStorage | None = getattr(
        app.state, 'rate_limiter', None,
    )
    if limiter is not None:
        await limiter.close()
    if redis.redis is not None:
        await redis.redis.aclose()
        redis.redis = None
    if elastic.es is not None:
        await elastic.es.close()
        elastic.es = None


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Асинхронный контекстный менеджер для управления событиями запуска
        и завершения работы приложения.

    Args:
        app: Экземпляр приложения FastAPI.
    """
    _logger.info(
        f'Запуск {settings.project_name} {settings.app_version} '
        f'в окружении {settings.environment}.',
    )
    # STARTUP: Подключаемся к базам данных.
    elastic.es = await elastic.connect_elastic()
    redis.redis = await redis.connect_redis()
    app.state.cache, app.state.rate_limiter = build_storages(redis.redis)

    # Передаем управление приложению.
    yield

    # SHUTDOWN: Корректно закрываем соединения.
    _logger.info('Завершение работы приложения.')
    try:
        await asyncio.wait_for(
            shutdown(app),
            timeout=settings.shutdown_timeout,
        )
    except asyncio.TimeoutError:
        _logger.error(
            f'Не удалось завершить работу за {settings.shutdown_timeout} с.',
        )
    except Exception as error:
        _logger.error(f'Ошибка при завершении работы: {error}')
    else:
        _logger.info('Соединения закрыты.')


def get_app() -> FastAPI:
    """Производит инициализацию приложения.

    Returns:
        Объект приложения FastAPI.
    """

    app = FastAPI(
        title=settings.project_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url='/api/openapi',
        openapi_url='/api/openapi.json',
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Последний добавленный обработчик выполняется первым.
    app.add_middleware(
        ResponseCacheMiddleware,
        rules=CACHE_RULES,
        default_ttl=settings.cache_ttl,
    )
    # В тестовом окружении частота запросов не ограничивается.
    if settings.environment != Environment.TEST:
        app.add_middleware(
            RateLimitMiddleware,
            default_policy=RateLimitPolicy(
                name='default',
                window_seconds=settings.default_rate_limit_ttl,
                limit=settings.default_rate_limit_limit,
            ),
            write_policy=RateLimitPolicy(
                name='write',
                window_seconds=settings.write_rate_limit_ttl,
                limit=settings.write_rate_limit_limit,
            ),
        )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        ResponseTimeMiddleware,
        header_name=settings.response_time_header_name,
    )
    app.add_middleware(
        RequestIdMiddleware,
        header_name=settings.request_id_header_name,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=['*'],
        allow_headers=['*'],
        expose_headers=EXPOSED_HEADERS,
    )

    # Подключение роутеров.
    app.include_router(
        director.router,
        prefix='/api/v1/directors',
        tags=['Directors'],
    )
    app.include_router(movie.router, prefix='/api/v1/movies', tags=['Movies'])

    @app.get('/health', tags=['Health'], summary='Проверка работоспособности')
    async def health() -> dict:
        return {'status': 'ok'}

    return app


app = get_app()
