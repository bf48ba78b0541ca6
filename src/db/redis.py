import logging

from redis.asyncio import Redis

from core.config import settings

redis: Redis | None = None

_logger = logging.getLogger(__name__)


async def connect_redis() -> Redis | None:
    """Подключается к Redis.

    Returns:
        Клиент Redis или None, если Redis не настроен или не отвечает.
        Во втором случае кеш и ограничитель запросов работают в памяти
        процесса.
    """
    if not settings.redis_host:
        _logger.info('Redis не настроен, используются хранилища в памяти.')
        return None

    _logger.info('Начало подключения к серверу Redis.')
    client = Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        username=settings.redis_username,
        password=settings.redis_password,
    )
    try:
        await client.ping()
    except Exception as error:
        _logger.warning(
            f'Redis недоступен, используются хранилища в памяти: {error}',
        )
        await client.aclose()
        return None
    _logger.info('Успешное подключение к серверу Redis.')
    return client
