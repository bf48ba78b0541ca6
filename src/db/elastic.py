import logging

from elasticsearch import AsyncElasticsearch

from core.config import settings
from db.mappings import create_indices

es: AsyncElasticsearch | None = None

_logger = logging.getLogger(__name__)


async def connect_elastic() -> AsyncElasticsearch:
    """Подключается к ES и создает недостающие индексы.

    Returns:
        Клиент AsyncElasticsearch.
    """
    _logger.info('Начало подключения к серверу ES.')
    client = AsyncElasticsearch(hosts=[settings.elastic_url])
    await create_indices(client)
    _logger.info('Успешное подключение к серверу ES.')
    return client


async def get_elastic() -> AsyncElasticsearch:
    """Функция-провайдер соединения с ES для репозиториев.

    Returns:
        Соединение с ES, открытое при запуске приложения.
    """
    return es
