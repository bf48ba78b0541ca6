"""Схемы индексов Elasticsearch."""
import logging

from elasticsearch import AsyncElasticsearch

DIRECTORS_INDEX = 'directors'
MOVIES_INDEX = 'movies'

INDEX_SETTINGS = {
    'refresh_interval': '1s',
}

DIRECTORS_MAPPING = {
    'dynamic': 'strict',
    'properties': {
        'id': {'type': 'keyword'},
        'first_name': {'type': 'text', 'fields': {'keyword': {'type': 'keyword'}}},  # noqa
        'second_name': {'type': 'text', 'fields': {'keyword': {'type': 'keyword'}}},  # noqa
        'birth_date': {'type': 'date'},
        'bio': {'type': 'text'},
        'created_at': {'type': 'date'},
        'updated_at': {'type': 'date'},
    },
}

MOVIES_MAPPING = {
    'dynamic': 'strict',
    'properties': {
        'id': {'type': 'keyword'},
        'title': {'type': 'text', 'fields': {'keyword': {'type': 'keyword'}}},
        'description': {'type': 'text'},
        'release_date': {'type': 'date'},
        'genre': {'type': 'keyword'},
        'rating': {'type': 'float'},
        'imdb_id': {'type': 'keyword'},
        'director': {'type': 'keyword'},
        'created_at': {'type': 'date'},
        'updated_at': {'type': 'date'},
    },
}

INDICES = {
    DIRECTORS_INDEX: DIRECTORS_MAPPING,
    MOVIES_INDEX: MOVIES_MAPPING,
}


async def create_indices(elastic: AsyncElasticsearch) -> None:
    """Создает недостающие индексы со схемами."""
    logger = logging.getLogger(__name__)
    for index, mapping in INDICES.items():
        if await elastic.indices.exists(index=index):
            continue
        await elastic.indices.create(
            index=index,
            mappings=mapping,
            settings=INDEX_SETTINGS,
        )
        logger.info(f'Создан индекс {index}.')
