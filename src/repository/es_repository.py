from datetime import datetime, timezone
from functools import lru_cache
import logging
from typing import Any, Generic, TypeVar
import uuid

from elasticsearch import AsyncElasticsearch, NotFoundError
from fastapi import Depends

from core.exceptions import DuplicateEntityError
from core.utils import async_backoff
from db.elastic import get_elastic
from db.mappings import DIRECTORS_INDEX, MOVIES_INDEX
from mappers import director as director_mapper
from mappers import movie as movie_mapper
from models.director import Director
from models.movie import Movie
from repository.abstract_repository import (
    DirectorRepository,
    FindAllOptions,
    MovieRepository,
    Populate,
)

EntityType = TypeVar('EntityType')

# Запись считается видимой для поиска сразу после ответа.
_REFRESH = 'wait_for'
# Значение index.max_result_window по умолчанию.
_MAX_RESULT_WINDOW = 10_000


def _now() -> datetime:
    return datetime.now(timezone.utc)


def escape_wildcard(value: str) -> str:
    """Экранирует спецсимволы запроса wildcard."""
    for char in ('\\', '*', '?'):
        value = value.replace(char, f'\\{char}')
    return value


class ElasticSearchRepository(Generic[EntityType]):
    """Общие операции с хранилищем на базе Elasticsearch."""

    index: str

    def __init__(self, elastic: AsyncElasticsearch) -> None:
        self._elastic: AsyncElasticsearch = elastic
        self._logger = logging.getLogger(__name__)

    @async_backoff()
    async def _get_source(
        self,
        object_id: str,
        index: str | None = None,
        source_includes: list[str] | None = None,
    ) -> dict | None:
        """Возвращает поля документа по id.

        Args:
            object_id: уникальный идентификатор.
            index: индекс для поиска. По умолчанию индекс репозитория.
            source_includes: поля документа, которые нужно вернуть.

        Returns:
            Поля документа, если он был найден.
        """
        try:
            doc = await self._elastic.get(
                index=index or self.index,
                id=object_id,
                source_includes=source_includes or None,
            )
        except NotFoundError:
            return None
        return doc['_source']

    @async_backoff()
    async def _search(self, **kwargs) -> list[dict]:
        response = await self._elastic.search(index=self.index, **kwargs)
        return response['hits']['hits']

    @async_backoff()
    async def _count(self, query: dict) -> int:
        response = await self._elastic.count(index=self.index, query=query)
        return response['count']

    async def _index_document(self, object_id: str, document: dict) -> None:
        await self._elastic.index(
            index=self.index,
            id=object_id,
            document=document,
            op_type='create',
            refresh=_REFRESH,
        )

    async def _update_document(self, object_id: str, document: dict) -> bool:
        """Частично обновляет документ.

        Returns:
            False, если документа с таким id нет.
        """
        try:
            await self._elastic.update(
                index=self.index,
                id=object_id,
                doc=document,
                refresh=_REFRESH,
            )
        except NotFoundError:
            return False
        return True

    async def delete(self, entity_id: str) -> bool:
        """Удаляет документ по id.

        Returns:
            True, если документ был удален, False, если его не было.
        """
        try:
            await self._elastic.delete(
                index=self.index,
                id=entity_id,
                refresh=_REFRESH,
            )
        except NotFoundError:
            return False
        except Exception as error:
            self._logger.error(
                f'Ошибка удаления документа {entity_id} из {self.index}: '
                f'{error}',
            )
            raise
        return True


class ElasticDirectorRepository(
    ElasticSearchRepository[Director],
    DirectorRepository,
):
    """Режиссеры в индексе Elasticsearch."""

    index = DIRECTORS_INDEX

    async def find_by_id(self, entity_id: str) -> Director | None:
        try:
            source = await self._get_source(entity_id)
        except Exception as error:
            self._logger.error(
                f'Ошибка получения режиссера {entity_id} из ES: {error}',
            )
            return None
        if source is None:
            return None
        return director_mapper.to_entity(entity_id, source)

    async def create(self, data: dict[str, Any]) -> Director:
        director_id = str(uuid.uuid4())
        now = _now()
        document = director_mapper.to_document({
            **data,
            'id': director_id,
            'created_at': now,
            'updated_at': now,
        })
        try:
            await self._index_document(director_id, document)
        except Exception as error:
            self._logger.error(f'Ошибка создания режиссера в ES: {error}')
            raise
        return director_mapper.to_entity(director_id, document)

    async def update(
        self,
        entity_id: str,
        data: dict[str, Any],
    ) -> Director | None:
        document = director_mapper.to_document({
            **data,
            'updated_at': _now(),
        })
        document.pop('id', None)
        try:
            if not await self._update_document(entity_id, document):
                return None
            source = await self._get_source(entity_id)
        except Exception as error:
            self._logger.error(
                f'Ошибка обновления режиссера {entity_id} в ES: {error}',
            )
            raise
        if source is None:
            return None
        return director_mapper.to_entity(entity_id, source)


class ElasticMovieRepository(ElasticSearchRepository[Movie], MovieRepository):
    """Фильмы в индексе Elasticsearch.

    Режиссер хранится в документе фильма ссылкой и подгружается из
    индекса режиссеров отдельным запросом.
    """

    index = MOVIES_INDEX
    directors_index = DIRECTORS_INDEX

    @staticmethod
    def build_query(filters: dict[str, Any] | None) -> dict:
        """Формирует запрос к ES по фильтрам списка фильмов.

        Название ищется по подстроке без учета регистра, остальные поля
        сравниваются на точное совпадение.

        Args:
            filters: фильтры в терминах полей сущности.

        Returns:
            Тело запроса (query) к ES.
        """
        if not filters:
            return {'match_all': {}}

        clauses: list[dict] = []
        title = filters.get('title')
        if title:
            clauses.append({
                'wildcard': {
                    'title.keyword': {
                        'value': f'*{escape_wildcard(title)}*',
                        'case_insensitive': True,
                    },
                },
            })
        for field in ('genre', 'rating', 'director'):
            value = filters.get(field)
            if value is not None:
                clauses.append({'term': {field: value}})
        release_date = filters.get('release_date')
        if release_date is not None:
            if not isinstance(release_date, str):
                release_date = release_date.isoformat()
            clauses.append({'term': {'release_date': release_date}})

        if not clauses:
            return {'match_all': {}}
        return {'bool': {'filter': clauses}}

    @staticmethod
    def build_sort(sort: dict[str, int]) -> list[dict]:
        return [
            {field: {'order': 'desc' if direction < 0 else 'asc'}}
            for field, direction in sort.items()
        ]

    @async_backoff()
    async def _get_directors(
        self,
        director_ids: list[str],
        select: tuple[str, ...] = (),
    ) -> dict[str, Director]:
        """Подгружает режиссеров по списку id.

        Args:
            director_ids: идентификаторы режиссеров.
            select: поля режиссера, которые нужно вернуть. Пустой кортеж
                означает все поля.

        Returns:
            Словарь id -> режиссер для найденных документов.
        """
        if not director_ids:
            return {}
        source_includes = [name for name in select if name != 'id']
        response = await self._elastic.mget(
            index=self.directors_index,
            ids=director_ids,
            source_includes=source_includes or None,
        )
        return {
            doc['_id']: director_mapper.to_entity(doc['_id'], doc['_source'])
            for doc in response['docs']
            if doc.get('found')
        }

    async def _to_entities(
        self,
        hits: list[dict],
        populate: list[Populate],
    ) -> list[Movie]:
        directors: dict[str, Director] = {}
        for option in populate:
            if option.path != 'director':
                continue
            director_ids = list(dict.fromkeys(
                hit['_source']['director'] for hit in hits
            ))
            directors = await self._get_directors(
                director_ids,
                option.select,
            )
        return [
            movie_mapper.to_entity(
                hit['_id'],
                hit['_source'],
                directors.get(hit['_source']['director']),
            )
            for hit in hits
        ]

    async def _to_populated_entity(
        self,
        movie_id: str,
        source: dict,
    ) -> Movie:
        director_source = await self._get_source(
            source['director'],
            index=self.directors_index,
        )
        director = None
        if director_source is not None:
            director = director_mapper.to_entity(
                source['director'],
                director_source,
            )
        return movie_mapper.to_entity(movie_id, source, director)

    async def _ensure_unique_imdb_id(
        self,
        imdb_id: str,
        exclude_id: str | None = None,
    ) -> None:
        query: dict = {'bool': {'filter': [{'term': {'imdb_id': imdb_id}}]}}
        if exclude_id is not None:
            query['bool']['must_not'] = [{'ids': {'values': [exclude_id]}}]
        if await self._count(query):
            raise DuplicateEntityError('Фильм', 'imdbId', imdb_id)

    async def find_by_id(self, entity_id: str) -> Movie | None:
        try:
            source = await self._get_source(entity_id)
            if source is None:
                return None
            return await self._to_populated_entity(entity_id, source)
        except Exception as error:
            self._logger.error(
                f'Ошибка получения фильма {entity_id} из ES: {error}',
            )
            return None

    async def find_all(self, options: FindAllOptions) -> list[Movie]:
        sort = options.sort or {'created_at': -1}
        try:
            hits = await self._search(
                query=self.build_query(options.filters),
                sort=self.build_sort(sort),
                from_=options.skip,
                size=options.limit,
            )
            return await self._to_entities(hits, options.populate)
        except Exception as error:
            self._logger.error(f'Ошибка получения фильмов из ES: {error}')
            return []

    async def get_count(self, filters: dict[str, Any] | None = None) -> int:
        try:
            return await self._count(self.build_query(filters))
        except Exception as error:
            self._logger.error(f'Ошибка подсчета фильмов в ES: {error}')
            return 0

    async def find_by_director(self, director_id: str) -> list[Movie]:
        try:
            total = await self._count({'term': {'director': director_id}})
            if not total:
                return []
            hits = await self._search(
                query={'term': {'director': director_id}},
                sort=self.build_sort({'created_at': -1}),
                size=min(total, _MAX_RESULT_WINDOW),
            )
            return await self._to_entities(hits, [Populate('director')])
        except Exception as error:
            self._logger.error(
                f'Ошибка получения фильмов режиссера {director_id} из ES: '
                f'{error}',
            )
            return []

    async def create(self, data: dict[str, Any]) -> Movie:
        movie_id = str(uuid.uuid4())
        now = _now()
        document = movie_mapper.to_document({
            **data,
            'id': movie_id,
            'created_at': now,
            'updated_at': now,
        })
        try:
            await self._ensure_unique_imdb_id(document['imdb_id'])
            await self._index_document(movie_id, document)
            return await self._to_populated_entity(movie_id, document)
        except Exception as error:
            self._logger.error(f'Ошибка создания фильма в ES: {error}')
            raise

    async def update(
        self,
        entity_id: str,
        data: dict[str, Any],
    ) -> Movie | None:
        document = movie_mapper.to_document({**data, 'updated_at': _now()})
        document.pop('id', None)
        try:
            if 'imdb_id' in document:
                await self._ensure_unique_imdb_id(
                    document['imdb_id'],
                    exclude_id=entity_id,
                )
            if not await self._update_document(entity_id, document):
                return None
            source = await self._get_source(entity_id)
            if source is None:
                return None
            return await self._to_populated_entity(entity_id, source)
        except Exception as error:
            self._logger.error(
                f'Ошибка обновления фильма {entity_id} в ES: {error}',
            )
            raise


@lru_cache()
def get_director_repository(
    elastic: AsyncElasticsearch = Depends(get_elastic),
) -> DirectorRepository:
    """Функция-провайдер репозитория режиссеров.

    Args:
        elastic (AsyncElasticsearch, optional): объект, содержащий соединение
            с AsyncElasticsearch.

    Returns:
        Объект ElasticDirectorRepository.
    """
    return ElasticDirectorRepository(elastic)


@lru_cache()
def get_movie_repository(
    elastic: AsyncElasticsearch = Depends(get_elastic),
) -> MovieRepository:
    """Функция-провайдер репозитория фильмов.

    Args:
        elastic (AsyncElasticsearch, optional): объект, содержащий соединение
            с AsyncElasticsearch.

    Returns:
        Объект ElasticMovieRepository.
    """
    return ElasticMovieRepository(elastic)
