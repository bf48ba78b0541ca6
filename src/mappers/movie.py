"""Преобразования фильма между документом хранилища, доменной сущностью
и DTO.
"""
from typing import Any

from mappers import director as director_mapper
from models.base import Pagination
from models.director import Director
from models.movie import (
    Movie,
    MovieCreate,
    MovieListEnvelope,
    MovieListOptions,
    MovieQuery,
    MovieResponse,
    MovieSortField,
    MovieUpdate,
)

# Соответствие полей API полям документа в индексе.
SORT_FIELDS: dict[MovieSortField, str] = {
    MovieSortField.TITLE: 'title.keyword',
    MovieSortField.RELEASE_DATE: 'release_date',
    MovieSortField.GENRE: 'genre',
    MovieSortField.RATING: 'rating',
    MovieSortField.IMDB_ID: 'imdb_id',
    MovieSortField.CREATED_AT: 'created_at',
    MovieSortField.UPDATED_AT: 'updated_at',
}

_FILTER_FIELDS = ('title', 'genre', 'rating', 'release_date', 'director')


def from_create_dto(dto: MovieCreate) -> dict[str, Any]:
    """Данные для создания сущности из входного DTO."""
    data = dto.model_dump(by_alias=False)
    data['director'] = str(dto.director)
    if data.get('rating') is None:
        data['rating'] = 0
    return data


def from_update_dto(dto: MovieUpdate) -> dict[str, Any]:
    """Частичные данные сущности: только поля, переданные клиентом."""
    data = dto.model_dump(by_alias=False, exclude_unset=True)
    if 'director' in data:
        data['director'] = str(data['director'])
    return data


def to_list_options(query: MovieQuery) -> MovieListOptions:
    """Отделяет параметры пагинации и сортировки от фильтров."""
    options = MovieListOptions()
    if query.page is not None:
        options.page = query.page
    if query.limit is not None:
        options.limit = query.limit
    if query.sort_by is not None:
        options.sort_by = query.sort_by
    if query.sort_dir is not None:
        options.sort_dir = query.sort_dir

    for name in _FILTER_FIELDS:
        value = getattr(query, name)
        if value is None:
            continue
        options.filters[name] = str(value) if name == 'director' else value
    return options


def to_document(data: dict[str, Any]) -> dict[str, Any]:
    """Приводит поля сущности к виду документа Elasticsearch."""
    document = dict(data)
    director = document.get('director')
    if isinstance(director, Director):
        document['director'] = director.id
    for date_field in ('release_date', 'created_at', 'updated_at'):
        value = document.get(date_field)
        if value is not None and not isinstance(value, str):
            document[date_field] = value.isoformat()
    return document


def to_entity(
    doc_id: str,
    source: dict[str, Any],
    director: Director | None = None,
) -> Movie:
    """Собирает доменную сущность из документа Elasticsearch.

    Args:
        doc_id: Идентификатор документа.
        source: Поля документа.
        director: Подгруженный режиссер. Если не передан, в сущности
            остается ссылка на него.

    Returns:
        Доменная сущность фильма.
    """
    data = {**source, 'id': doc_id}
    if director is not None:
        data['director'] = director
    return Movie.model_validate(data)


def to_movie_response(movie: Movie) -> MovieResponse:
    return MovieResponse(
        id=movie.id,
        title=movie.title,
        description=movie.description,
        release_date=movie.release_date,
        genre=movie.genre,
        rating=movie.rating,
        imdb_id=movie.imdb_id,
        director=director_mapper.to_director_response(movie.director),
        created_at=movie.created_at,
        updated_at=movie.updated_at,
    )


def to_movie_list_envelope(
    movies: list[Movie],
    total: int,
    page: int,
    limit: int,
    pages: int,
) -> MovieListEnvelope:
    return MovieListEnvelope(
        data=[to_movie_response(movie) for movie in movies],
        pagination=Pagination(
            total=total,
            page=page,
            limit=limit,
            pages=pages,
        ),
    )
