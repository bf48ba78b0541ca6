from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Annotated, Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from models.base import CamelModel, Pagination, RequestModel, SafeStr
from models.director import Director, DirectorResponse

Rating = Annotated[float, Field(ge=0, le=10)]


class SortDirection(StrEnum):
    ASC = 'asc'
    DESC = 'desc'


class MovieSortField(StrEnum):
    """Поля, по которым разрешена сортировка списка фильмов."""
    TITLE = 'title'
    RELEASE_DATE = 'releaseDate'
    GENRE = 'genre'
    RATING = 'rating'
    IMDB_ID = 'imdbId'
    CREATED_AT = 'createdAt'
    UPDATED_AT = 'updatedAt'


class Movie(BaseModel):
    """Фильм (доменная сущность).

    Режиссер хранится ссылкой (id) и подгружается в сущность по запросу.
    """
    id: str
    title: str
    description: str
    release_date: date
    genre: str
    rating: float = 0
    imdb_id: str
    director: Director | str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def director_id(self) -> str:
        if isinstance(self.director, Director):
            return self.director.id
        return self.director


class MovieCreate(RequestModel):
    """Данные для создания фильма."""
    title: SafeStr
    description: SafeStr
    release_date: date
    genre: SafeStr
    rating: Rating | None = None
    imdb_id: SafeStr
    director: UUID


class MovieUpdate(RequestModel):
    """Частичное обновление фильма: меняются только переданные поля."""
    title: SafeStr | None = None
    description: SafeStr | None = None
    release_date: date | None = None
    genre: SafeStr | None = None
    rating: Rating | None = None
    imdb_id: SafeStr | None = None
    director: UUID | None = None

    @model_validator(mode='before')
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # Явный null считается отсутствием поля.
        if isinstance(data, dict):
            return {key: value for key, value in data.items()
                    if value is not None}
        return data


class MovieQuery(RequestModel):
    """Параметры запроса списка фильмов.

    Значения по умолчанию здесь не подставляются: их задает сценарий
    получения списка.
    """
    page: Annotated[int, Field(ge=1)] | None = None
    limit: Annotated[int, Field(ge=1, le=100)] | None = None
    sort_by: MovieSortField | None = None
    sort_dir: SortDirection | None = None
    title: SafeStr | None = None
    genre: SafeStr | None = None
    rating: Rating | None = None
    release_date: date | None = None
    director: UUID | None = None

    @field_validator('sort_dir', mode='before')
    @classmethod
    def normalize_sort_dir(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.lower()
        return value


@dataclass
class MovieListOptions:
    """Параметры получения списка фильмов с уже подставленными
    значениями по умолчанию.
    """
    page: int = 1
    limit: int = 10
    sort_by: MovieSortField = MovieSortField.CREATED_AT
    sort_dir: SortDirection = SortDirection.DESC
    filters: dict[str, Any] = field(default_factory=dict)


class MovieResponse(CamelModel):
    """Фильм в ответах API."""
    id: str
    title: str
    description: str
    release_date: date
    genre: str
    rating: float
    imdb_id: str
    director: DirectorResponse | None
    created_at: datetime | None
    updated_at: datetime | None


class MovieEnvelope(CamelModel):
    data: MovieResponse


class MovieListEnvelope(CamelModel):
    data: list[MovieResponse]
    pagination: Pagination


class MovieCollection(CamelModel):
    data: list[MovieResponse]
