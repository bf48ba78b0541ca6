from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache
import logging
import math
from typing import Any

from fastapi import Depends

from mappers import movie as movie_mapper
from models.movie import (
    MovieEnvelope,
    MovieListEnvelope,
    MovieListOptions,
    MovieResponse,
    SortDirection,
)
from repository.abstract_repository import (
    DirectorRepository,
    FindAllOptions,
    MovieRepository,
    Populate,
)
from repository.es_repository import (
    get_director_repository,
    get_movie_repository,
)

# Поля режиссера, которые отдаются в составе списка фильмов.
_DIRECTOR_LIST_FIELDS = ('id', 'first_name', 'second_name')


class WriteStatus(StrEnum):
    OK = 'ok'
    DIRECTOR_NOT_FOUND = 'director_not_found'
    MOVIE_NOT_FOUND = 'movie_not_found'


@dataclass(frozen=True)
class MovieWriteResult:
    """Результат создания или обновления фильма.

    Позволяет отличить отсутствующий фильм от отсутствующего режиссера.
    """
    status: WriteStatus
    movie: MovieEnvelope | None = None

    @property
    def ok(self) -> bool:
        return self.status is WriteStatus.OK


class DirectorLookupService:
    """Проверки, связанные с режиссером фильма."""

    def __init__(self, director_repository: DirectorRepository) -> None:
        self._director_repository = director_repository
        self._logger = logging.getLogger(__name__)

    async def director_exists(self, director_id: str) -> bool:
        """Проверяет, существует ли режиссер.

        Args:
            director_id: уникальный идентификатор режиссера.

        Returns:
            True, если режиссер найден.
        """
        try:
            director = await self._director_repository.find_by_id(director_id)
        except Exception as error:
            self._logger.error(
                f'Ошибка проверки существования режиссера {director_id}: '
                f'{error}',
            )
            raise
        return director is not None


class CreateMovieUseCase:
    """Создание фильма."""

    def __init__(
        self,
        repository: MovieRepository,
        director_lookup: DirectorLookupService,
    ) -> None:
        self._repository = repository
        self._director_lookup = director_lookup
        self._logger = logging.getLogger(__name__)

    async def execute(self, data: dict[str, Any]) -> MovieWriteResult:
        """Создает фильм, если существует указанный режиссер.

        Args:
            data: поля фильма без id и временных меток.

        Returns:
            Результат с созданным фильмом или статус
            DIRECTOR_NOT_FOUND, если режиссера нет. В этом случае
            ничего не сохраняется.
        """
        self._logger.info(f'Создание фильма: {data}')
        try:
            if not await self._director_lookup.director_exists(
                data['director'],
            ):
                self._logger.debug(f'Режиссер {data["director"]} не найден')
                return MovieWriteResult(WriteStatus.DIRECTOR_NOT_FOUND)

            movie = await self._repository.create(data)
        except Exception as error:
            self._logger.error(f'Не удалось создать фильм: {error}')
            raise
        return MovieWriteResult(
            WriteStatus.OK,
            MovieEnvelope(data=movie_mapper.to_movie_response(movie)),
        )


class GetMovieByIdUseCase:
    """Получение фильма по id."""

    def __init__(self, repository: MovieRepository) -> None:
        self._repository = repository
        self._logger = logging.getLogger(__name__)

    async def execute(self, movie_id: str) -> MovieEnvelope | None:
        """Возвращает фильм или None, если его нет."""
        self._logger.info(f'Получение фильма {movie_id}')
        try:
            movie = await self._repository.find_by_id(movie_id)
        except Exception as error:
            self._logger.error(
                f'Не удалось получить фильм {movie_id}: {error}',
            )
            raise
        if movie is None:
            return None
        return MovieEnvelope(data=movie_mapper.to_movie_response(movie))


class GetAllMoviesUseCase:
    """Получение списка фильмов с фильтрацией, сортировкой и пагинацией."""

    def __init__(self, repository: MovieRepository) -> None:
        self._repository = repository
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        options: MovieListOptions | None = None,
    ) -> MovieListEnvelope:
        """Возвращает страницу фильмов и метаданные пагинации.

        Args:
            options: номер и размер страницы, поле и направление
                сортировки, фильтры. Отсутствующие параметры берутся
                по умолчанию: page=1, limit=10, сортировка по createdAt
                по убыванию.

        Returns:
            Фильмы страницы и общее число найденных фильмов.
        """
        options = options or MovieListOptions()
        direction = -1 if options.sort_dir == SortDirection.DESC else 1
        sort = {movie_mapper.SORT_FIELDS[options.sort_by]: direction}

        self._logger.info(f'Получение списка фильмов: {options}')
        try:
            movies = await self._repository.find_all(FindAllOptions(
                filters=options.filters,
                page=options.page,
                limit=options.limit,
                sort=sort,
                populate=[Populate('director', _DIRECTOR_LIST_FIELDS)],
            ))
            total = await self._repository.get_count(options.filters)
        except Exception as error:
            self._logger.error(f'Не удалось получить список фильмов: {error}')
            raise

        return movie_mapper.to_movie_list_envelope(
            movies,
            total=total,
            page=options.page,
            limit=options.limit,
            pages=math.ceil(total / options.limit),
        )


class GetMoviesByDirectorUseCase:
    """Получение всех фильмов режиссера."""

    def __init__(self, repository: MovieRepository) -> None:
        self._repository = repository
        self._logger = logging.getLogger(__name__)

    async def execute(self, director_id: str) -> list[MovieResponse]:
        self._logger.info(f'Получение фильмов режиссера {director_id}')
        try:
            movies = await self._repository.find_by_director(director_id)
        except Exception as error:
            self._logger.error(
                f'Не удалось получить фильмы режиссера {director_id}: '
                f'{error}',
            )
            raise
        return [movie_mapper.to_movie_response(movie) for movie in movies]


class UpdateMovieUseCase:
    """Частичное обновление фильма."""

    def __init__(
        self,
        repository: MovieRepository,
        director_lookup: DirectorLookupService,
    ) -> None:
        self._repository = repository
        self._director_lookup = director_lookup
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        movie_id: str,
        data: dict[str, Any],
    ) -> MovieWriteResult:
        """Обновляет переданные поля фильма.

        Если в обновлении указан режиссер, он должен существовать.

        Args:
            movie_id: уникальный идентификатор фильма.
            data: изменяемые поля.

        Returns:
            Результат с обновленным фильмом, либо статус
            DIRECTOR_NOT_FOUND или MOVIE_NOT_FOUND.
        """
        self._logger.info(f'Обновление фильма {movie_id}: {data}')
        try:
            director_id = data.get('director')
            if director_id and not await self._director_lookup.director_exists(
                director_id,
            ):
                self._logger.debug(f'Режиссер {director_id} не найден')
                return MovieWriteResult(WriteStatus.DIRECTOR_NOT_FOUND)

            movie = await self._repository.update(movie_id, data)
        except Exception as error:
            self._logger.error(
                f'Не удалось обновить фильм {movie_id}: {error}',
            )
            raise
        if movie is None:
            return MovieWriteResult(WriteStatus.MOVIE_NOT_FOUND)
        return MovieWriteResult(
            WriteStatus.OK,
            MovieEnvelope(data=movie_mapper.to_movie_response(movie)),
        )


class DeleteMovieUseCase:
    """Удаление фильма."""

    def __init__(self, repository: MovieRepository) -> None:
        self._repository = repository
        self._logger = logging.getLogger(__name__)

    async def execute(self, movie_id: str) -> bool:
        self._logger.info(f'Удаление фильма {movie_id}')
        try:
            return await self._repository.delete(movie_id)
        except Exception as error:
            self._logger.error(
                f'Не удалось удалить фильм {movie_id}: {error}',
            )
            raise


@lru_cache()
def get_director_lookup_service(
    director_repository: DirectorRepository = Depends(
        get_director_repository,
    ),
) -> DirectorLookupService:
    return DirectorLookupService(director_repository)


@lru_cache()
def get_create_movie_use_case(
    repository: MovieRepository = Depends(get_movie_repository),
    director_lookup: DirectorLookupService = Depends(
        get_director_lookup_service,
    ),
) -> CreateMovieUseCase:
    """Функция-провайдер сценария создания фильма.

    Args:
        repository: репозиторий фильмов.
        director_lookup: сервис проверки режиссера.

    Returns:
        Объект CreateMovieUseCase.
    """
    return CreateMovieUseCase(repository, director_lookup)


@lru_cache()
def get_movie_by_id_use_case(
    repository: MovieRepository = Depends(get_movie_repository),
) -> GetMovieByIdUseCase:
    return GetMovieByIdUseCase(repository)


@lru_cache()
def get_all_movies_use_case(
    repository: MovieRepository = Depends(get_movie_repository),
) -> GetAllMoviesUseCase:
    return GetAllMoviesUseCase(repository)


@lru_cache()
def get_movies_by_director_use_case(
    repository: MovieRepository = Depends(get_movie_repository),
) -> GetMoviesByDirectorUseCase:
    return GetMoviesByDirectorUseCase(repository)


@lru_cache()
def get_update_movie_use_case(
    repository: MovieRepository = Depends(get_movie_repository),
    director_lookup: DirectorLookupService = Depends(
        get_director_lookup_service,
    ),
) -> UpdateMovieUseCase:
    return UpdateMovieUseCase(repository, director_lookup)


@lru_cache()
def get_delete_movie_use_case(
    repository: MovieRepository = Depends(get_movie_repository),
) -> DeleteMovieUseCase:
    return DeleteMovieUseCase(repository)
