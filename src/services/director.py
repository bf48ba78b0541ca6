from functools import lru_cache
import logging
from typing import Any

from fastapi import Depends

from mappers import director as director_mapper
from models.director import DirectorEnvelope
from repository.abstract_repository import DirectorRepository
from repository.es_repository import get_director_repository


class CreateDirectorUseCase:
    """Создание режиссера."""

    def __init__(self, repository: DirectorRepository) -> None:
        self._repository = repository
        self._logger = logging.getLogger(__name__)

    async def execute(self, data: dict[str, Any]) -> DirectorEnvelope:
        """Создает режиссера.

        Args:
            data: поля режиссера без id и временных меток.

        Returns:
            Созданный режиссер в виде DTO ответа.
        """
        self._logger.info(f'Создание режиссера: {data}')
        try:
            director = await self._repository.create(data)
        except Exception as error:
            self._logger.error(f'Не удалось создать режиссера: {error}')
            raise
        return DirectorEnvelope(
            data=director_mapper.to_director_response(director),
        )


class GetDirectorUseCase:
    """Получение режиссера по id."""

    def __init__(self, repository: DirectorRepository) -> None:
        self._repository = repository
        self._logger = logging.getLogger(__name__)

    async def execute(self, director_id: str) -> DirectorEnvelope | None:
        self._logger.info(f'Получение режиссера {director_id}')
        try:
            director = await self._repository.find_by_id(director_id)
        except Exception as error:
            self._logger.error(
                f'Не удалось получить режиссера {director_id}: {error}',
            )
            raise
        if director is None:
            return None
        return DirectorEnvelope(
            data=director_mapper.to_director_response(director),
        )


class DeleteDirectorUseCase:
    """Удаление режиссера."""

    def __init__(self, repository: DirectorRepository) -> None:
        self._repository = repository
        self._logger = logging.getLogger(__name__)

    async def execute(self, director_id: str) -> bool:
        """Удаляет режиссера.

        Args:
            director_id: уникальный идентификатор.

        Returns:
            True, если режиссер был удален, False, если его не было.
        """
        self._logger.info(f'Удаление режиссера {director_id}')
        try:
            return await self._repository.delete(director_id)
        except Exception as error:
            self._logger.error(
                f'Не удалось удалить режиссера {director_id}: {error}',
            )
            raise


@lru_cache()
def get_create_director_use_case(
    repository: DirectorRepository = Depends(get_director_repository),
) -> CreateDirectorUseCase:
    return CreateDirectorUseCase(repository)


@lru_cache()
def get_director_use_case(
    repository: DirectorRepository = Depends(get_director_repository),
) -> GetDirectorUseCase:
    return GetDirectorUseCase(repository)


@lru_cache()
def get_delete_director_use_case(
    repository: DirectorRepository = Depends(get_director_repository),
) -> DeleteDirectorUseCase:
    return DeleteDirectorUseCase(repository)
