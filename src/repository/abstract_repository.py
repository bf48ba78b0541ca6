from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from models.director import Director
from models.movie import Movie

EntityType = TypeVar('EntityType')


@dataclass(frozen=True)
class Populate:
    """Какую связь подгрузить и какие поля связанной сущности отдать."""
    path: str
    select: tuple[str, ...] = ()


@dataclass
class FindAllOptions:
    """Параметры выборки списка сущностей."""
    filters: dict[str, Any] = field(default_factory=dict)
    page: int = 1
    limit: int = 10
    # Поле документа -> 1 (по возрастанию) или -1 (по убыванию).
    sort: dict[str, int] = field(default_factory=dict)
    populate: list[Populate] = field(default_factory=list)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class Repository(ABC, Generic[EntityType]):
    @abstractmethod
    async def find_by_id(self, entity_id: str) -> EntityType | None:
        ...

    @abstractmethod
    async def create(self, data: dict[str, Any]) -> EntityType:
        ...

    @abstractmethod
    async def update(
        self,
        entity_id: str,
        data: dict[str, Any],
    ) -> EntityType | None:
        ...

    @abstractmethod
    async def delete(self, entity_id: str) -> bool:
        ...


class DirectorRepository(Repository[Director], ABC):
    pass


class MovieRepository(Repository[Movie], ABC):
    @abstractmethod
    async def find_all(self, options: FindAllOptions) -> list[Movie]:
        ...

    @abstractmethod
    async def get_count(self, filters: dict[str, Any] | None = None) -> int:
        ...

    @abstractmethod
    async def find_by_director(self, director_id: str) -> list[Movie]:
        ...
