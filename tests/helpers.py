from fastapi import FastAPI

from db.cache import InMemoryCacheStorage
from middleware.rate_limit import InMemoryRateLimiterStorage
from repository.es_repository import (
    get_director_repository,
    get_movie_repository,
)
from tests.fakes import FakeDirectorRepository, FakeMovieRepository


def prepare_app(
    app: FastAPI,
    director_repository: FakeDirectorRepository,
    movie_repository: FakeMovieRepository,
) -> None:
    """Подменяет репозитории и хранилища приложения на хранилища в памяти.

    Жизненный цикл приложения в тестах не запускается, поэтому к ES и
    Redis подключений нет.
    """
    app.state.cache = InMemoryCacheStorage()
    app.state.rate_limiter = InMemoryRateLimiterStorage()
    app.dependency_overrides[get_director_repository] = (
        lambda: director_repository
    )
    app.dependency_overrides[get_movie_repository] = lambda: movie_repository
