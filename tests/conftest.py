"""Модуль с фикстурами тестов."""
from datetime import date

from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest

from core.app import app as main_app
from models.director import Director
from tests.fakes import FakeDirectorRepository, FakeMovieRepository
from tests.helpers import prepare_app


@pytest.fixture
def director_repository() -> FakeDirectorRepository:
    return FakeDirectorRepository()


@pytest.fixture
def movie_repository(
    director_repository: FakeDirectorRepository,
) -> FakeMovieRepository:
    return FakeMovieRepository(director_repository)


@pytest.fixture
def director(director_repository: FakeDirectorRepository) -> Director:
    return director_repository.add(
        first_name='Christopher',
        second_name='Nolan',
        birth_date=date(1970, 7, 30),
        bio='British-American film director',
    )


@pytest.fixture
def movie_payload(director: Director) -> dict:
    return {
        'title': 'Inception',
        'description': 'A thief who steals corporate secrets',
        'releaseDate': '2010-07-16',
        'genre': 'Sci-Fi',
        'rating': 8.8,
        'imdbId': 'tt1375666',
        'director': director.id,
    }


@pytest.fixture
def app(
    director_repository: FakeDirectorRepository,
    movie_repository: FakeMovieRepository,
) -> FastAPI:
    prepare_app(main_app, director_repository, movie_repository)
    yield main_app
    main_app.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)
