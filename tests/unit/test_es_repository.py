from types import SimpleNamespace
from unittest.mock import AsyncMock

from elastic_transport import ApiResponseMeta, HttpHeaders, NodeConfig
from elasticsearch import ConnectionError as ESConnectionError
from elasticsearch import NotFoundError
import pytest

from core import utils as utils_module
from core.exceptions import DuplicateEntityError
from db.mappings import DIRECTORS_INDEX, MOVIES_INDEX
from models.director import Director
from repository.abstract_repository import FindAllOptions, Populate
from repository.es_repository import (
    ElasticDirectorRepository,
    ElasticMovieRepository,
)

MOVIE_ID = '8d5e9d3c-4c1e-4f0b-9a57-3f1c2b7a6e01'
DIRECTOR_ID = 'c3a2e6f4-8f14-4a6e-9d1c-1b0f7c1e2a10'

MOVIE_SOURCE = {
    'title': 'Inception',
    'description': 'A thief who steals corporate secrets',
    'release_date': '2010-07-16',
    'genre': 'Sci-Fi',
    'rating': 8.8,
    'imdb_id': 'tt1375666',
    'director': DIRECTOR_ID,
    'created_at': '2024-01-01T00:00:00+00:00',
    'updated_at': '2024-01-01T00:00:00+00:00',
}


def not_found() -> NotFoundError:
    meta = ApiResponseMeta(
        status=404,
        http_version='1.1',
        headers=HttpHeaders(),
        duration=0.0,
        node=NodeConfig('http', 'localhost', 9200),
    )
    return NotFoundError('not_found', meta, {'found': False})


@pytest.fixture(autouse=True)
def no_backoff_sleep(monkeypatch):
    monkeypatch.setattr(
        utils_module, 'asyncio', SimpleNamespace(sleep=AsyncMock()),
    )


@pytest.fixture
def elastic() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def movies(elastic: AsyncMock) -> ElasticMovieRepository:
    return ElasticMovieRepository(elastic)


@pytest.fixture
def directors(elastic: AsyncMock) -> ElasticDirectorRepository:
    return ElasticDirectorRepository(elastic)


@pytest.mark.asyncio
async def test_find_by_id_returns_none_when_storage_is_down(
    elastic: AsyncMock,
    movies: ElasticMovieRepository,
):
    elastic.get.side_effect = ESConnectionError('down')

    assert await movies.find_by_id(MOVIE_ID) is None
    # Ошибки соединения повторяются перед тем, как сдаться.
    assert elastic.get.await_count == 3


@pytest.mark.asyncio
async def test_find_by_id_missing_document(
    elastic: AsyncMock,
    movies: ElasticMovieRepository,
):
    elastic.get.side_effect = not_found()

    assert await movies.find_by_id(MOVIE_ID) is None
    assert elastic.get.await_count == 1


@pytest.mark.asyncio
async def test_find_all_returns_empty_list_when_storage_is_down(
    elastic: AsyncMock,
    movies: ElasticMovieRepository,
):
    elastic.search.side_effect = ESConnectionError('down')

    assert await movies.find_all(FindAllOptions()) == []


@pytest.mark.asyncio
async def test_get_count_returns_zero_when_storage_is_down(
    elastic: AsyncMock,
    movies: ElasticMovieRepository,
):
    elastic.count.side_effect = ESConnectionError('down')

    assert await movies.get_count({'genre': 'Drama'}) == 0


@pytest.mark.asyncio
async def test_find_by_director_returns_empty_list_when_storage_is_down(
    elastic: AsyncMock,
    movies: ElasticMovieRepository,
):
    elastic.count.side_effect = ESConnectionError('down')

    assert await movies.find_by_director(DIRECTOR_ID) == []
    elastic.search.assert_not_awaited()


@pytest.mark.asyncio
async def test_find_all_populates_selected_director_fields(
    elastic: AsyncMock,
    movies: ElasticMovieRepository,
):
    elastic.search.return_value = {
        'hits': {'hits': [{'_id': MOVIE_ID, '_source': MOVIE_SOURCE}]},
    }
    elastic.mget.return_value = {'docs': [{
        '_id': DIRECTOR_ID,
        'found': True,
        '_source': {'first_name': 'Christopher', 'second_name': 'Nolan'},
    }]}
    options = FindAllOptions(
        populate=[Populate('director', ('id', 'first_name', 'second_name'))],
    )

    result = await movies.find_all(options)

    elastic.search.assert_awaited_once_with(
        index=MOVIES_INDEX,
        query={'match_all': {}},
        sort=[{'created_at': {'order': 'desc'}}],
        from_=0,
        size=10,
    )
    elastic.mget.assert_awaited_once_with(
        index=DIRECTORS_INDEX,
        ids=[DIRECTOR_ID],
        source_includes=['first_name', 'second_name'],
    )
    assert len(result) == 1
    assert isinstance(result[0].director, Director)
    assert result[0].director.first_name == 'Christopher'


@pytest.mark.asyncio
async def test_find_all_keeps_reference_to_deleted_director(
    elastic: AsyncMock,
    movies: ElasticMovieRepository,
):
    elastic.search.return_value = {
        'hits': {'hits': [{'_id': MOVIE_ID, '_source': MOVIE_SOURCE}]},
    }
    elastic.mget.return_value = {'docs': [
        {'_id': DIRECTOR_ID, 'found': False},
    ]}

    result = await movies.find_all(
        FindAllOptions(populate=[Populate('director')]),
    )

    assert result[0].director == DIRECTOR_ID
    assert elastic.mget.await_args.kwargs['source_includes'] is None


@pytest.mark.asyncio
async def test_create_reraises_storage_errors(
    elastic: AsyncMock,
    movies: ElasticMovieRepository,
):
    elastic.count.return_value = {'count': 0}
    elastic.index.side_effect = ESConnectionError('down')

    with pytest.raises(ESConnectionError):
        await movies.create({**MOVIE_SOURCE})


@pytest.mark.asyncio
async def test_create_rejects_duplicate_imdb_id(
    elastic: AsyncMock,
    movies: ElasticMovieRepository,
):
    elastic.count.return_value = {'count': 1}

    with pytest.raises(DuplicateEntityError) as error:
        await movies.create({**MOVIE_SOURCE})

    assert str(error.value) == "Фильм с imdbId='tt1375666' уже существует"
    elastic.index.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_checks_imdb_id_against_other_movies(
    elastic: AsyncMock,
    movies: ElasticMovieRepository,
):
    elastic.count.return_value = {'count': 1}

    with pytest.raises(DuplicateEntityError):
        await movies.update(MOVIE_ID, {'imdb_id': 'tt0000001'})

    assert elastic.count.await_args.kwargs['query'] == {'bool': {
        'filter': [{'term': {'imdb_id': 'tt0000001'}}],
        'must_not': [{'ids': {'values': [MOVIE_ID]}}],
    }}
    elastic.update.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_missing_movie(
    elastic: AsyncMock,
    movies: ElasticMovieRepository,
):
    elastic.update.side_effect = not_found()

    assert await movies.update(MOVIE_ID, {'rating': 5}) is None
    elastic.count.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_reraises_storage_errors(
    elastic: AsyncMock,
    movies: ElasticMovieRepository,
):
    elastic.update.side_effect = ESConnectionError('down')

    with pytest.raises(ESConnectionError):
        await movies.update(MOVIE_ID, {'rating': 5})


@pytest.mark.asyncio
async def test_delete_missing_document(
    elastic: AsyncMock,
    movies: ElasticMovieRepository,
):
    elastic.delete.side_effect = not_found()

    assert await movies.delete(MOVIE_ID) is False


@pytest.mark.asyncio
async def test_delete_reraises_storage_errors(
    elastic: AsyncMock,
    directors: ElasticDirectorRepository,
):
    elastic.delete.side_effect = ESConnectionError('down')

    with pytest.raises(ESConnectionError):
        await directors.delete(DIRECTOR_ID)


@pytest.mark.asyncio
async def test_director_lookup_returns_none_when_storage_is_down(
    elastic: AsyncMock,
    directors: ElasticDirectorRepository,
):
    elastic.get.side_effect = ESConnectionError('down')

    assert await directors.find_by_id(DIRECTOR_ID) is None


@pytest.mark.asyncio
async def test_director_create_reraises_storage_errors(
    elastic: AsyncMock,
    directors: ElasticDirectorRepository,
):
    elastic.index.side_effect = ESConnectionError('down')

    with pytest.raises(ESConnectionError):
        await directors.create({
            'first_name': 'Christopher',
            'second_name': 'Nolan',
            'birth_date': '1970-07-30',
            'bio': 'Bio',
        })
