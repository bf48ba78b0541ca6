from datetime import date
import uuid

from api.v1.validation import NO_DATA_MESSAGE, Invalid, Valid, validate
from mappers import movie as movie_mapper
from models.director import DirectorCreate
from models.movie import (
    MovieCreate,
    MovieQuery,
    MovieSortField,
    MovieUpdate,
    SortDirection,
)


def test_unknown_fields_are_dropped():
    result = validate(DirectorCreate, {
        'firstName': 'Sofia',
        'secondName': 'Coppola',
        'birthDate': '1971-05-14',
        'bio': 'Director',
        'isAdmin': True,
    })

    assert isinstance(result, Valid)
    assert result.value.birth_date == date(1971, 5, 14)
    assert 'is_admin' not in result.value.model_dump()


def test_missing_payload():
    result = validate(DirectorCreate, None)

    assert isinstance(result, Invalid)
    assert result.violations[0].field == 'all'
    assert result.violations[0].message == NO_DATA_MESSAGE


def test_violations_name_the_fields():
    result = validate(MovieCreate, {
        'title': '',
        'description': 'Plot',
        'releaseDate': 'not-a-date',
        'genre': 'Drama',
        'rating': 11,
        'imdbId': 'tt0000001',
        'director': 'not-a-uuid',
    })

    assert isinstance(result, Invalid)
    fields = {violation.field for violation in result.violations}
    assert fields == {'title', 'releaseDate', 'rating', 'director'}


def test_strings_are_sanitized():
    result = validate(DirectorCreate, {
        'firstName': '<script>alert(1)</script>Ridley',
        'secondName': '<b>Scott</b>',
        'birthDate': '1937-11-30',
        'bio': 'Bio',
    })

    assert isinstance(result, Valid)
    assert '<' not in result.value.first_name
    assert result.value.first_name.endswith('Ridley')
    assert result.value.second_name == 'Scott'


def test_sanitized_strings_keep_plain_text():
    result = validate(DirectorCreate, {
        'firstName': 'Tom & Jerry',
        'secondName': '<i>O\'Brien</i>',
        'birthDate': '1950-01-01',
        'bio': 'a < b && c > d',
    })

    assert isinstance(result, Valid)
    assert result.value.first_name == 'Tom & Jerry'
    assert result.value.second_name == "O'Brien"
    assert result.value.bio == 'a < b && c > d'


def test_entity_encoded_tags_are_removed():
    result = validate(DirectorCreate, {
        'firstName': '&lt;script&gt;alert(1)&lt;/script&gt;Ridley',
        'secondName': 'Scott',
        'birthDate': '1937-11-30',
        'bio': 'Bio',
    })

    assert isinstance(result, Valid)
    assert '<' not in result.value.first_name
    assert 'script' not in result.value.first_name
    assert result.value.first_name.endswith('Ridley')


def test_update_skips_missing_and_null_fields():
    result = validate(MovieUpdate, {'rating': None, 'genre': 'Drama'})

    assert isinstance(result, Valid)
    assert movie_mapper.from_update_dto(result.value) == {'genre': 'Drama'}


def test_create_defaults_rating_to_zero():
    director_id = uuid.uuid4()
    result = validate(MovieCreate, {
        'title': 'Heat',
        'description': 'Crime',
        'releaseDate': '1995-12-15',
        'genre': 'Crime',
        'imdbId': 'tt0113277',
        'director': str(director_id),
    })

    data = movie_mapper.from_create_dto(result.value)
    assert data['rating'] == 0
    assert data['director'] == str(director_id)


def test_query_coerces_strings():
    director_id = str(uuid.uuid4())
    result = validate(MovieQuery, {
        'page': '2',
        'limit': '5',
        'sortBy': 'releaseDate',
        'sortDir': 'ASC',
        'rating': '7.5',
        'releaseDate': '2010-07-16',
        'director': director_id,
    })

    assert isinstance(result, Valid)
    options = movie_mapper.to_list_options(result.value)
    assert options.page == 2
    assert options.limit == 5
    assert options.sort_by is MovieSortField.RELEASE_DATE
    assert options.sort_dir is SortDirection.ASC
    assert options.filters == {
        'rating': 7.5,
        'release_date': date(2010, 7, 16),
        'director': director_id,
    }


def test_query_limits():
    assert isinstance(validate(MovieQuery, {'limit': '101'}), Invalid)
    assert isinstance(validate(MovieQuery, {'page': '0'}), Invalid)
    assert isinstance(validate(MovieQuery, {'sortBy': 'bio'}), Invalid)


def test_empty_query_uses_defaults():
    options = movie_mapper.to_list_options(validate(MovieQuery, {}).value)

    assert options.page == 1
    assert options.limit == 10
    assert options.sort_by is MovieSortField.CREATED_AT
    assert options.sort_dir is SortDirection.DESC
    assert options.filters == {}
