from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Response

from api.v1.validation import validated_body, validated_id
from mappers import director as director_mapper
from models.director import DirectorCreate, DirectorEnvelope
from models.movie import MovieCollection
from services.director import (
    CreateDirectorUseCase,
    DeleteDirectorUseCase,
    GetDirectorUseCase,
    get_create_director_use_case,
    get_delete_director_use_case,
    get_director_use_case,
)
from services.movie import (
    GetMoviesByDirectorUseCase,
    get_movies_by_director_use_case,
)

DIRECTOR_NOT_FOUND = 'Режиссер не найден'

router = APIRouter()


@router.post(
    '',
    response_model=DirectorEnvelope,
    summary='Создать режиссера',
    response_description='Созданный режиссер',
    status_code=HTTPStatus.CREATED,
)
async def create_director(
    director: DirectorCreate = Depends(validated_body(DirectorCreate)),
    use_case: CreateDirectorUseCase = Depends(get_create_director_use_case),
) -> DirectorEnvelope:
    """Создание режиссера.

    - **firstName**: имя.
    - **secondName**: фамилия.
    - **birthDate**: дата рождения.
    - **bio**: биография.

    В ответе возвращаются только id, имя и фамилия.
    """
    return await use_case.execute(director_mapper.from_create_dto(director))


@router.get(
    '/{director_id}',
    response_model=DirectorEnvelope,
    summary='Получить режиссера',
    response_description='Информация по режиссеру',
    status_code=HTTPStatus.OK,
)
async def get_director(
    director_id: str = Depends(validated_id('director_id')),
    use_case: GetDirectorUseCase = Depends(get_director_use_case),
) -> DirectorEnvelope:
    director = await use_case.execute(director_id)
    if director is None:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=DIRECTOR_NOT_FOUND,
        )
    return director


@router.get(
    '/{director_id}/movies',
    response_model=MovieCollection,
    summary='Фильмы режиссера',
    response_description='Все фильмы режиссера',
    status_code=HTTPStatus.OK,
)
async def get_director_movies(
    director_id: str = Depends(validated_id('director_id')),
    use_case: GetMoviesByDirectorUseCase = Depends(
        get_movies_by_director_use_case,
    ),
) -> MovieCollection:
    return MovieCollection(data=await use_case.execute(director_id))


@router.delete(
    '/{director_id}',
    summary='Удалить режиссера',
    status_code=HTTPStatus.NO_CONTENT,
    response_class=Response,
)
async def delete_director(
    director_id: str = Depends(validated_id('director_id')),
    use_case: DeleteDirectorUseCase = Depends(get_delete_director_use_case),
) -> Response:
    if not await use_case.execute(director_id):
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=DIRECTOR_NOT_FOUND,
        )
    return Response(status_code=HTTPStatus.NO_CONTENT)
