from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Response

from api.v1.validation import validated_body, validated_id, validated_query
from mappers import movie as movie_mapper
from models.movie import (
    MovieCreate,
    MovieEnvelope,
    MovieListEnvelope,
    MovieQuery,
    MovieUpdate,
)
from services.movie import (
    CreateMovieUseCase,
    DeleteMovieUseCase,
    GetAllMoviesUseCase,
    GetMovieByIdUseCase,
    MovieWriteResult,
    UpdateMovieUseCase,
    WriteStatus,
    get_all_movies_use_case,
    get_create_movie_use_case,
    get_delete_movie_use_case,
    get_movie_by_id_use_case,
    get_update_movie_use_case,
)

MOVIE_NOT_FOUND = 'Фильм не найден'
DIRECTOR_NOT_FOUND = 'Режиссер не найден'

router = APIRouter()


def _write_result_or_error(result: MovieWriteResult) -> MovieEnvelope:
    """Возвращает фильм из результата записи или поднимает ошибку HTTP."""
    if result.status is WriteStatus.DIRECTOR_NOT_FOUND:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail=DIRECTOR_NOT_FOUND,
        )
    if result.status is WriteStatus.MOVIE_NOT_FOUND:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=MOVIE_NOT_FOUND,
        )
    return result.movie


@router.get(
    '',
    response_model=MovieListEnvelope,
    summary='Список фильмов',
    response_description='Страница фильмов и данные пагинации',
    status_code=HTTPStatus.OK,
)
async def get_movies(
    query: MovieQuery = Depends(validated_query(MovieQuery)),
    use_case: GetAllMoviesUseCase = Depends(get_all_movies_use_case),
) -> MovieListEnvelope:
    """Список фильмов с фильтрацией, сортировкой и пагинацией.

    - **page**, **limit**: номер и размер страницы (по умолчанию 1 и 10).
    - **sortBy**, **sortDir**: поле и направление сортировки
      (по умолчанию createdAt, desc).
    - **title**: поиск по части названия без учета регистра.
    - **genre**, **rating**, **releaseDate**: точное совпадение.
    - **director**: id режиссера.
    """
    return await use_case.execute(movie_mapper.to_list_options(query))


@router.post(
    '',
    response_model=MovieEnvelope,
    summary='Создать фильм',
    response_description='Созданный фильм',
    status_code=HTTPStatus.CREATED,
)
async def create_movie(
    movie: MovieCreate = Depends(validated_body(MovieCreate)),
    use_case: CreateMovieUseCase = Depends(get_create_movie_use_case),
) -> MovieEnvelope:
    """Создание фильма.

    Режиссер с переданным id должен существовать, иначе возвращается
    ошибка 400 и фильм не сохраняется.
    """
    result = await use_case.execute(movie_mapper.from_create_dto(movie))
    return _write_result_or_error(result)


@router.get(
    '/{movie_id}',
    response_model=MovieEnvelope,
    summary='Получить фильм',
    response_description='Информация по фильму',
    status_code=HTTPStatus.OK,
)
async def get_movie(
    movie_id: str = Depends(validated_id('movie_id')),
    use_case: GetMovieByIdUseCase = Depends(get_movie_by_id_use_case),
) -> MovieEnvelope:
    movie = await use_case.execute(movie_id)
    if movie is None:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=MOVIE_NOT_FOUND,
        )
    return movie


@router.api_route(
    '/{movie_id}',
    methods=['PATCH', 'PUT'],
    response_model=MovieEnvelope,
    summary='Обновить фильм',
    response_description='Обновленный фильм',
    status_code=HTTPStatus.OK,
)
async def update_movie(
    movie_id: str = Depends(validated_id('movie_id')),
    movie: MovieUpdate = Depends(validated_body(MovieUpdate)),
    use_case: UpdateMovieUseCase = Depends(get_update_movie_use_case),
) -> MovieEnvelope:
    """Частичное обновление фильма: меняются только переданные поля."""
    result = await use_case.execute(
        movie_id,
        movie_mapper.from_update_dto(movie),
    )
    return _write_result_or_error(result)


@router.delete(
    '/{movie_id}',
    summary='Удалить фильм',
    status_code=HTTPStatus.NO_CONTENT,
    response_class=Response,
)
async def delete_movie(
    movie_id: str = Depends(validated_id('movie_id')),
    use_case: DeleteMovieUseCase = Depends(get_delete_movie_use_case),
) -> Response:
    if not await use_case.execute(movie_id):
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=MOVIE_NOT_FOUND,
        )
    return Response(status_code=HTTPStatus.NO_CONTENT)
