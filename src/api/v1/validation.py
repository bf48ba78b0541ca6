"""Явная валидация входных данных запроса.

Каждая зависимость либо возвращает приведенную к типам модель, либо
прерывает обработку запроса исключением RequestValidationFailed до вызова
сценария.
"""
from dataclasses import dataclass
from typing import Any, Callable, Generic, Type, TypeVar
from uuid import UUID

from fastapi import Request
from pydantic import BaseModel, ValidationError

from core.exceptions import FieldViolation, RequestValidationFailed

ModelType = TypeVar('ModelType', bound=BaseModel)

INVALID_ID_MESSAGE = 'Передан некорректный идентификатор'
NO_DATA_MESSAGE = 'Данные не переданы'
INVALID_JSON_MESSAGE = 'Тело запроса должно быть корректным JSON'


@dataclass(frozen=True)
class Valid(Generic[ModelType]):
    value: ModelType


@dataclass(frozen=True)
class Invalid:
    violations: list[FieldViolation]


def violations_from_error(error: ValidationError) -> list[FieldViolation]:
    """Преобразует ошибки pydantic в список нарушений по полям."""
    violations = []
    for item in error.errors(include_url=False):
        field = '.'.join(str(part) for part in item['loc']) or 'all'
        violations.append(FieldViolation(field=field, message=item['msg']))
    return violations


def validate(
    model: Type[ModelType],
    data: Any,
) -> Valid[ModelType] | Invalid:
    """Проверяет данные по схеме модели.

    Неизвестные поля отбрасываются, отсутствующие необязательные поля
    пропускаются.

    Args:
        model: модель с ограничениями полей.
        data: сырые данные запроса.

    Returns:
        Valid с приведенной моделью или Invalid со списком нарушений.
    """
    if data is None:
        return Invalid([FieldViolation(field='all', message=NO_DATA_MESSAGE)])
    try:
        return Valid(model.model_validate(data))
    except ValidationError as error:
        return Invalid(violations_from_error(error))


def _unwrap(result: Valid[ModelType] | Invalid) -> ModelType:
    if isinstance(result, Invalid):
        raise RequestValidationFailed(result.violations)
    return result.value


def validated_body(model: Type[ModelType]) -> Callable:
    """Зависимость FastAPI: тело запроса, проверенное по модели."""

    async def dependency(request: Request) -> ModelType:
        body = await request.body()
        if not body:
            return _unwrap(validate(model, None))
        try:
            payload = await request.json()
        except ValueError:
            raise RequestValidationFailed([
                FieldViolation(field='body', message=INVALID_JSON_MESSAGE),
            ])
        return _unwrap(validate(model, payload))

    return dependency


def validated_query(model: Type[ModelType]) -> Callable:
    """Зависимость FastAPI: параметры строки запроса, проверенные по модели.
    """

    async def dependency(request: Request) -> ModelType:
        return _unwrap(validate(model, dict(request.query_params)))

    return dependency


def validated_id(param: str) -> Callable:
    """Зависимость FastAPI: идентификатор сущности из пути запроса.

    Args:
        param: имя параметра пути.
    """

    async def dependency(request: Request) -> str:
        raw_id = request.path_params.get(param)
        try:
            return str(UUID(raw_id))
        except (TypeError, ValueError):
            raise RequestValidationFailed([
                FieldViolation(field=param, message=INVALID_ID_MESSAGE),
            ])

    return dependency
