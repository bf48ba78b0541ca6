"""Единый формат ошибок API и обработчики исключений."""
from http import HTTPStatus
import logging

from elastic_transport import TransportError
from elasticsearch import ApiError
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import (
    DuplicateEntityError,
    FieldViolation,
    RequestValidationFailed,
)

INTERNAL_ERROR_MESSAGE = 'Внутренняя ошибка сервера'

_logger = logging.getLogger(__name__)


def error_body(status_code: int, message: str, **extra) -> dict:
    """Тело ответа с ошибкой.

    Args:
        status_code: HTTP-статус.
        message: сообщение для клиента.
        extra: дополнительные поля ответа.

    Returns:
        Словарь вида {statusCode, message, error}.
    """
    return {
        'statusCode': status_code,
        'message': message,
        'error': HTTPStatus(status_code).phrase,
        **extra,
    }


def error_response(
    status_code: int,
    message: str,
    headers: dict[str, str] | None = None,
    **extra,
) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=status_code,
        content=error_body(status_code, message, **extra),
        headers=headers,
    )


def _validation_response(violations: list[FieldViolation]) -> ORJSONResponse:
    return error_response(
        HTTPStatus.BAD_REQUEST,
        violations[0].message if violations else 'Ошибка валидации',
        errors=[
            {'field': item.field, 'message': item.message}
            for item in violations
        ],
    )


async def request_validation_failed_handler(
    request: Request,
    exc: RequestValidationFailed,
) -> ORJSONResponse:
    _logger.warning(
        f'Ошибка валидации: {request.method} {request.url.path}: '
        f'{exc.violations}',
    )
    return _validation_response(exc.violations)


async def request_validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> ORJSONResponse:
    violations = [
        FieldViolation(
            field='.'.join(str(part) for part in item['loc']) or 'all',
            message=item['msg'],
        )
        for item in exc.errors()
    ]
    _logger.warning(
        f'Ошибка валидации: {request.method} {request.url.path}: '
        f'{violations}',
    )
    return _validation_response(violations)


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> ORJSONResponse:
    return error_response(
        exc.status_code,
        str(exc.detail),
        headers=getattr(exc, 'headers', None),
    )


async def duplicate_entity_handler(
    request: Request,
    exc: DuplicateEntityError,
) -> ORJSONResponse:
    _logger.warning(f'Конфликт уникальности: {exc}')
    return error_response(HTTPStatus.CONFLICT, str(exc))


async def storage_error_handler(
    request: Request,
    exc: Exception,
) -> ORJSONResponse:
    _logger.error(
        f'Ошибка хранилища: {request.method} {request.url.path}: {exc}',
    )
    return error_response(
        HTTPStatus.INTERNAL_SERVER_ERROR,
        INTERNAL_ERROR_MESSAGE,
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> ORJSONResponse:
    _logger.error(
        f'Необработанная ошибка: {request.method} {request.url.path}: {exc}',
        exc_info=exc,
    )
    return error_response(
        HTTPStatus.INTERNAL_SERVER_ERROR,
        INTERNAL_ERROR_MESSAGE,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Подключает обработчики исключений к приложению."""
    app.add_exception_handler(
        RequestValidationFailed,
        request_validation_failed_handler,
    )
    app.add_exception_handler(
        RequestValidationError,
        request_validation_error_handler,
    )
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(DuplicateEntityError, duplicate_entity_handler)
    app.add_exception_handler(ApiError, storage_error_handler)
    app.add_exception_handler(TransportError, storage_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
