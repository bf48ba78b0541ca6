"""Преобразования режиссера между документом хранилища, доменной сущностью
и DTO.
"""
from typing import Any

from models.director import Director, DirectorCreate, DirectorResponse


def from_create_dto(dto: DirectorCreate) -> dict[str, Any]:
    """Данные для создания сущности из входного DTO."""
    return dto.model_dump(by_alias=False)


def to_document(data: dict[str, Any]) -> dict[str, Any]:
    """Приводит поля сущности к виду документа Elasticsearch."""
    document = dict(data)
    for date_field in ('birth_date', 'created_at', 'updated_at'):
        value = document.get(date_field)
        if value is not None and not isinstance(value, str):
            document[date_field] = value.isoformat()
    return document


def to_entity(doc_id: str, source: dict[str, Any]) -> Director:
    """Собирает доменную сущность из документа Elasticsearch."""
    return Director.model_validate({**source, 'id': doc_id})


def to_director_response(
    director: Director | str | None,
) -> DirectorResponse | None:
    """DTO режиссера для ответа API.

    Если режиссер не был подгружен (передана только ссылка), возвращает
    None.
    """
    if not isinstance(director, Director):
        return None
    return DirectorResponse(
        id=director.id,
        first_name=director.first_name,
        second_name=director.second_name,
    )
