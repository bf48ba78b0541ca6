import html
from typing import Annotated

import bleach
from pydantic import AfterValidator, BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel


def sanitize_html(value: str) -> str:
    """Удаляет из строки HTML-разметку и опасный JavaScript.

    bleach экранирует спецсимволы в оставшемся тексте, поэтому экранирование
    снимается. Очистка повторяется, пока строка меняется: теги, записанные
    через HTML-сущности, тоже удаляются.
    """
    if not value:
        return value
    while True:
        cleaned = html.unescape(bleach.clean(value, tags=[], strip=True))
        if cleaned == value:
            return cleaned
        value = cleaned


# Непустая строка, очищенная от HTML.
SafeStr = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1),
    AfterValidator(sanitize_html),
]


class CamelModel(BaseModel):
    """Базовая модель границы API: поля в camelCase снаружи и в snake_case
    внутри приложения.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        validate_by_name=True,
        validate_by_alias=True,
        serialize_by_alias=True,
    )


class RequestModel(CamelModel):
    """Базовая модель входных данных.

    Неизвестные поля отбрасываются, а не приводят к ошибке.
    """
    model_config = ConfigDict(extra='ignore')


class Pagination(CamelModel):
    """Метаданные пагинации."""
    total: int
    page: int
    limit: int
    pages: int
