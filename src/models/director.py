from datetime import date, datetime

from pydantic import BaseModel

from models.base import CamelModel, RequestModel, SafeStr


class Director(BaseModel):
    """Режиссер (доменная сущность).

    При частичной подгрузке в составе фильма заполнены только
    запрошенные поля.
    """
    id: str
    first_name: str
    second_name: str
    birth_date: date | None = None
    bio: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DirectorCreate(RequestModel):
    """Данные для создания режиссера."""
    first_name: SafeStr
    second_name: SafeStr
    birth_date: date
    bio: SafeStr


class DirectorResponse(CamelModel):
    """Режиссер в ответах API.

    Биография, дата рождения и временные метки наружу не отдаются.
    """
    id: str
    first_name: str
    second_name: str


class DirectorEnvelope(CamelModel):
    data: DirectorResponse
