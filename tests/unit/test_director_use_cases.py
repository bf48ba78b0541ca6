from datetime import date
import uuid

import pytest

from models.director import Director
from services.director import (
    CreateDirectorUseCase,
    DeleteDirectorUseCase,
    GetDirectorUseCase,
)
from tests.fakes import FakeDirectorRepository


@pytest.mark.asyncio
async def test_create_director_hides_private_fields(
    director_repository: FakeDirectorRepository,
):
    envelope = await CreateDirectorUseCase(director_repository).execute({
        'first_name': 'Greta',
        'second_name': 'Gerwig',
        'birth_date': date(1983, 8, 4),
        'bio': 'American director',
    })

    dumped = envelope.model_dump()
    assert set(dumped['data']) == {'id', 'firstName', 'secondName'}
    assert envelope.data.id in director_repository.items


@pytest.mark.asyncio
async def test_get_director(
    director_repository: FakeDirectorRepository,
    director: Director,
):
    use_case = GetDirectorUseCase(director_repository)

    assert (await use_case.execute(director.id)).data.first_name == (
        'Christopher'
    )
    assert await use_case.execute(str(uuid.uuid4())) is None


@pytest.mark.asyncio
async def test_delete_director(
    director_repository: FakeDirectorRepository,
    director: Director,
):
    use_case = DeleteDirectorUseCase(director_repository)

    assert await use_case.execute(director.id) is True
    assert await use_case.execute(director.id) is False
