from dataclasses import dataclass


@dataclass(frozen=True)
class FieldViolation:
    """Нарушение ограничения конкретного поля запроса."""
    field: str
    message: str


class RequestValidationFailed(Exception):
    """Входные данные запроса не прошли валидацию."""

    def __init__(self, violations: list[FieldViolation]) -> None:
        self.violations = violations
        super().__init__(
            violations[0].message if violations else 'Ошибка валидации',
        )


class DuplicateEntityError(Exception):
    """Нарушено ограничение уникальности поля сущности."""

    def __init__(self, entity: str, field: str, value: str) -> None:
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(
            f'{entity} с {field}={value!r} уже существует',
        )
