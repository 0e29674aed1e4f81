# Rev 0.1.0

"""Error taxonomy shared by services and the API layer.

- ValidationError -> HTTP 400 with field-level messages
- NotFoundError   -> HTTP 404
- anything else   -> HTTP 500
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional


class TaskhubError(Exception):
    """Base class for errors raised on purpose by taskhub."""


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def as_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class ValidationError(TaskhubError):
    def __init__(self, message: str, errors: Optional[Iterable[FieldError]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors: List[FieldError] = list(errors or [])

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, [FieldError(field, message)])


class NotFoundError(TaskhubError):
    def __init__(self, entity: str, entity_id: object) -> None:
        super().__init__(f"{entity.capitalize()} not found")
        self.entity = entity
        self.entity_id = entity_id
        self.message = str(self)


class ConfigError(TaskhubError):
    """Raised for settings that cannot be interpreted."""
