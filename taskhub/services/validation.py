# Rev 0.2.0
"""Field checks shared by the services. Errors are collected, then raised once."""
from __future__ import annotations
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Type

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from taskhub.errors import FieldError, ValidationError
from taskhub.utils.clock import ensure_utc

# accepts "Z" and numeric offsets on every supported interpreter
_TIMESTAMP = TypeAdapter(datetime)


def camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


class FieldChecker:
    def __init__(self, data: Dict[str, Any]):
        self.data = data
        self.errors: List[FieldError] = []

    def fail(self, name: str, message: str) -> None:
        self.errors.append(FieldError(camel(name), message))

    def reject_unknown(self, allowed: Iterable[str]) -> None:
        allowed = set(allowed)
        for key in self.data:
            if key not in allowed:
                self.fail(key, "Unknown field")

    def text(self, name: str, *, required: bool = False, max_length: Optional[int] = None) -> None:
        if name not in self.data:
            if required:
                self.fail(name, "Required")
            return
        value = self.data[name]
        if value is None:
            if required:
                self.fail(name, "Required")
            return
        if not isinstance(value, str):
            self.fail(name, "Expected a string")
            return
        value = value.strip()
        if required and not value:
            self.fail(name, "Must not be empty")
            return
        if max_length is not None and len(value) > max_length:
            self.fail(name, f"At most {max_length} characters")
            return
        self.data[name] = value

    def choice(self, name: str, enum_cls: Type[Enum]) -> None:
        if name not in self.data:
            return
        value = self.data[name]
        try:
            self.data[name] = enum_cls(value.value if isinstance(value, Enum) else value)
        except ValueError:
            allowed = ", ".join(m.value for m in enum_cls)
            self.fail(name, f"Must be one of: {allowed}")

    def integer(self, name: str, *, minimum: Optional[int] = None, maximum: Optional[int] = None,
                nullable: bool = True) -> None:
        if name not in self.data:
            return
        value = self.data[name]
        if value is None:
            if not nullable:
                self.fail(name, "Required")
            return
        if isinstance(value, bool) or not isinstance(value, int):
            self.fail(name, "Expected an integer")
            return
        if minimum is not None and value < minimum:
            self.fail(name, f"Must be >= {minimum}")
        elif maximum is not None and value > maximum:
            self.fail(name, f"Must be <= {maximum}")

    def boolean(self, name: str) -> None:
        if name in self.data and not isinstance(self.data[name], bool):
            self.fail(name, "Expected true or false")

    def timestamp(self, name: str) -> None:
        if name not in self.data or self.data[name] is None:
            return
        value = self.data[name]
        if isinstance(value, datetime):
            self.data[name] = ensure_utc(value)
        elif isinstance(value, date):
            self.data[name] = ensure_utc(datetime(value.year, value.month, value.day))
        elif isinstance(value, str):
            try:
                self.data[name] = ensure_utc(_TIMESTAMP.validate_python(value))
            except PydanticValidationError:
                self.fail(name, "Expected an ISO-8601 date or datetime")
        else:
            self.fail(name, "Expected an ISO-8601 date or datetime")

    def raise_if_failed(self, message: str) -> None:
        if self.errors:
            raise ValidationError(message, self.errors)
