"""
TypeValidator - checks (and by default coerces) the type of a form answer.

Form posts carry everything as text, so "4" must count as the rating 4
and "1996-03-14" as a date of birth.
"""

from datetime import date, datetime
from typing import Any, Callable

from .base_validator import BaseValidator, ValidationError


def _to_int(value: Any) -> int:
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value} is not a whole number")
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(f"cannot read {type(value).__name__} as an integer")


def _to_float(value: Any) -> float:
    if isinstance(value, (int, str)):
        return float(value)
    raise TypeError(f"cannot read {type(value).__name__} as a number")


def _to_text(value: Any) -> str:
    if isinstance(value, (int, float)):
        return str(value)
    raise TypeError(f"cannot read {type(value).__name__} as text")


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        # "1996-03-14" or a full ISO timestamp from a date picker
        return date.fromisoformat(value.strip()[:10])
    raise TypeError(f"cannot read {type(value).__name__} as a date")


class TypeValidator(BaseValidator):
    """
    Validates that a field holds the expected type.

    Parameters:
    - expected_type: "int"/"integer", "float"/"decimal", "str"/"string" or "date"
    - coerce: Accept values convertible to the type (default True);
              normalize() returns the converted value

    Booleans never count as numbers and datetimes are reduced to their date.
    """

    TYPES: dict[str, type] = {
        "int": int,
        "integer": int,
        "float": float,
        "decimal": float,
        "str": str,
        "string": str,
        "date": date,
    }

    COERCERS: dict[type, Callable[[Any], Any]] = {
        int: _to_int,
        float: _to_float,
        str: _to_text,
        date: _to_date,
    }

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        name = self.parameters.get("expected_type")
        if not name:
            raise ValueError("TypeValidator requires 'expected_type' parameter")
        if str(name).lower() not in self.TYPES:
            raise ValueError(f"Unsupported type: {name} (expected one of {sorted(self.TYPES)})")

        self.expected_type = self.TYPES[str(name).lower()]
        self.coerce = bool(self.parameters.get("coerce", True))

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if value is None or self._matches(value):
            return

        type_name = self.expected_type.__name__
        if not self.coerce:
            self._fail(f"Expected {type_name}, got {type(value).__name__}")

        try:
            self._convert(value)
        except (ValueError, TypeError) as e:
            raise ValidationError(
                rule_name="type_check",
                field_name=self.field_name,
                message=f"Cannot coerce {type(value).__name__} to {type_name}: {e}"
            ) from e

    def normalize(self, value: Any) -> Any:
        if value is None or self._matches(value):
            return value
        return self._convert(value)

    def _matches(self, value: Any) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, datetime) and self.expected_type is date:
            return False
        return isinstance(value, self.expected_type)

    def _convert(self, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError(f"boolean {value} is not a {self.expected_type.__name__}")
        return self.COERCERS[self.expected_type](value)

    def _fail(self, message: str) -> None:
        raise ValidationError(rule_name="type_check", field_name=self.field_name, message=message)

    @property
    def rule_type(self) -> str:
        return "type_check"
