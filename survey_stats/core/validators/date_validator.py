"""
PastDateValidator - validates that a date lies strictly before today.
"""

from datetime import date
from typing import Any, Callable

from .base_validator import BaseValidator, ValidationError


class PastDateValidator(BaseValidator):
    """
    Validates that a date value is strictly in the past.

    Runs after the type check, so the value is expected to be a ``date``.

    Parameters:
    - today: A date, or a zero-argument callable returning one, used as the
             reference day (default: ``date.today``)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        today = self.parameters.get("today", date.today)
        if isinstance(today, date):
            reference = today
            today = lambda: reference  # noqa: E731
        self._today: Callable[[], date] = today

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if value is None:
            return

        if not isinstance(value, date):
            raise ValidationError(
                rule_name="past_date",
                field_name=self.field_name,
                message=f"Value must be a date, got {type(value).__name__}"
            )

        today = self._today()
        if value >= today:
            raise ValidationError(
                rule_name="past_date",
                field_name=self.field_name,
                message=f"Date {value.isoformat()} must be before {today.isoformat()}"
            )

    @property
    def rule_type(self) -> str:
        return "past_date"
