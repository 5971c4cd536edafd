"""
RangeValidator - checks that a numeric answer lies on its scale.
"""

from typing import Any

from .base_validator import BaseValidator, ValidationError


class RangeValidator(BaseValidator):
    """
    Validates that a number lies within inclusive bounds.

    Used for ages (5-120) and for the 1-5 agreement scale. Runs after the
    type check, so strings have already been coerced; booleans are refused
    even though Python treats them as integers.

    Parameters:
    - min: Lowest accepted value (inclusive)
    - max: Highest accepted value (inclusive)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.min_value = self.parameters.get("min")
        self.max_value = self.parameters.get("max")

        if self.min_value is None and self.max_value is None:
            raise ValueError("RangeValidator requires at least one of: min, max")
        if (
            self.min_value is not None
            and self.max_value is not None
            and self.min_value > self.max_value
        ):
            raise ValueError(f"min ({self.min_value}) is greater than max ({self.max_value})")

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if value is None:
            return

        if isinstance(value, bool) or not isinstance(value, int | float):
            self._fail(f"Expected a number, got {type(value).__name__}")

        too_low = self.min_value is not None and value < self.min_value
        too_high = self.max_value is not None and value > self.max_value
        if too_low or too_high:
            self._fail(f"Value {value} is outside {self.bounds}")

    @property
    def bounds(self) -> str:
        """Human-readable accepted interval, e.g. "1-5" or ">= 5"."""
        if self.min_value is None:
            return f"<= {self.max_value}"
        if self.max_value is None:
            return f">= {self.min_value}"
        return f"{self.min_value}-{self.max_value}"

    def _fail(self, message: str) -> None:
        raise ValidationError(rule_name="range", field_name=self.field_name, message=message)

    @property
    def rule_type(self) -> str:
        return "range"
