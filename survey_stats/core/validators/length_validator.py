"""
LengthValidator - validates the length of a text field.
"""

from typing import Any

from .base_validator import BaseValidator, ValidationError


class LengthValidator(BaseValidator):
    """
    Validates that a text field's length (after trimming) is within bounds.

    Parameters:
    - min: Minimum length (inclusive)
    - max: Maximum length (inclusive)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.min_length = self.parameters.get("min")
        self.max_length = self.parameters.get("max")

        if self.min_length is None and self.max_length is None:
            raise ValueError("LengthValidator requires at least one of: min, max")

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if value is None:
            return

        if not isinstance(value, str):
            raise ValidationError(
                rule_name="length",
                field_name=self.field_name,
                message=f"Value must be text, got {type(value).__name__}"
            )

        length = len(value.strip())

        if self.min_length is not None and length < self.min_length:
            raise ValidationError(
                rule_name="length",
                field_name=self.field_name,
                message=f"Length {length} is shorter than minimum {self.min_length}"
            )

        if self.max_length is not None and length > self.max_length:
            raise ValidationError(
                rule_name="length",
                field_name=self.field_name,
                message=f"Length {length} exceeds maximum {self.max_length}"
            )

    def normalize(self, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @property
    def rule_type(self) -> str:
        return "length"
