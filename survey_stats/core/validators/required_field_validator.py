"""
RequiredFieldValidator - ensures a field is present and not null/empty.
"""

from typing import Any, Dict
from .base_validator import BaseValidator, ValidationError


class RequiredFieldValidator(BaseValidator):
    """
    Validates that a required field is present and not null/empty.

    Fails if:
    - Field is missing from the payload
    - Field value is None
    - Field value is a blank string (configurable)
    - Field value is an empty list (multi-select answered with nothing)

    Numeric zero is a present value; range rules decide whether it is valid.
    """

    def __init__(self, field_name: str, parameters: Dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.allow_empty_string = self.parameters.get("allow_empty_string", False)

    def validate(self, value: Any, record: Dict[str, Any]) -> None:
        """
        Validate that the field is present and not null/empty.

        Args:
            value: The field value to validate
            record: The entire payload

        Raises:
            ValidationError: If field is missing, None, blank or an empty list
        """
        if self.field_name not in record:
            raise ValidationError(
                rule_name="required_field",
                field_name=self.field_name,
                message="Field is missing from submission"
            )

        if value is None:
            raise ValidationError(
                rule_name="required_field",
                field_name=self.field_name,
                message="Field value is null"
            )

        if not self.allow_empty_string and isinstance(value, str) and value.strip() == "":
            raise ValidationError(
                rule_name="required_field",
                field_name=self.field_name,
                message="Field value is empty string"
            )

        if isinstance(value, (list, tuple, set)) and len(value) == 0:
            raise ValidationError(
                rule_name="required_field",
                field_name=self.field_name,
                message="No option selected"
            )

    @property
    def rule_type(self) -> str:
        return "required_field"
