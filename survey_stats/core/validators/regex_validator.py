"""
RegexValidator - checks text answers (email addresses) against a pattern.
"""

import re
from typing import Any

from .base_validator import BaseValidator, ValidationError


class RegexValidator(BaseValidator):
    """
    Validates that the trimmed text of a field matches a pattern.

    The whole value must match, not just a prefix. Normalizing trims the
    value and, with ``lowercase``, folds it to lower case so that
    "Ann@Example.com " and "ann@example.com" are stored as the same address.

    Parameters:
    - pattern: Regular expression (string or compiled pattern)
    - flags: Regex flags for a string pattern (e.g. re.IGNORECASE)
    - lowercase: Lower-case the value when normalizing
    - description: What the pattern describes, used in the error message
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        pattern = self.parameters.get("pattern")
        if not pattern:
            raise ValueError("RegexValidator requires 'pattern' parameter")

        if isinstance(pattern, re.Pattern):
            self.pattern = pattern
        elif isinstance(pattern, str):
            try:
                self.pattern = re.compile(pattern, self.parameters.get("flags", 0))
            except re.error as e:
                raise ValueError(f"Invalid regex pattern: {e}") from e
        else:
            raise ValueError(f"Pattern must be string or compiled Pattern, got {type(pattern)}")

        self.lowercase = bool(self.parameters.get("lowercase", False))
        self.description = self.parameters.get("description")

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if value is None:
            return

        text = str(value).strip()
        if self.pattern.fullmatch(text) is None:
            expected = self.description or f"pattern '{self.pattern.pattern}'"
            raise ValidationError(
                rule_name="regex",
                field_name=self.field_name,
                message=f"Value '{text}' does not match {expected}"
            )

    def normalize(self, value: Any) -> Any:
        if value is None:
            return value
        text = str(value).strip()
        return text.lower() if self.lowercase else text

    @property
    def rule_type(self) -> str:
        return "regex"
