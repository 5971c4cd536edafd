"""
ChoiceValidator - validates multi-select answers against a fixed vocabulary.
"""

from typing import Any

from .base_validator import BaseValidator, ValidationError


class ChoiceValidator(BaseValidator):
    """
    Validates a multi-select field.

    Accepts either a list of options or a single delimited string
    ("Pizza, Pasta"). Repeated options are collapsed, keeping the first
    occurrence, before the selection count is checked.

    Parameters:
    - choices: Allowed option values (required)
    - min_selections: Minimum number of distinct options (default 1)
    - max_selections: Maximum number of distinct options (optional)
    - separator: Delimiter for string input (default ",")
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        choices = self.parameters.get("choices")
        if not choices:
            raise ValueError("ChoiceValidator requires 'choices' parameter")

        self.choices: list[str] = [str(c) for c in choices]
        self.min_selections = int(self.parameters.get("min_selections", 1))
        max_selections = self.parameters.get("max_selections")
        self.max_selections = int(max_selections) if max_selections is not None else None
        self.separator = self.parameters.get("separator", ",")

        if self.max_selections is not None and self.max_selections < self.min_selections:
            raise ValueError("max_selections must not be smaller than min_selections")

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if value is None:
            return

        selections = self._split(value)

        unknown = [s for s in selections if s not in self.choices]
        if unknown:
            raise ValidationError(
                rule_name="choice",
                field_name=self.field_name,
                message=f"Unknown option(s) {unknown}; allowed: {self.choices}"
            )

        count = len(selections)
        if count < self.min_selections:
            raise ValidationError(
                rule_name="choice",
                field_name=self.field_name,
                message=f"Select at least {self.min_selections} option(s), got {count}"
            )

        if self.max_selections is not None and count > self.max_selections:
            raise ValidationError(
                rule_name="choice",
                field_name=self.field_name,
                message=f"Select at most {self.max_selections} option(s), got {count}"
            )

    def normalize(self, value: Any) -> Any:
        if value is None:
            return value
        return self._split(value)

    def _split(self, value: Any) -> list[str]:
        """Turn list or delimited-string input into distinct, trimmed options."""
        if isinstance(value, str):
            parts = value.split(self.separator)
        elif isinstance(value, (list, tuple)):
            parts = [str(v) for v in value]
        else:
            raise ValidationError(
                rule_name="choice",
                field_name=self.field_name,
                message=f"Expected a list of options, got {type(value).__name__}"
            )

        selections: list[str] = []
        for part in parts:
            option = part.strip()
            if option and option not in selections:
                selections.append(option)
        return selections

    @property
    def rule_type(self) -> str:
        return "choice"
