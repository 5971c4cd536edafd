"""
Rule configuration management.

Loads survey validation rules from YAML files and provides the built-in
rule set used when no file is given. Either way the result is a list of
plain dicts in the shape of ValidationRule.model_dump().
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from survey_stats.core.models import Food, ValidationRule


# Form field names, in the order the form presents them
RATING_FIELDS = ["eatOutRating", "watchMoviesRating", "watchTVRating", "listenToRadioRating"]

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
EMAIL_MAX_LENGTH = 255


class RuleEntry(BaseModel):
    """One list item under a field in the YAML file."""

    type: str
    name: str | None = None
    params: dict[str, Any] = Field(default_factory=dict)
    severity: Literal["error", "warning"] = "error"
    enabled: bool = True

    class Config:
        extra = "forbid"


class RuleConfigLoader:
    """
    Loads validation rules from a YAML file.

    The file maps each form field to the rules checked for it, in order:

    ```yaml
    rules:
      age:
        - type: required_field
        - type: type_check
          params: {expected_type: int}
        - type: range
          name: age_range
          params: {min: 5, max: 120}
    ```

    Unnamed rules are called ``<field>_<type>_<position>``.
    """

    def __init__(self, config_path: str | Path):
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Rule configuration file not found: {config_path}")

    def load_rules(self) -> list[dict[str, Any]]:
        """
        Read and check every rule in the file.

        Raises:
            ValueError: If the file is not YAML, lacks a ``rules`` mapping,
                        or a rule is malformed
        """
        try:
            document = yaml.safe_load(self.config_path.read_text())
        except yaml.YAMLError as e:
            raise ValueError(f"{self.config_path}: not valid YAML: {e}") from e

        by_field = document.get("rules") if isinstance(document, dict) else None
        if not isinstance(by_field, dict):
            raise ValueError(f"{self.config_path}: configuration file must contain a 'rules' mapping")

        rules: list[dict[str, Any]] = []
        for field_name, entries in by_field.items():
            if not isinstance(entries, list):
                raise ValueError(f"Rules for field '{field_name}' must be a list")
            rules.extend(self._to_rule(field_name, entry, position) for position, entry in enumerate(entries))
        return rules

    @staticmethod
    def _to_rule(field_name: str, entry: Any, position: int) -> dict[str, Any]:
        label = f"{field_name}[{position}]"
        try:
            parsed = RuleEntry.model_validate(entry)
            rule = ValidationRule(
                rule_name=parsed.name or f"{field_name}_{parsed.type}_{position}",
                rule_type=parsed.type,
                field_name=field_name,
                parameters=parsed.params,
                severity=parsed.severity,
                enabled=parsed.enabled,
            )
        except PydanticValidationError as e:
            raise ValueError(f"Invalid rule {label}: {e}") from e
        return rule.model_dump()


class RuleConfigBuilder:
    """
    Builds a rule list in code; each add_* call appends one rule named
    ``<field>_<suffix>`` and returns the builder for chaining.
    """

    def __init__(self):
        self.rules: list[dict[str, Any]] = []

    def _add(self, field_name: str, rule_type: str, suffix: str, **params: Any) -> "RuleConfigBuilder":
        rule = ValidationRule(
            rule_name=f"{field_name}_{suffix}",
            rule_type=rule_type,
            field_name=field_name,
            parameters={k: v for k, v in params.items() if v is not None},
        )
        self.rules.append(rule.model_dump())
        return self

    def add_required_field(self, field_name: str, allow_empty_string: bool = False) -> "RuleConfigBuilder":
        return self._add(field_name, "required_field", "required", allow_empty_string=allow_empty_string)

    def add_type_check(self, field_name: str, expected_type: str, coerce: bool = True) -> "RuleConfigBuilder":
        return self._add(field_name, "type_check", "type_check", expected_type=expected_type, coerce=coerce)

    def add_range(
        self, field_name: str, min_value: float | None = None, max_value: float | None = None
    ) -> "RuleConfigBuilder":
        return self._add(field_name, "range", "range", min=min_value, max=max_value)

    def add_length(
        self, field_name: str, min_length: int | None = None, max_length: int | None = None
    ) -> "RuleConfigBuilder":
        return self._add(field_name, "length", "length", min=min_length, max=max_length)

    def add_regex(
        self,
        field_name: str,
        pattern: str,
        lowercase: bool = False,
        description: str | None = None,
    ) -> "RuleConfigBuilder":
        return self._add(
            field_name, "regex", "regex", pattern=pattern, lowercase=lowercase, description=description
        )

    def add_choice(
        self,
        field_name: str,
        choices: list[str],
        min_selections: int = 1,
        max_selections: int | None = None,
    ) -> "RuleConfigBuilder":
        return self._add(
            field_name, "choice", "choice",
            choices=list(choices), min_selections=min_selections, max_selections=max_selections,
        )

    def add_past_date(self, field_name: str) -> "RuleConfigBuilder":
        """Date must be strictly before the reference day."""
        return self._add(field_name, "past_date", "past_date")

    def build(self) -> list[dict[str, Any]]:
        return list(self.rules)


def default_survey_rules() -> list[dict[str, Any]]:
    """
    Built-in rules for the lifestyle survey form.

    Mirrors config/survey_rules.yaml.
    """
    builder = (
        RuleConfigBuilder()
        .add_required_field("name")
        .add_type_check("name", "str")
        .add_length("name", min_length=1, max_length=50)
        .add_required_field("email")
        .add_type_check("email", "str")
        .add_regex("email", EMAIL_PATTERN, lowercase=True, description="an email address")
        .add_length("email", max_length=EMAIL_MAX_LENGTH)
        .add_required_field("age")
        .add_type_check("age", "int")
        .add_range("age", min_value=5, max_value=120)
        .add_required_field("dob")
        .add_type_check("dob", "date")
        .add_past_date("dob")
        .add_required_field("favoriteFoods")
        .add_choice("favoriteFoods", [food.value for food in Food], min_selections=1, max_selections=3)
    )

    for field_name in RATING_FIELDS:
        (
            builder
            .add_required_field(field_name)
            .add_type_check(field_name, "int")
            .add_range(field_name, min_value=1, max_value=5)
        )

    return builder.build()
