"""
Submission validator: applies the survey rules to a raw form payload.

Each field's rules run in order (required check first). A validator that
accepts a value may normalize it, and later rules for the same field see the
normalized value, so the range rule for ``age`` compares an int even when
the form posted "25". After the first failure for a field its remaining
rules are skipped.
"""

from datetime import date
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from survey_stats.core.models import SurveySubmission, ValidationResult
from survey_stats.core.validators import (
    BaseValidator,
    ChoiceValidator,
    LengthValidator,
    PastDateValidator,
    RangeValidator,
    RegexValidator,
    RequiredFieldValidator,
    TypeValidator,
    ValidationError,
)
from survey_stats.observability.logger import get_logger
from survey_stats.observability.metrics import record_validation_failure

from .rule_config import default_survey_rules

logger = get_logger(__name__)


class SubmissionValidator:
    """
    Turns a candidate payload into a SurveySubmission or rejects it.

    Rules come from configuration (see RuleConfigLoader / RuleConfigBuilder);
    with no rules given the built-in survey rules are used.
    """

    VALIDATOR_REGISTRY = {
        "required_field": RequiredFieldValidator,
        "type_check": TypeValidator,
        "range": RangeValidator,
        "length": LengthValidator,
        "regex": RegexValidator,
        "choice": ChoiceValidator,
        "past_date": PastDateValidator,
    }

    def __init__(
        self,
        rules: list[dict[str, Any]] | None = None,
        today: Callable[[], date] | None = None,
    ):
        """
        Initialize the validator with validation rules.

        Args:
            rules: List of rule configurations, each containing:
                   - rule_name: str
                   - rule_type: str (a VALIDATOR_REGISTRY key)
                   - field_name: str
                   - parameters: Dict[str, Any] (optional)
                   - severity: str (error or warning)
                   - enabled: bool (default True)
            today: Reference-day provider for past_date rules
                   (defaults to date.today)
        """
        self.rules = rules if rules is not None else default_survey_rules()
        self.today = today
        self.validators: list[tuple[str, str, BaseValidator]] = []
        self._build_validators()

    def _build_validators(self) -> None:
        """Build validator instances from rule configurations."""
        for rule in self.rules:
            if not rule.get("enabled", True):
                continue

            rule_name = rule["rule_name"]
            rule_type = rule["rule_type"]
            field_name = rule["field_name"]
            parameters = dict(rule.get("parameters") or {})
            severity = rule.get("severity", "error")

            validator_class = self.VALIDATOR_REGISTRY.get(rule_type)
            if not validator_class:
                raise ValueError(f"Unknown rule type: {rule_type}")

            if rule_type == "past_date" and self.today is not None:
                parameters.setdefault("today", self.today)

            try:
                validator = validator_class(field_name, parameters)
            except Exception as e:
                raise ValueError(f"Failed to create validator for rule '{rule_name}': {e}") from e
            self.validators.append((rule_name, severity, validator))

    def check(self, payload: dict[str, Any]) -> ValidationResult:
        """
        Check a payload against every rule and report all failures.

        Args:
            payload: Raw form payload keyed by form field name

        Returns:
            ValidationResult with passed/failed rules and reasons
        """
        result, _, _ = self._run(payload)
        return result

    def validate(self, payload: dict[str, Any]) -> SurveySubmission:
        """
        Validate and normalize a payload.

        Args:
            payload: Raw form payload keyed by form field name

        Returns:
            The normalized SurveySubmission

        Raises:
            ValidationError: For the first failing rule (field order)
        """
        result, errors, normalized = self._run(payload)

        if not result.passed:
            first = errors[0]
            logger.info(
                "Submission rejected",
                extra={
                    "field_name": first.field_name,
                    "rule_type": first.rule_name,
                    "failed_rules": result.failed_rules,
                },
            )
            raise first

        try:
            return SurveySubmission.model_validate(normalized)
        except PydanticValidationError as e:
            error = e.errors()[0]
            field_name = ".".join(str(part) for part in error["loc"]) or "payload"
            record_validation_failure(rule_type="model", field_name=field_name)
            raise ValidationError(
                rule_name="model",
                field_name=field_name,
                message=error["msg"],
            ) from e

    def _run(
        self, payload: dict[str, Any]
    ) -> tuple[ValidationResult, list[ValidationError], dict[str, Any]]:
        normalized = dict(payload)
        passed_rules: list[str] = []
        failed_rules: list[str] = []
        failed_fields: list[str] = []
        error_messages: list[str] = []
        warnings: list[str] = []
        errors: list[ValidationError] = []

        for rule_name, severity, validator in self.validators:
            field_name = validator.field_name
            if field_name in failed_fields:
                continue

            value = normalized.get(field_name)

            try:
                validator.validate(value, normalized)
            except ValidationError as e:
                if severity == "error":
                    failed_rules.append(rule_name)
                    failed_fields.append(field_name)
                    error_messages.append(e.message)
                    errors.append(e)
                    record_validation_failure(rule_type=validator.rule_type, field_name=field_name)
                else:
                    warnings.append(rule_name)
                continue

            if field_name in normalized:
                normalized[field_name] = validator.normalize(value)
            passed_rules.append(rule_name)

        result = ValidationResult(
            passed=len(failed_rules) == 0,
            passed_rules=passed_rules,
            failed_rules=failed_rules,
            failed_fields=failed_fields,
            error_messages=error_messages,
            warnings=warnings,
        )
        return result, errors, normalized

    def get_rule_summary(self) -> dict[str, Any]:
        """
        Get summary of loaded rules.

        Returns:
            Dictionary with rule counts and types
        """
        counts: dict[str, int] = {}
        fields: list[str] = []
        for _, _, validator in self.validators:
            counts[validator.rule_type] = counts.get(validator.rule_type, 0) + 1
            if validator.field_name not in fields:
                fields.append(validator.field_name)
        return {
            "total_rules": len(self.validators),
            "rules_by_type": counts,
            "fields": fields,
        }
