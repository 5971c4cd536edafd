"""
ValidationResult model representing the outcome of checking a survey payload (ephemeral).
"""

from pydantic import BaseModel, Field, field_validator
from typing import List


class ValidationResult(BaseModel):
    """
    Outcome of checking a survey payload against the validation rules.

    Note: ValidationResult is ephemeral, not persisted to database
    (used in-memory while a submission is being checked).

    Attributes:
        passed: Overall validation status
        passed_rules: Rules that succeeded
        failed_rules: Rules that failed
        failed_fields: Field checked by each failed rule
        error_messages: Reason reported by each failed rule
        warnings: Rules with severity "warning" that did not hold
    """

    passed: bool
    passed_rules: List[str] = Field(default_factory=list)
    failed_rules: List[str] = Field(default_factory=list)
    failed_fields: List[str] = Field(default_factory=list)
    error_messages: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @field_validator('failed_rules')
    @classmethod
    def check_passed_consistency(cls, v, info):
        """Validate that passed=True implies failed_rules is empty."""
        if info.data.get('passed') and len(v) > 0:
            raise ValueError("passed=True but failed_rules is not empty")
        return v

    @field_validator('error_messages')
    @classmethod
    def check_arrays_same_length(cls, v, info):
        """Validate that failed_rules and error_messages have the same length."""
        failed_rules = info.data.get('failed_rules', [])
        if len(v) != len(failed_rules):
            raise ValueError(
                f"error_messages length ({len(v)}) must match failed_rules length ({len(failed_rules)})"
            )
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "passed": False,
                "passed_rules": ["name_required", "name_length"],
                "failed_rules": ["age_range"],
                "failed_fields": ["age"],
                "error_messages": ["Value 3 is less than minimum 5"],
                "warnings": []
            }
        }
