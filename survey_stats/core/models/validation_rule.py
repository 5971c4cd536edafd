"""
ValidationRule model representing a configurable constraint applied to survey answers.
"""

from pydantic import BaseModel, Field
from typing import Literal, Dict, Any


RuleType = Literal[
    "required_field", "type_check", "range", "length", "regex", "choice", "past_date"
]


class ValidationRule(BaseModel):
    """
    A configurable constraint applied to one survey field.

    Attributes:
        rule_name: Human-readable name ("age_range")
        rule_type: One of the supported validator types
        field_name: Form field this rule applies to ("age", "favoriteFoods")
        parameters: Rule-specific params (e.g., {"min": 5, "max": 120})
        enabled: Whether rule is active
        severity: "error" (reject submission) or "warning" (report only)
    """

    rule_name: str = Field(..., min_length=1)
    rule_type: RuleType
    field_name: str = Field(..., min_length=1)
    parameters: Dict[str, Any] = Field(default_factory=dict)
    enabled: bool = True
    severity: Literal["error", "warning"] = "error"

    class Config:
        json_schema_extra = {
            "example": {
                "rule_name": "age_range",
                "rule_type": "range",
                "field_name": "age",
                "parameters": {"min": 5, "max": 120},
                "enabled": True,
                "severity": "error"
            }
        }
