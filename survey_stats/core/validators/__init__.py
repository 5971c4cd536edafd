"""
Validation rule implementations.

Provides validators for required fields, type checking, ranges, text length,
regex patterns, multi-select choices and past dates.
"""

from .base_validator import BaseValidator, ValidationError
from .choice_validator import ChoiceValidator
from .date_validator import PastDateValidator
from .length_validator import LengthValidator
from .range_validator import RangeValidator
from .regex_validator import RegexValidator
from .required_field_validator import RequiredFieldValidator
from .type_validator import TypeValidator

__all__ = [
    "BaseValidator",
    "ValidationError",
    "RequiredFieldValidator",
    "TypeValidator",
    "RangeValidator",
    "LengthValidator",
    "RegexValidator",
    "ChoiceValidator",
    "PastDateValidator",
]
