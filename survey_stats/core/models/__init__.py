"""
Core data models for the survey statistics service.

All models use Pydantic for runtime validation and type safety.
"""

from .stats_bundle import (
    AgeSummary,
    BracketShare,
    EmptyStats,
    FoodShare,
    RatingSummary,
    RecentSubmission,
    StatsBundle,
)
from .submission_result import HealthStatus, SubmissionResult
from .survey_record import ACTIVITY_FIELDS, Activity, Food, SurveyRecord, SurveySubmission
from .validation_result import ValidationResult
from .validation_rule import ValidationRule

__all__ = [
    "Activity",
    "ACTIVITY_FIELDS",
    "Food",
    "SurveySubmission",
    "SurveyRecord",
    "AgeSummary",
    "BracketShare",
    "FoodShare",
    "RatingSummary",
    "RecentSubmission",
    "StatsBundle",
    "EmptyStats",
    "SubmissionResult",
    "HealthStatus",
    "ValidationResult",
    "ValidationRule",
]
