"""
Statistics models returned by the query facade (ephemeral, never persisted).
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class AgeSummary(BaseModel):
    """Mean, youngest and oldest respondent age."""

    average: float
    minimum: int
    maximum: int


class BracketShare(BaseModel):
    """
    Respondents falling in one age bracket.

    Attributes:
        label: Human-readable bracket ("19-30")
        count: Number of respondents in the bracket
        percentage: count / total * 100 (not rounded)
    """

    label: str
    count: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0.0, le=100.0)


class FoodShare(BaseModel):
    """Prevalence of one food among all respondents."""

    food: str
    count: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0.0, le=100.0)


class RatingSummary(BaseModel):
    """
    Mean, population standard deviation and histogram for one activity.

    ``histogram[i]`` is the number of respondents who gave rating ``i + 1``.
    """

    average: float
    std_dev: float = Field(..., ge=0.0)
    histogram: list[int] = Field(..., min_length=5, max_length=5)

    def count_for(self, rating: int) -> int:
        """Return the histogram count for a rating in 1..5."""
        if rating < 1 or rating > 5:
            raise ValueError(f"Rating must be between 1 and 5, got {rating}")
        return self.histogram[rating - 1]


class RecentSubmission(BaseModel):
    """Public projection of a record for the dashboard: no contact data, no answers."""

    name: str
    age: int
    submission_timestamp: datetime


class StatsBundle(BaseModel):
    """
    Aggregate statistics over every stored survey record.

    Attributes:
        status: Always "ok" for a populated bundle
        total: Number of records aggregated
        unique_emails: Distinct emails (equal to total, emails are unique)
        age: Age summary
        age_distribution: Bracket key -> share
        food_preferences: Food key -> share
        ratings: Activity value -> rating summary
        recent_submissions: Up to five most recent submissions
    """

    status: Literal["ok"] = "ok"
    total: int = Field(..., ge=1)
    unique_emails: int = Field(..., ge=1)
    age: AgeSummary
    age_distribution: dict[str, BracketShare]
    food_preferences: dict[str, FoodShare]
    ratings: dict[str, RatingSummary]
    recent_submissions: list[RecentSubmission] = Field(default_factory=list, max_length=5)


class EmptyStats(BaseModel):
    """Marker returned when no survey has been stored yet."""

    status: Literal["empty"] = "empty"
    total: Literal[0] = 0
    message: str = "No surveys available yet"
