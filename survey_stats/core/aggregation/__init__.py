"""
Statistics over a snapshot of survey records.
"""

from .engine import (
    AGE_BRACKETS,
    RECENT_LIMIT,
    TRACKED_FOODS,
    AgeBracket,
    AggregationEngine,
    bracket_for,
    mean,
    percentage,
    population_std_dev,
    rating_histogram,
    recent_submissions,
)

__all__ = [
    "AggregationEngine",
    "AgeBracket",
    "AGE_BRACKETS",
    "RECENT_LIMIT",
    "TRACKED_FOODS",
    "bracket_for",
    "mean",
    "percentage",
    "population_std_dev",
    "rating_histogram",
    "recent_submissions",
]
