"""
Aggregation engine: turns a snapshot of survey records into a StatsBundle.

Everything here is a pure function of its input. No I/O, no shared state,
the same snapshot always produces the same bundle. Percentages are returned
unrounded; rounding is left to whoever displays them.
"""

import math
from typing import Iterable, NamedTuple, Sequence

from survey_stats.core.models import (
    Activity,
    AgeSummary,
    BracketShare,
    Food,
    FoodShare,
    RatingSummary,
    RecentSubmission,
    StatsBundle,
    SurveyRecord,
)

RATING_SCALE = (1, 2, 3, 4, 5)
RECENT_LIMIT = 5


class AgeBracket(NamedTuple):
    """An age bracket; ``upper`` is inclusive and None means unbounded."""

    key: str
    label: str
    upper: int | None


# Ordered by upper bound; an age belongs to the first bracket whose upper
# bound it does not exceed, so every age lands in exactly one bracket.
AGE_BRACKETS: tuple[AgeBracket, ...] = (
    AgeBracket("under_18", "18 and under", 18),
    AgeBracket("age_19_to_30", "19-30", 30),
    AgeBracket("age_31_to_45", "31-45", 45),
    AgeBracket("over_45", "over 45", None),
)

# Foods reported on the dashboard ("Other" is collected but not reported)
TRACKED_FOODS: dict[str, Food] = {
    "pizza": Food.PIZZA,
    "pasta": Food.PASTA,
    "pap_and_wors": Food.PAP_AND_WORS,
}


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; raises ValueError for an empty sequence."""
    if not values:
        raise ValueError("mean of an empty sequence")
    return math.fsum(values) / len(values)


def population_std_dev(values: Sequence[float]) -> float:
    """
    Population standard deviation, sqrt(mean(x^2) - mean(x)^2).

    The variance is clamped at zero so rounding can never produce the
    square root of a negative number.
    """
    m = mean(values)
    mean_of_squares = math.fsum(v * v for v in values) / len(values)
    variance = max(mean_of_squares - m * m, 0.0)
    return math.sqrt(variance)


def percentage(count: int, total: int) -> float:
    """count / total * 100 as a float."""
    if total <= 0:
        raise ValueError(f"total must be positive, got {total}")
    return count / total * 100.0


def bracket_for(age: int) -> AgeBracket:
    for bracket in AGE_BRACKETS:
        if bracket.upper is None or age <= bracket.upper:
            return bracket
    raise AssertionError("last age bracket is unbounded")


def rating_histogram(values: Iterable[int]) -> list[int]:
    """
    Count ratings into five buckets.

    Bucket ``i`` holds the count for rating ``i + 1``.

    Raises:
        ValueError: If a rating is outside 1..5
    """
    buckets = [0] * len(RATING_SCALE)
    for value in values:
        if value not in RATING_SCALE:
            raise ValueError(f"Rating {value} is outside 1..5")
        buckets[value - 1] += 1
    return buckets


def recent_submissions(
    records: Iterable[SurveyRecord], limit: int = RECENT_LIMIT
) -> list[SurveyRecord]:
    """Most recent records first; equal timestamps favour the later insert."""
    ordered = sorted(
        records,
        key=lambda r: (r.submission_timestamp, r.id),
        reverse=True,
    )
    return ordered[:limit]


def project_recent(record: SurveyRecord) -> RecentSubmission:
    """Reduce a record to the fields the public dashboard may show."""
    return RecentSubmission(
        name=record.name,
        age=record.age,
        submission_timestamp=record.submission_timestamp,
    )


class AggregationEngine:
    """
    Computes the statistics bundle for a full record snapshot.

    The caller is expected to handle the empty case (see StatisticsService);
    aggregate() refuses an empty snapshot rather than inventing values.
    """

    def __init__(self, recent_limit: int = RECENT_LIMIT):
        if recent_limit < 0:
            raise ValueError("recent_limit must not be negative")
        self.recent_limit = recent_limit

    def aggregate(
        self,
        records: Sequence[SurveyRecord],
        total: int | None = None,
        recent: Sequence[SurveyRecord] | None = None,
    ) -> StatsBundle:
        """
        Aggregate a snapshot of survey records.

        Args:
            records: Every stored record at one point in time
            total: Record count read in the same snapshot (checked against
                   len(records) when given)
            recent: Pre-ordered most recent records from the store; derived
                    from ``records`` when omitted

        Returns:
            StatsBundle

        Raises:
            ValueError: If the snapshot is empty or inconsistent with total
        """
        n = len(records)
        if n == 0:
            raise ValueError("Cannot aggregate an empty snapshot")
        if total is not None and total != n:
            raise ValueError(f"Snapshot holds {n} records but total is {total}")

        if recent is None:
            recent = recent_submissions(records, self.recent_limit)

        return StatsBundle(
            total=n,
            unique_emails=n,
            age=self.age_summary(records),
            age_distribution=self.age_distribution(records),
            food_preferences=self.food_prevalence(records),
            ratings=self.rating_summaries(records),
            recent_submissions=[project_recent(r) for r in recent[: self.recent_limit]],
        )

    def age_summary(self, records: Sequence[SurveyRecord]) -> AgeSummary:
        ages = [r.age for r in records]
        return AgeSummary(average=mean(ages), minimum=min(ages), maximum=max(ages))

    def age_distribution(self, records: Sequence[SurveyRecord]) -> dict[str, BracketShare]:
        counts = {bracket.key: 0 for bracket in AGE_BRACKETS}
        for record in records:
            counts[bracket_for(record.age).key] += 1

        total = len(records)
        return {
            bracket.key: BracketShare(
                label=bracket.label,
                count=counts[bracket.key],
                percentage=percentage(counts[bracket.key], total),
            )
            for bracket in AGE_BRACKETS
        }

    def food_prevalence(self, records: Sequence[SurveyRecord]) -> dict[str, FoodShare]:
        total = len(records)
        shares = {}
        for key, food in TRACKED_FOODS.items():
            count = sum(1 for r in records if r.likes(food))
            shares[key] = FoodShare(
                food=food.value,
                count=count,
                percentage=percentage(count, total),
            )
        return shares

    def rating_summaries(self, records: Sequence[SurveyRecord]) -> dict[str, RatingSummary]:
        summaries = {}
        for activity in Activity:
            values = [r.rating_for(activity) for r in records]
            summaries[activity.value] = RatingSummary(
                average=mean(values),
                std_dev=population_std_dev(values),
                histogram=rating_histogram(values),
            )
        return summaries
