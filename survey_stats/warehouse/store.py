"""
Record store interface.

The store exclusively owns persisted survey records. insert() is the only
mutator; every read can be grouped in a snapshot so that a count and the
record list used for one statistics query describe the same data.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator

from survey_stats.core.models import ACTIVITY_FIELDS, SurveyRecord, SurveySubmission

from .errors import ConstraintError

NAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 255
AGE_RANGE = (5, 120)
RATING_RANGE = (1, 5)


def check_storage_constraints(submission: SurveySubmission) -> None:
    """
    Apply the constraints the survey table enforces.

    Raises:
        ConstraintError: Naming the violated constraint
    """
    name = submission.name.strip()
    if not name or len(submission.name) > NAME_MAX_LENGTH:
        raise ConstraintError("survey_name_length", f"name must be 1-{NAME_MAX_LENGTH} characters")

    if not submission.email or len(submission.email) > EMAIL_MAX_LENGTH:
        raise ConstraintError("survey_email_length", f"email must be 1-{EMAIL_MAX_LENGTH} characters")

    low, high = AGE_RANGE
    if not low <= submission.age <= high:
        raise ConstraintError("survey_age_range", f"age {submission.age} outside {low}-{high}")

    if not submission.favorite_foods:
        raise ConstraintError("survey_favorite_foods_present", "at least one favorite food is required")

    low, high = RATING_RANGE
    for field_name in ACTIVITY_FIELDS.values():
        value = getattr(submission, field_name)
        if not low <= value <= high:
            raise ConstraintError(f"survey_{field_name}_range", f"{field_name} {value} outside {low}-{high}")


class RecordSnapshot(ABC):
    """Reads evaluated against one consistent view of the store."""

    @abstractmethod
    def count(self) -> int:
        """Number of records in the view."""

    @abstractmethod
    def all(self) -> list[SurveyRecord]:
        """Every record in the view, in insertion order."""

    @abstractmethod
    def recent(self, n: int) -> list[SurveyRecord]:
        """
        The n most recent records, newest first.

        Records with the same timestamp are ordered by insertion, latest first.
        """


class BaseRecordStore(ABC):
    """Durable keyed storage for survey records."""

    @abstractmethod
    def insert(self, submission: SurveySubmission) -> SurveyRecord:
        """
        Persist a validated submission.

        Returns:
            The stored record with its assigned id and submission timestamp

        Raises:
            DuplicateKeyError: If the email is already stored
            ConstraintError: If a storage constraint is violated
            StoreUnavailable: If the store cannot be reached
        """

    @abstractmethod
    @contextmanager
    def snapshot(self) -> Iterator[RecordSnapshot]:
        """
        Open a consistent read view.

        Raises:
            StoreUnavailable: If the store cannot be reached
        """

    @abstractmethod
    def find_by_email(self, email: str) -> SurveyRecord | None:
        """Return the record stored for an email, if any."""

    @abstractmethod
    def ping(self) -> bool:
        """Round-trip check; True when the store answers. Never raises."""

    def count(self) -> int:
        with self.snapshot() as snap:
            return snap.count()

    def all(self) -> list[SurveyRecord]:
        with self.snapshot() as snap:
            return snap.all()

    def recent(self, n: int) -> list[SurveyRecord]:
        with self.snapshot() as snap:
            return snap.recent(n)

    def close(self) -> None:
        """Release resources held by the store."""
