"""
In-process record store.

Used for tests, demos and single-process deployments. A re-entrant lock
makes the email check and the insert one atomic step, and snapshots copy
the record list under the same lock. Emails are compared case-insensitively,
as the survey table's unique index does.
"""

import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator

from survey_stats.core.models import SurveyRecord, SurveySubmission
from survey_stats.observability.logger import get_logger

from .errors import DuplicateKeyError, StoreUnavailable
from .store import BaseRecordStore, RecordSnapshot, check_storage_constraints

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class _ListSnapshot(RecordSnapshot):
    """Immutable copy of the record list taken at one instant."""

    def __init__(self, records: tuple[SurveyRecord, ...]):
        self._records = records

    def count(self) -> int:
        return len(self._records)

    def all(self) -> list[SurveyRecord]:
        return list(self._records)

    def recent(self, n: int) -> list[SurveyRecord]:
        if n <= 0:
            return []
        ordered = sorted(
            self._records,
            key=lambda r: (r.submission_timestamp, r.id),
            reverse=True,
        )
        return ordered[:n]


class InMemoryRecordStore(BaseRecordStore):
    """
    Record store keeping everything in process memory.

    Args:
        clock: Timestamp source for inserts (defaults to current UTC time)
    """

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or utc_now
        self._lock = threading.RLock()
        self._records: list[SurveyRecord] = []
        self._by_email: dict[str, SurveyRecord] = {}
        self._next_id = 1
        self._available = True

    def insert(self, submission: SurveySubmission) -> SurveyRecord:
        self._ensure_available()
        check_storage_constraints(submission)

        with self._lock:
            key = submission.email.lower()
            if key in self._by_email:
                raise DuplicateKeyError(submission.email)

            record = SurveyRecord.from_submission(submission, self._next_id, self._clock())
            self._next_id += 1
            self._records.append(record)
            self._by_email[key] = record

        logger.debug("Stored survey record", extra={"record_id": record.id})
        return record

    @contextmanager
    def snapshot(self) -> Iterator[RecordSnapshot]:
        self._ensure_available()
        with self._lock:
            records = tuple(self._records)
        yield _ListSnapshot(records)

    def find_by_email(self, email: str) -> SurveyRecord | None:
        self._ensure_available()
        with self._lock:
            return self._by_email.get(email.lower())

    def ping(self) -> bool:
        return self._available

    def set_available(self, available: bool) -> None:
        """Simulate the store going down or coming back."""
        self._available = available

    def _ensure_available(self) -> None:
        if not self._available:
            raise StoreUnavailable("In-memory store is marked unavailable")
