"""
Unit tests for the in-memory record store.

Covers email uniqueness (including concurrent submissions), storage
constraints, recency ordering and snapshot isolation.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest

from survey_stats.warehouse import (
    ConstraintError,
    DuplicateKeyError,
    InMemoryRecordStore,
    StoreUnavailable,
)


BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def with_email(submission, email):
    return submission.model_copy(update={"email": email})


class TestInsert:
    """Tests for InMemoryRecordStore.insert"""

    def test_assigns_id_and_timestamp(self, memory_store, submission):
        first = memory_store.insert(submission)
        second = memory_store.insert(with_email(submission, "other@example.com"))

        assert (first.id, second.id) == (1, 2)
        assert first.submission_timestamp == BASE_TIME
        assert second.submission_timestamp > first.submission_timestamp
        assert memory_store.count() == 2

    def test_duplicate_email_rejected(self, memory_store, submission):
        original = memory_store.insert(submission)

        with pytest.raises(DuplicateKeyError) as exc_info:
            memory_store.insert(submission.model_copy(update={"name": "Someone Else"}))

        assert exc_info.value.email == submission.email
        assert memory_store.count() == 1
        assert memory_store.find_by_email(submission.email) == original

    def test_duplicate_email_ignores_case(self, memory_store, submission):
        """Test that uniqueness holds even when callers skip email normalization"""
        original = memory_store.insert(with_email(submission, "thandi@example.com"))

        with pytest.raises(DuplicateKeyError):
            memory_store.insert(with_email(submission, "THANDI@example.com"))

        assert memory_store.count() == 1
        assert memory_store.find_by_email("Thandi@Example.COM") == original

    def test_concurrent_duplicate_submissions(self, memory_store, submission):
        """Test that exactly one of many simultaneous same-email inserts succeeds"""
        def attempt(_):
            try:
                memory_store.insert(submission)
                return "stored"
            except DuplicateKeyError:
                return "duplicate"

        with ThreadPoolExecutor(max_workers=16) as pool:
            outcomes = list(pool.map(attempt, range(50)))

        assert outcomes.count("stored") == 1
        assert outcomes.count("duplicate") == 49
        assert memory_store.count() == 1

    def test_concurrent_distinct_submissions(self, memory_store, submission):
        emails = [f"user{i}@example.com" for i in range(40)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            records = list(pool.map(lambda e: memory_store.insert(with_email(submission, e)), emails))

        assert sorted(r.id for r in records) == list(range(1, 41))
        assert memory_store.count() == 40

    @pytest.mark.parametrize("update,constraint", [
        ({"age": 200}, "survey_age_range"),
        ({"age": 4}, "survey_age_range"),
        ({"eat_out_rating": 0}, "survey_eat_out_rating_range"),
        ({"listen_to_radio_rating": 6}, "survey_listen_to_radio_rating_range"),
        ({"name": "x" * 51}, "survey_name_length"),
        ({"name": "   "}, "survey_name_length"),
        ({"favorite_foods": []}, "survey_favorite_foods_present"),
        ({"email": "a" * 300 + "@example.com"}, "survey_email_length"),
    ])
    def test_storage_constraints(self, memory_store, submission, update, constraint):
        """Test that values the table would refuse are refused here too"""
        with pytest.raises(ConstraintError) as exc_info:
            memory_store.insert(submission.model_copy(update=update))

        assert exc_info.value.constraint == constraint
        assert memory_store.count() == 0


class TestReads:
    """Tests for snapshots and read operations"""

    def test_recent_newest_first(self, memory_store, submission):
        for i in range(7):
            memory_store.insert(with_email(submission, f"user{i}@example.com"))

        recent = memory_store.recent(5)

        assert [r.id for r in recent] == [7, 6, 5, 4, 3]

    def test_recent_ties_favour_later_insert(self, submission):
        store = InMemoryRecordStore(clock=lambda: BASE_TIME)
        for i in range(3):
            store.insert(with_email(submission, f"user{i}@example.com"))

        assert [r.id for r in store.recent(5)] == [3, 2, 1]

    def test_recent_with_fewer_records(self, memory_store, submission):
        memory_store.insert(submission)
        assert len(memory_store.recent(5)) == 1
        assert memory_store.recent(0) == []

    def test_all_in_insertion_order(self, memory_store, submission):
        for i in range(3):
            memory_store.insert(with_email(submission, f"user{i}@example.com"))
        assert [r.id for r in memory_store.all()] == [1, 2, 3]

    def test_snapshot_is_isolated_from_later_inserts(self, memory_store, submission):
        memory_store.insert(submission)

        with memory_store.snapshot() as snap:
            memory_store.insert(with_email(submission, "late@example.com"))
            assert snap.count() == 1
            assert len(snap.all()) == 1

        assert memory_store.count() == 2

    def test_find_by_email_missing(self, memory_store):
        assert memory_store.find_by_email("nobody@example.com") is None


class TestAvailability:
    """Tests for simulated outages"""

    def test_unavailable_store(self, memory_store, submission):
        memory_store.set_available(False)

        assert memory_store.ping() is False
        with pytest.raises(StoreUnavailable):
            memory_store.insert(submission)
        with pytest.raises(StoreUnavailable):
            memory_store.count()

    def test_store_recovers(self, memory_store, submission):
        memory_store.set_available(False)
        memory_store.set_available(True)

        assert memory_store.ping() is True
        assert memory_store.insert(submission).id == 1
