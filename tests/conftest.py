"""
Pytest configuration and fixtures for survey-stats tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import threading
from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest
from testcontainers.postgres import PostgresContainer

from survey_stats.core.models import SurveySubmission
from survey_stats.observability.metrics import REGISTRY
from survey_stats.warehouse import InMemoryRecordStore
from survey_stats.warehouse.connection import DatabaseConnectionPool
from survey_stats.warehouse.postgres_store import PostgresRecordStore
from survey_stats.warehouse.schema_mgmt import SchemaManager

TEST_DB_NAME = "test_surveys"
TEST_DB_USER = "test_survey"
TEST_DB_PASSWORD = "test_password"

BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that exercise the CLI against a real database"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# SURVEY FIXTURES
# =======================

class SteppingClock:
    """Deterministic clock advancing one second per call (thread-safe)."""

    def __init__(self, start: datetime = BASE_TIME, step: timedelta = timedelta(seconds=1)):
        self._next = start
        self._step = step
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            now = self._next
            self._next = now + self._step
            return now


@pytest.fixture
def valid_payload() -> dict:
    """A complete, valid survey form payload as the form posts it"""
    return {
        "name": "Thandi Mokoena",
        "email": "thandi@example.com",
        "age": 29,
        "dob": "1996-03-14",
        "favoriteFoods": ["Pizza", "Pap and Wors"],
        "eatOutRating": 2,
        "watchMoviesRating": 1,
        "watchTVRating": 3,
        "listenToRadioRating": 4,
    }


@pytest.fixture
def submission(valid_payload) -> SurveySubmission:
    """The valid payload as a validated submission"""
    return SurveySubmission.model_validate(valid_payload)


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def memory_store(clock) -> InMemoryRecordStore:
    """Empty in-memory record store with a deterministic clock"""
    return InMemoryRecordStore(clock=clock)


@pytest.fixture
def metric_value():
    """
    Read a sample from the service's metrics registry

    Returns:
        Function (name, **labels) -> current value (0.0 if never recorded)
    """
    def _read(name: str, **labels) -> float:
        return REGISTRY.get_sample_value(name, labels) or 0.0
    return _read


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """
    Start PostgreSQL container for integration tests

    Yields:
        PostgresContainer instance
    """
    with PostgresContainer(
        image="postgres:16.2-alpine",
        username=TEST_DB_USER,
        password=TEST_DB_PASSWORD,
        dbname=TEST_DB_NAME
    ) as postgres:
        # Wait for container to be ready
        postgres.get_connection_url()
        yield postgres


@pytest.fixture(scope="session")
def db_settings(postgres_container) -> dict:
    """Connection settings for the test container"""
    return {
        "host": postgres_container.get_container_host_ip(),
        "port": int(postgres_container.get_exposed_port(5432)),
        "database": TEST_DB_NAME,
        "user": TEST_DB_USER,
        "password": TEST_DB_PASSWORD,
    }


@pytest.fixture(scope="session")
def db_pool(db_settings) -> Generator[DatabaseConnectionPool, None, None]:
    """
    Session-wide connection pool with the survey table created

    Yields:
        Open DatabaseConnectionPool
    """
    pool = DatabaseConnectionPool(**db_settings, max_size=12)
    pool.open()
    SchemaManager(pool).create_schema()
    yield pool
    pool.close()


@pytest.fixture(scope="function")
def clean_db(db_pool) -> DatabaseConnectionPool:
    """
    Provide a clean database by truncating the survey table before each test

    Returns:
        The session pool, with an empty survey table
    """
    SchemaManager(db_pool).truncate()
    return db_pool


@pytest.fixture(scope="function")
def pg_store(clean_db) -> PostgresRecordStore:
    """PostgreSQL record store on an empty survey table (pool stays open)"""
    return PostgresRecordStore(clean_db)
