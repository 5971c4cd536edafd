"""
PostgreSQL connection settings and pool (psycopg3 + psycopg_pool).

The pool is created by whoever builds the record store and handed to it
explicitly; there is no module-level pool.
"""
import os
import time
from contextlib import contextmanager
from typing import Any, Iterator

import psycopg
from psycopg import OperationalError
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool, PoolTimeout
from pydantic import BaseModel, Field

from survey_stats.observability.logger import get_logger

logger = get_logger(__name__)

APPLICATION_NAME = "survey-stats"


class DatabaseSettings(BaseModel):
    """
    Where the survey database lives and how many connections to keep.

    Attributes:
        host: Database host
        port: Database port
        database: Database name
        user: Database user
        password: Database password (required, never logged)
        min_size: Connections kept open
        max_size: Upper bound on concurrent connections
        timeout: Connect timeout and wait for a free connection, in seconds
    """

    host: str = "localhost"
    port: int = Field(5432, gt=0, lt=65536)
    database: str = "surveys"
    user: str = "survey"
    password: str = Field(..., min_length=1, repr=False)
    min_size: int = Field(1, ge=0)
    max_size: int = Field(10, ge=1)
    timeout: float = Field(10.0, gt=0)

    @classmethod
    def from_env(cls, **overrides: Any) -> "DatabaseSettings":
        """
        Build settings from DB_* environment variables.

        Keyword arguments that are not None take precedence over the
        environment.

        Raises:
            ValueError: If no password is configured
        """
        values: dict[str, Any] = {
            "host": os.getenv("DB_HOST"),
            "port": os.getenv("DB_PORT"),
            "database": os.getenv("DB_NAME"),
            "user": os.getenv("DB_USER"),
            "password": os.getenv("DB_PASSWORD"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        if not values.get("password"):
            raise ValueError(
                "Database password must be provided. "
                "Set DB_PASSWORD environment variable or pass --db-password."
            )
        return cls(**{k: v for k, v in values.items() if v is not None})

    @property
    def conninfo(self) -> str:
        return make_conninfo(
            host=self.host,
            port=self.port,
            dbname=self.database,
            user=self.user,
            password=self.password,
            connect_timeout=max(int(self.timeout), 1),
            application_name=APPLICATION_NAME,
        )


class DatabaseConnectionPool:
    """
    Pool of psycopg connections returning rows as dictionaries.

    Args:
        settings: Connection settings; built from the environment plus any
                  keyword overrides (host, port, database, user, password,
                  min_size, max_size, timeout) when omitted
    """

    def __init__(self, settings: DatabaseSettings | None = None, **overrides: Any) -> None:
        self.settings = settings or DatabaseSettings.from_env(**overrides)
        self._pool: ConnectionPool | None = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def open(self, max_retries: int = 3, retry_delay: float = 2.0) -> None:
        """
        Open the pool, waiting until min_size connections are established.

        Retries up to max_retries times, sleeping retry_delay seconds between
        attempts. Opening an already open pool does nothing.

        Raises:
            OperationalError: If the database is still unreachable after the
                              last attempt
        """
        if self._pool is not None:
            return

        s = self.settings
        pool = ConnectionPool(
            conninfo=s.conninfo,
            min_size=s.min_size,
            max_size=s.max_size,
            timeout=s.timeout,
            kwargs={"row_factory": dict_row},
            open=False,
        )

        attempt = 0
        while True:
            attempt += 1
            try:
                pool.open(wait=True, timeout=s.timeout)
                break
            except (OperationalError, PoolTimeout) as e:
                logger.warning(
                    "Database not reachable",
                    extra={"host": s.host, "attempt": attempt, "max_retries": max_retries, "error_message": str(e)},
                )
                if attempt >= max_retries:
                    pool.close()
                    raise OperationalError(
                        f"Could not reach {s.host}:{s.port}/{s.database} after {attempt} attempts: {e}"
                    ) from e
                time.sleep(retry_delay)

        self._pool = pool
        logger.info(
            "Database pool opened",
            extra={"host": s.host, "database": s.database, "attempt": attempt},
        )

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    @contextmanager
    def get_connection(self) -> Iterator[psycopg.Connection]:
        """
        Borrow a connection; it commits on normal exit and rolls back if the
        block raises.

        Raises:
            RuntimeError: If the pool is not open
            PoolTimeout: If no connection frees up within the timeout
        """
        if self._pool is None:
            raise RuntimeError("Connection pool is not open. Call open() first.")

        with self._pool.connection() as conn:
            yield conn

    def execute_query(self, query: str, params: tuple | None = None) -> list[dict]:
        """Run a SELECT and return every row as a dict."""
        with self.get_connection() as conn:
            return conn.execute(query, params).fetchall()

    def execute_command(self, command: str, params: tuple | None = None) -> int:
        """Run DDL or a data-modifying statement; returns the affected row count."""
        with self.get_connection() as conn:
            return conn.execute(command, params).rowcount

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
