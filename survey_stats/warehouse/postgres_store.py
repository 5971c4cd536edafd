"""
PostgreSQL-backed record store.

Favourite foods are stored in one comma-separated TEXT column; the
conversion to and from the ordered list of Food values happens only here.
"""

from contextlib import contextmanager
from typing import Any, Iterator

import psycopg
from psycopg import errors as pg_errors
from psycopg_pool import PoolTimeout

from survey_stats.core.models import Food, SurveyRecord, SurveySubmission
from survey_stats.observability.logger import get_logger
from survey_stats.observability.metrics import record_store_error

from .connection import DatabaseConnectionPool
from .errors import ConstraintError, DuplicateKeyError, StoreUnavailable
from .store import BaseRecordStore, RecordSnapshot

logger = get_logger(__name__)

FOOD_SEPARATOR = ", "

SELECT_COLUMNS = """
    id, name, email, age, dob, favorite_foods,
    eat_out_rating, watch_movies_rating, watch_tv_rating, listen_to_radio_rating,
    submission_date
"""


def foods_to_text(foods: list[Food]) -> str:
    """["Pizza", "Pasta"] -> "Pizza, Pasta" """
    return FOOD_SEPARATOR.join(food.value for food in foods)


def foods_from_text(text: str) -> list[Food]:
    """"Pizza, Pasta" -> [Food.PIZZA, Food.PASTA]"""
    foods: list[Food] = []
    for part in text.split(","):
        name = part.strip()
        if name and Food(name) not in foods:
            foods.append(Food(name))
    return foods


def record_from_row(row: dict[str, Any]) -> SurveyRecord:
    return SurveyRecord(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        age=row["age"],
        date_of_birth=row["dob"],
        favorite_foods=foods_from_text(row["favorite_foods"]),
        eat_out_rating=row["eat_out_rating"],
        watch_movies_rating=row["watch_movies_rating"],
        watch_tv_rating=row["watch_tv_rating"],
        listen_to_radio_rating=row["listen_to_radio_rating"],
        submission_timestamp=row["submission_date"],
    )


class _PostgresSnapshot(RecordSnapshot):
    """Reads issued on a connection inside one REPEATABLE READ transaction."""

    def __init__(self, conn: psycopg.Connection):
        self._conn = conn

    def count(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) AS total FROM survey").fetchone()
        return int(row["total"])

    def all(self) -> list[SurveyRecord]:
        rows = self._conn.execute(f"SELECT {SELECT_COLUMNS} FROM survey ORDER BY id").fetchall()
        return [record_from_row(row) for row in rows]

    def recent(self, n: int) -> list[SurveyRecord]:
        if n <= 0:
            return []
        rows = self._conn.execute(
            f"""
            SELECT {SELECT_COLUMNS}
            FROM survey
            ORDER BY submission_date DESC, id DESC
            LIMIT %s
            """,
            (n,),
        ).fetchall()
        return [record_from_row(row) for row in rows]


class PostgresRecordStore(BaseRecordStore):
    """
    Record store on a PostgreSQL table (see SchemaManager for the DDL).

    Email uniqueness and value ranges are table constraints, so a lost
    insert race surfaces as DuplicateKeyError from the database itself.
    """

    INSERT_SQL = """
        INSERT INTO survey (
            name, email, age, dob, favorite_foods,
            eat_out_rating, watch_movies_rating, watch_tv_rating, listen_to_radio_rating
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
        RETURNING id, submission_date
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize the store.

        Args:
            pool: Open database connection pool
        """
        self.pool = pool

    def insert(self, submission: SurveySubmission) -> SurveyRecord:
        params = (
            submission.name,
            submission.email,
            submission.age,
            submission.date_of_birth,
            foods_to_text(submission.favorite_foods),
            submission.eat_out_rating,
            submission.watch_movies_rating,
            submission.watch_tv_rating,
            submission.listen_to_radio_rating,
        )

        try:
            with self.pool.get_connection() as conn:
                with conn.transaction():
                    row = conn.execute(self.INSERT_SQL, params).fetchone()
        except pg_errors.UniqueViolation as e:
            raise DuplicateKeyError(submission.email) from e
        except (pg_errors.IntegrityError, pg_errors.DataError) as e:
            record_store_error("insert", e)
            constraint = getattr(e.diag, "constraint_name", None) or type(e).__name__
            raise ConstraintError(constraint, str(e).strip()) from e
        except (psycopg.Error, PoolTimeout) as e:
            record_store_error("insert", e)
            raise StoreUnavailable(f"Failed to store survey: {e}") from e

        return SurveyRecord.from_submission(submission, row["id"], row["submission_date"])

    @contextmanager
    def snapshot(self) -> Iterator[RecordSnapshot]:
        try:
            with self.pool.get_connection() as conn:
                with conn.transaction():
                    conn.execute("SET TRANSACTION ISOLATION LEVEL REPEATABLE READ, READ ONLY")
                    yield _PostgresSnapshot(conn)
        except (psycopg.Error, PoolTimeout) as e:
            record_store_error("snapshot", e)
            raise StoreUnavailable(f"Failed to read surveys: {e}") from e

    def find_by_email(self, email: str) -> SurveyRecord | None:
        try:
            rows = self.pool.execute_query(
                f"SELECT {SELECT_COLUMNS} FROM survey WHERE lower(email) = lower(%s)", (email,)
            )
        except (psycopg.Error, PoolTimeout) as e:
            record_store_error("find_by_email", e)
            raise StoreUnavailable(f"Failed to look up survey: {e}") from e
        return record_from_row(rows[0]) if rows else None

    def ping(self) -> bool:
        try:
            result = self.pool.execute_query("SELECT 1 AS ok")
            return result[0]["ok"] == 1
        except (psycopg.Error, PoolTimeout, RuntimeError) as e:
            logger.warning("Database ping failed", extra={"error_message": str(e)})
            return False

    def close(self) -> None:
        self.pool.close()
