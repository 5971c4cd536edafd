"""
Schema management for the survey table.

The uniqueness and range constraints live in the table definition so that
PostgreSQL itself rejects a duplicate email or an out-of-range rating, even
when two submissions race. Emails are unique regardless of letter case.
"""

from .connection import DatabaseConnectionPool

SURVEY_TABLE = "survey"

SURVEY_SCHEMA_DDL = """
CREATE TABLE IF NOT EXISTS survey (
    id                      SERIAL PRIMARY KEY,
    name                    VARCHAR(50)  NOT NULL
        CONSTRAINT survey_name_length CHECK (length(btrim(name)) > 0),
    email                   TEXT         NOT NULL
        CONSTRAINT survey_email_length CHECK (length(email) BETWEEN 1 AND 255),
    age                     INTEGER      NOT NULL
        CONSTRAINT survey_age_range CHECK (age BETWEEN 5 AND 120),
    dob                     DATE         NOT NULL,
    favorite_foods          TEXT         NOT NULL
        CONSTRAINT survey_favorite_foods_present CHECK (length(btrim(favorite_foods)) > 0),
    eat_out_rating          SMALLINT     NOT NULL
        CONSTRAINT survey_eat_out_rating_range CHECK (eat_out_rating BETWEEN 1 AND 5),
    watch_movies_rating     SMALLINT     NOT NULL
        CONSTRAINT survey_watch_movies_rating_range CHECK (watch_movies_rating BETWEEN 1 AND 5),
    watch_tv_rating         SMALLINT     NOT NULL
        CONSTRAINT survey_watch_tv_rating_range CHECK (watch_tv_rating BETWEEN 1 AND 5),
    listen_to_radio_rating  SMALLINT     NOT NULL
        CONSTRAINT survey_listen_to_radio_rating_range CHECK (listen_to_radio_rating BETWEEN 1 AND 5),
    submission_date         TIMESTAMPTZ  NOT NULL DEFAULT now()
);

CREATE UNIQUE INDEX IF NOT EXISTS survey_email_key
    ON survey (lower(email));

CREATE INDEX IF NOT EXISTS survey_submission_date_idx
    ON survey (submission_date DESC, id DESC);
"""


class SchemaManager:
    """
    Creates, inspects and resets the survey table.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize schema manager.

        Args:
            pool: Database connection pool
        """
        self.pool = pool

    def create_schema(self) -> None:
        """Create the survey table and its index if they do not exist."""
        self.pool.execute_command(SURVEY_SCHEMA_DDL)

    def table_exists(self) -> bool:
        result = self.pool.execute_query(
            "SELECT to_regclass(%s) IS NOT NULL AS present", (SURVEY_TABLE,)
        )
        return bool(result[0]["present"])

    def list_constraints(self) -> list[str]:
        """
        Names of the constraints defined on the survey table.

        Returns:
            Constraint names, sorted
        """
        query = """
            SELECT conname
            FROM pg_constraint
            WHERE conrelid = to_regclass(%s)
            ORDER BY conname
        """
        return [row["conname"] for row in self.pool.execute_query(query, (SURVEY_TABLE,))]

    def list_indexes(self) -> list[str]:
        query = "SELECT indexname FROM pg_indexes WHERE tablename = %s ORDER BY indexname"
        return [row["indexname"] for row in self.pool.execute_query(query, (SURVEY_TABLE,))]

    def truncate(self) -> None:
        """Delete every record and restart id numbering (administrative/test use)."""
        self.pool.execute_command(f"TRUNCATE TABLE {SURVEY_TABLE} RESTART IDENTITY")
