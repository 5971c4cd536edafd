"""
Command-line interface for the survey statistics service.

Usage:
    survey-stats init-db
    survey-stats submit --file <payload.json>
    survey-stats validate --file <payload.json> [--rules <rules.yaml>]
    survey-stats stats [--format text|json]
    survey-stats recent [--limit 5]
    survey-stats health

Database options default to the DB_* environment variables, which may be
provided through a .env file (--env-file).
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

import psycopg
from dotenv import load_dotenv
from psycopg import OperationalError
from psycopg_pool import PoolTimeout

from survey_stats.core.aggregation import RECENT_LIMIT
from survey_stats.core.aggregation.engine import project_recent
from survey_stats.core.models import EmptyStats, StatsBundle
from survey_stats.core.rules import RuleConfigLoader, SubmissionValidator
from survey_stats.observability.logger import get_logger
from survey_stats.observability.metrics import start_metrics_server
from survey_stats.service import HealthService, StatisticsService, SubmissionService
from survey_stats.warehouse import BaseRecordStore, StoreError, StoreUnavailable
from survey_stats.warehouse.connection import DatabaseConnectionPool
from survey_stats.warehouse.postgres_store import PostgresRecordStore
from survey_stats.warehouse.schema_mgmt import SchemaManager

logger = get_logger(__name__)


def format_timestamp(ts: datetime | str | None) -> str:
    """Format timestamp for display."""
    if isinstance(ts, str):
        return ts
    return ts.strftime("%Y-%m-%d %H:%M:%S") if ts else "N/A"


def create_pool(args) -> DatabaseConnectionPool:
    """
    Open a connection pool from the CLI options.

    Raises:
        StoreUnavailable: If the database cannot be reached
    """
    pool = DatabaseConnectionPool(
        host=args.db_host,
        port=args.db_port,
        database=args.db_name,
        user=args.db_user,
        password=args.db_password,
    )
    try:
        pool.open()
    except (OperationalError, PoolTimeout) as e:
        raise StoreUnavailable(f"Database unavailable: {e}") from e
    return pool


def create_store(args) -> BaseRecordStore:
    """Open the PostgreSQL record store described by the CLI options."""
    return PostgresRecordStore(create_pool(args))


def create_validator(args) -> SubmissionValidator:
    if args.rules:
        return SubmissionValidator(RuleConfigLoader(args.rules).load_rules())
    return SubmissionValidator()


def read_payload(path: str) -> dict[str, Any]:
    """Read a JSON survey payload; '-' reads standard input."""
    if path == "-":
        payload = json.load(sys.stdin)
    else:
        with open(path) as f:
            payload = json.load(f)
    if not isinstance(payload, dict):
        raise ValueError("Survey payload must be a JSON object")
    return payload


def print_statistics(stats: StatsBundle | EmptyStats) -> None:
    """Render statistics the way the dashboard shows them (one decimal)."""
    print(f"\n{'=' * 60}")
    print("SURVEY RESULTS")
    print(f"{'=' * 60}\n")

    if isinstance(stats, EmptyStats):
        print(stats.message)
        print(f"\n{'=' * 60}\n")
        return

    print(f"Total number of surveys: {stats.total}")
    print(f"Average age:             {stats.age.average:.1f}")
    print(f"Oldest participant:      {stats.age.maximum}")
    print(f"Youngest participant:    {stats.age.minimum}\n")

    print("Age distribution:")
    for share in stats.age_distribution.values():
        print(f"  {share.label:<15} {share.count:>6} {share.percentage:>7.1f}%")

    print("\nFood preferences:")
    for share in stats.food_preferences.values():
        print(f"  {share.food:<15} {share.count:>6} {share.percentage:>7.1f}%")

    print("\nRatings (1 = strongly agree, 5 = strongly disagree):")
    print(f"  {'Activity':<16} {'Avg':>5} {'StdDev':>7}  Histogram 1..5")
    for activity, summary in stats.ratings.items():
        histogram = " ".join(f"{c:>3}" for c in summary.histogram)
        print(f"  {activity:<16} {summary.average:>5.1f} {summary.std_dev:>7.2f}  {histogram}")

    if stats.recent_submissions:
        print("\nRecent submissions:")
        for recent in stats.recent_submissions:
            print(f"  {format_timestamp(recent.submission_timestamp)}  {recent.name} ({recent.age})")

    print(f"\n{'=' * 60}\n")


def init_db_command(args) -> int:
    """Create the survey table."""
    pool = create_pool(args)
    try:
        SchemaManager(pool).create_schema()
    except psycopg.Error as e:
        raise StoreUnavailable(f"Failed to create survey table: {e}") from e
    finally:
        pool.close()

    print("Survey table is ready.")
    return 0


def submit_command(args) -> int:
    """Validate and store one survey payload."""
    payload = read_payload(args.file)
    store = create_store(args)
    try:
        result = SubmissionService(store, create_validator(args)).submit(payload)
    finally:
        store.close()

    print(json.dumps(result.model_dump(), indent=2))
    return 0 if result.accepted else 1


def validate_command(args) -> int:
    """Check a payload against the rules without storing it."""
    payload = read_payload(args.file)
    result = create_validator(args).check(payload)

    if result.passed:
        print(f"Payload is valid ({len(result.passed_rules)} rules passed).")
        return 0

    print("Payload is invalid:")
    for field_name, rule_name, message in zip(
        result.failed_fields, result.failed_rules, result.error_messages
    ):
        print(f"  - {field_name} [{rule_name}]: {message}")
    return 1


def stats_command(args) -> int:
    """Print dashboard statistics."""
    store = create_store(args)
    try:
        stats = StatisticsService(store).get_statistics()
    finally:
        store.close()

    if args.format == "json":
        print(stats.model_dump_json(indent=2))
    else:
        print_statistics(stats)
    return 0


def recent_command(args) -> int:
    """Print the most recent submissions (name, age, time only)."""
    if args.limit < 1:
        raise ValueError("--limit must be a positive integer")

    store = create_store(args)
    try:
        records = store.recent(args.limit)
    finally:
        store.close()

    if not records:
        print("No surveys available yet")
        return 0

    print(f"{'Submitted':<20} {'Age':>4}  Name")
    print(f"{'-' * 50}")
    for record in records:
        recent = project_recent(record)
        print(f"{format_timestamp(recent.submission_timestamp):<20} {recent.age:>4}  {recent.name}")
    return 0


def health_command(args) -> int:
    """Report whether the database answers."""
    try:
        store = create_store(args)
    except Exception as e:
        logger.error(f"Could not open record store: {e}")
        print(json.dumps({"status": "unhealthy", "database": "disconnected", "error": str(e)}))
        return 1

    try:
        status = HealthService(store).check()
    finally:
        store.close()

    print(status.model_dump_json(exclude_none=True))
    return 0 if status.healthy else 1


COMMANDS = {
    "init-db": init_db_command,
    "submit": submit_command,
    "validate": validate_command,
    "stats": stats_command,
    "recent": recent_command,
    "health": health_command,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="survey-stats",
        description="Lifestyle survey submissions and dashboard statistics",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    # Global database connection options (fall back to DB_* env vars)
    parser.add_argument("--db-host", help="Database host (default: $DB_HOST or localhost)")
    parser.add_argument("--db-port", type=int, help="Database port (default: $DB_PORT or 5432)")
    parser.add_argument("--db-name", help="Database name (default: $DB_NAME or surveys)")
    parser.add_argument("--db-user", help="Database user (default: $DB_USER or survey)")
    parser.add_argument("--db-password", help="Database password (default: $DB_PASSWORD)")
    parser.add_argument("--env-file", help="Load environment variables from this file")
    parser.add_argument(
        "--metrics-port",
        type=int,
        help="Expose Prometheus metrics on this port while the command runs"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Create the survey table")

    submit_parser = subparsers.add_parser("submit", help="Submit a survey from a JSON file")
    submit_parser.add_argument("--file", required=True, help="Path to JSON payload ('-' for stdin)")
    submit_parser.add_argument("--rules", help="Path to YAML validation rules (optional)")

    validate_parser = subparsers.add_parser("validate", help="Check a JSON payload without storing it")
    validate_parser.add_argument("--file", required=True, help="Path to JSON payload ('-' for stdin)")
    validate_parser.add_argument("--rules", help="Path to YAML validation rules (optional)")

    stats_parser = subparsers.add_parser("stats", help="Show dashboard statistics")
    stats_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)"
    )

    recent_parser = subparsers.add_parser("recent", help="Show the most recent submissions")
    recent_parser.add_argument(
        "--limit",
        type=int,
        default=RECENT_LIMIT,
        help=f"Number of submissions to show (default: {RECENT_LIMIT})"
    )

    subparsers.add_parser("health", help="Check database connectivity")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the survey CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.env_file:
        if not Path(args.env_file).exists():
            print(f"Error: env file not found: {args.env_file}")
            return 1
        load_dotenv(args.env_file, override=True)
    else:
        load_dotenv()

    if args.metrics_port:
        start_metrics_server(args.metrics_port)

    try:
        return COMMANDS[args.command](args)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return 130
    except (StoreError, OSError, ValueError) as e:
        logger.error(f"Command '{args.command}' failed: {e}", exc_info=True)
        print(f"\nError: {e}")
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
