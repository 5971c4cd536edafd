"""
Prometheus metrics collection for survey-stats

Counts submissions by outcome, validation failures by rule and field,
statistics queries by result and their duration, and storage errors.
"""
import os
from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Private registry so importing the package never touches the default one
REGISTRY = CollectorRegistry()


# Submissions

submissions_total = Counter(
    name="survey_submissions_total",
    documentation="Total number of survey submissions by outcome",
    labelnames=["status"],  # accepted, invalid, duplicate, constraint, unavailable
    registry=REGISTRY,
)

validation_failures_total = Counter(
    name="survey_validation_failures_total",
    documentation="Total number of failed validation rules",
    labelnames=["rule_type", "field_name"],
    registry=REGISTRY,
)


# Statistics queries

statistics_requests_total = Counter(
    name="survey_statistics_requests_total",
    documentation="Total number of statistics queries by result",
    labelnames=["result"],  # populated, empty, error
    registry=REGISTRY,
)

statistics_duration_seconds = Histogram(
    name="survey_statistics_duration_seconds",
    documentation="Time spent reading a snapshot and aggregating it",
    buckets=[0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=REGISTRY,
)

records_total = Gauge(
    name="survey_records_total",
    documentation="Number of stored survey records seen by the last statistics query",
    registry=REGISTRY,
)


# Storage

store_errors_total = Counter(
    name="survey_store_errors_total",
    documentation="Total number of record store errors",
    labelnames=["operation", "error_type"],
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """Render the survey registry in the Prometheus text exposition format."""
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    return CONTENT_TYPE_LATEST


def start_metrics_server(port: Optional[int] = None) -> int:
    """
    Serve /metrics on a background thread.

    The port comes from the argument, then $METRICS_PORT, then 8000.
    Returns the port actually used.
    """
    from prometheus_client import start_http_server

    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)
    return metrics_port


class track_duration:
    """
    Observe the time spent inside a ``with`` block on a histogram,
    whether the block succeeds or raises.
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        target = self.histogram.labels(**self.labels) if self.labels else self.histogram
        self.timer = target.time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, amount: float = 1.0, **labels) -> None:
    (counter.labels(**labels) if labels else counter).inc(amount)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    (gauge.labels(**labels) if labels else gauge).set(value)


def record_submission(status: str) -> None:
    """Count one submission under its outcome (accepted, invalid, duplicate, ...)."""
    increment_counter(submissions_total, status=status)


def record_validation_failure(rule_type: str, field_name: str) -> None:
    increment_counter(validation_failures_total, rule_type=rule_type, field_name=field_name)


def record_store_error(operation: str, error: Exception) -> None:
    """Count a storage failure, labelled by the exception class name."""
    increment_counter(store_errors_total, operation=operation, error_type=type(error).__name__)
