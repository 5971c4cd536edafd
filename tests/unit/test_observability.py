"""
Unit tests for structured logging and Prometheus metrics.
"""

import io
import json

import pytest

from survey_stats.observability.logger import get_logger, log_operation, setup_logger
from survey_stats.observability.metrics import (
    generate_metrics,
    get_content_type,
    record_store_error,
    statistics_duration_seconds,
    track_duration,
)


@pytest.fixture
def log_stream():
    """Route package logs into a buffer for the duration of a test"""
    stream = io.StringIO()
    setup_logger(level="DEBUG", format_type="json", stream=stream)
    yield stream
    setup_logger()


def read_logs(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class TestLogger:
    """Tests for JSON logging"""

    def test_json_fields(self, log_stream):
        get_logger("survey_stats.tests").info("Survey submitted", extra={"record_id": 5})

        entry = read_logs(log_stream)[-1]

        assert entry["message"] == "Survey submitted"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "survey_stats.tests"
        assert entry["record_id"] == 5
        assert entry["timestamp"]

    def test_level_filtering(self, log_stream):
        setup_logger(level="WARNING", format_type="json", stream=log_stream)

        get_logger("survey_stats.tests").info("hidden")
        get_logger("survey_stats.tests").warning("shown")

        assert [e["message"] for e in read_logs(log_stream)] == ["shown"]

    def test_text_format(self):
        stream = io.StringIO()
        setup_logger(level="INFO", format_type="text", stream=stream)
        try:
            get_logger("survey_stats.tests").info("plain line")
        finally:
            setup_logger()

        assert " - survey_stats.tests - INFO - " in stream.getvalue()

    def test_log_operation_success(self, log_stream):
        with log_operation("Computing survey statistics", logger=get_logger("survey_stats.tests")):
            pass

        entry = read_logs(log_stream)[-1]
        assert entry["message"] == "Completed: Computing survey statistics"
        assert entry["status"] == "success"
        assert entry["duration_seconds"] >= 0

    def test_log_operation_failure(self, log_stream):
        with pytest.raises(RuntimeError):
            with log_operation("Reading surveys", logger=get_logger("survey_stats.tests")):
                raise RuntimeError("boom")

        entry = read_logs(log_stream)[-1]
        assert entry["level"] == "ERROR"
        assert entry["error_type"] == "RuntimeError"
        assert entry["error_message"] == "boom"


class TestMetrics:
    """Tests for metric helpers"""

    def test_exposition_contains_survey_metrics(self):
        text = generate_metrics().decode()

        assert "survey_submissions_total" in text
        assert "survey_statistics_duration_seconds" in text
        assert get_content_type().startswith("text/plain")

    def test_track_duration(self, metric_value):
        before = metric_value("survey_statistics_duration_seconds_count")

        with track_duration(statistics_duration_seconds):
            pass

        assert metric_value("survey_statistics_duration_seconds_count") == before + 1

    def test_store_error_labels(self, metric_value):
        labels = {"operation": "insert", "error_type": "TimeoutError"}
        before = metric_value("survey_store_errors_total", **labels)

        record_store_error("insert", TimeoutError("slow"))

        assert metric_value("survey_store_errors_total", **labels) == before + 1
