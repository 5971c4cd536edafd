"""
Structured JSON logging for survey-stats

One handler is attached to the ``survey_stats`` package logger; module
loggers obtained with get_logger(__name__) propagate to it. Output goes to
stderr so that CLI commands can print JSON results on stdout.
"""
import logging
import os
import sys
import time
from typing import TextIO

from pythonjsonlogger import jsonlogger

PACKAGE_LOGGER = "survey_stats"

JSON_FORMAT = "%(timestamp)s %(level)s %(logger)s %(module)s %(function)s %(message)s"
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s - %(message)s"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Adds timestamp, upper-case level, logger, source location and process ids."""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["process_id"] = record.process
        log_record["thread_id"] = record.thread


def setup_logger(
    level: str | None = None,
    format_type: str | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """
    (Re)configure the package logger.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL; defaults to $LOG_LEVEL, then INFO
        format_type: "json" or "text"; defaults to $LOG_FORMAT, then json
        stream: Output stream (default: stderr)

    Returns:
        The ``survey_stats`` logger
    """
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO
    format_type = (format_type or os.getenv("LOG_FORMAT") or "json").lower()

    if format_type == "json":
        formatter: logging.Formatter = CustomJsonFormatter(fmt=JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")
    else:
        formatter = logging.Formatter(fmt=TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(log_level)
    logger.propagate = False
    return logger


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """
    Get a logger, configuring the package logger on first use

    Args:
        name: Logger name, normally the calling module's __name__
    """
    if not logging.getLogger(PACKAGE_LOGGER).handlers:
        setup_logger()
    return logging.getLogger(name)


class log_operation:
    """
    Context manager logging the outcome and duration of an operation

    Usage:
        with log_operation("Computing survey statistics", logger=logger):
            ...
    """

    def __init__(self, operation_name: str, logger: logging.Logger | None = None, **extra_fields):
        self.operation_name = operation_name
        self.logger = logger or get_logger()
        self.extra_fields = extra_fields
        self.start_time = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.debug(f"Starting: {self.operation_name}", extra={"operation": self.operation_name})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        fields = {
            "operation": self.operation_name,
            "duration_seconds": round(time.perf_counter() - self.start_time, 3),
            **self.extra_fields,
        }
        if exc_type is None:
            self.logger.info(f"Completed: {self.operation_name}", extra={**fields, "status": "success"})
        else:
            self.logger.error(
                f"Failed: {self.operation_name}",
                extra={**fields, "status": "error", "error_type": exc_type.__name__, "error_message": str(exc_val)},
                exc_info=(exc_type, exc_val, exc_tb),
            )
        return False
