"""
Service layer: the operations a transport (HTTP handler, CLI) calls into.
"""

from .health import HealthService
from .statistics import StatisticsService
from .submission import DUPLICATE_EMAIL_MESSAGE, SubmissionService

__all__ = [
    "StatisticsService",
    "SubmissionService",
    "HealthService",
    "DUPLICATE_EMAIL_MESSAGE",
]
