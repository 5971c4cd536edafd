"""
Liveness probe for the record store.
"""

from survey_stats.core.models import HealthStatus
from survey_stats.warehouse import BaseRecordStore


class HealthService:
    """Reports whether the record store answers a trivial round trip."""

    def __init__(self, store: BaseRecordStore):
        self.store = store

    def check(self) -> HealthStatus:
        if self.store.ping():
            return HealthStatus(status="healthy", database="connected")
        return HealthStatus(
            status="unhealthy",
            database="disconnected",
            error="Record store did not answer",
        )
