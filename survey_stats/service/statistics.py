"""
Query facade: count, short-circuit on empty, aggregate, shape.
"""

from survey_stats.core.aggregation import RECENT_LIMIT, AggregationEngine
from survey_stats.core.models import EmptyStats, StatsBundle
from survey_stats.observability.logger import get_logger, log_operation
from survey_stats.observability.metrics import (
    increment_counter,
    records_total,
    set_gauge,
    statistics_duration_seconds,
    statistics_requests_total,
    track_duration,
)
from survey_stats.warehouse import BaseRecordStore, StoreUnavailable

logger = get_logger(__name__)


class StatisticsService:
    """
    Serves dashboard statistics computed from every stored record.

    Nothing is cached: each call reads a fresh snapshot.
    """

    def __init__(
        self,
        store: BaseRecordStore,
        engine: AggregationEngine | None = None,
        recent_limit: int = RECENT_LIMIT,
    ):
        """
        Args:
            store: Record store to read from
            engine: Aggregation engine (a default one is created if omitted)
            recent_limit: Number of recent submissions to include
        """
        self.store = store
        self.engine = engine or AggregationEngine(recent_limit=recent_limit)
        self.recent_limit = recent_limit

    def get_statistics(self) -> StatsBundle | EmptyStats:
        """
        Compute statistics over all stored records.

        Count, records and recent submissions are read in one snapshot, so
        they always describe the same set of records.

        Returns:
            StatsBundle, or EmptyStats when no record is stored

        Raises:
            StoreUnavailable: If the store cannot be read
        """
        try:
            with track_duration(statistics_duration_seconds), \
                    log_operation("Computing survey statistics", logger=logger):
                with self.store.snapshot() as snap:
                    total = snap.count()
                    if total == 0:
                        increment_counter(statistics_requests_total, result="empty")
                        set_gauge(records_total, 0)
                        return EmptyStats()

                    records = snap.all()
                    recent = snap.recent(self.recent_limit)

                bundle = self.engine.aggregate(records, total=total, recent=recent)
        except StoreUnavailable:
            increment_counter(statistics_requests_total, result="error")
            raise

        increment_counter(statistics_requests_total, result="populated")
        set_gauge(records_total, bundle.total)
        return bundle
