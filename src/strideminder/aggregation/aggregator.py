"""
Temporal Aggregation
====================

Store per-batch gait metrics and roll them up into hourly, daily and monthly
averages.

Rollups are triggered lazily: when a new record lands in a later hour than the
previous record, the previous record's hour is complete and gets averaged.
The same check then cascades to days and months. A bucket is therefore
written exactly once, by the first insert that crosses its boundary, and is
never revisited.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from strideminder.core.errors import StorageError

from .buckets import BucketCalendar
from .models import AggregateRecord, Granularity
from .store import AggregateStore

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from strideminder.processing.gait import GaitMetrics

logger = logging.getLogger(__name__)


def mean_record(records: list[AggregateRecord], timestamp_ms: int) -> AggregateRecord:
    """Arithmetic mean of each metric across records."""
    n = len(records)
    return AggregateRecord(
        timestamp_ms=timestamp_ms,
        step_regularity=sum(r.step_regularity for r in records) / n,
        stride_regularity=sum(r.stride_regularity for r in records) / n,
        step_symmetry=sum(r.step_symmetry for r in records) / n,
        cadence=sum(r.cadence for r in records) / n,
    )


class TemporalAggregator:
    """
    Single-writer ingestion of gait metrics into the four series.

    Reading the last timestamp, computing rollups and inserting rows happen
    under one lock and in one transaction, so concurrent callers are
    serialized and a failed ingest leaves no partial rollups behind.

    Usage:
        aggregator = TemporalAggregator(AggregateStore())
        row_id = aggregator.ingest(metrics)
    """

    # (coarser level, finer level it averages, boundary function name)
    LEVELS = (
        (Granularity.HOURLY, Granularity.RAW, "hour_start"),
        (Granularity.DAILY, Granularity.HOURLY, "day_start"),
        (Granularity.MONTHLY, Granularity.DAILY, "month_start"),
    )

    def __init__(
        self,
        store: AggregateStore | None = None,
        calendar: BucketCalendar | None = None,
    ):
        self.store = store or AggregateStore()
        self.calendar = calendar or BucketCalendar("UTC")
        self._lock = threading.Lock()

    def ingest(self, metrics: GaitMetrics | AggregateRecord) -> int:
        """
        Append a raw record, rolling up any buckets it closes.

        Args:
            metrics: Gait metrics of one batch

        Returns:
            Id of the new raw record

        Raises:
            StorageError: the database rejected a read or write
        """
        record = AggregateRecord(
            timestamp_ms=int(metrics.timestamp_ms),
            step_regularity=float(metrics.step_regularity),
            stride_regularity=float(metrics.stride_regularity),
            step_symmetry=float(metrics.step_symmetry),
            cadence=float(metrics.cadence),
        )

        with self._lock:
            try:
                with self.store.session() as session:
                    last = self.store.select_last_timestamp(session, Granularity.RAW)
                    if last is not None:
                        if record.timestamp_ms <= last:
                            logger.warning(
                                "Out-of-order insert at %d (last was %d); aggregates not corrected",
                                record.timestamp_ms,
                                last,
                            )
                        self._roll_up(session, last, record.timestamp_ms)
                    return self.store.append(session, Granularity.RAW, record)
            except SQLAlchemyError as e:
                raise StorageError(f"Failed to ingest record at {record.timestamp_ms}: {e}") from e

    def _roll_up(self, session: Session, last: int, current: int) -> None:
        """Write one record per level whose bucket closed between last and current."""
        for coarse, fine, boundary_name in self.LEVELS:
            boundary = getattr(self.calendar, boundary_name)
            bucket_start = boundary(last)
            next_bucket = boundary(current)
            if bucket_start >= next_bucket:
                break

            records = self.store.select_range(session, fine, bucket_start, next_bucket)
            if not records:
                # Every closed bucket contains at least the previous record,
                # so this only happens with inconsistent history.
                logger.warning(
                    "No %s records in [%d, %d); skipping %s rollup",
                    fine.value,
                    bucket_start,
                    next_bucket,
                    coarse.value,
                )
                break

            rollup = mean_record(records, bucket_start)
            self.store.append(session, coarse, rollup)
            logger.info(
                "Rolled up %d %s records into %s bucket %d",
                len(records),
                fine.value,
                coarse.value,
                bucket_start,
            )
