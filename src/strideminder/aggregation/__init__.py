"""Storage and hierarchical aggregation of gait metrics."""

from .aggregator import TemporalAggregator, mean_record
from .buckets import BucketCalendar
from .models import (
    MODELS,
    AggregateRecord,
    DailyGaitParams,
    Granularity,
    HourlyGaitParams,
    MonthlyGaitParams,
    RawGaitParams,
)
from .store import HISTORY_WINDOWS, AggregateStore

__all__ = [
    "AggregateRecord",
    "AggregateStore",
    "BucketCalendar",
    "DailyGaitParams",
    "Granularity",
    "HISTORY_WINDOWS",
    "HourlyGaitParams",
    "MODELS",
    "MonthlyGaitParams",
    "RawGaitParams",
    "TemporalAggregator",
    "mean_record",
]
