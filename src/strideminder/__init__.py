"""StrideMinder: gait quality monitoring from accelerometer data.

Classifies fixed-length blocks of tri-axial accelerometer samples as walking,
extracts step/stride regularity, step symmetry and cadence from the vertical
autocorrelation, and keeps hourly, daily and monthly averages.
"""

__version__ = "0.1.0"

from strideminder.aggregation import (
    AggregateRecord,
    AggregateStore,
    BucketCalendar,
    Granularity,
    TemporalAggregator,
)
from strideminder.core import (
    DegenerateSignalError,
    InsufficientDataError,
    ProcessingError,
    Settings,
    StorageError,
    get_settings,
    init_db,
)
from strideminder.processing import (
    Batch,
    GaitAnalysis,
    GaitClassification,
    GaitMetrics,
    GaitPipeline,
    Sample,
    process_batch,
)

__all__ = [
    "AggregateRecord",
    "AggregateStore",
    "Batch",
    "BucketCalendar",
    "DegenerateSignalError",
    "GaitAnalysis",
    "GaitClassification",
    "GaitMetrics",
    "GaitPipeline",
    "Granularity",
    "InsufficientDataError",
    "ProcessingError",
    "Sample",
    "Settings",
    "StorageError",
    "TemporalAggregator",
    "__version__",
    "get_settings",
    "init_db",
    "process_batch",
]
