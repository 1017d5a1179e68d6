"""Batching of sample streams and background analysis."""

from .collector import BatchCollector
from .csv_source import iter_batches, load_samples_csv
from .monitor import GaitMonitor

__all__ = [
    "BatchCollector",
    "GaitMonitor",
    "iter_batches",
    "load_samples_csv",
]
