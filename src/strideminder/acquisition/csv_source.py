"""Recorded accelerometer streams stored as CSV."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import numpy as np

from strideminder.processing.samples import Batch

from .collector import BatchCollector

COLUMNS = ("t_ns", "x", "y", "z")


def load_samples_csv(path: str | Path) -> np.ndarray:
    """
    Load a ``t_ns,x,y,z`` CSV file (header optional) into an (N, 4) array.

    Raises:
        FileNotFoundError: path does not exist
        ValueError: the file does not have four numeric columns
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sample file not found: {path}")

    with open(path) as f:
        first = f.readline().split(",")[0].strip()
    try:
        float(first)
        has_header = False
    except ValueError:
        has_header = True

    data = np.loadtxt(path, delimiter=",", skiprows=1 if has_header else 0, ndmin=2)
    if data.size and data.shape[1] != len(COLUMNS):
        raise ValueError(f"Expected columns {','.join(COLUMNS)}, got {data.shape[1]} columns")
    return data.reshape(-1, len(COLUMNS))


def iter_batches(
    data: np.ndarray,
    collector: BatchCollector,
    start_time_ms: int = 0,
) -> Iterator[Batch]:
    """Replay recorded samples through a collector, yielding each batch."""
    if len(data) == 0:
        return
    t0 = data[0, 0]
    for t_ns, x, y, z in data:
        wall_ms = start_time_ms + int((t_ns - t0) // 1_000_000)
        batch = collector.add(int(t_ns), x, y, z, wall_time_ms=wall_ms)
        if batch is not None:
            yield batch
    batch = collector.flush()
    if batch is not None:
        yield batch
