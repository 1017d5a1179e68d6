"""Cut a continuous accelerometer stream into fixed-duration batches."""

from __future__ import annotations

import time

import numpy as np

from strideminder.processing.samples import Batch, Sample


class BatchCollector:
    """
    Fill buffer for incoming samples.

    A batch is emitted once a sample arrives at least ``duration_ns`` after the
    first sample of the block, or when the buffer reaches ``capacity``. The
    emitted batch holds copies of the buffer contents, so the collector can
    keep filling the next block while the previous one is being analyzed.
    """

    def __init__(
        self,
        duration_ns: int = 10_000_000_000,
        capacity: int = 1500,
        clock_ms=None,
    ):
        """
        Initialize collector.

        Args:
            duration_ns: Block length at which to cut off the buffer
            capacity: Maximum samples per block (~10 s at 100 Hz, plus 50%)
            clock_ms: Callable returning wall-clock ms; defaults to time.time()
        """
        if capacity < 2:
            raise ValueError("capacity must be at least 2")
        self.duration_ns = duration_ns
        self.capacity = capacity
        self._clock_ms = clock_ms or (lambda: int(time.time() * 1000))

        self._t = np.empty(capacity, dtype=np.float64)
        self._x = np.empty(capacity, dtype=np.float64)
        self._y = np.empty(capacity, dtype=np.float64)
        self._z = np.empty(capacity, dtype=np.float64)
        self._count = 0
        self._start_ms = 0
        self._start_ns = 0

    def __len__(self) -> int:
        return self._count

    def add(
        self,
        t_ns: int,
        x: float,
        y: float,
        z: float,
        wall_time_ms: int | None = None,
    ) -> Batch | None:
        """
        Store one sample.

        Args:
            t_ns: Sensor timestamp (ns, locally consistent but not absolute)
            x, y, z: Acceleration (m/s^2)
            wall_time_ms: Wall-clock time of this sample; only used when it
                starts a new block

        Returns:
            The completed batch, or None while the block is still filling
        """
        if self._count == 0:
            self._start_ms = wall_time_ms if wall_time_ms is not None else self._clock_ms()
            self._start_ns = t_ns

        i = self._count
        self._t[i] = t_ns - self._start_ns
        self._x[i] = x
        self._y[i] = y
        self._z[i] = z
        self._count += 1

        if t_ns >= self._start_ns + self.duration_ns or self._count >= self.capacity:
            return self._freeze()
        return None

    def add_sample(self, sample: Sample, wall_time_ms: int | None = None) -> Batch | None:
        return self.add(sample.t_ns, sample.x, sample.y, sample.z, wall_time_ms)

    def flush(self) -> Batch | None:
        """Emit whatever has been collected, if it is enough to analyze."""
        if self._count < 2:
            self._count = 0
            return None
        return self._freeze()

    def _freeze(self) -> Batch:
        n = self._count
        # Batch.from_arrays copies, so the buffers can be reused right away
        batch = Batch.from_arrays(
            self._start_ms,
            self._t[:n],
            self._x[:n],
            self._y[:n],
            self._z[:n],
        )
        self._count = 0
        return batch
