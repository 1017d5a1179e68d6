"""Accelerometer sample and batch models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np

NANOS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True)
class Sample:
    """Single accelerometer sample."""

    t_ns: int  # nanosecond timestamp
    x: float  # acceleration x (m/s^2)
    y: float  # acceleration y (m/s^2)
    z: float  # acceleration z (m/s^2)


def _frozen(values: Iterable[float] | np.ndarray) -> np.ndarray:
    arr = np.array(values, dtype=np.float64)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class Batch:
    """
    Immutable block of accelerometer samples processed as a unit.

    Arrays are private read-only copies, so a batch can be handed to another
    thread while the producer keeps filling its own buffer.

    Attributes:
        start_time_ms: Wall-clock time (ms since epoch) when recording started
        t_ns: Timestamps in nanoseconds, relative to the first sample
        x, y, z: Acceleration per axis (m/s^2)
    """

    start_time_ms: int
    t_ns: np.ndarray
    x: np.ndarray
    y: np.ndarray
    z: np.ndarray

    @classmethod
    def from_arrays(
        cls,
        start_time_ms: int,
        t_ns: Iterable[float] | np.ndarray,
        x: Iterable[float] | np.ndarray,
        y: Iterable[float] | np.ndarray,
        z: Iterable[float] | np.ndarray,
    ) -> Batch:
        """Copy the given arrays into a batch, shifting time so sample 0 is at 0."""
        t = np.array(t_ns, dtype=np.float64)
        if t.size:
            t = t - t[0]
        columns = [_frozen(t), _frozen(x), _frozen(y), _frozen(z)]
        if len({c.shape for c in columns}) != 1 or columns[0].ndim != 1:
            raise ValueError("t_ns, x, y and z must be 1-D arrays of equal length")
        if np.any(np.diff(columns[0]) < 0):
            raise ValueError("t_ns must be non-decreasing")
        return cls(int(start_time_ms), *columns)

    @classmethod
    def from_samples(cls, start_time_ms: int, samples: Iterable[Sample]) -> Batch:
        """Build a batch from a sequence of samples."""
        samples = list(samples)
        return cls.from_arrays(
            start_time_ms,
            [s.t_ns for s in samples],
            [s.x for s in samples],
            [s.y for s in samples],
            [s.z for s in samples],
        )

    def __len__(self) -> int:
        return len(self.t_ns)

    @property
    def duration_ns(self) -> float:
        """Time covered by the batch (last normalized timestamp)."""
        return float(self.t_ns[-1]) if len(self) else 0.0

    @property
    def duration_seconds(self) -> float:
        return self.duration_ns / NANOS_PER_SECOND

    def to_array(self) -> np.ndarray:
        """Return an (N, 3) array of x, y, z."""
        return np.column_stack([self.x, self.y, self.z])

    def samples(self) -> list[Sample]:
        """Return the batch as a list of samples."""
        return [
            Sample(int(t), float(x), float(y), float(z))
            for t, x, y, z in zip(self.t_ns, self.x, self.y, self.z)
        ]
