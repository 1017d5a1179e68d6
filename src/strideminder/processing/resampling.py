"""Resampling of irregularly timed samples onto a uniform grid."""

from __future__ import annotations

import numpy as np

from strideminder.core.errors import InsufficientDataError

from .samples import Batch


class SampleResampler:
    """
    Interpolate a batch onto evenly spaced timestamps.

    Sensor reporting frequency can and does change, so the autocorrelation
    needs values at known regular intervals. The first and last samples are
    kept as they are; interior sample ``i`` is placed at ``i * duration / n``
    and linearly interpolated from the pair of original samples around it.
    """

    def resample(self, batch: Batch) -> Batch:
        """
        Resample a batch.

        Args:
            batch: Batch with timestamps relative to its first sample

        Returns:
            Batch of the same length on a uniform time grid

        Raises:
            InsufficientDataError: fewer than 2 samples or non-positive duration
        """
        n = len(batch)
        if n < 2:
            raise InsufficientDataError(f"Need at least 2 samples to resample, got {n}")

        t = batch.t_ns
        duration = float(t[-1])
        if duration <= 0:
            raise InsufficientDataError(f"Batch duration must be positive, got {duration} ns")

        target = np.arange(n, dtype=np.float64) * duration / n
        target[-1] = duration

        # Index of the first original sample at or after each target time.
        # Targets are increasing, so this is a cursor that never moves back.
        after = np.searchsorted(t, target[1:-1], side="left")
        after = np.clip(after, 1, n - 1)
        before = after - 1

        span = t[after] - t[before]
        # Fraction of the way from the earlier to the later sample
        proportion = np.divide(
            target[1:-1] - t[before],
            span,
            out=np.ones_like(span),
            where=span > 0,
        )

        axes = []
        for values in (batch.x, batch.y, batch.z):
            out = np.empty(n, dtype=np.float64)
            out[0] = values[0]
            out[-1] = values[-1]
            out[1:-1] = values[before] + (values[after] - values[before]) * proportion
            axes.append(out)

        return Batch.from_arrays(batch.start_time_ms, target, *axes)


def resample(batch: Batch) -> Batch:
    """Convenience function for resampling."""
    return SampleResampler().resample(batch)
