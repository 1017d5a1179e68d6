"""Normalized autocorrelation of the vertical acceleration series."""

from __future__ import annotations

import numpy as np

from strideminder.core.errors import DegenerateSignalError, InsufficientDataError

# Spread below this fraction of the signal's magnitude is rounding noise
FLAT_TOLERANCE = 1e-12


def is_flat(series: np.ndarray) -> bool:
    """True when every value is equal up to floating-point rounding."""
    x = np.asarray(series, dtype=np.float64)
    if len(x) == 0:
        return True
    return float(np.ptp(x)) <= FLAT_TOLERANCE * max(1.0, float(np.max(np.abs(x))))


class Autocorrelator:
    """
    Unbiased autocorrelation estimate.

    For every lag ``k`` the products of overlapping deviations from the mean
    are summed, divided by the population variance and by the number of
    overlapping elements ``N - k``. Later lags average fewer products and
    are increasingly unreliable.
    """

    def __init__(self, max_lag: int | None = None):
        """
        Args:
            max_lag: Number of lags to compute (default: series length)
        """
        self.max_lag = max_lag

    def compute(self, series: np.ndarray, max_lag: int | None = None) -> np.ndarray:
        """
        Autocorrelate a 1-D series.

        Args:
            series: Input values
            max_lag: Overrides the instance default; clamped to ``len(series)``

        Returns:
            Array of length ``min(max_lag, len(series))``

        Raises:
            DegenerateSignalError: the series has zero variance
        """
        x = np.asarray(series, dtype=np.float64)
        n = len(x)
        if n == 0:
            raise InsufficientDataError("Cannot autocorrelate an empty series")

        lags = max_lag if max_lag is not None else self.max_lag
        lags = n if lags is None else max(0, min(int(lags), n))

        deviations = x - x.mean()
        variance = float(np.mean(deviations * deviations))
        # A constant series can leave rounding residue in the mean
        if variance == 0 or is_flat(x):
            raise DegenerateSignalError(
                "Series has zero variance",
                reason=DegenerateSignalError.ZERO_VARIANCE,
            )

        # full[n - 1 + k] = sum_j d[j] * d[j - k]
        full = np.correlate(deviations, deviations, mode="full")
        sums = full[n - 1 : n - 1 + lags]
        overlap = n - np.arange(lags)
        return sums / variance / overlap


def autocorrelate(series: np.ndarray, max_lag: int | None = None) -> np.ndarray:
    """Convenience function for autocorrelation."""
    return Autocorrelator().compute(series, max_lag)
