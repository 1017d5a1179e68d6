"""
Gait Detection
==============

Classify an autocorrelation series as walking or not walking and derive
gait parameters from its peaks (Moe-Nilssen & Helbostad method).

Walking produces an autocorrelation with a peak at the lag of one step and a
higher peak at the lag of one stride (two steps). Five zero-crossings are
needed to bracket them: one descending from the peak at lag 0, two around the
step peak and two around the stride peak.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from strideminder.core.errors import DegenerateSignalError

logger = logging.getLogger(__name__)

SECONDS_PER_MINUTE = 60.0


class GaitClassification(Enum):
    """Outcome of analyzing one batch."""

    WALKING = "walking"
    NOT_WALKING = "not_walking"
    INSUFFICIENT_PERIODICITY = "insufficient_periodicity"


@dataclass
class GaitMetrics:
    """Gait parameters for one batch."""

    timestamp_ms: int
    step_regularity: float
    stride_regularity: float
    step_symmetry: float
    cadence: float  # strides per minute

    @property
    def steps_per_minute(self) -> float:
        return 2.0 * self.cadence

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary."""
        return {
            "timestamp_ms": self.timestamp_ms,
            "step_regularity": self.step_regularity,
            "stride_regularity": self.stride_regularity,
            "step_symmetry": self.step_symmetry,
            "cadence": self.cadence,
        }


@dataclass
class GaitAnalysis:
    """Full result of analyzing one batch, including intermediate values."""

    classification: GaitClassification
    rms: float
    crossings: list[int] = field(default_factory=list)
    autocorrelation: np.ndarray | None = None
    metrics: GaitMetrics | None = None
    stride_index: int | None = None

    @property
    def is_walking(self) -> bool:
        return self.classification is GaitClassification.WALKING


class GaitDetector:
    """Walking classification and gait parameter extraction."""

    def __init__(
        self,
        rms_threshold: float = 0.25,
        required_crossings: int = 5,
    ):
        """
        Initialize gait detector.

        Args:
            rms_threshold: Autocorrelation RMS at or below which the batch is
                not considered walking
            required_crossings: Zero-crossings needed to locate step and
                stride peaks (at least 5)
        """
        if required_crossings < 5:
            raise ValueError("required_crossings must be at least 5")
        self.rms_threshold = rms_threshold
        self.required_crossings = required_crossings

    @staticmethod
    def first_half(autocorrelation: np.ndarray) -> np.ndarray:
        """Lags whose overlap is large enough to be trusted."""
        return autocorrelation[: len(autocorrelation) // 2]

    def rms(self, autocorrelation: np.ndarray) -> float:
        """Root-mean-square of the reliable half of the autocorrelation."""
        half = self.first_half(autocorrelation)
        if len(half) == 0:
            return 0.0
        return float(np.sqrt(np.mean(half * half)))

    def zero_crossings(self, autocorrelation: np.ndarray) -> list[int]:
        """
        Find sign changes in the reliable half of the autocorrelation.

        Index ``i`` is reported when ``a[i]`` and ``a[i + 1]`` have different
        signs (zero counts as positive). At most ``required_crossings`` are
        returned.
        """
        half = len(autocorrelation) // 2
        if half == 0:
            return []
        negative = np.asarray(autocorrelation) < 0
        changes = np.flatnonzero(negative[:half] != negative[1 : half + 1])
        return [int(i) for i in changes[: self.required_crossings]]

    def detect(
        self,
        autocorrelation: np.ndarray,
        duration_seconds: float,
        timestamp_ms: int,
        sample_count: int | None = None,
    ) -> GaitAnalysis:
        """
        Classify an autocorrelation series and extract gait metrics.

        Args:
            autocorrelation: Normalized autocorrelation, one value per lag
            duration_seconds: Time spanned by the underlying batch
            timestamp_ms: Wall-clock start time of the batch
            sample_count: Samples in the underlying batch; defaults to the
                autocorrelation length, which differs when lags were capped

        Returns:
            GaitAnalysis; ``metrics`` is set only when walking

        Raises:
            DegenerateSignalError: stride regularity is zero
        """
        autocorrelation = np.asarray(autocorrelation, dtype=np.float64)
        n = len(autocorrelation) if sample_count is None else int(sample_count)

        rms = self.rms(autocorrelation)
        if rms <= self.rms_threshold:
            logger.debug("Batch %d not walking (rms=%.3f)", timestamp_ms, rms)
            return GaitAnalysis(
                classification=GaitClassification.NOT_WALKING,
                rms=rms,
                autocorrelation=autocorrelation,
            )

        crossings = self.zero_crossings(autocorrelation)
        if len(crossings) < self.required_crossings:
            logger.debug(
                "Batch %d has %d zero-crossings, need %d",
                timestamp_ms,
                len(crossings),
                self.required_crossings,
            )
            return GaitAnalysis(
                classification=GaitClassification.INSUFFICIENT_PERIODICITY,
                rms=rms,
                crossings=crossings,
                autocorrelation=autocorrelation,
            )

        # The positive lobe after an ascending crossing at i starts at i + 1
        # and ends at the next descending crossing.
        step_lobe = autocorrelation[crossings[1] + 1 : crossings[2] + 1]
        stride_lobe = autocorrelation[crossings[3] + 1 : crossings[4] + 1]

        step_regularity = float(step_lobe.max())
        stride_offset = int(np.argmax(stride_lobe))
        stride_regularity = float(stride_lobe[stride_offset])
        stride_index = crossings[3] + 1 + stride_offset

        if stride_regularity == 0:
            raise DegenerateSignalError(
                "Stride regularity is zero; step symmetry is undefined",
                reason=DegenerateSignalError.ZERO_STRIDE_REGULARITY,
            )

        # Stride duration as a fraction of the batch duration
        stride_time = duration_seconds * (stride_index / n)
        cadence = SECONDS_PER_MINUTE / stride_time
        # Full strides correlating well while single steps don't means asymmetry
        step_symmetry = step_regularity / stride_regularity

        metrics = GaitMetrics(
            timestamp_ms=timestamp_ms,
            step_regularity=step_regularity,
            stride_regularity=stride_regularity,
            step_symmetry=step_symmetry,
            cadence=cadence,
        )
        logger.debug("Batch %d walking: %s", timestamp_ms, metrics)
        return GaitAnalysis(
            classification=GaitClassification.WALKING,
            rms=rms,
            crossings=crossings,
            autocorrelation=autocorrelation,
            metrics=metrics,
            stride_index=stride_index,
        )
