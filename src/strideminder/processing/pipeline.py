"""Batch analysis pipeline: resample, correct orientation, autocorrelate, detect."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from strideminder.core.errors import DegenerateSignalError

from .autocorrelation import Autocorrelator, is_flat
from .gait import GaitAnalysis, GaitClassification, GaitDetector, GaitMetrics
from .orientation import OrientationCorrector
from .resampling import SampleResampler
from .samples import Batch

if TYPE_CHECKING:
    from strideminder.core.config import ProcessingConfig

logger = logging.getLogger(__name__)


class GaitPipeline:
    """
    Turn one batch of raw accelerometer samples into gait metrics.

    Each call works only on the batch it is given, so a single pipeline may be
    shared between worker threads.

    Usage:
        pipeline = GaitPipeline()
        metrics = pipeline.process_batch(batch)
        if metrics is not None:
            aggregator.ingest(metrics)
    """

    def __init__(
        self,
        rms_threshold: float = 0.25,
        required_crossings: int = 5,
        max_lag: int | None = None,
    ):
        self.resampler = SampleResampler()
        self.corrector = OrientationCorrector()
        self.autocorrelator = Autocorrelator(max_lag=max_lag)
        self.detector = GaitDetector(
            rms_threshold=rms_threshold,
            required_crossings=required_crossings,
        )

    @classmethod
    def from_config(cls, config: ProcessingConfig) -> GaitPipeline:
        return cls(
            rms_threshold=config.walking_rms_threshold,
            required_crossings=config.required_crossings,
            max_lag=config.max_lag,
        )

    def analyze(self, batch: Batch) -> GaitAnalysis:
        """
        Run every stage on a batch.

        Raises:
            InsufficientDataError: batch too short or zero duration
            DegenerateSignalError: gravity direction or stride regularity undefined
        """
        uniform = self.resampler.resample(batch)

        if all(is_flat(axis) for axis in (uniform.x, uniform.y, uniform.z)):
            logger.debug("Batch %d is flat", batch.start_time_ms)
            return GaitAnalysis(classification=GaitClassification.NOT_WALKING, rms=0.0)

        vertical = self.corrector.vertical(uniform)

        try:
            autocorrelation = self.autocorrelator.compute(vertical)
        except DegenerateSignalError as e:
            if e.reason != DegenerateSignalError.ZERO_VARIANCE:
                raise
            # No vertical movement at all
            logger.debug("Batch %d has no vertical variance", batch.start_time_ms)
            return GaitAnalysis(classification=GaitClassification.NOT_WALKING, rms=0.0)

        return self.detector.detect(
            autocorrelation,
            duration_seconds=uniform.duration_seconds,
            timestamp_ms=batch.start_time_ms,
            sample_count=len(uniform),
        )

    def process_batch(self, batch: Batch) -> GaitMetrics | None:
        """Return gait metrics for a batch, or None when it is not walking."""
        return self.analyze(batch).metrics


def process_batch(batch: Batch) -> GaitMetrics | None:
    """Convenience function using default parameters."""
    return GaitPipeline().process_batch(batch)
