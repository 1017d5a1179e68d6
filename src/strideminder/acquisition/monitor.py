"""Background analysis of collected batches."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import TYPE_CHECKING

from strideminder.aggregation.aggregator import TemporalAggregator
from strideminder.core.errors import ProcessingError
from strideminder.processing.pipeline import GaitPipeline

from .collector import BatchCollector

if TYPE_CHECKING:
    from strideminder.core.config import Settings
    from strideminder.processing.gait import GaitMetrics
    from strideminder.processing.samples import Batch

logger = logging.getLogger(__name__)


class GaitMonitor:
    """
    Collect samples, analyze completed batches on a worker pool and store
    the resulting metrics.

    Autocorrelation is slow, so analysis runs off the caller's thread. Batches
    are analyzed in parallel but ingested in the order they were collected.

    Usage:
        with GaitMonitor(aggregator) as monitor:
            for t_ns, x, y, z in sensor:
                monitor.feed(t_ns, x, y, z)
    """

    def __init__(
        self,
        aggregator: TemporalAggregator,
        pipeline: GaitPipeline | None = None,
        collector: BatchCollector | None = None,
        workers: int = 2,
    ):
        self.aggregator = aggregator
        self.pipeline = pipeline or GaitPipeline()
        self.collector = collector or BatchCollector()
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="gait")
        self._previous: Future | None = None
        self._futures: list[Future] = []

    @classmethod
    def from_settings(cls, settings: Settings, aggregator: TemporalAggregator) -> GaitMonitor:
        return cls(
            aggregator,
            pipeline=GaitPipeline.from_config(settings.processing),
            collector=BatchCollector(
                duration_ns=settings.acquisition.batch_duration_ns,
                capacity=settings.acquisition.batch_capacity,
            ),
            workers=settings.acquisition.workers,
        )

    def feed(
        self,
        t_ns: int,
        x: float,
        y: float,
        z: float,
        wall_time_ms: int | None = None,
    ) -> Future | None:
        """Add a sample; returns a future when it completed a batch."""
        batch = self.collector.add(t_ns, x, y, z, wall_time_ms)
        if batch is None:
            return None
        return self.submit(batch)

    def submit(self, batch: Batch) -> Future:
        """
        Schedule a batch for analysis and ingestion.

        The future resolves to the stored raw record id, or None when the
        batch was not walking or could not be analyzed. Storage errors are
        raised from ``future.result()``.
        """
        future = self._executor.submit(self._run, batch, self._previous)
        self._previous = future
        self._futures.append(future)
        return future

    def _run(self, batch: Batch, previous: Future | None) -> int | None:
        metrics = self.analyze(batch)
        # FIFO queue: the previous batch has already started, so this can't deadlock
        if previous is not None:
            wait([previous])
        if metrics is None:
            return None
        return self.aggregator.ingest(metrics)

    def analyze(self, batch: Batch) -> GaitMetrics | None:
        """Analyze a batch, logging and discarding processing failures."""
        try:
            return self.pipeline.process_batch(batch)
        except ProcessingError as e:
            logger.warning("Discarding batch %d: %s", batch.start_time_ms, e)
            return None

    def close(self) -> list[int | None]:
        """Flush the partial batch, wait for all work and shut the pool down."""
        batch = self.collector.flush()
        if batch is not None:
            self.submit(batch)
        try:
            return [f.result() for f in self._futures]
        finally:
            self._executor.shutdown(wait=True)
            self._futures = []
            self._previous = None

    def __enter__(self) -> GaitMonitor:
        return self

    def __exit__(self, *args) -> None:
        self.close()
