"""Signal processing: from raw accelerometer batches to gait metrics.

Execution order:
1) resampling onto a uniform grid
2) orientation correction (vertical axis only)
3) autocorrelation
4) walking classification and gait metrics
"""

from .autocorrelation import Autocorrelator, autocorrelate, is_flat
from .gait import GaitAnalysis, GaitClassification, GaitDetector, GaitMetrics
from .orientation import OrientationCorrector, OrientationEstimate, vertical_acceleration
from .pipeline import GaitPipeline, process_batch
from .resampling import SampleResampler, resample
from .samples import NANOS_PER_SECOND, Batch, Sample

__all__ = [
    "NANOS_PER_SECOND",
    "Batch",
    "Sample",
    "SampleResampler",
    "resample",
    "OrientationCorrector",
    "OrientationEstimate",
    "vertical_acceleration",
    "Autocorrelator",
    "autocorrelate",
    "is_flat",
    "GaitAnalysis",
    "GaitClassification",
    "GaitDetector",
    "GaitMetrics",
    "GaitPipeline",
    "process_batch",
]
