"""Exception hierarchy.

Walking/non-walking outcomes are not errors; see
:class:`strideminder.processing.gait.GaitClassification`.
"""

from __future__ import annotations


class StrideMinderError(Exception):
    """Base class for all package errors."""


class ProcessingError(StrideMinderError):
    """A batch could not be analyzed. Processing of that batch is aborted."""


class InsufficientDataError(ProcessingError):
    """Batch too short, or its samples span a zero or negative duration."""


class DegenerateSignalError(ProcessingError):
    """The signal cannot be normalized (zero variance, magnitude or regularity)."""

    ZERO_VARIANCE = "zero_variance"
    ZERO_MAGNITUDE = "zero_magnitude"
    ZERO_STRIDE_REGULARITY = "zero_stride_regularity"

    def __init__(self, message: str, reason: str) -> None:
        super().__init__(message)
        self.reason = reason


class StorageError(StrideMinderError):
    """The database rejected a read or write."""
