"""Gravity-direction estimation and vertical-axis extraction."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy.spatial.transform import Rotation

from strideminder.core.errors import DegenerateSignalError

from .samples import Batch

UP = np.array([0.0, 0.0, 1.0])


@dataclass
class OrientationEstimate:
    """Rotation that takes the device frame to a Z-up frame."""

    gravity: np.ndarray  # unit vector of the batch-mean acceleration
    magnitude: float  # norm of the batch-mean acceleration
    axis: np.ndarray  # unit rotation axis, always in the horizontal plane
    cos_theta: float
    sin_theta: float

    @property
    def angle(self) -> float:
        return float(np.arctan2(self.sin_theta, self.cos_theta))

    def as_rotation(self) -> Rotation:
        return Rotation.from_rotvec(self.axis * self.angle)


class OrientationCorrector:
    """
    Rotate accelerometer data so that Z+ is up.

    The direction of gravity is taken as the mean acceleration over the batch.
    Only the vertical component is returned; horizontal components are not
    analyzed.
    """

    def estimate(self, batch: Batch) -> OrientationEstimate:
        """
        Estimate the rotation aligning the mean acceleration with +Z.

        Raises:
            DegenerateSignalError: the mean acceleration vector is zero
        """
        mean = batch.to_array().mean(axis=0)
        magnitude = float(np.linalg.norm(mean))
        if magnitude == 0 or not np.isfinite(magnitude):
            raise DegenerateSignalError(
                "Mean acceleration has zero magnitude; gravity direction is undefined",
                reason=DegenerateSignalError.ZERO_MAGNITUDE,
            )

        gravity = mean / magnitude

        # gravity x UP; the Z component is always zero
        axis = np.array([gravity[1], -gravity[0], 0.0])
        # Clamp to avoid sqrt of a tiny negative number
        cos_theta = float(np.clip(mean[2] / magnitude, -1.0, 1.0))
        sin_theta = float(np.sqrt(1.0 - cos_theta * cos_theta))

        axis_norm = np.linalg.norm(axis)
        if axis_norm > 0:
            axis = axis / axis_norm
        else:
            # Already vertical. When upside down any horizontal axis will do.
            axis = np.array([1.0, 0.0, 0.0])

        # Rotating by +theta about gravity x UP takes gravity onto UP
        return OrientationEstimate(
            gravity=gravity,
            magnitude=magnitude,
            axis=axis,
            cos_theta=cos_theta,
            sin_theta=sin_theta,
        )

    def vertical(self, batch: Batch) -> np.ndarray:
        """Return the gravity-aligned vertical acceleration for every sample."""
        estimate = self.estimate(batch)
        # Bottom row of the rotation matrix is all that is needed for Z
        bottom = estimate.as_rotation().as_matrix()[2]
        return batch.to_array() @ bottom


def vertical_acceleration(batch: Batch) -> np.ndarray:
    """Convenience function for orientation correction."""
    return OrientationCorrector().vertical(batch)
