"""Horizon surface interpolation.

Estimates the elevation of a horizon at an arbitrary planar location from
its sparse sample points using local inverse-distance-squared weighting.
"""

import warnings
from typing import Sequence

import numpy as np

from .config import SurfacePoint
from .errors import EmptyInterpolationSetWarning

DEFAULT_NEIGHBORS = 8
EXACT_MATCH_TOLERANCE = 0.01
MIN_WEIGHT_DISTANCE = 0.1


class HorizonInterpolator:
    """Local IDW interpolator over one horizon's points.

    The point coordinates are packed into numpy arrays once, so the same
    interpolator can be queried at every lattice position of a build.

    Interpolation rules:
    - Only the K nearest points (planar distance) contribute,
      K = min(neighbors, number of points)
    - A query closer than exact_tolerance to its nearest point returns
      that point's elevation unchanged
    - Otherwise weights are 1 / d^2 with d floored at min_distance
    """

    def __init__(
        self,
        points: Sequence[SurfacePoint],
        neighbors: int = DEFAULT_NEIGHBORS,
        exact_tolerance: float = EXACT_MATCH_TOLERANCE,
        min_distance: float = MIN_WEIGHT_DISTANCE,
    ):
        """Initialize the interpolator.

        Args:
            points: Horizon sample points
            neighbors: Maximum number of nearest points used per query
            exact_tolerance: Distance below which the nearest sample is returned as-is
            min_distance: Floor applied to distances before weighting
        """
        if neighbors < 1:
            raise ValueError(f"neighbors must be at least 1, got {neighbors}")

        self.neighbors = neighbors
        self.exact_tolerance = exact_tolerance
        self.min_distance = min_distance

        self._xy = np.array([(p.x, p.y) for p in points], dtype=float).reshape(-1, 2)
        self._z = np.array([p.z for p in points], dtype=float)

    def __len__(self) -> int:
        return len(self._z)

    def elevation_at(self, x: float, y: float) -> float:
        """Interpolated elevation at (x, y).

        Returns 0.0 (and warns) when the horizon has no points; callers
        treat that as "no data".
        """
        if len(self._z) == 0:
            warnings.warn(
                "Interpolating over an empty point set; returning 0.0",
                EmptyInterpolationSetWarning,
                stacklevel=2,
            )
            return 0.0

        distances = np.hypot(self._xy[:, 0] - x, self._xy[:, 1] - y)
        k = min(self.neighbors, len(distances))
        nearest = np.argsort(distances, kind="stable")[:k]

        if distances[nearest[0]] < self.exact_tolerance:
            return float(self._z[nearest[0]])

        weights = 1.0 / np.maximum(distances[nearest], self.min_distance) ** 2
        return float(np.dot(weights, self._z[nearest]) / weights.sum())


def elevation_at(
    x: float,
    y: float,
    horizon_points: Sequence[SurfacePoint],
    neighbors: int = DEFAULT_NEIGHBORS,
) -> float:
    """One-off interpolation of a horizon elevation at (x, y)."""
    return HorizonInterpolator(horizon_points, neighbors=neighbors).elevation_at(x, y)
