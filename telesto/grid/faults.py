"""Fault proximity influence.

Every fault trace point within the influence radius of a query location
contributes an exponentially decaying weight. The uncapped sum drives a
stochastic vertical displacement that only suggests fault throw visually;
it is not derived from any mechanical model.
"""

import random
from typing import Sequence

import numpy as np

from .config import FaultInfluence, FaultSystem

DEFAULT_DECAY = 0.3
DEFAULT_FLAG_THRESHOLD = 0.1
DEFAULT_DISPLACEMENT_SCALE = 50.0


class FaultInfluenceEstimator:
    """Proximity-weighted fault influence over a set of fault systems."""

    def __init__(
        self,
        fault_systems: Sequence[FaultSystem],
        radius: float = 100.0,
        decay: float = DEFAULT_DECAY,
        flag_threshold: float = DEFAULT_FLAG_THRESHOLD,
        displacement_scale: float = DEFAULT_DISPLACEMENT_SCALE,
    ):
        """Initialize the estimator.

        Args:
            fault_systems: Fault traces to consider
            radius: 3D distance beyond which a trace point has no influence
            decay: Fraction of the radius used as the exponential length scale
            flag_threshold: Minimum single-point influence for a cell to be flagged
            displacement_scale: Peak-to-peak displacement per unit of summed influence
        """
        if radius <= 0:
            raise ValueError(f"radius must be positive, got {radius}")

        self.radius = radius
        self.decay = decay
        self.flag_threshold = flag_threshold
        self.displacement_scale = displacement_scale

        coords = [(p.x, p.y, p.z) for fault in fault_systems for p in fault.points]
        self._xyz = np.array(coords, dtype=float).reshape(-1, 3)
        self._segments = np.array(
            [p.segment_id for fault in fault_systems for p in fault.points], dtype=int
        )

    @property
    def point_count(self) -> int:
        return len(self._segments)

    def influence_at(self, x: float, y: float, z: float, rng: random.Random) -> FaultInfluence:
        """Fault influence at (x, y, z).

        A displacement draw is taken from rng on every call so the random
        stream consumed by a build does not depend on where faults are.
        """
        total = 0.0
        flag = 0

        if len(self._segments):
            distances = np.sqrt(((self._xyz - (x, y, z)) ** 2).sum(axis=1))
            inside = distances < self.radius
            if inside.any():
                contributions = np.exp(-distances[inside] / (self.radius * self.decay))
                total = float(contributions.sum())
                strongest = int(np.argmax(contributions))
                if contributions[strongest] > self.flag_threshold:
                    flag = int(self._segments[inside][strongest])

        # Only the reported influence is capped; throw grows with trace density
        influence = min(total, 1.0)
        displacement = total * self.displacement_scale * (rng.random() - 0.5)

        return FaultInfluence(influence=influence, fault_flag=flag, displacement=displacement)


def influence_at(
    x: float,
    y: float,
    z: float,
    fault_systems: Sequence[FaultSystem],
    radius: float = 100.0,
    rng: random.Random | None = None,
) -> FaultInfluence:
    """One-off fault influence estimate at (x, y, z)."""
    estimator = FaultInfluenceEstimator(fault_systems, radius=radius)
    return estimator.influence_at(x, y, z, rng or random.Random())
