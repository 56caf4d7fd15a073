"""Compatibility checks for combining generated grids.

Grids may only be merged when their extents, layer counts and cell counts
are similar enough. Each failed check contributes a human-readable reason
and costs 20 points of the 0-100 compatibility score.
"""

import logging
from typing import Sequence

import numpy as np

from .config import CompatibilityReport, GeologicalGrid

logger = logging.getLogger(__name__)

BOUND_AXES = {
    "x_min": "x",
    "x_max": "x",
    "y_min": "y",
    "y_max": "y",
    "z_min": "z",
    "z_max": "z",
}
SCORE_PENALTY = 20


class GridCompatibilityChecker:
    """Decides whether grids may be combined.

    Checks:
    - Every bound of each grid lies within bounds_tolerance of the first
      grid's bound, measured as a fraction of the smaller of the two grids'
      range along that axis (so a pairwise check reads the same either way)
    - The spread of layer counts is at most max_layer_difference
    - The coefficient of variation of point counts is at most max_point_count_cv
    """

    def __init__(
        self,
        bounds_tolerance: float = 0.1,
        max_layer_difference: int = 5,
        max_point_count_cv: float = 0.3,
    ):
        self.bounds_tolerance = bounds_tolerance
        self.max_layer_difference = max_layer_difference
        self.max_point_count_cv = max_point_count_cv

    def check(self, grids: Sequence[GeologicalGrid]) -> CompatibilityReport:
        """Check whether the grids may be combined.

        Args:
            grids: Grids in merge order

        Returns:
            CompatibilityReport; fewer than two grids is never combinable
        """
        if len(grids) < 2:
            return CompatibilityReport(
                can_combine=False,
                reasons=[f"At least two grids are required to combine, got {len(grids)}"],
                score=0,
            )

        reasons: list[str] = []
        self._check_bounds(grids, reasons)
        self._check_layer_counts(grids, reasons)
        self._check_point_counts(grids, reasons)

        score = max(0, min(100, 100 - SCORE_PENALTY * len(reasons)))
        logger.debug("Compatibility of %d grids: score=%d, reasons=%s", len(grids), score, reasons)

        return CompatibilityReport(can_combine=not reasons, reasons=reasons, score=score)

    def _check_bounds(self, grids: Sequence[GeologicalGrid], reasons: list[str]) -> None:
        """Compare every grid's bounds against the first grid."""
        reference = grids[0].bounds

        for i, grid in enumerate(grids[1:], start=1):
            mismatched = []
            for field, axis in BOUND_AXES.items():
                axis_range = min(
                    getattr(reference, f"{axis}_range"), getattr(grid.bounds, f"{axis}_range")
                )
                tolerance = self.bounds_tolerance * axis_range
                difference = abs(getattr(grid.bounds, field) - getattr(reference, field))
                if difference > tolerance:
                    mismatched.append(field)

            if mismatched:
                reasons.append(
                    f"Bounds mismatch: grid '{grid.name}' (#{i + 1}) differs from "
                    f"'{grids[0].name}' by more than {self.bounds_tolerance:.0%} "
                    f"in {', '.join(mismatched)}"
                )

    def _check_layer_counts(self, grids: Sequence[GeologicalGrid], reasons: list[str]) -> None:
        """Layer counts must not spread by more than max_layer_difference."""
        counts = [g.layer_count for g in grids]
        spread = max(counts) - min(counts)
        if spread > self.max_layer_difference:
            reasons.append(
                f"Layer count mismatch: layer counts {counts} differ by {spread} "
                f"(maximum {self.max_layer_difference})"
            )

    def _check_point_counts(self, grids: Sequence[GeologicalGrid], reasons: list[str]) -> None:
        """Point counts must have a coefficient of variation within limits."""
        counts = np.array([g.point_count for g in grids], dtype=float)
        mean = counts.mean()
        cv = float(counts.std() / mean) if mean > 0 else 0.0
        if cv > self.max_point_count_cv:
            reasons.append(
                f"Point count mismatch: coefficient of variation {cv:.2f} "
                f"exceeds {self.max_point_count_cv:.2f} (counts {counts.astype(int).tolist()})"
            )


def check_compatibility(grids: Sequence[GeologicalGrid]) -> CompatibilityReport:
    """Convenience function to check grids with the default thresholds."""
    return GridCompatibilityChecker().check(grids)
