"""Input validation for horizons and fault systems.

This module validates loaded horizon and fault data BEFORE grid
generation, so malformed coordinates never reach the layer stack builder.
"""

import math
from dataclasses import dataclass, field
from typing import Sequence

from .config import FaultSystem, Horizon

SMALL_DATASET_SIZE = 10


@dataclass
class ValidationResult:
    """Result of validation with errors and warnings."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Check if validation passed (no errors)."""
        return len(self.errors) == 0

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def merge(self, other: "ValidationResult") -> None:
        """Merge another result into this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)


def _non_finite_points(points) -> list[int]:
    return [
        i
        for i, p in enumerate(points, start=1)
        if not (math.isfinite(p.x) and math.isfinite(p.y) and math.isfinite(p.z))
    ]


def _describe_indices(indices: list[int], limit: int = 3) -> str:
    shown = ", ".join(str(i) for i in indices[:limit])
    remaining = len(indices) - limit
    if remaining > 0:
        shown += f" and {remaining} more"
    return shown


class HorizonValidator:
    """Validates horizons before grid generation."""

    def validate(self, horizons: Sequence[Horizon]) -> ValidationResult:
        """Validate a horizon set.

        Args:
            horizons: Horizons in builder order (top first, base second)

        Returns:
            ValidationResult with any errors or warnings
        """
        result = ValidationResult()

        if len(horizons) < 2:
            result.add_error(
                f"At least two horizons (top and base) are required, got {len(horizons)}"
            )

        for horizon in horizons:
            self._check_points(horizon, result)

        if len(horizons) > 2:
            extra = ", ".join(f"'{h.name}'" for h in horizons[2:])
            result.add_warning(f"Only the first two horizons are used; ignoring {extra}")

        return result

    def _check_points(self, horizon: Horizon, result: ValidationResult) -> None:
        if not horizon.points:
            result.add_error(f"Horizon '{horizon.name}' has no points")
            return

        bad = _non_finite_points(horizon.points)
        if bad:
            result.add_error(
                f"Horizon '{horizon.name}' has non-finite coordinates at point(s) "
                f"{_describe_indices(bad)}"
            )

        if len(horizon.points) < SMALL_DATASET_SIZE:
            result.add_warning(
                f"Horizon '{horizon.name}' has only {len(horizon.points)} points; "
                f"results may be less accurate"
            )

        locations = [(p.x, p.y) for p in horizon.points]
        duplicates = len(locations) - len(set(locations))
        if duplicates:
            result.add_warning(
                f"Horizon '{horizon.name}' has {duplicates} duplicate planar location(s); "
                f"the first sample at each location wins on exact matches"
            )


class FaultValidator:
    """Validates fault systems before grid generation."""

    def validate(self, fault_systems: Sequence[FaultSystem]) -> ValidationResult:
        """Validate fault systems; an empty set is valid (unfaulted grid)."""
        result = ValidationResult()

        for fault in fault_systems:
            if not fault.points:
                result.add_warning(f"Fault '{fault.name}' has no trace points and will be ignored")
                continue

            bad = _non_finite_points(fault.points)
            if bad:
                result.add_error(
                    f"Fault '{fault.name}' has non-finite coordinates at point(s) "
                    f"{_describe_indices(bad)}"
                )

        names = [f.name for f in fault_systems]
        duplicate_names = sorted({n for n in names if names.count(n) > 1})
        if duplicate_names:
            result.add_warning(f"Fault names used more than once: {duplicate_names}")

        return result


def validate_inputs(
    horizons: Sequence[Horizon], fault_systems: Sequence[FaultSystem] = ()
) -> ValidationResult:
    """Validate horizons and faults together."""
    result = HorizonValidator().validate(horizons)
    result.merge(FaultValidator().validate(fault_systems))
    return result
