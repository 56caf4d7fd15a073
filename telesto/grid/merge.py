"""Merging compatible grids into one.

Grids are repositioned and concatenated either vertically (stacked with a
fixed gap) or horizontally (abutted end to end along x). Porosity and
permeability are scaled up slightly with each source index so merged
sources stay visually distinguishable; the scaling is a display heuristic.
"""

import logging
import math
from typing import Sequence

from .compatibility import GridCompatibilityChecker
from .config import (
    GeologicalGrid,
    GridBounds,
    GridCell,
    GridProvenance,
    MergeDirection,
)
from .errors import IncompatibleGridsError
from .statistics import cell_statistics

logger = logging.getLogger(__name__)

DEFAULT_VERTICAL_SEPARATION = 50.0
POROSITY_STEP = 0.1
PERMEABILITY_STEP = 0.15


class GridMergeEngine:
    """Concatenates grids that already passed the compatibility check.

    The engine does not re-run the compatibility check; use merge_grids()
    for a checked merge.
    """

    def __init__(self, vertical_separation: float = DEFAULT_VERTICAL_SEPARATION):
        """Initialize the merge engine.

        Args:
            vertical_separation: Gap added per grid index for vertical merges
        """
        self.vertical_separation = vertical_separation

    def merge(
        self,
        grids: Sequence[GeologicalGrid],
        direction: MergeDirection = MergeDirection.VERTICAL,
        name: str | None = None,
    ) -> GeologicalGrid:
        """Merge grids into a new grid.

        Args:
            grids: Source grids in merge order
            direction: Vertical stacking or horizontal abutment
            name: Merged grid name

        Returns:
            A new GeologicalGrid; the sources are untouched

        Raises:
            IncompatibleGridsError: If fewer than two grids are given
        """
        if len(grids) < 2:
            raise IncompatibleGridsError(
                f"At least two grids are required to merge, got {len(grids)}"
            )

        direction = MergeDirection(direction)
        offsets = self._offsets(grids, direction)

        cells: list[GridCell] = []
        for i, (grid, (dx, dz)) in enumerate(zip(grids, offsets)):
            porosity_factor = 1 + POROSITY_STEP * i
            permeability_factor = 1 + PERMEABILITY_STEP * i
            layer_offset = i * (grid.layer_count + 1)

            for cell in grid.cells:
                cells.append(
                    cell.model_copy(
                        update={
                            "x": round(cell.x + dx, 2),
                            "z": round(cell.z + dz, 2),
                            "layer_index": cell.layer_index + layer_offset,
                            "porosity": min(round(cell.porosity * porosity_factor, 3), 1.0),
                            "permeability": round(cell.permeability * permeability_factor, 2),
                            "source_grid_index": i,
                        }
                    )
                )

        bounds = GridBounds.from_points(cells) or self._union_bounds(grids)
        layer_count = max((c.layer_index for c in cells), default=0) + 1
        layer_count = max(layer_count, max(g.layer_count for g in grids))

        merged = GeologicalGrid(
            name=name or "Merged: " + " + ".join(g.name for g in grids),
            cells=tuple(cells),
            bounds=bounds,
            layer_count=layer_count,
            point_count=sum(g.point_count for g in grids),
            total_volume=round(math.fsum(g.total_volume for g in grids), 2),
            provenance=GridProvenance(
                horizons=tuple(dict.fromkeys(h for g in grids for h in g.provenance.horizons)),
                faults=tuple(dict.fromkeys(f for g in grids for f in g.provenance.faults)),
                source_grid_ids=tuple(g.id for g in grids),
                merge_direction=direction,
                merge_statistics=cell_statistics(cells),
            ),
        )

        logger.info(
            "Merged %d grids %s into %s: %d cells",
            len(grids),
            direction.value,
            merged.id,
            merged.point_count,
        )
        return merged

    def _offsets(
        self, grids: Sequence[GeologicalGrid], direction: MergeDirection
    ) -> list[tuple[float, float]]:
        """(dx, dz) translation per grid."""
        if direction == MergeDirection.VERTICAL:
            return [(0.0, i * self.vertical_separation) for i in range(len(grids))]

        # Each grid's left edge lands on the right edge of the ones before it
        offsets = []
        right_edge = grids[0].bounds.x_min
        for grid in grids:
            offsets.append((right_edge - grid.bounds.x_min, 0.0))
            right_edge += grid.bounds.x_range
        return offsets

    def _union_bounds(self, grids: Sequence[GeologicalGrid]) -> GridBounds:
        return GridBounds(
            x_min=min(g.bounds.x_min for g in grids),
            x_max=max(g.bounds.x_max for g in grids),
            y_min=min(g.bounds.y_min for g in grids),
            y_max=max(g.bounds.y_max for g in grids),
            z_min=min(g.bounds.z_min for g in grids),
            z_max=max(g.bounds.z_max for g in grids),
        )


def merge_grids(
    grids: Sequence[GeologicalGrid],
    direction: MergeDirection = MergeDirection.VERTICAL,
    checker: GridCompatibilityChecker | None = None,
    vertical_separation: float = DEFAULT_VERTICAL_SEPARATION,
    name: str | None = None,
) -> GeologicalGrid:
    """Check compatibility, then merge.

    Raises:
        IncompatibleGridsError: If the grids fail the compatibility check
    """
    report = (checker or GridCompatibilityChecker()).check(grids)
    if not report.can_combine:
        raise IncompatibleGridsError(
            f"Grids cannot be combined (score {report.score})", reasons=report.reasons
        )
    return GridMergeEngine(vertical_separation).merge(grids, direction, name=name)
