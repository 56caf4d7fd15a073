"""Grid export for downstream tools.

This module formats grid cells as delimited records in a fixed field order
and packs them into numpy arrays for numeric consumers. JSON round trips go
through the pydantic models directly.
"""

import csv
import io
from pathlib import Path

import numpy as np

from .config import GeologicalGrid, GridCell
from .errors import GridError

EXPORT_FIELDS: tuple[str, ...] = (
    "X",
    "Y",
    "Z",
    "Layer",
    "BulkVolume",
    "FaultFlag",
    "WellPath",
    "Porosity",
    "Permeability",
    "StructuralDip",
)


def cell_record(cell: GridCell) -> tuple:
    """A cell's values in EXPORT_FIELDS order."""
    return (
        cell.x,
        cell.y,
        cell.z,
        cell.layer_index,
        cell.bulk_volume,
        cell.fault_flag,
        int(cell.well_flag),
        cell.porosity,
        cell.permeability,
        cell.structural_dip,
    )


class GridExporter:
    """Exports GeologicalGrid cells.

    Formats:
    - CSV with an optional header row, one record per cell in cell order
    - numpy array of shape (cells, 10) in the same column order
    - JSON of the complete grid (cells, bounds, provenance)
    """

    def __init__(self, delimiter: str = ",", include_headers: bool = True):
        self.delimiter = delimiter
        self.include_headers = include_headers

    def to_csv(self, grid: GeologicalGrid) -> str:
        """Render the grid's cells as delimited text.

        Raises:
            GridError: If the grid has no cells
        """
        if not grid.cells:
            raise GridError(f"Grid '{grid.name}' has no cells to export")

        buffer = io.StringIO()
        writer = csv.writer(buffer, delimiter=self.delimiter, lineterminator="\n")
        if self.include_headers:
            writer.writerow(EXPORT_FIELDS)
        writer.writerows(cell_record(cell) for cell in grid.cells)
        return buffer.getvalue()

    def write_csv(self, grid: GeologicalGrid, path: str | Path) -> Path:
        """Write the CSV export to path and return it."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_csv(grid), encoding="utf-8")
        return path

    def to_array(self, grid: GeologicalGrid) -> np.ndarray:
        """Cell records as a float array, one row per cell."""
        if not grid.cells:
            return np.empty((0, len(EXPORT_FIELDS)), dtype=float)
        return np.array([cell_record(cell) for cell in grid.cells], dtype=float)

    def to_json(self, grid: GeologicalGrid) -> str:
        return grid.model_dump_json()

    def from_json(self, payload: str | bytes) -> GeologicalGrid:
        return GeologicalGrid.model_validate_json(payload)


def export_grid_csv(grid: GeologicalGrid) -> str:
    """Convenience function for a headed, comma-delimited export."""
    return GridExporter().to_csv(grid)
