"""Tests for grid export."""

import csv
import io

import pytest

from telesto.grid import (
    EXPORT_FIELDS,
    GeologicalGrid,
    GridBounds,
    GridError,
    GridExporter,
    export_grid_csv,
)


@pytest.fixture
def empty_grid():
    return GeologicalGrid(
        name="Empty",
        cells=(),
        bounds=GridBounds(x_min=0, x_max=1, y_min=0, y_max=1, z_min=0, z_max=1),
        layer_count=1,
        point_count=0,
        total_volume=0.0,
    )


class TestCSVExport:
    """Test delimited record export."""

    def test_header_order(self, grid_factory):
        """Test the header row uses the fixed field order."""
        content = export_grid_csv(grid_factory())

        assert content.splitlines()[0] == (
            "X,Y,Z,Layer,BulkVolume,FaultFlag,WellPath,Porosity,Permeability,StructuralDip"
        )

    def test_records_in_cell_order(self, grid_factory):
        """Test one record per cell in cell order."""
        grid = grid_factory()

        rows = list(csv.reader(io.StringIO(export_grid_csv(grid))))[1:]

        assert len(rows) == grid.point_count
        first = grid.cells[0]
        assert rows[0] == [
            str(first.x),
            str(first.y),
            str(first.z),
            "0",
            "125.5",
            "1",
            "0",
            "0.2",
            "100.0",
            "0.0",
        ]

    def test_without_headers(self, grid_factory):
        """Test the header row can be omitted."""
        grid = grid_factory()

        content = GridExporter(include_headers=False).to_csv(grid)

        assert len(content.splitlines()) == grid.point_count
        assert not content.startswith("X")

    def test_custom_delimiter(self, grid_factory):
        """Test an alternative delimiter."""
        content = GridExporter(delimiter=";").to_csv(grid_factory())

        assert content.splitlines()[0].split(";") == list(EXPORT_FIELDS)

    def test_empty_grid_rejected(self, empty_grid):
        """Test exporting a grid without cells is an error."""
        with pytest.raises(GridError):
            export_grid_csv(empty_grid)

    def test_write_csv(self, grid_factory, tmp_path):
        """Test writing the export to disk."""
        grid = grid_factory()

        path = GridExporter().write_csv(grid, tmp_path / "exports" / "grid.csv")

        assert path.exists()
        assert path.read_text(encoding="utf-8") == export_grid_csv(grid)


class TestArrayAndJSONExport:
    """Test numeric and JSON export."""

    def test_array_shape_and_columns(self, grid_factory):
        """Test array rows follow the export field order."""
        grid = grid_factory()

        array = GridExporter().to_array(grid)

        assert array.shape == (grid.point_count, len(EXPORT_FIELDS))
        assert array[:, EXPORT_FIELDS.index("Porosity")].tolist() == [0.2] * grid.point_count
        assert array[:, EXPORT_FIELDS.index("Layer")].max() == grid.layer_count - 1

    def test_empty_array(self, empty_grid):
        """Test an empty grid gives an empty array."""
        assert GridExporter().to_array(empty_grid).shape == (0, len(EXPORT_FIELDS))

    def test_json_round_trip_preserves_grid(self, grid_factory):
        """Test JSON export restores an equal grid."""
        grid = grid_factory()
        exporter = GridExporter()

        restored = exporter.from_json(exporter.to_json(grid))

        assert restored == grid
