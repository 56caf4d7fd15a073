"""Tests for grid statistics and volumetrics."""

import math

import pytest

from telesto.grid import (
    InsufficientInputError,
    LayerStackBuilder,
    SurfacePoint,
    cell_statistics,
    grid_structural_analysis,
    structural_analysis,
    thickness_map,
    volume_statistics,
)
from telesto.grid.statistics import plane_orientation


class TestCellStatistics:
    """Test merge statistics over cells."""

    def test_means_and_densities(self, grid_factory):
        """Test averages and flagged-cell fractions."""
        stats = cell_statistics(grid_factory().cells)

        assert stats.avg_porosity == pytest.approx(0.2)
        assert stats.avg_permeability == pytest.approx(100.0)
        assert stats.fault_density == pytest.approx(0.05)
        assert stats.well_density == pytest.approx(0.04)

    def test_no_cells(self):
        """Test empty input yields zeros."""
        stats = cell_statistics([])

        assert stats.avg_porosity == 0.0
        assert stats.fault_density == 0.0


class TestVolumeStatistics:
    """Test volumetrics."""

    def test_volumes(self, grid_factory):
        """Test bulk, pore and net volumes."""
        grid = grid_factory()

        stats = volume_statistics(grid)

        assert stats.total_volume == pytest.approx(grid.total_volume)
        assert stats.pore_volume == pytest.approx(grid.total_volume * 0.2)
        assert stats.net_volume == pytest.approx(grid.total_volume)
        assert stats.net_to_gross == 1.0
        assert stats.cell_count == grid.point_count
        assert stats.net_cell_count == grid.point_count

    def test_porosity_cutoff(self, grid_factory):
        """Test cells at or below the cutoff are not net."""
        stats = volume_statistics(grid_factory(), porosity_cutoff=0.25)

        assert stats.net_volume == 0.0
        assert stats.net_to_gross == 0.0
        assert stats.net_cell_count == 0

    def test_layer_volumes(self, grid_factory):
        """Test per-layer volumes in layer order."""
        grid = grid_factory(layer_count=4, columns=10)

        stats = volume_statistics(grid)

        assert [lv.layer_index for lv in stats.layer_volumes] == [0, 1, 2, 3]
        assert all(lv.volume == pytest.approx(1255.0) for lv in stats.layer_volumes)

    def test_empty_grid(self, grid_factory):
        """Test a grid without cells has zero volumes."""
        grid = grid_factory()
        empty = grid.model_copy(update={"cells": (), "point_count": 0, "total_volume": 0.0})

        stats = volume_statistics(empty)

        assert stats.total_volume == 0.0
        assert stats.layer_volumes == []


class TestThicknessMap:
    """Test column thickness and its distribution."""

    def test_uniform_columns(self, grid_factory):
        """Test every column of a uniform grid has the same thickness."""
        result = thickness_map(grid_factory())

        assert result.total_positions == 20
        assert result.average_thickness == pytest.approx(100.0)
        assert result.max_thickness == pytest.approx(100.0)
        assert result.min_thickness == pytest.approx(100.0)
        assert all(p.layers == 5 for p in result.points)

    def test_distribution_bins(self, grid_factory):
        """Test five equal bins with the thickest column in the last one."""
        result = thickness_map(grid_factory())

        assert [r.count for r in result.ranges] == [0, 0, 0, 0, 20]
        assert result.ranges[-1].percentage == pytest.approx(100.0)
        assert result.ranges[0].label == "0-20m"
        assert result.ranges[-1].max == pytest.approx(100.0)

    def test_varying_thickness(self, grid_factory):
        """Test thinner columns land in lower bins."""
        thick = grid_factory("Thick", thickness=100.0)
        thin = grid_factory("Thin", x_min=2000.0, x_max=3000.0, thickness=30.0)
        grid = thick.model_copy(update={"cells": thick.cells + thin.cells})

        result = thickness_map(grid)

        assert result.total_positions == 40
        assert result.min_thickness == pytest.approx(30.0)
        assert [r.count for r in result.ranges] == [0, 20, 0, 0, 20]

    def test_single_layer_rejected(self, grid_factory):
        """Test one layer has no thickness."""
        grid = grid_factory()
        top_only = grid.model_copy(
            update={"cells": tuple(c for c in grid.cells if c.layer_index == 4)}
        )

        with pytest.raises(InsufficientInputError):
            thickness_map(top_only)

    def test_empty_grid_rejected(self, grid_factory):
        """Test an empty grid cannot be analysed."""
        grid = grid_factory().model_copy(update={"cells": ()})

        with pytest.raises(InsufficientInputError):
            thickness_map(grid)


class TestStructuralAnalysis:
    """Test dip and strike estimates."""

    def test_tilted_plane(self):
        """Test a plane rising east at 0.5 dips about 26.6 degrees."""
        points = [
            SurfacePoint(x=0.0, y=0.0, z=0.0),
            SurfacePoint(x=1.0, y=0.0, z=0.5),
            SurfacePoint(x=0.0, y=1.0, z=0.0),
        ]

        result = structural_analysis(points)

        assert result.total_measurements == 1
        assert result.average_dip == pytest.approx(math.degrees(math.atan(0.5)), abs=1e-3)
        assert result.dominant_strike == 275.0
        assert result.structural_trends[0].direction == "W"
        assert result.dip_distribution.moderate == 1

    def test_point_order_does_not_flip_azimuth(self):
        """Test reversing the triangle winding gives the same orientation."""
        a = SurfacePoint(x=0.0, y=0.0, z=0.0)
        b = SurfacePoint(x=1.0, y=0.0, z=0.5)
        c = SurfacePoint(x=0.0, y=1.0, z=0.0)

        assert plane_orientation(a, b, c) == pytest.approx(plane_orientation(a, c, b))

    def test_collinear_points_skipped(self):
        """Test runs of collinear points contribute no measurement."""
        points = [SurfacePoint(x=float(i), y=0.0, z=float(i)) for i in range(4)]

        result = structural_analysis(points)

        assert result.total_measurements == 0
        assert result.dominant_strike is None
        assert result.structural_trends == []

    def test_too_few_points(self):
        """Test fewer than three points is an error."""
        with pytest.raises(InsufficientInputError):
            structural_analysis([SurfacePoint(x=0.0, y=0.0, z=0.0)])

    @pytest.mark.asyncio
    async def test_flat_grid_layer(self, flat_slab, quiet_parameters):
        """Test an unperturbed flat slab has zero dip on every lattice triangle."""
        grid = await LayerStackBuilder(quiet_parameters).build(flat_slab)

        result = grid_structural_analysis(grid)

        # 11 x 11 lattice positions give 10 x 10 triangles
        assert result.total_measurements == 100
        assert result.average_dip == pytest.approx(0.0)
        assert result.dip_distribution.gentle == 100

    def test_single_row_layer_rejected(self, grid_factory):
        """Test a layer without a second row cannot form triangles."""
        with pytest.raises(InsufficientInputError):
            grid_structural_analysis(grid_factory(), layer_index=0)
