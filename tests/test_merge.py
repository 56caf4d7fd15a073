"""Tests for merging grids."""

import pytest

from telesto.grid import (
    GridMergeEngine,
    IncompatibleGridsError,
    MergeDirection,
    merge_grids,
)


class TestVerticalMerge:
    """Test stacked merges."""

    def test_volume_and_point_conservation(self, grid_factory):
        """Test totals are sums of the sources."""
        a, b = grid_factory("A"), grid_factory("B")

        merged = GridMergeEngine().merge([a, b], MergeDirection.VERTICAL)

        assert merged.total_volume == pytest.approx(a.total_volume + b.total_volume)
        assert merged.point_count == a.point_count + b.point_count
        assert len(merged.cells) == merged.point_count

    def test_vertical_offset(self, grid_factory):
        """Test each later grid is raised by the separation."""
        a, b = grid_factory("A"), grid_factory("B")

        merged = GridMergeEngine(vertical_separation=50.0).merge([a, b])

        second = [c for c in merged.cells if c.source_grid_index == 1]
        assert [c.z for c in second] == [c.z + 50.0 for c in b.cells]
        assert merged.bounds.z_max == a.bounds.z_max + 50.0

    def test_layer_reindexing(self, grid_factory):
        """Test later grids shift layer indices by layer_count + 1."""
        a, b = grid_factory("A"), grid_factory("B")

        merged = GridMergeEngine().merge([a, b])

        second = [c for c in merged.cells if c.source_grid_index == 1]
        assert {c.layer_index for c in second} == {6, 7, 8, 9, 10}
        assert merged.layer_count == 11

    def test_property_scaling(self, grid_factory):
        """Test porosity and permeability scale with grid index."""
        grids = [grid_factory("A"), grid_factory("B"), grid_factory("C")]

        merged = GridMergeEngine().merge(grids)

        by_source = {c.source_grid_index: c for c in merged.cells}
        assert by_source[0].porosity == 0.2
        assert by_source[1].porosity == 0.22
        assert by_source[2].porosity == 0.24
        assert by_source[1].permeability == 115.0
        assert by_source[2].permeability == 130.0

    def test_porosity_capped(self, grid_factory):
        """Test scaled porosity never exceeds 1."""
        a = grid_factory("A")
        saturated = a.model_copy(
            update={"cells": tuple(c.model_copy(update={"porosity": 0.95}) for c in a.cells)}
        )

        merged = GridMergeEngine().merge([saturated, saturated])

        assert max(c.porosity for c in merged.cells) == 1.0

    def test_sources_untouched(self, grid_factory):
        """Test merging leaves the source grids unchanged."""
        a, b = grid_factory("A"), grid_factory("B")
        before = b.cells

        GridMergeEngine().merge([a, b])

        assert b.cells == before
        assert all(c.source_grid_index is None for c in b.cells)

    def test_provenance_and_statistics(self, grid_factory):
        """Test merge provenance and statistics."""
        a, b = grid_factory("A"), grid_factory("B")

        merged = GridMergeEngine().merge([a, b])

        assert merged.name == "Merged: A + B"
        assert merged.provenance.source_grid_ids == (a.id, b.id)
        assert merged.provenance.merge_direction == MergeDirection.VERTICAL

        stats = merged.provenance.merge_statistics
        assert stats.avg_porosity == pytest.approx(0.21)
        assert stats.fault_density == pytest.approx(0.05)
        assert 0 < stats.well_density < 1


class TestHorizontalMerge:
    """Test abutted merges."""

    def test_abutment_offset(self, grid_factory):
        """Test B's minimum x lands on A's right edge."""
        a = grid_factory("A", x_min=0.0, x_max=1000.0)
        b = grid_factory("B", x_min=200.0, x_max=900.0)

        merged = GridMergeEngine().merge([a, b], MergeDirection.HORIZONTAL)

        second = [c for c in merged.cells if c.source_grid_index == 1]
        assert min(c.x for c in second) == 1000.0
        assert merged.bounds.x_max == 1700.0

    def test_three_grids_abut_in_order(self, grid_factory):
        """Test each grid starts where the previous one ends."""
        grids = [grid_factory(n, x_max=1000.0) for n in ("A", "B", "C")]

        merged = GridMergeEngine().merge(grids, "horizontal")

        starts = [
            min(c.x for c in merged.cells if c.source_grid_index == i) for i in range(3)
        ]
        assert starts == [0.0, 1000.0, 2000.0]

    def test_volume_conservation(self, grid_factory):
        """Test totals are sums of the sources."""
        a, b = grid_factory("A"), grid_factory("B", columns=18)

        merged = GridMergeEngine().merge([a, b], MergeDirection.HORIZONTAL)

        assert merged.total_volume == pytest.approx(a.total_volume + b.total_volume)

    def test_elevations_unchanged(self, grid_factory):
        """Test horizontal merges do not shift z."""
        a, b = grid_factory("A"), grid_factory("B")

        merged = GridMergeEngine().merge([a, b], MergeDirection.HORIZONTAL)

        assert sorted(c.z for c in merged.cells) == sorted(c.z for c in a.cells + b.cells)


class TestCheckedMerge:
    """Test merge_grids runs the compatibility check."""

    def test_incompatible_grids_rejected(self, grid_factory):
        """Test incompatible grids raise with reasons."""
        a = grid_factory("A", x_max=1000.0)
        b = grid_factory("B", x_max=1500.0)

        with pytest.raises(IncompatibleGridsError) as exc_info:
            merge_grids([a, b])

        assert exc_info.value.reasons
        assert "Bounds mismatch" in str(exc_info.value)

    def test_compatible_grids_merged(self, grid_factory):
        """Test compatible grids merge."""
        merged = merge_grids([grid_factory("A"), grid_factory("B")], name="Combined")

        assert merged.name == "Combined"
        assert merged.point_count == 200

    def test_single_grid_rejected(self, grid_factory):
        """Test the engine needs at least two grids."""
        with pytest.raises(IncompatibleGridsError):
            GridMergeEngine().merge([grid_factory()])
