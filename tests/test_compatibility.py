"""Tests for grid compatibility checks."""

import pytest

from telesto.grid import GridCompatibilityChecker, check_compatibility


class TestGridCompatibilityChecker:
    """Test compatibility decisions and scores."""

    def test_identical_copy_is_compatible(self, grid_factory):
        """Test a grid always combines with a copy of itself."""
        grid = grid_factory()
        copy = grid.model_copy()

        report = check_compatibility([grid, copy])

        assert report.can_combine
        assert report.score == 100
        assert report.reasons == []

    def test_bounds_mismatch(self, grid_factory):
        """Test x_max differing by more than 10% is rejected."""
        a = grid_factory("A", x_max=1000.0)
        b = grid_factory("B", x_max=1200.0)

        report = check_compatibility([a, b])

        assert not report.can_combine
        assert report.score == 80
        assert len(report.reasons) == 1
        assert report.reasons[0].startswith("Bounds mismatch")
        assert "x_max" in report.reasons[0]

    def test_bounds_within_tolerance(self, grid_factory):
        """Test small bound differences are accepted."""
        report = check_compatibility(
            [grid_factory("A", x_max=1000.0), grid_factory("B", x_max=1050.0)]
        )

        assert report.can_combine

    @pytest.mark.parametrize("x_max", [1080.0, 1120.0, 1300.0])
    def test_symmetry(self, grid_factory, x_max):
        """Test the decision does not depend on grid order."""
        a = grid_factory("A", x_max=1000.0)
        b = grid_factory("B", x_max=x_max)

        assert check_compatibility([a, b]).can_combine == check_compatibility([b, a]).can_combine

    def test_tolerance_uses_smaller_range(self, grid_factory):
        """Test the tolerance is 10% of the smaller extent, in either order.

        0-1000 against 0-900 differs by 100 in x_max: within 10% of the first
        grid's range but beyond 10% of the smaller one.
        """
        a = grid_factory("A", x_max=1000.0)
        b = grid_factory("B", x_max=900.0)

        for grids in ([a, b], [b, a]):
            report = check_compatibility(grids)

            assert not report.can_combine
            assert len(report.reasons) == 1
            assert report.reasons[0].startswith("Bounds mismatch")
            assert "x_max" in report.reasons[0]

    def test_difference_equal_to_tolerance_accepted(self, grid_factory):
        """Test a difference of exactly 10% of the smaller range is allowed."""
        report = check_compatibility(
            [grid_factory("A", x_max=1000.0), grid_factory("B", x_max=1100.0)]
        )

        assert report.can_combine

    def test_layer_count_mismatch(self, grid_factory):
        """Test layer counts spreading by more than 5 are rejected."""
        report = check_compatibility(
            [grid_factory("A", layer_count=3), grid_factory("B", layer_count=9)]
        )

        assert not report.can_combine
        assert any(r.startswith("Layer count mismatch") for r in report.reasons)

    def test_layer_count_spread_of_five_allowed(self, grid_factory):
        """Test a spread of exactly 5 layers passes the layer check."""
        report = check_compatibility(
            [grid_factory("A", layer_count=3), grid_factory("B", layer_count=8, columns=12)]
        )

        assert not any(r.startswith("Layer count mismatch") for r in report.reasons)

    def test_point_count_mismatch(self, grid_factory):
        """Test very different cell counts are rejected."""
        report = check_compatibility(
            [grid_factory("A", columns=10), grid_factory("B", columns=40)]
        )

        assert not report.can_combine
        assert any(r.startswith("Point count mismatch") for r in report.reasons)

    def test_multiple_reasons_reduce_score(self, grid_factory):
        """Test each reason costs 20 points."""
        a = grid_factory("A", x_max=1000.0, layer_count=3, columns=10)
        b = grid_factory("B", x_max=2000.0, layer_count=10, columns=40)

        report = check_compatibility([a, b])

        assert len(report.reasons) == 3
        assert report.score == 40

    def test_score_clamped_at_zero(self, grid_factory):
        """Test many mismatching grids never score below zero."""
        grids = [grid_factory("A", x_max=1000.0)] + [
            grid_factory(f"G{i}", x_max=1000.0 * (i + 2)) for i in range(7)
        ]

        report = check_compatibility(grids)

        assert len(report.reasons) >= 6
        assert report.score == 0

    def test_single_grid_not_combinable(self, grid_factory):
        """Test fewer than two grids is never combinable."""
        report = check_compatibility([grid_factory()])

        assert not report.can_combine
        assert report.score == 0
        assert report.reasons

    def test_custom_tolerance(self, grid_factory):
        """Test a wider bounds tolerance accepts larger differences."""
        checker = GridCompatibilityChecker(bounds_tolerance=0.5)
        a = grid_factory("A", x_max=1000.0)
        b = grid_factory("B", x_max=1200.0)

        assert checker.check([a, b]).can_combine
