"""Unit tests for box plot statistics and grouped variants."""

import pytest

from app.models.analytics import ValuePoint
from app.services.box_plot import (
    calculate_aggregate_box_plot,
    calculate_all_family_box_plot_stats,
    calculate_all_series_box_plot_stats,
    calculate_box_plot_stats,
    calculate_series_box_plot_stats,
)


def points(*values: float) -> list[ValuePoint]:
    return [
        ValuePoint(value=v, part_id=f"P{i}", part_callout=f"PART-{i:03d}")
        for i, v in enumerate(values, start=1)
    ]


class TestBoxPlotStatsKnownResults:
    """Tests with known quartiles."""

    def test_odd_count(self):
        stats = calculate_box_plot_stats(points(1, 2, 3, 4, 5))

        assert stats.min == 1
        assert stats.q1 == 2
        assert stats.median == 3
        assert stats.q3 == 4
        assert stats.max == 5
        assert stats.iqr == 2
        assert stats.whisker_low == 1
        assert stats.whisker_high == 5
        assert stats.outliers == []
        assert stats.n == 5

    def test_even_count(self):
        stats = calculate_box_plot_stats(points(1, 2, 3, 4))

        assert stats.q1 == pytest.approx(1.75)
        assert stats.median == pytest.approx(2.5)
        assert stats.q3 == pytest.approx(3.25)

    def test_unsorted_input_interpolates_between_neighbours(self):
        stats = calculate_box_plot_stats(points(3.3, 1.1, 9.9, 7.2, 4.4, 100))

        assert stats.q1 == pytest.approx(3.575)
        assert stats.median == pytest.approx(5.8)
        assert stats.q3 == pytest.approx(9.225)
        assert [o.part_callout for o in stats.outliers] == ["PART-006"]

    def test_high_outlier_detected_with_identity(self):
        stats = calculate_box_plot_stats(points(10, 12, 11, 13, 100))

        assert stats.q1 == 11
        assert stats.q3 == 13
        assert stats.whisker_high == 13
        assert stats.whisker_low == 10
        assert len(stats.outliers) == 1
        assert stats.outliers[0].value == 100
        assert stats.outliers[0].part_callout == "PART-005"

    def test_mean_reflects_extreme_values(self):
        stats = calculate_box_plot_stats(points(10, 20, 100))

        assert stats.median == 20
        assert stats.mean == pytest.approx(43.333, abs=0.001)

    def test_outliers_on_both_sides_in_ascending_order(self):
        stats = calculate_box_plot_stats(points(200, 50, 51, 1, 52, 53))

        assert stats.q1 == pytest.approx(50.25)
        assert stats.q3 == pytest.approx(52.75)
        assert [o.value for o in stats.outliers] == [1, 200]
        assert stats.whisker_low == 50
        assert stats.whisker_high == 53


class TestBoxPlotStatsEdgeCases:
    """Tests for empty, single-valued and degenerate inputs."""

    def test_empty_input_returns_zeros(self):
        stats = calculate_box_plot_stats([])

        assert stats.min == stats.q1 == stats.median == stats.q3 == stats.max == 0
        assert stats.iqr == 0
        assert stats.outliers == []
        assert stats.n == 0
        assert stats.mean == 0

    def test_single_value(self):
        stats = calculate_box_plot_stats(points(42))

        assert stats.min == stats.q1 == stats.median == stats.q3 == stats.max == 42
        assert stats.iqr == 0
        assert stats.outliers == []

    def test_identical_values_never_flagged(self):
        stats = calculate_box_plot_stats(points(*([7.5] * 25)))

        assert stats.iqr == 0
        assert stats.outliers == []
        assert stats.whisker_low == stats.whisker_high == 7.5

    def test_input_not_mutated(self):
        values = points(5, 3, 9, 1)
        original = [v.value for v in values]
        calculate_box_plot_stats(values)

        assert [v.value for v in values] == original


class TestBoxPlotStatsProperties:
    """Invariants that hold for any non-empty input."""

    @pytest.fixture
    def dataset(self) -> list[ValuePoint]:
        return points(3, 8, 8, 9, 10, 11, 12, 12, 13, 30, 1, 55)

    def test_quartiles_are_ordered(self, dataset):
        stats = calculate_box_plot_stats(dataset)

        assert stats.min <= stats.q1 <= stats.median <= stats.q3 <= stats.max

    def test_outliers_outside_fences_and_rest_inside_whiskers(self, dataset):
        stats = calculate_box_plot_stats(dataset)
        lower_fence = stats.q1 - 1.5 * stats.iqr
        upper_fence = stats.q3 + 1.5 * stats.iqr
        outlier_values = [o.value for o in stats.outliers]

        assert outlier_values
        for value in outlier_values:
            assert value < lower_fence or value > upper_fence
        for point in dataset:
            if point.value not in outlier_values:
                assert stats.whisker_low <= point.value <= stats.whisker_high

    def test_permutation_invariant(self, dataset):
        forward = calculate_box_plot_stats(dataset)
        backward = calculate_box_plot_stats(list(reversed(dataset)))

        assert (forward.min, forward.q1, forward.median, forward.q3, forward.max) == (
            backward.min,
            backward.q1,
            backward.median,
            backward.q3,
            backward.max,
        )
        assert sorted(o.value for o in forward.outliers) == sorted(o.value for o in backward.outliers)


class TestGroupedBoxPlots:
    """Tests for per-series and per-family grouping."""

    def test_series_groups_sorted_with_default_label(self, make_part):
        parts = [
            make_part("U1", series=None, width_mm=40),
            make_part("B1", series="Beta", width_mm=5),
            make_part("A1", series="Alpha", width_mm=10),
            make_part("A2", series="Alpha", width_mm=20),
            make_part("A3", series="Alpha", width_mm=30),
        ]
        result = calculate_all_series_box_plot_stats(parts, "width")

        assert [s.series_name for s in result] == ["Alpha", "Beta", "Uncategorized"]
        assert result[0].n == 3
        assert result[0].median == 20
        assert result[2].max == 40

    def test_series_empty_input(self):
        assert calculate_all_series_box_plot_stats([], "width") == []

    def test_single_series_helper(self, make_part):
        stats = calculate_series_box_plot_stats(
            [make_part("P1", series="S", height_mm=4), make_part("P2", series="S", height_mm=6)],
            "height",
        )

        assert stats.series_name == "S"
        assert stats.median == 5

    def test_single_series_helper_empty(self):
        stats = calculate_series_box_plot_stats([], "width")

        assert stats.series_name == "Unknown"
        assert stats.n == 0

    def test_family_groups_with_series_count(self, make_part):
        parts = [
            make_part("F1", family="SEAX", series="S1", length_mm=100),
            make_part("F2", family="SEAX", series="S2", length_mm=120),
            make_part("F3", family="SEAX", series="S2", length_mm=140),
            make_part("N1", family=None, series=None, length_mm=90),
        ]
        result = calculate_all_family_box_plot_stats(parts, "length")

        assert [f.family_name for f in result] == ["SEAX", "Unassigned"]
        assert result[0].series_count == 2
        assert result[0].median == 120
        assert result[1].series_count == 1
        assert result[1].n == 1

    def test_default_family_label_sorts_by_its_text(self, make_part):
        parts = [make_part("Z1", family="Zeta"), make_part("N1", family=None)]
        result = calculate_all_family_box_plot_stats(parts, "width")

        assert [f.family_name for f in result] == ["Unassigned", "Zeta"]


class TestAggregateBoxPlot:
    """Tests for the single whole-working-set box plot."""

    def test_width_over_all_parts(self, make_part):
        parts = [
            make_part("A1", series="A", width_mm=10),
            make_part("B1", series="B", width_mm=20),
            make_part("C1", series=None, width_mm=30),
        ]
        result = calculate_aggregate_box_plot(parts, "width")

        assert result.dimension == "width"
        assert result.group_name == "Working Set"
        assert [v.part_callout for v in result.values] == ["A1", "B1", "C1"]
        assert result.stats.n == 3
        assert result.stats.median == 20
        assert result.stats.q1 == 15
        assert result.stats.q3 == 25

    def test_lateral_uses_smallest_lateral_feature(self, make_part):
        parts = [
            make_part("P1", smallest_lateral_feature_um=5),
            make_part("P2", smallest_lateral_feature_um=15),
        ]
        result = calculate_aggregate_box_plot(parts, "lateral")

        assert [v.value for v in result.values] == [5, 15]
        assert result.stats.median == 10

    def test_depth_uses_only_parts_that_define_it(self, make_part):
        parts = [
            make_part("P1", smallest_depth_feature_um=4),
            make_part("P2"),
            make_part("P3", smallest_depth_feature_um=8),
        ]
        result = calculate_aggregate_box_plot(parts, "depth")

        assert [v.part_callout for v in result.values] == ["P1", "P3"]
        assert result.stats.n == 2
        assert result.stats.mean == pytest.approx(6.0)

    def test_depth_none_when_no_part_defines_it(self, make_part):
        assert calculate_aggregate_box_plot([make_part("P1"), make_part("P2")], "depth") is None

    def test_no_parts(self):
        assert calculate_aggregate_box_plot([], "width") is None

    def test_outlier_flagged_across_series(self, make_part):
        parts = [make_part(f"P{i}", series=f"S{i % 2}", height_mm=50) for i in range(8)]
        parts.append(make_part("TALL", series="S0", height_mm=400))
        result = calculate_aggregate_box_plot(parts, "height")

        assert [o.part_callout for o in result.stats.outliers] == ["TALL"]
