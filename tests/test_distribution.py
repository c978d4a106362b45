"""Unit tests for the per-series dimensional distribution."""

import pytest

from app.services.histogram import (
    DISTRIBUTION_HISTOGRAM_THRESHOLD,
    calculate_dimensional_distribution,
)


def widths(make_part, *values: float, series: str = "S") -> list:
    return [make_part(f"P{i:02d}", series=series, width_mm=v) for i, v in enumerate(values)]


class TestIndividualBars:
    """Working sets at or below the threshold get one bar per value and series."""

    def test_twenty_parts_stay_individual(self, make_part):
        parts = widths(make_part, *range(1, 21))
        result = calculate_dimensional_distribution(parts)

        assert DISTRIBUTION_HISTOGRAM_THRESHOLD == 20
        assert result.use_histogram is False
        assert result.is_empty is False
        assert len(result.width_data) == 20
        assert [p.value for p in result.width_data] == list(range(1, 21))

    def test_same_value_grouped_per_series(self, make_part):
        parts = [
            make_part("A1", series="A", width_mm=10),
            make_part("A2", series="A", width_mm=10),
            make_part("B1", series="B", width_mm=10),
            make_part("A3", series="A", width_mm=20),
        ]
        result = calculate_dimensional_distribution(parts)

        bars = {(p.value, p.series): p for p in result.width_data}
        assert set(bars) == {(10, "A"), (10, "B"), (20, "A")}
        assert bars[(10, "A")].count == 2
        assert bars[(10, "A")].part_callouts == ["A1", "A2"]
        assert bars[(10, "B")].count == 1

    def test_sorted_by_value(self, make_part):
        result = calculate_dimensional_distribution(widths(make_part, 30, 10, 20))

        assert [p.value for p in result.width_data] == [10, 20, 30]

    def test_identical_dimension_single_bar(self, make_part):
        result = calculate_dimensional_distribution(widths(make_part, 1, 2, 3))

        assert len(result.height_data) == 1
        assert result.height_data[0].value == 50
        assert result.height_data[0].count == 3

    def test_missing_series_uses_default_label(self, make_part):
        result = calculate_dimensional_distribution([make_part("P1", series=None)])

        assert result.width_data[0].series == "Uncategorized"
        assert result.series_names == ["Uncategorized"]


class TestBinnedBars:
    """Working sets above the threshold are binned per series."""

    def test_twenty_one_parts_are_binned(self, make_part):
        parts = widths(make_part, *range(1, 22))
        result = calculate_dimensional_distribution(parts)

        assert result.use_histogram is True
        assert len(result.width_data) == 10
        assert [p.value for p in result.width_data] == pytest.approx(
            [2, 4, 6, 8, 10, 12, 14, 16, 18, 20]
        )
        assert [p.count for p in result.width_data] == [2] * 9 + [3]

    def test_maximum_lands_in_last_bin(self, make_part):
        result = calculate_dimensional_distribution(widths(make_part, *range(1, 22)))

        assert "P20" in result.width_data[-1].part_callouts

    def test_bins_split_by_series(self, make_part):
        parts = widths(make_part, *range(1, 12), series="A") + [
            make_part(f"B{i:02d}", series="B", width_mm=v) for i, v in enumerate(range(10, 20))
        ]
        result = calculate_dimensional_distribution(parts)

        assert result.use_histogram is True
        assert sum(p.count for p in result.width_data) == 21
        assert sum(p.count for p in result.width_data if p.series == "A") == 11
        assert sum(p.count for p in result.width_data if p.series == "B") == 10

    def test_zero_range_falls_back_to_individual_bars(self, make_part):
        parts = [make_part(f"P{i:02d}", width_mm=42) for i in range(21)]
        result = calculate_dimensional_distribution(parts)

        assert result.use_histogram is True
        assert len(result.width_data) == 1
        assert result.width_data[0].value == 42
        assert result.width_data[0].count == 21


class TestOutliersAndSeries:

    def test_bar_flagged_when_it_contains_an_outlier(self, make_part):
        parts = widths(make_part, *[10] * 9) + [make_part("WIDE", series="S", width_mm=100)]
        result = calculate_dimensional_distribution(parts)

        flags = {p.value: p.is_outlier for p in result.width_data}
        assert flags == {10: False, 100: True}
        assert result.outliers.width == ["WIDE"]
        assert result.outliers.height == []

    def test_no_outliers_below_three_parts(self, make_part):
        result = calculate_dimensional_distribution(widths(make_part, 1, 1000))

        assert not any(p.is_outlier for p in result.width_data)

    def test_series_names_sorted(self, make_part):
        parts = [
            make_part("P1", series="beta"),
            make_part("P2", series="Alpha"),
            make_part("P3", series="Gamma"),
            make_part("P4", series="Alpha"),
        ]
        result = calculate_dimensional_distribution(parts)

        assert result.series_names == ["Alpha", "beta", "Gamma"]

    def test_empty_input(self):
        result = calculate_dimensional_distribution([])

        assert result.is_empty is True
        assert result.use_histogram is False
        assert result.width_data == []
        assert result.series_names == []
