"""Histogram binning for single-series drill-down views and the per-series
dimensional distribution charts.
"""

import math
from collections import defaultdict
from typing import Sequence

from app.models.analytics import (
    DimensionalDistribution,
    DimensionOutliers,
    DistributionPoint,
    HistogramBin,
    HistogramDimensionData,
    HistogramValue,
)
from app.models.parts import Dimension, Part
from app.services.box_plot import calculate_box_plot_stats, to_value_points
from app.services.outliers import DIMENSIONS, detect_all_outliers
from app.services.resolvers import dimension_value, series_label, sort_key

DEFAULT_BIN_COUNT = 10


def create_histogram_bins(
    values: Sequence[HistogramValue], bin_count: int = DEFAULT_BIN_COUNT
) -> list[HistogramBin]:
    """Distribute values into equal-width bins, dropping empty bins.

    The maximum value falls into the last bin. When every value is equal a
    single bin holds all of them.
    """
    if not values:
        return []

    numbers = [v.value for v in values]
    min_value = min(numbers)
    max_value = max(numbers)
    value_range = max_value - min_value

    if value_range == 0:
        return [
            HistogramBin(
                bin_start=min_value,
                bin_end=max_value,
                bin_center=min_value,
                count=len(values),
                part_callouts=[v.part_callout for v in values],
                has_outliers=any(v.is_outlier for v in values),
                bin_label=f"{min_value:.1f}",
            )
        ]

    bin_width = value_range / bin_count
    members: list[list[HistogramValue]] = [[] for _ in range(bin_count)]
    for v in values:
        index = min(math.floor((v.value - min_value) / bin_width), bin_count - 1)
        members[index].append(v)

    bins = []
    for i, contents in enumerate(members):
        if not contents:
            continue
        start = min_value + i * bin_width
        bins.append(
            HistogramBin(
                bin_start=start,
                bin_end=min_value + (i + 1) * bin_width,
                bin_center=min_value + (i + 0.5) * bin_width,
                count=len(contents),
                part_callouts=[v.part_callout for v in contents],
                has_outliers=any(v.is_outlier for v in contents),
                bin_label=f"{start:.1f}",
            )
        )
    return bins


def calculate_dimension_histogram(
    parts: Sequence[Part], dimension: Dimension, bin_count: int = DEFAULT_BIN_COUNT
) -> HistogramDimensionData:
    """Histogram of one dimension with IQR outliers flagged per bin."""
    if not parts:
        return HistogramDimensionData(dimension=dimension)

    points = to_value_points(parts, dimension)
    outlier_callouts = {o.part_callout for o in calculate_box_plot_stats(points).outliers}
    values = [
        HistogramValue(
            value=p.value,
            part_callout=p.part_callout,
            is_outlier=p.part_callout in outlier_callouts,
        )
        for p in points
    ]

    return HistogramDimensionData(
        dimension=dimension,
        bins=create_histogram_bins(values, bin_count),
        min_value=min(v.value for v in values),
        max_value=max(v.value for v in values),
        part_count=len(parts),
    )


# Above this many parts the distribution switches from individual bars to bins
DISTRIBUTION_HISTOGRAM_THRESHOLD = 20
DISTRIBUTION_BIN_COUNT = 10


def _distribution_point(
    value: float, series: str, members: list[Part], outlier_callouts: set[str]
) -> DistributionPoint:
    callouts = [p.callout for p in members]
    return DistributionPoint(
        value=value,
        count=len(members),
        series=series,
        part_callouts=callouts,
        is_outlier=any(c in outlier_callouts for c in callouts),
    )


def _individual_bars(
    parts: Sequence[Part], dimension: Dimension, outlier_callouts: set[str]
) -> list[DistributionPoint]:
    groups: dict[tuple[float, str], list[Part]] = defaultdict(list)
    for part in parts:
        groups[(dimension_value(part, dimension), series_label(part))].append(part)

    points = [
        _distribution_point(value, series, members, outlier_callouts)
        for (value, series), members in groups.items()
    ]
    return sorted(points, key=lambda p: p.value)


def _binned_bars(
    parts: Sequence[Part], dimension: Dimension, outlier_callouts: set[str]
) -> list[DistributionPoint]:
    values = [dimension_value(p, dimension) for p in parts]
    min_value = min(values)
    value_range = max(values) - min_value
    if value_range == 0:
        return _individual_bars(parts, dimension, outlier_callouts)

    bin_width = value_range / DISTRIBUTION_BIN_COUNT
    groups: dict[tuple[int, str], list[Part]] = defaultdict(list)
    for part, value in zip(parts, values):
        index = min(math.floor((value - min_value) / bin_width), DISTRIBUTION_BIN_COUNT - 1)
        groups[(index, series_label(part))].append(part)

    points = [
        _distribution_point(min_value + (index + 0.5) * bin_width, series, members, outlier_callouts)
        for (index, series), members in groups.items()
    ]
    return sorted(points, key=lambda p: p.value)


def calculate_dimensional_distribution(parts: Sequence[Part]) -> DimensionalDistribution:
    """Per-series distribution bars for width, height and length.

    Up to 20 parts get one bar per (value, series); larger sets are grouped
    into 10 equal-width bins per series, or individual bars when every value
    is equal. Bars are sorted by value and flagged with z-score outliers.
    """
    if not parts:
        return DimensionalDistribution()

    use_histogram = len(parts) > DISTRIBUTION_HISTOGRAM_THRESHOLD
    build = _binned_bars if use_histogram else _individual_bars
    outliers = detect_all_outliers(parts)

    data = {}
    for dimension in DIMENSIONS:
        flagged = {p.callout for p in outliers[dimension]}
        data[dimension] = build(parts, dimension, flagged)

    return DimensionalDistribution(
        width_data=data["width"],
        height_data=data["height"],
        length_data=data["length"],
        outliers=DimensionOutliers(
            **{dimension: [p.callout for p in flagged] for dimension, flagged in outliers.items()}
        ),
        series_names=sorted({series_label(p) for p in parts}, key=sort_key),
        use_histogram=use_histogram,
        is_empty=False,
    )
