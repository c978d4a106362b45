"""Box plot statistics with IQR-based (Tukey) outlier detection.

Quartiles use the linear-interpolation percentile (R-7, same as Excel
PERCENTILE.INC and numpy's default "linear" method). Whiskers extend to the
most extreme observed values still inside the 1.5×IQR fences; everything
beyond the fences is an outlier.
"""

from collections import defaultdict
from typing import Optional, Sequence

import numpy as np

from app.models.analytics import (
    AggregateBoxPlot,
    BoxPlotFamilyStats,
    BoxPlotSeriesStats,
    BoxPlotStats,
    OutlierPoint,
    ValuePoint,
)
from app.models.parts import AggregateDimension, Dimension, Part
from app.services.resolvers import (
    UNKNOWN_SERIES,
    aggregate_dimension_value,
    dimension_value,
    family_label,
    series_label,
    sort_key,
)
from app.services.statistics import calculate_mean

# Tukey's fence multiplier
IQR_MULTIPLIER = 1.5


def to_value_points(parts: Sequence[Part], dimension: Dimension) -> list[ValuePoint]:
    """Extract one dimension from each part, keeping the part identity."""
    return [
        ValuePoint(
            value=dimension_value(part, dimension),
            part_id=part.callout,
            part_callout=part.callout,
        )
        for part in parts
    ]


def calculate_box_plot_stats(values: Sequence[ValuePoint]) -> BoxPlotStats:
    """Calculate box plot statistics for observations with part identity.

    Edge cases:
    - Empty input: all zeros, no outliers
    - Single value: every quartile equals that value
    - All identical values: IQR is 0 and nothing is flagged

    Args:
        values: Observations; not modified

    Returns:
        BoxPlotStats including outliers in ascending value order
    """
    n = len(values)
    if n == 0:
        return BoxPlotStats()

    ordered = sorted(values, key=lambda point: point.value)
    sorted_values = [point.value for point in ordered]

    q1, median, q3 = (
        float(q) for q in np.percentile(sorted_values, [25, 50, 75], method="linear")
    )
    iqr = q3 - q1

    lower_fence = q1 - IQR_MULTIPLIER * iqr
    upper_fence = q3 + IQR_MULTIPLIER * iqr

    # Quartiles always lie within the fences, so both scans find a value
    whisker_low = next(v for v in sorted_values if v >= lower_fence)
    whisker_high = next(v for v in reversed(sorted_values) if v <= upper_fence)

    outliers = [
        OutlierPoint(value=point.value, part_id=point.part_id, part_callout=point.part_callout)
        for point in ordered
        if point.value < lower_fence or point.value > upper_fence
    ]

    return BoxPlotStats(
        min=sorted_values[0],
        q1=q1,
        median=median,
        q3=q3,
        max=sorted_values[-1],
        iqr=iqr,
        whisker_low=whisker_low,
        whisker_high=whisker_high,
        outliers=outliers,
        n=n,
        mean=calculate_mean(sorted_values),
    )


def calculate_series_box_plot_stats(
    parts: Sequence[Part], dimension: Dimension
) -> BoxPlotSeriesStats:
    """Box plot statistics for parts that all belong to one series.

    The series label is taken from the first part.
    """
    if not parts:
        return BoxPlotSeriesStats(series_name=UNKNOWN_SERIES)

    stats = calculate_box_plot_stats(to_value_points(parts, dimension))
    return BoxPlotSeriesStats(series_name=series_label(parts[0]), **stats.model_dump())


def calculate_all_series_box_plot_stats(
    parts: Sequence[Part], dimension: Dimension
) -> list[BoxPlotSeriesStats]:
    """Box plot statistics per series, sorted by series name."""
    groups: dict[str, list[Part]] = defaultdict(list)
    for part in parts:
        groups[series_label(part)].append(part)

    results = []
    for name, group in groups.items():
        stats = calculate_box_plot_stats(to_value_points(group, dimension))
        results.append(BoxPlotSeriesStats(series_name=name, **stats.model_dump()))

    return sorted(results, key=lambda s: sort_key(s.series_name))


def calculate_all_family_box_plot_stats(
    parts: Sequence[Part], dimension: Dimension
) -> list[BoxPlotFamilyStats]:
    """Box plot statistics per family with the number of distinct series.

    Parts without a family are grouped under "Unassigned".
    """
    groups: dict[str, list[Part]] = defaultdict(list)
    for part in parts:
        groups[family_label(part)].append(part)

    results = []
    for name, group in groups.items():
        series_names = {series_label(part) for part in group}
        stats = calculate_box_plot_stats(to_value_points(group, dimension))
        results.append(
            BoxPlotFamilyStats(
                family_name=name,
                series_count=len(series_names),
                **stats.model_dump(),
            )
        )

    return sorted(results, key=lambda s: sort_key(s.family_name))


def calculate_aggregate_box_plot(
    parts: Sequence[Part], dimension: AggregateDimension
) -> Optional[AggregateBoxPlot]:
    """One box plot across every part of the working set.

    Parts lacking the value (only possible for "depth") are skipped. Returns
    None for no parts, and for "depth" when no part defines a depth feature.
    """
    if not parts:
        return None

    points = []
    for part in parts:
        value = aggregate_dimension_value(part, dimension)
        if value is None:
            continue
        points.append(ValuePoint(value=value, part_id=part.callout, part_callout=part.callout))

    if not points:
        return None

    return AggregateBoxPlot(
        dimension=dimension,
        values=points,
        stats=calculate_box_plot_stats(points),
    )
