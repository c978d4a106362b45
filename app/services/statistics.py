"""Descriptive statistics across working-set parts.

Mean, median and population standard deviation for a single numeric series,
and the per-dimension aggregate used by the statistics panel.
"""

import math
from typing import Optional, Sequence

import numpy as np

from app.models.analytics import AggregateStatistics, DimensionStats
from app.models.parts import Part


def calculate_mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0 for an empty series."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def calculate_median(values: Sequence[float]) -> float:
    """Median of the series; 0 for an empty series.

    Even-length series return the average of the two middle values.
    The caller's sequence is left untouched.
    """
    if len(values) == 0:
        return 0.0
    return float(np.median(values))


def calculate_std_dev(values: Sequence[float]) -> Optional[float]:
    """Population standard deviation: σ = √(Σ(x-μ)²/n).

    Returns None for fewer than 2 values (not applicable) and exactly 0.0
    when every value is identical.
    """
    if len(values) < 2:
        return None
    array = np.asarray(values, dtype=float)
    if array.min() == array.max():
        return 0.0
    return float(np.std(array, ddof=0))


def calculate_dimension_stats(values: Sequence[float]) -> DimensionStats:
    """Calculate all statistics for one dimension.

    Empty input returns zeros with a null std_dev.
    """
    if len(values) == 0:
        return DimensionStats(count=0, min=0.0, max=0.0, mean=0.0, median=0.0, std_dev=None)

    return DimensionStats(
        count=len(values),
        min=float(min(values)),
        max=float(max(values)),
        mean=calculate_mean(values),
        median=calculate_median(values),
        std_dev=calculate_std_dev(values),
    )


def calculate_aggregate_stats(parts: Sequence[Part]) -> AggregateStatistics:
    """Calculate statistics for width, height, length and feature sizes.

    The depth-feature statistics only cover parts that define one; the field
    is None when no part does.
    """
    depth_values = [
        p.smallest_depth_feature_um for p in parts if p.smallest_depth_feature_um is not None
    ]

    return AggregateStatistics(
        width=calculate_dimension_stats([p.width_mm for p in parts]),
        height=calculate_dimension_stats([p.height_mm for p in parts]),
        length=calculate_dimension_stats([p.length_mm for p in parts]),
        smallest_lateral_feature=calculate_dimension_stats(
            [p.smallest_lateral_feature_um for p in parts]
        ),
        smallest_depth_feature=calculate_dimension_stats(depth_values) if depth_values else None,
    )


def population_spread(values: Sequence[float]) -> tuple[float, float]:
    """Population mean and standard deviation used by the z-score checks.

    Identical values give a spread of exactly 0.0.
    """
    array = np.asarray(values, dtype=float)
    mean = float(array.mean())
    if array.min() == array.max():
        return mean, 0.0
    return mean, float(math.sqrt(np.mean((array - mean) ** 2)))
