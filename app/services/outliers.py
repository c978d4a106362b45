"""Z-score outlier detection across parts.

A part is an outlier on a dimension when its value lies more than 2 standard
deviations (population) from the mean of that dimension.
"""

from collections.abc import Iterable, Mapping
from typing import Sequence

from app.models.analytics import DimensionOutliers, OutlierReport
from app.models.parts import Dimension, Part
from app.services.resolvers import dimension_value
from app.services.statistics import population_spread

# Minimum parts for a meaningful spread
MIN_PARTS_FOR_OUTLIERS = 3
# Outlier threshold in standard deviations
SIGMA_THRESHOLD = 2.0

DIMENSIONS: tuple[Dimension, ...] = ("width", "height", "length")


def detect_outliers(parts: Sequence[Part], dimension: Dimension) -> list[Part]:
    """Return the parts whose value is more than 2σ from the mean.

    Fewer than 3 parts, or a zero spread, yields no outliers. A value exactly
    at 2σ is not an outlier.
    """
    if len(parts) < MIN_PARTS_FOR_OUTLIERS:
        return []

    values = [dimension_value(p, dimension) for p in parts]
    mean, std_dev = population_spread(values)
    if std_dev == 0:
        return []

    threshold = SIGMA_THRESHOLD * std_dev
    return [part for part, value in zip(parts, values) if abs(value - mean) > threshold]


def is_outlier(part: Part, all_parts: Sequence[Part], dimension: Dimension) -> bool:
    """Whether the part is a z-score outlier of all_parts on the dimension."""
    return any(p.callout == part.callout for p in detect_outliers(all_parts, dimension))


def detect_all_outliers(parts: Sequence[Part]) -> dict[str, list[Part]]:
    """Run detection independently for every dimension."""
    return {dimension: detect_outliers(parts, dimension) for dimension in DIMENSIONS}


def get_outlier_part_ids(outliers: Mapping[str, Iterable[Part]]) -> set[str]:
    """Callouts of parts flagged on any dimension."""
    return {part.callout for flagged in outliers.values() for part in flagged}


def build_outlier_report(parts: Sequence[Part]) -> OutlierReport:
    """Serializable per-dimension outliers plus their de-duplicated union.

    The union keeps first-seen order across width, height, length.
    """
    outliers = detect_all_outliers(parts)
    callouts: list[str] = []
    for dimension in DIMENSIONS:
        for part in outliers[dimension]:
            if part.callout not in callouts:
                callouts.append(part.callout)

    return OutlierReport(
        by_dimension=DimensionOutliers(
            **{dimension: [p.callout for p in flagged] for dimension, flagged in outliers.items()}
        ),
        outlier_callouts=callouts,
    )
