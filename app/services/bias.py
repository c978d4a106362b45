"""Working-set bias detection.

Three independent advisory checks: a single series dominating the selection,
too few parts for meaningful statistics, and a dimensional outlier skewing
the set (2σ rule).
"""

import math
from collections import Counter
from typing import Optional, Sequence

from app.models.analytics import (
    BiasDetails,
    BiasFinding,
    CombinedBiasResult,
    DominantSeries,
    OutlierSkewDetail,
)
from app.models.parts import Part
from app.services.outliers import DIMENSIONS, MIN_PARTS_FOR_OUTLIERS, SIGMA_THRESHOLD
from app.services.resolvers import UNKNOWN_SERIES, dimension_value, series_label
from app.services.statistics import population_spread

SERIES_DOMINANCE_THRESHOLD = 0.80
MIN_PARTS_THRESHOLD = 3


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def detect_series_dominance(parts: Sequence[Part]) -> Optional[BiasFinding]:
    """Warn when one series accounts for strictly more than 80% of the parts."""
    if not parts:
        return None

    total = len(parts)
    counts = Counter(series_label(p, default=UNKNOWN_SERIES) for p in parts)

    for series, count in counts.items():
        share = count / total
        if share > SERIES_DOMINANCE_THRESHOLD:
            percentage = _round_half_up(share * 100)
            return BiasFinding(
                kind="series-dominant",
                severity="warning",
                message=f"Series bias detected: {series} represents {percentage}% of selection",
                details=BiasDetails(
                    dominant_series=DominantSeries(
                        name=series,
                        percentage=percentage,
                        count=count,
                        total=total,
                    )
                ),
            )
    return None


def detect_too_few_parts(parts: Sequence[Part]) -> Optional[BiasFinding]:
    """Inform when only 1 or 2 parts are selected."""
    count = len(parts)
    if count == 0 or count >= MIN_PARTS_THRESHOLD:
        return None

    return BiasFinding(
        kind="too-few-parts",
        severity="info",
        message=(
            f"Small sample size: {count} part(s) selected. "
            "Consider adding more for meaningful statistics."
        ),
        details=BiasDetails(part_count=count),
    )


def detect_outlier_skew(parts: Sequence[Part]) -> Optional[BiasFinding]:
    """Report the first part lying more than 2σ from the mean.

    Dimensions are scanned Width, Height, Length; within a dimension parts are
    scanned in input order. Only the first match is reported.
    """
    if len(parts) < MIN_PARTS_FOR_OUTLIERS:
        return None

    for dimension in DIMENSIONS:
        label = dimension.capitalize()
        values = [dimension_value(p, dimension) for p in parts]
        mean, std_dev = population_spread(values)
        if std_dev == 0:
            continue

        for part, value in zip(parts, values):
            deviation = abs(value - mean)
            if deviation > SIGMA_THRESHOLD * std_dev:
                sigma = round(deviation / std_dev, 2)
                direction = "above" if value > mean else "below"
                return BiasFinding(
                    kind="outlier-skew",
                    severity="info",
                    message=(
                        f"Dimensional outlier: {part.callout} is {sigma:.1f}σ {direction} "
                        f"the mean {label.lower()} ({value:g} mm vs {mean:.2f} mm)"
                    ),
                    details=BiasDetails(
                        outlier_part=OutlierSkewDetail(
                            callout=part.callout,
                            dimension=label,
                            value=value,
                            mean=mean,
                            deviation_sigma=sigma,
                            direction=direction,
                        )
                    ),
                )
    return None


def detect_bias(parts: Sequence[Part]) -> CombinedBiasResult:
    """Run every bias check and concatenate the findings in a fixed order."""
    findings = [
        finding
        for finding in (
            detect_series_dominance(parts),
            detect_too_few_parts(parts),
            detect_outlier_skew(parts),
        )
        if finding is not None
    ]
    return CombinedBiasResult(biases=findings, has_bias=bool(findings))
