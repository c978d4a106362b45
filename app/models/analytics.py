"""Pydantic models for working-set analytics results.

All results are immutable value objects built fresh on every calculation.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Result(BaseModel):
    model_config = ConfigDict(frozen=True)


# -----------------------------------------------------------------------------
# Dimension Statistics
# -----------------------------------------------------------------------------


class DimensionStats(_Result):
    """Descriptive statistics for one numeric series.

    Attributes:
        count: Number of values
        min: Smallest value (0 when empty)
        max: Largest value (0 when empty)
        mean: Arithmetic mean (0 when empty)
        median: Median (0 when empty)
        std_dev: Population standard deviation, None when count < 2
    """

    count: int = Field(..., ge=0, description="Number of values")
    min: float = Field(..., description="Minimum value")
    max: float = Field(..., description="Maximum value")
    mean: float = Field(..., description="Arithmetic mean")
    median: float = Field(..., description="Median")
    std_dev: Optional[float] = Field(
        default=None,
        ge=0,
        description="Population standard deviation (null when fewer than 2 values)",
    )


class AggregateStatistics(_Result):
    """Statistics for every part dimension of a working set."""

    width: DimensionStats
    height: DimensionStats
    length: DimensionStats
    smallest_lateral_feature: DimensionStats
    smallest_depth_feature: Optional[DimensionStats] = Field(
        default=None,
        description="Only computed over parts that define a depth feature (null if none do)",
    )


# -----------------------------------------------------------------------------
# Box Plot Models
# -----------------------------------------------------------------------------


class ValuePoint(_Result):
    """Single observation with the identity of the part it came from."""

    value: float
    part_id: str
    part_callout: str


class OutlierPoint(_Result):
    """Observation outside the 1.5×IQR fences."""

    value: float
    part_id: str
    part_callout: str


class BoxPlotStats(_Result):
    """Box plot statistics with Tukey whiskers and IQR outliers.

    Attributes:
        min: Minimum observed value
        q1: First quartile (linear-interpolation percentile)
        median: Second quartile
        q3: Third quartile
        max: Maximum observed value
        iqr: q3 - q1
        whisker_low: Lowest observed value at or above q1 - 1.5×IQR
        whisker_high: Highest observed value at or below q3 + 1.5×IQR
        outliers: Observations outside the fences, ascending by value
        n: Number of observations
        mean: Arithmetic mean of all observations
    """

    min: float = 0.0
    q1: float = 0.0
    median: float = 0.0
    q3: float = 0.0
    max: float = 0.0
    iqr: float = 0.0
    whisker_low: float = 0.0
    whisker_high: float = 0.0
    outliers: list[OutlierPoint] = Field(default_factory=list)
    n: int = 0
    mean: float = 0.0


class BoxPlotSeriesStats(BoxPlotStats):
    """Box plot statistics for one series."""

    series_name: str


class BoxPlotFamilyStats(BoxPlotStats):
    """Box plot statistics for one family."""

    family_name: str
    series_count: int = Field(..., ge=0, description="Distinct series in this family")


class AggregateBoxPlot(_Result):
    """Single box plot over the whole working set for one dimension.

    Attributes:
        dimension: Dimension or feature the values were taken from
        group_name: Display label of the single group
        values: Observations that entered the calculation, in input order
        stats: Box plot statistics of those observations
    """

    dimension: str
    group_name: str = "Working Set"
    values: list[ValuePoint] = Field(default_factory=list)
    stats: BoxPlotStats


# -----------------------------------------------------------------------------
# Z-score Outliers
# -----------------------------------------------------------------------------


class DimensionOutliers(_Result):
    """Z-score outliers of each dimension, as part callouts in input order."""

    width: list[str] = Field(default_factory=list)
    height: list[str] = Field(default_factory=list)
    length: list[str] = Field(default_factory=list)


class OutlierReport(_Result):
    """Per-dimension z-score outliers plus the de-duplicated union."""

    by_dimension: DimensionOutliers
    outlier_callouts: list[str] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Bias Models
# -----------------------------------------------------------------------------

BiasKind = Literal["series-dominant", "too-few-parts", "outlier-skew"]


class DominantSeries(_Result):
    name: str
    percentage: int
    count: int
    total: int


class OutlierSkewDetail(_Result):
    callout: str
    dimension: Literal["Width", "Height", "Length"]
    value: float
    mean: float
    deviation_sigma: float = Field(..., description="|value - mean| in units of σ")
    direction: Literal["above", "below"]


class BiasDetails(_Result):
    dominant_series: Optional[DominantSeries] = None
    part_count: Optional[int] = None
    outlier_part: Optional[OutlierSkewDetail] = None


class BiasFinding(_Result):
    """Single advisory finding about an unrepresentative working set."""

    kind: BiasKind
    severity: Literal["info", "warning"]
    message: str
    details: BiasDetails


class CombinedBiasResult(_Result):
    biases: list[BiasFinding] = Field(default_factory=list)
    has_bias: bool = False


# -----------------------------------------------------------------------------
# Zone Aggregation Models
# -----------------------------------------------------------------------------


class DepthRange(_Result):
    min: float
    max: float


class ZoneAggregation(_Result):
    """Inspection zone characteristics across all selected parts.

    Attributes:
        total_zones: Number of zones across all parts
        zones_by_face: Zone count per face, only faces with zones present
        depth_range: Min/max zone depth in mm
        smallest_feature_um: Smallest resolved lateral feature across all zones
    """

    total_zones: int
    zones_by_face: dict[str, int]
    depth_range: DepthRange
    smallest_feature_um: float


class FaceAggregation(_Result):
    """Zone metrics restricted to a single face."""

    face: str
    depth_range: Optional[DepthRange] = None
    smallest_lateral_um: Optional[float] = None
    smallest_depth_um: Optional[float] = None
    zones_by_series: dict[str, int] = Field(default_factory=dict)


# -----------------------------------------------------------------------------
# Envelope Models
# -----------------------------------------------------------------------------


class EnvelopeDriver(_Result):
    """Part responsible for an envelope axis maximum."""

    part_id: str
    part_callout: str
    value: float


class EnvelopeDrivers(_Result):
    max_width: EnvelopeDriver
    max_height: EnvelopeDriver
    max_length: EnvelopeDriver


class EnvelopeResult(_Result):
    """Worst-case bounding dimensions with the driving part per axis."""

    width_mm: float
    height_mm: float
    length_mm: float
    drivers: EnvelopeDrivers


# -----------------------------------------------------------------------------
# Histogram and Summary Models
# -----------------------------------------------------------------------------


class HistogramValue(_Result):
    value: float
    part_callout: str
    is_outlier: bool = False


class HistogramBin(_Result):
    bin_start: float
    bin_end: float
    bin_center: float
    count: int
    part_callouts: list[str]
    has_outliers: bool
    bin_label: str


class HistogramDimensionData(_Result):
    dimension: str
    bins: list[HistogramBin] = Field(default_factory=list)
    min_value: float = 0.0
    max_value: float = 0.0
    part_count: int = 0


class StatsEnvelopeSummary(_Result):
    """Aggregate statistics and envelope of the same working set."""

    stats: AggregateStatistics
    envelope: Optional[EnvelopeResult] = None
    is_empty: bool


# -----------------------------------------------------------------------------
# Dimensional Distribution Models
# -----------------------------------------------------------------------------


class DistributionPoint(_Result):
    """One bar of the dimensional distribution chart.

    Attributes:
        value: Dimension value (individual bars) or bin center (histogram mode)
        count: Number of parts represented by the bar
        series: Series of those parts
        part_callouts: Callouts of those parts
        is_outlier: True when any of those parts is a z-score outlier
    """

    value: float
    count: int
    series: str
    part_callouts: list[str]
    is_outlier: bool = False


class DimensionalDistribution(_Result):
    """Per-series distribution bars for width, height and length."""

    width_data: list[DistributionPoint] = Field(default_factory=list)
    height_data: list[DistributionPoint] = Field(default_factory=list)
    length_data: list[DistributionPoint] = Field(default_factory=list)
    outliers: DimensionOutliers = Field(default_factory=DimensionOutliers)
    series_names: list[str] = Field(default_factory=list)
    use_histogram: bool = False
    is_empty: bool = True
