"""Default-value resolution for optional Part and InspectionZone fields.

Every calculation that groups by series/family or aggregates feature sizes
goes through these helpers so defaults stay identical across components.
"""

from typing import Optional

from app.models.parts import AggregateDimension, Dimension, InspectionZone, Part

# Group label for parts without a series (box plots, zone counts)
UNCATEGORIZED_SERIES = "Uncategorized"
# Group label for parts without a series in bias findings
UNKNOWN_SERIES = "Unknown"
# Group label for parts without a family
UNASSIGNED_FAMILY = "Unassigned"


def series_label(part: Part, default: str = UNCATEGORIZED_SERIES) -> str:
    """Return the part's series, or the default label when absent or blank."""
    return part.series or default


def family_label(part: Part, default: str = UNASSIGNED_FAMILY) -> str:
    """Return the part's family, or the default label when absent or blank."""
    return part.family or default


def lateral_feature_um(zone: InspectionZone, part: Part) -> float:
    """Effective smallest lateral feature: zone override, else part default."""
    if zone.smallest_lateral_feature_um is not None:
        return zone.smallest_lateral_feature_um
    return part.smallest_lateral_feature_um


def depth_feature_um(zone: InspectionZone, part: Part) -> Optional[float]:
    """Effective smallest depth feature; None when neither zone nor part defines one."""
    if zone.smallest_depth_feature_um is not None:
        return zone.smallest_depth_feature_um
    return part.smallest_depth_feature_um


def dimension_value(part: Part, dimension: Dimension) -> float:
    """Value of a part along the given axis."""
    if dimension == "width":
        return part.width_mm
    if dimension == "height":
        return part.height_mm
    if dimension == "length":
        return part.length_mm
    raise ValueError(f"Unknown dimension: {dimension}")


def aggregate_dimension_value(part: Part, dimension: AggregateDimension) -> Optional[float]:
    """Value of a part along an axis or feature size; None when the part lacks it."""
    if dimension == "lateral":
        return part.smallest_lateral_feature_um
    if dimension == "depth":
        return part.smallest_depth_feature_um
    return dimension_value(part, dimension)


def sort_key(label: str) -> tuple[str, str]:
    """Case-insensitive alphabetical ordering for group labels."""
    return (label.casefold(), label)
