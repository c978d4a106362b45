"""Pydantic models for the parts catalog consumed by the analytics engine.

Models for Part and InspectionZone records and the analysis request body.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

InspectionFace = Literal["Top", "Bottom", "Front", "Back", "Left", "Right"]

Dimension = Literal["width", "height", "length"]

# Whole-working-set box plots also cover the two feature sizes
AggregateDimension = Literal["width", "height", "length", "lateral", "depth"]

# Canonical display order for faces
FACE_ORDER: list[str] = ["Top", "Bottom", "Front", "Back", "Left", "Right"]


class InspectionZone(BaseModel):
    """Face-localized inspection region of a part.

    Uses the center-plane offset model: the zone spans offset_mm ± depth_mm / 2.

    Attributes:
        zone_id: Zone identifier
        name: Human-readable zone name
        face: Face of the part the zone sits on
        depth_mm: Zone thickness
        offset_mm: Distance from the part face to the zone center plane
        smallest_lateral_feature_um: Optional override of the part default
        smallest_depth_feature_um: Optional override of the part default
        required_coverage_pct: Required coverage of the zone (0-100)
        min_pixels_per_feature: Minimum pixels across the smallest feature
    """

    zone_id: str = Field(..., description="Zone identifier", json_schema_extra={"example": "Z1"})
    name: str = Field(..., description="Zone name", json_schema_extra={"example": "Top sealing face"})
    face: InspectionFace = Field(..., description="Inspected face", json_schema_extra={"example": "Top"})
    depth_mm: float = Field(..., gt=0, description="Zone depth in mm", json_schema_extra={"example": 2.0})
    offset_mm: float = Field(
        default=0.0,
        ge=0,
        description="Offset from the face to the zone center plane in mm",
        json_schema_extra={"example": 1.0},
    )
    smallest_lateral_feature_um: Optional[float] = Field(
        default=None,
        gt=0,
        description="Zone override for the smallest lateral feature (µm)",
        json_schema_extra={"example": 25.0},
    )
    smallest_depth_feature_um: Optional[float] = Field(
        default=None,
        gt=0,
        description="Zone override for the smallest depth feature (µm)",
        json_schema_extra={"example": 10.0},
    )
    required_coverage_pct: float = Field(
        default=100.0,
        ge=0,
        le=100,
        description="Required coverage in percent",
    )
    min_pixels_per_feature: int = Field(
        default=3,
        gt=0,
        description="Minimum pixels across the smallest feature",
    )


class Part(BaseModel):
    """Physical item to be inspected.

    Dimensions follow the X/Y/Z axis convention: width is X, height is Y,
    length is Z (scan direction).
    """

    callout: str = Field(..., min_length=1, description="Unique part identifier", json_schema_extra={"example": "PN-1001"})
    series: Optional[str] = Field(default=None, description="Part series", json_schema_extra={"example": "SEAX-100"})
    family: Optional[str] = Field(default=None, description="Part family", json_schema_extra={"example": "SEAX"})
    width_mm: float = Field(..., gt=0, description="Width (X axis) in mm", json_schema_extra={"example": 25.0})
    height_mm: float = Field(..., gt=0, description="Height (Y axis) in mm", json_schema_extra={"example": 10.0})
    length_mm: float = Field(..., gt=0, description="Length (Z axis) in mm", json_schema_extra={"example": 120.0})
    smallest_lateral_feature_um: float = Field(
        ...,
        gt=0,
        description="Part-level smallest lateral feature (µm)",
        json_schema_extra={"example": 50.0},
    )
    smallest_depth_feature_um: Optional[float] = Field(
        default=None,
        gt=0,
        description="Part-level smallest depth feature (µm)",
    )
    inspection_zones: list[InspectionZone] = Field(
        default_factory=list,
        description="Ordered inspection zones",
    )


class AnalysisRequest(BaseModel):
    """Request body shared by all analytics endpoints.

    Attributes:
        parts: Catalog parts (or an already-filtered selection)
        working_set: Optional callouts of the selected parts; when given, only
            those parts are analysed
    """

    parts: list[Part] = Field(..., description="Parts to analyse")
    working_set: Optional[list[str]] = Field(
        default=None,
        description="Callouts of the parts currently in the working set",
        json_schema_extra={"example": ["PN-1001", "PN-1002"]},
    )
