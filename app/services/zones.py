"""Inspection zone aggregation across working-set parts.

Feature sizes always resolve zone override first, part default second.
"""

from collections import Counter
from typing import Iterator, Optional, Sequence

from app.models.analytics import DepthRange, FaceAggregation, ZoneAggregation
from app.models.parts import FACE_ORDER, InspectionZone, Part
from app.services.resolvers import depth_feature_um, lateral_feature_um, series_label

__all__ = [
    "FACE_ORDER",
    "aggregate_by_face",
    "aggregate_zones",
    "count_zones_by_face",
    "count_zones_by_series_for_face",
    "find_depth_range",
    "find_smallest_depth_feature",
    "find_smallest_feature",
]


def _zones(parts: Sequence[Part], face: Optional[str] = None) -> Iterator[tuple[Part, InspectionZone]]:
    for part in parts:
        for zone in part.inspection_zones:
            if face is None or zone.face == face:
                yield part, zone


def count_zones_by_face(parts: Sequence[Part]) -> dict[str, int]:
    """Zone count per face; faces without zones are omitted."""
    return dict(Counter(zone.face for _, zone in _zones(parts)))


def find_depth_range(parts: Sequence[Part], face: Optional[str] = None) -> Optional[DepthRange]:
    """Min/max zone depth, or None when there are no zones."""
    depths = [zone.depth_mm for _, zone in _zones(parts, face)]
    if not depths:
        return None
    return DepthRange(min=min(depths), max=max(depths))


def find_smallest_feature(parts: Sequence[Part], face: Optional[str] = None) -> Optional[float]:
    """Smallest resolved lateral feature across zones, or None without zones."""
    sizes = [lateral_feature_um(zone, part) for part, zone in _zones(parts, face)]
    return min(sizes) if sizes else None


def find_smallest_depth_feature(parts: Sequence[Part], face: Optional[str] = None) -> Optional[float]:
    """Smallest resolved depth feature; None when no zone resolves one."""
    sizes = [depth_feature_um(zone, part) for part, zone in _zones(parts, face)]
    defined = [size for size in sizes if size is not None]
    return min(defined) if defined else None


def count_zones_by_series_for_face(parts: Sequence[Part], face: str) -> dict[str, int]:
    """Zone count per series, restricted to one face."""
    return dict(Counter(series_label(part) for part, _ in _zones(parts, face)))


def aggregate_by_face(parts: Sequence[Part], face: str) -> FaceAggregation:
    """Depth range, smallest features and per-series counts for one face."""
    return FaceAggregation(
        face=face,
        depth_range=find_depth_range(parts, face),
        smallest_lateral_um=find_smallest_feature(parts, face),
        smallest_depth_um=find_smallest_depth_feature(parts, face),
        zones_by_series=count_zones_by_series_for_face(parts, face),
    )


def aggregate_zones(parts: Sequence[Part]) -> Optional[ZoneAggregation]:
    """Aggregate zone characteristics of the selected parts.

    Returns None when there are no parts or none of them has a zone.
    """
    total_zones = sum(len(p.inspection_zones) for p in parts)
    if total_zones == 0:
        return None

    return ZoneAggregation(
        total_zones=total_zones,
        zones_by_face=count_zones_by_face(parts),
        depth_range=find_depth_range(parts),
        smallest_feature_um=find_smallest_feature(parts),
    )
