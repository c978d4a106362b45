"""Shared fixtures for the analytics test suite."""

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.parts import InspectionZone, Part


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def make_part():
    """Factory for parts with sensible defaults; keyword arguments override fields."""

    def _make_part(callout: str = "TEST-001", **overrides) -> Part:
        fields = {
            "callout": callout,
            "series": "TestSeries",
            "width_mm": 100.0,
            "height_mm": 50.0,
            "length_mm": 200.0,
            "smallest_lateral_feature_um": 10.0,
            "inspection_zones": [],
        }
        fields.update(overrides)
        return Part(**fields)

    return _make_part


@pytest.fixture
def make_zone():
    """Factory for inspection zones; keyword arguments override fields."""

    def _make_zone(zone_id: str = "Z1", face: str = "Top", **overrides) -> InspectionZone:
        fields = {
            "zone_id": zone_id,
            "name": f"{face} zone",
            "face": face,
            "depth_mm": 2.0,
            "offset_mm": 1.0,
        }
        fields.update(overrides)
        return InspectionZone(**fields)

    return _make_zone


def part_payload(callout: str, **overrides) -> dict:
    """JSON body for one part, as sent to the API."""
    payload = {
        "callout": callout,
        "series": "TestSeries",
        "width_mm": 100.0,
        "height_mm": 50.0,
        "length_mm": 200.0,
        "smallest_lateral_feature_um": 10.0,
        "inspection_zones": [],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_part_payload():
    return part_payload
