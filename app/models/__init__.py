"""Pydantic models for request/response schemas.

Models:
- parts.py - Part and InspectionZone catalog records, analysis request
- analytics.py - Analytics results (statistics, box plots, bias, zones, envelope)
- worker.py - Background worker message protocol
"""

from app.models.analytics import AggregateStatistics, BoxPlotStats, EnvelopeResult
from app.models.parts import AnalysisRequest, InspectionZone, Part

__all__ = [
    "AggregateStatistics",
    "AnalysisRequest",
    "BoxPlotStats",
    "EnvelopeResult",
    "InspectionZone",
    "Part",
]
