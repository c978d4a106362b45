"""API routers for the Working-Set Analytics Service."""

from app.routers import analytics, health

__all__ = ["health", "analytics"]
