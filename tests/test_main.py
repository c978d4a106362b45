"""Tests for main application."""

from fastapi.testclient import TestClient

from app.main import app
from app.services.dispatcher import CalculationError


def test_app_starts(client):
    """App should start without errors."""
    response = client.get("/health")
    assert response.status_code == 200


def test_lifespan_terminates_analysis_worker():
    """Shutdown should stop the shared analysis worker."""
    with TestClient(app) as client:
        client.post("/api/analytics/stats", json={"parts": []})
        worker = app.state.analysis_worker
        assert worker.is_alive()

    assert worker.is_alive() is False


def test_cors_headers_present(client):
    """CORS headers should be present in preflight responses."""
    response = client.options(
        "/health",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert "access-control-allow-origin" in response.headers


def test_analytics_endpoint_returns_422_for_empty_body(client):
    """Analytics endpoints should return 422 when parts are missing."""
    response = client.post("/api/analytics/bias", json={})
    assert response.status_code == 422
    data = response.json()
    assert data["status"] == "error"
    assert data["error"]["code"] == "VALIDATION_ERROR"


def test_unknown_route_returns_404(client):
    response = client.post("/api/analytics/unknown", json={})
    assert response.status_code == 404


def test_request_validation_error_returns_422():
    """Request validation errors should return 422 with a readable message."""
    from pydantic import BaseModel

    # Create a test endpoint with request validation
    class TestInput(BaseModel):
        value: int

    @app.post("/test-validation")
    async def validate_input(data: TestInput):
        return {"value": data.value}

    client = TestClient(app, raise_server_exceptions=False)
    # Send invalid data type to trigger validation error
    response = client.post(
        "/test-validation",
        json={"value": "not an integer"},
    )
    assert response.status_code == 422
    data = response.json()
    assert data["status"] == "error"
    assert data["error"]["code"] == "VALIDATION_ERROR"
    assert "Invalid input data" in data["error"]["message"]
    assert data["error"]["details"][0]["loc"] == ["body", "value"]


def test_generic_exception_handler_returns_500():
    """Generic exceptions should return 500 without leaking details."""
    @app.get("/test-exception")
    async def raise_exception():
        raise RuntimeError("Test error")

    client = TestClient(app, raise_server_exceptions=False)
    response = client.get("/test-exception")
    assert response.status_code == 500
    data = response.json()
    assert data["status"] == "error"
    assert data["error"]["code"] == "INTERNAL_ERROR"
    assert "Internal server error" in data["error"]["message"]
    assert "Test error" not in data["error"]["message"]


def test_value_error_handler_returns_400():
    """ValueError should return 400 with the error text."""
    @app.get("/test-value-error")
    async def raise_value_error():
        raise ValueError("Unknown dimension: depth")

    client = TestClient(app, raise_server_exceptions=False)
    response = client.get("/test-value-error")
    assert response.status_code == 400
    data = response.json()
    assert data["status"] == "error"
    assert data["error"]["code"] == "VALIDATION_ERROR"
    assert data["error"]["message"] == "Invalid input data: Unknown dimension: depth"


def test_calculation_error_handler_returns_500():
    """CalculationError escaping a route should return 500 CALCULATION_ERROR."""
    @app.get("/test-calculation-error")
    async def raise_calculation_error():
        raise CalculationError("bias", "empty input")

    client = TestClient(app, raise_server_exceptions=False)
    response = client.get("/test-calculation-error")
    assert response.status_code == 500
    data = response.json()
    assert data["status"] == "error"
    assert data["error"]["code"] == "CALCULATION_ERROR"
    assert data["error"]["message"] == "Failed to calculate bias: empty input"
