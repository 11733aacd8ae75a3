"""Tests for the application factory."""

from fastapi.testclient import TestClient

from copydesk.api.main import create_app
from copydesk.core.config import Settings


def test_health_reports_settings():
    client = TestClient(create_app(Settings(app_version="9.9.9", environment="staging")))
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "version": "9.9.9",
        "environment": "staging",
        "tracker_enabled": False,
    }


def test_request_id_echoed():
    client = TestClient(create_app(Settings()))
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert "X-Process-Time" in response.headers


def test_api_routes_mounted():
    client = TestClient(create_app(Settings()))
    response = client.post("/api/v1/email-tables/parse", json={"content": ""})
    assert response.json() == {"rows": [], "is_empty": True}
