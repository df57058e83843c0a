"""
Service Tests
=============

HTTP surface of the monitoring service.
"""

import pytest
from fastapi.testclient import TestClient

from crowdwatch.main import app


@pytest.fixture
def client():
    """Provide a TestClient with the app lifespan running."""
    with TestClient(app) as test_client:
        yield test_client
        test_client.delete("/location")


class TestEndpoints:
    """Tests for HTTP endpoints."""
    
    def test_root_and_health(self, client):
        assert client.get("/").json()["service"] == "CrowdWatch"
        assert client.get("/health").json()["status"] == "healthy"
    
    def test_snapshot_unavailable_without_location(self, client):
        assert client.get("/snapshot").status_code == 503
    
    def test_set_location(self, client):
        response = client.post("/location", json={"lat": 12.9716, "lng": 77.5946})
        assert response.status_code == 200
        assert response.json()["label"] == "12.9716, 77.5946"
    
    def test_invalid_location(self, client):
        assert client.post("/location", json={"lat": 100.0, "lng": 0.0}).status_code == 422
    
    def test_radius(self, client):
        assert client.post("/radius", json={"radius": 100}).json() == {"radius": 100}
        assert client.post("/radius", json={"radius": 75}).status_code == 400
    
    def test_alert_cooldown(self, client):
        first = client.post("/alert").json()
        second = client.post("/alert").json()
        assert first["accepted"] is True
        assert second["accepted"] is False
        assert 0 < second["remaining_seconds"] <= 30
    
    def test_metrics(self, client):
        body = client.get("/metrics").json()
        assert "ticks" in body
        assert body["radius"] in (25, 50, 100)
