"""Tests for the crisis HTTP API."""

import pytest
from fastapi.testclient import TestClient

from crisislens.api.app import create_app
from crisislens.core.config import Settings
from crisislens.services.pipeline import build_pipeline


@pytest.fixture
def client():
    pipeline = build_pipeline(Settings(offline=True, batch_delay_seconds=0.0))
    return TestClient(create_app(pipeline=pipeline))


class TestCrisisRoutes:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_events(self, client):
        response = client.get("/api/v1/crisis/events")

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == len(body["events"])
        assert body["metadata"]["successful_sources"] == 2
        assert all(e["analysis"] is None for e in body["events"])

    def test_enrich_infers_type_and_location(self, client):
        payload = {
            "events": [
                {"id": 1, "text": "Major earthquake near Lima, Peru. Buildings collapsed."},
                {"id": "b", "text": "Flooding reported", "location": "Dhaka", "type": "flood"},
            ],
            "batch_size": 1,
        }
        response = client.post("/api/v1/crisis/enrich", json=payload)

        assert response.status_code == 200
        events = response.json()["events"]
        assert [e["id"] for e in events] == ["1", "b"]
        assert events[0]["type"] == "earthquake"
        assert events[0]["location"] == "Lima, Peru"
        assert 1 <= events[0]["analysis"]["urgency"] <= 10
        assert events[1]["location"] == "Dhaka"

    def test_enrich_rejects_bad_batch_size(self, client):
        payload = {"events": [{"id": 1, "text": "x"}], "batch_size": 0}
        response = client.post("/api/v1/crisis/enrich", json=payload)
        assert response.status_code == 422

    def test_insights(self, client):
        payload = {
            "events": [
                {
                    "id": "a",
                    "text": "Cyclone landfall",
                    "location": "X",
                    "type": "cyclone",
                    "timestamp": "2024-12-14T10:00:00Z",
                    "analysis": {"urgency": 9, "resources_needed": ["Boats"]},
                },
            ]
        }
        response = client.post("/api/v1/crisis/insights", json=payload)

        assert response.status_code == 200
        body = response.json()
        assert body["total_events"] == 1
        assert body["metrics"]["average_urgency"] == 9
        assert body["recommendations"][0] == "Immediate deployment of emergency resources to X"

    def test_insights_empty(self, client):
        response = client.post("/api/v1/crisis/insights", json={"events": []})
        assert response.json()["summary_source"] == "default"

    def test_briefing(self, client):
        response = client.get("/api/v1/crisis/briefing")

        assert response.status_code == 200
        body = response.json()
        assert body["stats"]["enriched"] == len(body["events"])
        assert body["insights"]["executive_summary"]

    def test_sources(self, client):
        client.get("/api/v1/crisis/events")
        response = client.get("/api/v1/crisis/sources")

        connectors = response.json()["connectors"]
        assert [c["name"] for c in connectors] == ["Community Reports", "Wire Services"]
        assert all(c["health"] == "healthy" for c in connectors)
