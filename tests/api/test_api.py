"""Tests for soc_wall/api/main.py: FastAPI surface over the engine."""

import json

import pytest
from fastapi.testclient import TestClient

from soc_wall.api.main import app


@pytest.fixture
def client():
    return TestClient(app)


def chat_element(verdict: dict) -> dict:
    return {"choices": [{"message": {"content": "```json\n" + json.dumps(verdict) + "\n```"}}]}


BATCH = {
    "data": [
        chat_element({
            "flag": "HIGH",
            "confidence": "high",
            "comments": "source IP 10.0.0.5 anomaly score (82/100)",
            "mitre_tactics": ["Discovery"],
        }),
        chat_element({"flag": "INFO", "comments": "heartbeat"}),
        {"choices": [{"message": {"content": "not json"}}]},
        {"output": {"flag": "MEDIUM", "confidence": "low", "comments": "DNS burst from source IP 10.0.0.8"}},
    ]
}


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["service"] == "SOC Wall"


class TestAggregateEndpoint:
    def test_aggregates_batch(self, client):
        resp = client.post("/api/v1/aggregate", json=BATCH)
        assert resp.status_code == 200
        body = resp.json()
        assert body["records_parsed"] == 3
        assert body["records_dropped"] == 1
        view = body["view"]
        assert view["metrics"]["high"] == 1
        assert view["metrics"]["threats_detected"] == 2
        assert view["kill_chain"][0]["name"] == "Recon"
        assert view["top_sources"][0] == {
            "value": "10.0.0.5",
            "count": 1,
            "severity_score": 3,
            "severity": "MEDIUM",
        }
        assert [e["score"] for e in view["anomaly_spotlight"]] == [82, 0]

    def test_bare_list_body(self, client):
        resp = client.post("/api/v1/aggregate", json=[{"flag": "LOW"}])
        assert resp.status_code == 200
        assert resp.json()["view"]["metrics"]["low"] == 1

    def test_empty_batch(self, client):
        resp = client.post("/api/v1/aggregate", json={"results": []})
        assert resp.status_code == 200
        view = resp.json()["view"]
        assert view["metrics"]["compliance_score"] == 100
        assert view["flow_graph"] == {"nodes": [], "links": []}

    def test_malformed_batch_is_422(self, client):
        resp = client.post("/api/v1/aggregate", json={"message": "Workflow was started"})
        assert resp.status_code == 422
        assert "data" in resp.json()["detail"]


class TestDetectionsEndpoint:
    def test_excludes_info_and_paginates(self, client):
        resp = client.post("/api/v1/detections", json={"payload": BATCH})
        assert resp.status_code == 200
        body = resp.json()
        assert body["total"] == 2
        assert body["page_size"] == 10
        assert [item["severity"] for item in body["items"]] == ["HIGH", "MEDIUM"]

    def test_filters(self, client):
        resp = client.post(
            "/api/v1/detections",
            json={"payload": BATCH, "search": "dns", "severity": "ALL", "confidence": "low"},
        )
        body = resp.json()
        assert body["total"] == 1
        assert body["items"][0]["severity"] == "MEDIUM"

    def test_detail_view_context_returned(self, client):
        element = {
            "output": {
                "flag": "HIGH",
                "comments": "Beacon to known C2",
                "consensus_reasoning": "interval matches known family",
            },
            "sourceIP": "10.0.0.5",
            "geo": {"city": "Berlin"},
        }
        resp = client.post("/api/v1/detections", json={"payload": [element]})
        assert resp.status_code == 200
        [item] = resp.json()["items"]
        assert item["source_ip"] == "10.0.0.5"
        assert item["context"]["geo"]["city"] == "Berlin"
        assert item["context"]["consensus_reasoning"] == "interval matches known family"

    def test_invalid_filter_is_422(self, client):
        resp = client.post("/api/v1/detections", json={"payload": BATCH, "severity": "SEVERE"})
        assert resp.status_code == 422

    def test_malformed_payload_is_422(self, client):
        resp = client.post("/api/v1/detections", json={"payload": "oops"})
        assert resp.status_code == 422
