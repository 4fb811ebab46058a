"""
tests/test_api.py — HTTP Surface
==================================
Flask test client against every public route.

Tests:
  - Health endpoints return JSON
  - Values, scan and journey endpoints return valid envelopes
  - Bad bodies are 400, unknown operations 404, unknown transitions 409
  - Batch endpoint aggregates
"""

import os
import sys
import uuid

import pytest

os.environ["TRACE_ENABLED"] = "0"
os.environ["HISTORY_BACKEND"] = "memory"
os.environ.pop("SENTRY_DSN", None)

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


STRONG = {
    "creator_sovereignty": 0.9,
    "anti_oppression_validation": True,
    "black_queer_empowerment": 0.9,
    "community_protection": 0.9,
    "cultural_authenticity": 0.9,
}


# ═══════════════════════════════════════════
# HEALTH
# ═══════════════════════════════════════════

def test_health_json(client):
    r = client.get("/health")
    assert r.status_code == 200
    data = r.get_json()
    assert data["status"] == "ok"
    assert "version" in data


def test_detailed_health_memory_backend(client):
    r = client.get("/health/detailed")
    assert r.status_code == 200
    data = r.get_json()
    assert data["status"] == "ok"
    assert data["checks"]["history_backend"]["backend"] == "memory"


def test_policy_published(client):
    data = client.get("/api/v1/policy").get_json()
    assert data["policy"]["min_creator_sovereignty"] == 0.75
    assert set(data["policy"]["weights"]) == {"default", "content"}


# ═══════════════════════════════════════════
# VALUES + SCAN
# ═══════════════════════════════════════════

def test_validate_values(client):
    r = client.post("/api/v1/values/validate", json={"values": STRONG})
    assert r.status_code == 200
    data = r.get_json()
    assert data["validation"]["is_valid"] is True
    assert data["profile"] == "default"


def test_validate_values_content_profile_critical_only(client):
    values = dict(STRONG, cultural_authenticity=0.1)
    r = client.post("/api/v1/values/validate", json={
        "values": values, "mode": "critical_only", "profile": "content",
    })
    data = r.get_json()
    assert data["profile"] == "content"
    assert data["validation"]["mode"] == "critical_only"
    assert data["validation"]["is_valid"] is True
    assert len(data["validation"]["violations"]) == 1


@pytest.mark.parametrize("route", [
    "/api/v1/values/validate",
    "/api/v1/content/scan",
    "/api/v1/journey/detect",
    "/api/v1/journey/observe",
    "/api/v1/journey/readiness",
    "/api/v1/operations/batch",
    "/api/v1/operations/creator_sovereignty",
])
def test_bad_body_is_400(client, route):
    """Non-object bodies are rejected before any engine call."""
    r = client.post(route, data="not json", content_type="text/plain")
    assert r.status_code == 400
    assert "error" in r.get_json()


def test_scan(client):
    r = client.post("/api/v1/content/scan", json={"text": "Stop playing the race card"})
    assert r.status_code == 200
    scan = r.get_json()["scan"]
    assert scan["clean"] is False
    assert scan["categories"] == ["racism"]


def test_scan_rejects_non_string(client):
    r = client.post("/api/v1/content/scan", json={"text": 42})
    assert r.status_code == 400


def test_scan_rejects_huge_text(client):
    r = client.post("/api/v1/content/scan", json={"text": "a" * 50001})
    assert r.status_code == 400


# ═══════════════════════════════════════════
# JOURNEY
# ═══════════════════════════════════════════

def test_detect(client):
    r = client.post("/api/v1/journey/detect", json={
        "text": "I'm in recovery and thinking about my career",
        "history": ["growth"],
    })
    data = r.get_json()
    assert r.status_code == 200
    assert data["context"]["stage"] == "growth"
    assert data["explanation"]["continuity_stage"] == "growth"


def test_detect_emergency_flag(client):
    r = client.post("/api/v1/journey/detect", json={"text": "", "emergency": True})
    ctx = r.get_json()["context"]
    assert ctx["stage"] == "crisis"
    assert ctx["urgency_level"] == "emergency"
    assert ctx["resource_access_preference"] == "phone"


def test_observe_requires_user(client):
    r = client.post("/api/v1/journey/observe", json={"text": "hello"})
    assert r.status_code == 400


def test_observe_accumulates_history(client):
    user = f"test-{uuid.uuid4()}"
    client.post("/api/v1/journey/observe", json={"user_id": user, "text": "I was evicted"})
    r = client.post("/api/v1/journey/observe", json={
        "user_id": user, "text": "I have a therapist and a routine now",
    })
    data = r.get_json()
    assert data["status"] == "ok"
    assert data["history"] == ["crisis", "stabilization"]
    assert data["context"]["returning_user"] is True


def test_readiness_allowed(client):
    r = client.post("/api/v1/journey/readiness", json={
        "user_id": "u1",
        "current_stage": "stabilization",
        "target_stage": "growth",
        "values": STRONG,
        "completed_requirements": ["skill_development", "peer_connection", "resource_stability"],
    })
    assert r.status_code == 200
    data = r.get_json()
    assert data["success"] is True
    assert data["data"]["readiness"]["gates"]["community_validated"] is True


def test_readiness_unknown_transition_is_409(client):
    r = client.post("/api/v1/journey/readiness", json={
        "current_stage": "crisis", "target_stage": "growth", "values": STRONG,
    })
    assert r.status_code == 409
    data = r.get_json()
    assert data["from_stage"] == "crisis"
    assert data["to_stage"] == "growth"
    assert "No liberation journey progression rule found" in data["error"]


def test_readiness_scalar_requirements_not_500(client):
    r = client.post("/api/v1/journey/readiness", json={
        "current_stage": "stabilization", "target_stage": "growth",
        "values": STRONG, "completed_requirements": 5,
    })
    assert r.status_code == 200
    data = r.get_json()
    assert data["success"] is False
    assert data["data"]["readiness"]["missing_requirements"] == [
        "skill_development", "peer_connection", "resource_stability",
    ]


def test_observe_writes_to_app_store(client):
    """The store is built at startup and shared by every request."""
    store = app.extensions["liberation_history"]
    user = f"test-{uuid.uuid4()}"
    client.post("/api/v1/journey/observe", json={"user_id": user, "text": "I was evicted"})
    assert [s.value for s in store.get(user)] == ["crisis"]


# ═══════════════════════════════════════════
# OPERATIONS
# ═══════════════════════════════════════════

def test_operation_envelope(client):
    r = client.post("/api/v1/operations/creator_sovereignty", json={
        "total_revenue": 1000, "creator_id": "c1", "values": STRONG,
    })
    assert r.status_code == 200
    data = r.get_json()
    assert data["operation"] == "creator_sovereignty"
    assert data["success"] is True
    assert data["sovereignty_compliance"] is True
    assert "latency_ms" in data["meta"]


def test_unknown_operation_is_404(client):
    r = client.post("/api/v1/operations/launch_rocket", json={})
    assert r.status_code == 404
    assert "creator_sovereignty" in r.get_json()["hint"]


@pytest.mark.parametrize("name,payload", [
    ("democratic_participation", {"community_context": {"accessibility_needs": 3}, "values": STRONG}),
    ("community_consent", {"text": "community healing", "potential_impacts": 7}),
    ("community_interaction", {"community_id": ["x"], "context": {"stage": "growth"}, "values": STRONG}),
])
def test_scalar_list_fields_not_500(client, name, payload):
    r = client.post(f"/api/v1/operations/{name}", json=payload)
    assert r.status_code == 200
    assert r.get_json()["operation"] == name


def test_batch(client):
    r = client.post("/api/v1/operations/batch", json={"requests": [
        {"operation": "economic_empowerment", "payload": {"total_earnings": 5000, "values": STRONG}},
        {"operation": "content_validation", "payload": {"text": "That idea is so lame"}},
    ]})
    assert r.status_code == 200
    data = r.get_json()
    assert data["total"] == 2
    assert data["succeeded"] == 1
    assert len(data["results"]) == 2
    assert data["systemic_recommendations"][-1] == "Continue monitoring liberation metrics and community impact"


@pytest.mark.parametrize("body,status", [
    ({"requests": []}, 400),
    ({"requests": "nope"}, 400),
    ({"requests": [{"operation": "x", "payload": {}}] * 101}, 400),
    ({"requests": [{"operation": "nope", "payload": {}}]}, 404),
    ({"requests": [{"operation": 5, "payload": {}}]}, 404),
    ({"requests": [{"operation": None}]}, 404),
    ({"requests": [{"operation": "journey_progression",
                    "payload": {"current_stage": "growth", "target_stage": "crisis"}}]}, 409),
])
def test_batch_errors(client, body, status):
    assert client.post("/api/v1/operations/batch", json=body).status_code == status
