"""
Tests for API endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from auragold.api.middleware import limiter
from auragold.main import app
from auragold.services.audit_log import audit_log
from auragold.services.session_guard import session_guard


@pytest.fixture
def client():
    """Create test client with a signed-out session and empty audit trail."""
    limiter.reset()
    session_guard.logout()
    audit_log.clear()
    with TestClient(app) as test_client:
        yield test_client
    session_guard.logout()


def login(client, passcode="2026"):
    return client.post("/session/login", json={"passcode": passcode})


class TestHealthEndpoint:
    """Test health check endpoint."""

    def test_health_returns_200(self, client):
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_response_structure(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert "version" in data
        assert "timestamp" in data


class TestTransparencyEndpoint:
    """Test transparency record endpoint."""

    def test_minimal_request(self, client):
        response = client.post(
            "/transparency",
            json={"treatment_name": "Botox Cosmetic", "clinical_reason": "Forehead lines"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["clinical_criteria"] == "Forehead lines"
        assert data["guidelines_reference"] == "2025 Neurotoxin Administration Guidelines"
        assert data["data_source"].endswith("| AI Facial Analysis")
        assert data["safety_interlocks"][0] == {
            "type": "cleared",
            "label": "Standard safety protocols apply",
            "detected": True,
        }
        assert len(data["safety_interlocks"]) == 4

    def test_blocked_request(self, client):
        response = client.post(
            "/transparency",
            json={
                "treatment_name": "Unknown Treatment",
                "clinical_reason": "Texture",
                "safety_status": {
                    "is_blocked": True,
                    "blocked_reasons": ["Pregnancy - Absolute contraindication"],
                    "has_cautions": True,
                    "caution_reasons": ["Recent tan"]
                },
                "patient_conditions": ["pregnancy"],
                "skin_iq_data": {
                    "texture": "Rough", "pores": "Visible",
                    "pigment": "Uneven", "redness": "Mild"
                }
            }
        )
        assert response.status_code == 200
        data = response.json()
        assert data["guidelines_reference"] == "2025 Aesthetic Treatment Guidelines"
        assert [i["type"] for i in data["safety_interlocks"]] == [
            "blocked", "warning", "cleared", "cleared"
        ]
        assert "Skin IQ Analysis (Texture: Rough" in data["data_source"]

    def test_inconsistent_safety_status_rejected(self, client):
        response = client.post(
            "/transparency",
            json={
                "treatment_name": "IPL",
                "clinical_reason": "Sun spots",
                "safety_status": {"is_blocked": True, "blocked_reasons": []}
            }
        )
        assert response.status_code == 422

    def test_missing_fields_rejected(self, client):
        response = client.post("/transparency", json={})
        assert response.status_code == 422


class TestSafetyCheckEndpoint:
    """Test contraindication screening endpoint."""

    def test_screening(self, client):
        response = client.post(
            "/safety-check",
            json={"treatment_name": "Morpheus8", "patient_conditions": ["pacemaker"]}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["is_blocked"] is True
        assert data["blocked_reasons"] == ["Pacemaker or internal defibrillator"]
        assert data["treatment"] == "Morpheus8"

    def test_pregnancy_blocks_botox(self, client):
        response = client.post(
            "/safety-check",
            json={"treatment_name": "Botox", "patient_conditions": ["pregnancy"]}
        )
        assert response.json()["is_blocked"] is True


class TestSchedulingEndpoints:
    """Test interaction, post-care and catalogue endpoints."""

    def test_interaction_conflict(self, client):
        response = client.post(
            "/interactions",
            json={"selected_treatment": "Sculptra", "existing_treatments": ["Dermal Fillers"]}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["has_conflict"] is True
        assert data["wait_period_days"] == 28

    def test_interaction_clear(self, client):
        response = client.post(
            "/interactions",
            json={"selected_treatment": "HydraFacial", "existing_treatments": ["Botox"]}
        )
        assert response.json() == {
            "has_conflict": False,
            "conflicting_treatment": None,
            "wait_period_days": None,
            "conflict_message": None,
        }

    def test_post_care(self, client):
        response = client.get("/post-care", params={"treatment": "Chemical Peel"})
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["recommend_treatment"] == "Red Light Therapy"

    def test_post_care_requires_treatment(self, client):
        assert client.get("/post-care").status_code == 422

    def test_conditions_catalogue(self, client):
        data = client.get("/conditions").json()
        assert len(data) == 86
        assert data[0] == {
            "id": "pacemaker",
            "label": "Pacemaker or internal defibrillator",
            "category": "medical",
            "severity": "absolute",
        }


class TestSessionEndpoints:
    """Test staff session lifecycle."""

    def test_status_signed_out(self, client):
        data = client.get("/session/status").json()
        assert data["is_authenticated"] is False
        assert data["show_warning"] is False

    def test_login_success(self, client):
        response = login(client)
        assert response.status_code == 200
        data = response.json()
        assert data["authenticated"] is True
        assert data["session"]["phase"] == "active"
        assert data["session"]["remaining_seconds"] == 900
        assert data["session"]["remaining_display"] == "15:00"

    def test_login_failure_is_not_an_error(self, client):
        response = login(client, "0000")
        assert response.status_code == 200
        data = response.json()
        assert data["authenticated"] is False
        assert data["session"]["is_authenticated"] is False

    def test_extend_requires_session(self, client):
        response = client.post("/session/extend")
        assert response.status_code == 401

    def test_extend_with_session(self, client):
        login(client)
        response = client.post("/session/extend")
        assert response.status_code == 200
        assert response.json()["phase"] == "active"

    def test_logout(self, client):
        login(client)
        response = client.post("/session/logout")
        assert response.status_code == 200
        assert response.json()["phase"] == "unauthenticated"
        assert client.post("/session/extend").status_code == 401


class TestAuditEndpoints:
    """Test staff-only audit trail."""

    def test_audit_requires_session(self, client):
        assert client.get("/audit/events").status_code == 401
        assert client.get("/audit/summary").status_code == 401

    def test_audit_lists_auth_events(self, client):
        login(client, "1111")
        login(client)
        response = client.get("/audit/events")
        assert response.status_code == 200
        events = [e["event_type"] for e in response.json()]
        assert events == ["LOGIN_SUCCESS", "LOGIN_FAILURE"]

    def test_audit_filter(self, client):
        login(client, "1111")
        login(client)
        response = client.get("/audit/events", params={"event_type": "LOGIN_FAILURE"})
        data = response.json()
        assert len(data) == 1
        assert data[0]["outcome"] == "failure"

    def test_audit_summary(self, client):
        login(client)
        data = client.get("/audit/summary").json()
        assert data["total"] == 1
        assert data["by_event_type"] == {"LOGIN_SUCCESS": 1}


class TestRequestMiddleware:
    """Test request id and session phase headers."""

    def test_request_id_generated(self, client):
        response = client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 32

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "front-desk-7"})
        assert response.headers["X-Request-ID"] == "front-desk-7"

    def test_session_phase_header(self, client):
        assert client.get("/health").headers["X-Session-Phase"] == "unauthenticated"
        assert login(client).headers["X-Session-Phase"] == "active"
        assert client.post("/session/logout").headers["X-Session-Phase"] == "unauthenticated"


class TestRateLimiting:
    """Test rate limiting."""

    def test_health_not_rate_limited(self, client):
        for _ in range(10):
            response = client.get("/health")
            assert response.status_code == 200
