"""Tests for the operator HTTP API."""

import pytest
from fastapi.testclient import TestClient

from glowup.triage.scripts import SAFETY_SCRIPTS
from web.backend.app.dependencies import get_service
from web.backend.app.main import app


@pytest.fixture
def client(service):
    app.dependency_overrides[get_service] = lambda: service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_list_tags(client):
    tags = client.get("/api/tags").json()
    assert [t["id"] for t in tags][:2] == ["safety", "distress"]
    assert tags[-1] == {"id": "resolved", "label": "Resolved", "severity": "low", "manual_only": True}


def test_benign_message_proceeds_and_drafts(client):
    resp = client.post("/api/sessions/s1/messages", json={"content": "hey, how's it going"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["triage"]["outcome"] == "proceed"
    assert body["triage"]["tier"] == "fast"
    assert body["state"]["status"] == "READY"

    state = client.get("/api/sessions/s1").json()
    assert state["last_draft"]["tier"] == "fast"
    assert state["last_draft"]["text"]
    assert state["drafting"] is False


def test_high_risk_message_locks(client):
    body = client.post("/api/sessions/s1/messages", json={"content": "I want to end my life"}).json()
    assert body["triage"]["outcome"] == "locked"
    assert body["triage"]["matches"] == ["safety"]
    assert body["state"]["status"] == "LOCKED"
    assert body["state"]["active"] == ["safety"]

    state = client.get("/api/sessions/s1").json()
    assert state["messages"][-1]["content"] == SAFETY_SCRIPTS["pause"]
    assert state["last_draft"] is None

    escalations = client.get("/api/sessions/s1/escalations").json()
    assert len(escalations) == 1
    assert escalations[0]["source"] == "auto"


def test_locked_session_refuses_drafts(client):
    client.post("/api/sessions/s1/messages", json={"content": "I want to end my life"})

    assert client.post("/api/sessions/s1/drafts").status_code == 423
    assert client.post("/api/sessions/s1/replies", json={"content": "draft", "source": "draft"}).status_code == 423
    manual = client.post("/api/sessions/s1/replies", json={"content": SAFETY_SCRIPTS["us"]})
    assert manual.status_code == 200
    assert manual.json()["role"] == "assistant"

    assert client.post("/api/sessions/s1/unlock").json()["status"] == "READY"
    assert client.post("/api/sessions/s1/drafts").status_code == 200


def test_toggle_tag(client):
    client.post("/api/sessions/s1/messages", json={"content": "kms lol"})
    state = client.post("/api/sessions/s1/tags/risk_lang/toggle").json()
    assert state["active"] == ["risk_lang"]
    assert state["suggested"] == []

    assert client.post("/api/sessions/s1/tags/nope/toggle").status_code == 404


def test_start_session_hides_context_from_user(client):
    resp = client.post("/api/sessions/s1/start", json={"vibe": "Chaotic Fun", "content": "hi there"})
    assert resp.status_code == 200

    operator = client.get("/api/sessions/s1").json()["messages"]
    user = client.get("/api/sessions/s1", params={"audience": "user"}).json()["messages"]
    assert any(m["role"] == "system" for m in operator)
    assert not any(m["role"] == "system" for m in user)


def test_operator_escalation_and_team_log(client):
    resp = client.post(
        "/api/sessions/s1/escalations",
        json={"category": "Boundary Violation", "summary": "asked where I live"},
    )
    assert resp.status_code == 200
    assert resp.json()["source"] == "operator"

    log = client.get("/api/escalations", params={"category": "Boundary Violation"}).json()
    assert [e["session_id"] for e in log] == ["s1"]
    assert client.get("/api/escalations", params={"category": "Nope"}).status_code == 422


def test_validation_errors(client):
    assert client.post("/api/sessions/s1/messages", json={"content": ""}).status_code == 422
    assert client.post("/api/sessions/s1/replies", json={"content": "   "}).status_code == 422


def test_reset(client):
    client.post("/api/sessions/s1/messages", json={"content": "I want to end my life"})
    assert client.post("/api/sessions/s1/reset").status_code == 204
    assert client.get("/api/sessions/s1").json()["triage"]["locked"] is False


def test_list_scripts(client):
    scripts = {s["key"]: s["text"] for s in client.get("/api/scripts").json()}
    assert scripts["safety-us"] == SAFETY_SCRIPTS["us"]
    assert scripts["safety-intl"] == SAFETY_SCRIPTS["intl"]
    assert "quick-1" in scripts
    assert "tone-1" in scripts


def test_send_script_while_locked(client):
    client.post("/api/sessions/s1/messages", json={"content": "I want to end my life"})

    resp = client.post("/api/sessions/s1/scripts/safety-intl")
    assert resp.status_code == 200
    assert resp.json()["content"] == SAFETY_SCRIPTS["intl"]
    assert client.get("/api/sessions/s1").json()["triage"]["locked"] is True

    assert client.post("/api/sessions/s1/scripts/nope").status_code == 404
