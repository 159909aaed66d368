"""Tests for the HTTP session endpoints."""

from fastapi.testclient import TestClient

from planning_poker.api.app import create_app


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_create_and_fetch_session(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/api/sessions",
        json={"name": "Sprint 12", "createdBy": "Alice", "votingSystem": "tshirt"},
    )

    assert response.status_code == 201
    session = response.json()["session"]
    assert len(session["id"]) == 6
    assert session["votingSystem"] == "tshirt"
    assert session["revealed"] is False

    fetched = client.get(f"/api/sessions/{session['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["session"]["name"] == "Sprint 12"

    listed = client.get("/api/sessions")
    assert [item["id"] for item in listed.json()["sessions"]] == [session["id"]]


def test_create_session_with_taken_id(container) -> None:
    client = TestClient(create_app(container))
    body = {"id": "ABC123", "name": "Planning", "createdBy": "Alice"}

    assert client.post("/api/sessions", json=body).status_code == 201
    response = client.post("/api/sessions", json=body)

    assert response.status_code == 409
    assert response.json()["detail"] == "Session already exists"


def test_create_session_validates_body(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/api/sessions",
        json={"name": "Planning", "createdBy": "Alice", "votingSystem": "roman"},
    )

    assert response.status_code == 422


def test_unknown_session_is_404(container) -> None:
    client = TestClient(create_app(container))

    assert client.get("/api/sessions/NOPE00").status_code == 404
    assert client.get("/api/sessions/NOPE00/participants").status_code == 404
    assert client.get("/api/sessions/NOPE00/votes").status_code == 404


def test_participants_endpoint(container) -> None:
    session, _ = container.session_service.start_session("S1", "Alice", "fibonacci")
    container.session_service.join_session(session.id, "Bob")
    client = TestClient(create_app(container))

    response = client.get(f"/api/sessions/{session.id}/participants")

    assert response.status_code == 200
    names = [item["name"] for item in response.json()["participants"]]
    assert names == ["Alice", "Bob"]


def test_votes_hidden_until_revealed(container) -> None:
    session, alice = container.session_service.start_session(
        "S1", "Alice", "fibonacci"
    )
    container.voting_service.cast_vote(session.id, alice.id, "5")
    client = TestClient(create_app(container))

    hidden = client.get(f"/api/sessions/{session.id}/votes")
    assert hidden.status_code == 403
    assert hidden.json()["detail"] == "Votes have not been revealed yet"

    container.voting_service.reveal(session.id)
    shown = client.get(f"/api/sessions/{session.id}/votes")
    assert shown.status_code == 200
    assert [vote["value"] for vote in shown.json()["votes"]] == ["5"]
