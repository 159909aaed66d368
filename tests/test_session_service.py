"""Tests for session and participant lifecycle."""

import pytest

from planning_poker.adapters.memory_store import InMemoryStore
from planning_poker.domain.errors import PlanningPokerError
from planning_poker.services.sessions import SESSION_CODE_ALPHABET, SessionService


def _service(store: InMemoryStore, code_length: int = 6) -> SessionService:
    return SessionService(
        session_repository=store,
        participant_repository=store,
        code_length=code_length,
    )


def test_generate_session_code_uses_alphabet(store: InMemoryStore) -> None:
    code = _service(store).generate_session_code()

    assert len(code) == 6
    assert all(char in SESSION_CODE_ALPHABET for char in code)


def test_generate_session_code_honours_length(store: InMemoryStore) -> None:
    assert len(_service(store, code_length=8).generate_session_code()) == 8


def test_start_session_creates_admin(store: InMemoryStore) -> None:
    service = _service(store)

    session, admin = service.start_session("Sprint 12", "Alice", "fibonacci")

    assert len(session.id) == 6
    assert session.created_by == "Alice"
    assert session.current_story == ""
    assert not session.revealed
    assert admin.is_admin
    assert admin.connected
    assert admin.session_id == session.id


def test_create_session_rejects_duplicate_id(store: InMemoryStore) -> None:
    service = _service(store)
    service.create_session("Planning", "Alice", "fibonacci", session_id="ABC123")

    with pytest.raises(PlanningPokerError, match="Session already exists"):
        service.create_session("Again", "Bob", "fibonacci", session_id="ABC123")


def test_join_unknown_session(store: InMemoryStore) -> None:
    with pytest.raises(PlanningPokerError, match="Session not found"):
        _service(store).join_session("NOPE00", "Bob")


def test_join_creates_participant(store: InMemoryStore) -> None:
    service = _service(store)
    session, _ = service.start_session("Planning", "Alice", "fibonacci")

    _, bob = service.join_session(session.id, "Bob")

    assert not bob.is_admin
    assert [item.name for item in service.list_participants(session.id)] == [
        "Alice",
        "Bob",
    ]


def test_join_rejects_connected_duplicate_name(store: InMemoryStore) -> None:
    service = _service(store)
    session, _ = service.start_session("Planning", "Alice", "fibonacci")
    service.join_session(session.id, "Bob")

    with pytest.raises(PlanningPokerError, match="already exists"):
        service.join_session(session.id, "Bob")


def test_join_reactivates_disconnected_participant(store: InMemoryStore) -> None:
    service = _service(store)
    session, _ = service.start_session("Planning", "Alice", "fibonacci")
    _, bob = service.join_session(session.id, "Bob")
    service.mark_disconnected(bob.id)
    assert service.count_connected(session.id) == 1

    _, returning = service.join_session(session.id, "Bob")

    assert returning.id == bob.id
    assert returning.connected
    assert len(service.list_participants(session.id)) == 2
    assert service.count_connected(session.id) == 2


def test_update_session_requires_existing(store: InMemoryStore) -> None:
    with pytest.raises(PlanningPokerError, match="Session not found"):
        _service(store).update_session("NOPE00", {"revealed": True})
