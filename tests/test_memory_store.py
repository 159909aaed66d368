"""Tests for the in-memory record store."""

from planning_poker.adapters.memory_store import InMemoryStore


def _seed(store: InMemoryStore) -> tuple[int, int]:
    store.create_session({"id": "ABC123", "name": "S1", "created_by": "Alice"})
    alice = store.create_participant("ABC123", "Alice", is_admin=True)
    story = store.create_story("ABC123", "Login", "https://x/1", is_completed=False)
    store.upsert_vote("ABC123", alice.id, "5", story.id)
    return alice.id, story.id


def test_ids_are_sequential(store: InMemoryStore) -> None:
    store.create_session({"id": "ABC123", "name": "S1", "created_by": "Alice"})

    first = store.create_participant("ABC123", "Alice", is_admin=True)
    second = store.create_participant("ABC123", "Bob", is_admin=False)

    assert (first.id, second.id) == (1, 2)


def test_update_ignores_identity_and_unknown_fields(store: InMemoryStore) -> None:
    store.create_session({"id": "ABC123", "name": "S1", "created_by": "Alice"})

    updated = store.update_session(
        "ABC123", {"id": "OTHER1", "revealed": True, "colour": "blue"}
    )

    assert updated is not None
    assert updated.id == "ABC123"
    assert updated.revealed
    assert store.update_session("NOPE00", {"revealed": True}) is None


def test_upsert_vote_overwrites(store: InMemoryStore) -> None:
    alice_id, _ = _seed(store)

    again = store.upsert_vote("ABC123", alice_id, "8", None)

    assert again.value == "8"
    assert again.story_id is None
    assert len(store.list_votes("ABC123")) == 1


def test_delete_session_cascades(store: InMemoryStore) -> None:
    _seed(store)

    assert store.delete_session("ABC123")

    assert store.participants == {}
    assert store.stories == {}
    assert store.votes == {}
    assert not store.delete_session("ABC123")


def test_delete_participant_removes_votes(store: InMemoryStore) -> None:
    alice_id, _ = _seed(store)

    assert store.delete_participant(alice_id)

    assert store.get_vote("ABC123", alice_id) is None
    assert len(store.stories) == 1
