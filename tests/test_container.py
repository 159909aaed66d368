"""Tests for container wiring."""

import asyncio

import pytest

from planning_poker.adapters.memory_store import InMemoryStore
from planning_poker.config import Settings
from planning_poker.containers import build_container, build_repositories
from tests.conftest import FakeConnection


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.session_service is not None
    assert container.protocol_handler.registry is container.registry
    assert container.broadcaster.registry is container.registry
    asyncio.run(container.close_resources())


def test_containers_do_not_share_registries(settings) -> None:
    first = build_container(settings)
    second = build_container(settings)

    assert first.registry is not second.registry


def test_memory_backend_shares_one_store(settings) -> None:
    repositories = build_repositories(settings)

    assert isinstance(repositories.sessions, InMemoryStore)
    assert repositories.sessions is repositories.votes


def test_supabase_backend_requires_credentials() -> None:
    settings = Settings(storage_backend="supabase", supabase_url=None)

    with pytest.raises(ValueError, match="SUPABASE_URL"):
        build_repositories(settings)


def test_close_resources_disconnects_members(container) -> None:
    session, admin = container.session_service.start_session(
        "S1", "Alice", "fibonacci"
    )
    connection = FakeConnection()
    container.registry.register(connection)
    container.registry.bind(connection, admin, session.id)

    asyncio.run(container.close_resources())

    assert len(container.registry) == 0
    assert container.session_service.count_connected(session.id) == 0
