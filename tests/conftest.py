"""Shared test fixtures."""

import json
from dataclasses import dataclass, field

import pytest

from planning_poker.adapters.memory_store import InMemoryStore
from planning_poker.config import Settings
from planning_poker.containers import AppContainer, Repositories, build_container


@dataclass(eq=False)
class FakeConnection:
    """Connection that records every message sent to it."""

    name: str = "client"
    is_open: bool = True
    fail_on_send: bool = False
    sent: list[dict[str, object]] = field(default_factory=list)

    async def send_text(self, data: str) -> None:
        if self.fail_on_send:
            raise ConnectionError(f"{self.name} is gone")
        self.sent.append(json.loads(data))

    def types(self) -> list[str]:
        return [str(item["type"]) for item in self.sent]

    def last(self, message_type: str | None = None) -> dict[str, object]:
        for item in reversed(self.sent):
            if message_type is None or item["type"] == message_type:
                return item
        raise AssertionError(f"{self.name} never received {message_type}")

    def payloads(self, message_type: str) -> list[dict[str, object]]:
        return [item["payload"] for item in self.sent if item["type"] == message_type]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(storage_backend="memory", log_level="DEBUG")


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def container(settings: Settings, store: InMemoryStore) -> AppContainer:
    return build_container(
        settings,
        Repositories(sessions=store, participants=store, stories=store, votes=store),
    )
