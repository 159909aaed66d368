"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from planning_poker.adapters.memory_store import InMemoryStore
from planning_poker.adapters.supabase_participant_repository import (
    SupabaseParticipantRepository,
)
from planning_poker.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from planning_poker.adapters.supabase_story_repository import SupabaseStoryRepository
from planning_poker.adapters.supabase_vote_repository import SupabaseVoteRepository
from planning_poker.config import Settings
from planning_poker.services.broadcast import SessionBroadcaster
from planning_poker.services.protocol import ProtocolHandler
from planning_poker.services.registry import ConnectionRegistry
from planning_poker.services.sessions import (
    ParticipantRepository,
    SessionRepository,
    SessionService,
)
from planning_poker.services.stories import StoryRepository, StoryService
from planning_poker.services.voting import VoteRepository, VotingService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    registry: ConnectionRegistry
    broadcaster: SessionBroadcaster
    session_service: SessionService
    story_service: StoryService
    voting_service: VotingService
    protocol_handler: ProtocolHandler
    close_resources: Callable[[], Awaitable[None]]


@dataclass(frozen=True)
class Repositories:
    """The four record-store repositories."""

    sessions: SessionRepository
    participants: ParticipantRepository
    stories: StoryRepository
    votes: VoteRepository


def build_repositories(settings: Settings) -> Repositories:
    """Create repositories for the configured storage backend."""
    if settings.storage_backend == "memory":
        store = InMemoryStore()
        return Repositories(
            sessions=store, participants=store, stories=store, votes=store
        )
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required "
                "for the supabase storage backend"
            )
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return Repositories(
            sessions=SupabaseSessionRepository(client),
            participants=SupabaseParticipantRepository(client),
            stories=SupabaseStoryRepository(client),
            votes=SupabaseVoteRepository(client),
        )
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


def build_container(
    settings: Settings | None = None, repositories: Repositories | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    resolved_repositories = repositories or build_repositories(resolved_settings)
    registry = ConnectionRegistry()
    broadcaster = SessionBroadcaster(
        registry, send_timeout=resolved_settings.broadcast_send_timeout
    )
    session_service = SessionService(
        session_repository=resolved_repositories.sessions,
        participant_repository=resolved_repositories.participants,
        code_length=resolved_settings.session_code_length,
    )
    story_service = StoryService(
        story_repository=resolved_repositories.stories,
        session_service=session_service,
    )
    voting_service = VotingService(
        vote_repository=resolved_repositories.votes,
        story_repository=resolved_repositories.stories,
        session_service=session_service,
    )
    protocol_handler = ProtocolHandler(
        registry=registry,
        broadcaster=broadcaster,
        session_service=session_service,
        story_service=story_service,
        voting_service=voting_service,
    )

    async def close_resources() -> None:
        for entry in registry.entries():
            await protocol_handler.disconnect(entry.connection)

    return AppContainer(
        settings=resolved_settings,
        registry=registry,
        broadcaster=broadcaster,
        session_service=session_service,
        story_service=story_service,
        voting_service=voting_service,
        protocol_handler=protocol_handler,
        close_resources=close_resources,
    )
