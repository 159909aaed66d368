"""Websocket protocol state machine for planning poker sessions."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from planning_poker.domain.errors import PlanningPokerError
from planning_poker.domain.messages import (
    AddStoryPayload,
    CastVotePayload,
    Envelope,
    JoinSessionPayload,
    MessageType,
    SetCurrentStoryPayload,
    SetStoryPayload,
    UpdateStoryPayload,
)
from planning_poker.domain.models import ParticipantRecord, SessionRecord
from planning_poker.services.aggregation import summarize
from planning_poker.services.broadcast import SessionBroadcaster
from planning_poker.services.payloads import (
    error_message,
    message,
    serialize_participant,
    serialize_session,
    serialize_story,
    serialize_vote,
)
from planning_poker.services.registry import (
    Connection,
    ConnectionRegistry,
    RegistryEntry,
)
from planning_poker.services.sessions import SessionService
from planning_poker.services.stories import StoryService, parse_story_descriptor
from planning_poker.services.voting import VotingService

logger = logging.getLogger(__name__)

PONG: dict[str, object] = {"type": "pong"}

FAILURE_MESSAGES: dict[MessageType, str] = {
    MessageType.JOIN_SESSION: "Failed to join session",
    MessageType.LEAVE_SESSION: "Failed to leave session",
    MessageType.CAST_VOTE: "Failed to cast vote",
    MessageType.REVEAL_VOTES: "Failed to reveal votes",
    MessageType.RESET_VOTING: "Failed to reset voting",
    MessageType.SET_STORY: "Failed to set story",
    MessageType.ADD_STORY: "Failed to add story",
    MessageType.UPDATE_STORY: "Failed to update story",
    MessageType.GET_STORIES: "Failed to get stories",
    MessageType.SET_CURRENT_STORY: "Failed to set current story",
}

EventHandler = Callable[[RegistryEntry, dict[str, object]], Awaitable[None]]
T = TypeVar("T")


@dataclass
class ProtocolHandler:
    """Validates inbound events, mutates the store and fans out updates."""

    registry: ConnectionRegistry
    broadcaster: SessionBroadcaster
    session_service: SessionService
    story_service: StoryService
    voting_service: VotingService
    _handlers: dict[MessageType, EventHandler] = field(
        init=False, repr=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        self._handlers = {
            MessageType.JOIN_SESSION: self._join_session,
            MessageType.LEAVE_SESSION: self._leave_session,
            MessageType.CAST_VOTE: self._cast_vote,
            MessageType.REVEAL_VOTES: self._reveal_votes,
            MessageType.RESET_VOTING: self._reset_voting,
            MessageType.SET_STORY: self._set_story,
            MessageType.ADD_STORY: self._add_story,
            MessageType.UPDATE_STORY: self._update_story,
            MessageType.GET_STORIES: self._get_stories,
            MessageType.SET_CURRENT_STORY: self._set_current_story,
        }

    async def connect(self, connection: Connection) -> None:
        """Register a new transport and greet it."""
        self.registry.register(connection)
        await self.broadcaster.send(
            connection,
            message(
                MessageType.SESSION_UPDATE,
                {"message": "Connection established successfully"},
            ),
        )

    async def handle_message(self, connection: Connection, raw: str) -> None:
        """Process one inbound text frame from a connection."""
        if _is_ping(raw):
            await self.broadcaster.send(connection, PONG)
            return
        try:
            envelope = Envelope.model_validate_json(raw)
        except ValidationError:
            await self._send_error(connection, "Invalid message format")
            return
        try:
            message_type = MessageType(envelope.type)
        except ValueError:
            await self._send_error(connection, "Unsupported message type")
            return
        handler = self._handlers.get(message_type)
        if handler is None:
            await self._send_error(connection, "Unsupported message type")
            return
        entry = self.registry.get(connection)
        if entry is None:
            await self._send_error(connection, "Client not found")
            return

        logger.debug("Handling %s", message_type.value)
        try:
            await handler(entry, envelope.payload)
        except PlanningPokerError as exc:
            logger.info("Rejected %s: %s", message_type.value, exc.message)
            await self._send_error(connection, exc.message)
        except ValidationError as exc:
            await self._send_error(
                connection, f"Validation error: {_describe_validation_error(exc)}"
            )
        except Exception:
            logger.exception("Failed to handle %s", message_type.value)
            await self._send_error(connection, FAILURE_MESSAGES[message_type])

    async def disconnect(self, connection: Connection) -> None:
        """Forget a closed transport and tell its session the member left."""
        entry = self.registry.remove(connection)
        if entry is None or not entry.is_bound:
            return
        participant, session_id = _require_bound(entry)
        try:
            await _offload(self.session_service.mark_disconnected, participant.id)
            await self._announce_departure(session_id, participant, connection)
        except Exception:
            logger.exception(
                "Failed to process disconnect", extra={"session_id": session_id}
            )

    async def _join_session(
        self, entry: RegistryEntry, payload: dict[str, object]
    ) -> None:
        data = JoinSessionPayload.model_validate(payload)
        if not data.name:
            raise PlanningPokerError("Participant name is required")
        connection = entry.connection

        if data.is_admin and data.session_name and data.voting_system:
            session, participant = await _offload(
                self.session_service.start_session,
                session_name=data.session_name,
                admin_name=data.name,
                voting_system=data.voting_system.value,
                session_id=data.session_id,
            )
            await self._release(entry)
            self.registry.bind(connection, participant, session.id)
            logger.info("Session %s created by %s", session.id, participant.name)
            await self._send_session_snapshot(connection, session, participant)
            return

        if not data.session_id:
            raise PlanningPokerError("Session ID is required")
        if entry.is_bound and entry.session_id == data.session_id:
            bound, _ = _require_bound(entry)
            if bound.name == data.name:
                session = await _offload(
                    self.session_service.require_session, data.session_id
                )
                await self._send_session_snapshot(connection, session, bound)
                return
        session, participant = await _offload(
            self.session_service.join_session, data.session_id, data.name
        )
        await self._release(entry)
        self.registry.bind(connection, participant, session.id)
        logger.info("Participant %s joined session %s", participant.name, session.id)
        await self.broadcaster.broadcast(
            session.id,
            message(
                MessageType.PARTICIPANT_JOINED,
                {"participant": serialize_participant(participant)},
            ),
            exclude=connection,
        )
        await self.broadcaster.broadcast(
            session.id,
            message(
                MessageType.SESSION_UPDATE,
                {"participants": await self._participant_list(session.id)},
            ),
            exclude=connection,
        )
        await self._send_session_snapshot(connection, session, participant)

    async def _leave_session(
        self, entry: RegistryEntry, payload: dict[str, object]
    ) -> None:
        _require_bound(entry)
        await self._release(entry)
        await self.broadcaster.send(
            entry.connection, message(MessageType.LEAVE_SESSION, {"success": True})
        )

    async def _cast_vote(
        self, entry: RegistryEntry, payload: dict[str, object]
    ) -> None:
        participant, session_id = _require_bound(entry)
        data = CastVotePayload.model_validate(payload)
        vote = await _offload(
            self.voting_service.cast_vote, session_id, participant.id, data.value
        )
        await self.broadcaster.broadcast(
            session_id,
            message(
                MessageType.VOTE_UPDATED,
                {
                    "vote": serialize_vote(vote),
                    "participantId": participant.id,
                    "hasVoted": True,
                },
            ),
        )
        if await _offload(self.voting_service.all_votes_in, session_id):
            await self.broadcaster.broadcast(
                session_id, message(MessageType.SESSION_UPDATE, {"allVotesIn": True})
            )

    async def _reveal_votes(
        self, entry: RegistryEntry, payload: dict[str, object]
    ) -> None:
        _, session_id = _require_bound(entry)
        session, votes = await _offload(self.voting_service.reveal, session_id)
        await self.broadcaster.broadcast(
            session_id,
            message(
                MessageType.VOTES_REVEALED,
                {
                    "votes": [serialize_vote(vote) for vote in votes],
                    "session": serialize_session(session),
                    "statistics": summarize(
                        [vote.value for vote in votes], session.voting_system
                    ),
                },
            ),
        )

    async def _reset_voting(
        self, entry: RegistryEntry, payload: dict[str, object]
    ) -> None:
        _, session_id = _require_bound(entry)
        session = await _offload(self.voting_service.reset_voting, session_id)
        stories = await _offload(self.story_service.list_stories, session_id)
        await self.broadcaster.broadcast(
            session_id,
            message(
                MessageType.VOTING_RESET,
                {
                    "session": serialize_session(session),
                    "stories": [serialize_story(story) for story in stories],
                },
            ),
        )

    async def _add_story(
        self, entry: RegistryEntry, payload: dict[str, object]
    ) -> None:
        participant, session_id = _require_bound(entry)
        _require_admin(participant, "Only administrators can add stories")
        data = AddStoryPayload.model_validate(payload)
        story = await _offload(
            self.story_service.add_story, session_id, data.title, data.link
        )
        await self.broadcaster.broadcast(
            session_id,
            message(MessageType.STORY_ADDED, {"story": serialize_story(story)}),
        )

    async def _update_story(
        self, entry: RegistryEntry, payload: dict[str, object]
    ) -> None:
        participant, session_id = _require_bound(entry)
        _require_admin(participant, "Only administrators can update stories")
        data = UpdateStoryPayload.model_validate(payload)
        await self._apply_story_update(session_id, data.story_id, data.title, data.link)

    async def _get_stories(
        self, entry: RegistryEntry, payload: dict[str, object]
    ) -> None:
        _, session_id = _require_bound(entry)
        stories = await _offload(self.story_service.list_stories, session_id)
        await self.broadcaster.send(
            entry.connection,
            message(
                MessageType.STORIES_UPDATED,
                {"stories": [serialize_story(story) for story in stories]},
            ),
        )

    async def _set_current_story(
        self, entry: RegistryEntry, payload: dict[str, object]
    ) -> None:
        participant, session_id = _require_bound(entry)
        _require_admin(participant, "Only administrators can set the current story")
        data = SetCurrentStoryPayload.model_validate(payload)
        story = await _offload(
            self.story_service.require_story, session_id, data.story_id
        )
        session = await _offload(self.voting_service.select_story, session_id, story)
        await self.broadcaster.broadcast(
            session_id,
            message(
                MessageType.STORY_UPDATED,
                {
                    "session": serialize_session(session),
                    "currentStory": serialize_story(story),
                },
            ),
        )

    async def _set_story(
        self, entry: RegistryEntry, payload: dict[str, object]
    ) -> None:
        participant, session_id = _require_bound(entry)
        _require_admin(participant, "Only administrators can change the story")
        data = SetStoryPayload.model_validate(payload)

        if data.update and data.story_id is not None:
            parsed = parse_story_descriptor(data.story or "")
            if parsed is None:
                raise PlanningPokerError("Invalid story format")
            title, link = parsed
            await self._apply_story_update(session_id, data.story_id, title, link)
            return

        session = await _offload(
            self.voting_service.set_story_text, session_id, data.story
        )
        await self.broadcaster.broadcast(
            session_id,
            message(MessageType.STORY_UPDATED, {"session": serialize_session(session)}),
        )

    async def _apply_story_update(
        self,
        session_id: str,
        story_id: int | None,
        title: str | None,
        link: str | None,
    ) -> None:
        story, session = await _offload(
            self.story_service.update_story, session_id, story_id, title, link
        )
        if session is not None:
            await self.broadcaster.broadcast(
                session_id,
                message(
                    MessageType.SESSION_UPDATE, {"session": serialize_session(session)}
                ),
            )
        stories = await _offload(self.story_service.list_stories, session_id)
        await self.broadcaster.broadcast(
            session_id,
            message(
                MessageType.STORIES_UPDATED,
                {
                    "stories": [serialize_story(item) for item in stories],
                    "message": f'Story "{story.title}" has been updated',
                },
            ),
        )

    async def _release(self, entry: RegistryEntry) -> None:
        """Disconnect the entry's participant, if any, and unbind it."""
        if not entry.is_bound:
            return
        participant, session_id = _require_bound(entry)
        await _offload(self.session_service.mark_disconnected, participant.id)
        self.registry.unbind(entry.connection)
        await self._announce_departure(session_id, participant, entry.connection)

    async def _announce_departure(
        self, session_id: str, participant: ParticipantRecord, connection: Connection
    ) -> None:
        await self.broadcaster.broadcast(
            session_id,
            message(MessageType.PARTICIPANT_LEFT, {"participantId": participant.id}),
            exclude=connection,
        )

    async def _send_session_snapshot(
        self,
        connection: Connection,
        session: SessionRecord,
        participant: ParticipantRecord,
    ) -> None:
        votes = (
            await _offload(self.voting_service.list_votes, session.id)
            if session.revealed
            else []
        )
        stories = await _offload(self.story_service.list_stories, session.id)
        await self.broadcaster.send(
            connection,
            message(
                MessageType.SESSION_UPDATE,
                {
                    "sessionId": session.id,
                    "participant": serialize_participant(participant),
                    "session": serialize_session(session),
                    "participants": await self._participant_list(session.id),
                    "votes": [serialize_vote(vote) for vote in votes],
                    "stories": [serialize_story(story) for story in stories],
                },
            ),
        )

    async def _participant_list(self, session_id: str) -> list[dict[str, object]]:
        participants = await _offload(
            self.session_service.list_participants, session_id
        )
        return [serialize_participant(item) for item in participants]

    async def _send_error(self, connection: Connection, text: str) -> None:
        await self.broadcaster.send(connection, error_message(text))


async def _offload(func: Callable[..., T], *args: object, **kwargs: object) -> T:
    """Run a blocking record-store call in the worker thread pool."""
    return await run_in_threadpool(func, *args, **kwargs)


def _require_bound(entry: RegistryEntry) -> tuple[ParticipantRecord, str]:
    if entry.participant is None or entry.session_id is None:
        raise PlanningPokerError("Not in a session")
    return entry.participant, entry.session_id


def _require_admin(participant: ParticipantRecord, text: str) -> None:
    if not participant.is_admin:
        raise PlanningPokerError(text)


def _is_ping(raw: str) -> bool:
    """Detect keep-alive frames before envelope parsing."""
    compact = raw.replace(" ", "").strip()
    return compact == "ping" or '"type":"ping"' in compact


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)
