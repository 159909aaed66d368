"""In-memory record store for single-process deployments."""

from dataclasses import dataclass, field, fields, replace
from datetime import UTC, datetime
from itertools import count
from threading import RLock

from planning_poker.domain.models import (
    ParticipantRecord,
    SessionRecord,
    StoryRecord,
    VoteRecord,
)
from planning_poker.services.sessions import ParticipantRepository, SessionRepository
from planning_poker.services.stories import StoryRepository
from planning_poker.services.voting import VoteRepository


@dataclass
class InMemoryStore(
    SessionRepository, ParticipantRepository, StoryRepository, VoteRepository
):
    """Holds sessions, participants, stories and votes in dictionaries.

    Store calls arrive from worker threads, so every method holds one lock.
    """

    sessions: dict[str, SessionRecord] = field(default_factory=dict)
    participants: dict[int, ParticipantRecord] = field(default_factory=dict)
    stories: dict[int, StoryRecord] = field(default_factory=dict)
    votes: dict[int, VoteRecord] = field(default_factory=dict)
    _participant_ids: count = field(default_factory=lambda: count(1), repr=False)
    _story_ids: count = field(default_factory=lambda: count(1), repr=False)
    _vote_ids: count = field(default_factory=lambda: count(1), repr=False)
    _lock: RLock = field(default_factory=RLock, repr=False)

    def create_session(self, payload: dict[str, object]) -> SessionRecord:
        with self._lock:
            session = SessionRecord(
                id=str(payload["id"]),
                name=str(payload["name"]),
                created_by=str(payload["created_by"]),
                voting_system=str(payload.get("voting_system", "fibonacci")),
                current_story=payload.get("current_story"),
                current_story_id=payload.get("current_story_id"),
                active=True,
                revealed=False,
                created_at=datetime.now(tz=UTC),
            )
            self.sessions[session.id] = session
            return session

    def get_session(self, session_id: str) -> SessionRecord | None:
        with self._lock:
            return self.sessions.get(session_id)

    def list_sessions(self) -> list[SessionRecord]:
        with self._lock:
            return list(self.sessions.values())

    def update_session(
        self, session_id: str, changes: dict[str, object]
    ) -> SessionRecord | None:
        with self._lock:
            current = self.sessions.get(session_id)
            if current is None:
                return None
            updated = replace(current, **_known_fields(SessionRecord, changes))
            self.sessions[session_id] = updated
            return updated

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            if self.sessions.pop(session_id, None) is None:
                return False
            for table in (self.participants, self.stories, self.votes):
                stale = [
                    key for key, row in table.items() if row.session_id == session_id
                ]
                for key in stale:
                    del table[key]
            return True

    def create_participant(
        self, session_id: str, name: str, is_admin: bool
    ) -> ParticipantRecord:
        with self._lock:
            participant = ParticipantRecord(
                id=next(self._participant_ids),
                session_id=session_id,
                name=name,
                is_admin=is_admin,
                connected=True,
                last_activity=datetime.now(tz=UTC),
            )
            self.participants[participant.id] = participant
            return participant

    def get_participant(self, participant_id: int) -> ParticipantRecord | None:
        with self._lock:
            return self.participants.get(participant_id)

    def get_participant_by_name(
        self, session_id: str, name: str
    ) -> ParticipantRecord | None:
        with self._lock:
            for participant in self.participants.values():
                if participant.session_id == session_id and participant.name == name:
                    return participant
            return None

    def list_participants(self, session_id: str) -> list[ParticipantRecord]:
        with self._lock:
            return [
                participant
                for participant in self.participants.values()
                if participant.session_id == session_id
            ]

    def update_participant(
        self, participant_id: int, changes: dict[str, object]
    ) -> ParticipantRecord | None:
        with self._lock:
            current = self.participants.get(participant_id)
            if current is None:
                return None
            updated = replace(current, **_known_fields(ParticipantRecord, changes))
            self.participants[participant_id] = updated
            return updated

    def delete_participant(self, participant_id: int) -> bool:
        with self._lock:
            if self.participants.pop(participant_id, None) is None:
                return False
            stale = [
                key
                for key, vote in self.votes.items()
                if vote.participant_id == participant_id
            ]
            for key in stale:
                del self.votes[key]
            return True

    def create_story(
        self, session_id: str, title: str, link: str, is_completed: bool
    ) -> StoryRecord:
        with self._lock:
            story = StoryRecord(
                id=next(self._story_ids),
                session_id=session_id,
                title=title,
                link=link,
                is_completed=is_completed,
                created_at=datetime.now(tz=UTC),
            )
            self.stories[story.id] = story
            return story

    def get_story(self, story_id: int) -> StoryRecord | None:
        with self._lock:
            return self.stories.get(story_id)

    def list_stories(self, session_id: str) -> list[StoryRecord]:
        with self._lock:
            return [
                story
                for story in self.stories.values()
                if story.session_id == session_id
            ]

    def update_story(
        self, story_id: int, changes: dict[str, object]
    ) -> StoryRecord | None:
        with self._lock:
            current = self.stories.get(story_id)
            if current is None:
                return None
            updated = replace(current, **_known_fields(StoryRecord, changes))
            self.stories[story_id] = updated
            return updated

    def delete_story(self, story_id: int) -> bool:
        with self._lock:
            return self.stories.pop(story_id, None) is not None

    def upsert_vote(
        self,
        session_id: str,
        participant_id: int,
        value: str,
        story_id: int | None,
    ) -> VoteRecord:
        with self._lock:
            existing = self.get_vote(session_id, participant_id)
            if existing is not None:
                updated = replace(existing, value=value, story_id=story_id)
                self.votes[existing.id] = updated
                return updated
            vote = VoteRecord(
                id=next(self._vote_ids),
                session_id=session_id,
                participant_id=participant_id,
                value=value,
                story_id=story_id,
                created_at=datetime.now(tz=UTC),
            )
            self.votes[vote.id] = vote
            return vote

    def get_vote(self, session_id: str, participant_id: int) -> VoteRecord | None:
        with self._lock:
            for vote in self.votes.values():
                if (
                    vote.session_id == session_id
                    and vote.participant_id == participant_id
                ):
                    return vote
            return None

    def list_votes(self, session_id: str) -> list[VoteRecord]:
        with self._lock:
            return [
                vote for vote in self.votes.values() if vote.session_id == session_id
            ]

    def delete_votes(self, session_id: str) -> None:
        with self._lock:
            stale = [
                key for key, vote in self.votes.items() if vote.session_id == session_id
            ]
            for key in stale:
                del self.votes[key]


def _known_fields(record_type: type, changes: dict[str, object]) -> dict[str, object]:
    """Drop identity and unknown keys from a partial update."""
    names = {item.name for item in fields(record_type)} - {"id", "session_id"}
    return {key: value for key, value in changes.items() if key in names}
