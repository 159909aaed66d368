"""Session and participant lifecycle."""

import secrets
import string
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from planning_poker.domain.errors import PlanningPokerError
from planning_poker.domain.models import ParticipantRecord, SessionRecord

SESSION_CODE_ALPHABET = string.ascii_uppercase + string.digits


class SessionRepository(Protocol):
    """Persistence interface for sessions."""

    def create_session(self, payload: dict[str, object]) -> SessionRecord:
        """Create a session row and return it."""

    def get_session(self, session_id: str) -> SessionRecord | None:
        """Return a session by id, if present."""

    def list_sessions(self) -> list[SessionRecord]:
        """Return all sessions."""

    def update_session(
        self, session_id: str, changes: dict[str, object]
    ) -> SessionRecord | None:
        """Apply field changes and return the updated session, if present."""

    def delete_session(self, session_id: str) -> bool:
        """Delete a session and everything it owns."""


class ParticipantRepository(Protocol):
    """Persistence interface for session participants."""

    def create_participant(
        self, session_id: str, name: str, is_admin: bool
    ) -> ParticipantRecord:
        """Create a connected participant and return it."""

    def get_participant(self, participant_id: int) -> ParticipantRecord | None:
        """Return a participant by id, if present."""

    def get_participant_by_name(
        self, session_id: str, name: str
    ) -> ParticipantRecord | None:
        """Return the participant with this name in the session, if present."""

    def list_participants(self, session_id: str) -> list[ParticipantRecord]:
        """Return every participant of a session."""

    def update_participant(
        self, participant_id: int, changes: dict[str, object]
    ) -> ParticipantRecord | None:
        """Apply field changes and return the updated participant, if present."""

    def delete_participant(self, participant_id: int) -> bool:
        """Delete a participant."""


@dataclass
class SessionService:
    """Creates sessions and tracks who is in them."""

    session_repository: SessionRepository
    participant_repository: ParticipantRepository
    code_length: int = 6

    def generate_session_code(self) -> str:
        """Return a short uppercase code for a new session."""
        return "".join(
            secrets.choice(SESSION_CODE_ALPHABET) for _ in range(self.code_length)
        )

    def create_session(
        self,
        name: str,
        created_by: str,
        voting_system: str,
        session_id: str | None = None,
        current_story: str | None = None,
    ) -> SessionRecord:
        """Create a session, generating a code when none is supplied."""
        resolved_id = session_id or self.generate_session_code()
        if self.session_repository.get_session(resolved_id):
            raise PlanningPokerError("Session already exists")
        return self.session_repository.create_session(
            {
                "id": resolved_id,
                "name": name,
                "created_by": created_by,
                "voting_system": voting_system,
                "current_story": current_story,
            }
        )

    def start_session(
        self,
        session_name: str,
        admin_name: str,
        voting_system: str,
        session_id: str | None = None,
    ) -> tuple[SessionRecord, ParticipantRecord]:
        """Create a session together with its admin participant."""
        session = self.create_session(
            name=session_name,
            created_by=admin_name,
            voting_system=voting_system,
            session_id=session_id,
            current_story="",
        )
        participant = self.participant_repository.create_participant(
            session.id, admin_name, is_admin=True
        )
        return session, participant

    def join_session(
        self, session_id: str, name: str
    ) -> tuple[SessionRecord, ParticipantRecord]:
        """Join by name, reactivating a disconnected participant if one exists."""
        session = self.require_session(session_id)
        existing = self.participant_repository.get_participant_by_name(
            session_id, name
        )
        if existing is None:
            participant = self.participant_repository.create_participant(
                session_id, name, is_admin=False
            )
            return session, participant
        if existing.connected:
            raise PlanningPokerError(
                "A participant with this name already exists in the session"
            )
        reactivated = self.participant_repository.update_participant(
            existing.id,
            {"connected": True, "last_activity": datetime.now(tz=UTC)},
        )
        return session, reactivated or existing

    def mark_disconnected(self, participant_id: int) -> ParticipantRecord | None:
        """Flag a participant as no longer connected."""
        return self.participant_repository.update_participant(
            participant_id,
            {"connected": False, "last_activity": datetime.now(tz=UTC)},
        )

    def get_session(self, session_id: str) -> SessionRecord | None:
        """Return a session by id, if present."""
        return self.session_repository.get_session(session_id)

    def require_session(self, session_id: str) -> SessionRecord:
        """Return a session or fail with a client-facing error."""
        session = self.session_repository.get_session(session_id)
        if session is None:
            raise PlanningPokerError("Session not found")
        return session

    def update_session(
        self, session_id: str, changes: dict[str, object]
    ) -> SessionRecord:
        """Apply changes to a session that must exist."""
        session = self.session_repository.update_session(session_id, changes)
        if session is None:
            raise PlanningPokerError("Session not found")
        return session

    def list_sessions(self) -> list[SessionRecord]:
        """Return all sessions."""
        return self.session_repository.list_sessions()

    def list_participants(self, session_id: str) -> list[ParticipantRecord]:
        """Return every participant of a session, connected or not."""
        return self.participant_repository.list_participants(session_id)

    def count_connected(self, session_id: str) -> int:
        """Return how many participants of a session are connected."""
        return sum(
            1
            for participant in self.participant_repository.list_participants(
                session_id
            )
            if participant.connected
        )
