"""Voting rounds: casting, revealing and resetting votes."""

from dataclasses import dataclass
from typing import Protocol

from planning_poker.domain.errors import PlanningPokerError
from planning_poker.domain.models import SessionRecord, StoryRecord, VoteRecord
from planning_poker.domain.voting import is_valid_card
from planning_poker.services.sessions import SessionService
from planning_poker.services.stories import StoryRepository


class VoteRepository(Protocol):
    """Persistence interface for votes."""

    def upsert_vote(
        self,
        session_id: str,
        participant_id: int,
        value: str,
        story_id: int | None,
    ) -> VoteRecord:
        """Create or overwrite the vote of a participant in a session."""

    def get_vote(self, session_id: str, participant_id: int) -> VoteRecord | None:
        """Return a participant's vote, if present."""

    def list_votes(self, session_id: str) -> list[VoteRecord]:
        """Return all votes of a session."""

    def delete_votes(self, session_id: str) -> None:
        """Delete all votes of a session."""


@dataclass
class VotingService:
    """Runs the vote, reveal and reset cycle of a session."""

    vote_repository: VoteRepository
    story_repository: StoryRepository
    session_service: SessionService

    def cast_vote(
        self, session_id: str, participant_id: int, value: str | None
    ) -> VoteRecord:
        """Record a participant's vote, replacing any previous one."""
        if not value:
            raise PlanningPokerError("Vote value is required")
        session = self.session_service.require_session(session_id)
        if not is_valid_card(session.voting_system, value):
            raise PlanningPokerError("Invalid vote value")
        return self.vote_repository.upsert_vote(
            session_id=session_id,
            participant_id=participant_id,
            value=value,
            story_id=session.current_story_id,
        )

    def all_votes_in(self, session_id: str) -> bool:
        """Return true when every connected participant has voted.

        Participants and votes are read separately, so two votes landing at
        the same time can both observe a complete round.
        """
        connected = self.session_service.count_connected(session_id)
        votes = self.vote_repository.list_votes(session_id)
        return connected > 0 and len(votes) == connected

    def list_votes(self, session_id: str) -> list[VoteRecord]:
        """Return all votes of a session."""
        return self.vote_repository.list_votes(session_id)

    def reveal(self, session_id: str) -> tuple[SessionRecord, list[VoteRecord]]:
        """Make the session's votes visible."""
        session = self.session_service.update_session(session_id, {"revealed": True})
        return session, self.vote_repository.list_votes(session_id)

    def reset_voting(self, session_id: str) -> SessionRecord:
        """Complete the current story and start a fresh round."""
        session = self.session_service.require_session(session_id)
        if session.current_story_id is not None:
            story = self.story_repository.get_story(session.current_story_id)
            if story is not None and story.session_id == session_id:
                self.story_repository.update_story(story.id, {"is_completed": True})
        self.vote_repository.delete_votes(session_id)
        return self.session_service.update_session(
            session_id,
            {"revealed": False, "current_story": None, "current_story_id": None},
        )

    def select_story(self, session_id: str, story: StoryRecord) -> SessionRecord:
        """Make a persisted story the one being voted on."""
        session = self.session_service.update_session(
            session_id,
            {
                "current_story": story.descriptor,
                "current_story_id": story.id,
                "revealed": False,
            },
        )
        self.vote_repository.delete_votes(session_id)
        return session

    def set_story_text(self, session_id: str, text: str | None) -> SessionRecord:
        """Vote on free text that has no backing story."""
        session = self.session_service.update_session(
            session_id,
            {"current_story": text, "current_story_id": None, "revealed": False},
        )
        self.vote_repository.delete_votes(session_id)
        return session
