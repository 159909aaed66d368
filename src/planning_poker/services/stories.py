"""Story backlog management."""

from dataclasses import dataclass
from typing import Protocol

from planning_poker.domain.errors import PlanningPokerError
from planning_poker.domain.models import SessionRecord, StoryRecord
from planning_poker.services.sessions import SessionService


class StoryRepository(Protocol):
    """Persistence interface for stories."""

    def create_story(
        self, session_id: str, title: str, link: str, is_completed: bool
    ) -> StoryRecord:
        """Create a story and return it."""

    def get_story(self, story_id: int) -> StoryRecord | None:
        """Return a story by id, if present."""

    def list_stories(self, session_id: str) -> list[StoryRecord]:
        """Return the stories of a session in creation order."""

    def update_story(
        self, story_id: int, changes: dict[str, object]
    ) -> StoryRecord | None:
        """Apply field changes and return the updated story, if present."""

    def delete_story(self, story_id: int) -> bool:
        """Delete a story."""


@dataclass
class StoryService:
    """Service for adding, editing and listing stories."""

    story_repository: StoryRepository
    session_service: SessionService

    def add_story(
        self, session_id: str, title: str | None, link: str | None
    ) -> StoryRecord:
        """Add an open story to the session."""
        if not title or not link:
            raise PlanningPokerError("Title and link are required")
        return self.story_repository.create_story(
            session_id, title.strip(), link.strip(), is_completed=False
        )

    def list_stories(self, session_id: str) -> list[StoryRecord]:
        """Return every story of a session."""
        return self.story_repository.list_stories(session_id)

    def require_story(self, session_id: str, story_id: int | None) -> StoryRecord:
        """Return a story that belongs to the session or fail."""
        story = (
            self.story_repository.get_story(story_id) if story_id is not None else None
        )
        if story is None or story.session_id != session_id:
            raise PlanningPokerError("Story not found")
        return story

    def update_story(
        self,
        session_id: str,
        story_id: int | None,
        title: str | None,
        link: str | None,
    ) -> tuple[StoryRecord, SessionRecord | None]:
        """Edit a story; returns the session too when its current story changed."""
        if not title or not link:
            raise PlanningPokerError("Title and link are required")
        existing = self.require_story(session_id, story_id)
        updated = self.story_repository.update_story(
            existing.id, {"title": title.strip(), "link": link.strip()}
        )
        if updated is None:
            raise PlanningPokerError("Failed to update story")

        session = self.session_service.require_session(session_id)
        if session.current_story_id != updated.id:
            return updated, None
        refreshed = self.session_service.update_session(
            session_id, {"current_story": updated.descriptor}
        )
        return updated, refreshed


def parse_story_descriptor(text: str) -> tuple[str, str] | None:
    """Split ``"title (link)"`` text into its title and link."""
    opening = text.find("(")
    closing = text.find(")", opening + 1)
    if opening < 0 or closing < 0:
        return None
    title = text[:opening].strip()
    link = text[opening + 1 : closing].strip()
    return title, link
