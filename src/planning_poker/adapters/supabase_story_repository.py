"""Supabase-backed story repository."""

from dataclasses import dataclass

from supabase import Client

from planning_poker.adapters.supabase_rows import encode_changes, parse_timestamp
from planning_poker.domain.models import StoryRecord
from planning_poker.services.stories import StoryRepository

_COLUMNS = "id, session_id, title, link, is_completed, created_at"


@dataclass
class SupabaseStoryRepository(StoryRepository):
    """Supabase implementation for session stories."""

    client: Client

    def create_story(
        self, session_id: str, title: str, link: str, is_completed: bool
    ) -> StoryRecord:
        """Create a story row and return it."""
        response = (
            self.client.table("stories")
            .insert(
                {
                    "session_id": session_id,
                    "title": title,
                    "link": link,
                    "is_completed": is_completed,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create story")
        return _parse_story(response.data[0])

    def get_story(self, story_id: int) -> StoryRecord | None:
        """Return a story by id, if present."""
        response = (
            self.client.table("stories")
            .select(_COLUMNS)
            .eq("id", story_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_story(response.data[0])

    def list_stories(self, session_id: str) -> list[StoryRecord]:
        """Return the stories of a session in creation order."""
        response = (
            self.client.table("stories")
            .select(_COLUMNS)
            .eq("session_id", session_id)
            .order("id")
            .execute()
        )
        return [_parse_story(row) for row in response.data or []]

    def update_story(
        self, story_id: int, changes: dict[str, object]
    ) -> StoryRecord | None:
        """Update story fields and return the new row."""
        response = (
            self.client.table("stories")
            .update(encode_changes(changes))
            .eq("id", story_id)
            .execute()
        )
        if not response.data:
            return None
        return _parse_story(response.data[0])

    def delete_story(self, story_id: int) -> bool:
        """Delete a story row."""
        response = self.client.table("stories").delete().eq("id", story_id).execute()
        return bool(response.data)


def _parse_story(row: dict[str, object]) -> StoryRecord:
    return StoryRecord(
        id=int(row["id"]),
        session_id=str(row["session_id"]),
        title=str(row["title"]),
        link=str(row["link"]),
        is_completed=bool(row.get("is_completed", False)),
        created_at=parse_timestamp(row.get("created_at")),
    )
