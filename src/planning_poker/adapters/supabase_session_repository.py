"""Supabase-backed session repository."""

from dataclasses import dataclass

from supabase import Client

from planning_poker.adapters.supabase_rows import encode_changes, parse_timestamp
from planning_poker.domain.models import SessionRecord
from planning_poker.services.sessions import SessionRepository

_COLUMNS = (
    "id, name, created_by, voting_system, current_story, current_story_id, "
    "active, revealed, created_at"
)


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for planning poker sessions."""

    client: Client

    def create_session(self, payload: dict[str, object]) -> SessionRecord:
        """Create a session row and return it."""
        response = self.client.table("sessions").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create session")
        return _parse_session(response.data[0])

    def get_session(self, session_id: str) -> SessionRecord | None:
        """Return a session by id, if present."""
        response = (
            self.client.table("sessions")
            .select(_COLUMNS)
            .eq("id", session_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def list_sessions(self) -> list[SessionRecord]:
        """Return all sessions, newest first."""
        response = (
            self.client.table("sessions")
            .select(_COLUMNS)
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_session(row) for row in response.data or []]

    def update_session(
        self, session_id: str, changes: dict[str, object]
    ) -> SessionRecord | None:
        """Update session fields and return the new row."""
        response = (
            self.client.table("sessions")
            .update(encode_changes(changes))
            .eq("id", session_id)
            .execute()
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def delete_session(self, session_id: str) -> bool:
        """Delete a session; dependents cascade in the database."""
        response = self.client.table("sessions").delete().eq("id", session_id).execute()
        return bool(response.data)


def _parse_session(row: dict[str, object]) -> SessionRecord:
    current_story_id = row.get("current_story_id")
    return SessionRecord(
        id=str(row["id"]),
        name=str(row["name"]),
        created_by=str(row["created_by"]),
        voting_system=str(row.get("voting_system") or "fibonacci"),
        current_story=row.get("current_story"),
        current_story_id=(
            int(current_story_id) if current_story_id is not None else None
        ),
        active=bool(row.get("active", True)),
        revealed=bool(row.get("revealed", False)),
        created_at=parse_timestamp(row.get("created_at")),
    )
