"""Supabase-backed participant repository."""

from dataclasses import dataclass

from supabase import Client

from planning_poker.adapters.supabase_rows import encode_changes, parse_timestamp
from planning_poker.domain.models import ParticipantRecord
from planning_poker.services.sessions import ParticipantRepository

_COLUMNS = "id, session_id, name, is_admin, connected, last_activity"


@dataclass
class SupabaseParticipantRepository(ParticipantRepository):
    """Supabase implementation for session participants."""

    client: Client

    def create_participant(
        self, session_id: str, name: str, is_admin: bool
    ) -> ParticipantRecord:
        """Create a connected participant row and return it."""
        response = (
            self.client.table("participants")
            .insert(
                {
                    "session_id": session_id,
                    "name": name,
                    "is_admin": is_admin,
                    "connected": True,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create participant")
        return _parse_participant(response.data[0])

    def get_participant(self, participant_id: int) -> ParticipantRecord | None:
        """Return a participant by id, if present."""
        response = (
            self.client.table("participants")
            .select(_COLUMNS)
            .eq("id", participant_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_participant(response.data[0])

    def get_participant_by_name(
        self, session_id: str, name: str
    ) -> ParticipantRecord | None:
        """Return the participant with this name in a session."""
        response = (
            self.client.table("participants")
            .select(_COLUMNS)
            .eq("session_id", session_id)
            .eq("name", name)
            .order("id")
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_participant(response.data[0])

    def list_participants(self, session_id: str) -> list[ParticipantRecord]:
        """Return every participant of a session."""
        response = (
            self.client.table("participants")
            .select(_COLUMNS)
            .eq("session_id", session_id)
            .order("id")
            .execute()
        )
        return [_parse_participant(row) for row in response.data or []]

    def update_participant(
        self, participant_id: int, changes: dict[str, object]
    ) -> ParticipantRecord | None:
        """Update participant fields and return the new row."""
        response = (
            self.client.table("participants")
            .update(encode_changes(changes))
            .eq("id", participant_id)
            .execute()
        )
        if not response.data:
            return None
        return _parse_participant(response.data[0])

    def delete_participant(self, participant_id: int) -> bool:
        """Delete a participant row."""
        response = (
            self.client.table("participants")
            .delete()
            .eq("id", participant_id)
            .execute()
        )
        return bool(response.data)


def _parse_participant(row: dict[str, object]) -> ParticipantRecord:
    return ParticipantRecord(
        id=int(row["id"]),
        session_id=str(row["session_id"]),
        name=str(row["name"]),
        is_admin=bool(row.get("is_admin", False)),
        connected=bool(row.get("connected", True)),
        last_activity=parse_timestamp(row.get("last_activity")),
    )
