"""Supabase-backed vote repository."""

from dataclasses import dataclass

from supabase import Client

from planning_poker.adapters.supabase_rows import parse_timestamp
from planning_poker.domain.models import VoteRecord
from planning_poker.services.voting import VoteRepository

_COLUMNS = "id, session_id, participant_id, value, story_id, created_at"


@dataclass
class SupabaseVoteRepository(VoteRepository):
    """Supabase implementation for votes, one row per participant."""

    client: Client

    def upsert_vote(
        self,
        session_id: str,
        participant_id: int,
        value: str,
        story_id: int | None,
    ) -> VoteRecord:
        """Insert or overwrite a vote via the (session, participant) unique key."""
        response = (
            self.client.table("votes")
            .upsert(
                {
                    "session_id": session_id,
                    "participant_id": participant_id,
                    "value": value,
                    "story_id": story_id,
                },
                on_conflict="session_id,participant_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to cast vote")
        return _parse_vote(response.data[0])

    def get_vote(self, session_id: str, participant_id: int) -> VoteRecord | None:
        """Return a participant's vote, if present."""
        response = (
            self.client.table("votes")
            .select(_COLUMNS)
            .eq("session_id", session_id)
            .eq("participant_id", participant_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_vote(response.data[0])

    def list_votes(self, session_id: str) -> list[VoteRecord]:
        """Return all votes of a session."""
        response = (
            self.client.table("votes")
            .select(_COLUMNS)
            .eq("session_id", session_id)
            .order("id")
            .execute()
        )
        return [_parse_vote(row) for row in response.data or []]

    def delete_votes(self, session_id: str) -> None:
        """Delete all votes of a session."""
        self.client.table("votes").delete().eq("session_id", session_id).execute()


def _parse_vote(row: dict[str, object]) -> VoteRecord:
    story_id = row.get("story_id")
    return VoteRecord(
        id=int(row["id"]),
        session_id=str(row["session_id"]),
        participant_id=int(row["participant_id"]),
        value=str(row["value"]),
        story_id=int(story_id) if story_id is not None else None,
        created_at=parse_timestamp(row.get("created_at")),
    )
