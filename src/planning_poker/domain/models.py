"""Domain models for planning poker sessions."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class SessionRecord:
    """Represents a planning poker session."""

    id: str
    name: str
    created_by: str
    voting_system: str
    current_story: str | None
    current_story_id: int | None
    active: bool
    revealed: bool
    created_at: datetime


@dataclass(frozen=True)
class ParticipantRecord:
    """Represents a named occupant of a session."""

    id: int
    session_id: str
    name: str
    is_admin: bool
    connected: bool
    last_activity: datetime


@dataclass(frozen=True)
class StoryRecord:
    """Represents a unit of work offered for estimation."""

    id: int
    session_id: str
    title: str
    link: str
    is_completed: bool
    created_at: datetime

    @property
    def descriptor(self) -> str:
        """Return the display text used as a session's current story."""
        return f"{self.title} ({self.link})"


@dataclass(frozen=True)
class VoteRecord:
    """Represents one participant's estimate in a session."""

    id: int
    session_id: str
    participant_id: int
    value: str
    story_id: int | None
    created_at: datetime
