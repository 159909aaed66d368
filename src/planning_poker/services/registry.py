"""Runtime index of which connection belongs to which session."""

from dataclasses import dataclass, field
from typing import Protocol

from planning_poker.domain.models import ParticipantRecord


class Connection(Protocol):
    """A live bidirectional transport to one client."""

    @property
    def is_open(self) -> bool:
        """Return true while messages can still be sent."""

    async def send_text(self, data: str) -> None:
        """Send one text frame."""


@dataclass
class RegistryEntry:
    """Binds a connection to an optional participant and session."""

    connection: Connection
    participant: ParticipantRecord | None = None
    session_id: str | None = None

    @property
    def is_bound(self) -> bool:
        """Return true when the connection has joined a session."""
        return self.participant is not None and self.session_id is not None


@dataclass
class ConnectionRegistry:
    """Maps live connections to sessions; owned by the app container."""

    _entries: dict[Connection, RegistryEntry] = field(default_factory=dict)
    _sessions: dict[str, set[Connection]] = field(default_factory=dict)

    def register(self, connection: Connection) -> RegistryEntry:
        """Create an unbound entry for a new connection."""
        entry = self._entries.get(connection)
        if entry is None:
            entry = RegistryEntry(connection=connection)
            self._entries[connection] = entry
        return entry

    def get(self, connection: Connection) -> RegistryEntry | None:
        """Return the entry of a connection, if registered."""
        return self._entries.get(connection)

    def bind(
        self, connection: Connection, participant: ParticipantRecord, session_id: str
    ) -> RegistryEntry:
        """Attach a participant and session to a registered connection."""
        owner = self.find_participant(participant.id)
        if owner is not None and owner.connection is not connection:
            raise ValueError(f"Participant {participant.id} is already bound")
        entry = self.register(connection)
        self._detach(entry)
        entry.participant = participant
        entry.session_id = session_id
        self._sessions.setdefault(session_id, set()).add(connection)
        return entry

    def unbind(self, connection: Connection) -> RegistryEntry | None:
        """Clear the identity of a connection but keep it registered."""
        entry = self._entries.get(connection)
        if entry is None:
            return None
        self._detach(entry)
        entry.participant = None
        entry.session_id = None
        return entry

    def remove(self, connection: Connection) -> RegistryEntry | None:
        """Forget a connection; returns its last entry."""
        entry = self._entries.pop(connection, None)
        if entry is not None:
            self._detach(entry)
        return entry

    def entries(self) -> list[RegistryEntry]:
        """Return a snapshot of every registered entry."""
        return list(self._entries.values())

    def entries_for_session(self, session_id: str) -> list[RegistryEntry]:
        """Return a snapshot of the entries bound to a session."""
        connections = self._sessions.get(session_id, set())
        return [self._entries[connection] for connection in list(connections)]

    def find_participant(self, participant_id: int) -> RegistryEntry | None:
        """Return the entry bound to a participant, if any."""
        for entry in self._entries.values():
            if entry.participant is not None and entry.participant.id == participant_id:
                return entry
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, connection: object) -> bool:
        return connection in self._entries

    def _detach(self, entry: RegistryEntry) -> None:
        if entry.session_id is None:
            return
        members = self._sessions.get(entry.session_id)
        if members is None:
            return
        members.discard(entry.connection)
        if not members:
            del self._sessions[entry.session_id]
