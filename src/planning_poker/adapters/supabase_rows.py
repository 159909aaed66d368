"""Row conversion helpers shared by the Supabase repositories."""

from datetime import UTC, datetime


def parse_timestamp(value: object) -> datetime:
    """Parse a Postgres timestamp returned by PostgREST."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.now(tz=UTC)


def encode_changes(changes: dict[str, object]) -> dict[str, object]:
    """Make a partial update JSON-serializable."""
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in changes.items()
    }
