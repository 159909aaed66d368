"""Tests for the SQL migration files."""

import re
from pathlib import Path

MIGRATIONS = Path(__file__).resolve().parents[1] / "migrations"
MIGRATION = MIGRATIONS / "0001_planning_poker.sql"


def _statements() -> list[str]:
    text = MIGRATION.read_text()
    text = re.sub(r"do \$\$.*?\$\$;", "", text, flags=re.DOTALL)
    return [item.strip() for item in text.split(";") if item.strip()]


def test_create_statements_are_rerunnable() -> None:
    for statement in _statements():
        if statement.startswith("create"):
            assert "if not exists" in statement, statement


def test_constraints_are_added_inside_guarded_blocks() -> None:
    assert all("alter table" not in statement for statement in _statements())
    blocks = re.findall(r"do \$\$(.*?)\$\$;", MIGRATION.read_text(), flags=re.DOTALL)
    assert blocks
    for block in blocks:
        assert "when duplicate_object then null" in block


def test_votes_are_unique_per_participant() -> None:
    assert "unique (session_id, participant_id)" in MIGRATION.read_text()
