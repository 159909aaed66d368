"""Read-mostly HTTP endpoints over planning poker sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, status

from planning_poker.api.models import CreateSessionRequest  # noqa: TC001
from planning_poker.domain.errors import PlanningPokerError
from planning_poker.services.payloads import (
    serialize_participant,
    serialize_session,
    serialize_vote,
)

if TYPE_CHECKING:
    from planning_poker.containers import AppContainer
    from planning_poker.domain.models import SessionRecord

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _require_session(container: AppContainer, session_id: str) -> SessionRecord:
    session = container.session_service.get_session(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
        )
    return session


@router.get("")
async def list_sessions(request: Request) -> dict[str, object]:
    """Return all sessions."""
    container = _container(request)
    return {
        "sessions": [
            serialize_session(session)
            for session in container.session_service.list_sessions()
        ]
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_session(
    body: CreateSessionRequest, request: Request
) -> dict[str, object]:
    """Create a session without joining it."""
    container = _container(request)
    try:
        session = container.session_service.create_session(
            name=body.name,
            created_by=body.created_by,
            voting_system=body.voting_system.value,
            session_id=body.id,
            current_story=body.current_story,
        )
    except PlanningPokerError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=exc.message
        ) from exc
    return {"session": serialize_session(session)}


@router.get("/{session_id}")
async def get_session(session_id: str, request: Request) -> dict[str, object]:
    """Return one session."""
    session = _require_session(_container(request), session_id)
    return {"session": serialize_session(session)}


@router.get("/{session_id}/participants")
async def list_participants(session_id: str, request: Request) -> dict[str, object]:
    """Return the participants of a session."""
    container = _container(request)
    _require_session(container, session_id)
    participants = container.session_service.list_participants(session_id)
    return {"participants": [serialize_participant(item) for item in participants]}


@router.get("/{session_id}/votes")
async def list_votes(session_id: str, request: Request) -> dict[str, object]:
    """Return a session's votes once they have been revealed."""
    container = _container(request)
    session = _require_session(container, session_id)
    if not session.revealed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Votes have not been revealed yet",
        )
    votes = container.voting_service.list_votes(session_id)
    return {"votes": [serialize_vote(vote) for vote in votes]}
