"""Wire serialization of domain records (camelCase keys)."""

from planning_poker.domain.messages import MessageType
from planning_poker.domain.models import (
    ParticipantRecord,
    SessionRecord,
    StoryRecord,
    VoteRecord,
)


def message(message_type: MessageType, payload: dict[str, object]) -> dict[str, object]:
    """Wrap a payload in the ``{type, payload}`` envelope."""
    return {"type": message_type.value, "payload": payload}


def error_message(text: str) -> dict[str, object]:
    """Build the single error event type."""
    return message(MessageType.ERROR, {"message": text})


def serialize_session(session: SessionRecord) -> dict[str, object]:
    return {
        "id": session.id,
        "name": session.name,
        "createdBy": session.created_by,
        "votingSystem": session.voting_system,
        "currentStory": session.current_story,
        "currentStoryId": session.current_story_id,
        "active": session.active,
        "revealed": session.revealed,
        "createdAt": session.created_at.isoformat(),
    }


def serialize_participant(participant: ParticipantRecord) -> dict[str, object]:
    return {
        "id": participant.id,
        "sessionId": participant.session_id,
        "name": participant.name,
        "isAdmin": participant.is_admin,
        "connected": participant.connected,
        "lastActivity": participant.last_activity.isoformat(),
    }


def serialize_story(story: StoryRecord) -> dict[str, object]:
    return {
        "id": story.id,
        "sessionId": story.session_id,
        "title": story.title,
        "link": story.link,
        "isCompleted": story.is_completed,
        "createdAt": story.created_at.isoformat(),
    }


def serialize_vote(vote: VoteRecord) -> dict[str, object]:
    return {
        "id": vote.id,
        "sessionId": vote.session_id,
        "participantId": vote.participant_id,
        "value": vote.value,
        "storyId": vote.story_id,
        "createdAt": vote.created_at.isoformat(),
    }
