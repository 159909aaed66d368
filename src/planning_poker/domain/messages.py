"""Websocket envelope and payload models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from planning_poker.domain.voting import VotingSystem


class MessageType(str, Enum):
    """Wire names of every event exchanged over the websocket."""

    JOIN_SESSION = "join_session"
    LEAVE_SESSION = "leave_session"
    PARTICIPANT_JOINED = "participant_joined"
    PARTICIPANT_LEFT = "participant_left"
    CAST_VOTE = "cast_vote"
    VOTE_UPDATED = "vote_updated"
    REVEAL_VOTES = "reveal_votes"
    VOTES_REVEALED = "votes_revealed"
    RESET_VOTING = "reset_voting"
    VOTING_RESET = "voting_reset"
    SET_STORY = "set_story"
    STORY_UPDATED = "story_updated"
    ADD_STORY = "add_story"
    STORY_ADDED = "story_added"
    UPDATE_STORY = "update_story"
    GET_STORIES = "get_stories"
    STORIES_UPDATED = "stories_updated"
    SET_CURRENT_STORY = "set_current_story"
    SESSION_UPDATE = "session_update"
    ERROR = "error"


class Envelope(BaseModel):
    """Typed message envelope: ``{type, payload}``."""

    type: str
    payload: dict[str, object] = Field(default_factory=dict)


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class JoinSessionPayload(_Payload):
    """Join an existing session or create one as admin."""

    session_id: str | None = Field(default=None, alias="sessionId")
    name: str | None = None
    is_admin: bool = Field(default=False, alias="isAdmin")
    voting_system: VotingSystem | None = Field(default=None, alias="votingSystem")
    session_name: str | None = Field(default=None, alias="sessionName")


class CastVotePayload(_Payload):
    """Cast or recast a vote."""

    value: str | None = None


class AddStoryPayload(_Payload):
    """Add a story to the session backlog."""

    title: str | None = None
    link: str | None = None


class UpdateStoryPayload(_Payload):
    """Edit a story's title and link."""

    story_id: int | None = Field(default=None, alias="storyId")
    title: str | None = None
    link: str | None = None


class SetCurrentStoryPayload(_Payload):
    """Select a persisted story for voting."""

    story_id: int | None = Field(default=None, alias="storyId")


class SetStoryPayload(_Payload):
    """Set free-text story, or update a story from ``"title (link)"`` text."""

    story: str | None = None
    story_id: int | None = Field(default=None, alias="storyId")
    update: bool = False
