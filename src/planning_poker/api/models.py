"""Pydantic models for the HTTP session endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from planning_poker.domain.voting import VotingSystem


class CreateSessionRequest(BaseModel):
    """Body of ``POST /api/sessions``."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(default=None, min_length=1)
    name: str = Field(min_length=1)
    created_by: str = Field(alias="createdBy", min_length=1)
    voting_system: VotingSystem = Field(
        default=VotingSystem.FIBONACCI, alias="votingSystem"
    )
    current_story: str | None = Field(default=None, alias="currentStory")
