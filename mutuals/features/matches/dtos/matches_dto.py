"""Matches data transfer objects."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class MatchedUserDto(BaseModel):
    """A matched user and the time the match was made."""

    user_id: UUID
    email: str
    match_created_at: datetime


class RefreshMatchesResponse(BaseModel):
    """Response model for a refreshed matched-users set."""

    user_id: UUID
    added: list[UUID] = Field(default_factory=list)
    removed: list[UUID] = Field(default_factory=list)
    matched_users: list[MatchedUserDto] = Field(default_factory=list)
