"""
Social Pydantic Schemas

Follow lists, profiles and the activity feed.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from bookworm.models.activity import ActivityType
from bookworm.schemas.book import BookSummary
from bookworm.schemas.user import UserPublicResponse


class ProfileResponse(BaseModel):
    """Public profile with follow counts."""

    id: int
    username: str
    full_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    role: str
    created_at: datetime
    follower_count: int = Field(..., ge=0)
    following_count: int = Field(..., ge=0)
    is_following: bool = Field(..., description="Whether the caller follows this user")


class ActivityResponse(BaseModel):
    """One feed item."""

    id: int
    type: ActivityType
    user: UserPublicResponse
    book: BookSummary | None = None
    target_user: UserPublicResponse | None = None
    details: dict[str, Any] | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    message: str
