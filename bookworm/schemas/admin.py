"""
Admin Pydantic Schemas
"""

from pydantic import BaseModel, Field

from bookworm.schemas.user import UserResponse


class AdminStatsResponse(BaseModel):
    """Dashboard counters."""

    total_books: int = Field(..., ge=0)
    total_users: int = Field(..., ge=0)
    pending_reviews: int = Field(..., ge=0)
    new_users_this_month: int = Field(..., ge=0)


class UserListResponse(BaseModel):
    items: list[UserResponse]
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    per_page: int = Field(..., ge=1, le=100)
    pages: int = Field(..., ge=0)
