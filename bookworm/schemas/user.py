"""
User Pydantic Schemas

Schemas:
- UserCreate: Registration data (email, password, username)
- UserUpdate: Profile update fields
- UserResponse: The caller's own account (never exposes the password)
- UserPublicResponse: What other readers may see
- RoleUpdate: Admin role change
- TokenResponse / RefreshTokenRequest: JWT exchange
"""

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserBase(BaseModel):
    """Fields shared by registration and account responses."""

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["jane@example.com"],
    )

    username: str = Field(
        ...,
        min_length=3,
        max_length=50,
        description="Unique username (3-50 characters, alphanumeric and underscores)",
        examples=["jane_reads"],
    )

    @field_validator("username")
    @classmethod
    def username_must_be_valid(cls, v: str) -> str:
        """
        Validate username format.

        Rules:
        - Only letters, numbers and underscores
        - Must start with a letter
        """
        if not re.match(r"^[a-zA-Z][a-zA-Z0-9_]*$", v):
            raise ValueError(
                "Username must start with a letter and contain only "
                "letters, numbers, and underscores"
            )
        return v.lower()


class UserCreate(UserBase):
    """Registration payload with password strength validation."""

    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (min 8 chars, must include uppercase and number)",
        examples=["SecurePass123"],
    )

    full_name: str | None = Field(
        default=None,
        max_length=255,
        description="User's full display name",
        examples=["Jane Doe"],
    )

    @field_validator("password")
    @classmethod
    def password_must_be_strong(cls, v: str) -> str:
        """
        Validate password strength.

        Requirements:
        - At least 1 uppercase letter
        - At least 1 lowercase letter
        - At least 1 number
        """
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", v):
            raise ValueError("Password must contain at least one lowercase letter")
        if not re.search(r"\d", v):
            raise ValueError("Password must contain at least one number")
        return v


class UserUpdate(BaseModel):
    """Profile fields a reader may change. All optional."""

    full_name: str | None = Field(default=None, max_length=255)
    bio: str | None = Field(default=None, max_length=2000)
    avatar_url: str | None = Field(default=None, max_length=2000)


class UserResponse(BaseModel):
    """Account data returned to its owner and to admins."""

    id: int = Field(..., description="Unique user identifier")
    email: EmailStr = Field(..., description="User's email address")
    username: str = Field(..., description="Unique username")
    full_name: str | None = Field(default=None, description="User's display name")
    avatar_url: str | None = Field(default=None, description="URL to avatar image")
    bio: str | None = Field(default=None, description="User biography")
    is_active: bool = Field(..., description="Whether the account is active")
    role: Literal["user", "admin"] = Field(..., description="Account role")
    created_at: datetime = Field(..., description="When the user registered")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "email": "jane@example.com",
                "username": "jane_reads",
                "full_name": "Jane Doe",
                "avatar_url": None,
                "bio": "Mostly fantasy, sometimes history.",
                "is_active": True,
                "role": "user",
                "created_at": "2024-01-15T10:30:00Z",
            }
        },
    )


class UserPublicResponse(BaseModel):
    """Public profile data (no email, no account flags)."""

    id: int
    username: str
    full_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None

    model_config = ConfigDict(from_attributes=True)


class RoleUpdate(BaseModel):
    role: Literal["user", "admin"] = Field(..., description="New role")


# =============================================================================
# Token Schemas
# =============================================================================


class TokenResponse(BaseModel):
    """
    Returned by login and refresh.

    The refresh token itself travels in an httpOnly cookie.
    """

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Always 'bearer'")
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class RefreshTokenRequest(BaseModel):
    refresh_token: str | None = Field(
        default=None,
        description="Refresh token (optional when the cookie is present)",
    )
