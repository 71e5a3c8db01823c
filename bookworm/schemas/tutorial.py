"""
Tutorial Pydantic Schemas

category is free text; it defaults to "Getting Started".
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bookworm.models.tutorial import DEFAULT_TUTORIAL_CATEGORY, TutorialStatus


class TutorialBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, examples=["Tracking your progress"])
    description: str = Field(..., min_length=1, max_length=2000)
    content: str = Field(..., min_length=1)
    video_url: str | None = Field(default=None, max_length=2000)
    category: str = Field(
        default=DEFAULT_TUTORIAL_CATEGORY,
        min_length=1,
        max_length=100,
        examples=["Getting Started", "Library"],
    )

    @field_validator("title", "category")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Value cannot be empty or whitespace")
        return v.strip()


class TutorialCreate(TutorialBase):
    status: TutorialStatus = Field(default=TutorialStatus.DRAFT)


class TutorialUpdate(BaseModel):
    """All fields optional."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1, max_length=2000)
    content: str | None = Field(default=None, min_length=1)
    video_url: str | None = Field(default=None, max_length=2000)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    status: TutorialStatus | None = None


class TutorialResponse(TutorialBase):
    id: int
    status: TutorialStatus
    author_id: int
    views: int = Field(..., ge=0)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
