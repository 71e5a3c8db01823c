"""
Review Pydantic Schemas

Schemas:
- ReviewCreate: Create a new review
- ReviewUpdate: Owner edit (rating and/or comment)
- ReviewStatusUpdate: Admin moderation
- ReviewResponse: Review with author and book embedded
- ReviewListResponse: Paginated list of reviews

Business Rules:
- Rating must be 1-5 (validated at schema level)
- One review per user per book (checked when creating)
- Only approved reviews count towards a book's rating
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bookworm.models.review import ReviewStatus
from bookworm.schemas.book import BookSummary
from bookworm.schemas.user import UserPublicResponse


class ReviewBase(BaseModel):
    rating: int = Field(
        ...,
        ge=1,
        le=5,
        description="Rating from 1 to 5 stars",
        examples=[4, 5],
    )

    comment: str = Field(
        ...,
        min_length=1,
        max_length=5000,
        description="Review text",
        examples=["Slow start, but the last hundred pages are worth it."],
    )

    @field_validator("comment")
    @classmethod
    def comment_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Comment cannot be empty or whitespace")
        return v.strip()


class ReviewCreate(ReviewBase):
    """
    Example request body:
    {
        "book_id": 42,
        "rating": 5,
        "comment": "One of the best books I've ever read..."
    }
    """

    book_id: int = Field(..., ge=1, description="Book being reviewed")


class ReviewUpdate(BaseModel):
    """Owner edit. All fields optional."""

    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, min_length=1, max_length=5000)

    @field_validator("comment")
    @classmethod
    def comment_must_not_be_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Comment cannot be empty or whitespace")
        return v.strip() if v else v


class ReviewStatusUpdate(BaseModel):
    status: ReviewStatus = Field(..., description="pending, approved or rejected")


class ReviewResponse(ReviewBase):
    """
    Review as returned by the API.

    Includes the moderation state and minimal author and book data.
    """

    id: int = Field(..., description="Unique review identifier")
    book_id: int
    user_id: int
    status: ReviewStatus
    moderated_by_id: int | None = None
    moderated_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    user: UserPublicResponse = Field(..., description="User who wrote the review")
    book: BookSummary = Field(..., description="Book being reviewed")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "book_id": 42,
                "user_id": 7,
                "rating": 5,
                "comment": "A must-read.",
                "status": "approved",
                "moderated_by_id": 2,
                "moderated_at": "2024-01-16T09:00:00Z",
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-16T09:00:00Z",
                "user": {"id": 7, "username": "booklover", "full_name": "Jane Doe"},
                "book": {"id": 42, "title": "The Hobbit", "author": "J.R.R. Tolkien"},
            }
        },
    )


class ReviewListResponse(BaseModel):
    items: list[ReviewResponse] = Field(..., description="Reviews on this page")
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    per_page: int = Field(..., ge=1, le=100)
    pages: int = Field(..., ge=0)
