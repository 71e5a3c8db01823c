"""
Book Pydantic Schemas

Handles:
- ISBN validation
- Genre associations by id
- Pagination for list responses

ratings_average, ratings_count and total_shelved appear in responses only.
They are derived from reviews and library entries, so BookCreate and
BookUpdate do not accept them.
"""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bookworm.schemas.genre import GenreSummary


def _clean_isbn(v: str | None) -> str | None:
    """
    Validate an ISBN-10 or ISBN-13 and strip hyphens and spaces.

    ISBN-10 is 9 digits followed by a digit or X; ISBN-13 is 13 digits.
    """
    if v is None:
        return v

    cleaned = re.sub(r"[-\s]", "", v)

    if len(cleaned) == 10:
        if not re.match(r"^\d{9}[\dX]$", cleaned):
            raise ValueError(
                "Invalid ISBN-10 format. Must be 10 characters: "
                "9 digits followed by a digit or 'X'"
            )
    elif len(cleaned) == 13:
        if not cleaned.isdigit():
            raise ValueError("Invalid ISBN-13 format. Must be exactly 13 digits")
    else:
        raise ValueError("ISBN must be either 10 or 13 characters (excluding hyphens)")

    return cleaned


class BookBase(BaseModel):
    """Shared book fields."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Book title",
        examples=["The Hobbit"],
    )

    author: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Author name as printed on the cover",
        examples=["J.R.R. Tolkien"],
    )

    isbn: str | None = Field(
        default=None,
        max_length=20,
        description="ISBN-10 or ISBN-13",
        examples=["978-0547928227"],
    )

    olid: str | None = Field(default=None, max_length=32, description="Open Library id")
    cover_id: int | None = Field(default=None, description="Open Library cover id")
    cover_image: str | None = Field(default=None, description="Cover image URL")

    description: str | None = Field(
        default=None,
        max_length=5000,
        description="Book description or summary",
    )

    publish_year: int | None = Field(
        default=None,
        ge=0,
        le=9999,
        description="Year of first publication",
        examples=[1937],
    )

    page_count: int | None = Field(
        default=None,
        gt=0,
        le=50000,
        description="Number of pages",
        examples=[310],
    )

    @field_validator("isbn")
    @classmethod
    def validate_isbn(cls, v: str | None) -> str | None:
        return _clean_isbn(v)

    @field_validator("title", "author")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        """Validate and normalize title/author."""
        if not v.strip():
            raise ValueError("Value cannot be empty or whitespace")
        return v.strip()


class BookCreate(BookBase):
    """
    Schema for creating a new book.

    Example request body:
    {
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "genre_ids": [1, 3]
    }
    """

    genre_ids: list[int] | None = Field(
        default=None,
        description="Genre ids; the lowest id becomes the primary genre",
        examples=[[1, 3]],
    )


class BookUpdate(BaseModel):
    """Schema for updating an existing book. All fields optional."""

    title: str | None = Field(default=None, min_length=1, max_length=500)
    author: str | None = Field(default=None, min_length=1, max_length=255)
    isbn: str | None = Field(default=None, max_length=20)
    olid: str | None = Field(default=None, max_length=32)
    cover_id: int | None = None
    cover_image: str | None = None
    description: str | None = Field(default=None, max_length=5000)
    publish_year: int | None = Field(default=None, ge=0, le=9999)
    page_count: int | None = Field(default=None, gt=0, le=50000)
    genre_ids: list[int] | None = Field(
        default=None,
        description="Genre ids (replaces existing)",
    )

    @field_validator("isbn")
    @classmethod
    def validate_isbn(cls, v: str | None) -> str | None:
        return _clean_isbn(v)

    @field_validator("title", "author")
    @classmethod
    def must_not_be_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Value cannot be empty or whitespace")
        return v.strip() if v else v


class BookResponse(BookBase):
    """Book with its derived aggregates and genres."""

    id: int = Field(..., description="Unique identifier")

    ratings_average: float = Field(
        default=0.0,
        description="Mean rating of approved reviews (0 when none)",
    )
    ratings_count: int = Field(default=0, description="Number of approved reviews")
    total_shelved: int = Field(
        default=0,
        description="How many libraries contain this book",
    )

    genres: list[GenreSummary] = Field(default=[], description="Genres, primary first")

    created_at: datetime = Field(..., description="When the book was created")
    updated_at: datetime = Field(..., description="When the book was last updated")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "The Hobbit",
                "author": "J.R.R. Tolkien",
                "isbn": "9780547928227",
                "olid": None,
                "cover_id": None,
                "cover_image": None,
                "description": "Bilbo Baggins goes there and back again.",
                "publish_year": 1937,
                "page_count": 310,
                "ratings_average": 4.5,
                "ratings_count": 12,
                "total_shelved": 40,
                "genres": [{"id": 1, "name": "Fantasy"}],
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z",
            }
        },
    )


class BookSummary(BaseModel):
    """Minimal book info for embedding in reviews and feeds."""

    id: int
    title: str
    author: str
    cover_image: str | None = None

    model_config = ConfigDict(from_attributes=True)


class BookListResponse(BaseModel):
    """
    Paginated book list.

    - total: Total number of books matching the query
    - page / per_page: The requested window
    - pages: Total number of pages
    """

    items: list[BookResponse] = Field(..., description="Books on this page")
    total: int = Field(..., ge=0, description="Total number of books")
    page: int = Field(..., ge=1, description="Current page number")
    per_page: int = Field(..., ge=1, le=100, description="Items per page")
    pages: int = Field(..., ge=0, description="Total number of pages")
