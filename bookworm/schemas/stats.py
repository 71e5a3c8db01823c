"""
Statistics Pydantic Schemas

These responses are consumed by the dashboard charts, which read camelCase
keys (totalBooks, byShelf, monthlyBooks, ...). Fields are declared in
snake_case and serialized through a camelCase alias generator; FastAPI
serializes response models by alias.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for responses serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShelfCounts(CamelModel):
    want_to_read: int = Field(..., ge=0)
    currently_reading: int = Field(..., ge=0)
    read: int = Field(..., ge=0)


class LibraryStatsResponse(CamelModel):
    """
    Library overview.

    Example:
    {
        "totalBooks": 12,
        "byShelf": {"wantToRead": 5, "currentlyReading": 2, "read": 5},
        "totalPagesRead": 1840,
        "booksCompletedThisYear": 4,
        "booksCompletedThisMonth": 1,
        "averageRating": 4.3
    }
    """

    total_books: int = Field(..., ge=0)
    by_shelf: ShelfCounts
    total_pages_read: int = Field(..., ge=0)
    books_completed_this_year: int = Field(..., ge=0)
    books_completed_this_month: int = Field(..., ge=0)
    average_rating: float = Field(
        ...,
        ge=0,
        le=5,
        description="Mean personal rating to one decimal, 0 when nothing is rated",
    )


class MonthlyCount(CamelModel):
    month: str = Field(..., description="Three-letter month name", examples=["Jan"])
    year: int
    count: int = Field(..., ge=0)


class GenreShare(CamelModel):
    genre: str
    count: int = Field(..., ge=0)
    percentage: int = Field(..., ge=0, le=100)


class EnhancedStatsResponse(CamelModel):
    """Chart data: 12 months of finished books, top genres and the streak."""

    monthly_books: list[MonthlyCount] = Field(..., min_length=12, max_length=12)
    genre_breakdown: list[GenreShare]
    reading_streak: int = Field(..., ge=0)
    books_this_year: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
