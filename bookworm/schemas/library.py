"""
Library Pydantic Schemas

Schemas:
- LibraryEntryCreate: Put a book on a shelf
- LibraryEntryUpdate: Move shelf / set personal rating
- ProgressUpdate: Record pages read
- LibraryEntryResponse: Entry with its book embedded

Page counts are range-checked by the library service rather than here,
so a negative page count is a 400 with a readable message.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from bookworm.models.library import Shelf
from bookworm.schemas.book import BookResponse


class LibraryEntryCreate(BaseModel):
    """
    Example request body:
    {
        "book_id": 42,
        "shelf": "currentlyReading",
        "total_pages": 310
    }
    """

    book_id: int = Field(..., ge=1, description="Book to shelve")
    shelf: Shelf = Field(..., description="wantToRead, currentlyReading or read")
    total_pages: int | None = Field(
        default=None,
        description="Page count used for progress (defaults to the book's)",
    )


class LibraryEntryUpdate(BaseModel):
    shelf: Shelf | None = Field(default=None, description="New shelf")
    personal_rating: int | None = Field(
        default=None,
        ge=1,
        le=5,
        description="Private rating from 1 to 5 stars",
    )


class ProgressUpdate(BaseModel):
    pages_read: int = Field(..., description="Pages read so far")
    total_pages: int | None = Field(
        default=None,
        description="Optionally correct the page count at the same time",
    )


class LibraryEntryResponse(BaseModel):
    """A shelved book with the reader's progress."""

    id: int
    user_id: int
    book_id: int
    shelf: Shelf
    pages_read: int
    total_pages: int
    percentage: int = Field(..., ge=0, le=100)
    personal_rating: int | None = None
    date_added: datetime
    date_finished: datetime | None = Field(
        default=None,
        description="Set the first time the book was finished; never cleared",
    )
    updated_at: datetime
    book: BookResponse

    model_config = ConfigDict(from_attributes=True)


class LibraryListResponse(BaseModel):
    items: list[LibraryEntryResponse]
    total: int = Field(..., ge=0)
