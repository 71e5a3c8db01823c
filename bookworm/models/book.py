"""
Book Model

The catalog entity, plus the book_genres association table.

Derived Fields
==============
Three columns are never written by a user action directly:
- ratings_average / ratings_count: recomputed from approved reviews by
  bookworm.services.ratings after every review mutation
- total_shelved: incremented/decremented as library entries are created
  and removed

The request schemas in bookworm.schemas.book do not accept them.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookworm.database import Base

if TYPE_CHECKING:
    from bookworm.models.genre import Genre
    from bookworm.models.library import LibraryEntry
    from bookworm.models.review import Review


# =============================================================================
# Association Tables
# =============================================================================

book_genres = Table(
    "book_genres",
    Base.metadata,
    Column(
        "book_id",
        Integer,
        ForeignKey("books.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "genre_id",
        Integer,
        ForeignKey("genres.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    comment="Association table linking books to their genres",
)


class Book(Base):
    """
    Book model representing a title in the shared catalog.

    Table: books

    Relationships:
    - genres: Many-to-Many, ordered by genre id. The first genre is the
      book's primary genre (used in recommendation reasons).
    - reviews: One-to-Many
    - library_entries: One-to-Many

    Example:
        book = Book(
            title="The Hobbit",
            author="J.R.R. Tolkien",
            publish_year=1937,
            genres=[fantasy],
        )
    """

    __tablename__ = "books"

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Basic Fields
    # -------------------------------------------------------------------------
    title: Mapped[str] = mapped_column(
        String(500),
        index=True,
        nullable=False,
        comment="Book title"
    )

    author: Mapped[str] = mapped_column(
        String(255),
        index=True,
        nullable=False,
        comment="Author name as printed on the cover"
    )

    isbn: Mapped[str | None] = mapped_column(
        String(20),
        index=True,
        nullable=True,
        comment="International Standard Book Number"
    )

    olid: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True,
        comment="Open Library work/edition id"
    )

    cover_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Open Library cover id"
    )

    cover_image: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="URL of an uploaded cover image"
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Book description or summary"
    )

    publish_year: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Year of first publication"
    )

    page_count: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Number of pages in the book"
    )

    # -------------------------------------------------------------------------
    # Derived Aggregates
    # -------------------------------------------------------------------------
    ratings_average: Mapped[float] = mapped_column(
        Float,
        default=0.0,
        nullable=False,
        index=True,
        comment="Mean rating of approved reviews (0 when none)"
    )

    ratings_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Number of approved reviews"
    )

    total_shelved: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Number of library entries referencing this book"
    )

    created_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    genres: Mapped[list["Genre"]] = relationship(
        "Genre",
        secondary=book_genres,
        back_populates="books",
        order_by="Genre.id",
    )

    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="book",
        cascade="all, delete-orphan",
    )

    library_entries: Mapped[list["LibraryEntry"]] = relationship(
        "LibraryEntry",
        back_populates="book",
        cascade="all, delete-orphan",
    )

    @property
    def primary_genre(self) -> "Genre | None":
        """First genre of the book, or None for an untagged book."""
        return self.genres[0] if self.genres else None

    def __repr__(self) -> str:
        return f"Book(id={self.id}, title='{self.title}')"
