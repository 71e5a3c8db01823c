"""
Genre Model

Represents a book genre/category in the database.

Genres drive two computations: the genre breakdown in a reader's enhanced
stats, and the favourite-genre filter in personalized recommendations.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookworm.database import Base

if TYPE_CHECKING:
    from bookworm.models.book import Book


class Genre(Base):
    """
    Genre model representing book categories.

    Table: genres

    Relationships:
    - books: Many-to-Many relationship through book_genres table

    Example:
        genre = Genre(name="Fantasy", description="Magic and other worlds")
    """

    __tablename__ = "genres"

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Basic Fields
    # -------------------------------------------------------------------------
    # unique=True prevents duplicate genre names
    name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=False,
        comment="Genre name (e.g., 'Fantasy', 'Mystery')"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Description of what this genre encompasses"
    )

    # -------------------------------------------------------------------------
    # Ownership
    # -------------------------------------------------------------------------
    created_by_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="Admin who created the genre"
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
    books: Mapped[List["Book"]] = relationship(
        "Book",
        secondary="book_genres",
        back_populates="genres",
    )

    def __repr__(self) -> str:
        return f"Genre(id={self.id}, name='{self.name}')"
