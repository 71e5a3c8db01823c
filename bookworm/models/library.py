"""
Library Entry Model

One row per (user, book) pair: which shelf the book sits on and how far the
reader has got.

Business Rules:
- At most one entry per user per book (unique constraint)
- percentage is derived from pages_read / total_pages
- date_added is set at creation and never changed
- date_finished is set the first time the book lands on the read shelf
  (or reaches 100%) and is never overwritten or cleared afterwards
- updated_at is the last-modified timestamp the reading streak walks over
"""

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookworm.database import Base


class Shelf(str, Enum):
    """
    Reading-state buckets.

    The values are the wire names used by the clients.
    """
    WANT_TO_READ = "wantToRead"
    CURRENTLY_READING = "currentlyReading"
    READ = "read"


class LibraryEntry(Base):
    """
    A book on a user's shelf.

    Attributes:
        id: Primary key
        user_id: Owner of the entry
        book_id: Shelved book
        shelf: One of Shelf's values
        pages_read / total_pages / percentage: Reading progress
        personal_rating: Private 1-5 rating, distinct from public reviews
        date_added: When the book was first shelved
        date_finished: When the book was first finished
        created_at / updated_at: Row timestamps
    """

    __tablename__ = "library_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    book_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    shelf: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
        comment="wantToRead, currentlyReading or read",
    )

    # Progress
    pages_read: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_pages: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    percentage: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Derived from pages_read / total_pages",
    )

    personal_rating: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Private rating from 1-5 stars",
    )

    date_added: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    date_finished: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    user = relationship("User", back_populates="library_entries")
    book = relationship("Book", back_populates="library_entries")

    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_library_user_book"),
        CheckConstraint("pages_read >= 0", name="ck_library_pages_read"),
        CheckConstraint("total_pages >= 0", name="ck_library_total_pages"),
        CheckConstraint(
            "percentage >= 0 AND percentage <= 100",
            name="ck_library_percentage_range",
        ),
        CheckConstraint(
            "personal_rating IS NULL OR (personal_rating >= 1 AND personal_rating <= 5)",
            name="ck_library_personal_rating_range",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<LibraryEntry(id={self.id}, user_id={self.user_id}, "
            f"book_id={self.book_id}, shelf={self.shelf})>"
        )
