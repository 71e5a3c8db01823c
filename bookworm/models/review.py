"""
Review Model

Represents a user's public review of a book: a 1-5 rating plus a comment.

Business Rules:
- One review per user per book, checked when a review is created
- Rating must be 1-5
- New reviews start as pending (configurable) and only approved reviews
  count towards the book's rating aggregates
- Admins moderate reviews; moderated_by / moderated_at record who and when
"""

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookworm.database import Base


class ReviewStatus(str, Enum):
    """Moderation states of a review."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Review(Base):
    """
    Review model for book reviews.

    Attributes:
        id: Primary key
        book_id: Foreign key to books table
        user_id: Foreign key to users table
        rating: 1-5 star rating
        comment: Review text
        status: pending, approved or rejected
        moderated_by_id: Admin who last changed the status
        moderated_at: When the status was last changed
        created_at: When the review was created
        updated_at: When the review was last updated
    """

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    book_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    rating: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Rating from 1-5 stars",
    )
    comment: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Review text content",
    )

    # Moderation fields
    status: Mapped[str] = mapped_column(
        String(20),
        default=ReviewStatus.PENDING.value,
        nullable=False,
        comment="pending, approved or rejected",
    )
    moderated_by_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    moderated_at: Mapped[datetime | None] = mapped_column(
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

    book = relationship("Book", back_populates="reviews")
    user = relationship("User", back_populates="reviews", foreign_keys=[user_id])
    moderated_by = relationship("User", foreign_keys=[moderated_by_id])

    __table_args__ = (
        Index("ix_reviews_book_user", "book_id", "user_id"),
        Index("ix_reviews_status", "status"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
    )

    def __repr__(self) -> str:
        return (
            f"<Review(id={self.id}, book_id={self.book_id}, user_id={self.user_id}, "
            f"rating={self.rating}, status={self.status})>"
        )
