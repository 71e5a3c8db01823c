"""
Activity Model

Social events shown in the feed of a user's followers.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookworm.database import Base


class ActivityType(str, Enum):
    """Kinds of events recorded in the activity feed."""
    ADDED_BOOK = "added_book"
    REVIEWED_BOOK = "reviewed_book"
    UPDATED_PROGRESS = "updated_progress"
    FOLLOWED_USER = "followed_user"


class Activity(Base):
    """
    Feed event.

    Table: activities

    A row belongs to the acting user; book_id and target_user_id are set
    depending on the event type. details carries free-form extras such as
    the shelf name or the progress percentage.
    """

    __tablename__ = "activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    book_id: Mapped[int | None] = mapped_column(
        ForeignKey("books.id", ondelete="SET NULL"),
        nullable=True,
    )
    target_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
    )
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    user = relationship("User", foreign_keys=[user_id])
    book = relationship("Book")
    target_user = relationship("User", foreign_keys=[target_user_id])

    __table_args__ = (
        # Feed queries filter by user and sort newest first
        Index("ix_activities_user_created", "user_id", "created_at"),
        Index("ix_activities_created", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Activity(id={self.id}, user_id={self.user_id}, type={self.type})>"
