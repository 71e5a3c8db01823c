"""
Tutorial Model

Admin-written help articles. Readers only see published tutorials.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookworm.database import Base


class TutorialStatus(str, Enum):
    """Publication state of a tutorial."""
    DRAFT = "draft"
    PUBLISHED = "published"


DEFAULT_TUTORIAL_CATEGORY = "Getting Started"


class Tutorial(Base):
    """
    Tutorial article.

    Table: tutorials

    category is free text; DEFAULT_TUTORIAL_CATEGORY is used when the
    author leaves it out.
    """

    __tablename__ = "tutorials"

    id: Mapped[int] = mapped_column(primary_key=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    video_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(
        String(100),
        default=DEFAULT_TUTORIAL_CATEGORY,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=TutorialStatus.DRAFT.value,
        nullable=False,
    )
    author_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

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

    author = relationship("User")

    __table_args__ = (
        Index("ix_tutorials_status_category", "status", "category"),
    )

    def __repr__(self) -> str:
        return f"Tutorial(id={self.id}, title='{self.title}', status={self.status})"
