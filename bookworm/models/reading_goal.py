"""
Reading Goal Model

A user's target number of books for one calendar year.
"""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookworm.database import Base


class ReadingGoal(Base):
    """
    Yearly reading goal.

    Table: reading_goals

    Business Rules:
    - One goal per user per year (unique constraint)
    - target_books must be at least 1
    """

    __tablename__ = "reading_goals"

    id: Mapped[int] = mapped_column(primary_key=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    target_books: Mapped[int] = mapped_column(Integer, nullable=False)

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

    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("user_id", "year", name="uq_reading_goal_user_year"),
        CheckConstraint("target_books >= 1", name="ck_reading_goal_target"),
    )

    def __repr__(self) -> str:
        return f"ReadingGoal(user_id={self.user_id}, year={self.year}, target={self.target_books})"
