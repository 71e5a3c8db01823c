"""
User Model

Represents a reader account. Users build a library of shelved books,
write reviews, set reading goals, and follow each other.

The follow graph is a self-referential many-to-many relationship stored in
the user_follows association table:
- user.following: users this user follows
- user.followers: users following this user
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
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
    from bookworm.models.library import LibraryEntry
    from bookworm.models.review import Review


# =============================================================================
# Association Table
# =============================================================================
# A row (follower_id, followed_id) means follower_id follows followed_id.

user_follows = Table(
    "user_follows",
    Base.metadata,
    Column(
        "follower_id",
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "followed_id",
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    comment="Follow graph between users",
)


class User(Base):
    """
    User model representing registered readers.

    Table: users

    Relationships:
    - library_entries: One-to-Many with LibraryEntry
    - reviews: One-to-Many with Review
    - following / followers: self-referential Many-to-Many

    Example:
        user = User(
            email="jane@example.com",
            username="jane",
            hashed_password=hash_password("SecurePass123"),
        )
    """

    __tablename__ = "users"

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Authentication Fields
    # -------------------------------------------------------------------------
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
        comment="User's email address (used for login)"
    )

    hashed_password: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Bcrypt hashed password"
    )

    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        index=True,
        nullable=False,
        comment="Unique username for profile URLs"
    )

    # -------------------------------------------------------------------------
    # Profile Fields
    # -------------------------------------------------------------------------
    full_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="User's full display name"
    )

    avatar_url: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="URL to user's avatar image"
    )

    bio: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="User biography"
    )

    # -------------------------------------------------------------------------
    # Account Status
    # -------------------------------------------------------------------------
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="Whether the account is active"
    )

    is_superuser: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        comment="Whether user has admin privileges"
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="When the user registered"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the user last logged in"
    )

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    library_entries: Mapped[list["LibraryEntry"]] = relationship(
        "LibraryEntry",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="user",
        cascade="all, delete-orphan",
        foreign_keys="Review.user_id",
    )

    following: Mapped[list["User"]] = relationship(
        "User",
        secondary=user_follows,
        primaryjoin=lambda: User.id == user_follows.c.follower_id,
        secondaryjoin=lambda: User.id == user_follows.c.followed_id,
        back_populates="followers",
    )

    followers: Mapped[list["User"]] = relationship(
        "User",
        secondary=user_follows,
        primaryjoin=lambda: User.id == user_follows.c.followed_id,
        secondaryjoin=lambda: User.id == user_follows.c.follower_id,
        back_populates="following",
    )

    @property
    def role(self) -> str:
        """Role name exposed to admin screens."""
        return "admin" if self.is_superuser else "user"

    def __repr__(self) -> str:
        return f"User(id={self.id}, email='{self.email}', username='{self.username}')"
