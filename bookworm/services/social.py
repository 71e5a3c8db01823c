"""
Social Service

The follow graph and the activity feed.

Activities are written by the flows that produce them (shelving a book,
reviewing, updating progress, following) through record_activity(), and
read back by followers through get_feed().
"""

import logging
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from bookworm.exceptions import NotFoundError, ValidationError
from bookworm.models import Activity, ActivityType, User, user_follows

logger = logging.getLogger(__name__)

FEED_DEFAULT_LIMIT = 20
FEED_MAX_LIMIT = 100
SEARCH_LIMIT = 20


def get_user(db: Session, user_id: int) -> User:
    """Return a user or raise NotFoundError."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


# =============================================================================
# Activity
# =============================================================================


def record_activity(
    db: Session,
    user_id: int,
    activity_type: ActivityType,
    book_id: int | None = None,
    target_user_id: int | None = None,
    details: dict[str, Any] | None = None,
) -> Activity:
    """
    Stage an activity row.

    The caller commits it together with the change it describes.
    """
    activity = Activity(
        user_id=user_id,
        type=activity_type.value,
        book_id=book_id,
        target_user_id=target_user_id,
        details=details,
    )
    db.add(activity)
    db.flush()
    return activity


def get_feed(db: Session, user: User, limit: int = FEED_DEFAULT_LIMIT) -> list[Activity]:
    """
    Return recent activities of the users `user` follows, newest first.

    limit is clamped to 1..FEED_MAX_LIMIT.
    """
    limit = max(1, min(limit, FEED_MAX_LIMIT))

    followed_ids = select(user_follows.c.followed_id).where(
        user_follows.c.follower_id == user.id
    )
    stmt = (
        select(Activity)
        .options(
            selectinload(Activity.user),
            selectinload(Activity.book),
            selectinload(Activity.target_user),
        )
        .where(Activity.user_id.in_(followed_ids))
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


# =============================================================================
# Follow Graph
# =============================================================================


def follow_user(db: Session, follower: User, target_id: int) -> User:
    """
    Make `follower` follow the user with id target_id.

    Raises:
        ValidationError: If following oneself or already following
        NotFoundError: If the target does not exist
    """
    if follower.id == target_id:
        raise ValidationError("Cannot follow yourself")

    target = get_user(db, target_id)

    if target in follower.following:
        raise ValidationError("Already following this user")

    follower.following.append(target)
    record_activity(
        db,
        follower.id,
        ActivityType.FOLLOWED_USER,
        target_user_id=target.id,
    )
    db.commit()

    logger.info(f"User {follower.id} followed user {target.id}")
    return target


def unfollow_user(db: Session, follower: User, target_id: int) -> None:
    """Stop following a user. Unfollowing someone not followed is a no-op."""
    target = db.get(User, target_id)
    if target is None or target not in follower.following:
        return

    follower.following.remove(target)
    db.commit()
    logger.info(f"User {follower.id} unfollowed user {target_id}")


def list_followers(db: Session, user_id: int) -> list[User]:
    return list(get_user(db, user_id).followers)


def list_following(db: Session, user_id: int) -> list[User]:
    return list(get_user(db, user_id).following)


# =============================================================================
# Discovery
# =============================================================================


def search_users(db: Session, query: str, exclude_user_id: int) -> list[User]:
    """
    Find users whose username or full name contains `query`.

    Case-insensitive; the caller is never in the results.

    Raises:
        ValidationError: If the query is blank
    """
    query = (query or "").strip()
    if not query:
        raise ValidationError("Search query is required")

    pattern = f"%{query}%"
    stmt = (
        select(User)
        .where(
            or_(User.username.ilike(pattern), User.full_name.ilike(pattern)),
            User.id != exclude_user_id,
        )
        .order_by(User.username)
        .limit(SEARCH_LIMIT)
    )
    return list(db.execute(stmt).scalars().all())


def get_profile(db: Session, user_id: int, viewer_id: int) -> dict[str, Any]:
    """
    Build a public profile with follow counts.

    is_following tells whether the viewer follows this user.
    """
    user = get_user(db, user_id)

    follower_count = db.execute(
        select(func.count()).select_from(user_follows).where(
            user_follows.c.followed_id == user_id
        )
    ).scalar_one()
    following_count = db.execute(
        select(func.count()).select_from(user_follows).where(
            user_follows.c.follower_id == user_id
        )
    ).scalar_one()
    is_following = db.execute(
        select(func.count()).select_from(user_follows).where(
            user_follows.c.follower_id == viewer_id,
            user_follows.c.followed_id == user_id,
        )
    ).scalar_one() > 0

    return {
        "id": user.id,
        "username": user.username,
        "full_name": user.full_name,
        "avatar_url": user.avatar_url,
        "bio": user.bio,
        "role": user.role,
        "created_at": user.created_at,
        "follower_count": follower_count,
        "following_count": following_count,
        "is_following": is_following,
    }
