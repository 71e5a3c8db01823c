"""
Admin Router

Dashboard counters and user management. Every endpoint requires an admin.
"""

import logging
import math
from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy import func, select

from bookworm.config import get_settings
from bookworm.dependencies import AdminUser, DbSession, Pagination
from bookworm.models import Book, Review, ReviewStatus, User
from bookworm.schemas import AdminStatsResponse, RoleUpdate, UserListResponse, UserResponse
from bookworm.services.rate_limiter import limiter
from bookworm.services.ratings import book_rating_lock, recalculate_book_rating
from bookworm.stores import catalog as catalog_store

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Admin privileges required"},
    },
)


def get_user_or_404(db: DbSession, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with id {user_id} not found",
        )
    return user


@router.get(
    "/stats",
    response_model=AdminStatsResponse,
    summary="Dashboard counters",
)
@limiter.limit(settings.rate_limit_default)
def get_admin_stats(
    request: Request,
    db: DbSession,
    current_user: AdminUser,
) -> AdminStatsResponse:
    now = datetime.now(UTC)
    start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    total_books = db.execute(select(func.count(Book.id))).scalar_one()
    total_users = db.execute(select(func.count(User.id))).scalar_one()
    pending_reviews = db.execute(
        select(func.count(Review.id)).where(Review.status == ReviewStatus.PENDING.value)
    ).scalar_one()
    new_users_this_month = db.execute(
        select(func.count(User.id)).where(User.created_at >= start_of_month)
    ).scalar_one()

    return AdminStatsResponse(
        total_books=total_books,
        total_users=total_users,
        pending_reviews=pending_reviews,
        new_users_this_month=new_users_this_month,
    )


@router.get(
    "/users",
    response_model=UserListResponse,
    summary="List users",
    description="Paginated accounts, newest first.",
)
@limiter.limit(settings.rate_limit_default)
def list_users(
    request: Request,
    db: DbSession,
    current_user: AdminUser,
    pagination: Pagination,
) -> UserListResponse:
    total = db.execute(select(func.count(User.id))).scalar() or 0
    pages = math.ceil(total / pagination.per_page) if total > 0 else 0

    stmt = (
        select(User)
        .order_by(User.created_at.desc(), User.id.desc())
        .offset(pagination.skip)
        .limit(pagination.per_page)
    )
    users = db.execute(stmt).scalars().all()

    return UserListResponse(
        items=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pages,
    )


@router.put(
    "/users/{user_id}/role",
    response_model=UserResponse,
    summary="Change a user's role",
    responses={400: {"description": "Admins cannot change their own role"}},
)
@limiter.limit(settings.rate_limit_write)
def update_user_role(
    request: Request,
    user_id: int,
    role_data: RoleUpdate,
    db: DbSession,
    current_user: AdminUser,
) -> UserResponse:
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot change your own role",
        )

    user = get_user_or_404(db, user_id)
    user.is_superuser = role_data.role == "admin"
    db.commit()
    db.refresh(user)

    logger.info(f"User {user_id} set to role '{role_data.role}' by admin {current_user.id}")
    return UserResponse.model_validate(user)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
    description="""
    Delete an account with its library and reviews. Shelf counts and
    rating aggregates of the affected books are updated.
    """,
    responses={400: {"description": "Admins cannot delete themselves"}},
)
@limiter.limit(settings.rate_limit_write)
def delete_user(
    request: Request,
    user_id: int,
    db: DbSession,
    current_user: AdminUser,
) -> None:
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account",
        )

    user = get_user_or_404(db, user_id)

    reviewed_book_ids = sorted({review.book_id for review in user.reviews})
    for entry in user.library_entries:
        catalog_store.increment_shelved_count(db, entry.book_id, -1)

    # Account removal and the rating recomputes commit as one unit
    with book_rating_lock(*reviewed_book_ids):
        db.delete(user)
        db.flush()

        for book_id in reviewed_book_ids:
            recalculate_book_rating(db, book_id, commit=False)
        db.commit()

    logger.info(f"User {user_id} deleted by admin {current_user.id}")
