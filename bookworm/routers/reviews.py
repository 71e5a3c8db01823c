"""
Reviews Router

Public reviews and their moderation.

Endpoints:
- GET /reviews - List reviews (approved only, unless the caller is an admin)
- POST /reviews - Review a book
- GET /reviews/{review_id} - Get one review
- PUT /reviews/{review_id} - Edit your own review
- PUT /reviews/{review_id}/status - Moderate a review (admin)
- DELETE /reviews/{review_id} - Delete your own review (or any, as admin)

Every change that can affect a book's approved reviews is flushed, then
committed by the rating recompute, under the book's rating lock. A failed
recompute rolls the change back and answers 503.
"""

import logging
import math
from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException, Query, Request, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from bookworm.config import get_settings
from bookworm.dependencies import ActiveUser, AdminUser, DbSession, Pagination
from bookworm.models import ActivityType, Review, ReviewStatus
from bookworm.routers.books import get_book_or_404
from bookworm.schemas import (
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewStatusUpdate,
    ReviewUpdate,
)
from bookworm.services.rate_limiter import limiter
from bookworm.services.ratings import book_rating_lock, recalculate_book_rating
from bookworm.services.social import record_activity

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/reviews",
    tags=["Reviews"],
    responses={
        401: {"description": "Not authenticated"},
        404: {"description": "Review or book not found"},
    },
)


# =============================================================================
# Helper Functions
# =============================================================================


def get_review_or_404(db: Session, review_id: int) -> Review:
    """Get a review by ID with user and book loaded, or raise 404."""
    stmt = (
        select(Review)
        .options(selectinload(Review.user), selectinload(Review.book))
        .where(Review.id == review_id)
    )
    review = db.execute(stmt).scalar_one_or_none()

    if review is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Review with id {review_id} not found",
        )
    return review


# =============================================================================
# Read Endpoints
# =============================================================================


@router.get(
    "/",
    response_model=ReviewListResponse,
    summary="List reviews",
    description="""
    Paginated reviews, newest first.

    Regular users only ever see **approved** reviews. Admins see every
    review and may filter with `status`.
    """,
)
@limiter.limit(settings.rate_limit_default)
def list_reviews(
    request: Request,
    db: DbSession,
    current_user: ActiveUser,
    pagination: Pagination,
    book_id: int | None = Query(default=None, ge=1, description="Only reviews of this book"),
    review_status: ReviewStatus | None = Query(
        default=None,
        alias="status",
        description="Moderation state filter (admins only)",
    ),
) -> ReviewListResponse:
    base_stmt = select(Review)

    if book_id is not None:
        base_stmt = base_stmt.where(Review.book_id == book_id)

    if not current_user.is_superuser:
        base_stmt = base_stmt.where(Review.status == ReviewStatus.APPROVED.value)
    elif review_status is not None:
        base_stmt = base_stmt.where(Review.status == review_status.value)

    count_stmt = select(func.count()).select_from(base_stmt.subquery())
    total = db.execute(count_stmt).scalar() or 0
    pages = math.ceil(total / pagination.per_page) if total > 0 else 0

    stmt = (
        base_stmt
        .options(selectinload(Review.user), selectinload(Review.book))
        .order_by(Review.created_at.desc(), Review.id.desc())
        .offset(pagination.skip)
        .limit(pagination.per_page)
    )
    reviews = db.execute(stmt).scalars().all()

    return ReviewListResponse(
        items=[ReviewResponse.model_validate(r) for r in reviews],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pages,
    )


@router.get(
    "/{review_id}",
    response_model=ReviewResponse,
    summary="Get a review by ID",
)
@limiter.limit(settings.rate_limit_default)
def get_review(
    request: Request,
    review_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> ReviewResponse:
    """
    Get one review.

    Unapproved reviews are only visible to their author and to admins.
    """
    review = get_review_or_404(db, review_id)

    visible = (
        review.status == ReviewStatus.APPROVED.value
        or review.user_id == current_user.id
        or current_user.is_superuser
    )
    if not visible:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Review with id {review_id} not found",
        )
    return ReviewResponse.model_validate(review)


# =============================================================================
# Write Endpoints
# =============================================================================


@router.post(
    "/",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a review",
    description="Review a book. One review per book per user.",
)
@limiter.limit(settings.rate_limit_write)
def create_review(
    request: Request,
    review_data: ReviewCreate,
    db: DbSession,
    current_user: ActiveUser,
) -> ReviewResponse:
    """
    Create a review.

    New reviews start in the configured default status (pending unless
    REVIEW_DEFAULT_STATUS says otherwise) and only count towards the book's
    rating once approved.

    Raises:
        HTTPException: 404 if the book does not exist
        HTTPException: 400 if the user already reviewed this book
    """
    book = get_book_or_404(db, review_data.book_id)

    existing_stmt = select(Review.id).where(
        Review.book_id == book.id,
        Review.user_id == current_user.id,
    )
    if db.execute(existing_stmt).first() is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You have already reviewed this book. You can update your existing review.",
        )

    with book_rating_lock(book.id):
        review = Review(
            book_id=book.id,
            user_id=current_user.id,
            rating=review_data.rating,
            comment=review_data.comment,
            status=settings.review_default_status,
        )
        db.add(review)
        db.flush()

        record_activity(
            db,
            current_user.id,
            ActivityType.REVIEWED_BOOK,
            book_id=book.id,
            details={"rating": review.rating},
        )
        db.flush()

        recalculate_book_rating(db, book.id)

    logger.info(f"Review {review.id} created by user {current_user.id} for book {book.id}")
    return ReviewResponse.model_validate(get_review_or_404(db, review.id))


@router.put(
    "/{review_id}",
    response_model=ReviewResponse,
    summary="Update a review",
    description="Update your own review. Only the review author can update.",
)
@limiter.limit(settings.rate_limit_write)
def update_review(
    request: Request,
    review_id: int,
    review_data: ReviewUpdate,
    db: DbSession,
    current_user: ActiveUser,
) -> ReviewResponse:
    """
    Update an existing review.

    Raises:
        HTTPException: 404 if review not found
        HTTPException: 403 if user is not the review author
    """
    review = get_review_or_404(db, review_id)

    if review.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only update your own reviews",
        )

    update_data = review_data.model_dump(exclude_unset=True, exclude_none=True)

    with book_rating_lock(review.book_id):
        for field, value in update_data.items():
            setattr(review, field, value)
        db.flush()

        recalculate_book_rating(db, review.book_id)

    return ReviewResponse.model_validate(get_review_or_404(db, review_id))


@router.put(
    "/{review_id}/status",
    response_model=ReviewResponse,
    summary="Moderate a review",
    description="Approve, reject or reset a review to pending. Admin only.",
)
@limiter.limit(settings.rate_limit_write)
def moderate_review(
    request: Request,
    review_id: int,
    status_data: ReviewStatusUpdate,
    db: DbSession,
    current_user: AdminUser,
) -> ReviewResponse:
    review = get_review_or_404(db, review_id)
    previous = review.status

    with book_rating_lock(review.book_id):
        review.status = status_data.status.value
        review.moderated_by_id = current_user.id
        review.moderated_at = datetime.now(UTC)
        db.flush()

        recalculate_book_rating(db, review.book_id)

    logger.info(
        f"Review {review_id} moved from {previous} to {status_data.status.value} "
        f"by admin {current_user.id}"
    )
    return ReviewResponse.model_validate(get_review_or_404(db, review_id))


@router.delete(
    "/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a review",
    description="Delete a review. Only the review author or admins can delete.",
)
@limiter.limit(settings.rate_limit_write)
def delete_review(
    request: Request,
    review_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> None:
    """
    Delete a review.

    Raises:
        HTTPException: 404 if review not found
        HTTPException: 403 if user cannot delete this review
    """
    review = get_review_or_404(db, review_id)

    if review.user_id != current_user.id and not current_user.is_superuser:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete your own reviews",
        )

    book_id = review.book_id
    with book_rating_lock(book_id):
        db.delete(review)
        db.flush()

        recalculate_book_rating(db, book_id)

    logger.info(f"Review {review_id} deleted by user {current_user.id}")
