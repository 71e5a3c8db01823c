"""
Catalog Store

Book lookups and the two derived-field writers: the shelving counter and
the rating aggregate. Nothing else in the codebase assigns those columns.
"""

import logging
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from bookworm.exceptions import DataUnavailableError
from bookworm.models import Book, Genre

logger = logging.getLogger(__name__)


# Popularity order shared by cold-start and personalized recommendations.
# id is the final tie-breaker so equal books always come back in one order.
POPULARITY_ORDER = (
    Book.ratings_average.desc(),
    Book.total_shelved.desc(),
    Book.id.asc(),
)


def get_book(db: Session, book_id: int) -> Book | None:
    """Return a book with its genres loaded, or None."""
    stmt = (
        select(Book)
        .options(selectinload(Book.genres))
        .where(Book.id == book_id)
    )
    try:
        return db.execute(stmt).scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Failed to load book {book_id}: {e}")
        raise DataUnavailableError("catalog lookup") from e


def find_books(
    db: Session,
    exclude_ids: Iterable[int] = (),
    genre_ids: Iterable[int] | None = None,
    min_average: float | None = None,
    limit: int | None = None,
) -> list[Book]:
    """
    Return catalog books sorted by popularity.

    Args:
        db: Database session
        exclude_ids: Book ids to leave out (e.g. the user's library)
        genre_ids: Keep only books tagged with at least one of these genres
        min_average: Keep only books rated at least this high
        limit: Maximum number of books

    Raises:
        DataUnavailableError: If the query fails
    """
    stmt = select(Book).options(selectinload(Book.genres))

    exclude_ids = list(exclude_ids)
    if exclude_ids:
        stmt = stmt.where(Book.id.not_in(exclude_ids))

    if genre_ids is not None:
        stmt = stmt.where(Book.genres.any(Genre.id.in_(list(genre_ids))))

    if min_average is not None:
        stmt = stmt.where(Book.ratings_average >= min_average)

    stmt = stmt.order_by(*POPULARITY_ORDER)

    if limit is not None:
        stmt = stmt.limit(limit)

    try:
        return list(db.execute(stmt).scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Catalog query failed: {e}")
        raise DataUnavailableError("catalog lookup") from e


def increment_shelved_count(db: Session, book_id: int, delta: int) -> None:
    """
    Adjust a book's total_shelved counter by delta.

    The counter never drops below zero.
    """
    try:
        book = db.get(Book, book_id)
        if book is None:
            return
        book.total_shelved = max(0, (book.total_shelved or 0) + delta)
        db.flush()
    except SQLAlchemyError as e:
        logger.error(f"Failed to update shelved count of book {book_id}: {e}")
        raise DataUnavailableError("catalog write") from e


def update_rating_aggregate(
    db: Session,
    book_id: int,
    average: float,
    count: int,
) -> None:
    """Write the rating aggregate of a book."""
    try:
        book = db.get(Book, book_id)
        if book is None:
            return
        book.ratings_average = average
        book.ratings_count = count
        db.flush()
    except SQLAlchemyError as e:
        logger.error(f"Failed to update rating aggregate of book {book_id}: {e}")
        raise DataUnavailableError("catalog write") from e
