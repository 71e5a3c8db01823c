"""
Review Store
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookworm.exceptions import DataUnavailableError
from bookworm.models import Review

logger = logging.getLogger(__name__)


def find_by_book(
    db: Session,
    book_id: int,
    status: str | None = None,
) -> list[Review]:
    """
    Return the reviews of a book, optionally only those in one status.

    Raises:
        DataUnavailableError: If the query fails
    """
    stmt = select(Review).where(Review.book_id == book_id).order_by(Review.id)
    if status is not None:
        stmt = stmt.where(Review.status == status)

    try:
        return list(db.execute(stmt).scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Failed to load reviews of book {book_id}: {e}")
        raise DataUnavailableError("review lookup") from e
