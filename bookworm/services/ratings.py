"""
Ratings Service

Maintains the derived rating fields on the Book model:
- ratings_average: mean rating of the book's approved reviews (0 when none)
- ratings_count: number of approved reviews

recalculate_book_rating() is the single place these fields are written.
It recomputes from scratch, so calling it twice is harmless, and it is run
after every review create, edit, moderation and delete.

The stored average is the exact mean. Rounding for display is left to the
client, so the recommendation rating floor compares against the real value.

Transactions:
=============
Callers stage the review change with flush() and let the recompute commit.
The review change and the new aggregate are therefore committed together;
if the recompute fails the whole unit is rolled back.

Serialization:
==============
Review flows hold book_rating_lock(book_id) around "mutate review, then
recompute", so two requests in the same process cannot interleave their
recomputes for one book. Locks come from a fixed pool indexed by book id.
Separate processes are not coordinated; there the last write wins.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager

from sqlalchemy import select
from sqlalchemy.orm import Session

from bookworm.exceptions import DataUnavailableError
from bookworm.models import Book, ReviewStatus
from bookworm.stores import catalog as catalog_store
from bookworm.stores import reviews as review_store

logger = logging.getLogger(__name__)

RATING_LOCK_POOL_SIZE = 64

_rating_locks = tuple(threading.Lock() for _ in range(RATING_LOCK_POOL_SIZE))


def _locks_for(book_ids: tuple[int, ...]) -> list[threading.Lock]:
    # One acquisition per slot, always in slot order
    slots = sorted({book_id % RATING_LOCK_POOL_SIZE for book_id in book_ids})
    return [_rating_locks[slot] for slot in slots]


@contextmanager
def book_rating_lock(*book_ids: int) -> Iterator[None]:
    """
    Hold the rating lock of every given book for the duration of the block.

    Usage:
        with book_rating_lock(review.book_id):
            review.rating = 5
            db.flush()
            recalculate_book_rating(db, review.book_id)
    """
    with ExitStack() as stack:
        for lock in _locks_for(book_ids):
            stack.enter_context(lock)
        yield


def compute_rating_aggregate(ratings: list[int]) -> tuple[float, int]:
    """
    Return (average, count) for a list of ratings.

    An empty list gives (0.0, 0).
    """
    if not ratings:
        return 0.0, 0
    return sum(ratings) / len(ratings), len(ratings)


def recalculate_book_rating(
    db: Session,
    book_id: int,
    commit: bool = True,
) -> tuple[float, int]:
    """
    Recalculate and store a book's rating aggregate.

    Only approved reviews are counted.

    Args:
        db: Database session
        book_id: ID of the book to update
        commit: Commit the session afterwards. Pass False to stage several
            recomputes and commit them together.

    Returns:
        The (average, count) that was written

    Raises:
        DataUnavailableError: If reviews cannot be read or the book written.
            The session is rolled back first, discarding staged changes.
    """
    try:
        approved = review_store.find_by_book(
            db, book_id, status=ReviewStatus.APPROVED.value
        )
        average, count = compute_rating_aggregate([r.rating for r in approved])
        catalog_store.update_rating_aggregate(db, book_id, average, count)
    except DataUnavailableError:
        db.rollback()
        logger.error(f"Rating recompute of book {book_id} failed, changes rolled back")
        raise

    if commit:
        db.commit()

    logger.info(f"Book {book_id} rating recalculated: average={average}, count={count}")
    return average, count


def recalculate_all_book_ratings(db: Session) -> int:
    """
    Recalculate rating aggregations for all books.

    Useful for fixing inconsistencies left by direct database edits.

    Args:
        db: Database session

    Returns:
        Number of books updated
    """
    book_ids = db.execute(select(Book.id)).scalars().all()

    for book_id in book_ids:
        with book_rating_lock(book_id):
            recalculate_book_rating(db, book_id)

    return len(book_ids)
