"""
Library Store

Queries over library_entries. Entries returned by find_by_user come with
their book and the book's genres loaded, which is what the statistics and
recommendation code iterates over.
"""

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from bookworm.exceptions import DataUnavailableError
from bookworm.models import Book, LibraryEntry, Shelf

logger = logging.getLogger(__name__)


def find_by_user(
    db: Session,
    user_id: int,
    shelf: str | None = None,
) -> list[LibraryEntry]:
    """
    Return every library entry of a user, newest first.

    Args:
        db: Database session
        user_id: Owner of the entries
        shelf: Optional shelf filter

    Raises:
        DataUnavailableError: If the query fails
    """
    stmt = (
        select(LibraryEntry)
        .options(selectinload(LibraryEntry.book).selectinload(Book.genres))
        .where(LibraryEntry.user_id == user_id)
        .order_by(LibraryEntry.date_added.desc(), LibraryEntry.id.desc())
    )
    if shelf is not None:
        stmt = stmt.where(LibraryEntry.shelf == shelf)

    try:
        return list(db.execute(stmt).scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Failed to load library of user {user_id}: {e}")
        raise DataUnavailableError("library lookup") from e


def find_one(db: Session, user_id: int, book_id: int) -> LibraryEntry | None:
    """Return the user's entry for a book, or None."""
    stmt = select(LibraryEntry).where(
        LibraryEntry.user_id == user_id,
        LibraryEntry.book_id == book_id,
    )
    try:
        return db.execute(stmt).scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Failed to load entry for user {user_id}, book {book_id}: {e}")
        raise DataUnavailableError("library lookup") from e


def count_finished_between(
    db: Session,
    user_id: int,
    start: datetime,
    end: datetime,
) -> int:
    """
    Count the user's read entries with date_finished in [start, end).

    Raises:
        DataUnavailableError: If the query fails
    """
    stmt = select(func.count(LibraryEntry.id)).where(
        LibraryEntry.user_id == user_id,
        LibraryEntry.shelf == Shelf.READ.value,
        LibraryEntry.date_finished >= start,
        LibraryEntry.date_finished < end,
    )
    try:
        return db.execute(stmt).scalar_one()
    except SQLAlchemyError as e:
        logger.error(f"Failed to count finished books of user {user_id}: {e}")
        raise DataUnavailableError("library lookup") from e


def find_read_without_finish_date(db: Session) -> list[LibraryEntry]:
    """Return read entries whose date_finished was never stamped."""
    stmt = select(LibraryEntry).where(
        LibraryEntry.shelf == Shelf.READ.value,
        LibraryEntry.date_finished.is_(None),
    )
    try:
        return list(db.execute(stmt).scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Failed to load unfinished read entries: {e}")
        raise DataUnavailableError("library lookup") from e


def get_for_user(db: Session, user_id: int, entry_id: int) -> LibraryEntry | None:
    """Return an entry by id, but only if it belongs to user_id."""
    stmt = (
        select(LibraryEntry)
        .options(selectinload(LibraryEntry.book).selectinload(Book.genres))
        .where(LibraryEntry.id == entry_id, LibraryEntry.user_id == user_id)
    )
    try:
        return db.execute(stmt).scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Failed to load library entry {entry_id}: {e}")
        raise DataUnavailableError("library lookup") from e


def upsert(db: Session, entry: LibraryEntry) -> LibraryEntry:
    """
    Stage a new or modified entry and flush it.

    The caller owns the transaction and commits once its whole change
    (entry plus counters plus activity) is staged.
    """
    try:
        db.add(entry)
        db.flush()
    except SQLAlchemyError as e:
        logger.error(f"Failed to save library entry: {e}")
        raise DataUnavailableError("library write") from e
    return entry


def delete(db: Session, entry: LibraryEntry) -> None:
    """Stage the removal of an entry and flush it."""
    try:
        db.delete(entry)
        db.flush()
    except SQLAlchemyError as e:
        logger.error(f"Failed to delete library entry {entry.id}: {e}")
        raise DataUnavailableError("library delete") from e
