"""
Library Service

Shelf and progress transitions of library entries.

Lifecycle rules:
================
- An entry is created the first time a user shelves a book; that bumps the
  book's total_shelved counter and records an "added_book" activity
- Moving an entry to the shelf it is already on changes nothing
- date_finished is stamped the first time the entry lands on the read
  shelf or its progress reaches 100%, and is never overwritten or cleared
- Progress reaching 100% moves the entry to the read shelf
- Removing an entry decrements total_shelved (never below zero)

Every public function commits its whole change in one transaction.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from bookworm.exceptions import NotFoundError, ValidationError
from bookworm.models import ActivityType, LibraryEntry, Shelf, User
from bookworm.services.social import record_activity
from bookworm.stores import catalog as catalog_store
from bookworm.stores import library as library_store
from bookworm.utils import round_half_up

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================


def _get_entry_or_404(db: Session, user: User, entry_id: int) -> LibraryEntry:
    entry = library_store.get_for_user(db, user.id, entry_id)
    if entry is None:
        raise NotFoundError("Library entry", entry_id)
    return entry


def _mark_finished(entry: LibraryEntry, now: datetime) -> None:
    """Stamp date_finished unless it is already set."""
    if entry.date_finished is None:
        entry.date_finished = now


def _move_to_shelf(entry: LibraryEntry, shelf: Shelf, now: datetime) -> bool:
    """
    Put an entry on a shelf.

    Returns:
        False when the entry was already on that shelf
    """
    if entry.shelf == shelf.value:
        return False

    previous = entry.shelf
    entry.shelf = shelf.value
    if shelf is Shelf.READ:
        _mark_finished(entry, now)

    logger.info(
        f"Library entry {entry.id} moved from {previous} to {shelf.value}"
    )
    return True


def compute_percentage(pages_read: int, total_pages: int) -> int:
    """Reading progress in whole percent, rounded half-up."""
    if total_pages <= 0:
        return 0
    return int(round_half_up(pages_read / total_pages * 100))


# =============================================================================
# Queries
# =============================================================================


def list_library(
    db: Session,
    user_id: int,
    shelf: Shelf | None = None,
) -> list[LibraryEntry]:
    """Return a user's entries, most recently added first."""
    return library_store.find_by_user(
        db, user_id, shelf=shelf.value if shelf is not None else None
    )


def get_entry(db: Session, user: User, entry_id: int) -> LibraryEntry:
    return _get_entry_or_404(db, user, entry_id)


# =============================================================================
# Transitions
# =============================================================================


def add_to_shelf(
    db: Session,
    user: User,
    book_id: int,
    shelf: Shelf,
    total_pages: int | None = None,
) -> tuple[LibraryEntry, bool]:
    """
    Shelve a book for a user.

    Creates the entry on the first shelf action, otherwise moves the
    existing entry. total_pages is stored on creation and when the book
    moves to currently reading.

    Args:
        db: Database session
        user: Owner of the library
        book_id: Book to shelve
        shelf: Target shelf
        total_pages: Optional page count for progress tracking

    Returns:
        (entry, created) where created tells whether a new entry was made

    Raises:
        NotFoundError: If the book does not exist
        ValidationError: If total_pages is negative
    """
    if total_pages is not None and total_pages < 0:
        raise ValidationError("total_pages cannot be negative")

    book = catalog_store.get_book(db, book_id)
    if book is None:
        raise NotFoundError("Book", book_id)

    now = datetime.now(UTC)
    entry = library_store.find_one(db, user.id, book_id)

    if entry is not None:
        changed = _move_to_shelf(entry, shelf, now)
        if (
            shelf is Shelf.CURRENTLY_READING
            and total_pages
            and total_pages != entry.total_pages
        ):
            entry.total_pages = total_pages
            entry.percentage = compute_percentage(entry.pages_read, total_pages)
            changed = True

        if changed:
            library_store.upsert(db, entry)
            db.commit()
        db.refresh(entry)
        return entry, False

    entry = LibraryEntry(
        user_id=user.id,
        book_id=book_id,
        shelf=shelf.value,
        pages_read=0,
        total_pages=total_pages if total_pages is not None else (book.page_count or 0),
        percentage=0,
        date_added=now,
    )
    if shelf is Shelf.READ:
        _mark_finished(entry, now)

    library_store.upsert(db, entry)
    catalog_store.increment_shelved_count(db, book_id, 1)
    record_activity(
        db,
        user.id,
        ActivityType.ADDED_BOOK,
        book_id=book_id,
        details={"shelf": shelf.value},
    )
    db.commit()
    db.refresh(entry)

    logger.info(f"User {user.id} shelved book {book_id} as {shelf.value}")
    return entry, True


def update_progress(
    db: Session,
    user: User,
    entry_id: int,
    pages_read: int,
    total_pages: int | None = None,
) -> LibraryEntry:
    """
    Record reading progress.

    percentage is derived from pages_read / total_pages. Reaching 100%
    moves the entry to the read shelf and stamps date_finished (once).

    Raises:
        NotFoundError: If the entry does not exist or is not the user's
        ValidationError: If page counts are negative or pages_read
            exceeds total_pages
    """
    entry = _get_entry_or_404(db, user, entry_id)

    if pages_read < 0:
        raise ValidationError("pages_read cannot be negative")
    if total_pages is not None and total_pages < 0:
        raise ValidationError("total_pages cannot be negative")

    effective_total = total_pages if total_pages is not None else entry.total_pages
    if effective_total and pages_read > effective_total:
        raise ValidationError(
            f"pages_read ({pages_read}) cannot exceed total_pages ({effective_total})"
        )

    now = datetime.now(UTC)
    entry.total_pages = effective_total or 0
    entry.pages_read = pages_read
    entry.percentage = compute_percentage(pages_read, entry.total_pages)

    if entry.percentage == 100:
        _move_to_shelf(entry, Shelf.READ, now)
        _mark_finished(entry, now)

    library_store.upsert(db, entry)
    record_activity(
        db,
        user.id,
        ActivityType.UPDATED_PROGRESS,
        book_id=entry.book_id,
        details={"pages_read": pages_read, "percentage": entry.percentage},
    )
    db.commit()
    db.refresh(entry)
    return entry


def update_entry(
    db: Session,
    user: User,
    entry_id: int,
    shelf: Shelf | None = None,
    personal_rating: int | None = None,
) -> LibraryEntry:
    """
    Move an entry to another shelf and/or set its personal rating.

    Raises:
        NotFoundError: If the entry does not exist or is not the user's
        ValidationError: If personal_rating is outside 1-5
    """
    entry = _get_entry_or_404(db, user, entry_id)

    if personal_rating is not None and not 1 <= personal_rating <= 5:
        raise ValidationError("personal_rating must be between 1 and 5")

    changed = False
    if shelf is not None:
        changed = _move_to_shelf(entry, shelf, datetime.now(UTC))
    if personal_rating is not None and personal_rating != entry.personal_rating:
        entry.personal_rating = personal_rating
        changed = True

    if changed:
        library_store.upsert(db, entry)
        db.commit()
    db.refresh(entry)
    return entry


def remove_entry(db: Session, user: User, entry_id: int) -> None:
    """
    Delete an entry and decrement the book's shelving counter.

    Raises:
        NotFoundError: If the entry does not exist or is not the user's
    """
    entry = _get_entry_or_404(db, user, entry_id)
    book_id = entry.book_id

    library_store.delete(db, entry)
    catalog_store.increment_shelved_count(db, book_id, -1)
    db.commit()

    logger.info(f"User {user.id} removed book {book_id} from their library")


# =============================================================================
# Maintenance
# =============================================================================


def backfill_finish_dates(db: Session, now: datetime | None = None) -> int:
    """
    Stamp date_finished on read entries that are missing it.

    Entries shelved as read before finish dates were tracked would
    otherwise never count toward goals or monthly stats.

    Returns:
        Number of entries updated
    """
    now = now or datetime.now(UTC)
    entries = library_store.find_read_without_finish_date(db)

    for entry in entries:
        _mark_finished(entry, now)

    db.commit()
    logger.info(f"Backfilled date_finished on {len(entries)} read entries")
    return len(entries)
