"""
Statistics Service

Derives per-user reading statistics from a snapshot of library entries.

Structure:
==========
The compute_* functions are pure: they take the entries plus an explicit
"now" and return plain dicts, so the same snapshot always gives the same
result. get_library_stats / get_enhanced_stats load the snapshot through
the library store and hand it to them.

Time base:
==========
Everything is evaluated in UTC. Naive timestamps coming back from the
database are treated as UTC (see bookworm.utils.as_utc).
"""

import logging
from collections.abc import Sequence
from datetime import UTC, date, datetime, timedelta
from typing import Any

from sqlalchemy.orm import Session

from bookworm.config import get_settings
from bookworm.models import LibraryEntry, Shelf
from bookworm.stores import library as library_store
from bookworm.utils import as_utc, round_half_up

logger = logging.getLogger(__name__)
settings = get_settings()

MONTH_NAMES = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

UNKNOWN_GENRE = "Unknown"


def _finished_at(entry: LibraryEntry) -> datetime | None:
    return as_utc(entry.date_finished)


def _read_entries(entries: Sequence[LibraryEntry]) -> list[LibraryEntry]:
    return [e for e in entries if e.shelf == Shelf.READ.value]


# =============================================================================
# Basic Stats
# =============================================================================


def compute_basic_stats(
    entries: Sequence[LibraryEntry],
    now: datetime,
) -> dict[str, Any]:
    """
    Compute the library overview of one user.

    Args:
        entries: All library entries of the user
        now: Reference time (UTC) for the year/month windows

    Returns:
        Dict with total_books, by_shelf, total_pages_read,
        books_completed_this_year, books_completed_this_month and
        average_rating. by_shelf always sums to total_books.
    """
    now = as_utc(now)

    by_shelf = {shelf.value: 0 for shelf in Shelf}
    for entry in entries:
        by_shelf[entry.shelf] = by_shelf.get(entry.shelf, 0) + 1

    completed_this_year = 0
    completed_this_month = 0
    for entry in entries:
        finished = _finished_at(entry)
        if finished is None or finished.year != now.year:
            continue
        completed_this_year += 1
        if finished.month == now.month:
            completed_this_month += 1

    ratings = [e.personal_rating for e in entries if e.personal_rating]
    average_rating = (
        round_half_up(sum(ratings) / len(ratings), 1) if ratings else 0
    )

    return {
        "total_books": len(entries),
        "by_shelf": {
            "want_to_read": by_shelf[Shelf.WANT_TO_READ.value],
            "currently_reading": by_shelf[Shelf.CURRENTLY_READING.value],
            "read": by_shelf[Shelf.READ.value],
        },
        "total_pages_read": sum(e.pages_read or 0 for e in entries),
        "books_completed_this_year": completed_this_year,
        "books_completed_this_month": completed_this_month,
        "average_rating": average_rating,
    }


# =============================================================================
# Enhanced Stats
# =============================================================================


def trailing_months(now: datetime, count: int = 12) -> list[tuple[int, int]]:
    """
    Return (year, month) pairs for the trailing `count` months, oldest first.

    The month of `now` is always the last pair.
    """
    current = now.year * 12 + (now.month - 1)
    months = []
    for offset in range(count - 1, -1, -1):
        year, month_index = divmod(current - offset, 12)
        months.append((year, month_index + 1))
    return months


def compute_monthly_history(
    entries: Sequence[LibraryEntry],
    now: datetime,
) -> list[dict[str, Any]]:
    """
    Count finished books per month over the last 12 months.

    Only entries on the read shelf are counted.

    Returns:
        12 dicts {month, year, count}, oldest first
    """
    now = as_utc(now)

    finished_counts: dict[tuple[int, int], int] = {}
    for entry in _read_entries(entries):
        finished = _finished_at(entry)
        if finished is None:
            continue
        key = (finished.year, finished.month)
        finished_counts[key] = finished_counts.get(key, 0) + 1

    return [
        {
            "month": MONTH_NAMES[month - 1],
            "year": year,
            "count": finished_counts.get((year, month), 0),
        }
        for year, month in trailing_months(now)
    ]


def compute_genre_breakdown(
    entries: Sequence[LibraryEntry],
    limit: int = 6,
) -> list[dict[str, Any]]:
    """
    Tally genres across read books.

    A book tagged with N genres adds one to each of the N counters, so the
    percentages are shares of all genre tags, not of books. Equal counts
    keep the order in which the genres were first seen.

    Returns:
        Up to `limit` dicts {genre, count, percentage}, highest count first
    """
    genre_counts: dict[str, int] = {}
    for entry in _read_entries(entries):
        if entry.book is None:
            continue
        for genre in entry.book.genres:
            name = genre.name or UNKNOWN_GENRE
            genre_counts[name] = genre_counts.get(name, 0) + 1

    total = sum(genre_counts.values())

    # sorted() is stable, so ties stay in first-seen order
    ranked = sorted(genre_counts.items(), key=lambda item: item[1], reverse=True)

    return [
        {
            "genre": name,
            "count": count,
            "percentage": int(round_half_up(count / total * 100)) if total else 0,
        }
        for name, count in ranked[:limit]
    ]


def compute_reading_streak(entries: Sequence[LibraryEntry], today: date) -> int:
    """
    Count consecutive days with library activity, ending today.

    A day counts when any entry was last modified on it. The walk stops at
    the first day without activity; no activity today means a streak of 0.
    """
    active_days = {
        as_utc(e.updated_at).date() for e in entries if e.updated_at is not None
    }

    streak = 0
    day = today
    while day in active_days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def compute_enhanced_stats(
    entries: Sequence[LibraryEntry],
    now: datetime,
    genre_limit: int = 6,
) -> dict[str, Any]:
    """
    Compute chart data for the stats dashboard.

    Returns:
        Dict with monthly_books, genre_breakdown, reading_streak,
        books_this_year and total_pages
    """
    now = as_utc(now)

    books_this_year = 0
    for entry in _read_entries(entries):
        finished = _finished_at(entry)
        if finished is not None and finished.year == now.year:
            books_this_year += 1

    return {
        "monthly_books": compute_monthly_history(entries, now),
        "genre_breakdown": compute_genre_breakdown(entries, genre_limit),
        "reading_streak": compute_reading_streak(entries, now.date()),
        "books_this_year": books_this_year,
        "total_pages": sum(e.pages_read or 0 for e in entries),
    }


# =============================================================================
# Entry Points
# =============================================================================


def get_library_stats(
    db: Session,
    user_id: int,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Load a user's library and compute the basic stats.

    Raises:
        DataUnavailableError: If the library cannot be read
    """
    entries = library_store.find_by_user(db, user_id)
    logger.debug(f"Computing stats for user {user_id} over {len(entries)} entries")
    return compute_basic_stats(entries, now or datetime.now(UTC))


def get_enhanced_stats(
    db: Session,
    user_id: int,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Load a user's library and compute the enhanced stats.

    Raises:
        DataUnavailableError: If the library cannot be read
    """
    entries = library_store.find_by_user(db, user_id)
    logger.debug(
        f"Computing enhanced stats for user {user_id} over {len(entries)} entries"
    )
    return compute_enhanced_stats(
        entries,
        now or datetime.now(UTC),
        genre_limit=settings.genre_breakdown_limit,
    )
