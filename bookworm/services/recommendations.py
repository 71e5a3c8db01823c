"""
Recommendations Service

Builds the "books you might like" list for a reader.

Strategies:
===========
1. Personalized: once a reader has finished at least
   personalization_threshold books, recommend unread books from their
   favourite genres that are rated close to how the reader rates books.
2. Popular (cold start): otherwise recommend the most popular books the
   reader has not shelved yet.

Popularity order everywhere is ratings average, then shelf count, then id.
A book already in the reader's library, on any shelf, is never returned.

Each result carries a recommendation_reason explaining why it was picked.
"""

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy.orm import Session

from bookworm.config import get_settings
from bookworm.models import Book, LibraryEntry, Shelf
from bookworm.stores import catalog as catalog_store
from bookworm.stores import library as library_store

logger = logging.getLogger(__name__)
settings = get_settings()

POPULAR_REASON = "Popular on Bookworm"


# =============================================================================
# Preference Signals
# =============================================================================


def rank_top_genres(read_entries: Sequence[LibraryEntry], n: int) -> list[int]:
    """
    Return the ids of the n genres that appear most often in read books.

    Multi-genre books count towards each of their genres. Genres with equal
    counts keep the order in which they were first seen.
    """
    genre_counts: dict[int, int] = {}
    for entry in read_entries:
        if entry.book is None:
            continue
        for genre in entry.book.genres:
            genre_counts[genre.id] = genre_counts.get(genre.id, 0) + 1

    ranked = sorted(genre_counts.items(), key=lambda item: item[1], reverse=True)
    return [genre_id for genre_id, _ in ranked[:n]]


def average_given_rating(
    read_entries: Sequence[LibraryEntry],
    default: float,
) -> float:
    """Mean of the reader's positive personal ratings, or default."""
    ratings = [
        e.personal_rating
        for e in read_entries
        if e.personal_rating is not None and e.personal_rating > 0
    ]
    if not ratings:
        return default
    return sum(ratings) / len(ratings)


def build_reason(
    book: Book,
    read_entries: Sequence[LibraryEntry],
    personalized: bool,
) -> str:
    """
    Explain a recommendation.

    Personalized picks name how many read books share the candidate's
    primary genre, e.g. "You've read 3 Fantasy books". Everything else
    gets the generic popularity reason.
    """
    primary = book.primary_genre
    if not personalized or primary is None:
        return POPULAR_REASON

    matched = sum(
        1
        for entry in read_entries
        if entry.book is not None
        and any(g.id == primary.id for g in entry.book.genres)
    )
    if matched == 0:
        return POPULAR_REASON

    noun = "book" if matched == 1 else "books"
    return f"You've read {matched} {primary.name} {noun}"


def _serialize_book(book: Book, reason: str) -> dict[str, Any]:
    return {
        "id": book.id,
        "title": book.title,
        "author": book.author,
        "isbn": book.isbn,
        "cover_id": book.cover_id,
        "cover_image": book.cover_image,
        "description": book.description,
        "publish_year": book.publish_year,
        "page_count": book.page_count,
        "ratings_average": book.ratings_average,
        "ratings_count": book.ratings_count,
        "total_shelved": book.total_shelved,
        "genres": [{"id": g.id, "name": g.name} for g in book.genres],
        "recommendation_reason": reason,
    }


# =============================================================================
# Recommendations
# =============================================================================


def get_recommendations(db: Session, user_id: int) -> dict[str, Any]:
    """
    Recommend up to recommendation_limit books to a reader.

    Algorithm:
    1. Load the reader's library; every shelved book is excluded
    2. With at least personalization_threshold read books:
       a. Take the top recommendation_top_genres genres of the read books
       b. Take the reader's average personal rating (default when unrated)
       c. Candidates share a top genre and are rated at least
          average - recommendation_rating_tolerance
       d. If nothing qualifies, fall back to popular books
    3. Otherwise recommend popular books

    Args:
        db: Database session
        user_id: Reader to recommend for

    Returns:
        Dict with "recommendations" (books with recommendation_reason)
        and "stats" (read / currently reading / want to read counts)

    Raises:
        DataUnavailableError: If the library or catalog cannot be read
    """
    library = library_store.find_by_user(db, user_id)
    shelved_ids = {entry.book_id for entry in library}
    read_entries = [e for e in library if e.shelf == Shelf.READ.value]

    personalized = len(read_entries) >= settings.personalization_threshold
    books: list[Book] = []

    if personalized:
        top_genres = rank_top_genres(read_entries, settings.recommendation_top_genres)
        user_average = average_given_rating(
            read_entries, settings.recommendation_default_rating
        )
        if top_genres:
            books = catalog_store.find_books(
                db,
                exclude_ids=shelved_ids,
                genre_ids=top_genres,
                min_average=user_average - settings.recommendation_rating_tolerance,
                limit=settings.recommendation_limit,
            )
        logger.debug(
            f"User {user_id}: top genres {top_genres}, average rating "
            f"{user_average:.2f}, {len(books)} personalized candidates"
        )

        if not books and settings.recommendation_fallback_to_popular:
            logger.debug(f"User {user_id}: no genre matches, falling back to popular")
            personalized = False

    if not personalized:
        books = catalog_store.find_books(
            db,
            exclude_ids=shelved_ids,
            limit=settings.recommendation_limit,
        )

    recommendations = [
        _serialize_book(book, build_reason(book, read_entries, personalized))
        for book in books
    ]

    return {
        "recommendations": recommendations,
        "stats": {
            "total_read": len(read_entries),
            "currently_reading": sum(
                1 for e in library if e.shelf == Shelf.CURRENTLY_READING.value
            ),
            "want_to_read": sum(
                1 for e in library if e.shelf == Shelf.WANT_TO_READ.value
            ),
        },
    }
