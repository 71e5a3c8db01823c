"""
Books Router

The shared catalog.

- Anyone can list, search and read books
- Admins create, update and delete them

ratings_average, ratings_count and total_shelved are never accepted from
a request; they are maintained by the ratings service and the library
service.
"""

import logging
import math

from fastapi import APIRouter, HTTPException, Query, Request, status
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from bookworm.config import get_settings
from bookworm.dependencies import AdminUser, DbSession, Pagination
from bookworm.models import Book, Genre
from bookworm.schemas import BookCreate, BookListResponse, BookResponse, BookUpdate
from bookworm.services.rate_limiter import limiter

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={
        404: {"description": "Book not found"},
    },
)


# =============================================================================
# Helper Functions
# =============================================================================


def get_book_or_404(db: Session, book_id: int) -> Book:
    """Get a book with its genres or raise 404."""
    stmt = (
        select(Book)
        .options(selectinload(Book.genres))
        .where(Book.id == book_id)
    )
    book = db.execute(stmt).scalar_one_or_none()

    if book is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Book with id {book_id} not found",
        )
    return book


def resolve_genres(db: Session, genre_ids: list[int]) -> list[Genre]:
    """
    Load genres by id, ordered by id.

    Raises:
        HTTPException: 400 listing any ids that do not exist
    """
    genres = db.execute(
        select(Genre).where(Genre.id.in_(genre_ids)).order_by(Genre.id)
    ).scalars().all()

    if len(genres) != len(set(genre_ids)):
        missing = set(genre_ids) - {g.id for g in genres}
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Genres not found: {sorted(missing)}",
        )
    return list(genres)


# =============================================================================
# Read Endpoints
# =============================================================================


@router.get(
    "/",
    response_model=BookListResponse,
    summary="List books",
    description="Paginated catalog, optionally filtered by text and genre.",
)
@limiter.limit(settings.rate_limit_default)
def list_books(
    request: Request,
    db: DbSession,
    pagination: Pagination,
    search: str | None = Query(
        default=None,
        min_length=1,
        max_length=100,
        description="Case-insensitive match on title or author",
        examples=["tolkien"],
    ),
    genre_id: int | None = Query(default=None, ge=1, description="Filter by genre"),
) -> BookListResponse:
    """
    List books, newest first.

    Examples:
        GET /api/v1/books/?search=hobbit
        GET /api/v1/books/?genre_id=2&page=2
    """
    base_stmt = select(Book)

    if search:
        pattern = f"%{search}%"
        base_stmt = base_stmt.where(
            or_(Book.title.ilike(pattern), Book.author.ilike(pattern))
        )
    if genre_id is not None:
        base_stmt = base_stmt.where(Book.genres.any(Genre.id == genre_id))

    count_stmt = select(func.count()).select_from(base_stmt.subquery())
    total = db.execute(count_stmt).scalar() or 0
    pages = math.ceil(total / pagination.per_page) if total > 0 else 0

    stmt = (
        base_stmt
        .options(selectinload(Book.genres))
        .order_by(Book.created_at.desc(), Book.id.desc())
        .offset(pagination.skip)
        .limit(pagination.per_page)
    )
    books = db.execute(stmt).scalars().all()

    return BookListResponse(
        items=[BookResponse.model_validate(book) for book in books],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pages,
    )


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    summary="Get a book by ID",
)
@limiter.limit(settings.rate_limit_default)
def get_book(request: Request, book_id: int, db: DbSession) -> BookResponse:
    return BookResponse.model_validate(get_book_or_404(db, book_id))


# =============================================================================
# Admin Endpoints
# =============================================================================


@router.post(
    "/",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new book",
    description="Add a book to the catalog. Admin only.",
)
@limiter.limit(settings.rate_limit_write)
def create_book(
    request: Request,
    book_data: BookCreate,
    db: DbSession,
    current_user: AdminUser,
) -> BookResponse:
    """
    Create a book.

    Raises:
        HTTPException: 400 if a genre id does not exist
    """
    book = Book(
        **book_data.model_dump(exclude={"genre_ids"}),
        created_by_id=current_user.id,
    )

    if book_data.genre_ids:
        book.genres = resolve_genres(db, book_data.genre_ids)

    db.add(book)
    db.commit()
    db.refresh(book)

    logger.info(f"Book {book.id} '{book.title}' created by user {current_user.id}")
    return BookResponse.model_validate(book)


@router.put(
    "/{book_id}",
    response_model=BookResponse,
    summary="Update a book",
    description="Update catalog fields and genres. Admin only.",
)
@limiter.limit(settings.rate_limit_write)
def update_book(
    request: Request,
    book_id: int,
    book_data: BookUpdate,
    db: DbSession,
    current_user: AdminUser,
) -> BookResponse:
    """
    Update a book. Only the provided fields change.

    Raises:
        HTTPException: 404 if the book does not exist
        HTTPException: 400 if a genre id does not exist
    """
    book = get_book_or_404(db, book_id)

    update_data = book_data.model_dump(exclude_unset=True)

    # genre_ids is a relationship, not a column
    genre_ids = update_data.pop("genre_ids", None)
    if genre_ids is not None:
        book.genres = resolve_genres(db, genre_ids)

    for field, value in update_data.items():
        setattr(book, field, value)

    db.commit()
    db.refresh(book)

    return BookResponse.model_validate(book)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a book",
    description="Delete a book with its reviews and library entries. Admin only.",
)
@limiter.limit(settings.rate_limit_write)
def delete_book(
    request: Request,
    book_id: int,
    db: DbSession,
    current_user: AdminUser,
) -> None:
    book = get_book_or_404(db, book_id)
    db.delete(book)
    db.commit()
    logger.info(f"Book {book_id} deleted by user {current_user.id}")
