"""
Genres Router

Anyone can list genres; only admins create, rename or delete them.
Genre names are unique (409 on conflict).
"""

import logging

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from bookworm.config import get_settings
from bookworm.dependencies import AdminUser, DbSession
from bookworm.models import Genre
from bookworm.schemas import GenreCreate, GenreResponse, GenreUpdate
from bookworm.services.rate_limiter import limiter

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/genres",
    tags=["Genres"],
    responses={
        404: {"description": "Genre not found"},
    },
)


def get_genre_or_404(db: DbSession, genre_id: int) -> Genre:
    """Get a genre by ID or raise 404."""
    genre = db.get(Genre, genre_id)
    if genre is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Genre with id {genre_id} not found",
        )
    return genre


def _ensure_name_free(db: DbSession, name: str, genre_id: int | None = None) -> None:
    """Raise 409 if another genre already uses `name` (case-insensitive)."""
    stmt = select(Genre.id).where(func.lower(Genre.name) == name.lower())
    if genre_id is not None:
        stmt = stmt.where(Genre.id != genre_id)
    if db.execute(stmt).first() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Genre with name '{name}' already exists",
        )


@router.get(
    "/",
    response_model=list[GenreResponse],
    summary="List all genres",
)
@limiter.limit(settings.rate_limit_default)
def list_genres(request: Request, db: DbSession) -> list[GenreResponse]:
    """List all genres alphabetically."""
    genres = db.execute(select(Genre).order_by(Genre.name)).scalars().all()
    return [GenreResponse.model_validate(g) for g in genres]


@router.get(
    "/{genre_id}",
    response_model=GenreResponse,
    summary="Get a genre by ID",
)
@limiter.limit(settings.rate_limit_default)
def get_genre(request: Request, genre_id: int, db: DbSession) -> GenreResponse:
    return GenreResponse.model_validate(get_genre_or_404(db, genre_id))


@router.post(
    "/",
    response_model=GenreResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new genre",
    description="Create a genre. Admin only; names must be unique.",
)
@limiter.limit(settings.rate_limit_write)
def create_genre(
    request: Request,
    genre_data: GenreCreate,
    db: DbSession,
    current_user: AdminUser,
) -> GenreResponse:
    _ensure_name_free(db, genre_data.name)

    genre = Genre(
        name=genre_data.name,
        description=genre_data.description,
        created_by_id=current_user.id,
    )

    try:
        db.add(genre)
        db.commit()
        db.refresh(genre)
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Genre with name '{genre_data.name}' already exists",
        )

    logger.info(f"Genre '{genre.name}' created by user {current_user.id}")
    return GenreResponse.model_validate(genre)


@router.put(
    "/{genre_id}",
    response_model=GenreResponse,
    summary="Update a genre",
)
@limiter.limit(settings.rate_limit_write)
def update_genre(
    request: Request,
    genre_id: int,
    genre_data: GenreUpdate,
    db: DbSession,
    current_user: AdminUser,
) -> GenreResponse:
    genre = get_genre_or_404(db, genre_id)

    update_data = genre_data.model_dump(exclude_unset=True)
    if update_data.get("name"):
        _ensure_name_free(db, update_data["name"], genre_id)

    for field, value in update_data.items():
        setattr(genre, field, value)

    try:
        db.commit()
        db.refresh(genre)
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Genre with name '{genre_data.name}' already exists",
        )

    return GenreResponse.model_validate(genre)


@router.delete(
    "/{genre_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a genre",
    description="Delete a genre. Books keep their other genres.",
)
@limiter.limit(settings.rate_limit_write)
def delete_genre(
    request: Request,
    genre_id: int,
    db: DbSession,
    current_user: AdminUser,
) -> None:
    genre = get_genre_or_404(db, genre_id)
    db.delete(genre)
    db.commit()
    logger.info(f"Genre {genre_id} deleted by user {current_user.id}")
