"""
Library Router

The caller's shelves: add books, move them between shelves, track
progress and remove them. Shelf and progress rules live in
bookworm.services.library.
"""

from fastapi import APIRouter, Query, Request, Response, status

from bookworm.config import get_settings
from bookworm.dependencies import ActiveUser, DbSession
from bookworm.models import Shelf
from bookworm.schemas import (
    LibraryEntryCreate,
    LibraryEntryResponse,
    LibraryEntryUpdate,
    LibraryListResponse,
    ProgressUpdate,
)
from bookworm.services import library as library_service
from bookworm.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    prefix="/library",
    tags=["Library"],
    responses={
        401: {"description": "Not authenticated"},
        404: {"description": "Library entry not found"},
    },
)


@router.get(
    "/",
    response_model=LibraryListResponse,
    summary="List my library",
    description="All shelved books, most recently added first.",
)
@limiter.limit(settings.rate_limit_default)
def list_library(
    request: Request,
    db: DbSession,
    current_user: ActiveUser,
    shelf: Shelf | None = Query(default=None, description="Only this shelf"),
) -> LibraryListResponse:
    entries = library_service.list_library(db, current_user.id, shelf)
    return LibraryListResponse(
        items=[LibraryEntryResponse.model_validate(e) for e in entries],
        total=len(entries),
    )


@router.post(
    "/",
    response_model=LibraryEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a book to a shelf",
    description="""
    Put a book on one of the caller's shelves.

    - First time for this book: creates the entry (201)
    - Already shelved: moves it to the requested shelf (200)

    Moving a book to **read** stamps `date_finished` the first time.
    """,
)
@limiter.limit(settings.rate_limit_write)
def add_to_library(
    request: Request,
    response: Response,
    entry_data: LibraryEntryCreate,
    db: DbSession,
    current_user: ActiveUser,
) -> LibraryEntryResponse:
    entry, created = library_service.add_to_shelf(
        db,
        current_user,
        entry_data.book_id,
        entry_data.shelf,
        total_pages=entry_data.total_pages,
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return LibraryEntryResponse.model_validate(entry)


@router.get(
    "/{entry_id}",
    response_model=LibraryEntryResponse,
    summary="Get a library entry",
)
@limiter.limit(settings.rate_limit_default)
def get_library_entry(
    request: Request,
    entry_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> LibraryEntryResponse:
    entry = library_service.get_entry(db, current_user, entry_id)
    return LibraryEntryResponse.model_validate(entry)


@router.put(
    "/{entry_id}",
    response_model=LibraryEntryResponse,
    summary="Move shelf or rate",
    description="Change the shelf and/or the private 1-5 rating of an entry.",
)
@limiter.limit(settings.rate_limit_write)
def update_library_entry(
    request: Request,
    entry_id: int,
    entry_data: LibraryEntryUpdate,
    db: DbSession,
    current_user: ActiveUser,
) -> LibraryEntryResponse:
    entry = library_service.update_entry(
        db,
        current_user,
        entry_id,
        shelf=entry_data.shelf,
        personal_rating=entry_data.personal_rating,
    )
    return LibraryEntryResponse.model_validate(entry)


@router.put(
    "/{entry_id}/progress",
    response_model=LibraryEntryResponse,
    summary="Update reading progress",
    description="""
    Record pages read. `percentage` is derived from the page counts;
    reaching 100% moves the book to the **read** shelf.
    """,
)
@limiter.limit(settings.rate_limit_write)
def update_progress(
    request: Request,
    entry_id: int,
    progress: ProgressUpdate,
    db: DbSession,
    current_user: ActiveUser,
) -> LibraryEntryResponse:
    entry = library_service.update_progress(
        db,
        current_user,
        entry_id,
        progress.pages_read,
        total_pages=progress.total_pages,
    )
    return LibraryEntryResponse.model_validate(entry)


@router.delete(
    "/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a book from my library",
)
@limiter.limit(settings.rate_limit_write)
def remove_from_library(
    request: Request,
    entry_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> None:
    library_service.remove_entry(db, current_user, entry_id)
