"""
Tutorials Router

Help articles. Everyone reads published tutorials; admins also see drafts
and manage the collection.
"""

import logging

from fastapi import APIRouter, HTTPException, Query, Request, status
from sqlalchemy import select

from bookworm.config import get_settings
from bookworm.dependencies import AdminUser, DbSession, OptionalUser
from bookworm.models import Tutorial, TutorialStatus
from bookworm.schemas import TutorialCreate, TutorialResponse, TutorialUpdate
from bookworm.services.rate_limiter import limiter

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/tutorials",
    tags=["Tutorials"],
    responses={
        404: {"description": "Tutorial not found"},
    },
)


def get_tutorial_or_404(db: DbSession, tutorial_id: int) -> Tutorial:
    tutorial = db.get(Tutorial, tutorial_id)
    if tutorial is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tutorial with id {tutorial_id} not found",
        )
    return tutorial


@router.get(
    "/",
    response_model=list[TutorialResponse],
    summary="List tutorials",
    description="""
    Newest first. Anonymous users and readers only see **published**
    tutorials; admins see drafts too and may filter with `status`.
    """,
)
@limiter.limit(settings.rate_limit_default)
def list_tutorials(
    request: Request,
    db: DbSession,
    current_user: OptionalUser,
    category: str | None = Query(default=None, max_length=100),
    tutorial_status: TutorialStatus | None = Query(default=None, alias="status"),
) -> list[TutorialResponse]:
    stmt = select(Tutorial)

    if current_user is None or not current_user.is_superuser:
        stmt = stmt.where(Tutorial.status == TutorialStatus.PUBLISHED.value)
    elif tutorial_status is not None:
        stmt = stmt.where(Tutorial.status == tutorial_status.value)

    if category:
        stmt = stmt.where(Tutorial.category == category)

    tutorials = db.execute(
        stmt.order_by(Tutorial.created_at.desc(), Tutorial.id.desc())
    ).scalars().all()
    return [TutorialResponse.model_validate(t) for t in tutorials]


@router.get(
    "/{tutorial_id}",
    response_model=TutorialResponse,
    summary="Read a tutorial",
    description="Returns the tutorial and counts the view.",
)
@limiter.limit(settings.rate_limit_default)
def get_tutorial(
    request: Request,
    tutorial_id: int,
    db: DbSession,
    current_user: OptionalUser,
) -> TutorialResponse:
    tutorial = get_tutorial_or_404(db, tutorial_id)

    is_admin = current_user is not None and current_user.is_superuser
    if tutorial.status != TutorialStatus.PUBLISHED.value and not is_admin:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tutorial with id {tutorial_id} not found",
        )

    tutorial.views += 1
    db.commit()
    db.refresh(tutorial)

    return TutorialResponse.model_validate(tutorial)


@router.post(
    "/",
    response_model=TutorialResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a tutorial",
    description="Admin only. New tutorials are drafts unless `status` says otherwise.",
)
@limiter.limit(settings.rate_limit_write)
def create_tutorial(
    request: Request,
    tutorial_data: TutorialCreate,
    db: DbSession,
    current_user: AdminUser,
) -> TutorialResponse:
    data = tutorial_data.model_dump()
    data["status"] = tutorial_data.status.value

    tutorial = Tutorial(**data, author_id=current_user.id)
    db.add(tutorial)
    db.commit()
    db.refresh(tutorial)

    logger.info(f"Tutorial {tutorial.id} '{tutorial.title}' created by user {current_user.id}")
    return TutorialResponse.model_validate(tutorial)


@router.put(
    "/{tutorial_id}",
    response_model=TutorialResponse,
    summary="Update a tutorial",
)
@limiter.limit(settings.rate_limit_write)
def update_tutorial(
    request: Request,
    tutorial_id: int,
    tutorial_data: TutorialUpdate,
    db: DbSession,
    current_user: AdminUser,
) -> TutorialResponse:
    tutorial = get_tutorial_or_404(db, tutorial_id)

    update_data = tutorial_data.model_dump(exclude_unset=True, exclude_none=True)
    if "status" in update_data:
        update_data["status"] = tutorial_data.status.value

    for field, value in update_data.items():
        setattr(tutorial, field, value)

    db.commit()
    db.refresh(tutorial)
    return TutorialResponse.model_validate(tutorial)


@router.delete(
    "/{tutorial_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a tutorial",
)
@limiter.limit(settings.rate_limit_write)
def delete_tutorial(
    request: Request,
    tutorial_id: int,
    db: DbSession,
    current_user: AdminUser,
) -> None:
    tutorial = get_tutorial_or_404(db, tutorial_id)
    db.delete(tutorial)
    db.commit()
    logger.info(f"Tutorial {tutorial_id} deleted by user {current_user.id}")
