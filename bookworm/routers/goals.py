"""
Goals Router

One reading goal per user per calendar year.
"""

from fastapi import APIRouter, Query, Request

from bookworm.config import get_settings
from bookworm.dependencies import ActiveUser, DbSession
from bookworm.schemas import GoalResponse, GoalSet
from bookworm.services import goals as goal_service
from bookworm.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    prefix="/goals",
    tags=["Goals"],
    responses={
        401: {"description": "Not authenticated"},
    },
)


@router.get(
    "/",
    response_model=GoalResponse,
    summary="Get my reading goal",
    description="""
    The caller's goal for `year` (current year by default) and how many
    books they have finished that year. `goal` is null when none is set.
    """,
)
@limiter.limit(settings.rate_limit_default)
def get_goal(
    request: Request,
    db: DbSession,
    current_user: ActiveUser,
    year: int | None = Query(default=None, ge=1900, le=9999),
) -> GoalResponse:
    return goal_service.get_goal(db, current_user.id, year)


@router.post(
    "/",
    response_model=GoalResponse,
    summary="Set my reading goal",
    description="Create or replace the caller's goal for a year. Target must be at least 1.",
)
@limiter.limit(settings.rate_limit_write)
def set_goal(
    request: Request,
    goal_data: GoalSet,
    db: DbSession,
    current_user: ActiveUser,
) -> GoalResponse:
    return goal_service.set_goal(
        db,
        current_user.id,
        goal_data.target_books,
        year=goal_data.year,
    )
