"""
Stats Router

Reading statistics of the caller. Responses use camelCase keys.
"""

from fastapi import APIRouter, Request

from bookworm.config import get_settings
from bookworm.dependencies import ActiveUser, DbSession
from bookworm.schemas import EnhancedStatsResponse, LibraryStatsResponse
from bookworm.services import stats as stats_service
from bookworm.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    prefix="/stats",
    tags=["Stats"],
    responses={
        401: {"description": "Not authenticated"},
        503: {"description": "Library data unavailable"},
    },
)


@router.get(
    "/",
    response_model=LibraryStatsResponse,
    summary="Library overview",
    description="""
    Counts by shelf, pages read, books finished this year and month, and
    the average personal rating (0 when nothing is rated).
    """,
)
@limiter.limit(settings.rate_limit_default)
def get_stats(
    request: Request,
    db: DbSession,
    current_user: ActiveUser,
) -> LibraryStatsResponse:
    return stats_service.get_library_stats(db, current_user.id)


@router.get(
    "/enhanced",
    response_model=EnhancedStatsResponse,
    summary="Chart data",
    description="""
    - **monthlyBooks**: books finished in each of the last 12 months
    - **genreBreakdown**: top genres of read books
    - **readingStreak**: consecutive days with library activity
    """,
)
@limiter.limit(settings.rate_limit_default)
def get_enhanced_stats(
    request: Request,
    db: DbSession,
    current_user: ActiveUser,
) -> EnhancedStatsResponse:
    return stats_service.get_enhanced_stats(db, current_user.id)
