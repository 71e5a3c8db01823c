"""
Recommendations Router

GET /recommendations - books picked for the caller, each with a reason.

Readers with fewer than `personalization_threshold` read books get the
most popular catalog books; everyone else gets highly rated books from
their top genres. Books already in the caller's library are never
returned. Selection rules live in bookworm.services.recommendations.
"""

from fastapi import APIRouter, Request

from bookworm.config import get_settings
from bookworm.dependencies import ActiveUser, DbSession
from bookworm.schemas import RecommendationsResponse
from bookworm.services.rate_limiter import limiter
from bookworm.services.recommendations import get_recommendations

settings = get_settings()

router = APIRouter(
    prefix="/recommendations",
    tags=["Recommendations"],
    responses={
        401: {"description": "Not authenticated"},
        503: {"description": "Library or catalog data unavailable"},
    },
)


@router.get(
    "/",
    response_model=RecommendationsResponse,
    summary="Get personalized recommendations",
    description=f"""
    Up to {settings.recommendation_limit} books the caller has not shelved yet.

    **recommendationReason** is either "You've read N <Genre> books" or
    "Popular on Bookworm". **stats** echoes the caller's shelf counts.
    """,
)
@limiter.limit(settings.rate_limit_default)
def list_recommendations(
    request: Request,
    db: DbSession,
    current_user: ActiveUser,
) -> RecommendationsResponse:
    return get_recommendations(db, current_user.id)
