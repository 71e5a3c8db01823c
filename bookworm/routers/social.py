"""
Social Router

Following other readers and seeing what they are up to.

Endpoints:
- POST /social/follow/{user_id}
- DELETE /social/unfollow/{user_id}
- GET /social/followers/{user_id}
- GET /social/following/{user_id}
- GET /social/feed
- GET /social/users/search?q=...
- GET /social/profile/{user_id}
"""

from fastapi import APIRouter, Query, Request

from bookworm.config import get_settings
from bookworm.dependencies import ActiveUser, DbSession
from bookworm.schemas import (
    ActivityResponse,
    MessageResponse,
    ProfileResponse,
    UserPublicResponse,
)
from bookworm.services import social as social_service
from bookworm.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    prefix="/social",
    tags=["Social"],
    responses={
        401: {"description": "Not authenticated"},
        404: {"description": "User not found"},
    },
)


@router.post(
    "/follow/{user_id}",
    response_model=MessageResponse,
    summary="Follow a user",
    responses={400: {"description": "Following yourself or already following"}},
)
@limiter.limit(settings.rate_limit_write)
def follow(
    request: Request,
    user_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> MessageResponse:
    social_service.follow_user(db, current_user, user_id)
    return MessageResponse(message="Successfully followed user")


@router.delete(
    "/unfollow/{user_id}",
    response_model=MessageResponse,
    summary="Unfollow a user",
)
@limiter.limit(settings.rate_limit_write)
def unfollow(
    request: Request,
    user_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> MessageResponse:
    social_service.unfollow_user(db, current_user, user_id)
    return MessageResponse(message="Successfully unfollowed user")


@router.get(
    "/followers/{user_id}",
    response_model=list[UserPublicResponse],
    summary="List a user's followers",
)
@limiter.limit(settings.rate_limit_default)
def followers(
    request: Request,
    user_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> list[UserPublicResponse]:
    users = social_service.list_followers(db, user_id)
    return [UserPublicResponse.model_validate(u) for u in users]


@router.get(
    "/following/{user_id}",
    response_model=list[UserPublicResponse],
    summary="List who a user follows",
)
@limiter.limit(settings.rate_limit_default)
def following(
    request: Request,
    user_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> list[UserPublicResponse]:
    users = social_service.list_following(db, user_id)
    return [UserPublicResponse.model_validate(u) for u in users]


@router.get(
    "/feed",
    response_model=list[ActivityResponse],
    summary="Activity feed",
    description="Recent activity of the users the caller follows, newest first.",
)
@limiter.limit(settings.rate_limit_default)
def feed(
    request: Request,
    db: DbSession,
    current_user: ActiveUser,
    limit: int = Query(
        default=social_service.FEED_DEFAULT_LIMIT,
        ge=1,
        le=social_service.FEED_MAX_LIMIT,
    ),
) -> list[ActivityResponse]:
    activities = social_service.get_feed(db, current_user, limit)
    return [ActivityResponse.model_validate(a) for a in activities]


@router.get(
    "/users/search",
    response_model=list[UserPublicResponse],
    summary="Search users",
    description="Case-insensitive match on username or full name. Excludes the caller.",
)
@limiter.limit(settings.rate_limit_default)
def search_users(
    request: Request,
    db: DbSession,
    current_user: ActiveUser,
    q: str = Query(default="", max_length=100, description="Name or username"),
) -> list[UserPublicResponse]:
    users = social_service.search_users(db, q, exclude_user_id=current_user.id)
    return [UserPublicResponse.model_validate(u) for u in users]


@router.get(
    "/profile/{user_id}",
    response_model=ProfileResponse,
    summary="Get a user's profile",
)
@limiter.limit(settings.rate_limit_default)
def profile(
    request: Request,
    user_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> ProfileResponse:
    return social_service.get_profile(db, user_id, viewer_id=current_user.id)
