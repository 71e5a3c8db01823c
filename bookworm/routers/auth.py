"""
Authentication Router

Local email/password accounts with JWT sessions:
- POST /auth/register - Create an account
- POST /auth/login - Email + password → access token (+ refresh cookie)
- POST /auth/refresh - Refresh token → new access token
- POST /auth/logout - Clear the refresh cookie
- GET /auth/me - The caller's account
- PUT /auth/me - Update the caller's profile

Passwords are stored as bcrypt hashes and never logged.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import select

from bookworm.config import get_settings
from bookworm.dependencies import ActiveUser, DbSession
from bookworm.models import User
from bookworm.schemas import (
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from bookworm.services.rate_limiter import limiter
from bookworm.services.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
    verify_token_type,
)

logger = logging.getLogger(__name__)
settings = get_settings()

REFRESH_COOKIE = "refresh_token"

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        401: {"description": "Unauthorized"},
        409: {"description": "Conflict (email/username already exists)"},
    },
)


def _token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token({"sub": str(user.id)}),
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,
    )


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="""
    Create a reader account.

    **Password:** 8+ characters with an uppercase letter, a lowercase
    letter and a number.

    **Username:** 3-50 characters, starts with a letter, letters, numbers
    and underscores only.
    """,
)
@limiter.limit("5/minute")
def register(
    request: Request,
    user_data: UserCreate,
    db: DbSession,
) -> UserResponse:
    if db.execute(select(User.id).where(User.email == user_data.email)).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    if db.execute(select(User.id).where(User.username == user_data.username)).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already taken",
        )

    user = User(
        email=user_data.email,
        username=user_data.username,
        hashed_password=hash_password(user_data.password),
        full_name=user_data.full_name,
        is_active=True,
    )

    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"New user registered: {user.id}")
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login with email and password",
    description="""
    OAuth2 password flow: send the **email** in the `username` form field.

    The access token goes in `Authorization: Bearer <token>`. A refresh
    token is set as an httpOnly cookie.
    """,
)
@limiter.limit("10/minute")
def login(
    request: Request,
    response: Response,
    db: DbSession,
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> TokenResponse:
    email = form_data.username

    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()

    if user is None or not verify_password(form_data.password, user.hashed_password):
        logger.warning("Login failed: bad credentials")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        logger.warning(f"Login refused for inactive user {user.id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    user.last_login_at = datetime.now(UTC)
    db.commit()

    response.set_cookie(
        key=REFRESH_COOKIE,
        value=create_refresh_token({"sub": str(user.id)}),
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
    )

    logger.info(f"User {user.id} logged in")
    return _token_response(user)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh access token",
    description="Exchange a refresh token (body or cookie) for a new access token.",
)
def refresh_token(
    request: Request,
    db: DbSession,
    body: RefreshTokenRequest | None = None,
) -> TokenResponse:
    token = body.refresh_token if body and body.refresh_token else request.cookies.get(REFRESH_COOKIE)

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token_type(token, "refresh")
    user_id = payload.get("sub") if payload else None
    user = db.get(User, int(user_id)) if user_id and str(user_id).isdigit() else None

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    return _token_response(user)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Logout user",
    description="Clear the refresh cookie. The access token stays valid until it expires.",
)
def logout(
    response: Response,
    current_user: ActiveUser,
) -> None:
    response.delete_cookie(
        key=REFRESH_COOKIE,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    logger.info(f"User {current_user.id} logged out")


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
)
def get_me(current_user: ActiveUser) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.put(
    "/me",
    response_model=UserResponse,
    summary="Update my profile",
    description="Change display name, bio or avatar. Omitted fields are left alone.",
)
@limiter.limit(settings.rate_limit_write)
def update_me(
    request: Request,
    user_data: UserUpdate,
    db: DbSession,
    current_user: ActiveUser,
) -> UserResponse:
    for field, value in user_data.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)

    db.commit()
    db.refresh(current_user)
    return UserResponse.model_validate(current_user)
