"""
FastAPI Dependencies Module

Reusable pieces injected into route handlers with Depends():
- DbSession: one SQLAlchemy session per request
- Pagination: page / per_page query parameters
- ActiveUser / AdminUser / OptionalUser: the caller, from a JWT bearer token

Usage:
    @router.get("/library")
    def list_library(db: DbSession, current_user: ActiveUser):
        ...
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from bookworm.database import get_db
from bookworm.models.user import User
from bookworm.services.security import verify_token_type

# =============================================================================
# Type Aliases with Annotated
# =============================================================================
# Instead of writing:
#   def get_books(db: Session = Depends(get_db)):
# routes write:
#   def get_books(db: DbSession):

DbSession = Annotated[Session, Depends(get_db)]


# =============================================================================
# Pagination Parameters
# =============================================================================
class PaginationParams:
    """
    Common pagination parameters for list endpoints.

    - page: Which page to return (1-indexed)
    - per_page: How many items per page
    - skip: Offset for the database query
    """

    def __init__(
        self,
        page: int = Query(
            default=1,
            ge=1,
            description="Page number (1-indexed)",
            examples=[1, 2, 3],
        ),
        per_page: int = Query(
            default=10,
            ge=1,
            le=100,
            description="Number of items per page (max 100)",
            examples=[10, 25, 50],
        ),
    ) -> None:
        self.page = page
        self.per_page = per_page

    @property
    def skip(self) -> int:
        """Page 1 skips 0 rows, page 2 skips per_page rows, and so on."""
        return (self.page - 1) * self.per_page


Pagination = Annotated[PaginationParams, Depends()]


# =============================================================================
# JWT Authentication
# =============================================================================
# OAuth2PasswordBearer extracts the token from "Authorization: Bearer <token>"
# and adds the "Authorize" button to Swagger UI.

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login",
    auto_error=True,
)

oauth2_scheme_optional = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login",
    auto_error=False,
)


def _user_from_token(db: Session, token: str) -> User | None:
    payload = verify_token_type(token, "access")
    if payload is None:
        return None

    user_id = payload.get("sub")
    if user_id is None:
        return None

    try:
        return db.get(User, int(user_id))
    except ValueError:
        return None


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the caller from the access token.

    Raises:
        HTTPException: 401 if the token is invalid or the user is gone
    """
    user = _user_from_token(db, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Verify the current user is active.

    Raises:
        HTTPException: 403 if the account is disabled
    """
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )
    return current_user


def get_current_admin(
    current_user: User = Depends(get_current_active_user),
) -> User:
    """
    Verify the current user is an admin.

    Used by catalog management, review moderation, tutorials and the admin
    dashboard.

    Raises:
        HTTPException: 403 if the user is not an admin
    """
    if not current_user.is_superuser:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


def get_optional_current_user(
    token: str | None = Depends(oauth2_scheme_optional),
    db: Session = Depends(get_db),
) -> User | None:
    """
    Get the caller if a valid token was sent, None otherwise.

    For endpoints that serve anonymous readers but show more to admins
    (e.g. draft tutorials, pending reviews).
    """
    if not token:
        return None
    return _user_from_token(db, token)


ActiveUser = Annotated[User, Depends(get_current_active_user)]
AdminUser = Annotated[User, Depends(get_current_admin)]
OptionalUser = Annotated[User | None, Depends(get_optional_current_user)]
