"""
Security Service

Password hashing and JWT handling for the local account system.

- Passwords are hashed with bcrypt through passlib
- Access tokens are short-lived; refresh tokens last refresh_token_expire_days
- Both carry the user id in "sub" and their kind in "type", so a refresh
  token can never be used where an access token is expected

Usage:
    from bookworm.services.security import create_access_token, hash_password

    hashed = hash_password("SecurePass123")
    token = create_access_token({"sub": str(user.id)})
"""

import logging
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from bookworm.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

ALGORITHM = "HS256"

# deprecated="auto" rehashes old schemes on the next successful login
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# =============================================================================
# Passwords
# =============================================================================


def hash_password(password: str) -> str:
    """Hash a plain text password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """
    Check a plain password against a stored hash.

    Accounts without a password hash never match.
    """
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


# =============================================================================
# Tokens
# =============================================================================


def _encode(data: dict, token_type: str, lifetime: timedelta) -> str:
    payload = data.copy()
    payload.update({"exp": datetime.now(UTC) + lifetime, "type": token_type})
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token.

    Example:
        >>> token = create_access_token({"sub": "42"})
        >>> token.count(".") == 2
        True
    """
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(data, "access", lifetime)


def create_refresh_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a JWT refresh token (longer-lived than the access token)."""
    lifetime = expires_delta or timedelta(days=settings.refresh_token_expire_days)
    return _encode(data, "refresh", lifetime)


def decode_token(token: str) -> dict | None:
    """
    Decode and validate a JWT.

    Returns:
        The payload, or None if the token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        return None


def verify_token_type(token: str, expected_type: str) -> dict | None:
    """Decode a token and check it is of the expected kind."""
    payload = decode_token(token)
    if payload is None:
        return None

    if payload.get("type") != expected_type:
        logger.warning(f"Token type mismatch: expected {expected_type}")
        return None

    return payload
