"""
Tests for Authentication

- Registration (email/password)
- Login (JWT access token + refresh cookie)
- Token refresh and logout
- The caller's account (/me)
"""

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from bookworm.models import User
from bookworm.services.security import (
    create_access_token,
    create_refresh_token,
    verify_password,
)

URL = "/api/v1/auth"


def get_auth_header(user: User) -> dict:
    """Create authorization header for a user."""
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


def login(client: TestClient, email: str, password: str):
    # OAuth2 password flow: form data, email in the username field
    return client.post(f"{URL}/login", data={"username": email, "password": password})


# =============================================================================
# Registration
# =============================================================================


class TestRegister:
    """Tests for POST /api/v1/auth/register"""

    def test_register_success(self, client: TestClient, db_session: Session):
        response = client.post(
            f"{URL}/register",
            json={
                "email": "newreader@example.com",
                "username": "NewReader",
                "password": "SecurePass123",
                "full_name": "New Reader",
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["email"] == "newreader@example.com"
        assert data["username"] == "newreader"
        assert data["role"] == "user"
        assert data["is_active"] is True
        assert "password" not in data
        assert "hashed_password" not in data

        user = db_session.execute(
            select(User).where(User.email == "newreader@example.com")
        ).scalar_one()
        assert user.hashed_password.startswith("$2b$")
        assert verify_password("SecurePass123", user.hashed_password)

    def test_duplicate_email(self, client: TestClient, reader: User):
        response = client.post(
            f"{URL}/register",
            json={
                "email": "reader@example.com",
                "username": "someoneelse",
                "password": "SecurePass123",
            },
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "Email already registered"

    def test_duplicate_username(self, client: TestClient, reader: User):
        response = client.post(
            f"{URL}/register",
            json={
                "email": "other@example.com",
                "username": "Reader",
                "password": "SecurePass123",
            },
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "Username already taken"

    @pytest.mark.parametrize(
        "password",
        [
            "Short1",          # too short
            "securepass123",   # no uppercase
            "SECUREPASS123",   # no lowercase
            "SecurePassword",  # no number
        ],
    )
    def test_weak_password(self, client: TestClient, password: str):
        response = client.post(
            f"{URL}/register",
            json={"email": "weak@example.com", "username": "weak", "password": password},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.parametrize("username", ["ab", "1reader", "book-fan"])
    def test_invalid_username(self, client: TestClient, username: str):
        response = client.post(
            f"{URL}/register",
            json={
                "email": "name@example.com",
                "username": username,
                "password": "SecurePass123",
            },
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_invalid_email(self, client: TestClient):
        response = client.post(
            f"{URL}/register",
            json={"email": "not-an-email", "username": "mailless", "password": "SecurePass123"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


# =============================================================================
# Login
# =============================================================================


class TestLogin:
    """Tests for POST /api/v1/auth/login"""

    def test_login_success(self, client: TestClient, db_session: Session, reader: User):
        response = login(client, "reader@example.com", "SecurePass123")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] > 0
        assert "refresh_token" in response.cookies

        db_session.refresh(reader)
        assert reader.last_login_at is not None

    def test_wrong_password(self, client: TestClient, reader: User):
        response = login(client, "reader@example.com", "WrongPass123")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Incorrect email or password"

    def test_unknown_email(self, client: TestClient):
        response = login(client, "nobody@example.com", "SecurePass123")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Incorrect email or password"

    def test_inactive_account(self, client: TestClient, db_session: Session, reader: User):
        reader.is_active = False
        db_session.commit()

        response = login(client, "reader@example.com", "SecurePass123")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == "Account is inactive"

    def test_access_token_works(self, client: TestClient, reader: User):
        token = login(client, "reader@example.com", "SecurePass123").json()["access_token"]

        response = client.get(f"{URL}/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["username"] == "reader"


# =============================================================================
# Refresh and Logout
# =============================================================================


class TestRefresh:
    """Tests for POST /api/v1/auth/refresh"""

    def test_refresh_from_body(self, client: TestClient, reader: User):
        refresh_token = create_refresh_token({"sub": str(reader.id)})

        response = client.post(f"{URL}/refresh", json={"refresh_token": refresh_token})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["token_type"] == "bearer"

    def test_refresh_from_cookie(self, client: TestClient, reader: User):
        login(client, "reader@example.com", "SecurePass123")

        response = client.post(f"{URL}/refresh")

        assert response.status_code == status.HTTP_200_OK

    def test_missing_token(self, client: TestClient):
        response = client.post(f"{URL}/refresh")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Refresh token required"

    def test_invalid_token(self, client: TestClient):
        response = client.post(f"{URL}/refresh", json={"refresh_token": "not-a-jwt"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_access_token_is_not_a_refresh_token(self, client: TestClient, reader: User):
        access_token = create_access_token({"sub": str(reader.id)})

        response = client.post(f"{URL}/refresh", json={"refresh_token": access_token})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_inactive_account(self, client: TestClient, db_session: Session, reader: User):
        refresh_token = create_refresh_token({"sub": str(reader.id)})
        reader.is_active = False
        db_session.commit()

        response = client.post(f"{URL}/refresh", json={"refresh_token": refresh_token})

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestLogout:
    """Tests for POST /api/v1/auth/logout"""

    def test_logout(self, client: TestClient, reader: User):
        response = client.post(f"{URL}/logout", headers=get_auth_header(reader))

        assert response.status_code == status.HTTP_204_NO_CONTENT

    def test_logout_requires_auth(self, client: TestClient):
        response = client.post(f"{URL}/logout")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Current User
# =============================================================================


class TestMe:
    """Tests for GET and PUT /api/v1/auth/me"""

    def test_get_me(self, client: TestClient, reader: User):
        response = client.get(f"{URL}/me", headers=get_auth_header(reader))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["email"] == "reader@example.com"
        assert data["full_name"] == "Rita Reader"

    def test_no_token(self, client: TestClient):
        response = client.get(f"{URL}/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_invalid_token(self, client: TestClient):
        response = client.get(f"{URL}/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_refresh_token_is_not_an_access_token(self, client: TestClient, reader: User):
        refresh_token = create_refresh_token({"sub": str(reader.id)})

        response = client.get(
            f"{URL}/me", headers={"Authorization": f"Bearer {refresh_token}"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_update_profile(self, client: TestClient, reader: User):
        response = client.put(
            f"{URL}/me",
            json={"bio": "Mostly fantasy."},
            headers=get_auth_header(reader),
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["bio"] == "Mostly fantasy."
        assert data["full_name"] == "Rita Reader"
