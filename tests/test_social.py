"""
Tests for the Social Graph

Following, follower lists, user search, profiles and the activity feed.
"""

from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from bookworm.models import Activity, ActivityType, Book, User
from bookworm.services.security import create_access_token

URL = "/api/v1/social"


def get_auth_header(user: User) -> dict:
    """Create authorization header for a user."""
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


def follow(client: TestClient, follower: User, target_id: int):
    return client.post(f"{URL}/follow/{target_id}", headers=get_auth_header(follower))


class TestFollow:
    """Tests for POST /social/follow/{user_id} and DELETE /social/unfollow/{user_id}"""

    def test_requires_auth(self, client: TestClient, second_reader: User):
        response = client.post(f"{URL}/follow/{second_reader.id}")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_follow_user(
        self,
        client: TestClient,
        db_session: Session,
        reader: User,
        second_reader: User,
    ):
        response = follow(client, reader, second_reader.id)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"message": "Successfully followed user"}

        activity = db_session.execute(select(Activity)).scalar_one()
        assert activity.type == ActivityType.FOLLOWED_USER.value
        assert activity.target_user_id == second_reader.id

    def test_cannot_follow_self(self, client: TestClient, reader: User):
        response = follow(client, reader, reader.id)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Cannot follow yourself"

    def test_cannot_follow_twice(
        self,
        client: TestClient,
        reader: User,
        second_reader: User,
    ):
        follow(client, reader, second_reader.id)

        response = follow(client, reader, second_reader.id)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Already following this user"

    def test_follow_unknown_user(self, client: TestClient, reader: User):
        response = follow(client, reader, 99999)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_unfollow(
        self,
        client: TestClient,
        reader: User,
        second_reader: User,
    ):
        follow(client, reader, second_reader.id)

        response = client.delete(
            f"{URL}/unfollow/{second_reader.id}", headers=get_auth_header(reader)
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"message": "Successfully unfollowed user"}
        followers = client.get(
            f"{URL}/followers/{second_reader.id}", headers=get_auth_header(reader)
        ).json()
        assert followers == []

    def test_unfollow_when_not_following(
        self,
        client: TestClient,
        reader: User,
        second_reader: User,
    ):
        response = client.delete(
            f"{URL}/unfollow/{second_reader.id}", headers=get_auth_header(reader)
        )

        assert response.status_code == status.HTTP_200_OK


class TestFollowLists:
    def test_followers_and_following(
        self,
        client: TestClient,
        reader: User,
        second_reader: User,
        admin: User,
    ):
        follow(client, reader, second_reader.id)
        follow(client, admin, second_reader.id)

        followers = client.get(
            f"{URL}/followers/{second_reader.id}", headers=get_auth_header(reader)
        ).json()
        following = client.get(
            f"{URL}/following/{reader.id}", headers=get_auth_header(reader)
        ).json()

        assert sorted(u["username"] for u in followers) == ["admin", "reader"]
        assert [u["username"] for u in following] == ["bookfan"]
        assert "email" not in following[0]

    def test_unknown_user(self, client: TestClient, reader: User):
        response = client.get(f"{URL}/followers/99999", headers=get_auth_header(reader))

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestFeed:
    """Tests for GET /social/feed"""

    def test_feed_shows_followed_users_only(
        self,
        client: TestClient,
        reader: User,
        second_reader: User,
        admin: User,
        sample_book: Book,
        make_book,
    ):
        follow(client, reader, second_reader.id)
        client.post(
            "/api/v1/library/",
            json={"book_id": sample_book.id, "shelf": "read"},
            headers=get_auth_header(second_reader),
        )
        client.post(
            "/api/v1/library/",
            json={"book_id": make_book("Dune").id, "shelf": "read"},
            headers=get_auth_header(admin),
        )

        response = client.get(f"{URL}/feed", headers=get_auth_header(reader))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert len(data) == 1
        assert data[0]["type"] == "added_book"
        assert data[0]["user"]["username"] == "bookfan"
        assert data[0]["book"]["title"] == "The Hobbit"
        assert data[0]["details"] == {"shelf": "read"}

    def test_feed_newest_first_and_limited(
        self,
        client: TestClient,
        reader: User,
        second_reader: User,
        make_book,
    ):
        follow(client, reader, second_reader.id)
        for title in ["One", "Two", "Three"]:
            client.post(
                "/api/v1/library/",
                json={"book_id": make_book(title).id, "shelf": "wantToRead"},
                headers=get_auth_header(second_reader),
            )

        data = client.get(
            f"{URL}/feed", params={"limit": 2}, headers=get_auth_header(reader)
        ).json()

        assert [a["book"]["title"] for a in data] == ["Three", "Two"]

    def test_feed_limit_out_of_range(self, client: TestClient, reader: User):
        response = client.get(
            f"{URL}/feed", params={"limit": 0}, headers=get_auth_header(reader)
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestUserSearch:
    """Tests for GET /social/users/search"""

    def test_search_by_username_or_name(
        self,
        client: TestClient,
        reader: User,
        second_reader: User,
        admin: User,
    ):
        by_username = client.get(
            f"{URL}/users/search", params={"q": "BOOK"}, headers=get_auth_header(reader)
        ).json()
        by_name = client.get(
            f"{URL}/users/search", params={"q": "sam"}, headers=get_auth_header(reader)
        ).json()

        assert [u["username"] for u in by_username] == ["bookfan"]
        assert [u["username"] for u in by_name] == ["bookfan"]

    def test_search_excludes_caller(self, client: TestClient, reader: User):
        data = client.get(
            f"{URL}/users/search", params={"q": "reader"}, headers=get_auth_header(reader)
        ).json()

        assert data == []

    def test_blank_query(self, client: TestClient, reader: User):
        response = client.get(
            f"{URL}/users/search", params={"q": "  "}, headers=get_auth_header(reader)
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestProfile:
    """Tests for GET /social/profile/{user_id}"""

    def test_profile_counts(
        self,
        client: TestClient,
        reader: User,
        second_reader: User,
        admin: User,
    ):
        follow(client, reader, second_reader.id)
        follow(client, admin, second_reader.id)
        follow(client, second_reader, admin.id)

        response = client.get(
            f"{URL}/profile/{second_reader.id}", headers=get_auth_header(reader)
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["username"] == "bookfan"
        assert data["follower_count"] == 2
        assert data["following_count"] == 1
        assert data["is_following"] is True
        assert data["role"] == "user"

    def test_unknown_profile(self, client: TestClient, reader: User):
        response = client.get(f"{URL}/profile/99999", headers=get_auth_header(reader))

        assert response.status_code == status.HTTP_404_NOT_FOUND
