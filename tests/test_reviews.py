"""
Tests for Reviews and Book Ratings

Tests the review system:
- Create a review (pending by default, one per user per book)
- List reviews (approved only for readers; admins see everything)
- Update a review (owner only)
- Moderate a review (admin only)
- Delete a review (owner or admin)

Business Rules:
- A book's ratings_average / ratings_count only count approved reviews
- Every review change recomputes the book's rating from scratch
"""

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bookworm.models import Activity, ActivityType, Book, Genre, Review, ReviewStatus, User
from bookworm.services.ratings import (
    RATING_LOCK_POOL_SIZE,
    book_rating_lock,
    compute_rating_aggregate,
    recalculate_all_book_ratings,
    recalculate_book_rating,
)
from bookworm.services.security import create_access_token
from bookworm.stores import reviews as review_store

URL = "/api/v1/reviews/"


def get_auth_header(user: User) -> dict:
    """Create authorization header for a user."""
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def book(make_book, genres: dict[str, Genre]) -> Book:
    """An unrated book."""
    return make_book("Review Target", [genres["fantasy"]])


@pytest.fixture
def add_review(db_session: Session):
    """Insert a review directly, bypassing the rating recompute."""

    def factory(
        user: User,
        book: Book,
        rating: int,
        review_status: ReviewStatus = ReviewStatus.APPROVED,
    ) -> Review:
        review = Review(
            book_id=book.id,
            user_id=user.id,
            rating=rating,
            comment="Worth reading.",
            status=review_status.value,
        )
        db_session.add(review)
        db_session.commit()
        db_session.refresh(review)
        return review

    return factory


def create_review(client: TestClient, user: User, book: Book, rating: int = 4):
    return client.post(
        URL,
        json={"book_id": book.id, "rating": rating, "comment": "Loved the ending."},
        headers=get_auth_header(user),
    )


def moderate(client: TestClient, admin: User, review_id: int, new_status: str):
    return client.put(
        f"{URL}{review_id}/status",
        json={"status": new_status},
        headers=get_auth_header(admin),
    )


# =============================================================================
# Rating Aggregate
# =============================================================================


class TestRatingAggregate:
    def test_empty(self):
        assert compute_rating_aggregate([]) == (0.0, 0)

    def test_average_is_the_exact_mean(self):
        assert compute_rating_aggregate([4, 5]) == (4.5, 2)
        assert compute_rating_aggregate([1, 2, 2]) == (5 / 3, 3)
        assert compute_rating_aggregate([5, 4, 4]) == (13 / 3, 3)

    def test_stored_average_is_not_rounded(
        self,
        db_session: Session,
        reader: User,
        second_reader: User,
        admin: User,
        book: Book,
        add_review,
    ):
        add_review(reader, book, 4)
        add_review(second_reader, book, 4)
        add_review(admin, book, 5)

        assert recalculate_book_rating(db_session, book.id) == (13 / 3, 3)

        db_session.refresh(book)
        assert book.ratings_average == pytest.approx(13 / 3, abs=1e-9)
        assert book.ratings_count == 3

    def test_recalculate_all_repairs_stale_aggregates(
        self,
        db_session: Session,
        reader: User,
        second_reader: User,
        book: Book,
        add_review,
    ):
        add_review(reader, book, 5)
        add_review(second_reader, book, 2)
        add_review(second_reader, book, 1, ReviewStatus.REJECTED)

        assert recalculate_all_book_ratings(db_session) >= 1

        db_session.refresh(book)
        assert book.ratings_average == 3.5
        assert book.ratings_count == 2


class TestRatingLocks:
    def test_books_sharing_a_slot_do_not_deadlock(self):
        with book_rating_lock(7, 7 + RATING_LOCK_POOL_SIZE, 7):
            pass

    def test_lock_is_released_after_an_error(self):
        with pytest.raises(RuntimeError):
            with book_rating_lock(3):
                raise RuntimeError("boom")

        with book_rating_lock(3 + RATING_LOCK_POOL_SIZE):
            pass


# =============================================================================
# Create
# =============================================================================


class TestCreateReview:
    """Tests for POST /api/v1/reviews/"""

    def test_create_review_is_pending(
        self,
        client: TestClient,
        db_session: Session,
        reader: User,
        book: Book,
    ):
        response = create_review(client, reader, book, rating=5)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["rating"] == 5
        assert data["status"] == "pending"
        assert data["user"]["username"] == "reader"
        assert data["book"]["title"] == "Review Target"

        db_session.refresh(book)
        assert book.ratings_count == 0
        assert book.ratings_average == 0.0

    def test_create_records_activity(
        self,
        client: TestClient,
        db_session: Session,
        reader: User,
        book: Book,
    ):
        create_review(client, reader, book, rating=3)

        activity = db_session.execute(
            select(Activity).where(Activity.type == ActivityType.REVIEWED_BOOK.value)
        ).scalar_one()
        assert activity.user_id == reader.id
        assert activity.book_id == book.id
        assert activity.details == {"rating": 3}

    def test_duplicate_review(self, client: TestClient, reader: User, book: Book):
        create_review(client, reader, book)

        response = create_review(client, reader, book)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_book(self, client: TestClient, reader: User):
        response = client.post(
            URL,
            json={"book_id": 99999, "rating": 4, "comment": "?"},
            headers=get_auth_header(reader),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_rating_out_of_range(self, client: TestClient, reader: User, book: Book):
        response = create_review(client, reader, book, rating=6)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_requires_auth(self, client: TestClient, book: Book):
        response = client.post(
            URL, json={"book_id": book.id, "rating": 4, "comment": "Nice"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Moderation
# =============================================================================


class TestModeration:
    """Tests for PUT /api/v1/reviews/{review_id}/status"""

    def test_approval_updates_book_rating(
        self,
        client: TestClient,
        db_session: Session,
        reader: User,
        second_reader: User,
        admin: User,
        book: Book,
    ):
        first = create_review(client, reader, book, rating=4).json()
        second = create_review(client, second_reader, book, rating=5).json()

        response = moderate(client, admin, first["id"], "approved")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "approved"
        assert data["moderated_by_id"] == admin.id
        assert data["moderated_at"] is not None

        db_session.refresh(book)
        assert (book.ratings_average, book.ratings_count) == (4.0, 1)

        moderate(client, admin, second["id"], "approved")
        db_session.refresh(book)
        assert (book.ratings_average, book.ratings_count) == (4.5, 2)

    def test_rejecting_removes_from_rating(
        self,
        client: TestClient,
        db_session: Session,
        reader: User,
        second_reader: User,
        admin: User,
        book: Book,
        add_review,
    ):
        keep = add_review(reader, book, 2)
        drop = add_review(second_reader, book, 5)

        moderate(client, admin, drop.id, "rejected")

        db_session.refresh(book)
        assert (book.ratings_average, book.ratings_count) == (float(keep.rating), 1)

    def test_only_admins_moderate(
        self,
        client: TestClient,
        reader: User,
        book: Book,
    ):
        review_id = create_review(client, reader, book).json()["id"]

        response = moderate(client, reader, review_id, "approved")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_invalid_status(
        self,
        client: TestClient,
        reader: User,
        admin: User,
        book: Book,
    ):
        review_id = create_review(client, reader, book).json()["id"]

        response = moderate(client, admin, review_id, "published")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


# =============================================================================
# List and Get
# =============================================================================


class TestListReviews:
    """Tests for GET /api/v1/reviews/"""

    def test_readers_only_see_approved(
        self,
        client: TestClient,
        reader: User,
        second_reader: User,
        book: Book,
        add_review,
    ):
        add_review(reader, book, 4, ReviewStatus.APPROVED)
        add_review(second_reader, book, 2, ReviewStatus.PENDING)

        response = client.get(
            URL, params={"status": "pending"}, headers=get_auth_header(reader)
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["status"] == "approved"

    def test_admins_see_all_and_filter(
        self,
        client: TestClient,
        reader: User,
        second_reader: User,
        admin: User,
        book: Book,
        add_review,
    ):
        add_review(reader, book, 4, ReviewStatus.APPROVED)
        add_review(second_reader, book, 2, ReviewStatus.PENDING)

        everything = client.get(URL, headers=get_auth_header(admin)).json()
        pending = client.get(
            URL, params={"status": "pending"}, headers=get_auth_header(admin)
        ).json()

        assert everything["total"] == 2
        assert pending["total"] == 1
        assert pending["items"][0]["rating"] == 2

    def test_filter_by_book(
        self,
        client: TestClient,
        reader: User,
        book: Book,
        sample_book: Book,
        add_review,
    ):
        add_review(reader, book, 4)
        add_review(reader, sample_book, 5)

        data = client.get(
            URL, params={"book_id": sample_book.id}, headers=get_auth_header(reader)
        ).json()

        assert data["total"] == 1
        assert data["items"][0]["book_id"] == sample_book.id

    def test_pending_review_visible_to_author_only(
        self,
        client: TestClient,
        reader: User,
        second_reader: User,
        book: Book,
        add_review,
    ):
        review = add_review(reader, book, 3, ReviewStatus.PENDING)

        own = client.get(f"{URL}{review.id}", headers=get_auth_header(reader))
        other = client.get(f"{URL}{review.id}", headers=get_auth_header(second_reader))

        assert own.status_code == status.HTTP_200_OK
        assert other.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Update and Delete
# =============================================================================


class TestUpdateReview:
    """Tests for PUT /api/v1/reviews/{review_id}"""

    def test_owner_update_recomputes_rating(
        self,
        client: TestClient,
        db_session: Session,
        reader: User,
        book: Book,
        add_review,
    ):
        review = add_review(reader, book, 2)

        response = client.put(
            f"{URL}{review.id}",
            json={"rating": 5, "comment": "Better on a second read."},
            headers=get_auth_header(reader),
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["comment"] == "Better on a second read."
        db_session.refresh(book)
        assert (book.ratings_average, book.ratings_count) == (5.0, 1)

    def test_non_owner_cannot_update(
        self,
        client: TestClient,
        reader: User,
        second_reader: User,
        book: Book,
        add_review,
    ):
        review = add_review(reader, book, 2)

        response = client.put(
            f"{URL}{review.id}",
            json={"rating": 1},
            headers=get_auth_header(second_reader),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestDeleteReview:
    """Tests for DELETE /api/v1/reviews/{review_id}"""

    def test_deleting_last_approved_review_resets_rating(
        self,
        client: TestClient,
        db_session: Session,
        reader: User,
        admin: User,
        book: Book,
    ):
        review_id = create_review(client, reader, book, rating=5).json()["id"]
        moderate(client, admin, review_id, "approved")

        response = client.delete(f"{URL}{review_id}", headers=get_auth_header(reader))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        db_session.refresh(book)
        assert (book.ratings_average, book.ratings_count) == (0.0, 0)

    def test_admin_can_delete_any_review(
        self,
        client: TestClient,
        reader: User,
        admin: User,
        book: Book,
        add_review,
    ):
        review = add_review(reader, book, 4)

        response = client.delete(f"{URL}{review.id}", headers=get_auth_header(admin))

        assert response.status_code == status.HTTP_204_NO_CONTENT

    def test_non_owner_cannot_delete(
        self,
        client: TestClient,
        reader: User,
        second_reader: User,
        book: Book,
        add_review,
    ):
        review = add_review(reader, book, 4)

        response = client.delete(
            f"{URL}{review.id}", headers=get_auth_header(second_reader)
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Failed Recompute
# =============================================================================


class TestFailedRecompute:
    """A review change and its rating recompute are committed together."""

    @pytest.fixture
    def failing_review_store(self, monkeypatch, broken_session):
        real_find_by_book = review_store.find_by_book

        def find_by_book(db, book_id, status=None):
            return real_find_by_book(broken_session, book_id, status)

        monkeypatch.setattr(review_store, "find_by_book", find_by_book)

    def test_create_is_rolled_back(
        self,
        client: TestClient,
        db_session: Session,
        reader: User,
        book: Book,
        failing_review_store,
    ):
        response = create_review(client, reader, book, rating=5)

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json() == {"detail": "Data unavailable: review lookup failed"}
        assert db_session.execute(select(func.count(Review.id))).scalar_one() == 0
        assert db_session.execute(select(func.count(Activity.id))).scalar_one() == 0

    def test_moderation_is_rolled_back(
        self,
        client: TestClient,
        db_session: Session,
        reader: User,
        admin: User,
        book: Book,
        add_review,
        failing_review_store,
    ):
        review = add_review(reader, book, 4, ReviewStatus.PENDING)

        response = moderate(client, admin, review.id, "approved")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        db_session.refresh(review)
        assert review.status == "pending"
        assert review.moderated_by_id is None

    def test_delete_is_rolled_back(
        self,
        client: TestClient,
        db_session: Session,
        reader: User,
        book: Book,
        add_review,
        failing_review_store,
    ):
        review = add_review(reader, book, 4)

        response = client.delete(f"{URL}{review.id}", headers=get_auth_header(reader))

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert db_session.get(Review, review.id) is not None
