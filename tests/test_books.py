"""
Tests for Books API Endpoints

CRUD for /api/v1/books. Anyone can browse the catalog; only admins
change it.

TEST NAMING CONVENTION:
- test_<action>_<scenario>
"""

import pytest
from fastapi import status

from bookworm.services.security import create_access_token


def get_auth_header(user) -> dict:
    """Create authorization header for a user."""
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def catalog(make_book, genres):
    """Fifteen books; every third one is a mystery."""
    return [
        make_book(
            f"Book {i:02d}",
            [genres["mystery"] if i % 3 == 0 else genres["fantasy"]],
        )
        for i in range(15)
    ]


class TestListBooks:
    """Tests for GET /api/v1/books/ endpoint."""

    def test_list_books_empty(self, client):
        response = client.get("/api/v1/books/")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["items"] == []
        assert data["total"] == 0
        assert data["page"] == 1
        assert data["pages"] == 0

    def test_list_books_with_data(self, client, sample_book):
        response = client.get("/api/v1/books/")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 1
        book = data["items"][0]
        assert book["title"] == "The Hobbit"
        assert book["ratings_average"] == 4.3
        assert book["genres"][0]["name"] == "Fantasy"

    def test_list_books_pagination(self, client, catalog):
        first = client.get("/api/v1/books/?page=1&per_page=5").json()
        last = client.get("/api/v1/books/?page=3&per_page=5").json()

        assert len(first["items"]) == 5
        assert first["total"] == 15
        assert first["pages"] == 3
        assert len(last["items"]) == 5
        assert {b["id"] for b in first["items"]}.isdisjoint(b["id"] for b in last["items"])

    def test_list_books_page_beyond_range(self, client, catalog):
        data = client.get("/api/v1/books/?page=100&per_page=10").json()

        assert data["items"] == []
        assert data["total"] == 15

    def test_list_books_invalid_per_page(self, client):
        response = client.get("/api/v1/books/?per_page=500")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_search_matches_title_or_author(self, client, make_book):
        make_book("The Hobbit")
        make_book("Dune")

        by_title = client.get("/api/v1/books/", params={"search": "HOBB"}).json()
        by_author = client.get("/api/v1/books/", params={"search": "test author"}).json()

        assert [b["title"] for b in by_title["items"]] == ["The Hobbit"]
        assert by_author["total"] == 2

    def test_filter_by_genre(self, client, catalog, genres):
        data = client.get(
            "/api/v1/books/", params={"genre_id": genres["mystery"].id, "per_page": 100}
        ).json()

        assert data["total"] == 5
        assert all(b["genres"][0]["name"] == "Mystery" for b in data["items"])


class TestGetBook:
    """Tests for GET /api/v1/books/{book_id} endpoint."""

    def test_get_book_success(self, client, sample_book):
        response = client.get(f"/api/v1/books/{sample_book.id}")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["id"] == sample_book.id
        assert data["page_count"] == 310

    def test_get_book_not_found(self, client):
        response = client.get("/api/v1/books/99999")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "Book with id 99999 not found"


class TestCreateBook:
    """Tests for POST /api/v1/books/ endpoint."""

    def test_create_book_full(self, client, admin, genres):
        book_data = {
            "title": "The Name of the Wind",
            "author": "Patrick Rothfuss",
            "isbn": "978-0-7564-0407-9",
            "publish_year": 2007,
            "page_count": 662,
            "genre_ids": [genres["mystery"].id, genres["fantasy"].id],
        }

        response = client.post(
            "/api/v1/books/", json=book_data, headers=get_auth_header(admin)
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["isbn"] == "9780756404079"
        assert data["ratings_average"] == 0.0
        assert data["ratings_count"] == 0
        assert data["total_shelved"] == 0
        # primary genre first
        assert [g["name"] for g in data["genres"]] == ["Fantasy", "Mystery"]

    def test_create_book_requires_admin(self, client, reader):
        response = client.post(
            "/api/v1/books/",
            json={"title": "Dune", "author": "Frank Herbert"},
            headers=get_auth_header(reader),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_create_book_unknown_genre(self, client, admin):
        response = client.post(
            "/api/v1/books/",
            json={"title": "Dune", "author": "Frank Herbert", "genre_ids": [424242]},
            headers=get_auth_header(admin),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "424242" in response.json()["detail"]

    def test_create_book_blank_title(self, client, admin):
        response = client.post(
            "/api/v1/books/",
            json={"title": "   ", "author": "Frank Herbert"},
            headers=get_auth_header(admin),
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_aggregates_are_not_writable(self, client, admin):
        response = client.post(
            "/api/v1/books/",
            json={"title": "Dune", "author": "Frank Herbert", "ratings_average": 5.0},
            headers=get_auth_header(admin),
        )

        assert response.json()["ratings_average"] == 0.0


class TestUpdateBook:
    """Tests for PUT /api/v1/books/{book_id} endpoint."""

    def test_update_book_partial(self, client, admin, sample_book, genres):
        response = client.put(
            f"/api/v1/books/{sample_book.id}",
            json={"publish_year": 1937, "genre_ids": [genres["history"].id]},
            headers=get_auth_header(admin),
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["publish_year"] == 1937
        assert data["title"] == "The Hobbit"  # Unchanged
        assert [g["name"] for g in data["genres"]] == ["History"]

    def test_update_book_not_found(self, client, admin):
        response = client.put(
            "/api/v1/books/99999",
            json={"title": "Nothing"},
            headers=get_auth_header(admin),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestDeleteBook:
    """Tests for DELETE /api/v1/books/{book_id} endpoint."""

    def test_delete_book_success(self, client, admin, sample_book):
        response = client.delete(
            f"/api/v1/books/{sample_book.id}", headers=get_auth_header(admin)
        )

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert client.get(f"/api/v1/books/{sample_book.id}").status_code == 404

    def test_delete_book_requires_admin(self, client, reader, sample_book):
        response = client.delete(
            f"/api/v1/books/{sample_book.id}", headers=get_auth_header(reader)
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestBookValidation:
    """Tests for book data validation."""

    @pytest.mark.parametrize(
        "isbn,valid",
        [
            ("978-0-13-468599-1", True),   # ISBN-13 with hyphens
            ("0-06-112008-1", True),        # ISBN-10 with hyphens
            ("006112008X", True),           # ISBN-10 with X
            ("123", False),                 # Too short
            ("978-0-13-XXXX-1", False),     # Invalid characters
        ],
    )
    def test_isbn_validation(self, client, admin, isbn, valid):
        book_data = {"title": "Test Book", "author": "Someone", "isbn": isbn}

        response = client.post(
            "/api/v1/books/", json=book_data, headers=get_auth_header(admin)
        )

        if valid:
            assert response.status_code == status.HTTP_201_CREATED
        else:
            assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.parametrize(
        "page_count,valid",
        [
            (1, True),
            (50000, True),
            (0, False),     # Must be > 0
            (50001, False), # Too large
        ],
    )
    def test_page_count_validation(self, client, admin, page_count, valid):
        book_data = {"title": "Test Book", "author": "Someone", "page_count": page_count}

        response = client.post(
            "/api/v1/books/", json=book_data, headers=get_auth_header(admin)
        )

        if valid:
            assert response.status_code == status.HTTP_201_CREATED
        else:
            assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
