"""
pytest Fixtures for Bookworm API Tests

Shared fixtures:
- engine / db_session / client: SQLite in-memory database, one rolled-back
  transaction per test, FastAPI TestClient wired to that session
- reader / second_reader / admin: accounts
- genres / sample_book / catalog: catalog data
- make_book / make_entry: factories for catalog books and library entries
- broken_session: a session whose queries fail, for the 503 paths

FIXTURE SCOPES:
- session scope for the engine (expensive to create)
- function scope for everything else (isolation between tests)
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# Environment variables must be set BEFORE importing the app: settings are
# read once and cached.
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"

from collections.abc import Callable, Generator
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bookworm.database import Base, get_db
from bookworm.main import app
from bookworm.models import Book, Genre, LibraryEntry, Shelf, User
from bookworm.services.security import hash_password

# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="session")
def engine():
    """
    SQLite in-memory engine shared by the whole run.

    StaticPool keeps the single connection alive; without it the in-memory
    database would disappear between connections.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite manages transactions itself and breaks SAVEPOINT; hand BEGIN
    # back to SQLAlchemy so the per-test savepoints below work.
    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    A session inside an outer transaction that is rolled back after the test.

    The session works in savepoints: commit() releases one and rollback()
    returns to it, so code that rolls back on failure can be tested too.
    Nothing leaks between tests.
    """
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        join_transaction_mode="create_savepoint",
    )

    connection = engine.connect()
    transaction = connection.begin()
    session = TestSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """TestClient whose requests use the test session."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Session cleanup handled by db_session fixture

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# USER FIXTURES
# =============================================================================


def _create_user(db_session: Session, **fields) -> User:
    user = User(is_active=True, **fields)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def reader(db_session: Session) -> User:
    """A regular reader account."""
    return _create_user(
        db_session,
        email="reader@example.com",
        username="reader",
        hashed_password=hash_password("SecurePass123"),
        full_name="Rita Reader",
    )


@pytest.fixture
def second_reader(db_session: Session) -> User:
    """A second reader for ownership and follow scenarios."""
    return _create_user(
        db_session,
        email="second@example.com",
        username="bookfan",
        hashed_password=hash_password("SecurePass456"),
        full_name="Sam Second",
    )


@pytest.fixture
def admin(db_session: Session) -> User:
    """An admin account."""
    return _create_user(
        db_session,
        email="admin@example.com",
        username="admin",
        hashed_password=hash_password("AdminPass123"),
        full_name="Admin User",
        is_superuser=True,
    )


# =============================================================================
# CATALOG FIXTURES
# =============================================================================


@pytest.fixture
def genres(db_session: Session) -> dict[str, Genre]:
    """Fantasy, Mystery, Science Fiction and History, created in that order."""
    created = {
        "fantasy": Genre(name="Fantasy"),
        "mystery": Genre(name="Mystery"),
        "scifi": Genre(name="Science Fiction"),
        "history": Genre(name="History"),
    }
    db_session.add_all(created.values())
    db_session.commit()
    for genre in created.values():
        db_session.refresh(genre)
    return created


def _create_book(
    db_session: Session,
    title: str,
    genres: list[Genre],
    ratings_average: float = 0.0,
    total_shelved: int = 0,
    page_count: int | None = 300,
) -> Book:
    book = Book(
        title=title,
        author="Test Author",
        page_count=page_count,
        ratings_average=ratings_average,
        ratings_count=10 if ratings_average else 0,
        total_shelved=total_shelved,
        genres=genres,
    )
    db_session.add(book)
    db_session.commit()
    db_session.refresh(book)
    return book


@pytest.fixture
def make_book(db_session: Session) -> Callable[..., Book]:
    """Factory: make_book("Title", [genre], ratings_average=4.2, ...)."""

    def factory(title: str, genres: list[Genre] | None = None, **kwargs) -> Book:
        return _create_book(db_session, title, genres or [], **kwargs)

    return factory


@pytest.fixture
def sample_book(db_session: Session, genres: dict[str, Genre]) -> Book:
    return _create_book(
        db_session,
        "The Hobbit",
        [genres["fantasy"]],
        ratings_average=4.3,
        page_count=310,
    )


@pytest.fixture
def make_entry(db_session: Session) -> Callable[..., LibraryEntry]:
    """
    Factory that puts a book straight into a user's library.

    Bypasses the library service, so total_shelved and activities are
    left untouched.
    """

    def factory(
        user: User,
        book: Book,
        shelf: Shelf = Shelf.READ,
        personal_rating: int | None = None,
        date_finished: datetime | None = None,
        pages_read: int = 0,
    ) -> LibraryEntry:
        now = datetime.now(UTC)
        if shelf is Shelf.READ and date_finished is None:
            date_finished = now
        entry = LibraryEntry(
            user_id=user.id,
            book_id=book.id,
            shelf=shelf.value,
            pages_read=pages_read,
            total_pages=book.page_count or 0,
            percentage=0,
            personal_rating=personal_rating,
            date_added=now,
            date_finished=date_finished,
        )
        db_session.add(entry)
        db_session.commit()
        db_session.refresh(entry)
        return entry

    return factory


# =============================================================================
# FAILURE FIXTURES
# =============================================================================


@pytest.fixture
def broken_session() -> MagicMock:
    """A session whose every query fails as if the database went away."""
    session = MagicMock(spec=Session)
    session.execute.side_effect = OperationalError(
        "SELECT 1", {}, Exception("database is unavailable")
    )
    return session
