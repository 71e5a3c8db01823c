"""
Database Configuration Module

This module sets up SQLAlchemy 2.0 for the Bookworm API.

We're using SYNCHRONOUS SQLAlchemy: FastAPI runs sync route handlers in its
threadpool, and every aggregation in this service is a handful of reads
followed by in-process computation.

Session Management Pattern
==========================
We use the "session per request" pattern:
1. Request arrives -> create a new session
2. Use session for all database operations in that request
3. Commit on success, rollback on failure
4. Close session when request ends

This is implemented using FastAPI's dependency injection.
"""

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from bookworm.config import get_settings

settings = get_settings()


# =============================================================================
# Database Engine
# =============================================================================
# Key parameters:
# - pool_size: Number of connections to keep open permanently
# - max_overflow: How many extra connections can be created during high load
# - pool_pre_ping: Test connection health before using
# - echo: Log all SQL statements (debug only)

def _engine_options(database_url: str) -> dict:
    """Build engine keyword arguments for the configured backend."""
    if database_url.startswith("sqlite"):
        # SQLite connections are bound to the creating thread by default
        return {
            "connect_args": {"check_same_thread": False},
            "echo": settings.debug,
        }
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": True,
        "echo": settings.debug,
    }


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))


# =============================================================================
# Session Factory
# =============================================================================
# - autocommit=False: We control when to commit
# - autoflush=False: Don't auto-flush before queries (more predictable behavior)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


# =============================================================================
# Base Model Class
# =============================================================================

class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    All models inherit from this class:

        class Book(Base):
            __tablename__ = "books"
            ...
    """
    pass


# =============================================================================
# Dependency Injection
# =============================================================================
def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI.

    Code before yield creates the session, the route handler receives it,
    and the finally block closes it even if the handler raised.

    Yields:
        SQLAlchemy Session instance
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# =============================================================================
# Utility Functions
# =============================================================================
def create_tables() -> None:
    """
    Create all database tables.

    Used by the development server and the maintenance scripts.
    """
    # Importing the models package registers every table on Base.metadata
    import bookworm.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
