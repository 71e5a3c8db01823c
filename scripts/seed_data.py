#!/usr/bin/env python3
"""
Database Seed Script

Populates the database with sample data for development.

USAGE:
    # From the project root with the virtualenv active
    python scripts/seed_data.py

This script:
1. Creates tables if they don't exist
2. Clears existing catalog and tutorial data (optional)
3. Creates an admin account, genres, books and a few tutorials
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from bookworm.database import SessionLocal, create_tables
from bookworm.models import Book, Genre, Tutorial, TutorialStatus, User
from bookworm.services.security import hash_password

ADMIN_EMAIL = "admin@bookworm.local"


def clear_data(db: Session) -> None:
    """Remove catalog and tutorial rows. Accounts are kept."""
    print("Clearing existing data...")
    db.execute(delete(Tutorial))
    db.execute(delete(Book))
    db.execute(delete(Genre))
    db.commit()
    print("Data cleared.")


def get_or_create_admin(db: Session) -> User:
    admin = db.execute(select(User).where(User.email == ADMIN_EMAIL)).scalar_one_or_none()
    if admin is not None:
        return admin

    password = os.environ.get("SEED_ADMIN_PASSWORD", "ChangeMe123")
    admin = User(
        email=ADMIN_EMAIL,
        username="admin",
        full_name="Bookworm Admin",
        hashed_password=hash_password(password),
        is_active=True,
        is_superuser=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    print(f"Created admin account {ADMIN_EMAIL}.")
    return admin


def create_genres(db: Session) -> dict[str, Genre]:
    print("Creating genres...")
    genres_data = [
        ("Fantasy", "Fiction with supernatural or magical elements."),
        ("Science Fiction", "Imagined futures, science and technology."),
        ("Mystery", "A crime or puzzle to be solved."),
        ("Classics", "Timeless works of literary fiction."),
        ("Romance", "Stories centered on romantic relationships."),
        ("History", "Non-fiction about the past."),
    ]

    genres = {name: Genre(name=name, description=description) for name, description in genres_data}
    db.add_all(genres.values())
    db.commit()

    print(f"Created {len(genres)} genres.")
    return genres


def create_books(db: Session, genres: dict[str, Genre], admin: User) -> list[Book]:
    print("Creating books...")
    books_data = [
        ("The Hobbit", "J.R.R. Tolkien", "9780547928227", 1937, 310, ["Fantasy", "Classics"]),
        ("A Wizard of Earthsea", "Ursula K. Le Guin", "9780547773742", 1968, 183, ["Fantasy"]),
        ("Foundation", "Isaac Asimov", "9780553293357", 1951, 244, ["Science Fiction"]),
        ("The Left Hand of Darkness", "Ursula K. Le Guin", "9780441478125", 1969, 304, ["Science Fiction"]),
        ("Murder on the Orient Express", "Agatha Christie", "9780062693662", 1934, 256, ["Mystery", "Classics"]),
        ("The Hound of the Baskervilles", "Arthur Conan Doyle", "9780141034324", 1902, 256, ["Mystery"]),
        ("Pride and Prejudice", "Jane Austen", "9780141439518", 1813, 432, ["Romance", "Classics"]),
        ("SPQR", "Mary Beard", "9781631492228", 2015, 608, ["History"]),
    ]

    books = []
    for title, author, isbn, year, pages, genre_names in books_data:
        book = Book(
            title=title,
            author=author,
            isbn=isbn,
            publish_year=year,
            page_count=pages,
            created_by_id=admin.id,
        )
        book.genres = sorted((genres[name] for name in genre_names), key=lambda g: g.id)
        db.add(book)
        books.append(book)

    db.commit()
    print(f"Created {len(books)} books.")
    return books


def create_tutorials(db: Session, admin: User) -> list[Tutorial]:
    print("Creating tutorials...")
    tutorials = [
        Tutorial(
            title="Welcome to Bookworm",
            description="Find your way around.",
            content="Search the catalog, then add books to one of your three shelves.",
            category="Getting Started",
            status=TutorialStatus.PUBLISHED.value,
            author_id=admin.id,
        ),
        Tutorial(
            title="Tracking your progress",
            description="Log pages as you read.",
            content="Open a book on your Currently Reading shelf and update the pages read.",
            category="Library",
            status=TutorialStatus.PUBLISHED.value,
            author_id=admin.id,
        ),
    ]
    db.add_all(tutorials)
    db.commit()
    print(f"Created {len(tutorials)} tutorials.")
    return tutorials


def seed_database(clear_existing: bool = True) -> None:
    print("=" * 60)
    print("Starting database seed...")
    print("=" * 60)

    create_tables()
    db = SessionLocal()

    try:
        if clear_existing:
            clear_data(db)

        admin = get_or_create_admin(db)
        genres = create_genres(db)
        books = create_books(db, genres, admin)
        tutorials = create_tutorials(db, admin)

        print("=" * 60)
        print("Database seeding completed successfully!")
        print(f"  - Genres: {len(genres)}")
        print(f"  - Books: {len(books)}")
        print(f"  - Tutorials: {len(tutorials)}")
        print("API documentation at http://localhost:8000/docs")

    except Exception as e:
        print(f"Error seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
