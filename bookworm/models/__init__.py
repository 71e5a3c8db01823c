"""
SQLAlchemy Models Package

All database models for the Bookworm API.

Model Relationships:
- Genre <-> Book: Many-to-Many (book_genres)
- User <-> Book: Many-to-Many through LibraryEntry (shelf + progress)
- User <-> User: Many-to-Many follow graph (user_follows)
- Review, ReadingGoal, Activity, Tutorial: owned by a User

Import all models here so that:
1. They are available as: from bookworm.models import Book, Genre
2. Base.metadata knows every table before create_all()
"""

# The order matters for SQLAlchemy to resolve relationships
from bookworm.models.user import User, user_follows
from bookworm.models.genre import Genre
from bookworm.models.book import Book, book_genres
from bookworm.models.library import LibraryEntry, Shelf
from bookworm.models.review import Review, ReviewStatus
from bookworm.models.reading_goal import ReadingGoal
from bookworm.models.activity import Activity, ActivityType
from bookworm.models.tutorial import Tutorial, TutorialStatus

__all__ = [
    "User",
    "user_follows",
    "Genre",
    "Book",
    "book_genres",
    "LibraryEntry",
    "Shelf",
    "Review",
    "ReviewStatus",
    "ReadingGoal",
    "Activity",
    "ActivityType",
    "Tutorial",
    "TutorialStatus",
]
