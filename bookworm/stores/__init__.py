"""
Data Stores Package

Thin query helpers the services read and write through:
- library: per-user shelf records
- catalog: books and their derived aggregates
- reviews: reviews filtered by moderation status

Every function turns a SQLAlchemyError into DataUnavailableError, so a
failing database surfaces as a single 503 instead of a partial result.
"""

from bookworm.stores import catalog, library, reviews

__all__ = ["catalog", "library", "reviews"]
