"""
Test Suite for Bookworm API

Test Organization:
- conftest.py: Shared fixtures (test database, client, users, catalog)
- test_books.py / test_genres.py: the catalog
- test_library.py / test_goals.py: shelves, progress and yearly goals
- test_reviews.py: reviews, moderation and book ratings
- test_stats.py / test_recommendations.py: derived reading data
- test_social.py: follows, profiles and the activity feed
- test_auth.py / test_admin.py / test_tutorials.py
- test_stores.py: database failures surface as DataUnavailableError

Running Tests:
    # Run all tests
    pytest

    # Run with coverage
    pytest --cov=bookworm --cov-report=html

    # Run specific file
    pytest tests/test_library.py -v
"""
