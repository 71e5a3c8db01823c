"""
API Routers Package

One router per resource, each registered in main.py under /api/v1:
- auth.py: /auth/* (registration, login, tokens, profile)
- books.py / genres.py: the shared catalog
- library.py: the caller's shelves and reading progress
- stats.py: reading statistics
- recommendations.py: personalized book picks
- reviews.py: public reviews and moderation
- goals.py: yearly reading goals
- social.py: follows, profiles and the activity feed
- tutorials.py: help articles
- admin.py: dashboard and user management
"""

from bookworm.routers.admin import router as admin_router
from bookworm.routers.auth import router as auth_router
from bookworm.routers.books import router as books_router
from bookworm.routers.genres import router as genres_router
from bookworm.routers.goals import router as goals_router
from bookworm.routers.library import router as library_router
from bookworm.routers.recommendations import router as recommendations_router
from bookworm.routers.reviews import router as reviews_router
from bookworm.routers.social import router as social_router
from bookworm.routers.stats import router as stats_router
from bookworm.routers.tutorials import router as tutorials_router

__all__ = [
    "admin_router",
    "auth_router",
    "books_router",
    "genres_router",
    "goals_router",
    "library_router",
    "recommendations_router",
    "reviews_router",
    "social_router",
    "stats_router",
    "tutorials_router",
]
