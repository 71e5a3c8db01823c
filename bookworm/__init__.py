"""
Bookworm API Application Package

Backend for a social reading tracker: shelves, reading progress, reviews,
reading goals, follows, tutorials, and the statistics/recommendation engine
that sits on top of a user's library history.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy database connection and session management
- exceptions.py: Domain error taxonomy mapped to HTTP responses
- main.py: FastAPI application factory and configuration
- dependencies.py: Dependency injection functions
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response schemas
- stores/: Persistence collaborators used by the aggregation services
- routers/: API route handlers
- services/: Business logic (stats, recommendations, ratings, library)
"""

__version__ = "0.1.0"
