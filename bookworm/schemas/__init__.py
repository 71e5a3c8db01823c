"""
Pydantic Schemas Package

Request/response models, kept separate from the SQLAlchemy models so the
API controls exactly what is accepted and exposed.

Schema Naming Convention:
- XxxCreate: Fields required when creating a record
- XxxUpdate: Fields allowed when updating (all optional)
- XxxResponse: Fields returned in API responses

Stats and recommendation responses serialize with camelCase keys; every
other resource uses snake_case.
"""

from bookworm.schemas.admin import AdminStatsResponse, UserListResponse
from bookworm.schemas.book import (
    BookCreate,
    BookListResponse,
    BookResponse,
    BookSummary,
    BookUpdate,
)
from bookworm.schemas.genre import (
    GenreCreate,
    GenreResponse,
    GenreSummary,
    GenreUpdate,
)
from bookworm.schemas.goal import GoalProgress, GoalResponse, GoalSet
from bookworm.schemas.library import (
    LibraryEntryCreate,
    LibraryEntryResponse,
    LibraryEntryUpdate,
    LibraryListResponse,
    ProgressUpdate,
)
from bookworm.schemas.recommendation import (
    RecommendationsResponse,
    RecommendedBook,
)
from bookworm.schemas.review import (
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewStatusUpdate,
    ReviewUpdate,
)
from bookworm.schemas.social import (
    ActivityResponse,
    MessageResponse,
    ProfileResponse,
)
from bookworm.schemas.stats import EnhancedStatsResponse, LibraryStatsResponse
from bookworm.schemas.tutorial import (
    TutorialCreate,
    TutorialResponse,
    TutorialUpdate,
)
from bookworm.schemas.user import (
    RefreshTokenRequest,
    RoleUpdate,
    TokenResponse,
    UserCreate,
    UserPublicResponse,
    UserResponse,
    UserUpdate,
)

__all__ = [
    # Admin
    "AdminStatsResponse",
    "UserListResponse",
    # Book
    "BookCreate",
    "BookListResponse",
    "BookResponse",
    "BookSummary",
    "BookUpdate",
    # Genre
    "GenreCreate",
    "GenreResponse",
    "GenreSummary",
    "GenreUpdate",
    # Goal
    "GoalProgress",
    "GoalResponse",
    "GoalSet",
    # Library
    "LibraryEntryCreate",
    "LibraryEntryResponse",
    "LibraryEntryUpdate",
    "LibraryListResponse",
    "ProgressUpdate",
    # Recommendations
    "RecommendationsResponse",
    "RecommendedBook",
    # Review
    "ReviewCreate",
    "ReviewListResponse",
    "ReviewResponse",
    "ReviewStatusUpdate",
    "ReviewUpdate",
    # Social
    "ActivityResponse",
    "MessageResponse",
    "ProfileResponse",
    # Stats
    "EnhancedStatsResponse",
    "LibraryStatsResponse",
    # Tutorial
    "TutorialCreate",
    "TutorialResponse",
    "TutorialUpdate",
    # User
    "RefreshTokenRequest",
    "RoleUpdate",
    "TokenResponse",
    "UserCreate",
    "UserPublicResponse",
    "UserResponse",
    "UserUpdate",
]
