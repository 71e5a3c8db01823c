"""
Recommendation Pydantic Schemas

Serialized in camelCase like the stats responses (recommendationReason,
totalRead, ...).
"""

from pydantic import Field

from bookworm.schemas.stats import CamelModel


class RecommendedGenre(CamelModel):
    id: int
    name: str


class RecommendedBook(CamelModel):
    """A catalog book plus the reason it was picked."""

    id: int
    title: str
    author: str
    isbn: str | None = None
    cover_id: int | None = None
    cover_image: str | None = None
    description: str | None = None
    publish_year: int | None = None
    page_count: int | None = None
    ratings_average: float = 0.0
    ratings_count: int = 0
    total_shelved: int = 0
    genres: list[RecommendedGenre] = []
    recommendation_reason: str = Field(
        ...,
        examples=["You've read 3 Fantasy books", "Popular on Bookworm"],
    )


class RecommendationStats(CamelModel):
    total_read: int = Field(..., ge=0)
    currently_reading: int = Field(..., ge=0)
    want_to_read: int = Field(..., ge=0)


class RecommendationsResponse(CamelModel):
    recommendations: list[RecommendedBook]
    stats: RecommendationStats
