"""
Reading Goal Pydantic Schemas
"""

from pydantic import BaseModel, Field


class GoalSet(BaseModel):
    """
    Example request body:
    {
        "target_books": 24,
        "year": 2025
    }

    target_books is range-checked by the goals service (400 below 1).
    """

    target_books: int = Field(..., description="Books to finish this year")
    year: int | None = Field(
        default=None,
        ge=1900,
        le=9999,
        description="Goal year (defaults to the current year)",
    )


class GoalProgress(BaseModel):
    id: int
    year: int
    target_books: int = Field(..., ge=1)
    current_books: int = Field(..., ge=0, description="Read books finished that year")
    percentage: int = Field(..., ge=0, description="May exceed 100 once the goal is beaten")


class GoalResponse(BaseModel):
    goal: GoalProgress | None = Field(
        default=None,
        description="null when no goal is set for the year",
    )
    current_books: int = Field(..., ge=0)
