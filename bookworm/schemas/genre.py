"""
Genre Pydantic Schemas
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GenreBase(BaseModel):
    """Base schema with shared genre fields."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Genre name",
        examples=["Fantasy", "Mystery", "Science Fiction"],
    )

    description: str | None = Field(
        default=None,
        max_length=1000,
        description="Description of the genre",
    )

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        """Trim the name; blank names are rejected."""
        if not v.strip():
            raise ValueError("Genre name cannot be empty or whitespace")
        return v.strip()


class GenreCreate(GenreBase):
    pass


class GenreUpdate(BaseModel):
    """Schema for updating an existing genre. All fields optional."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=1000)

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Genre name cannot be empty or whitespace")
        return v.strip() if v else v


class GenreSummary(BaseModel):
    """Genre as embedded in book responses."""

    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class GenreResponse(GenreBase):
    """Schema for genre responses."""

    id: int = Field(..., description="Unique identifier")
    created_at: datetime = Field(..., description="When the genre was created")
    updated_at: datetime = Field(..., description="When the genre was last updated")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "name": "Fantasy",
                "description": "Magic, myth and other worlds",
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z",
            }
        },
    )
