"""
Movie catalog response schemas.
"""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.schemas.ratings import Pagination


class MovieResponse(BaseModel):
    """A catalog movie with its cached rating aggregate."""

    id: UUID
    title: str
    release_year: int | None
    genre: str | None
    average_rating: float
    total_ratings: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MovieListResponse(BaseModel):
    movies: list[MovieResponse]
    pagination: Pagination
