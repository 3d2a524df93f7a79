"""
Rating request/response schemas.
"""
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, StrictInt


class SubmitRatingRequest(BaseModel):
    """Payload for POST /ratings.

    score is StrictInt so 2.5, 4.0 and "4" are rejected rather than coerced;
    the 1–5 range is checked by the rating service.
    """

    movie_id: UUID
    score: StrictInt


class ChangeRatingRequest(BaseModel):
    """Payload for PUT /ratings/{movie_id}."""

    score: StrictInt


class SubmitRatingResponse(BaseModel):
    rating_id: UUID
    movie_id: UUID
    movie_title: str
    score: int
    outcome: Literal["created", "updated"]
    timestamp: datetime


class RemoveRatingResponse(BaseModel):
    movie_id: UUID
    deleted_at: datetime


class StarBucket(BaseModel):
    """Share of a movie's ratings at one star value."""

    stars: int
    count: int
    percentage: int


class MovieRatingStatsResponse(BaseModel):
    movie_id: UUID
    movie_title: str
    average: float
    total: int
    distribution: list[StarBucket]


class ActorRatingResponse(BaseModel):
    """The caller's own rating for a movie, if any."""

    has_rating: bool
    rating_id: UUID | None = None
    score: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class RatingItem(BaseModel):
    rating_id: UUID
    user_id: UUID
    movie_id: UUID
    score: int
    created_at: datetime
    updated_at: datetime


class RatedMovieSummary(BaseModel):
    id: UUID
    title: str
    release_year: int | None = None
    genre: str | None = None
    average_rating: float
    total_ratings: int


class ActorRatingItem(RatingItem):
    movie: RatedMovieSummary


class MovieRatingListResponse(BaseModel):
    """Paginated ratings for one movie."""

    ratings: list[RatingItem]
    pagination: Pagination


class ActorRatingListResponse(BaseModel):
    """Paginated ratings by the caller, each with its movie."""

    ratings: list[ActorRatingItem]
    pagination: Pagination
