"""
Ratings API — /ratings
──────────────────────
1–5 star ratings, one per user per movie.

Endpoints:
  POST   /ratings                         — Create or replace own rating
  PUT    /ratings/{movie_id}              — Change an existing rating
  DELETE /ratings/{movie_id}              — Delete own rating
  GET    /ratings/user                    — Own ratings (auth)
  GET    /ratings/movie/{movie_id}        — Ratings for a movie
  GET    /ratings/movie/{movie_id}/stats  — Average, count, distribution
  GET    /ratings/movie/{movie_id}/user   — Own rating for a movie (auth)
"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.models import User
from app.db.session import get_db
from app.deps.auth import get_current_user
from app.schemas.ratings import (
    ActorRatingListResponse,
    ActorRatingResponse,
    ChangeRatingRequest,
    MovieRatingListResponse,
    MovieRatingStatsResponse,
    RemoveRatingResponse,
    SubmitRatingRequest,
    SubmitRatingResponse,
)
from app.services.errors import (
    AuthRequiredError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RatingServiceError,
    ValidationError,
)
from app.services.rating_math import MAX_PAGE_SIZE
from app.services.rating_service import (
    change_rating,
    get_actor_rating_for_movie,
    get_movie_rating_stats,
    list_ratings_for_actor,
    list_ratings_for_movie,
    remove_rating,
    submit_rating,
)

router = APIRouter()

_STATUS_BY_ERROR: dict[type[RatingServiceError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthRequiredError: status.HTTP_401_UNAUTHORIZED,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
}


def _error(code: str, message: str) -> dict:
    """Standard error envelope."""
    return {"error": {"code": code, "message": message}}


def _http_error(exc: RatingServiceError) -> HTTPException:
    status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(status_code=status_code, detail=_error(exc.code, str(exc)))


# ── Mutations ─────────────────────────────────────────────────────────────────

@router.post("", response_model=SubmitRatingResponse, status_code=status.HTTP_201_CREATED)
def create_rating(
    payload: SubmitRatingRequest,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """
    Set the caller's score for a movie.

    201 when this is the caller's first rating of the movie, 200 when it
    replaced an earlier one.
    """
    try:
        result = submit_rating(db, current_user.id, payload.movie_id, payload.score)
    except RatingServiceError as exc:
        raise _http_error(exc) from exc

    if result["outcome"] == "updated":
        response.status_code = status.HTTP_200_OK
    return result


@router.put("/{movie_id}", response_model=SubmitRatingResponse)
def update_rating(
    movie_id: UUID,
    payload: ChangeRatingRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    try:
        return change_rating(db, current_user.id, movie_id, payload.score)
    except RatingServiceError as exc:
        raise _http_error(exc) from exc


@router.delete("/{movie_id}", response_model=RemoveRatingResponse)
def delete_rating(
    movie_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    try:
        return remove_rating(db, current_user.id, movie_id)
    except RatingServiceError as exc:
        raise _http_error(exc) from exc


# ── Reads ─────────────────────────────────────────────────────────────────────

@router.get("/user", response_model=ActorRatingListResponse)
def get_my_ratings(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.RATINGS_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    try:
        return list_ratings_for_actor(db, current_user.id, page=page, limit=limit)
    except RatingServiceError as exc:
        raise _http_error(exc) from exc


@router.get("/movie/{movie_id}/stats", response_model=MovieRatingStatsResponse)
def get_movie_stats(movie_id: UUID, db: Session = Depends(get_db)) -> dict:
    try:
        return get_movie_rating_stats(db, movie_id)
    except RatingServiceError as exc:
        raise _http_error(exc) from exc


@router.get("/movie/{movie_id}/user", response_model=ActorRatingResponse)
def get_my_rating_for_movie(
    movie_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    try:
        return get_actor_rating_for_movie(db, current_user.id, movie_id)
    except RatingServiceError as exc:
        raise _http_error(exc) from exc


@router.get("/movie/{movie_id}", response_model=MovieRatingListResponse)
def get_movie_ratings(
    movie_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.RATINGS_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> dict:
    try:
        return list_ratings_for_movie(db, movie_id, page=page, limit=limit)
    except RatingServiceError as exc:
        raise _http_error(exc) from exc
