"""
Movies API — /movies
────────────────────
Read-only catalog. average_rating / total_ratings are the cached aggregate
maintained by the rating services.

Endpoints:
  GET /movies              — Active movies, best rated first
  GET /movies/{movie_id}   — Single active movie
"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.movies import MovieListResponse, MovieResponse
from app.services.movie_service import get_movie_by_id, list_active_movies
from app.services.rating_math import MAX_PAGE_SIZE, total_pages

router = APIRouter()


def _error(code: str, message: str) -> dict:
    """Standard error envelope."""
    return {"error": {"code": code, "message": message}}


@router.get("", response_model=MovieListResponse)
def list_movies(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=MAX_PAGE_SIZE),
    genre: str | None = Query(None, description="Case-insensitive genre filter"),
    db: Session = Depends(get_db),
) -> dict:
    rows, total = list_active_movies(db, page=page, limit=limit, genre=genre)
    return {
        "movies": [MovieResponse.model_validate(row) for row in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": total_pages(total, limit),
        },
    }


@router.get("/{movie_id}", response_model=MovieResponse)
def get_movie(movie_id: UUID, db: Session = Depends(get_db)) -> MovieResponse:
    row = get_movie_by_id(db, movie_id)
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error("MOVIE_NOT_FOUND", f"Movie {movie_id} not found"),
        )
    return MovieResponse.model_validate(row)
