"""
Movie catalog reads. Inactive (soft-deleted) movies are invisible here.
"""
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.db.models import Movie
from app.services.rating_math import page_offset


def get_movie_by_id(db: Session, movie_id: UUID) -> Movie | None:
    """Fetch one active movie by primary key."""
    return (
        db.query(Movie)
        .filter(Movie.id == movie_id, Movie.is_active.is_(True))
        .first()
    )


def list_active_movies(
    db: Session,
    page: int = 1,
    limit: int = 12,
    genre: str | None = None,
) -> tuple[list[Movie], int]:
    """One page of active movies, best rated first, plus the total count."""
    query = db.query(Movie).filter(Movie.is_active.is_(True))
    if genre:
        query = query.filter(func.lower(Movie.genre) == genre.strip().lower())

    total = query.with_entities(func.count(Movie.id)).scalar() or 0
    rows = (
        query.order_by(
            Movie.average_rating.desc(),
            Movie.total_ratings.desc(),
            Movie.title.asc(),
        )
        .offset(page_offset(page, limit))
        .limit(limit)
        .all()
    )
    return rows, total
