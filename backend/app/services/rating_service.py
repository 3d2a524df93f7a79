"""
Rating business logic — the lifecycle around a (user, movie) rating.

Per pair:
  NoRating ──submit──▶ Rated      (created, 201)
  Rated    ──submit──▶ Rated      (updated, 200)
  Rated    ──delete──▶ NoRating

Every committed mutation is followed by exactly one aggregate recompute of
the movie. A failed recompute is logged and otherwise ignored: the rating
row is already committed and the next successful recompute (or the
reconciliation sweep) repairs the cache.
"""
import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.orm import Session

from app.db.models import Movie, Rating
from app.services import rating_store
from app.services.errors import (
    AggregateRecomputeError,
    AuthRequiredError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.services.rating_aggregate import recompute_movie_aggregate
from app.services.rating_math import (
    MAX_PAGE_SIZE,
    SCORE_VALUES,
    is_valid_score,
    percentage,
    total_pages,
)

logger = logging.getLogger(__name__)

# A lost first-create race is retried as an update; more than one retry
# only happens if the winning row is deleted in between.
UPSERT_ATTEMPTS = 3


# ── Validation ────────────────────────────────────────────────────────────────

def _require_actor(actor_id: UUID | None) -> UUID:
    if actor_id is None:
        raise AuthRequiredError("User not authenticated")
    return actor_id


def _validate_score(score: object) -> None:
    if not is_valid_score(score):
        raise ValidationError("Rating must be an integer between 1 and 5")


def _validate_pagination(page: int, limit: int) -> None:
    if page < 1 or limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError("Invalid pagination parameters")


def _require_active_movie(db: Session, movie_id: UUID) -> Movie:
    movie = rating_store.get_active_movie(db, movie_id)
    if movie is None:
        raise NotFoundError(f"Movie {movie_id} not found")
    return movie


# ── Helpers ───────────────────────────────────────────────────────────────────

def _recompute_after_write(db: Session, movie_id: UUID) -> None:
    try:
        recompute_movie_aggregate(db, movie_id)
    except AggregateRecomputeError:
        logger.exception(
            "Rating write for movie %s committed but the aggregate recompute "
            "failed; cached average stays stale until the next recompute",
            movie_id,
        )


def _set_score(db: Session, actor_id: UUID, movie_id: UUID, score: int) -> tuple[Rating, bool]:
    attempt = 1
    while True:
        try:
            return rating_store.upsert_rating(db, actor_id, movie_id, score)
        except ConflictError:
            if attempt >= UPSERT_ATTEMPTS:
                raise
            attempt += 1
            logger.info(
                "Concurrent first rating by user %s for movie %s; retrying as update",
                actor_id,
                movie_id,
            )


def _pagination(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": total_pages(total, limit),
    }


def _rating_dict(rating: Rating) -> dict:
    return {
        "rating_id": rating.id,
        "user_id": rating.user_id,
        "movie_id": rating.movie_id,
        "score": rating.score,
        "created_at": rating.created_at,
        "updated_at": rating.updated_at,
    }


# ── Mutations ─────────────────────────────────────────────────────────────────

def _write_result(rating: Rating, movie: Movie, created: bool) -> dict:
    # Read every column now: a failed recompute rolls back and expires them
    return {
        "rating_id": rating.id,
        "movie_id": rating.movie_id,
        "movie_title": movie.title,
        "score": rating.score,
        "outcome": "created" if created else "updated",
        "timestamp": rating.created_at if created else rating.updated_at,
    }


def submit_rating(
    db: Session,
    actor_id: UUID | None,
    movie_id: UUID,
    score: int,
) -> dict:
    """
    Create or replace the actor's rating for a movie.

    Returns the stored rating with outcome "created" or "updated"; the
    timestamp is created_at for a new row, updated_at otherwise.
    """
    actor_id = _require_actor(actor_id)
    _validate_score(score)
    movie = _require_active_movie(db, movie_id)

    rating, created = _set_score(db, actor_id, movie_id, score)
    result = _write_result(rating, movie, created)
    logger.info(
        "User %s %s rating %d for movie %s",
        actor_id,
        result["outcome"],
        score,
        movie_id,
    )
    _recompute_after_write(db, movie_id)
    return result


def change_rating(
    db: Session,
    actor_id: UUID | None,
    movie_id: UUID,
    score: int,
) -> dict:
    """Update an existing rating. Unlike submit_rating, never creates one."""
    actor_id = _require_actor(actor_id)
    _validate_score(score)
    movie = _require_active_movie(db, movie_id)

    rating = rating_store.update_rating(db, actor_id, movie_id, score)
    result = _write_result(rating, movie, created=False)
    logger.info("User %s updated rating %d for movie %s", actor_id, score, movie_id)
    _recompute_after_write(db, movie_id)
    return result


def remove_rating(db: Session, actor_id: UUID | None, movie_id: UUID) -> dict:
    """Delete the actor's rating for a movie."""
    actor_id = _require_actor(actor_id)
    rating_store.delete_rating(db, actor_id, movie_id)
    logger.info("User %s deleted rating for movie %s", actor_id, movie_id)
    _recompute_after_write(db, movie_id)
    return {"movie_id": movie_id, "deleted_at": datetime.now(timezone.utc)}


# ── Reads ─────────────────────────────────────────────────────────────────────

def get_movie_rating_stats(db: Session, movie_id: UUID) -> dict:
    """Average, count and 1..5 star distribution, computed from the rating rows."""
    movie = _require_active_movie(db, movie_id)
    aggregate = rating_store.count_and_average_for_movie(db, movie_id)
    distribution = rating_store.score_distribution_for_movie(db, movie_id)

    return {
        "movie_id": movie.id,
        "movie_title": movie.title,
        "average": float(aggregate.average),
        "total": aggregate.count,
        "distribution": [
            {
                "stars": stars,
                "count": distribution[stars],
                "percentage": percentage(distribution[stars], aggregate.count),
            }
            for stars in SCORE_VALUES
        ],
    }


def get_actor_rating_for_movie(db: Session, actor_id: UUID | None, movie_id: UUID) -> dict:
    actor_id = _require_actor(actor_id)
    rating = rating_store.find_rating(db, actor_id, movie_id)
    if rating is None:
        return {"has_rating": False}
    return {
        "has_rating": True,
        "rating_id": rating.id,
        "score": rating.score,
        "created_at": rating.created_at,
        "updated_at": rating.updated_at,
    }


def list_ratings_for_movie(db: Session, movie_id: UUID, page: int = 1, limit: int = 12) -> dict:
    _validate_pagination(page, limit)
    _require_active_movie(db, movie_id)

    rows, total = rating_store.list_ratings_for_movie(db, movie_id, page, limit)
    return {
        "ratings": [_rating_dict(rating) for rating in rows],
        "pagination": _pagination(page, limit, total),
    }


def list_ratings_for_actor(
    db: Session,
    actor_id: UUID | None,
    page: int = 1,
    limit: int = 12,
) -> dict:
    """The actor's ratings with a short summary of each movie."""
    actor_id = _require_actor(actor_id)
    _validate_pagination(page, limit)

    rows, total = rating_store.list_ratings_for_user(db, actor_id, page, limit)
    ratings = []
    for rating, movie in rows:
        entry = _rating_dict(rating)
        entry["movie"] = {
            "id": movie.id,
            "title": movie.title,
            "release_year": movie.release_year,
            "genre": movie.genre,
            "average_rating": float(movie.average_rating or 0),
            "total_ratings": movie.total_ratings,
        }
        ratings.append(entry)

    return {"ratings": ratings, "pagination": _pagination(page, limit, total)}
