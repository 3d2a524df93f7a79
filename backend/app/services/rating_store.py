"""
Rating storage — every query that touches the ratings table.

One row per (user, movie), guarded by the uq_rating_user_movie constraint.
Functions here commit their own writes; recomputing the movie aggregate is
the caller's job (see rating_service).
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.db.models import Movie, Rating
from app.services.errors import ConflictError, NotFoundError, ValidationError
from app.services.rating_math import SCORE_VALUES, is_valid_score, mean_score, page_offset

UNIQUE_PAIR_CONSTRAINT = "uq_rating_user_movie"


@dataclass(frozen=True)
class RatingAggregate:
    """Count and rounded mean of a movie's ratings."""

    count: int
    average: Decimal


def _is_unique_pair_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    if UNIQUE_PAIR_CONSTRAINT in message:
        return True
    # SQLite reports columns, not constraint names
    lowered = message.lower()
    return "unique" in lowered and "ratings.user_id" in lowered


# ── Movie lookup ──────────────────────────────────────────────────────────────

def get_active_movie(db: Session, movie_id: UUID) -> Movie | None:
    """Return the movie if it exists and has not been soft-deleted."""
    return (
        db.query(Movie)
        .filter(Movie.id == movie_id, Movie.is_active.is_(True))
        .first()
    )


# ── Reads ─────────────────────────────────────────────────────────────────────

def find_rating(db: Session, user_id: UUID, movie_id: UUID) -> Rating | None:
    return (
        db.query(Rating)
        .filter(Rating.user_id == user_id, Rating.movie_id == movie_id)
        .first()
    )


def list_ratings_for_movie(
    db: Session,
    movie_id: UUID,
    page: int,
    limit: int,
) -> tuple[list[Rating], int]:
    """One page of a movie's ratings, newest first, plus the total count."""
    total = (
        db.query(func.count(Rating.id))
        .filter(Rating.movie_id == movie_id)
        .scalar()
    )
    rows = (
        db.query(Rating)
        .filter(Rating.movie_id == movie_id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
        .all()
    )
    return rows, total or 0


def list_ratings_for_user(
    db: Session,
    user_id: UUID,
    page: int,
    limit: int,
) -> tuple[list[tuple[Rating, Movie]], int]:
    """
    One page of a user's ratings joined to their movies, newest first.

    Ratings of inactive movies are left out of both the page and the total.
    """
    base = (
        db.query(Rating, Movie)
        .join(Movie, Rating.movie_id == Movie.id)
        .filter(Rating.user_id == user_id, Movie.is_active.is_(True))
    )
    total = base.with_entities(func.count(Rating.id)).scalar()
    rows = (
        base.order_by(Rating.created_at.desc(), Rating.id.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
        .all()
    )
    return [(rating, movie) for rating, movie in rows], total or 0


# ── Aggregates (source of truth) ──────────────────────────────────────────────

def count_and_average_for_movie(db: Session, movie_id: UUID) -> RatingAggregate:
    """
    Aggregate straight from the rating rows, never from the Movie cache.

    SUM and COUNT come back exact; rounding happens once in mean_score.
    """
    count, score_sum = (
        db.query(func.count(Rating.id), func.sum(Rating.score))
        .filter(Rating.movie_id == movie_id)
        .one()
    )
    count = count or 0
    return RatingAggregate(count=count, average=mean_score(score_sum, count))


def count_and_sum_by_movie(db: Session) -> dict[UUID, tuple[int, int]]:
    """(count, sum of scores) for every movie that has at least one rating."""
    rows = (
        db.query(Rating.movie_id, func.count(Rating.id), func.sum(Rating.score))
        .group_by(Rating.movie_id)
        .all()
    )
    return {movie_id: (count, score_sum or 0) for movie_id, count, score_sum in rows}


def score_distribution_for_movie(db: Session, movie_id: UUID) -> dict[int, int]:
    """Number of ratings at each star value, zero-filled for 1..5."""
    distribution = {stars: 0 for stars in SCORE_VALUES}
    rows = (
        db.query(Rating.score, func.count(Rating.id))
        .filter(Rating.movie_id == movie_id)
        .group_by(Rating.score)
        .all()
    )
    for stars, count in rows:
        distribution[stars] = count
    return distribution


# ── Writes ────────────────────────────────────────────────────────────────────

def _write_score(db: Session, rating: Rating, score: int) -> Rating:
    rating.score = score
    rating.updated_at = datetime.now(timezone.utc)
    db.add(rating)
    db.commit()  # StaleDataError if the row was deleted under us
    db.refresh(rating)
    return rating


def upsert_rating(
    db: Session,
    user_id: UUID,
    movie_id: UUID,
    score: int,
) -> tuple[Rating, bool]:
    """
    Set *user_id*'s score for *movie_id*.

    Returns (rating, created). Updates in place when the pair already has a
    row, inserts otherwise.

    Raises:
        ValidationError: score is not an int in [1, 5].
        NotFoundError: movie missing or inactive.
        ConflictError: the insert lost a race against another insert for
            the same pair, or the row being updated was deleted first.
            Retrying the call picks the right path.
    """
    if not is_valid_score(score):
        raise ValidationError("Rating must be an integer between 1 and 5")

    if get_active_movie(db, movie_id) is None:
        raise NotFoundError(f"Movie {movie_id} not found")

    existing = find_rating(db, user_id, movie_id)
    if existing is not None:
        try:
            return _write_score(db, existing, score), False
        except StaleDataError as exc:
            db.rollback()
            raise ConflictError(
                f"Rating of user {user_id} for movie {movie_id} was deleted during update"
            ) from exc

    rating = Rating(user_id=user_id, movie_id=movie_id, score=score)
    db.add(rating)
    try:
        db.flush()  # trigger INSERT; raises on duplicate pair
    except IntegrityError as exc:
        db.rollback()
        if _is_unique_pair_violation(exc):
            raise ConflictError(
                f"User {user_id} already has a rating for movie {movie_id}"
            ) from exc
        raise

    db.commit()
    db.refresh(rating)
    return rating, True


def update_rating(db: Session, user_id: UUID, movie_id: UUID, score: int) -> Rating:
    """
    Change the score of an existing rating. Never inserts.

    Raises NotFoundError when the pair has no row, including a row deleted
    between the lookup and the UPDATE.
    """
    if not is_valid_score(score):
        raise ValidationError("Rating must be an integer between 1 and 5")

    rating = find_rating(db, user_id, movie_id)
    if rating is None:
        raise NotFoundError("Rating not found")

    try:
        return _write_score(db, rating, score)
    except StaleDataError as exc:
        db.rollback()
        raise NotFoundError("Rating not found") from exc


def delete_rating(db: Session, user_id: UUID, movie_id: UUID) -> Rating:
    """Delete the pair's rating and return the removed row."""
    rating = find_rating(db, user_id, movie_id)
    if rating is None:
        raise NotFoundError("Rating not found")

    db.delete(rating)
    db.commit()
    return rating
