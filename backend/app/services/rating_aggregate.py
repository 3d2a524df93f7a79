"""
Movie aggregate recompute.

Overwrites Movie.average_rating / Movie.total_ratings from the rating rows.
Each recompute re-reads the full rating set and writes unconditionally, so
concurrent recomputes of the same movie converge on the last committed one.

Run as a module to repair every drifted aggregate:

    cd backend
    python -m app.services.rating_aggregate
"""
import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.models import Movie
from app.services.errors import AggregateRecomputeError
from app.services.rating_math import mean_score
from app.services.rating_store import (
    RatingAggregate,
    count_and_average_for_movie,
    count_and_sum_by_movie,
)

logger = logging.getLogger(__name__)


def recompute_movie_aggregate(db: Session, movie_id: UUID) -> RatingAggregate:
    """
    Write the movie's current count / average onto the movie row.

    No ratings → 0.0 / 0. Calling it twice with no rating writes in between
    writes the same values twice.

    Raises:
        AggregateRecomputeError: the aggregate query or the movie write failed.
            The session is rolled back first.
    """
    try:
        aggregate = count_and_average_for_movie(db, movie_id)
        db.query(Movie).filter(Movie.id == movie_id).update(
            {
                Movie.average_rating: aggregate.average,
                Movie.total_ratings: aggregate.count,
            },
            synchronize_session="evaluate",
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise AggregateRecomputeError(movie_id, str(exc)) from exc

    logger.debug(
        "Movie %s aggregate set to average=%s total=%d",
        movie_id,
        aggregate.average,
        aggregate.count,
    )
    return aggregate


def _cached_matches(movie: Movie, expected: RatingAggregate) -> bool:
    cached_average = Decimal(str(movie.average_rating or 0))
    return movie.total_ratings == expected.count and cached_average == expected.average


def reconcile_movie_aggregates(db: Session) -> int:
    """
    Sweep every movie and recompute the ones whose cache has drifted.

    Covers recomputes dropped after a committed rating write. Returns the
    number of movies repaired; a movie whose repair fails is logged and
    skipped so one bad row does not stop the sweep.
    """
    truth = count_and_sum_by_movie(db)
    movies = db.query(Movie.id, Movie.average_rating, Movie.total_ratings).all()

    repaired = 0
    for movie in movies:
        count, score_sum = truth.get(movie.id, (0, 0))
        expected = RatingAggregate(count=count, average=mean_score(score_sum, count))
        if _cached_matches(movie, expected):
            continue

        logger.info(
            "Movie %s aggregate drifted (cached %s/%d, actual %s/%d); recomputing",
            movie.id,
            movie.average_rating,
            movie.total_ratings,
            expected.average,
            expected.count,
        )
        try:
            recompute_movie_aggregate(db, movie.id)
        except AggregateRecomputeError:
            logger.exception("Reconciliation failed for movie %s", movie.id)
            continue
        repaired += 1

    return repaired


def main() -> None:
    from app.core.config import settings
    from app.core.logging import configure_logging
    from app.db.session import SessionLocal

    configure_logging(settings.LOG_LEVEL)
    db = SessionLocal()
    try:
        repaired = reconcile_movie_aggregates(db)
    finally:
        db.close()
    logger.info("Reconciliation finished: %d movie aggregate(s) repaired", repaired)


if __name__ == "__main__":
    main()
