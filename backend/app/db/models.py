"""
SQLAlchemy ORM models.

Column names, constraints and indexes match alembic/versions/0001 exactly.

Rating rows are the source of truth for a movie's score. The
average_rating / total_ratings pair on Movie is a denormalised cache that
only app.services.rating_aggregate writes.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, relationship


# ── Base ──────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ── Timestamp helper ──────────────────────────────────────────────────────────

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Models ────────────────────────────────────────────────────────────────────

class User(Base):
    """Application user. Owns its ratings."""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(
        String(32),
        unique=True,
        nullable=False,
        index=True,
        comment="Case-insensitive username (3-32 chars, alphanumeric + underscore)",
    )
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    ratings = relationship(
        "Rating",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"


class Movie(Base):
    """
    A catalog title.

    is_active  — soft-delete flag. Inactive movies are hidden from the
                 catalog and cannot be rated.

    average_rating / total_ratings — cached aggregate of the movie's
                 ratings, rounded to one decimal. Recomputed after every
                 rating write; never edited by handlers directly.
    """
    __tablename__ = "movies"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(500), nullable=False, index=True)
    release_year = Column(Integer, nullable=True)
    genre = Column(String(64), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    average_rating = Column(Numeric(2, 1), default=0, nullable=False)
    total_ratings = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(
            "release_year IS NULL OR release_year BETWEEN 1800 AND 2200",
            name="chk_release_year",
        ),
        CheckConstraint(
            "average_rating >= 0 AND average_rating <= 5",
            name="chk_average_rating_0_5",
        ),
        CheckConstraint("total_ratings >= 0", name="chk_total_ratings_non_negative"),
    )

    ratings = relationship("Rating", back_populates="movie", lazy="dynamic")

    def __repr__(self) -> str:
        return f"<Movie id={self.id} title={self.title!r} year={self.release_year}>"


class Rating(Base):
    """One user's 1–5 star score for one movie."""
    __tablename__ = "ratings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    movie_id = Column(
        Uuid,
        ForeignKey("movies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    score = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    __table_args__ = (
        # A user can only rate each movie once
        UniqueConstraint("user_id", "movie_id", name="uq_rating_user_movie"),
        CheckConstraint("score BETWEEN 1 AND 5", name="chk_rating_score_1_5"),
        Index("idx_ratings_user_created", "user_id", "created_at"),
        Index("idx_ratings_movie_created", "movie_id", "created_at"),
        # Covering index for the aggregate query
        Index("idx_ratings_movie_score", "movie_id", "score"),
    )

    user = relationship("User", back_populates="ratings")
    movie = relationship("Movie", back_populates="ratings")

    def __repr__(self) -> str:
        return f"<Rating user={self.user_id} movie={self.movie_id} score={self.score}>"
