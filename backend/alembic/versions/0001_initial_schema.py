"""Initial schema — users, movies, ratings

Revision ID: 0001
Revises: —
Create Date: 2025-10-18 00:00:00
"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────────
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")
    op.execute("CREATE EXTENSION IF NOT EXISTS citext")

    # ── Trigger function (auto-update updated_at) ─────────────────────────────
    op.execute("""
        CREATE OR REPLACE FUNCTION set_updated_at()
        RETURNS trigger
        LANGUAGE plpgsql
        AS $$
        BEGIN
          NEW.updated_at = now();
          RETURN NEW;
        END;
        $$
    """)

    # ── users ─────────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True,
                  server_default=sa.text("gen_random_uuid()")),
        sa.Column("username", sa.Text, nullable=False),
        sa.Column("email", sa.Text, nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            r"username ~ '^[a-zA-Z0-9_]{3,32}$'",
            name="chk_username_format",
        ),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    # citext: 'Alice' and 'alice' collide on the unique constraints
    op.execute("ALTER TABLE users ALTER COLUMN username TYPE citext")
    op.execute("ALTER TABLE users ALTER COLUMN email TYPE citext")

    op.execute("""
        CREATE TRIGGER trg_users_updated_at
        BEFORE UPDATE ON users
        FOR EACH ROW EXECUTE FUNCTION set_updated_at()
    """)

    # ── movies ────────────────────────────────────────────────────────────────
    op.create_table(
        "movies",
        sa.Column("id", UUID(as_uuid=True), primary_key=True,
                  server_default=sa.text("gen_random_uuid()")),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("release_year", sa.Integer, nullable=True),
        sa.Column("genre", sa.String(64), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("average_rating", sa.Numeric(2, 1), nullable=False, server_default="0"),
        sa.Column("total_ratings", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "release_year IS NULL OR release_year BETWEEN 1800 AND 2200",
            name="chk_release_year",
        ),
        sa.CheckConstraint(
            "average_rating >= 0 AND average_rating <= 5",
            name="chk_average_rating_0_5",
        ),
        sa.CheckConstraint("total_ratings >= 0", name="chk_total_ratings_non_negative"),
    )
    op.create_index("idx_movies_title", "movies", ["title"])
    # Catalog listing only ever shows active rows
    op.execute("""
        CREATE INDEX idx_movies_active_rating
          ON movies (average_rating DESC, total_ratings DESC)
          WHERE is_active
    """)

    op.execute("""
        CREATE TRIGGER trg_movies_updated_at
        BEFORE UPDATE ON movies
        FOR EACH ROW EXECUTE FUNCTION set_updated_at()
    """)

    # ── ratings ───────────────────────────────────────────────────────────────
    op.create_table(
        "ratings",
        sa.Column("id", UUID(as_uuid=True), primary_key=True,
                  server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", UUID(as_uuid=True),
                  sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("movie_id", UUID(as_uuid=True),
                  sa.ForeignKey("movies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("score", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        # One rating per user per movie; a racing second INSERT fails here
        sa.UniqueConstraint("user_id", "movie_id", name="uq_rating_user_movie"),
        sa.CheckConstraint("score BETWEEN 1 AND 5", name="chk_rating_score_1_5"),
    )
    op.create_index("ix_ratings_user_id", "ratings", ["user_id"])
    op.create_index("ix_ratings_movie_id", "ratings", ["movie_id"])
    op.create_index("idx_ratings_user_created", "ratings", ["user_id", sa.text("created_at DESC")])
    op.create_index("idx_ratings_movie_created", "ratings", ["movie_id", sa.text("created_at DESC")])
    op.create_index("idx_ratings_movie_score", "ratings", ["movie_id", "score"])

    op.execute("""
        CREATE TRIGGER trg_ratings_updated_at
        BEFORE UPDATE ON ratings
        FOR EACH ROW EXECUTE FUNCTION set_updated_at()
    """)


def downgrade() -> None:
    op.drop_table("ratings")
    op.drop_table("movies")
    op.drop_table("users")
    op.execute("DROP FUNCTION IF EXISTS set_updated_at()")
