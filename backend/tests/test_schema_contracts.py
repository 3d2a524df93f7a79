import unittest
from pathlib import Path

from app.db.models import Rating

MIGRATION = Path(__file__).resolve().parents[1] / "alembic" / "versions" / "0001_initial_schema.py"


class TestRatingSchemaContracts(unittest.TestCase):
    def test_migration_enforces_one_rating_per_pair(self) -> None:
        content = MIGRATION.read_text(encoding="utf-8")
        self.assertIn('sa.UniqueConstraint("user_id", "movie_id", name="uq_rating_user_movie")', content)
        self.assertIn("score BETWEEN 1 AND 5", content)

    def test_model_matches_migration_constraint_names(self) -> None:
        names = {c.name for c in Rating.__table__.constraints if c.name}
        self.assertIn("uq_rating_user_movie", names)
        self.assertIn("chk_rating_score_1_5", names)
