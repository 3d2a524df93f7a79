import unittest
from decimal import Decimal

from app.services.rating_math import (
    is_valid_score,
    mean_score,
    page_offset,
    percentage,
    total_pages,
)


class TestScoreValidation(unittest.TestCase):
    def test_accepts_boundaries(self) -> None:
        self.assertTrue(is_valid_score(1))
        self.assertTrue(is_valid_score(5))

    def test_rejects_out_of_range_and_non_integers(self) -> None:
        for bad in (0, 6, -1, 2.5, 4.0, "3", None, True, False):
            with self.subTest(score=bad):
                self.assertFalse(is_valid_score(bad))


class TestMeanScore(unittest.TestCase):
    def test_no_ratings_is_zero(self) -> None:
        self.assertEqual(mean_score(None, 0), Decimal("0.0"))
        self.assertEqual(mean_score(0, None), Decimal("0.0"))

    def test_rounds_to_one_decimal(self) -> None:
        # 5 + 4 + 5 = 14 / 3 = 4.666…
        self.assertEqual(mean_score(14, 3), Decimal("4.7"))
        self.assertEqual(mean_score(9, 2), Decimal("4.5"))
        self.assertEqual(mean_score(4, 1), Decimal("4.0"))

    def test_half_rounds_away_from_zero(self) -> None:
        # 89 / 20 = 4.45 exactly; float division would give 4.4499…
        self.assertEqual(mean_score(89, 20), Decimal("4.5"))
        # 5 / 4 = 1.25
        self.assertEqual(mean_score(5, 4), Decimal("1.3"))

    def test_accepts_decimal_sum(self) -> None:
        # Postgres returns SUM(integer) as Decimal
        self.assertEqual(mean_score(Decimal("12"), 3), Decimal("4.0"))


class TestPaginationMath(unittest.TestCase):
    def test_total_pages_is_ceiling(self) -> None:
        self.assertEqual(total_pages(0, 12), 0)
        self.assertEqual(total_pages(12, 12), 1)
        self.assertEqual(total_pages(13, 12), 2)
        self.assertEqual(total_pages(1, 100), 1)

    def test_page_offset(self) -> None:
        self.assertEqual(page_offset(1, 20), 0)
        self.assertEqual(page_offset(3, 20), 40)

    def test_percentage(self) -> None:
        self.assertEqual(percentage(1, 3), 33)
        self.assertEqual(percentage(2, 3), 67)
        self.assertEqual(percentage(1, 8), 13)  # 12.5 rounds up
        self.assertEqual(percentage(3, 0), 0)
