"""
Rating Math
───────────
Pure arithmetic for rating aggregates and pagination.

Kept free of DB access so the rounding rules can be unit tested on their own.
All averages go through Decimal: the aggregate query returns an exact
SUM / COUNT pair, and float division would turn 4.45 into 4.4499… before
rounding.
"""
from decimal import ROUND_HALF_UP, Decimal

MIN_SCORE = 1
MAX_SCORE = 5
SCORE_VALUES: tuple[int, ...] = tuple(range(MIN_SCORE, MAX_SCORE + 1))

MAX_PAGE_SIZE = 100

ONE_DECIMAL = Decimal("0.1")
ZERO_AVERAGE = Decimal("0.0")


def is_valid_score(score: object) -> bool:
    """True for a real int in [1, 5]. bool is an int subclass and is rejected."""
    return (
        isinstance(score, int)
        and not isinstance(score, bool)
        and MIN_SCORE <= score <= MAX_SCORE
    )


def mean_score(score_sum: int | Decimal | None, count: int | None) -> Decimal:
    """
    Mean of *count* scores adding up to *score_sum*, to one decimal place.

    Rounds half away from zero (4.45 → 4.5, 4.666… → 4.7).
    Returns 0.0 when there are no scores.
    """
    if not count:
        return ZERO_AVERAGE
    exact = Decimal(score_sum or 0) / Decimal(count)
    return exact.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


def percentage(part: int, whole: int) -> int:
    """Share of *part* in *whole* as a whole-number percentage; 0 when *whole* is 0."""
    if whole <= 0:
        return 0
    exact = Decimal(part) * 100 / Decimal(whole)
    return int(exact.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def total_pages(total: int, limit: int) -> int:
    """ceil(total / limit) without going through float."""
    return -(-total // limit) if limit > 0 else 0


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit
