"""
Error taxonomy shared by the rating services.

Routers translate these into HTTP responses; services never build
HTTPExceptions themselves.
"""


class RatingServiceError(Exception):
    """Base class. *code* is the machine-readable value sent to clients."""

    code = "RATING_ERROR"


class ValidationError(RatingServiceError):
    """Malformed input: bad score, bad id, bad pagination."""

    code = "VALIDATION_ERROR"


class NotFoundError(RatingServiceError):
    """Referenced movie or rating does not exist (or the movie is inactive)."""

    code = "NOT_FOUND"


class AuthRequiredError(RatingServiceError):
    """A mutating operation was attempted without an authenticated actor."""

    code = "AUTH_REQUIRED"


class ForbiddenError(RatingServiceError):
    """The actor does not own the record it tried to change."""

    code = "FORBIDDEN"


class ConflictError(RatingServiceError):
    """
    The (user, movie) uniqueness constraint rejected an insert.

    Raised by the store on a lost first-create race. The coordinator
    catches it and retries as an update.
    """

    code = "RATING_CONFLICT"


class AggregateRecomputeError(RatingServiceError):
    """Writing a movie's recomputed aggregate failed after the rating write committed."""

    code = "AGGREGATE_RECOMPUTE_FAILED"

    def __init__(self, movie_id: object, reason: str) -> None:
        self.movie_id = movie_id
        super().__init__(f"Could not recompute aggregate for movie {movie_id}: {reason}")
