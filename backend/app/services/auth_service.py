"""
Auth business logic — signup, login, token issuance.

All DB writes go through this layer (not directly in routes).
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.security import create_access_token, hash_password, verify_password
from app.db.models import User

logger = logging.getLogger(__name__)


# ── Custom exceptions ────────────────────────────────────────────────────────


class DuplicateUserError(Exception):
    """Raised when signup conflicts with an existing username or email."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"A user with that {field} already exists")


# ── Service functions ────────────────────────────────────────────────────────


def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
) -> User:
    """
    Register a new user.

    - Normalises username and email (lowercase strip).
    - Hashes the password with bcrypt.
    - Inserts into DB; raises DuplicateUserError on unique-constraint violation.
    """
    user = User(
        username=username.strip().lower(),
        email=email.strip().lower(),
        password_hash=hash_password(password),
    )

    db.add(user)

    try:
        db.flush()  # trigger INSERT; raises on duplicate
    except IntegrityError as exc:
        db.rollback()
        error_str = str(exc.orig).lower()
        if "username" in error_str:
            raise DuplicateUserError("username") from exc
        if "email" in error_str:
            raise DuplicateUserError("email") from exc
        raise DuplicateUserError("username or email") from exc

    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


def authenticate_user(
    db: Session,
    username: str,
    password: str,
) -> User | None:
    """Verify credentials and return the active User, or None on failure."""
    user = (
        db.query(User)
        .filter(User.username == username.strip().lower())
        .first()
    )
    if user is None or not user.is_active:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


def issue_access_token(user: User) -> str:
    """Create a signed JWT carrying the user's id and email."""
    return create_access_token(subject=str(user.id), email=user.email)
