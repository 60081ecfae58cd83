"""Password hashing for staff accounts, using bcrypt directly."""

import bcrypt

from villa_ledger.config import settings


def hash_password(password: str, rounds: int | None = None) -> str:
    """Return a bcrypt hash of ``password``.

    ``rounds`` defaults to ``settings.bcrypt_rounds``; tests pass a low value
    to keep hashing fast.
    """
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """True if ``plain_password`` matches the stored hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False
