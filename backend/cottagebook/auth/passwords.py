"""bcrypt password hashing for dashboard accounts."""

import bcrypt

# bcrypt ignores everything past 72 bytes and newer releases reject it outright.
_MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_PASSWORD_BYTES]


def hash_password(password: str) -> str:
    """Return the bcrypt hash of ``password`` as text for the ``users`` table."""
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """True if ``plain_password`` matches. Accounts without a hash never match."""
    if not hashed_password:
        return False
    return bcrypt.checkpw(_encode(plain_password), hashed_password.encode("utf-8"))
