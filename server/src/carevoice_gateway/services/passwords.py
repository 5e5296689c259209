"""Password hashing with bcrypt."""

import bcrypt

DEFAULT_ROUNDS = 10

# bcrypt only reads the first 72 bytes; newer releases reject anything longer.
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password with bcrypt.

    Passwords longer than 72 bytes are truncated, for both hashing and
    verification.

    Args:
        password: Plain text password
        rounds: bcrypt cost factor

    Returns:
        Bcrypt hash string
    """
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a bcrypt hash (constant-time).

    A malformed stored hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except ValueError:
        return False
