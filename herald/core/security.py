"""Password hashing and random credential helpers."""

import secrets
import string

import bcrypt

_ALPHANUMERIC = string.ascii_letters + string.digits


def hash_password(password: str) -> bytes:
    """Hash a password using bcrypt with the library's default cost."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt())


def verify_password(password: str, hashed: bytes) -> bool:
    """Verify a password against a bcrypt hash in constant time."""
    try:
        return bcrypt.checkpw(password.encode(), hashed)
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def random_string(length: int) -> str:
    """Generate a random alphanumeric string of ``length`` characters."""
    return "".join(secrets.choice(_ALPHANUMERIC) for _ in range(length))
