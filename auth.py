"""Password hashing for stored accounts."""

from passlib.context import CryptContext
from passlib.exc import UnknownHashError

DEFAULT_SCHEMES = ["argon2", "bcrypt"]


def build_password_context(schemes: list[str] = None) -> CryptContext:
    """
    Build a hashing context.

    Args:
        schemes: Hash schemes, preferred first. New hashes use the first one;
            the rest are still accepted when verifying.
    """
    return CryptContext(schemes=schemes or DEFAULT_SCHEMES, deprecated="auto")


def verify_password(context: CryptContext, plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    if not hashed_password:
        return False
    try:
        return context.verify(plain_password, hashed_password)
    except (UnknownHashError, ValueError):
        # Unrecognised or malformed hashes never match
        return False


def get_password_hash(context: CryptContext, password: str) -> str:
    """Hash password."""
    return context.hash(password)
