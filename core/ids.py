"""Timestamps and record id generation."""

import secrets
import string
import time
import uuid

_BASE36 = string.digits + string.ascii_lowercase


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def _suffix(length: int = 9) -> str:
    return ''.join(secrets.choice(_BASE36) for _ in range(length))


def prefixed_id(prefix: str, now: int = None) -> str:
    """Build ids of the form ``<prefix>_<ms>_<9 base36 chars>``."""
    return f"{prefix}_{now if now is not None else now_ms()}_{_suffix()}"


def uuid_id() -> str:
    return str(uuid.uuid4())
