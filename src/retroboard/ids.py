"""Identifier generation for board entities."""

import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase
_COLUMN_PREFIXES = string.ascii_lowercase


def generate_id(length: int = 20) -> str:
    """Random base-36 id for cards, groups and columns."""
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def time_id(now_ms: int | None = None) -> str:
    """Id that sorts by creation time, with a random suffix against collisions.

    1700000000000 → "1700000000000-k3f9"
    """
    if now_ms is None:
        now_ms = now_millis()
    return f"{now_ms:013d}-{generate_id(4)}"


def column_id(index: int) -> str:
    """Column id whose prefix keeps columns in creation order.

    0 → "a_<random>", 25 → "z_<random>", 26 → "col26_<random>"
    """
    prefix = _COLUMN_PREFIXES[index] if index < len(_COLUMN_PREFIXES) else f"col{index}"
    return f"{prefix}_{generate_id()}"


def now_millis() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)
