"""Identifier and slug utilities.

Provides:
- Comment ID generation (time-ordered, globally unique, opaque)
- Admin session token generation
- Post slug validation
"""

import re
import secrets
import time


BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"

# Random suffix length for comment IDs (36^10 values per millisecond)
COMMENT_ID_RANDOM_LENGTH = 10

# 32 bytes = 256 bits of entropy
SESSION_TOKEN_BYTES = 32

SLUG_MAX_LENGTH = 200
SLUG_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9_-]{0,198}[A-Za-z0-9])?$")
# comments_key("meta") is the comments metadata document key
RESERVED_SLUGS = frozenset({"meta"})


def to_base36(number: int) -> str:
    """Encode a non-negative integer in lowercase base 36."""
    if number < 0:
        msg = "Cannot encode negative numbers"
        raise ValueError(msg)
    if number == 0:
        return "0"

    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_comment_id() -> str:
    """Generate a new comment ID.

    Millisecond timestamp in base 36 followed by a random base 36 suffix, so
    IDs sort roughly by creation time and are never reused.

    Example:
        >>> len(generate_comment_id()) >= 18
        True
    """
    timestamp = to_base36(time.time_ns() // 1_000_000)
    suffix = "".join(
        secrets.choice(BASE36_ALPHABET) for _ in range(COMMENT_ID_RANDOM_LENGTH)
    )
    return timestamp + suffix


def generate_session_token() -> str:
    """Generate an unguessable admin session token (256 bits, hex)."""
    return secrets.token_hex(SESSION_TOKEN_BYTES)


def is_valid_slug(slug: str | None) -> bool:
    """Check a post slug is usable as part of a storage key.

    Letters, digits, ``-`` and ``_`` only; must start and end with a letter
    or digit; at most 200 characters; not a reserved name.
    """
    if not slug or len(slug) > SLUG_MAX_LENGTH:
        return False
    if slug.lower() in RESERVED_SLUGS:
        return False
    return SLUG_PATTERN.fullmatch(slug) is not None
