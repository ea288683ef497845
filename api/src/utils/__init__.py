"""Utility modules for the termfolio API."""

from src.utils.identifiers import (
    RESERVED_SLUGS,
    generate_comment_id,
    generate_session_token,
    is_valid_slug,
)


__all__ = [
    "RESERVED_SLUGS",
    "generate_comment_id",
    "generate_session_token",
    "is_valid_slug",
]
