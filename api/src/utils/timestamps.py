"""Timestamp helpers for stored documents.

Documents hold ISO-8601 UTC strings with millisecond precision and a ``Z``
suffix, e.g. ``2024-01-15T10:30:00.000Z``.
"""

from datetime import UTC, datetime


EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)


def format_timestamp(value: datetime) -> str:
    """Format as ``2024-01-15T10:30:00.000Z``."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Raises:
        ValueError: If the value is not a valid timestamp
    """
    if not isinstance(value, str):
        msg = f"Timestamp must be a string, got {type(value).__name__}"
        raise ValueError(msg)  # noqa: TRY004
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
