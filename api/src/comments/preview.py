"""Plain-text previews of Markdown comment content."""

import re


DEFAULT_PREVIEW_LENGTH = 100
ELLIPSIS = "..."

# Applied in order
_STRIP_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"#{1,6}\s"), ""),  # heading markers
    (re.compile(r"\*\*|__"), ""),  # bold
    (re.compile(r"[*_]"), ""),  # italic
    (re.compile(r"`{1,3}[^`]*`{1,3}"), ""),  # inline code spans
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),  # links keep their text
    (re.compile(r"\n+"), " "),
]


def make_preview(content: str, max_length: int = DEFAULT_PREVIEW_LENGTH) -> str:
    """Strip Markdown syntax and shorten content for the recent comments cache.

    Args:
        content: Comment content (Markdown)
        max_length: Maximum characters kept before the ellipsis

    Returns:
        Single-line preview, ending in ``...`` when it was cut

    Example:
        >>> make_preview("# Title\\n\\n**bold** and more text...", 10)
        'Title bold...'
    """
    stripped = content
    for pattern, replacement in _STRIP_RULES:
        stripped = pattern.sub(replacement, stripped)
    stripped = stripped.strip()

    if len(stripped) <= max_length:
        return stripped
    return stripped[:max_length].strip() + ELLIPSIS
