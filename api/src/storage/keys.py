"""Storage keys for every persistent document.

Layout matches the existing deployment's ``content/`` directory.
"""

COMMENTS_PREFIX = "content/comments-"
COMMENTS_META_KEY = "content/comments-meta.json"
BANNED_IPS_KEY = "content/banned-ips.json"
ADMIN_CONFIG_KEY = "content/admin.json"

_JSON_SUFFIX = ".json"


def comments_key(slug: str) -> str:
    """Key of the comment collection for one post."""
    return f"{COMMENTS_PREFIX}{slug}{_JSON_SUFFIX}"


def slug_from_comments_key(key: str) -> str | None:
    """Post slug of a comment collection key, or None for any other key."""
    if key == COMMENTS_META_KEY:
        return None
    if not key.startswith(COMMENTS_PREFIX) or not key.endswith(_JSON_SUFFIX):
        return None
    slug = key[len(COMMENTS_PREFIX) : -len(_JSON_SUFFIX)]
    return slug or None
