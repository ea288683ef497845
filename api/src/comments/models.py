"""Storage models for the comment system.

Documents:
- Comment collection: one JSON list per post (``content/comments-{slug}.json``)
- Comments metadata: one global summary document (``content/comments-meta.json``)

Comments form an adjacency list: ``parent_id`` references another comment in
the same post collection, or is None for a root comment. A parent may be
deleted later; its replies are then promoted to roots.

All documents use camelCase field names and ISO-8601 UTC timestamps with
millisecond precision and a ``Z`` suffix.
"""

from dataclasses import dataclass, field
from typing import Any

from src.utils.identifiers import generate_comment_id
from src.utils.timestamps import format_timestamp, parse_timestamp, utc_now


DEFAULT_AUTHOR = "anonymous"


# ==============================================================================
# Comment
# ==============================================================================


@dataclass
class Comment:
    """Comment as stored in a post collection.

    ``author_token`` and ``ip`` are private: present in storage and admin
    reads, never in public responses.
    """

    id: str
    post_slug: str
    parent_id: str | None
    author: str
    author_token: str
    content: str
    ip: str
    created_at: str
    updated_at: str | None = None
    edited: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Comment":
        """Create Comment from a stored document entry.

        Raises:
            KeyError, TypeError, ValueError: If the entry is malformed
        """
        if not isinstance(data, dict):
            msg = "Comment entry must be an object"
            raise TypeError(msg)

        comment_id = data["id"]
        content = data["content"]
        if not isinstance(comment_id, str) or not comment_id:
            msg = "Comment id must be a non-empty string"
            raise ValueError(msg)
        if not isinstance(content, str):
            msg = "Comment content must be a string"
            raise TypeError(msg)

        created_at = data["createdAt"]
        parse_timestamp(created_at)

        parent_id = data.get("parentId")
        return cls(
            id=comment_id,
            post_slug=str(data.get("postSlug") or ""),
            parent_id=str(parent_id) if parent_id else None,
            author=str(data.get("author") or DEFAULT_AUTHOR),
            author_token=str(data.get("authorToken") or ""),
            content=content,
            ip=str(data.get("ip") or ""),
            created_at=created_at,
            updated_at=data.get("updatedAt") or None,
            edited=bool(data.get("edited", False)),
        )

    def to_dict(self, include_private: bool = True) -> dict[str, Any]:
        """Convert to the stored (camelCase) representation.

        Args:
            include_private: Include ``authorToken`` and ``ip``
        """
        result: dict[str, Any] = {
            "id": self.id,
            "postSlug": self.post_slug,
            "parentId": self.parent_id,
            "author": self.author,
            "content": self.content,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "edited": self.edited,
        }
        if include_private:
            result["authorToken"] = self.author_token
            result["ip"] = self.ip
        return result


def create_comment(
    post_slug: str,
    content: str,
    author: str,
    author_token: str,
    ip: str,
    parent_id: str | None = None,
) -> Comment:
    """Factory function to create a new comment with a fresh id."""
    return Comment(
        id=generate_comment_id(),
        post_slug=post_slug,
        parent_id=parent_id,
        author=author,
        author_token=author_token,
        content=content,
        ip=ip,
        created_at=format_timestamp(utc_now()),
        updated_at=None,
        edited=False,
    )


# ==============================================================================
# Comments metadata
# ==============================================================================


@dataclass
class RecentComment:
    """Preview entry in the metadata's recent comments cache."""

    id: str
    post_slug: str
    author: str
    preview: str
    created_at: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecentComment":
        return cls(
            id=str(data["id"]),
            post_slug=str(data["postSlug"]),
            author=str(data.get("author") or DEFAULT_AUTHOR),
            preview=str(data.get("preview") or ""),
            created_at=str(data["createdAt"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "postSlug": self.post_slug,
            "author": self.author,
            "preview": self.preview,
            "createdAt": self.created_at,
        }


@dataclass
class CommentsMeta:
    """Global summary of all comment collections.

    A derived cache, never the source of truth. ``applied_ops`` holds the
    most recent operation keys (``add:<id>``, ``remove:<id>``) so replaying
    an update is a no-op.
    """

    total_comments: int = 0
    comments_by_post: dict[str, int] = field(default_factory=dict)
    recent_comments: list[RecentComment] = field(default_factory=list)
    applied_ops: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CommentsMeta":
        """Create CommentsMeta from the stored document.

        Tolerates partial documents: bad counters read as 0 and malformed
        recent entries are dropped.
        """
        comments_by_post: dict[str, int] = {}
        raw_by_post = data.get("commentsByPost")
        if isinstance(raw_by_post, dict):
            for slug, count in raw_by_post.items():
                comments_by_post[str(slug)] = _non_negative_int(count)

        recent_comments = []
        raw_recent = data.get("recentComments")
        if isinstance(raw_recent, list):
            for entry in raw_recent:
                try:
                    recent_comments.append(RecentComment.from_dict(entry))
                except (KeyError, TypeError, AttributeError):
                    continue

        raw_ops = data.get("appliedOps")
        applied_ops = [op for op in raw_ops if isinstance(op, str)] if isinstance(raw_ops, list) else []

        return cls(
            total_comments=_non_negative_int(data.get("totalComments")),
            comments_by_post=comments_by_post,
            recent_comments=recent_comments,
            applied_ops=applied_ops,
        )

    def to_dict(self, include_applied_ops: bool = True) -> dict[str, Any]:
        result: dict[str, Any] = {
            "totalComments": self.total_comments,
            "commentsByPost": dict(self.comments_by_post),
            "recentComments": [entry.to_dict() for entry in self.recent_comments],
        }
        if include_applied_ops:
            result["appliedOps"] = list(self.applied_ops)
        return result


def _non_negative_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0
    return max(0, int(value))
