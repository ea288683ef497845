"""Pydantic schemas for the comment system.

Request/Response models for:
- Public comment CRUD and threaded reads
- Admin dashboard and metadata reconciliation

JSON field names are camelCase; Python attributes are snake_case.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import Comment, CommentsMeta, RecentComment
from .tree import CommentNode


class CamelModel(BaseModel):
    """Base model reading and writing camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreateCommentRequest(CamelModel):
    """Request to create a comment.

    Content limits are enforced by the service so that length is measured
    before trimming.
    """

    content: str
    author: str | None = None
    author_token: str = Field(..., min_length=1, max_length=512)
    parent_id: str | None = Field(None, max_length=64)


class UpdateCommentRequest(CamelModel):
    """Request to edit a comment; ``authorToken`` proves ownership."""

    content: str
    author_token: str | None = Field(None, max_length=512)


# ==============================================================================
# Response Schemas
# ==============================================================================


class CommentResponse(CamelModel):
    """Public comment; never carries ``authorToken`` or ``ip``."""

    id: str
    post_slug: str
    parent_id: str | None = None
    author: str
    content: str
    created_at: str
    updated_at: str | None = None
    edited: bool = False

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls.model_validate(comment.to_dict(include_private=False))


class CommentNodeResponse(CommentResponse):
    """Public comment with its nested replies."""

    children: list["CommentNodeResponse"] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node: CommentNode) -> "CommentNodeResponse":
        return cls.model_validate(node.to_dict(include_private=False))


class AdminCommentResponse(CommentResponse):
    """Comment with private fields, for admin reads."""

    author_token: str
    ip: str

    @classmethod
    def from_comment(cls, comment: Comment) -> "AdminCommentResponse":
        return cls.model_validate(comment.to_dict(include_private=True))


class RecentCommentResponse(CamelModel):
    """Entry of the recent comments cache."""

    id: str
    post_slug: str
    author: str
    preview: str
    created_at: str

    @classmethod
    def from_entry(cls, entry: RecentComment) -> "RecentCommentResponse":
        return cls.model_validate(entry.to_dict())


class CommentsMetaResponse(CamelModel):
    """Aggregate comment metadata."""

    total_comments: int
    comments_by_post: dict[str, int]
    recent_comments: list[RecentCommentResponse]

    @classmethod
    def from_meta(cls, meta: CommentsMeta) -> "CommentsMetaResponse":
        return cls.model_validate(meta.to_dict(include_applied_ops=False))


class AdminCommentsResponse(CommentsMetaResponse):
    """Admin dashboard."""

    new_since_last_login: int
    last_login: str
    comments: list[AdminCommentResponse]

    @classmethod
    def from_overview(cls, overview: dict[str, Any]) -> "AdminCommentsResponse":
        meta: CommentsMeta = overview["meta"]
        return cls(
            total_comments=meta.total_comments,
            comments_by_post=meta.comments_by_post,
            recent_comments=[RecentCommentResponse.from_entry(e) for e in meta.recent_comments],
            new_since_last_login=overview["new_since_last_login"],
            last_login=overview["last_login"],
            comments=[AdminCommentResponse.from_comment(c) for c in overview["comments"]],
        )


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str
    success: bool = True
