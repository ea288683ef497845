"""Comment system module.

Provides per-post comment collections with:
- Threaded comments (parent/child, orphaned replies promoted to roots)
- Anonymous ownership tokens for editing
- Global metadata (totals, per-post counts, recent previews)

Note: Router is not exported here to avoid circular imports.
Import directly from src.comments.router when needed.
"""

from .metadata import CommentsMetaService
from .models import Comment, CommentsMeta, RecentComment
from .preview import make_preview
from .service import CommentService
from .tree import CommentNode, build_tree


__all__ = [
    "Comment",
    "CommentNode",
    "CommentService",
    "CommentsMeta",
    "CommentsMetaService",
    "RecentComment",
    "build_tree",
    "make_preview",
]
