"""Nesting of flat comment collections for threaded display."""

from dataclasses import dataclass, field
from typing import Any

from .models import Comment


@dataclass
class CommentNode:
    """A comment with its direct replies."""

    comment: Comment
    children: list["CommentNode"] = field(default_factory=list)

    def to_dict(self, include_private: bool = False) -> dict[str, Any]:
        result = self.comment.to_dict(include_private=include_private)
        result["children"] = [child.to_dict(include_private) for child in self.children]
        return result


def build_tree(comments: list[Comment]) -> list[CommentNode]:
    """Nest comments under their parents.

    A comment whose parent is not in ``comments`` (deleted, or never existed)
    becomes a root. Input order is kept in the root list and in every
    children list. Assumes ``parent_id`` links contain no cycles.
    """
    nodes = {comment.id: CommentNode(comment=comment) for comment in comments}

    roots: list[CommentNode] = []
    for comment in comments:
        node = nodes[comment.id]
        parent = nodes.get(comment.parent_id) if comment.parent_id else None
        if parent is not None and parent is not node:
            parent.children.append(node)
        else:
            roots.append(node)
    return roots
