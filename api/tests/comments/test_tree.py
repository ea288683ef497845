"""Tests for comment tree building."""

from src.comments.models import Comment
from src.comments.tree import build_tree


def make_comment(comment_id: str, parent_id: str | None = None) -> Comment:
    return Comment(
        id=comment_id,
        post_slug="post",
        parent_id=parent_id,
        author="anonymous",
        author_token="tok",
        content=f"comment {comment_id}",
        ip="127.0.0.1",
        created_at="2024-01-15T10:30:00.000Z",
    )


class TestBuildTree:
    def test_dangling_parent_becomes_root(self) -> None:
        comments = [make_comment("1"), make_comment("2", "1"), make_comment("3", "99")]

        roots = build_tree(comments)

        assert [node.comment.id for node in roots] == ["1", "3"]
        assert [child.comment.id for child in roots[0].children] == ["2"]
        assert roots[1].children == []

    def test_input_order_preserved_among_siblings(self) -> None:
        comments = [
            make_comment("root"),
            make_comment("b", "root"),
            make_comment("a", "root"),
            make_comment("c", "root"),
        ]

        roots = build_tree(comments)

        assert [child.comment.id for child in roots[0].children] == ["b", "a", "c"]

    def test_child_listed_before_parent(self) -> None:
        roots = build_tree([make_comment("2", "1"), make_comment("1")])

        assert [node.comment.id for node in roots] == ["1"]
        assert roots[0].children[0].comment.id == "2"

    def test_deep_nesting(self) -> None:
        roots = build_tree([make_comment("1"), make_comment("2", "1"), make_comment("3", "2")])

        assert roots[0].children[0].children[0].comment.id == "3"

    def test_empty(self) -> None:
        assert build_tree([]) == []

    def test_public_dict_has_no_private_fields(self) -> None:
        node = build_tree([make_comment("1"), make_comment("2", "1")])[0]

        data = node.to_dict()

        assert "authorToken" not in data
        assert "ip" not in data
        assert "authorToken" not in data["children"][0]
        assert data["children"][0]["parentId"] == "1"
