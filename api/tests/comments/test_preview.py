"""Tests for comment previews."""

from src.comments.preview import make_preview


class TestMakePreview:
    """Tests for make_preview."""

    def test_heading_and_bold_removed_then_cut(self) -> None:
        preview = make_preview("# Title\n\n**bold** and more text...", 10)
        assert preview == "Title bold..."

    def test_short_content_unchanged(self) -> None:
        assert make_preview("just a note") == "just a note"

    def test_link_keeps_text(self) -> None:
        assert make_preview("see [my site](https://example.com) now") == "see my site now"

    def test_inline_code_removed(self) -> None:
        assert make_preview("run `rm -rf` carefully") == "run  carefully"

    def test_italic_markers_removed(self) -> None:
        assert make_preview("_really_ *nice*") == "really nice"

    def test_newline_runs_collapse(self) -> None:
        assert make_preview("one\n\n\ntwo\nthree") == "one two three"

    def test_default_length_is_100(self) -> None:
        preview = make_preview("x" * 150)
        assert preview == "x" * 100 + "..."

    def test_exact_length_not_cut(self) -> None:
        assert make_preview("y" * 100) == "y" * 100

    def test_cut_is_trimmed_before_ellipsis(self) -> None:
        assert make_preview("abcd efgh ijkl", 5) == "abcd..."
