"""Tests for markup tree normalization."""

import logging
from unittest.mock import MagicMock

import pytest
from mdbridge.core.normalize import TreeNormalizer
from mdbridge.core.schema import Schema
from mdbridge.core.tree import parse_fragment


def _normalize(html: str, schema: Schema | None, *, inline: bool = False, content: str = "") -> str:
    tree = parse_fragment(html)
    TreeNormalizer(schema).normalize(tree, inline=inline, content=content)
    return tree.inner_html()


class TestNormalizeBlocks:
    """Tests for block extraction."""

    def test__block_in_paragraph__becomes_sibling(self, schema: Schema) -> None:
        """A block element inside a paragraph is moved next to it."""
        result = _normalize('<p>before<img src="a.png">after</p>', schema)

        assert result == '<p>before</p><img src="a.png"><p>after</p>'

    def test__several_blocks__order_preserved(self, schema: Schema) -> None:
        """Multiple block children keep their order."""
        result = _normalize('<p><img src="1"><img src="2"></p>', schema)

        assert result == '<img src="1"><img src="2">'

    def test__block_between_text__paragraph_split(self, schema: Schema) -> None:
        """Text around extracted blocks stays in paragraphs."""
        result = _normalize("<p>a<table></table>b<hr>c</p>", schema)

        assert result == "<p>a</p><table></table><p>b</p><hr><p>c</p>"

    def test__block_outside_paragraph__untouched(self, schema: Schema) -> None:
        """Blocks in other containers are left alone."""
        html = '<ul><li><img src="1"></li></ul><blockquote><p>x</p></blockquote>'

        assert _normalize(html, schema) == html

    def test__non_block_tag__untouched(self, schema: Schema) -> None:
        """Tags the schema does not list as blocks stay in the paragraph."""
        html = "<p>a<div>b</div>c</p>"

        assert _normalize(html, schema) == html

    def test__custom_schema__uses_its_tags(self) -> None:
        """The block-tag set comes from the schema."""
        from mdbridge.core.schema import NodeSpec

        custom = Schema(nodes=[NodeSpec("section", "block", ("div",))])

        assert _normalize("<p>a<div>b</div>c</p>", custom) == "<p>a</p><div>b</div><p>c</p>"

    def test__no_schema__no_op(self) -> None:
        """Without a schema extraction is skipped."""
        html = '<p><img src="1"></p>'

        assert _normalize(html, None) == html
        assert _normalize(html, Schema()) == html


class TestStripNewlineArtifacts:
    """Tests for newline stripping."""

    def test__newline_after_block__removed(self, schema: Schema) -> None:
        """A text node starting with a newline after an element loses it."""
        assert _normalize("<h1>T</h1>\nHello", schema) == "<h1>T</h1>Hello"

    def test__only_one_newline__removed(self, schema: Schema) -> None:
        """Just the first newline is an artifact."""
        assert _normalize("<p>a</p>\n\nb", schema) == "<p>a</p>\nb"

    def test__inside_pre__kept(self, schema: Schema) -> None:
        """Newlines inside verbatim regions are content."""
        html = "<pre><code>a</code>\nb</pre>"

        assert _normalize(html, schema) == html

    def test__after_pre__kept(self, schema: Schema) -> None:
        """The pre element itself counts as verbatim."""
        html = "<pre><code>a</code></pre>\nafter"

        assert _normalize(html, schema) == html

    def test__nested_elements__stripped(self, schema: Schema) -> None:
        """Newlines after nested elements are removed as well."""
        html = "<blockquote>\n<p>a</p>\n<p>b</p>\n</blockquote>\nc"

        assert _normalize(html, schema) == "<blockquote>\n<p>a</p><p>b</p></blockquote>c"

    def test__many_blocks__each_stripped(self, schema: Schema) -> None:
        """Every top-level block loses exactly its own newline."""
        html = "".join(f"<p>{i}</p>\n" for i in range(500))

        assert _normalize(html, schema) == "".join(f"<p>{i}</p>" for i in range(500))

    def test__leading_text__kept(self, schema: Schema) -> None:
        """A newline not preceded by an element is left alone."""
        html = "<ul>\n<li>a</li>\n<li>b</li>\n</ul>"

        assert _normalize(html, schema) == "<ul>\n<li>a</li><li>b</li></ul>"


class TestNormalizeInline:
    """Tests for inline unwrapping."""

    def test__paragraph__unwrapped_with_whitespace(self, schema: Schema) -> None:
        """The implicit paragraph goes away and source whitespace comes back."""
        result = _normalize("<p><em>hi</em></p>", schema, inline=True, content="  *hi*  ")

        assert result == "  <em>hi</em>  "

    def test__not_inline__paragraph_kept(self, schema: Schema) -> None:
        """Block parses keep their paragraphs."""
        result = _normalize("<p><em>hi</em></p>", schema, content="  *hi*  ")

        assert result == "<p><em>hi</em></p>"

    def test__following_block__trailing_whitespace_skipped(self, schema: Schema) -> None:
        """Trailing whitespace belongs to the last block, not the first."""
        result = _normalize("<p>a</p><p>b</p>", schema, inline=True, content=" a\n\nb ")

        assert result == " a<p>b</p>"

    def test__leading_blank_line__paragraph_kept(self, schema: Schema) -> None:
        """A source starting with a blank line keeps an explicit first block."""
        result = _normalize("<p>foo</p>", schema, inline=True, content="\n\nfoo  ")

        assert result == "<p>foo  </p>"

    def test__first_element_not_paragraph__untouched(self, schema: Schema) -> None:
        """Only a leading paragraph is unwrapped."""
        html = "<h1>a</h1><p>b</p>"

        assert _normalize(html, schema, inline=True, content=" # a\n\nb ") == html

    def test__no_surrounding_whitespace__plain_unwrap(self, schema: Schema) -> None:
        """Without whitespace in the source, only the wrapper is removed."""
        assert _normalize("<p>a <strong>b</strong></p>", schema, inline=True, content="a **b**") == (
            "a <strong>b</strong>"
        )


class TestNormalize:
    """Tests for TreeNormalizer.normalize() error handling."""

    def test__step_failure__logged_and_tree_returned(
        self, schema: Schema, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A failing step is logged; normalize does not raise."""
        tree = MagicMock()
        tree.find_all.side_effect = RuntimeError("broken tree")

        with caplog.at_level(logging.ERROR):
            result = TreeNormalizer(schema).normalize(tree, inline=True, content="x")

        assert result is tree
        assert "broken tree" in caplog.text
