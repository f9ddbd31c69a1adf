"""Normalization of rendered markup for the document model.

The renderer output is valid HTML but not always valid content for the
document schema. Three passes fix that:

1. Block elements nested inside a paragraph are lifted out of it.
2. Newlines the renderer emits after closing tags are dropped (except in
   ``<pre>``, where whitespace is content).
3. For inline parses, a wrapping paragraph is unwrapped and the source's
   leading/trailing whitespace is put back.
"""

import logging
import re

from mdbridge.core.schema import Schema
from mdbridge.core.tree import MarkupTree

logger = logging.getLogger(__name__)

LEADING_SPACE_RE = re.compile(r"^\s+")
TRAILING_SPACE_RE = re.compile(r"\s+\Z")
EMPTY_FIRST_BLOCK_RE = re.compile(r"^\n\n")

PARAGRAPH_TAG = "p"
VERBATIM_TAG = "pre"


class TreeNormalizer:
    """Reshape a rendered markup tree in place."""

    def __init__(self, schema: Schema | None) -> None:
        self.schema = schema

    def normalize(self, tree: MarkupTree, *, inline: bool = False, content: str = "") -> MarkupTree:
        """Run all normalization passes.

        Args:
            tree: Tree parsed from renderer output
            inline: Whether the content was parsed as inline Markdown
            content: Original Markdown source

        Returns:
            The same tree, normalized
        """
        try:
            self.normalize_blocks(tree)
            self.strip_newline_artifacts(tree)
            if inline:
                self.normalize_inline(tree, content)
        except Exception as e:
            logger.error(f"Error normalizing DOM: {e}")
        return tree

    def normalize_blocks(self, tree: MarkupTree) -> None:
        """Move block-level elements out of paragraphs."""
        block_tags = self.schema.block_tags if self.schema is not None else frozenset()
        if not block_tags:
            return

        moved = 0
        for element in tree.find_all(block_tags):
            parent = tree.parent(element)
            if parent is None or parent == tree.root:
                continue
            if tree.node(parent).tag == PARAGRAPH_TAG:
                tree.extract(element)
                moved += 1

        if moved:
            logger.debug(f"Extracted {moved} block elements from paragraphs")

    def strip_newline_artifacts(self, tree: MarkupTree) -> None:
        """Drop the newline the renderer writes after each closing tag."""
        for container in [tree.root, *tree.descendant_elements()]:
            children = tree.children(container)
            for element, sibling in zip(children, children[1:]):
                if not tree.node(element).is_element:
                    continue
                node = tree.node(sibling)
                if not node.is_text or not node.data.startswith("\n"):
                    continue
                if tree.closest(element, VERBATIM_TAG) is not None:
                    continue
                node.data = node.data[1:]

    def normalize_inline(self, tree: MarkupTree, content: str) -> None:
        """Unwrap the implicit paragraph of an inline parse.

        A source starting with a blank line asks for an empty first block,
        so the paragraph is kept and only the trailing whitespace is added
        back inside it.
        """
        first = tree.first_element_child(tree.root)
        if first is None or tree.node(first).tag != PARAGRAPH_TAG:
            return

        start_spaces = ""
        end_spaces = ""

        start_match = LEADING_SPACE_RE.search(content)
        if start_match:
            start_spaces = start_match.group(0)

        if tree.next_element_sibling(first) is None:
            end_match = TRAILING_SPACE_RE.search(content)
            if end_match:
                end_spaces = end_match.group(0)

        if EMPTY_FIRST_BLOCK_RE.match(content):
            if end_spaces:
                tree.append_child(first, tree.create_text(end_spaces))
            return

        tree.unwrap(first)

        if start_spaces:
            tree.prepend_child(tree.root, tree.create_text(start_spaces))
        if end_spaces:
            tree.append_child(tree.root, tree.create_text(end_spaces))
