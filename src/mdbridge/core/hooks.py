"""Schema extension hooks for the Markdown parser.

A hook adjusts parsing for one node type: ``setup`` runs once against the
renderer when the parser is created, ``update_dom`` runs on every parsed
tree before normalization. Hooks are registered as an ordered list.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from mdbridge.core.renderer import DEFAULT_LANG_PREFIX, MarkdownRenderer
from mdbridge.core.tree import MarkupTree

logger = logging.getLogger(__name__)

LIST_TAGS = frozenset({"ul", "ol"})


@dataclass
class HookContext:
    """What a hook can see of its owner."""

    parser_options: dict[str, Any] = field(default_factory=dict)
    options: dict[str, Any] = field(default_factory=dict)


class SchemaHook:
    """Base class for per-node parse hooks. Both methods default to no-ops."""

    name = "hook"

    def __init__(self, **options: Any) -> None:
        self.context = HookContext(options=dict(options))

    @property
    def options(self) -> dict[str, Any]:
        return self.context.options

    def bind(self, parser_options: dict[str, Any]) -> None:
        self.context.parser_options = dict(parser_options)

    def setup(self, renderer: MarkdownRenderer) -> None:
        """Configure the renderer before any parsing."""

    def update_dom(self, tree: MarkupTree) -> None:
        """Mutate the rendered tree in place."""


class CodeBlockHook(SchemaHook):
    """Fenced code blocks: language class prefix and trailing newline."""

    name = "codeBlock"

    def setup(self, renderer: MarkdownRenderer) -> None:
        lang_prefix = self.options.get("language_class_prefix", DEFAULT_LANG_PREFIX)
        if lang_prefix != DEFAULT_LANG_PREFIX:
            renderer.update_options(lang_prefix=lang_prefix)

    def update_dom(self, tree: MarkupTree) -> None:
        # The renderer ends code with "\n" right before </code></pre>.
        for pre in tree.find_all(frozenset({"pre"})):
            children = tree.children(pre)
            if not children:
                continue
            code = tree.node(children[-1])
            if not code.is_element or code.tag != "code":
                continue
            code_children = tree.children(children[-1])
            if not code_children:
                continue
            last = tree.node(code_children[-1])
            if last.is_text and last.data.endswith("\n"):
                last.data = last.data[:-1]


class TightListHook(SchemaHook):
    """Mark lists whose items hold no paragraphs as tight."""

    name = "tightLists"

    def update_dom(self, tree: MarkupTree) -> None:
        if not self.options.get("tight", True):
            return
        tight_class = self.options.get("tight_class", "tight")

        for list_id in tree.find_all(LIST_TAGS):
            if tree.find_all(frozenset({"p"}), list_id):
                continue
            node = tree.node(list_id)
            node.set_attr("data-tight", "true")
            if tight_class:
                existing = node.get_attr("class")
                classes = existing.split() if existing else []
                if tight_class not in classes:
                    classes.append(tight_class)
                node.set_attr("class", " ".join(classes))


def default_hooks(
    *,
    language_class_prefix: str = DEFAULT_LANG_PREFIX,
    tight_lists: bool = True,
    tight_list_class: str = "tight",
) -> list[SchemaHook]:
    """Hooks registered for the default schema, in order."""
    return [
        CodeBlockHook(language_class_prefix=language_class_prefix),
        TightListHook(tight=tight_lists, tight_class=tight_list_class),
    ]
