"""Markup tree for rendered HTML fragments.

Nodes live in a flat arena and refer to each other by integer id, so
restructuring (moving a block out of a paragraph, unwrapping an element)
only rewrites child lists. The tree is built from renderer output with the
standard library HTML parser and serialized back with ``inner_html``.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from html.parser import HTMLParser

logger = logging.getLogger(__name__)

ROOT_ID = 0

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)

RAW_TEXT_ELEMENTS = frozenset({"script", "style"})


class NodeKind(Enum):
    """Kind of node stored in the arena."""

    ELEMENT = "element"
    TEXT = "text"
    COMMENT = "comment"


@dataclass
class Node:
    """A single node of the markup tree."""

    id: int
    kind: NodeKind
    tag: str = ""  # Element tag name (lowercase)
    attrs: list[tuple[str, str | None]] = field(default_factory=list)
    data: str = ""  # Text or comment content
    parent: int | None = None
    children: list[int] = field(default_factory=list)

    @property
    def is_element(self) -> bool:
        return self.kind is NodeKind.ELEMENT

    @property
    def is_text(self) -> bool:
        return self.kind is NodeKind.TEXT

    def get_attr(self, name: str) -> str | None:
        """Return the value of an attribute, or None if it is absent."""
        for key, value in self.attrs:
            if key == name:
                return value if value is not None else ""
        return None

    def set_attr(self, name: str, value: str) -> None:
        """Set an attribute, replacing an existing value in place."""
        for index, (key, _) in enumerate(self.attrs):
            if key == name:
                self.attrs[index] = (name, value)
                return
        self.attrs.append((name, value))


class MarkupTree:
    """Arena-backed ordered tree of elements, text and comments.

    Node ``ROOT_ID`` is a synthetic fragment root; its children are the
    top-level nodes of the parsed fragment. Detached nodes stay in the arena
    but are no longer reachable from the root.
    """

    def __init__(self) -> None:
        self._nodes: list[Node] = [Node(id=ROOT_ID, kind=NodeKind.ELEMENT, tag="#root")]

    @property
    def root(self) -> int:
        return ROOT_ID

    def node(self, node_id: int) -> Node:
        return self._nodes[node_id]

    # Construction

    def _add(self, node: Node) -> int:
        self._nodes.append(node)
        return node.id

    def create_element(
        self,
        tag: str,
        attrs: list[tuple[str, str | None]] | None = None,
    ) -> int:
        return self._add(
            Node(
                id=len(self._nodes),
                kind=NodeKind.ELEMENT,
                tag=tag.lower(),
                attrs=list(attrs or []),
            )
        )

    def create_text(self, data: str) -> int:
        return self._add(Node(id=len(self._nodes), kind=NodeKind.TEXT, data=data))

    def create_comment(self, data: str) -> int:
        return self._add(Node(id=len(self._nodes), kind=NodeKind.COMMENT, data=data))

    def clone_shallow(self, node_id: int) -> int:
        """Copy a node without its children; the copy is detached."""
        source = self._nodes[node_id]
        return self._add(
            Node(
                id=len(self._nodes),
                kind=source.kind,
                tag=source.tag,
                attrs=list(source.attrs),
                data=source.data,
            )
        )

    # Navigation

    def parent(self, node_id: int) -> int | None:
        return self._nodes[node_id].parent

    def children(self, node_id: int) -> list[int]:
        return list(self._nodes[node_id].children)

    def first_element_child(self, node_id: int) -> int | None:
        for child in self._nodes[node_id].children:
            if self._nodes[child].is_element:
                return child
        return None

    def next_sibling(self, node_id: int) -> int | None:
        parent = self._nodes[node_id].parent
        if parent is None:
            return None
        siblings = self._nodes[parent].children
        index = siblings.index(node_id)
        if index + 1 < len(siblings):
            return siblings[index + 1]
        return None

    def next_element_sibling(self, node_id: int) -> int | None:
        parent = self._nodes[node_id].parent
        if parent is None:
            return None
        siblings = self._nodes[parent].children
        for sibling in siblings[siblings.index(node_id) + 1 :]:
            if self._nodes[sibling].is_element:
                return sibling
        return None

    def iter_descendants(self, node_id: int = ROOT_ID) -> Iterator[int]:
        """Yield descendants of a node in document order (excluding itself)."""
        stack = list(reversed(self._nodes[node_id].children))
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(self._nodes[current].children))

    def descendant_elements(self, node_id: int = ROOT_ID) -> list[int]:
        """Snapshot of descendant elements in document order.

        The list is taken before any mutation, so callers may restructure
        the tree while walking it.
        """
        return [n for n in self.iter_descendants(node_id) if self._nodes[n].is_element]

    def find_all(self, tags: frozenset[str] | set[str], node_id: int = ROOT_ID) -> list[int]:
        return [n for n in self.descendant_elements(node_id) if self._nodes[n].tag in tags]

    def closest(self, node_id: int, tag: str) -> int | None:
        """Nearest inclusive ancestor with the given tag (the root never matches)."""
        current: int | None = node_id
        while current is not None and current != ROOT_ID:
            node = self._nodes[current]
            if node.is_element and node.tag == tag:
                return current
            current = node.parent
        return None

    # Mutation

    def detach(self, node_id: int) -> None:
        node = self._nodes[node_id]
        if node.parent is not None:
            self._nodes[node.parent].children.remove(node_id)
            node.parent = None

    def append_child(self, parent_id: int, child_id: int) -> None:
        self.detach(child_id)
        self._nodes[parent_id].children.append(child_id)
        self._nodes[child_id].parent = parent_id

    def prepend_child(self, parent_id: int, child_id: int) -> None:
        self.detach(child_id)
        self._nodes[parent_id].children.insert(0, child_id)
        self._nodes[child_id].parent = parent_id

    def insert_before(self, parent_id: int, child_id: int, ref_id: int) -> None:
        self.detach(child_id)
        siblings = self._nodes[parent_id].children
        siblings.insert(siblings.index(ref_id), child_id)
        self._nodes[child_id].parent = parent_id

    def unwrap(self, node_id: int) -> None:
        """Replace an element by its children."""
        parent = self._nodes[node_id].parent
        if parent is None:
            return
        for child in self.children(node_id):
            self.insert_before(parent, child, node_id)
        self.detach(node_id)

    def extract(self, node_id: int) -> None:
        """Lift an element out of its parent, splitting the parent around it.

        Siblings before the element move into a shallow copy of the parent
        placed before it; siblings after it stay in the original parent,
        which is dropped if it ends up empty.
        """
        parent = self._nodes[node_id].parent
        if parent is None:
            return
        grandparent = self._nodes[parent].parent
        if grandparent is None:
            return

        before = self.clone_shallow(parent)
        while self._nodes[parent].children and self._nodes[parent].children[0] != node_id:
            self.append_child(before, self._nodes[parent].children[0])

        if self._nodes[before].children:
            self.insert_before(grandparent, before, parent)
        self.insert_before(grandparent, node_id, parent)

        if not self._nodes[parent].children:
            self.detach(parent)

    # Serialization

    def inner_html(self, node_id: int = ROOT_ID) -> str:
        raw = self._nodes[node_id].tag in RAW_TEXT_ELEMENTS
        return "".join(self._serialize(child, raw) for child in self._nodes[node_id].children)

    def _serialize(self, node_id: int, raw_text: bool) -> str:
        node = self._nodes[node_id]
        if node.kind is NodeKind.TEXT:
            return node.data if raw_text else escape_text(node.data)
        if node.kind is NodeKind.COMMENT:
            return f"<!--{node.data}-->"

        attrs = "".join(
            f' {name}="{escape_attr(value or "")}"' for name, value in node.attrs
        )
        if node.tag in VOID_ELEMENTS:
            return f"<{node.tag}{attrs}>"
        return f"<{node.tag}{attrs}>{self.inner_html(node_id)}</{node.tag}>"


def escape_text(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("\xa0", "&nbsp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def escape_attr(value: str) -> str:
    return value.replace("&", "&amp;").replace("\xa0", "&nbsp;").replace('"', "&quot;")


class _TreeBuilder(HTMLParser):
    """Feed HTML into a MarkupTree without any implicit tag fixing.

    Unlike a browser parser, an open ``<p>`` is not closed by a nested block
    tag, so block content the renderer emitted inside a paragraph stays
    there until the normalizer moves it.
    """

    def __init__(self, tree: MarkupTree) -> None:
        super().__init__(convert_charrefs=True)
        self.tree = tree
        self._stack: list[int] = [ROOT_ID]

    @property
    def _current(self) -> int:
        return self._stack[-1]

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        element = self.tree.create_element(tag, attrs)
        self.tree.append_child(self._current, element)
        if tag not in VOID_ELEMENTS:
            self._stack.append(element)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        element = self.tree.create_element(tag, attrs)
        self.tree.append_child(self._current, element)

    def handle_endtag(self, tag: str) -> None:
        for depth in range(len(self._stack) - 1, 0, -1):
            if self.tree.node(self._stack[depth]).tag == tag:
                del self._stack[depth:]
                return
        logger.debug(f"Ignoring unmatched end tag: </{tag}>")

    def handle_data(self, data: str) -> None:
        children = self.tree.node(self._current).children
        if children and self.tree.node(children[-1]).is_text:
            self.tree.node(children[-1]).data += data
            return
        self.tree.append_child(self._current, self.tree.create_text(data))

    def handle_comment(self, data: str) -> None:
        self.tree.append_child(self._current, self.tree.create_comment(data))


def parse_fragment(html: str) -> MarkupTree:
    """Parse an HTML fragment into a new MarkupTree.

    Args:
        html: HTML fragment as produced by the Markdown renderer

    Returns:
        Tree whose root holds the fragment's top-level nodes
    """
    tree = MarkupTree()
    builder = _TreeBuilder(tree)
    builder.feed(html)
    builder.close()
    return tree
