"""Document schema boundary.

The normalizer only needs to know which HTML tags the document model treats
as block-level. Each node type declares the tags it is parsed from and
whether it belongs to the block group.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class NodeSpec:
    """Node type definition as seen by the Markdown parser."""

    name: str
    group: str  # "block" or "inline"
    parse_tags: tuple[str, ...] = ()

    @property
    def is_block(self) -> bool:
        return self.group == "block"


@dataclass
class Schema:
    """Collection of node types with a cached block-tag set.

    The cache lives on the schema instance and is keyed by ``version``;
    bump it after changing ``nodes`` to have the set recomputed.
    """

    nodes: list[NodeSpec] = field(default_factory=list)
    version: str = "1"
    _block_tags_cache: tuple[str, frozenset[str]] | None = field(
        default=None, init=False, repr=False, compare=False
    )

    @property
    def block_tags(self) -> frozenset[str]:
        """Tags parsed into block-level nodes."""
        cached = self._block_tags_cache
        if cached is not None and cached[0] == self.version:
            return cached[1]

        tags = frozenset(
            tag.lower() for node in self.nodes if node.is_block for tag in node.parse_tags if tag
        )
        self._block_tags_cache = (self.version, tags)
        return tags


def default_schema() -> Schema:
    """Schema matching the editor's default node set."""
    return Schema(
        nodes=[
            NodeSpec("paragraph", "block", ("p",)),
            NodeSpec("heading", "block", ("h1", "h2", "h3", "h4", "h5", "h6")),
            NodeSpec("blockquote", "block", ("blockquote",)),
            NodeSpec("bulletList", "block", ("ul",)),
            NodeSpec("orderedList", "block", ("ol",)),
            NodeSpec("listItem", "block", ("li",)),
            NodeSpec("codeBlock", "block", ("pre",)),
            NodeSpec("horizontalRule", "block", ("hr",)),
            NodeSpec("image", "block", ("img",)),
            NodeSpec("table", "block", ("table",)),
            NodeSpec("hardBreak", "inline", ("br",)),
            NodeSpec("text", "inline"),
        ]
    )
