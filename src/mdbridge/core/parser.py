"""Markdown to document-model HTML conversion.

``MarkdownParser`` renders Markdown, lets schema hooks adjust the result,
normalizes it and returns HTML the document model accepts. A failure at any
step is logged and the source text is returned unchanged, so one broken
extension cannot block content loading.
"""

import logging
from dataclasses import asdict
from types import TracebackType

from mdbridge.config import Config
from mdbridge.core.hooks import SchemaHook, default_hooks
from mdbridge.core.normalize import TreeNormalizer
from mdbridge.core.renderer import (
    MarkdownRenderer,
    MistuneRenderer,
    RenderOptions,
    cleanup_rendered,
)
from mdbridge.core.schema import Schema, default_schema
from mdbridge.core.tree import parse_fragment

logger = logging.getLogger(__name__)


class MarkdownParser:
    """Convert Markdown text to normalized HTML.

    The parser owns its renderer. Use it as a context manager, or call
    ``close()`` when done; a closed parser passes content through untouched.
    """

    def __init__(
        self,
        schema: Schema | None = None,
        hooks: list[SchemaHook] | None = None,
        options: RenderOptions | None = None,
        renderer: MarkdownRenderer | None = None,
    ) -> None:
        """Initialize the parser.

        Args:
            schema: Document schema (default: ``default_schema()``)
            hooks: Ordered schema hooks
            options: Renderer options, used when no renderer is given
            renderer: Renderer to use instead of a new MistuneRenderer
        """
        self.schema = schema if schema is not None else default_schema()
        self.options = options or RenderOptions()
        self.hooks: list[SchemaHook] = list(hooks or [])
        self.renderer: MarkdownRenderer | None = (
            renderer if renderer is not None else MistuneRenderer(self.options)
        )
        self.normalizer = TreeNormalizer(self.schema)
        self.closed = False

        for hook in self.hooks:
            hook.bind(asdict(self.options))
            try:
                hook.setup(self.renderer)
            except Exception as e:
                logger.error(f"Error in {hook.name} setup: {e}")
                logger.warning(f"Parsing will continue without {hook.name} renderer setup")

    @classmethod
    def from_config(cls, config: Config, schema: Schema | None = None) -> "MarkdownParser":
        """Create a parser with the default hooks configured from ``config``."""
        options = RenderOptions(
            allow_raw_markup=config.markdown.html,
            line_breaks_as_hard=config.markdown.breaks,
            heading_anchors=config.markdown.heading_anchors,
            linkify=config.markdown.linkify,
        )
        hooks = default_hooks(
            language_class_prefix=config.code_block.language_class_prefix,
            tight_lists=config.lists.tight,
            tight_list_class=config.lists.tight_class,
        )
        return cls(schema=schema, hooks=hooks, options=options)

    def __enter__(self) -> "MarkdownParser":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release the renderer and hooks."""
        if self.closed:
            return
        self.closed = True
        self.renderer = None
        self.hooks = []
        logger.debug("Markdown parser closed")

    def parse(self, content: object, *, inline: bool = False) -> object:
        """Convert Markdown to HTML.

        Args:
            content: Markdown source; anything other than a string is returned as is
            inline: Parse as inline content (no wrapping paragraph)

        Returns:
            Normalized HTML, or ``content`` unchanged if conversion fails
        """
        renderer = self.renderer
        if renderer is None or not isinstance(content, str):
            return content

        try:
            return self._convert(renderer, content, inline=inline)
        except Exception as e:
            logger.error(f"Error parsing markdown: {e}")
            logger.warning("Falling back to unconverted source text")
            import traceback

            logger.debug(traceback.format_exc())
            return content

    def _convert(self, renderer: MarkdownRenderer, content: str, *, inline: bool) -> str:
        logger.debug(f"Parsing {len(content)} characters of markdown (inline={inline})")

        rendered = renderer.render_inline(content) if inline else renderer.render(content)
        tree = parse_fragment(cleanup_rendered(rendered))

        for hook in self.hooks:
            hook.update_dom(tree)

        self.normalizer.normalize(tree, inline=inline, content=content)

        html = tree.inner_html()
        logger.debug(f"Converted to {len(html)} characters of HTML")
        return html
