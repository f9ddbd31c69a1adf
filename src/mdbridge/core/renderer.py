"""Markdown rendering via mistune.

The parser only depends on the ``MarkdownRenderer`` protocol; ``MistuneRenderer``
is the default implementation. Options are fixed when the renderer is built
and can only change through ``update_options``, which rebuilds it.
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import Any, Protocol

import mistune
from mistune.plugins import import_plugin
from mistune.util import escape, safe_entity

logger = logging.getLogger(__name__)

GFM_PLUGINS = ("strikethrough", "table", "task_lists")
LINKIFY_PLUGIN = "url"

DEFAULT_LANG_PREFIX = "language-"

_TAG_RE = re.compile(r"<[^>]*>")
_SLUG_STRIP_RE = re.compile(r"[^\w\- ]+")


@dataclass(frozen=True)
class RenderOptions:
    """Renderer configuration."""

    allow_raw_markup: bool = True  # Pass raw HTML through unescaped
    line_breaks_as_hard: bool = False  # Single newlines become <br>
    github_flavored: bool = True  # Tables, strikethrough, task lists
    heading_anchors: bool = False  # Add id attributes to headings
    linkify: bool = False  # Turn bare URLs into links
    lang_prefix: str = DEFAULT_LANG_PREFIX  # Class prefix for fenced code languages


class MarkdownRenderer(Protocol):
    """Interface the parser needs from a Markdown renderer."""

    def render(self, text: str) -> str: ...

    def render_inline(self, text: str) -> str: ...

    def update_options(self, **changes: Any) -> None: ...


def slugify(text: str) -> str:
    """Build a heading id from rendered heading HTML."""
    plain = _TAG_RE.sub("", text).strip().lower()
    return _SLUG_STRIP_RE.sub("", plain).replace(" ", "-")


class _HTMLRenderer(mistune.HTMLRenderer):
    """mistune HTML renderer with a configurable code language prefix."""

    def __init__(self, options: RenderOptions) -> None:
        super().__init__(escape=not options.allow_raw_markup)
        self._lang_prefix = options.lang_prefix
        self._heading_anchors = options.heading_anchors

    def block_code(self, code: str, info: str | None = None) -> str:
        html = "<pre><code"
        if info is not None:
            info = safe_entity(info.strip())
        if info:
            lang = info.split(None, 1)[0]
            html += f' class="{self._lang_prefix}{lang}"'
        return html + ">" + escape(code) + "</code></pre>\n"

    def heading(self, text: str, level: int, **attrs: Any) -> str:
        if self._heading_anchors and not attrs.get("id"):
            attrs["id"] = slugify(text)
        return super().heading(text, level, **attrs)


class MistuneRenderer:
    """Render Markdown to HTML with mistune.

    Each instance owns its own mistune ``Markdown`` object; nothing is
    shared between parsers.
    """

    def __init__(self, options: RenderOptions | None = None) -> None:
        self.options = options or RenderOptions()
        self._markdown = self._build(self.options)

    @staticmethod
    def _build(options: RenderOptions) -> mistune.Markdown:
        plugins: list[str] = []
        if options.github_flavored:
            plugins.extend(GFM_PLUGINS)
        if options.linkify:
            plugins.append(LINKIFY_PLUGIN)

        return mistune.Markdown(
            renderer=_HTMLRenderer(options),
            inline=mistune.InlineParser(hard_wrap=options.line_breaks_as_hard),
            plugins=[import_plugin(name) for name in plugins],
        )

    def update_options(self, **changes: Any) -> None:
        """Apply option changes and rebuild the underlying renderer."""
        self.options = replace(self.options, **changes)
        self._markdown = self._build(self.options)
        logger.debug(f"Renderer options updated: {changes}")

    def render(self, text: str) -> str:
        """Render block-level Markdown."""
        return self._markdown(text)

    def render_inline(self, text: str) -> str:
        """Render Markdown as inline content, without paragraph wrapping."""
        state = self._markdown.block.state_cls()
        tokens = self._markdown.inline(text, state.env)
        return self._markdown.renderer(tokens, state)


def cleanup_rendered(rendered: object) -> str:
    """Remove the single trailing newline the renderer appends.

    Output that is exactly one newline is a soft break and is kept.

    Raises:
        TypeError: If the renderer did not return a string
    """
    if not isinstance(rendered, str):
        raise TypeError(f"Renderer returned {type(rendered).__name__}, expected str")

    if rendered == "\n":
        return rendered

    if rendered.endswith("\n"):
        return rendered[:-1]

    return rendered
