"""mdbridge - Markdown to document-model HTML conversion.

Renders Markdown, reshapes the result for a structured rich-text schema and
repairs emphasis delimiters in generated Markdown.
"""

from mdbridge.core.delimiters import can_delimiter_be_used, shift_delim, trim_inline
from mdbridge.core.parser import MarkdownParser
from mdbridge.core.renderer import MistuneRenderer, RenderOptions
from mdbridge.core.schema import NodeSpec, Schema, default_schema

__all__ = [
    "MarkdownParser",
    "MistuneRenderer",
    "NodeSpec",
    "RenderOptions",
    "Schema",
    "can_delimiter_be_used",
    "default_schema",
    "shift_delim",
    "trim_inline",
]
