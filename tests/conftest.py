"""Shared test fixtures."""

from typing import Any

import pytest
from mdbridge.core.parser import MarkdownParser
from mdbridge.core.schema import Schema, default_schema


class StubRenderer:
    """Renderer returning canned HTML, recording what it was asked to render."""

    def __init__(self, html: object = "", *, error: Exception | None = None) -> None:
        self.html = html
        self.error = error
        self.calls: list[tuple[str, str]] = []
        self.option_changes: list[dict[str, Any]] = []

    def _output(self, kind: str, text: str) -> Any:
        self.calls.append((kind, text))
        if self.error is not None:
            raise self.error
        return self.html

    def render(self, text: str) -> Any:
        return self._output("block", text)

    def render_inline(self, text: str) -> Any:
        return self._output("inline", text)

    def update_options(self, **changes: Any) -> None:
        self.option_changes.append(changes)


@pytest.fixture
def schema() -> Schema:
    """Default document schema."""
    return default_schema()


@pytest.fixture
def parser(schema: Schema) -> MarkdownParser:
    """Parser with the real mistune renderer and no hooks."""
    return MarkdownParser(schema=schema)


@pytest.fixture
def stub_renderer() -> type[StubRenderer]:
    """Factory for renderers with canned output."""
    return StubRenderer
