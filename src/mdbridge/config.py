"""Configuration management for mdbridge.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

CONFIG_FILENAME = "mdbridge.toml"


@dataclass
class MarkdownConfig:
    """Markdown renderer configuration."""

    html: bool = True
    breaks: bool = False
    linkify: bool = False
    heading_anchors: bool = False


@dataclass
class CodeBlockConfig:
    """Code block configuration."""

    language_class_prefix: str = "language-"


@dataclass
class ListsConfig:
    """List configuration."""

    tight: bool = True
    tight_class: str = "tight"


@dataclass
class Config:
    """Application configuration."""

    markdown: MarkdownConfig = field(default_factory=MarkdownConfig)
    code_block: CodeBlockConfig = field(default_factory=CodeBlockConfig)
    lists: ListsConfig = field(default_factory=ListsConfig)
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for mdbridge.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        return cls(
            markdown=cls._parse_markdown(data.get("markdown")),
            code_block=cls._parse_code_block(data.get("code_block")),
            lists=cls._parse_lists(data.get("lists")),
            config_path=path,
        )

    @staticmethod
    def _get_bool(data: dict[str, object], section: str, key: str, default: bool) -> bool:
        value = data.get(key, default)
        if not isinstance(value, bool):
            raise ValueError(f"{section}.{key} must be a boolean")
        return value

    @staticmethod
    def _get_str(data: dict[str, object], section: str, key: str, default: str) -> str:
        value = data.get(key, default)
        if not isinstance(value, str):
            raise ValueError(f"{section}.{key} must be a string")
        return value

    @classmethod
    def _parse_markdown(cls, data: object) -> MarkdownConfig:
        """Parse markdown configuration section."""
        if data is None:
            return MarkdownConfig()

        if not isinstance(data, dict):
            raise ValueError("markdown section must be a dictionary")

        return MarkdownConfig(
            html=cls._get_bool(data, "markdown", "html", True),
            breaks=cls._get_bool(data, "markdown", "breaks", False),
            linkify=cls._get_bool(data, "markdown", "linkify", False),
            heading_anchors=cls._get_bool(data, "markdown", "heading_anchors", False),
        )

    @classmethod
    def _parse_code_block(cls, data: object) -> CodeBlockConfig:
        """Parse code_block configuration section."""
        if data is None:
            return CodeBlockConfig()

        if not isinstance(data, dict):
            raise ValueError("code_block section must be a dictionary")

        return CodeBlockConfig(
            language_class_prefix=cls._get_str(
                data, "code_block", "language_class_prefix", "language-"
            ),
        )

    @classmethod
    def _parse_lists(cls, data: object) -> ListsConfig:
        """Parse lists configuration section."""
        if data is None:
            return ListsConfig()

        if not isinstance(data, dict):
            raise ValueError("lists section must be a dictionary")

        return ListsConfig(
            tight=cls._get_bool(data, "lists", "tight", True),
            tight_class=cls._get_str(data, "lists", "tight_class", "tight"),
        )

    def with_overrides(
        self,
        *,
        html: bool | None = None,
        breaks: bool | None = None,
        linkify: bool | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.
        """
        markdown = replace(
            self.markdown,
            html=html if html is not None else self.markdown.html,
            breaks=breaks if breaks is not None else self.markdown.breaks,
            linkify=linkify if linkify is not None else self.markdown.linkify,
        )
        return replace(self, markdown=markdown)
