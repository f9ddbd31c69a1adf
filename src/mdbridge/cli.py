"""CLI interface for mdbridge.

Command-line tool for converting markdown to document-model HTML.
"""

import logging
import sys
from pathlib import Path

import click

from mdbridge.config import Config


@click.group()
def cli() -> None:
    """mdbridge - Markdown to document-model HTML."""


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("markdown_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover mdbridge.toml)",
)
@click.option(
    "--inline",
    is_flag=True,
    help="Parse as inline content (no wrapping paragraph)",
)
@click.option(
    "--html/--no-html",
    default=None,
    help="Allow/escape raw HTML in the source (overrides config)",
)
@click.option(
    "--breaks/--no-breaks",
    default=None,
    help="Treat single newlines as hard breaks (overrides config)",
)
@click.option(
    "--linkify/--no-linkify",
    default=None,
    help="Turn bare URLs into links (overrides config)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def convert(
    markdown_file: Path,
    config_path: Path | None,
    inline: bool,
    html: bool | None,
    breaks: bool | None,
    linkify: bool | None,
    verbose: bool,
) -> None:
    """Convert a markdown file and print the normalized HTML."""
    from mdbridge.core.parser import MarkdownParser

    _setup_logging(verbose)

    try:
        config = Config.load(config_path).with_overrides(
            html=html,
            breaks=breaks,
            linkify=linkify,
        )
    except (FileNotFoundError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    markdown_text = markdown_file.read_text(encoding="utf-8")

    with MarkdownParser.from_config(config) as parser:
        result = parser.parse(markdown_text, inline=inline)

    click.echo(result)


@cli.command()
@click.argument("text")
@click.option(
    "--delimiter",
    "-d",
    default="*",
    show_default=True,
    help="Emphasis delimiter token",
)
@click.option(
    "--start",
    type=int,
    required=True,
    help="Offset of the opening delimiter",
)
@click.option(
    "--end",
    type=int,
    required=True,
    help="Offset of the closing delimiter",
)
def trim(text: str, delimiter: str, start: int, end: int) -> None:
    """Move emphasis delimiters in TEXT inward until they are flanking."""
    from mdbridge.core.delimiters import trim_inline

    if not 0 <= start <= end <= len(text):
        click.echo(
            click.style("Error: require 0 <= start <= end <= len(text)", fg="red"),
            err=True,
        )
        sys.exit(1)

    click.echo(trim_inline(text, delimiter, start, end))


@cli.command("block-tags")
def block_tags() -> None:
    """List the tags the default schema treats as block-level."""
    from mdbridge.core.schema import default_schema

    for tag in sorted(default_schema().block_tags):
        click.echo(tag)


if __name__ == "__main__":
    cli()
