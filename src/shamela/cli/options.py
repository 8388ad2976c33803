# ABOUTME: Shared Click options and helpers for Shamela CLI commands.
# ABOUTME: Provides API credential flags, config building, and error reporting.

from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from rich.console import Console

from shamela.api.archive import ArchiveError
from shamela.api.http import ShamelaFetchError
from shamela.config import ConfigError, ShamelaConfig
from shamela.db.connection import SourceUnavailableError
from shamela.db.mapping import MalformedCellError
from shamela.formats.epub import EpubWriteError

# Errors a command reports as a one-line message with exit status 1.
USER_ERRORS = (
    ArchiveError,
    ConfigError,
    EpubWriteError,
    FileNotFoundError,
    MalformedCellError,
    ShamelaFetchError,
    SourceUnavailableError,
    ValueError,
)

output_option = click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output file; the format is chosen by extension.",
)


def api_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add --api-key, --books-endpoint and --master-endpoint to a command."""
    func = click.option(
        "--master-endpoint",
        default=None,
        help="Master patch endpoint (default: $SHAMELA_API_MASTER_PATCH_ENDPOINT).",
    )(func)
    func = click.option(
        "--books-endpoint",
        default=None,
        help="Books endpoint (default: $SHAMELA_API_BOOKS_ENDPOINT).",
    )(func)
    func = click.option(
        "--api-key",
        default=None,
        help="API key (default: $SHAMELA_API_KEY).",
    )(func)
    return func


def build_config(
    api_key: str | None, books_endpoint: str | None, master_endpoint: str | None
) -> ShamelaConfig:
    """Environment configuration with any flags given on the command line applied on top."""
    return ShamelaConfig.from_env().with_overrides(
        api_key=api_key,
        books_endpoint=books_endpoint,
        master_patch_endpoint=master_endpoint,
    )


def fail(console: Console, exc: Exception) -> None:
    """Print an error and exit with status 1."""
    console.print(f"[red]Error:[/red] {exc}")
    raise SystemExit(1) from exc
