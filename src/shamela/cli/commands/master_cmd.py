# ABOUTME: The `shamela master` command for downloading the master catalog.
# ABOUTME: Assembles authors, books and categories and writes JSON or SQLite.

from pathlib import Path

import click
from rich.console import Console

from shamela.api.client import DEFAULT_MASTER_METADATA_VERSION, ShamelaClient
from shamela.cli.options import USER_ERRORS, api_options, build_config, fail, output_option
from shamela.config import ShamelaConfig

console = Console()


def _create_client(config: ShamelaConfig) -> ShamelaClient:
    return ShamelaClient(config)


@click.command()
@output_option
@click.option(
    "--version",
    "version",
    type=int,
    default=DEFAULT_MASTER_METADATA_VERSION,
    show_default=True,
    help="Catalog version already held.",
)
@api_options
def master(
    output_path: Path,
    version: int,
    api_key: str | None,
    books_endpoint: str | None,
    master_endpoint: str | None,
) -> None:
    """Download the master catalog and write it as .json, .db or .sqlite."""
    client = _create_client(build_config(api_key, books_endpoint, master_endpoint))
    try:
        metadata = client.get_master_metadata(version)
        client.download_master_database(output_path, metadata)
    except USER_ERRORS as exc:
        fail(console, exc)
    finally:
        client.close()

    console.print(f"Wrote master catalog version [bold]{metadata.version}[/bold] to {output_path}")
