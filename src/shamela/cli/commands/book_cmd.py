# ABOUTME: The `shamela book` command for downloading and assembling a single book.
# ABOUTME: Fetches release metadata, applies the patch, and writes JSON, SQLite or EPUB.

from pathlib import Path

import click
from rich.console import Console

from shamela.api.client import ShamelaClient
from shamela.cli.options import USER_ERRORS, api_options, build_config, fail, output_option
from shamela.config import ShamelaConfig
from shamela.formats.epub import write_book_epub

console = Console()


def _create_client(config: ShamelaConfig) -> ShamelaClient:
    return ShamelaClient(config)


@click.command()
@click.argument("book_id", type=int)
@output_option
@click.option("--major", type=int, default=0, show_default=True, help="Major release already held.")
@click.option("--minor", type=int, default=0, show_default=True, help="Minor release already held.")
@click.option("--title", default=None, help="Title for EPUB output (default: 'Book <id>').")
@api_options
def book(
    book_id: int,
    output_path: Path,
    major: int,
    minor: int,
    title: str | None,
    api_key: str | None,
    books_endpoint: str | None,
    master_endpoint: str | None,
) -> None:
    """Download BOOK_ID and write it as .json, .db, .sqlite or .epub."""
    client = _create_client(build_config(api_key, books_endpoint, master_endpoint))
    try:
        metadata = client.get_book_metadata(book_id, major, minor)
        if output_path.suffix.lower() == ".epub":
            data = client.get_book(book_id, metadata)
            write_book_epub(data, output_path, title=title or f"Book {book_id}")
        else:
            client.download_book(book_id, output_path, metadata)
    except USER_ERRORS as exc:
        fail(console, exc)
    finally:
        client.close()

    patch = f", patch {metadata.minor_release}" if metadata.minor_release_url else ""
    console.print(
        f"Wrote book [bold]{book_id}[/bold] (release {metadata.major_release}{patch}) "
        f"to {output_path}"
    )
