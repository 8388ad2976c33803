# ABOUTME: The `shamela merge` command for patching a local book database offline.
# ABOUTME: Merges a base and optional patch database and writes JSON, SQLite or EPUB.

from pathlib import Path

import click
from rich.console import Console

from shamela.cli.options import USER_ERRORS, fail, output_option
from shamela.db.book import assemble_book, write_book_database
from shamela.formats.epub import write_book_epub
from shamela.formats.jsonfile import write_json

console = Console()


@click.command()
@click.argument("base", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--patch",
    "patch_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Patch database to apply on top of BASE.",
)
@output_option
@click.option("--title", default=None, help="Title for EPUB output (default: BASE file name).")
def merge(base: Path, patch_path: Path | None, output_path: Path, title: str | None) -> None:
    """Merge BASE with an optional patch and write .json, .db, .sqlite or .epub."""
    suffix = output_path.suffix.lower()
    if output_path.resolve() in {base.resolve(), patch_path.resolve() if patch_path else None}:
        fail(console, ValueError("Output must not overwrite an input database"))

    try:
        if suffix in (".db", ".sqlite"):
            write_book_database(base, patch_path, output_path)
            console.print(f"Wrote merged database to {output_path}")
            return

        data = assemble_book(base, patch_path)
        if suffix == ".json":
            write_json(data.to_dict(), output_path)
        elif suffix == ".epub":
            write_book_epub(data, output_path, title=title or base.stem)
        else:
            raise ValueError(
                f"Unsupported output extension {output_path.suffix!r}; "
                "use .json, .db, .sqlite or .epub"
            )
    except USER_ERRORS as exc:
        fail(console, exc)

    console.print(
        f"Wrote {len(data.pages)} page(s) and {len(data.titles)} title(s) to {output_path}"
    )
