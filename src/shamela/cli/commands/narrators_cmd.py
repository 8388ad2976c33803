# ABOUTME: The `shamela narrators` command for exporting the narrator service database.
# ABOUTME: Decodes every narrator and writes JSON or prefixed plain text with a summary table.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from shamela.cli.options import USER_ERRORS, fail, output_option
from shamela.core.narrators import (
    count_unmapped_narrators,
    format_all_narrators,
    narrator_to_dict,
    read_narrators,
)
from shamela.formats.jsonfile import write_json

console = Console()


@click.command()
@click.argument("db_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@output_option
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["json", "txt"]),
    default=None,
    help="Output format (default: from the output extension, else json).",
)
def narrators(db_path: Path, output_path: Path, fmt: str | None) -> None:
    """Export decoded narrators from DB_PATH."""
    fmt = fmt or ("txt" if output_path.suffix.lower() == ".txt" else "json")
    try:
        rows = read_narrators(db_path)
    except USER_ERRORS as exc:
        fail(console, exc)

    if fmt == "txt":
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(format_all_narrators(rows), encoding="utf-8")
    else:
        write_json([narrator_to_dict(n) for n in rows], output_path)

    table = Table(title="Unmapped bytes", show_header=True)
    table.add_column("Field", style="bold")
    table.add_column("Narrators", justify="right")
    for field, count in count_unmapped_narrators(rows).items():
        table.add_row(field, str(count))

    console.print(f"Exported [bold]{len(rows)}[/bold] narrator(s) to {output_path}")
    console.print(table)
