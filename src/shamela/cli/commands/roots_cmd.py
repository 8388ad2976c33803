# ABOUTME: The `shamela roots` command for exporting the Arabic roots database.
# ABOUTME: Writes token/root mappings as a list or a lookup map and prints statistics.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from shamela.cli.options import USER_ERRORS, fail, output_option
from shamela.core.roots import calculate_stats, create_root_map, read_roots
from shamela.formats.jsonfile import write_json

console = Console()


@click.command()
@click.argument("db_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@output_option
@click.option(
    "--map",
    "as_map",
    is_flag=True,
    default=False,
    help="Write a {token: roots} object instead of a list of mappings.",
)
def roots(db_path: Path, output_path: Path, as_map: bool) -> None:
    """Export token-to-root mappings from DB_PATH as compact JSON."""
    try:
        mappings = read_roots(db_path)
    except USER_ERRORS as exc:
        fail(console, exc)

    if as_map:
        write_json(create_root_map(mappings), output_path, indent=None)
    else:
        write_json([m.to_dict() for m in mappings], output_path, indent=None)

    stats = calculate_stats(mappings)
    table = Table(title="Root statistics", show_header=False, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Total tokens", f"{stats.total_tokens:,}")
    table.add_row("Unique roots", f"{stats.unique_roots:,}")
    table.add_row("Tokens with multiple roots", f"{stats.multi_root_tokens:,}")
    table.add_row("Max roots per token", str(stats.max_roots_per_token))

    console.print(f"Exported to {output_path}")
    console.print(table)
