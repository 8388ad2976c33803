# ABOUTME: The `shamela decode` command for checking the legacy byte decoder by hand.
# ABOUTME: Decodes a hex string and reports any bytes the character map does not cover.

import click
from rich.console import Console
from rich.table import Table

from shamela.cli.options import fail
from shamela.codec.legacy import (
    TextProfile,
    count_unmapped_bytes,
    decode_legacy_text,
    decode_shamela_metadata,
)

console = Console()


@click.command()
@click.argument("hex_bytes")
@click.option("--metadata", is_flag=True, default=False, help="Use the metadata profile.")
def decode(hex_bytes: str, metadata: bool) -> None:
    """Decode HEX_BYTES (e.g. 'c7 e4 d9') with the legacy character map."""
    try:
        blob = bytes.fromhex(hex_bytes)
    except ValueError as exc:
        fail(console, ValueError(f"Invalid hex input: {exc}"))

    text = decode_shamela_metadata(blob) if metadata else decode_legacy_text(blob, TextProfile.TEXT)
    console.print(text, markup=False, highlight=False)

    unmapped = count_unmapped_bytes(text)
    if not unmapped:
        return

    table = Table(title="Unmapped bytes", show_header=True)
    table.add_column("Byte", style="bold")
    table.add_column("Count", justify="right")
    for byte, count in unmapped.most_common():
        table.add_row(f"0x{byte}", str(count))
    console.print(table)
