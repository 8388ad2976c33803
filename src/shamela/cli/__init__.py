# ABOUTME: CLI package for Shamela, built on Click.
# ABOUTME: Defines the root command group, log setup, and registers subcommands.

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from shamela.cli.commands import (
    book_cmd,
    decode_cmd,
    master_cmd,
    merge_cmd,
    narrators_cmd,
    roots_cmd,
)


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    logging.getLogger("shamela").setLevel(logging.DEBUG)


@click.group()
@click.version_option(package_name="shamela")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show progress logging.")
def cli(verbose: bool) -> None:
    """Shamela - download, patch and decode Maktabah Shamela databases."""
    _configure_logging(verbose)


cli.add_command(book_cmd.book)
cli.add_command(master_cmd.master)
cli.add_command(merge_cmd.merge)
cli.add_command(narrators_cmd.narrators)
cli.add_command(roots_cmd.roots)
cli.add_command(decode_cmd.decode)
