# ABOUTME: Assembles a book (pages and titles) from a base database and an optional patch.
# ABOUTME: Runs the merge engine per sub-table and projects merged rows into BookData.

import logging
import sqlite3
from pathlib import Path

from shamela.db.connection import (
    SourceUnavailableError,
    optional_source_database,
    source_database,
    target_database,
)
from shamela.db.mapping import row_to_page, row_to_title
from shamela.db.merge import copy_and_patch_table
from shamela.db.schema import BOOK_DEFAULT_COLUMNS, PAGE_TABLE, TITLE_TABLE
from shamela.db.store import SqliteStore, TableStore
from shamela.types import BookData

logger = logging.getLogger(__name__)

BOOK_TABLES = (PAGE_TABLE, TITLE_TABLE)


def create_tables(target: TableStore) -> None:
    """Create empty page and title tables with the default columns."""
    for table, columns in BOOK_DEFAULT_COLUMNS.items():
        target.create_table(table, columns)


def apply_patches(target: TableStore, source: TableStore, patch: TableStore | None) -> None:
    """Merge every book sub-table from ``source`` and ``patch`` into ``target``.

    Sub-tables missing from ``source`` keep whatever ``target`` already has
    (empty tables after :func:`create_tables`).
    """
    for table in BOOK_TABLES:
        count = copy_and_patch_table(target, source, patch, table)
        if count is not None:
            logger.info("Wrote %d %s row(s)", count, table)


def copy_table_data(target: TableStore, source: TableStore) -> None:
    """Copy book sub-tables without a patch, dropping soft-deleted rows."""
    apply_patches(target, source, None)


def get_data(store: TableStore) -> BookData:
    """Read merged pages and titles out of ``store``."""
    return BookData(
        pages=[row_to_page(row) for row in store.read_rows(PAGE_TABLE)],
        titles=[row_to_title(row) for row in store.read_rows(TITLE_TABLE)],
    )


def _merge_into(conn: sqlite3.Connection, base_path: Path, patch_path: Path | None) -> SqliteStore:
    target = SqliteStore(conn)
    with source_database(base_path) as base_conn, optional_source_database(patch_path) as patch_conn:
        source = SqliteStore(base_conn)
        patch = SqliteStore(patch_conn) if patch_conn is not None else None
        try:
            with target.transaction():
                create_tables(target)
                if patch is not None:
                    logger.info("Applying patches from %s to %s", patch_path, base_path)
                    apply_patches(target, source, patch)
                else:
                    logger.info("Copying table data from %s", base_path)
                    copy_table_data(target, source)
        except sqlite3.Error as exc:
            raise SourceUnavailableError(f"Cannot merge {base_path}: {exc}") from exc
    return target


def assemble_book(base_path: Path, patch_path: Path | None = None) -> BookData:
    """Build BookData from a downloaded base database and optional patch database.

    The merge runs in a scratch in-memory database; every handle is closed
    before returning, including when an error is raised.

    Raises:
        SourceUnavailableError: If the base or patch database cannot be opened
            or SQLite rejects the merge.
        MalformedCellError: If a page or title cell cannot be parsed.
    """
    with target_database() as conn:
        store = _merge_into(conn, base_path, patch_path)
        return get_data(store)


def write_book_database(base_path: Path, patch_path: Path | None, output_path: Path) -> Path:
    """Merge base and patch and persist the result as a SQLite file at ``output_path``.

    Nothing is left at ``output_path`` when the merge fails; an earlier file
    there is only replaced once the new database is complete.
    """
    with target_database(output_path) as conn:
        _merge_into(conn, base_path, patch_path)
    return output_path
