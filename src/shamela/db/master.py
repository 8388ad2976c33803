# ABOUTME: Assembles the master catalog (authors, books, categories) from its source databases.
# ABOUTME: Each source is a separate archive member copied with soft-deleted rows removed.

import logging
import sqlite3
from collections.abc import Iterable, Mapping
from contextlib import ExitStack
from pathlib import Path

from shamela.db.connection import SourceUnavailableError, source_database, target_database
from shamela.db.mapping import (
    UNKNOWN_VALUE_PLACEHOLDER,
    MalformedCellError,
    book_to_row,
    parse_author,
    parse_pdf_links,
    row_to_author,
    row_to_book,
    row_to_category,
)
from shamela.db.merge import copy_and_patch_table
from shamela.db.schema import AUTHOR_TABLE, BOOK_TABLE, CATEGORY_TABLE, MASTER_SCHEMA
from shamela.db.store import SqliteStore, TableStore
from shamela.types import MasterData

__all__ = [
    "MASTER_SOURCE_FILES",
    "MASTER_TABLES",
    "UNKNOWN_VALUE_PLACEHOLDER",
    "MalformedCellError",
    "assemble_catalog",
    "copy_master_tables",
    "get_data",
    "parse_author",
    "parse_pdf_links",
    "resolve_master_sources",
    "validate_master_source_tables",
    "write_master_database",
]

logger = logging.getLogger(__name__)

MASTER_TABLES = (AUTHOR_TABLE, BOOK_TABLE, CATEGORY_TABLE)
MASTER_SOURCE_FILES = tuple(f"{table}.sqlite" for table in MASTER_TABLES)


def validate_master_source_tables(paths: Iterable[Path]) -> bool:
    """Whether author.sqlite, book.sqlite and category.sqlite are all present."""
    names = {Path(p).name.lower() for p in paths}
    return all(name in names for name in MASTER_SOURCE_FILES)


def resolve_master_sources(paths: Iterable[Path]) -> dict[str, Path]:
    """Map each master table name to the extracted file that holds it.

    Raises:
        FileNotFoundError: If any of the three source files is missing.
    """
    by_name = {Path(p).name.lower(): Path(p) for p in paths}
    missing = [name for name in MASTER_SOURCE_FILES if name not in by_name]
    if missing:
        raise FileNotFoundError(f"Expected tables not found: {', '.join(missing)}")
    return {table: by_name[f"{table}.sqlite"] for table in MASTER_TABLES}


def copy_master_tables(target: TableStore, sources: Mapping[str, TableStore]) -> None:
    """Copy each master table from its own source store, filtering soft deletes."""
    for table in MASTER_TABLES:
        count = copy_and_patch_table(target, sources[table], None, table)
        if count is not None:
            logger.info("Copied %d %s row(s)", count, table)


def get_data(store: TableStore, version: int | None = None) -> MasterData:
    """Project copied master tables into MasterData.

    Raises:
        MalformedCellError: If a book's author, pdf_links or metadata cell is malformed.
    """
    return MasterData(
        authors=[row_to_author(row) for row in store.read_rows(AUTHOR_TABLE)],
        books=[row_to_book(row) for row in store.read_rows(BOOK_TABLE)],
        categories=[row_to_category(row) for row in store.read_rows(CATEGORY_TABLE)],
        version=version,
    )


def assemble_catalog(
    author_path: Path,
    book_path: Path,
    category_path: Path,
    *,
    version: int | None = None,
) -> MasterData:
    """Build MasterData from the three extracted source databases.

    Raises:
        SourceUnavailableError: If any source database cannot be opened.
        MalformedCellError: If a cell cannot be parsed.
    """
    paths = {AUTHOR_TABLE: author_path, BOOK_TABLE: book_path, CATEGORY_TABLE: category_path}
    with ExitStack() as stack:
        sources: dict[str, TableStore] = {
            table: SqliteStore(stack.enter_context(source_database(path)))
            for table, path in paths.items()
        }
        conn = stack.enter_context(target_database())
        target = SqliteStore(conn)
        try:
            with target.transaction():
                copy_master_tables(target, sources)
        except sqlite3.Error as exc:
            raise SourceUnavailableError(f"Cannot copy master tables: {exc}") from exc
        return get_data(target, version)


def write_master_database(data: MasterData, output_path: Path) -> Path:
    """Write projected master data into a fresh SQLite file."""
    with target_database(output_path) as conn:
        conn.executescript(MASTER_SCHEMA)
        _insert(
            conn,
            "authors",
            [{"id": a.id, "name": a.name, "biography": a.biography, "death": a.death}
             for a in data.authors],
        )
        _insert(conn, "books", [book_to_row(b) for b in data.books])
        _insert(conn, "categories", [{"id": c.id, "name": c.name} for c in data.categories])
        conn.commit()
    return output_path


def _insert(conn: sqlite3.Connection, table: str, rows: list[dict]) -> None:
    if not rows:
        return
    columns = list(rows[0])
    placeholders = ", ".join("?" for _ in columns)
    conn.executemany(
        f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
        [[row[c] for c in columns] for row in rows],
    )
