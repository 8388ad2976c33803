# ABOUTME: Public API for the Shamela database layer.
# ABOUTME: Exports the merge engine, storage adapters, and book/catalog assemblers.

from shamela.db.book import assemble_book, write_book_database
from shamela.db.connection import SourceUnavailableError, open_source, open_target
from shamela.db.mapping import MalformedCellError
from shamela.db.master import assemble_catalog, write_master_database
from shamela.db.merge import (
    PATCH_NOOP_VALUE,
    copy_and_patch_table,
    is_deleted,
    merge_row_values,
    merge_rows,
    reconcile_columns,
    reconcile_schema,
)
from shamela.db.store import Column, MemoryStore, SqliteStore, TableStore

__all__ = [
    "PATCH_NOOP_VALUE",
    "Column",
    "MalformedCellError",
    "MemoryStore",
    "SourceUnavailableError",
    "SqliteStore",
    "TableStore",
    "assemble_book",
    "assemble_catalog",
    "copy_and_patch_table",
    "is_deleted",
    "merge_row_values",
    "merge_rows",
    "open_source",
    "open_target",
    "reconcile_columns",
    "reconcile_schema",
    "write_book_database",
    "write_master_database",
]
