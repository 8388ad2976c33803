# ABOUTME: Table storage capability consumed by the patch-merge engine.
# ABOUTME: One protocol with a sqlite3 adapter and an in-memory adapter.

import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

Row = dict[str, Any]


@dataclass(frozen=True)
class Column:
    """Name and declared type of a table column. Type may be empty."""

    name: str
    type: str = ""


@runtime_checkable
class TableStore(Protocol):
    """Operations the merge engine needs from a storage backend."""

    def has_table(self, table: str) -> bool: ...

    def columns(self, table: str) -> list[Column]: ...

    def read_rows(self, table: str) -> list[Row]: ...

    def create_table(self, table: str, columns: Sequence[Column]) -> None: ...

    def add_column(self, table: str, column: Column) -> None: ...

    def insert_rows(self, table: str, columns: Sequence[str], rows: Sequence[Row]) -> None: ...


def quote_identifier(name: str) -> str:
    """Quote a SQL identifier. Needed for vendor columns such as ``order``."""
    return '"' + name.replace('"', '""') + '"'


class SqliteStore:
    """TableStore backed by a sqlite3 connection. The caller owns the connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def has_table(self, table: str) -> bool:
        cursor = self._conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name = ?", (table,)
        )
        return cursor.fetchone() is not None

    def columns(self, table: str) -> list[Column]:
        cursor = self._conn.execute(f"PRAGMA table_info({quote_identifier(table)})")
        return [Column(name=row[1], type=row[2] or "") for row in cursor.fetchall()]

    def read_rows(self, table: str) -> list[Row]:
        """Return every row as a dict, or an empty list if the table is absent."""
        if not self.has_table(table):
            return []
        cursor = self._conn.execute(f"SELECT * FROM {quote_identifier(table)}")
        names = [description[0] for description in cursor.description]
        return [dict(zip(names, values)) for values in cursor.fetchall()]

    def create_table(self, table: str, columns: Sequence[Column]) -> None:
        """(Re)create ``table`` with the given columns, dropping any previous definition."""
        definition = ", ".join(
            f"{quote_identifier(c.name)} {c.type}".rstrip() for c in columns
        )
        self._conn.execute(f"DROP TABLE IF EXISTS {quote_identifier(table)}")
        self._conn.execute(f"CREATE TABLE {quote_identifier(table)} ({definition})")

    def add_column(self, table: str, column: Column) -> None:
        column_type = column.type or "TEXT"
        self._conn.execute(
            f"ALTER TABLE {quote_identifier(table)} "
            f"ADD COLUMN {quote_identifier(column.name)} {column_type}"
        )

    def insert_rows(self, table: str, columns: Sequence[str], rows: Sequence[Row]) -> None:
        if not rows:
            return
        names = ", ".join(quote_identifier(c) for c in columns)
        placeholders = ", ".join("?" for _ in columns)
        self._conn.executemany(
            f"INSERT INTO {quote_identifier(table)} ({names}) VALUES ({placeholders})",
            [[row.get(column) for column in columns] for row in rows],
        )

    @contextmanager
    def transaction(self) -> Iterator["SqliteStore"]:
        """Commit on success, roll back and re-raise on error."""
        try:
            yield self
        except BaseException:
            self._conn.rollback()
            raise
        self._conn.commit()


class MemoryStore:
    """TableStore holding tables as lists of dicts. Used for tests and ad-hoc merges."""

    def __init__(self, tables: dict[str, list[Row]] | None = None) -> None:
        self._columns: dict[str, list[Column]] = {}
        self._rows: dict[str, list[Row]] = {}
        for table, rows in (tables or {}).items():
            names: dict[str, None] = {}
            for row in rows:
                for name in row:
                    names.setdefault(name, None)
            self._columns[table] = [Column(name) for name in names]
            self._rows[table] = [dict(row) for row in rows]

    def has_table(self, table: str) -> bool:
        return table in self._columns

    def columns(self, table: str) -> list[Column]:
        return list(self._columns.get(table, []))

    def read_rows(self, table: str) -> list[Row]:
        return [dict(row) for row in self._rows.get(table, [])]

    def create_table(self, table: str, columns: Sequence[Column]) -> None:
        self._columns[table] = list(columns)
        self._rows[table] = []

    def add_column(self, table: str, column: Column) -> None:
        if table not in self._columns:
            raise KeyError(f"no such table: {table}")
        self._columns[table].append(Column(column.name, column.type or "TEXT"))
        for row in self._rows[table]:
            row.setdefault(column.name, None)

    def insert_rows(self, table: str, columns: Sequence[str], rows: Sequence[Row]) -> None:
        if table not in self._columns:
            raise KeyError(f"no such table: {table}")
        known = {c.name for c in self._columns[table]}
        unknown = [c for c in columns if c not in known]
        if unknown:
            raise KeyError(f"table {table} has no column(s): {', '.join(unknown)}")
        inserted = set(columns)
        self._rows[table].extend(
            {c.name: row.get(c.name) if c.name in inserted else None for c in self._columns[table]}
            for row in rows
        )
