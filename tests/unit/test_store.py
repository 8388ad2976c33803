# ABOUTME: Unit tests for the table storage adapters.
# ABOUTME: Tests SqliteStore and MemoryStore against the TableStore protocol.

import sqlite3
from collections.abc import Iterator

import pytest

from shamela.db.store import Column, MemoryStore, SqliteStore, TableStore, quote_identifier


@pytest.fixture
def conn() -> Iterator[sqlite3.Connection]:
    connection = sqlite3.connect(":memory:")
    yield connection
    connection.close()


class TestProtocol:
    """Both adapters satisfy TableStore."""

    def test_sqlite_store_satisfies_protocol(self, conn: sqlite3.Connection) -> None:
        """SqliteStore satisfies the TableStore protocol."""
        assert isinstance(SqliteStore(conn), TableStore)

    def test_memory_store_satisfies_protocol(self) -> None:
        """MemoryStore satisfies the TableStore protocol."""
        assert isinstance(MemoryStore(), TableStore)


class TestQuoteIdentifier:
    def test_reserved_word(self) -> None:
        """Reserved words are quoted."""
        assert quote_identifier("order") == '"order"'

    def test_embedded_quote(self) -> None:
        """Embedded double quotes are doubled."""
        assert quote_identifier('a"b') == '"a""b"'


class TestSqliteStore:
    """Tests for SqliteStore."""

    def test_create_insert_read(self, conn: sqlite3.Connection) -> None:
        """Rows inserted through the store read back as dicts."""
        store = SqliteStore(conn)
        store.create_table("page", [Column("id", "INTEGER"), Column("content", "TEXT")])
        store.insert_rows("page", ["id", "content"], [{"id": 1, "content": "a"}])

        assert store.has_table("page")
        assert store.read_rows("page") == [{"id": 1, "content": "a"}]

    def test_columns_report_types(self, conn: sqlite3.Connection) -> None:
        """Declared types are reported; untyped columns give an empty string."""
        conn.execute("CREATE TABLE t (id INTEGER, note)")
        assert SqliteStore(conn).columns("t") == [Column("id", "INTEGER"), Column("note", "")]

    def test_create_table_replaces_existing(self, conn: sqlite3.Connection) -> None:
        """Creating a table drops any previous definition and rows."""
        store = SqliteStore(conn)
        store.create_table("t", [Column("a", "TEXT")])
        store.insert_rows("t", ["a"], [{"a": "x"}])
        store.create_table("t", [Column("b", "TEXT")])

        assert store.columns("t") == [Column("b", "TEXT")]
        assert store.read_rows("t") == []

    def test_add_column_defaults_to_text(self, conn: sqlite3.Connection) -> None:
        """An untyped added column is declared TEXT."""
        store = SqliteStore(conn)
        store.create_table("t", [Column("id", "INTEGER")])
        store.add_column("t", Column("footnote"))
        assert store.columns("t")[-1] == Column("footnote", "TEXT")

    def test_reserved_column_names(self, conn: sqlite3.Connection) -> None:
        """Columns named after SQL keywords work end to end."""
        store = SqliteStore(conn)
        store.create_table("category", [Column("id", "INTEGER"), Column("order", "INTEGER")])
        store.insert_rows("category", ["id", "order"], [{"id": 1, "order": 4}])
        assert store.read_rows("category") == [{"id": 1, "order": 4}]

    def test_missing_table_reads_empty(self, conn: sqlite3.Connection) -> None:
        """Reading an absent table returns no rows."""
        store = SqliteStore(conn)
        assert not store.has_table("title")
        assert store.read_rows("title") == []

    def test_transaction_rolls_back_on_error(self, conn: sqlite3.Connection) -> None:
        """Rows inserted inside a failed transaction are discarded."""
        store = SqliteStore(conn)
        store.create_table("t", [Column("id", "INTEGER")])
        conn.commit()

        with pytest.raises(RuntimeError), store.transaction():
            store.insert_rows("t", ["id"], [{"id": 1}])
            raise RuntimeError("boom")

        assert store.read_rows("t") == []


class TestMemoryStore:
    """Tests for MemoryStore."""

    def test_columns_inferred_from_rows(self) -> None:
        """Columns are the union of row keys in first-seen order."""
        store = MemoryStore({"page": [{"id": 1, "content": "a"}, {"id": 2, "extra": 1}]})
        assert [c.name for c in store.columns("page")] == ["id", "content", "extra"]

    def test_insert_fills_missing_columns(self) -> None:
        """Inserted rows carry every table column, None where not provided."""
        store = MemoryStore()
        store.create_table("t", [Column("id"), Column("a"), Column("b")])
        store.insert_rows("t", ["id", "a"], [{"id": 1, "a": "x", "b": "ignored"}])
        assert store.read_rows("t") == [{"id": 1, "a": "x", "b": None}]

    def test_insert_unknown_column_raises(self) -> None:
        """Inserting into a column the table lacks is an error."""
        store = MemoryStore()
        store.create_table("t", [Column("id")])
        with pytest.raises(KeyError, match="no column"):
            store.insert_rows("t", ["id", "nope"], [{"id": 1}])

    def test_add_column_extends_existing_rows(self) -> None:
        """Existing rows gain the new column as None."""
        store = MemoryStore({"t": [{"id": 1}]})
        store.add_column("t", Column("note"))
        assert store.read_rows("t") == [{"id": 1, "note": None}]
        assert store.columns("t")[-1] == Column("note", "TEXT")

    def test_read_rows_returns_copies(self) -> None:
        """Mutating returned rows does not change the store."""
        store = MemoryStore({"t": [{"id": 1}]})
        store.read_rows("t")[0]["id"] = 99
        assert store.read_rows("t") == [{"id": 1}]
