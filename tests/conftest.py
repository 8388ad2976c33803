# ABOUTME: Shared pytest fixtures for Shamela tests.
# ABOUTME: Builds book, patch, master, narrator and roots SQLite databases and zip payloads.

import io
import sqlite3
import zipfile
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

TableSpec = tuple[Sequence[str], Sequence[Sequence[Any]]]
SqliteFactory = Callable[[Path, dict[str, TableSpec]], Path]

PAGE_COLUMNS = ("id INTEGER", "content TEXT", "part TEXT", "page TEXT", "number TEXT",
                "services TEXT", "is_deleted TEXT")
TITLE_COLUMNS = ("id INTEGER", "content TEXT", "page INTEGER", "parent INTEGER", "is_deleted TEXT")


def build_sqlite(path: Path, tables: dict[str, TableSpec]) -> Path:
    """Create a SQLite file with the given ``{table: (column defs, rows)}``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    try:
        for table, (columns, rows) in tables.items():
            conn.execute(f'CREATE TABLE "{table}" ({", ".join(columns)})')
            if rows:
                placeholders = ", ".join("?" for _ in columns)
                conn.executemany(f'INSERT INTO "{table}" VALUES ({placeholders})', rows)
        conn.commit()
    finally:
        conn.close()
    return path


def zip_files(files: dict[str, Path]) -> bytes:
    """Zip ``{member name: file}`` into an in-memory archive."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, path in files.items():
            archive.write(path, arcname=name)
    return buffer.getvalue()


@pytest.fixture
def sqlite_factory() -> SqliteFactory:
    """Factory building SQLite files from table specs."""
    return build_sqlite


@pytest.fixture
def base_book_db(tmp_path: Path) -> Path:
    """A base book release: three pages and two titles."""
    return build_sqlite(
        tmp_path / "base" / "book.db",
        {
            "page": (
                PAGE_COLUMNS,
                [
                    (1, "base one", "1", "10", "100", None, "0"),
                    (2, "base two", "1", "11", "101", None, "0"),
                    (3, "base three", "1", "12", "102", None, "0"),
                ],
            ),
            "title": (
                TITLE_COLUMNS,
                [
                    (1, "Chapter One", 1, 0, "0"),
                    (2, "Section", 2, 1, "0"),
                ],
            ),
        },
    )


@pytest.fixture
def patch_book_db(tmp_path: Path) -> Path:
    """A patch release: deletes page 1, rewrites page 2 content, adds page 4 and a column."""
    return build_sqlite(
        tmp_path / "patch" / "patch.db",
        {
            "page": (
                PAGE_COLUMNS + ("footnote TEXT",),
                [
                    (1, "#", "#", "#", "#", "#", "1", "#"),
                    (2, "patched two", "#", "#", "#", "#", "0", "note"),
                    (4, "new four", "2", "1", "103", None, "0", None),
                ],
            ),
            "title": (
                TITLE_COLUMNS,
                [(3, "Chapter Two", 4, 0, "0")],
            ),
        },
    )


@pytest.fixture
def master_sources(tmp_path: Path) -> dict[str, Path]:
    """The three master catalog source databases as extracted from the archive."""
    root = tmp_path / "master"
    author = build_sqlite(
        root / "author.sqlite",
        {
            "author": (
                ("id INTEGER", "name TEXT", "biography TEXT", "death_number INTEGER",
                 "death_text TEXT", "is_deleted TEXT"),
                [
                    (1, "Al-Bukhari", "Compiler of the Sahih", 256, "256", "0"),
                    (2, "Unknown Scholar", None, 99999, "", "0"),
                    (3, "Removed", None, 100, "", "1"),
                ],
            ),
        },
    )
    book = build_sqlite(
        root / "book.sqlite",
        {
            "book": (
                ("id INTEGER", "name TEXT", "category INTEGER", "type INTEGER", "date INTEGER",
                 "author TEXT", "printed INTEGER", "major_release INTEGER",
                 "minor_release INTEGER", "bibliography TEXT", "hint TEXT", "pdf_links TEXT",
                 "metadata TEXT", "is_deleted TEXT"),
                [
                    (10, "Sahih", 5, 1, 256, "1", 1, 3, 0, "Bib", "", None,
                     '{"date": "08121431"}', "0"),
                    (11, "Anonymous Work", 5, 1, 99999, "1, 2", 3, 1, 2, "", "a hint",
                     '{"files": ["vol1.pdf|1", "vol2.pdf"], "size": 2048, "root": "sahih"}',
                     "{}", "0"),
                    (12, "Withdrawn", 5, 1, 300, "2", 1, 1, 0, "", "", None, "{}", "1"),
                ],
            ),
        },
    )
    category = build_sqlite(
        root / "category.sqlite",
        {
            "category": (
                ("id INTEGER", "name TEXT", '"order" INTEGER', "is_deleted TEXT"),
                [(5, "Hadith", 1, "0"), (6, "Old", 2, "1")],
            ),
        },
    )
    return {"author": author, "book": book, "category": category}


@pytest.fixture
def master_zip(master_sources: dict[str, Path]) -> bytes:
    """Master catalog archive as served by the download host."""
    return zip_files({f"{name}.sqlite": path for name, path in master_sources.items()})


@pytest.fixture
def book_zip(base_book_db: Path) -> bytes:
    return zip_files({"1234.db": base_book_db})


@pytest.fixture
def patch_zip(patch_book_db: Path) -> bytes:
    return zip_files({"1234_patch.db": patch_book_db})


@pytest.fixture
def narrator_db(tmp_path: Path) -> Path:
    """Narrator service database with legacy-encoded blobs."""
    return build_sqlite(
        tmp_path / "S1.db",
        {
            "b": (
                ("i INTEGER", "s BLOB", "l BLOB", "d INTEGER", "a BLOB", "b BLOB"),
                [
                    # "الله" / "بن" / biography with a citation id / metadata label line
                    (2, bytes([0x74, 0x43]), bytes([0x74, 0x43]), None, None, None),
                    (1, bytes([0x68, 0x45, 0x45, 0x47]), bytes([0x68, 0x45, 0x45, 0x47, 0x40, 0x74, 0x43]),
                     256, bytes([0x74, 0x40, 0x00]), bytes([0x94, 0x6B, 0x74, 0x43])),
                ],
            ),
        },
    )


@pytest.fixture
def roots_db(tmp_path: Path) -> Path:
    """Roots service database with Windows-1256 blobs."""
    return build_sqlite(
        tmp_path / "S2.db",
        {
            "roots": (
                ("token BLOB", "root BLOB"),
                [
                    ("كتاب".encode("cp1256"), "كتب".encode("cp1256")),
                    ("آتى".encode("cp1256"), "ءتي,ءتو, ءتت".encode("cp1256")),
                    ("قال".encode("cp1256"), "قول".encode("cp1256")),
                ],
            ),
        },
    )
