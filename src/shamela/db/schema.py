# ABOUTME: Table definitions for book and master databases produced by this package.
# ABOUTME: Default book tables are replaced by the source schema when it is available.

from shamela.db.store import Column

PAGE_TABLE = "page"
TITLE_TABLE = "title"

AUTHOR_TABLE = "author"
BOOK_TABLE = "book"
CATEGORY_TABLE = "category"

# Used when a base database lacks a sub-table, so output files always carry both.
BOOK_DEFAULT_COLUMNS: dict[str, list[Column]] = {
    PAGE_TABLE: [
        Column("id", "INTEGER"),
        Column("content", "TEXT"),
        Column("part", "TEXT"),
        Column("page", "TEXT"),
        Column("number", "TEXT"),
        Column("services", "TEXT"),
        Column("is_deleted", "TEXT"),
    ],
    TITLE_TABLE: [
        Column("id", "INTEGER"),
        Column("content", "TEXT"),
        Column("page", "INTEGER"),
        Column("parent", "INTEGER"),
        Column("is_deleted", "TEXT"),
    ],
}

# Master catalog as written to a .db/.sqlite output file, after projection.
MASTER_SCHEMA = """
CREATE TABLE authors (
    id        INTEGER PRIMARY KEY,
    name      TEXT,
    biography TEXT,
    death     INTEGER
);

CREATE TABLE books (
    id           INTEGER PRIMARY KEY,
    name         TEXT,
    category     INTEGER,
    type         INTEGER,
    date         INTEGER,
    author       TEXT,
    printed      INTEGER,
    major        INTEGER,
    minor        INTEGER,
    bibliography TEXT,
    hint         TEXT,
    pdf_links    TEXT,
    metadata     TEXT
);

CREATE TABLE categories (
    id   INTEGER PRIMARY KEY,
    name TEXT
);
"""
