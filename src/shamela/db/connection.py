# ABOUTME: SQLite connection management for downloaded Shamela databases and merge targets.
# ABOUTME: Opens sources read-only, creates scratch targets, and closes handles on every path.

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)


class SourceUnavailableError(Exception):
    """Raised when a source or patch database cannot be opened or read."""


def open_source(path: Path) -> sqlite3.Connection:
    """Open a downloaded database read-only.

    The file must exist and be a readable SQLite database; the check runs a
    cheap query against ``sqlite_master`` so a truncated or non-SQLite file
    fails here rather than halfway through a merge.

    Raises:
        SourceUnavailableError: If the file is missing or not a SQLite database.
    """
    if not path.is_file():
        raise SourceUnavailableError(f"Database not found: {path}")

    try:
        conn = sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True)
    except sqlite3.Error as exc:
        raise SourceUnavailableError(f"Cannot open database {path}: {exc}") from exc

    try:
        conn.execute("SELECT name FROM sqlite_master LIMIT 1").fetchall()
    except sqlite3.DatabaseError as exc:
        conn.close()
        raise SourceUnavailableError(f"Not a readable SQLite database: {path}: {exc}") from exc

    return conn


def open_target(path: Path | None = None) -> sqlite3.Connection:
    """Create the database that merged tables are written into.

    Defaults to an in-memory database. When a path is given, any existing file
    there is replaced so the result never mixes with stale tables.
    """
    if path is None:
        return sqlite3.connect(":memory:")

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        path.unlink()
    return sqlite3.connect(str(path))


@contextmanager
def source_database(path: Path) -> Iterator[sqlite3.Connection]:
    """Context manager around :func:`open_source` that always closes."""
    conn = open_source(path)
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def optional_source_database(path: Path | None) -> Iterator[sqlite3.Connection | None]:
    """Like :func:`source_database`, yielding None when no path is given."""
    if path is None:
        yield None
        return
    with source_database(path) as conn:
        yield conn


@contextmanager
def target_database(path: Path | None = None) -> Iterator[sqlite3.Connection]:
    """Context manager around :func:`open_target` that always closes.

    With a path, the database is built in a ``.partial`` file beside it and
    moved into place only when the block completes. On error the partial file
    is removed and any existing file at ``path`` is left as it was.
    """
    if path is None:
        conn = open_target()
        try:
            yield conn
        finally:
            conn.close()
        return

    partial = path.with_name(f".{path.name}.partial")
    conn = open_target(partial)
    try:
        yield conn
        conn.commit()
    except BaseException:
        conn.close()
        partial.unlink(missing_ok=True)
        logger.debug("Discarded partial database %s", partial)
        raise
    conn.close()
    partial.replace(path)
