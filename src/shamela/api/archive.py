# ABOUTME: Extracts the zip archives the Shamela download host serves.
# ABOUTME: Writes members to disk and locates the SQLite databases among them.

import io
import logging
import zipfile
from collections.abc import Iterable
from pathlib import Path

from shamela.api.http import HttpClient, redact_url

logger = logging.getLogger(__name__)

SQLITE_SUFFIXES = (".sqlite", ".db")


class ArchiveError(Exception):
    """Raised when a downloaded payload is not a usable zip archive."""


def extract_archive(payload: bytes, output_dir: Path) -> list[Path]:
    """Extract every file member of a zip payload into ``output_dir``.

    Returns:
        Paths of the extracted files, in archive order. Directory entries are skipped.

    Raises:
        ArchiveError: If the payload is not a zip archive or a member would
            escape ``output_dir``.
    """
    root = output_dir.resolve()
    root.mkdir(parents=True, exist_ok=True)
    try:
        archive = zipfile.ZipFile(io.BytesIO(payload))
    except zipfile.BadZipFile as exc:
        raise ArchiveError(f"Payload is not a zip archive: {exc}") from exc

    extracted: list[Path] = []
    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            dest = (root / info.filename).resolve()
            if not dest.is_relative_to(root):
                raise ArchiveError(f"Archive member escapes output directory: {info.filename}")
            dest.parent.mkdir(parents=True, exist_ok=True)
            with archive.open(info) as src, dest.open("wb") as out:
                out.write(src.read())
            extracted.append(dest)
    return extracted


def download_and_extract(http: HttpClient, url: str, output_dir: Path) -> list[Path]:
    """Download a zip archive and extract it into ``output_dir``."""
    logger.info("Downloading %s", redact_url(url))
    paths = extract_archive(http.get_bytes(url), output_dir)
    logger.debug("Extracted %d file(s) into %s", len(paths), output_dir)
    return paths


def is_sqlite_file(path: Path) -> bool:
    return path.suffix.lower() in SQLITE_SUFFIXES


def find_sqlite_members(paths: Iterable[Path]) -> list[Path]:
    """Filter extracted paths down to SQLite databases, preserving order."""
    return [p for p in paths if is_sqlite_file(p)]


def first_sqlite_member(paths: Iterable[Path]) -> Path:
    """Return the first SQLite database among extracted paths.

    Raises:
        ArchiveError: If the archive held no database.
    """
    members = find_sqlite_members(paths)
    if not members:
        raise ArchiveError("Archive contains no SQLite database")
    return members[0]
