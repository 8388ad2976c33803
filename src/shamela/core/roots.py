# ABOUTME: Exports token-to-root mappings from the Windows-1256 Shamela roots database.
# ABOUTME: Decodes each row, builds a lookup map, and summarizes the mapping set.

import logging
from dataclasses import dataclass, field
from pathlib import Path

from shamela.codec.cp1256 import decode_codepage_text, parse_multi_value
from shamela.db.connection import source_database

logger = logging.getLogger(__name__)

ROOTS_QUERY = "SELECT token, root FROM roots"


@dataclass
class RootMapping:
    """An inflected token and the root form(s) it derives from."""

    token: str
    roots: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {"token": self.token, "roots": self.roots}


@dataclass
class RootStats:
    total_tokens: int = 0
    unique_roots: int = 0
    multi_root_tokens: int = 0
    max_roots_per_token: int = 0


def transform_root_row(token: bytes | None, root: bytes | None) -> RootMapping:
    return RootMapping(
        token=decode_codepage_text(token),
        roots=parse_multi_value(decode_codepage_text(root)),
    )


def read_roots(db_path: Path) -> list[RootMapping]:
    """Read and decode every row of the ``roots`` table.

    Raises:
        SourceUnavailableError: If the database cannot be opened.
    """
    with source_database(db_path) as conn:
        mappings = [transform_root_row(token, root) for token, root in conn.execute(ROOTS_QUERY)]
    logger.info("Read %d token mapping(s) from %s", len(mappings), db_path)
    return mappings


def create_root_map(mappings: list[RootMapping]) -> dict[str, list[str]]:
    """Collapse mappings into ``{token: roots}``. Later duplicates of a token win."""
    return {m.token: m.roots for m in mappings}


def calculate_stats(mappings: list[RootMapping]) -> RootStats:
    unique: set[str] = set()
    stats = RootStats(total_tokens=len(mappings))
    for m in mappings:
        if len(m.roots) > 1:
            stats.multi_root_tokens += 1
        stats.max_roots_per_token = max(stats.max_roots_per_token, len(m.roots))
        unique.update(m.roots)
    stats.unique_roots = len(unique)
    return stats
