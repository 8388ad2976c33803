# ABOUTME: Exports narrators from the legacy-encoded Shamela narrator service database.
# ABOUTME: Decodes name, biography and metadata blobs and renders JSON or prefixed plain text.

import logging
import re
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from shamela.codec.legacy import decode_shamela_metadata, decode_shamela_text, has_unmapped_bytes
from shamela.db.connection import source_database

logger = logging.getLogger(__name__)

NARRATOR_QUERY = "SELECT i, s, l, d, a, b FROM b ORDER BY i"

# "(2/ 57)\n 574624" and "(2/ 57)  574624": volume/page citation followed by a reference id.
_ID_ON_NEXT_LINE_RE = re.compile(r"(\(\d+/\s*\d+\))[ \t]*\n[ \t]*\d{5,7}")
_ID_ON_SAME_LINE_RE = re.compile(r"(\(\d+/\s*\d+\))[ \t]+\d{5,7}")
_BLANK_RUN_RE = re.compile(r"\n{3,}")
_EDGE_SPACES_RE = re.compile(r"^ +| +$", re.MULTILINE)


@dataclass
class NarratorRow:
    """Raw narrator row; the vendor schema uses single-letter column names."""

    i: int
    s: bytes | None = None
    l: bytes | None = None  # noqa: E741
    d: int | None = None
    a: bytes | None = None
    b: bytes | None = None


@dataclass
class Narrator:
    id: int
    short_name: str
    long_name: str
    biography: str
    metadata: str
    death_year: int | None = None


def transform_narrator_row(row: NarratorRow) -> Narrator:
    """Decode one narrator row. Names and biography use the text profile, metadata its own."""
    return Narrator(
        id=row.i,
        short_name=decode_shamela_text(row.s),
        long_name=decode_shamela_text(row.l),
        biography=decode_shamela_text(row.a),
        metadata=decode_shamela_metadata(row.b),
        death_year=row.d,
    )


def read_narrators(db_path: Path) -> list[Narrator]:
    """Read and decode every narrator from the service database, ordered by id.

    Raises:
        SourceUnavailableError: If the database cannot be opened.
    """
    with source_database(db_path) as conn:
        rows = [NarratorRow(*row) for row in conn.execute(NARRATOR_QUERY)]
    logger.info("Read %d narrator(s) from %s", len(rows), db_path)
    return [transform_narrator_row(row) for row in rows]


def narrator_to_dict(narrator: Narrator) -> dict[str, Any]:
    """Serialize a narrator, dropping null and empty fields."""
    return {k: v for k, v in asdict(narrator).items() if v is not None and v != ""}


def count_unmapped_narrators(narrators: list[Narrator]) -> dict[str, int]:
    """Count narrators per field whose decoded text still carries ``[xx]`` placeholders."""
    fields = ("short_name", "long_name", "biography", "metadata")
    return {
        field: sum(1 for n in narrators if has_unmapped_bytes(getattr(n, field)))
        for field in fields
    }


def strip_database_ids(text: str) -> str:
    """Remove reference ids that follow ``(vol/ page)`` citations, keeping the citation."""
    text = _ID_ON_NEXT_LINE_RE.sub(r"\1\n", text)
    text = _ID_ON_SAME_LINE_RE.sub(r"\1", text)
    text = _BLANK_RUN_RE.sub("\n\n", text)
    text = _EDGE_SPACES_RE.sub("", text)
    return text.strip()


def format_narrator(narrator: Narrator) -> list[str]:
    """Render a narrator as prefixed lines.

    ``F`` short name (always), ``T`` long name when it differs, ``B`` biography
    and ``P`` metadata when non-empty after id stripping. The death year is
    not written.
    """
    nid = narrator.id
    lines = [f"F{nid} - {narrator.short_name}"]
    if narrator.long_name and narrator.long_name != narrator.short_name:
        lines.append(f"T{nid} - {narrator.long_name}")
    for prefix, text in (("B", narrator.biography), ("P", narrator.metadata)):
        cleaned = strip_database_ids(text) if text else ""
        if cleaned:
            lines.append(f"{prefix}{nid} - {cleaned}")
    return lines


def format_all_narrators(narrators: list[Narrator]) -> str:
    """Render every narrator followed by a blank separator line."""
    out: list[str] = []
    for narrator in narrators:
        out.extend(format_narrator(narrator))
        out.append("")
    return "\n".join(out)
