# ABOUTME: Converts merged database rows into the public Page/Title/Author/Book/Category types.
# ABOUTME: Parses packed cells (author id lists, pdf_links, metadata JSON) and unknown-date markers.

import json
import re
from typing import Any

from shamela.db.store import Row
from shamela.types import Author, Book, Category, Page, PdfFile, PdfLinks, Title

# Vendor marker for an unknown year in date/death cells.
UNKNOWN_VALUE_PLACEHOLDER = "99999"

_AUTHOR_SPLIT_RE = re.compile(r"\s*,\s*")
_INT_RE = re.compile(r"^-?\d+$")
_PDF_LINK_INT_KEYS = ("alias", "cover", "cover_alias", "size")


class MalformedCellError(ValueError):
    """Raised when a cell cannot be parsed into its expected shape."""


def _to_int(value: Any, column: str) -> int | None:
    """Coerce an integer-like cell. Empty cells give None."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INT_RE.match(value.strip()):
        return int(value.strip())
    raise MalformedCellError(f"Expected an integer in column {column!r}, got {value!r}")


def _label(value: Any) -> str | None:
    """Page/part/number labels are kept as text; empty and zero mean absent."""
    if value is None or value == "" or value == 0:
        return None
    return str(value)


def _text(value: Any) -> str | None:
    return str(value) if value else None


def _known_year(value: Any, column: str) -> int | None:
    """Year cell with the unknown marker turned into None."""
    if value is not None and str(value).strip() == UNKNOWN_VALUE_PLACEHOLDER:
        return None
    return _to_int(value, column)


def parse_author(value: Any) -> int | list[int] | None:
    """Parse the book.author cell.

    The cell holds one id (``"513"``) or several joined by commas with or
    without spaces (``"2747, 3147"``). One id gives an int, several a list.

    Raises:
        MalformedCellError: If any part is not an integer.
    """
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value).strip()
    if not text:
        return None

    ids: list[int] = []
    for part in _AUTHOR_SPLIT_RE.split(text):
        if not _INT_RE.match(part):
            raise MalformedCellError(f"Invalid author id list: {value!r}")
        ids.append(int(part))
    return ids if len(ids) > 1 else ids[0]


def _parse_pdf_file(entry: Any) -> PdfFile:
    if isinstance(entry, dict) and "file" in entry:
        file_id = entry.get("id")
        return PdfFile(file=str(entry["file"]), id=str(file_id) if file_id else None)
    if not isinstance(entry, str):
        raise MalformedCellError(f"Invalid pdf_links file entry: {entry!r}")
    file, _, file_id = entry.partition("|")
    return PdfFile(file=file, id=file_id or None)


def parse_pdf_links(value: Any) -> PdfLinks | None:
    """Parse the JSON pdf_links cell, splitting ``"name|id"`` file entries.

    Raises:
        MalformedCellError: If the cell is not a JSON object.
    """
    if not value:
        return None
    try:
        data = json.loads(value)
    except (TypeError, json.JSONDecodeError) as exc:
        raise MalformedCellError(f"Invalid pdf_links JSON: {value!r}") from exc
    if not isinstance(data, dict):
        raise MalformedCellError(f"pdf_links must be a JSON object, got {value!r}")

    links = PdfLinks()
    if "files" in data:
        files = data.pop("files")
        if not isinstance(files, list):
            raise MalformedCellError(f"pdf_links.files must be a list, got {files!r}")
        links.files = [_parse_pdf_file(entry) for entry in files]
    if "root" in data:
        root = data.pop("root")
        links.root = str(root) if root is not None else None
    for key in _PDF_LINK_INT_KEYS:
        if key in data:
            setattr(links, key, _to_int(data.pop(key), f"pdf_links.{key}"))
    links.extra = data
    return links


def parse_metadata(value: Any) -> dict[str, Any]:
    """Parse the free-form JSON metadata cell. Empty cells give an empty dict.

    Raises:
        MalformedCellError: If the cell is not a JSON object.
    """
    if not value:
        return {}
    try:
        data = json.loads(value)
    except (TypeError, json.JSONDecodeError) as exc:
        raise MalformedCellError(f"Invalid metadata JSON: {value!r}") from exc
    if not isinstance(data, dict):
        raise MalformedCellError(f"metadata must be a JSON object, got {value!r}")
    return data


def row_to_page(row: Row) -> Page:
    return Page(
        id=row["id"],
        content=row.get("content") or "",
        part=_label(row.get("part")),
        page=_label(row.get("page")),
        number=_label(row.get("number")),
    )


def row_to_title(row: Row) -> Title:
    return Title(
        id=row["id"],
        content=row.get("content") or "",
        page=_to_int(row.get("page"), "page") or 0,
        parent=_to_int(row.get("parent"), "parent") or None,
    )


def row_to_author(row: Row) -> Author:
    """Convert an author row. Accepts the vendor ``death_number`` column or ``death``."""
    death = row["death_number"] if "death_number" in row else row.get("death")
    return Author(
        id=row["id"],
        name=row.get("name") or "",
        biography=_text(row.get("biography")),
        death=_known_year(death, "death_number"),
    )


def row_to_book(row: Row) -> Book:
    """Convert a book row from the vendor table (``major_release``) or ours (``major``)."""
    major = row["major_release"] if "major_release" in row else row.get("major")
    minor = row["minor_release"] if "minor_release" in row else row.get("minor")
    return Book(
        id=row["id"],
        name=row.get("name") or "",
        category=_to_int(row.get("category"), "category"),
        type=_to_int(row.get("type"), "type"),
        author=parse_author(row.get("author")),
        printed=_to_int(row.get("printed"), "printed"),
        major=_to_int(major, "major_release"),
        minor=_to_int(minor, "minor_release") or None,
        bibliography=row.get("bibliography"),
        hint=_text(row.get("hint")),
        date=_known_year(row.get("date"), "date"),
        pdf_links=parse_pdf_links(row.get("pdf_links")),
        metadata=parse_metadata(row.get("metadata")),
    )


def row_to_category(row: Row) -> Category:
    return Category(id=row["id"], name=row.get("name") or "")


def book_to_row(book: Book) -> dict[str, Any]:
    """Convert a Book back to a row for the ``books`` output table."""
    author = book.author
    if isinstance(author, list):
        author = ", ".join(str(a) for a in author)
    return {
        "id": book.id,
        "name": book.name,
        "category": book.category,
        "type": book.type,
        "date": book.date,
        "author": str(author) if author is not None else None,
        "printed": book.printed,
        "major": book.major,
        "minor": book.minor,
        "bibliography": book.bibliography,
        "hint": book.hint,
        "pdf_links": _pdf_links_json(book.pdf_links),
        "metadata": json.dumps(book.metadata, ensure_ascii=False),
    }


def _pdf_links_json(links: PdfLinks | None) -> str | None:
    if links is None:
        return None
    data = links.to_dict()
    if links.files is not None:
        data["files"] = [f"{f.file}|{f.id}" if f.id else f.file for f in links.files]
    return json.dumps(data, ensure_ascii=False)
