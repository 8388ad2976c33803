# ABOUTME: Public data structures for assembled Shamela books and the master catalog.
# ABOUTME: Entities serialize to dicts that omit optional fields which were never set.

from dataclasses import dataclass, field
from typing import Any


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None."""
    return {key: value for key, value in data.items() if value is not None}


@dataclass
class Author:
    """An author from the master catalog. ``death`` is the Hijri death year, if known."""

    id: int
    name: str
    biography: str | None = None
    death: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {"id": self.id, "name": self.name, "biography": self.biography, "death": self.death}
        )


@dataclass
class Category:
    id: int
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass
class PdfFile:
    """One entry of a book's ``pdf_links.files`` list, parsed from ``"name|id"``."""

    file: str
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"file": self.file, "id": self.id})


@dataclass
class PdfLinks:
    """Structured form of a book's ``pdf_links`` cell.

    Keys the catalog does not document are preserved in ``extra`` so nothing
    is lost when the vendor adds fields.
    """

    files: list[PdfFile] | None = None
    root: str | None = None
    alias: int | None = None
    cover: int | None = None
    cover_alias: int | None = None
    size: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = _compact(
            {
                "alias": self.alias,
                "cover": self.cover,
                "cover_alias": self.cover_alias,
                "root": self.root,
                "size": self.size,
                **self.extra,
            }
        )
        if self.files is not None:
            data["files"] = [f.to_dict() for f in self.files]
        return data


@dataclass
class Book:
    """A book entry from the master catalog.

    ``author`` is a single id or a list of ids when the catalog lists co-authors
    in one cell. ``date`` is omitted when the catalog marks it unknown.
    """

    id: int
    name: str
    category: int | None
    type: int | None
    author: int | list[int] | None
    printed: int | None
    major: int | None
    bibliography: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    date: int | None = None
    hint: str | None = None
    minor: int | None = None
    pdf_links: PdfLinks | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "type": self.type,
            "author": self.author,
            "printed": self.printed,
            "major": self.major,
            "bibliography": self.bibliography,
            "metadata": self.metadata,
        }
        if self.date is not None:
            data["date"] = self.date
        if self.hint:
            data["hint"] = self.hint
        if self.minor:
            data["minor"] = self.minor
        if self.pdf_links is not None:
            data["pdf_links"] = self.pdf_links.to_dict()
        return data


@dataclass
class Page:
    """A page of book content. ``content`` is the raw (still marked-up) text."""

    id: int
    content: str
    part: str | None = None
    page: str | None = None
    number: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "id": self.id,
                "content": self.content,
                "part": self.part,
                "page": self.page,
                "number": self.number,
            }
        )


@dataclass
class Title:
    """A heading in the book's table of contents, pointing at a page id."""

    id: int
    content: str
    page: int
    parent: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {"id": self.id, "content": self.content, "page": self.page, "parent": self.parent}
        )


@dataclass
class BookData:
    pages: list[Page] = field(default_factory=list)
    titles: list[Title] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "pages": [p.to_dict() for p in self.pages],
            "titles": [t.to_dict() for t in self.titles],
        }


@dataclass
class MasterData:
    authors: list[Author] = field(default_factory=list)
    books: list[Book] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    version: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "authors": [a.to_dict() for a in self.authors],
            "books": [b.to_dict() for b in self.books],
            "categories": [c.to_dict() for c in self.categories],
        }
        if self.version is not None:
            data["version"] = self.version
        return data


@dataclass
class BookMetadataResponse:
    """Download locations for a book: the full release and an optional patch."""

    major_release: int
    major_release_url: str
    minor_release: int | None = None
    minor_release_url: str | None = None


@dataclass
class MasterMetadataResponse:
    url: str
    version: int
