# ABOUTME: Renders an assembled Shamela book as a right-to-left EPUB using ebooklib.
# ABOUTME: One XHTML chapter per page, with a table of contents built from top-level titles.

import html
import logging
from pathlib import Path

from ebooklib import epub

from shamela.content import parse_content_robust, split_page_body_from_footer
from shamela.types import BookData, Page

logger = logging.getLogger(__name__)

_STYLE = """
body { direction: rtl; text-align: right; }
h2 { font-size: 1.2em; }
.footnote { font-size: 0.85em; border-top: 1px solid #999; margin-top: 1em; }
"""


class EpubWriteError(Exception):
    """Raised when a book cannot be rendered or written as EPUB."""


def _chapter_name(page_id: int) -> str:
    return f"page_{page_id}.xhtml"


def _render_page(page: Page) -> str:
    """Turn page markup into XHTML body content. Title lines become anchored headings."""
    body, footnote = split_page_body_from_footer(page.content)
    parts: list[str] = []
    for line in parse_content_robust(body):
        text = html.escape(line.text)
        if line.id:
            parts.append(f'<h2 id="toc-{html.escape(line.id)}">{text}</h2>')
        else:
            parts.append(f"<p>{text}</p>")

    notes = [line.text for line in parse_content_robust(footnote)]
    if notes:
        parts.append('<div class="footnote">')
        parts.extend(f"<p>{html.escape(note)}</p>" for note in notes)
        parts.append("</div>")
    # ebooklib cannot serialize an empty chapter body.
    return "\n".join(parts) or "<p></p>"


def _page_label(page: Page) -> str:
    if page.part and page.page:
        return f"{page.part}/{page.page}"
    return page.page or str(page.id)


def write_book_epub(
    book: BookData,
    path: Path,
    *,
    title: str,
    language: str = "ar",
    author: str | None = None,
    identifier: str | None = None,
) -> Path:
    """Write ``book`` as an EPUB file.

    Args:
        book: Assembled pages and titles.
        path: Destination ``.epub`` path; parent directories are created.
        title: Book title for the package metadata.
        language: Language code, Arabic by default.
        author: Optional creator name.
        identifier: Optional unique identifier; defaults to one derived from the title.

    Raises:
        EpubWriteError: If ebooklib fails to write the file.
    """
    ebook = epub.EpubBook()
    ebook.set_identifier(identifier or f"shamela-{title}")
    ebook.set_title(title)
    ebook.set_language(language)
    ebook.set_direction("rtl")
    if author:
        ebook.add_author(author)

    css = epub.EpubItem(
        uid="style", file_name="style/main.css", media_type="text/css", content=_STYLE
    )
    ebook.add_item(css)

    chapters: dict[int, epub.EpubHtml] = {}
    for page in book.pages:
        chapter = epub.EpubHtml(
            title=_page_label(page),
            file_name=_chapter_name(page.id),
            lang=language,
            direction="rtl",
        )
        chapter.content = _render_page(page)
        chapter.add_item(css)
        ebook.add_item(chapter)
        chapters[page.id] = chapter

    toc: list[epub.Link] = []
    for t in book.titles:
        if t.parent is not None or t.page not in chapters:
            continue
        toc.append(epub.Link(f"{_chapter_name(t.page)}#toc-{t.id}", t.content, f"title-{t.id}"))
    if not toc and chapters:
        first = next(iter(chapters.values()))
        toc.append(epub.Link(first.file_name, title, "start"))

    ebook.toc = toc
    ebook.spine = ["nav", *chapters.values()]
    ebook.add_item(epub.EpubNcx())
    ebook.add_item(epub.EpubNav())

    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        epub.write_epub(str(path), ebook)
    except Exception as exc:
        raise EpubWriteError(f"Failed to write EPUB: {path}: {exc}") from exc

    logger.info("Wrote %d page(s) and %d toc entries to %s", len(chapters), len(toc), path)
    return path
