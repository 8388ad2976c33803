# ABOUTME: Integration tests for EPUB output.
# ABOUTME: Writes assembled books with ebooklib and reads the files back.

from pathlib import Path

from ebooklib import epub

from shamela.db import assemble_book
from shamela.formats.epub import write_book_epub
from shamela.types import BookData, Page, Title


def _read(path: Path) -> epub.EpubBook:
    return epub.read_epub(str(path))


class TestWriteBookEpub:
    """EPUB rendering of assembled books."""

    def test_metadata_and_chapters(self, base_book_db: Path, tmp_path: Path) -> None:
        """Title, language and one chapter per page are written."""
        out = write_book_epub(
            assemble_book(base_book_db), tmp_path / "book.epub", title="Test Book", author="A"
        )

        book = _read(out)
        assert book.get_metadata("DC", "title")[0][0] == "Test Book"
        assert book.get_metadata("DC", "language")[0][0] == "ar"
        for page_id in (1, 2, 3):
            assert book.get_item_with_href(f"page_{page_id}.xhtml") is not None

    def test_title_lines_become_headings(self, tmp_path: Path) -> None:
        """Title spans render as anchored headings and footnotes get their own block."""
        data = BookData(
            pages=[
                Page(
                    id=7,
                    content='<span data-type="title" id=toc-3>باب</span>\rنص_________حاشية',
                )
            ],
            titles=[Title(id=3, content="باب", page=7)],
        )
        out = write_book_epub(data, tmp_path / "titled.epub", title="T")

        content = _read(out).get_item_with_href("page_7.xhtml").get_content().decode("utf-8")
        assert 'id="toc-3"' in content
        assert "باب" in content
        assert 'class="footnote"' in content
        assert "حاشية" in content

    def test_empty_page_is_written(self, tmp_path: Path) -> None:
        """A page with no text still produces a valid chapter."""
        data = BookData(pages=[Page(id=1, content="")])
        out = write_book_epub(data, tmp_path / "empty.epub", title="Empty")
        assert _read(out).get_item_with_href("page_1.xhtml") is not None

    def test_markup_is_escaped(self, tmp_path: Path) -> None:
        """Text that looks like markup is escaped in the chapter body."""
        data = BookData(pages=[Page(id=1, content="a < b & c")])
        out = write_book_epub(data, tmp_path / "escaped.epub", title="Esc")
        content = _read(out).get_item_with_href("page_1.xhtml").get_content().decode("utf-8")
        assert "a &lt; b &amp; c" in content
