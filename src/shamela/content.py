# ABOUTME: Helpers for working with Shamela page markup once a book has been assembled.
# ABOUTME: Splits pages into titled lines, separates footnotes, and strips or converts tags.

import re
from collections.abc import Mapping
from dataclasses import dataclass

FOOTNOTE_MARKER = "_________"

# Pattern -> replacement, applied in order by sanitize_page_content.
DEFAULT_MAPPING_RULES: Mapping[str, str] = {
    "[\u200e\u200f\u202a-\u202e]": "",
    "\u00a0": " ",
    "\r\n?": "\n",
}

_PUNCT_ONLY_RE = re.compile("^[)\\]\u00bb\"\u201d'\u2019.,?!:\u061b\u060c\u061f\u06d4\u2026]+$")
_SPAN_RE = re.compile(r"<span[^>]*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_TAG_NAME_RE = re.compile(r"^</?\s*([a-zA-Z0-9:-]+)")
_PAGE_MARKER_RE = re.compile("(?: |\r){0,2}\u2997[\u0660-\u0669]+\u2998(?: |\r)?")
_ANCHOR_RE = re.compile(r"<a[^>]*>(.*?)</a>", re.DOTALL)
_HADEETH_STRIP_RE = re.compile(r"<hadeeth[^>]*>|</hadeeth>|<hadeeth-\d+>")
_HADEETH_OPEN_RE = re.compile(r"<hadeeth-\d+>", re.IGNORECASE)
_HADEETH_CLOSE_RE = re.compile(r"<\s*/?\s*hadeeth\s*>", re.IGNORECASE)
_TITLE_SPAN_RE = re.compile(r"<span[^>]*data-type=[\"']title[\"'][^>]*>(.*?)</span>", re.IGNORECASE)
_NARRATOR_LINK_RE = re.compile(r"<a[^>]*href=[\"']inr://[^\"']*[\"'][^>]*>(.*?)</a>", re.IGNORECASE)


@dataclass
class Line:
    """One physical line of a page. ``id`` is set when the line is a title."""

    text: str
    id: str | None = None

    def to_dict(self) -> dict[str, str]:
        data = {"text": self.text}
        if self.id:
            data["id"] = self.id
        return data


@dataclass
class _Span:
    is_title: bool
    id: str | None = None


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _attribute(tag: str, name: str) -> str | None:
    match = re.search(rf"{name}\s*=\s*(\"([^\"]*)\"|'([^']*)'|([^\s>]+))", tag, re.IGNORECASE)
    if not match:
        return None
    return next(g for g in match.groups()[1:] if g is not None)


def _merge_dangling_punctuation(lines: list[Line]) -> list[Line]:
    out: list[Line] = []
    for line in lines:
        if out and _PUNCT_ONLY_RE.match(line.text):
            out[-1].text += line.text
        else:
            out.append(line)
    return out


class _LineBuilder:
    def __init__(self) -> None:
        self.lines: list[Line] = []
        self.spans: list[_Span] = []
        self.text = ""
        self.current_id: str | None = None

    def active_title_id(self) -> str | None:
        for span in reversed(self.spans):
            if span.is_title and span.id:
                return span.id
        return None

    def flush(self) -> None:
        text = self.text.strip()
        if text:
            self.lines.append(Line(text=text, id=self.current_id))
        self.text = ""

    def add_text(self, raw: str) -> None:
        for i, part in enumerate(raw.split("\n")):
            if i > 0:
                self.flush()
                # Still inside a title span: the next line keeps its id.
                self.current_id = self.active_title_id()
            self.text += part

    def open_span(self, tag: str) -> None:
        is_title = _attribute(tag, "data-type") == "title"
        span_id = None
        if is_title:
            span_id = re.sub(r"^toc-", "", _attribute(tag, "id") or "")
        self.spans.append(_Span(is_title=is_title, id=span_id))
        # First title span on a physical line wins.
        if is_title and span_id and not self.current_id:
            self.current_id = span_id

    def close_span(self) -> None:
        if self.spans:
            self.spans.pop()


def parse_content_robust(content: str) -> list[Line]:
    """Split page markup into lines, tagging lines that sit inside title spans.

    Title spans look like ``<span data-type="title" id=toc-66>``; the ``toc-``
    prefix is dropped from the id. Closing a span does not end the line, and
    punctuation-only fragments are appended to the previous line.
    """
    content = _normalize_newlines(content)

    if not _SPAN_RE.search(content):
        lines = [Line(text=s.strip()) for s in content.split("\n") if s.strip()]
        return _merge_dangling_punctuation(lines)

    builder = _LineBuilder()
    last = 0
    for match in _TAG_RE.finditer(content):
        builder.add_text(content[last : match.start()])
        last = match.end()

        tag = match.group(0)
        name_match = _TAG_NAME_RE.match(tag)
        if not name_match or name_match.group(1).lower() != "span":
            continue
        if tag.startswith("</"):
            builder.close_span()
        else:
            builder.open_span(tag)
    builder.add_text(content[last:])
    builder.flush()

    return [line for line in _merge_dangling_punctuation(builder.lines) if line.text]


def sanitize_page_content(text: str, rules: Mapping[str, str] = DEFAULT_MAPPING_RULES) -> str:
    """Apply regex replacement rules to page text, in order."""
    for pattern, replacement in rules.items():
        text = re.sub(pattern, replacement, text)
    return text


def split_page_body_from_footer(content: str, marker: str = FOOTNOTE_MARKER) -> tuple[str, str]:
    """Split a page into ``(body, footnote)`` at the first footnote marker."""
    body, found, footnote = content.partition(marker)
    return (body, footnote) if found else (content, "")


def remove_arabic_numeric_page_markers(text: str) -> str:
    """Replace ``⦗٣⦘``-style page markers and their surrounding spaces with a single space."""
    return _PAGE_MARKER_RE.sub(" ", text)


def remove_tags_except_span(content: str) -> str:
    """Unwrap anchors and drop hadeeth tags, leaving span markup intact."""
    content = _ANCHOR_RE.sub(r"\1", content)
    return _HADEETH_STRIP_RE.sub("", content)


def normalize_html(html: str) -> str:
    """Rewrite hadeeth tags as ``<span class="hadeeth">`` so they can be styled."""
    html = _HADEETH_OPEN_RE.sub('<span class="hadeeth">', html)
    return _HADEETH_CLOSE_RE.sub("</span>", html)


def html_to_markdown(html: str) -> str:
    """Turn title spans into ``##`` headings, unwrap narrator links, and strip other tags."""
    html = _TITLE_SPAN_RE.sub(r"## \1", html)
    html = _NARRATOR_LINK_RE.sub(r"\1", html)
    return _TAG_RE.sub("", html)
