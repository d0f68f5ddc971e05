"""Map reconciled chapters onto per-page OCR text and build chapter bodies."""

import re
from pathlib import Path
from typing import NamedTuple

from .dictionary import find_abnormal_words
from .pages import to_physical_page

_PAGE_FILE_RE = re.compile(r"^page-([0-9]+)\.txt$")

_XML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    # numeric form: &apos; is not an HTML 4 entity
    "'": "&#39;",
}
_XML_ESCAPE_RE = re.compile("[&<>\"']")


class AssembledChapter(NamedTuple):
    title: str
    html: str


# ---------------------------------------------------------------------------
# Page text store
# ---------------------------------------------------------------------------


class PageTextStore:
    """Per-page OCR text cached as ``page-N.txt`` files (N is 1-based)."""

    def __init__(self, directory):
        self.directory = Path(directory)

    def path_for(self, page):
        return self.directory / f"page-{page}.txt"

    def page_count(self):
        if not self.directory.is_dir():
            return 0
        return sum(1 for p in self.directory.iterdir() if _PAGE_FILE_RE.match(p.name))

    def read_page(self, page):
        """Text of physical page ``page``, or None when it was never recognized."""
        try:
            # undecodable bytes become U+FFFD rather than losing the page
            return self.path_for(page).read_text(encoding="utf-8", errors="replace")
        except OSError:
            return None


# ---------------------------------------------------------------------------
# HTML formatting
# ---------------------------------------------------------------------------


def sanitize_xml(text):
    return _XML_ESCAPE_RE.sub(lambda m: _XML_ESCAPES[m.group(0)], text)


def format_text_as_html(text):
    """Blank-line separated runs of lines become one ``<p>`` each."""
    paragraphs = []
    current = []

    for line in text.split("\n"):
        stripped = line.strip()
        if not stripped:
            if current:
                paragraphs.append(f"<p>{' '.join(current)}</p>")
                current = []
        else:
            current.append(sanitize_xml(stripped))

    if current:
        paragraphs.append(f"<p>{' '.join(current)}</p>")

    return "\n".join(paragraphs)


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def assemble_chapters(
    chapters,
    read_page,
    page_offset,
    total_pdf_pages,
    vocabulary=None,
    ignore_words=None,
    secondary_words=None,
    progress=print,
):
    """Build the HTML body of every chapter, in order.

    ``read_page(physical_page)`` returns the (already corrected) text of a page
    or None. Pages outside the PDF or without text are skipped; chapters that
    end up empty are dropped. Abnormal words are keyed by book page.

    Returns ``(assembled_chapters, abnormal_words)``.
    """
    assembled = []
    abnormal_words = {}

    for chapter in chapters:
        page_range = chapter.page_range
        if page_range is None:
            progress(
                f"Warning: Skipping chapter '{chapter.title}': bad page range {chapter.pages!r}"
            )
            continue

        parts = []
        for book_page in page_range.pages():
            physical_page = to_physical_page(book_page, page_offset)
            if physical_page < 1 or physical_page > total_pdf_pages:
                continue

            text = read_page(physical_page)
            if text is None:
                continue

            find_abnormal_words(
                text,
                vocabulary,
                book_page,
                abnormal_words,
                ignore_words=ignore_words,
                secondary_words=secondary_words,
            )
            parts.append(format_text_as_html(text))

        content = "\n".join(p for p in parts if p)
        if not content.strip():
            continue

        assembled.append(AssembledChapter(title=chapter.title, html=content))

    return assembled, abnormal_words
