"""Page ranges, page corrections and book-page / PDF-page translation.

Two coordinate spaces are in play:
  - book pages: the numbers printed in the book, what the user writes in a TOC
  - physical pages: 1-based page indices of the scanned PDF

They differ by a constant offset, ``physical = book + offset``.
"""

import re
from typing import NamedTuple

from .errors import PageCorrectionError

PAGE_RANGE_RE = re.compile(r"^([0-9]+)-([0-9]+)$")
# Synthetic chapters may start before book page 1 (front matter when offset > 0).
SIGNED_PAGE_RANGE_RE = re.compile(r"^(-?[0-9]+)-(-?[0-9]+)$")
PAGE_CORRECTION_RE = re.compile(r"^\s*([0-9]+)\s*=\s*([0-9]+)\s*$")


class PageRange(NamedTuple):
    start: int
    end: int

    @property
    def reversed(self):
        return self.start > self.end

    def pages(self):
        """Inclusive iteration; empty for a reversed range."""
        return range(self.start, self.end + 1)


def is_valid_page_range(pages: str) -> bool:
    return bool(PAGE_RANGE_RE.match((pages or "").strip()))


def parse_page_range(pages: str, signed: bool = False) -> PageRange | None:
    """Parse ``"start-end"``. Returns None for anything else.

    ``signed`` also accepts negative bounds such as ``"-3-0"``, which only
    ever come from ``format_page_range`` on a reconciled chapter, never from
    user input.
    """
    pattern = SIGNED_PAGE_RANGE_RE if signed else PAGE_RANGE_RE
    m = pattern.match((pages or "").strip())
    if not m:
        return None
    return PageRange(int(m.group(1)), int(m.group(2)))


def format_page_range(start: int, end: int) -> str:
    return f"{start}-{end}"


def parse_page_correction(raw: str | None) -> int:
    """Turn ``"book_page=pdf_page"`` into the offset ``pdf_page - book_page``.

    Blank input means the book and the PDF are numbered identically.
    """
    if raw is None or not raw.strip():
        return 0
    m = PAGE_CORRECTION_RE.match(raw)
    if not m:
        raise PageCorrectionError(
            "Invalid page correction format. Please use book_page=pdf_page."
        )
    book_page, pdf_page = int(m.group(1)), int(m.group(2))
    return pdf_page - book_page


def to_physical_page(book_page: int, offset: int) -> int:
    return book_page + offset


def book_page_span(total_pdf_pages: int, offset: int) -> PageRange:
    """Book-page coordinates of the first and last PDF page."""
    return PageRange(1 - offset, total_pdf_pages - offset)
