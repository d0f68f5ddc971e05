"""Table of contents validation and chapter reconciliation."""

from dataclasses import dataclass

from .errors import TocError
from .pages import format_page_range, is_valid_page_range, parse_page_range

INTRODUCTION_TITLE = "Introduction"
APPENDICES_TITLE = "Appendices"


@dataclass(frozen=True)
class Chapter:
    title: str
    pages: str  # "start-end", book-page coordinates

    @property
    def page_range(self):
        return parse_page_range(self.pages, signed=True)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_toc(toc_raw: str) -> list[Chapter]:
    """Parse one ``Title: start-end`` chapter per non-blank line.

    All or nothing: the first bad line raises TocError and no chapters are
    returned.
    """
    lines = [line.strip() for line in toc_raw.splitlines()]
    chapters = []

    for line in lines:
        if not line:
            continue

        parts = line.split(":")
        if len(parts) != 2:
            raise TocError(
                f'Invalid TOC line: "{line}". Expected format: "Chapter Title: 1-10"'
            )

        title, pages = parts[0].strip(), parts[1].strip()
        if not title:
            raise TocError(f'Empty chapter title in line: "{line}"')

        if not is_valid_page_range(pages):
            raise TocError(f'Invalid page range: "{pages}". Expected format: "1-10"')
        if parse_page_range(pages).reversed:
            raise TocError(
                f'Invalid page range: "{pages}". Start page must not exceed end page.'
            )

        chapters.append(Chapter(title=title, pages=pages))

    return chapters


# ---------------------------------------------------------------------------
# Reconciliation against the whole book
# ---------------------------------------------------------------------------


def _start_page(chapter):
    return chapter.page_range.start


def _end_page(chapter):
    return chapter.page_range.end


def generate_final_chapters(user_chapters, book_start_page, book_end_page, default_title):
    """Sort the user's chapters and fill the uncovered head and tail of the book.

    Pages before the first chapter become "Introduction", pages after the last
    chapter become "Appendices". Without any chapters the whole book is one
    chapter named ``default_title``. Gaps between user chapters are left as-is.
    """
    if not user_chapters:
        return [
            Chapter(
                title=default_title,
                pages=format_page_range(book_start_page, book_end_page),
            )
        ]

    sorted_chapters = sorted(user_chapters, key=_start_page)

    first_start = _start_page(sorted_chapters[0])
    last_end = _end_page(sorted_chapters[-1])

    final_chapters = []
    if first_start > book_start_page:
        final_chapters.append(
            Chapter(
                title=INTRODUCTION_TITLE,
                pages=format_page_range(book_start_page, first_start - 1),
            )
        )

    final_chapters.extend(sorted_chapters)

    if last_end < book_end_page:
        final_chapters.append(
            Chapter(
                title=APPENDICES_TITLE,
                pages=format_page_range(last_end + 1, book_end_page),
            )
        )

    return final_chapters
