"""Package assembled chapters into an EPUB with ebooklib."""

import uuid

from ebooklib import epub

from .assemble import sanitize_xml
from .project import DEFAULT_AUTHOR, EPUB_LANGUAGE, STYLESHEET_FILE, resources_root

DEFAULT_STYLESHEET = """\
body {
  font-family: serif;
  line-height: 1.5;
  margin: 0 5%;
}
h2 {
  text-align: center;
  margin: 1.5em 0 1em;
}
p {
  text-indent: 1.5em;
  margin: 0 0 0.5em;
  text-align: justify;
}
"""


def load_stylesheet():
    path = resources_root() / STYLESHEET_FILE
    if path.exists():
        return path.read_text(encoding="utf-8")
    return DEFAULT_STYLESHEET


def build_epub(chapters, book_title, stylesheet=None, language=EPUB_LANGUAGE):
    """One XHTML document per chapter; spine and TOC follow ``chapters`` order."""
    book = epub.EpubBook()
    book.set_identifier(f"urn:uuid:{uuid.uuid4()}")
    book.set_title(book_title)
    book.set_language(language)
    book.add_author(DEFAULT_AUTHOR, role="aut")

    css = epub.EpubItem(
        uid="css",
        file_name="style.css",
        media_type="text/css",
        content=stylesheet if stylesheet is not None else load_stylesheet(),
    )
    book.add_item(css)

    items = []
    for play_order, chapter in enumerate(chapters, 1):
        title = sanitize_xml(chapter.title)
        item = epub.EpubHtml(
            uid=f"chapter-{play_order}",
            title=chapter.title,
            file_name=f"chapters/chapter-{play_order}.xhtml",
            lang=language,
        )
        item.content = f"<h2>{title}</h2>\n{chapter.html}"
        item.add_link(href="../style.css", rel="stylesheet", type="text/css")
        book.add_item(item)
        items.append(item)

    book.toc = items
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = items
    return book


def write_epub(book, path):
    epub.write_epub(str(path), book, {})
    return path
