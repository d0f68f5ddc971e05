"""Convert a scanned PDF into an EPUB driven by a user TOC and page correction.

Pipeline (each step caches its output in the book's work directory so an
interrupted run resumes where it stopped):
  1. validate the page correction and the TOC
  2. copy the PDF into the work directory
  3. render pages to images, OCR them, apply the correction dictionary
  4. reconcile the TOC against the whole book and assemble chapter text
  5. write the EPUB and the abnormal-words report
"""

import shutil
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .assemble import PageTextStore, assemble_chapters
from .dictionary import format_abnormal_words, load_correction_dictionary, load_vocabulary
from .epub import build_epub, write_epub
from .errors import ConversionError, FileTooLargeError
from .ocr import apply_corrections_to_ocr_files, perform_ocr
from .pages import book_page_span, parse_page_correction
from .pdf import convert_pdf_to_images
from .project import MAX_FILE_SIZE, work_dir_for
from .toc import generate_final_chapters, validate_toc

ABNORMAL_WORDS_FILE = "abnormal-words.txt"


@dataclass
class ConversionResult:
    work_dir: Path
    epub_path: Path
    chapter_count: int
    abnormal_words: dict
    report_path: Path | None = None


def book_title_from(pdf_path):
    name = Path(pdf_path).name
    return name[:-4] if name.lower().endswith(".pdf") else name


def write_abnormal_words_report(abnormal_words, path):
    """Write ``word: p, p, p`` lines. Returns None when there is nothing to report."""
    if not abnormal_words:
        return None
    path = Path(path)
    path.write_text("\n".join(format_abnormal_words(abnormal_words)), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def _validate_request(pdf_path, toc_raw, page_correction, progress):
    if not pdf_path.is_file():
        raise ConversionError(f"PDF not found: {pdf_path}")
    if pdf_path.stat().st_size > MAX_FILE_SIZE:
        raise FileTooLargeError(
            f"File too large. Maximum size is {MAX_FILE_SIZE // 1024 // 1024}MB."
        )

    if page_correction and page_correction.strip():
        page_offset = parse_page_correction(page_correction)
    else:
        progress("No page correction provided, assuming 1:1 page mapping.")
        page_offset = 0

    if toc_raw and toc_raw.strip():
        user_chapters = validate_toc(toc_raw)
    else:
        progress("No Table of Contents provided, treating book as a single chapter.")
        user_chapters = []

    return page_offset, user_chapters


def convert_book(pdf_path, toc_raw=None, page_correction=None, progress=print):
    """Run the whole pipeline for one PDF.

    Raises ConversionError (with a user-facing message) when the request is
    invalid; nothing is written in that case.
    """
    pdf_path = Path(pdf_path)
    page_offset, user_chapters = _validate_request(
        pdf_path, toc_raw, page_correction, progress
    )

    work_dir = work_dir_for(pdf_path.name)
    work_dir.mkdir(parents=True, exist_ok=True)

    cached_pdf = work_dir / pdf_path.name
    if cached_pdf.exists():
        progress("PDF already exists, skipping upload.")
    else:
        progress("Uploading PDF...")
        shutil.copy2(pdf_path, cached_pdf)

    image_dir = work_dir / "images"
    convert_pdf_to_images(cached_pdf, image_dir, progress)

    ocr_dir = work_dir / "ocr"
    perform_ocr(image_dir, ocr_dir, progress)

    correction_dict, correction_loaded = load_correction_dictionary(progress=progress)
    if correction_loaded:
        progress("Correction dictionary loaded.")
    else:
        progress("Correction dictionary not found, skipping correction.")

    text_dir = ocr_dir
    corrected_dir = work_dir / "ocr-corrected"
    if apply_corrections_to_ocr_files(ocr_dir, corrected_dir, correction_dict, progress):
        text_dir = corrected_dir

    vocabulary, ignore_words, secondary_words, vocabulary_loaded = load_vocabulary(progress=progress)
    if vocabulary_loaded:
        progress("Vietnamese dictionary loaded for error checking.")
    else:
        progress("Vietnamese dictionary not found, skipping abnormal word check.")

    # The OCR output, not the PDF, decides how many pages exist.
    total_pdf_pages = PageTextStore(ocr_dir).page_count()
    span = book_page_span(total_pdf_pages, page_offset)

    book_title = book_title_from(pdf_path)
    final_chapters = generate_final_chapters(
        user_chapters, span.start, span.end, book_title
    )

    progress("Generating EPUB...")
    store = PageTextStore(text_dir)
    assembled, abnormal_words = assemble_chapters(
        final_chapters,
        store.read_page,
        page_offset,
        total_pdf_pages,
        vocabulary=vocabulary,
        ignore_words=ignore_words,
        secondary_words=secondary_words,
        progress=progress,
    )
    if not assembled:
        raise ConversionError("No text was recognized for any chapter.")

    epub_path = work_dir / f"{book_title}.epub"
    write_epub(build_epub(assembled, book_title), epub_path)

    report_path = write_abnormal_words_report(
        abnormal_words, work_dir / ABNORMAL_WORDS_FILE
    )
    if report_path:
        progress(
            f"Found {len(abnormal_words)} potential OCR errors. "
            f"See {ABNORMAL_WORDS_FILE} in the work folder."
        )

    return ConversionResult(
        work_dir=work_dir,
        epub_path=epub_path,
        chapter_count=len(assembled),
        abnormal_words=abnormal_words,
        report_path=report_path,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def run(pdf, toc_raw=None, page_correction=None, output_dir=None, progress=print):
    load_dotenv()

    print(f"\nProcessing book: {pdf}")
    print("=" * 60)

    try:
        result = convert_book(pdf, toc_raw, page_correction, progress)
    except ConversionError as exc:
        print(f"Error: {exc}")
        return 1
    except Exception as exc:
        print(f"Error: An error occurred during conversion: {exc}")
        return 1

    epub_path = result.epub_path
    report_path = result.report_path
    if output_dir:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        epub_path = Path(shutil.copy2(result.epub_path, output_dir))
        if report_path:
            report_path = Path(shutil.copy2(report_path, output_dir))

    print(f"\n{'=' * 60}")
    print(f"Successfully created {epub_path}")
    print(f"  Chapters: {result.chapter_count}")
    print(f"  Abnormal words: {len(result.abnormal_words)}")
    if report_path:
        print(f"  Report: {report_path}")
    print(f"  Work folder: {result.work_dir}")
    return 0
