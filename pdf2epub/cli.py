#!/usr/bin/env python3
"""Unified CLI for the pdf2epub pipeline."""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv
from tqdm import tqdm

from . import convert
from .errors import ConversionError
from .pages import book_page_span, parse_page_correction
from .project import file_name_hash, list_work_dirs, work_dir_from_hash
from .toc import generate_final_chapters, validate_toc


def _add_toc_arguments(parser):
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--toc", help='TOC text, one "Chapter Title: start-end" per line')
    group.add_argument("--toc-file", type=Path, help="Read the TOC from this file")
    parser.add_argument(
        "--page-correction",
        metavar="BOOK=PDF",
        help="A book page and the PDF page it is printed on, e.g. 1=7",
    )


def build_parser():
    parser = argparse.ArgumentParser(
        prog="pdf2epub",
        description="OCR a scanned PDF book and package it as an EPUB following a user TOC.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_convert = sub.add_parser("convert", help="Convert a PDF into an EPUB")
    p_convert.add_argument("pdf", type=Path, help="Path to the scanned PDF")
    _add_toc_arguments(p_convert)
    p_convert.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Copy the EPUB (and abnormal-words report) here",
    )

    p_toc = sub.add_parser(
        "toc", help="Validate a TOC and print the final chapter list (dry run)"
    )
    _add_toc_arguments(p_toc)
    p_toc.add_argument(
        "--pages", type=int, required=True, help="Number of pages in the PDF"
    )
    p_toc.add_argument(
        "--title", default="Untitled", help="Chapter title used when the TOC is empty"
    )

    p_work = sub.add_parser("workdirs", help="List cached per-book work folders")
    p_work.add_argument("--hash", dest="hash_", help="Show only this work folder")
    p_work.add_argument("--pdf", help="Show only the work folder of this PDF file name")

    return parser


def _read_toc(args):
    if args.toc_file:
        return args.toc_file.read_text(encoding="utf-8-sig")
    return args.toc


def _preview_toc(args):
    try:
        page_offset = parse_page_correction(args.page_correction)
        toc_raw = _read_toc(args)
        user_chapters = validate_toc(toc_raw) if toc_raw else []
    except (ConversionError, OSError, UnicodeDecodeError) as exc:
        print(f"Error: {exc}")
        return 1

    span = book_page_span(args.pages, page_offset)
    chapters = generate_final_chapters(user_chapters, span.start, span.end, args.title)

    print(f"Page offset: {page_offset:+d}  (book pages {span.start}-{span.end})")
    for i, chapter in enumerate(chapters, 1):
        page_range = chapter.page_range
        first = page_range.start + page_offset
        last = page_range.end + page_offset
        print(f"  {i}. {chapter.title}: {chapter.pages}  (PDF pages {first}-{last})")
    return 0


def _list_work_dirs(args):
    if args.hash_:
        try:
            work_dirs = [work_dir_from_hash(args.hash_)]
        except ValueError as exc:
            print(f"Error: {exc}")
            return 1
    elif args.pdf:
        work_dirs = [work_dir_from_hash(file_name_hash(Path(args.pdf).name))]
    else:
        work_dirs = list_work_dirs()

    work_dirs = [d for d in work_dirs if d.is_dir()]
    if not work_dirs:
        print("No work folders found.")
        return 0

    for work_dir in work_dirs:
        epubs = sorted(p.name for p in work_dir.glob("*.epub"))
        ocr_pages = len(list((work_dir / "ocr").glob("page-*.txt")))
        print(f"{work_dir.name}")
        print(f"  OCR pages: {ocr_pages}")
        for name in epubs:
            print(f"  EPUB: {name}")
        if (work_dir / convert.ABNORMAL_WORDS_FILE).exists():
            print(f"  Report: {convert.ABNORMAL_WORDS_FILE}")
    return 0


def main(argv=None):
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "convert":
        try:
            toc_raw = _read_toc(args)
        except (OSError, UnicodeDecodeError) as exc:
            print(f"Error: Could not read TOC file: {exc}")
            return 1
        return convert.run(
            args.pdf,
            toc_raw=toc_raw,
            page_correction=args.page_correction,
            output_dir=args.output,
            progress=tqdm.write,
        )

    if args.command == "toc":
        return _preview_toc(args)

    if args.command == "workdirs":
        return _list_work_dirs(args)

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
