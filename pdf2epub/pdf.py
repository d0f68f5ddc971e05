"""Render scanned PDF pages to PNG images with PyMuPDF."""

from pathlib import Path

import fitz  # pymupdf
from tqdm import tqdm

from .project import PDF_SCALE


def convert_pdf_to_images(pdf_path, output_dir, progress=print, scale=PDF_SCALE):
    """Write ``page-N.png`` for every page. Skipped when images already exist."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if any(output_dir.iterdir()):
        progress("Images already extracted.")
        return

    progress("Converting PDF to images...")
    matrix = fitz.Matrix(scale, scale)
    doc = fitz.open(str(pdf_path))
    try:
        page_count = doc.page_count
        for i, page in enumerate(tqdm(doc, total=page_count, desc="  Render", unit="page"), 1):
            pix = page.get_pixmap(matrix=matrix, alpha=False)
            pix.save(str(output_dir / f"page-{i}.png"))
    finally:
        doc.close()
    progress(f"Extracted {page_count} page images.")
