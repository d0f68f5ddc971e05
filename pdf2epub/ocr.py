"""Tesseract OCR over page images, plus the dictionary correction pass."""

import re
import time
from pathlib import Path

import pytesseract
from PIL import Image
from tqdm import tqdm

from .dictionary import apply_corrections
from .project import MAX_OCR_RETRIES, OCR_RETRY_DELAY, ocr_language, tessdata_dir

_PAGE_IMAGE_RE = re.compile(r"^page-([0-9]+)\.png$")


def _tesseract_config():
    tessdata = tessdata_dir()
    return f'--tessdata-dir "{tessdata}"' if tessdata else ""


def recognize_with_retry(image_path, lang=None, max_retries=MAX_OCR_RETRIES):
    """Run Tesseract on one image, retrying with a growing delay."""
    lang = lang or ocr_language()
    for attempt in range(1, max_retries + 1):
        try:
            with Image.open(image_path) as img:
                return pytesseract.image_to_string(
                    img, lang=lang, config=_tesseract_config()
                )
        except (pytesseract.TesseractError, OSError, RuntimeError) as e:
            if attempt == max_retries:
                raise RuntimeError(
                    f"OCR of {Path(image_path).name} failed after {max_retries} attempts: {e}"
                ) from e
            time.sleep(OCR_RETRY_DELAY * attempt)

    raise RuntimeError("OCR failed after retries")  # unreachable


def perform_ocr(image_dir, ocr_dir, progress=print, lang=None):
    """Recognize ``page-N.png`` into ``page-N.txt``. Existing text files are kept."""
    image_dir = Path(image_dir)
    ocr_dir = Path(ocr_dir)
    ocr_dir.mkdir(parents=True, exist_ok=True)

    page_count = sum(1 for p in image_dir.iterdir() if _PAGE_IMAGE_RE.match(p.name))
    pending = [
        i for i in range(1, page_count + 1) if not (ocr_dir / f"page-{i}.txt").exists()
    ]

    done = page_count - len(pending)
    if done:
        progress(f"OCR for {done}/{page_count} pages already exists.")
    if not pending:
        return

    progress(f"Running OCR on {len(pending)} pages...")
    for i in tqdm(pending, desc="  OCR", unit="page"):
        text = recognize_with_retry(image_dir / f"page-{i}.png", lang=lang)
        (ocr_dir / f"page-{i}.txt").write_text(text, encoding="utf-8")
    progress("OCR complete.")


def apply_corrections_to_ocr_files(source_dir, dest_dir, dictionary, progress=print):
    """Write corrected copies of every OCR file. Returns False when skipped."""
    if not dictionary:
        progress("No correction dictionary loaded, skipping correction step.")
        return False

    source_dir = Path(source_dir)
    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)

    progress("Applying corrections to OCR files...")
    ocr_files = sorted(p for p in source_dir.iterdir() if p.suffix == ".txt")
    for path in tqdm(ocr_files, desc="  Correct", unit="file"):
        try:
            text = path.read_text(encoding="utf-8")
            (dest_dir / path.name).write_text(
                apply_corrections(text, dictionary), encoding="utf-8"
            )
        except (OSError, UnicodeDecodeError) as e:
            progress(f"Warning: Could not correct file {path.name}: {e}")

    progress("Correction of OCR files complete.")
    return True
