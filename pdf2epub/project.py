"""Shared project paths, conversion constants and work-directory helpers."""

import hashlib
import os
import re
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_TEMP_ROOT = REPO_ROOT / "tmp"
DEFAULT_RESOURCES_ROOT = REPO_ROOT / "resources"

# Letters of the target language. Used as a regex character class.
VIETNAMESE_CHARACTERS = (
    "a-zA-Z"
    "àáâãèéêìíòóôõùúýăđĩũơưạảấầẩẫậắằẳẵặẹẻẽếềểễệỉịọỏốồổỗộớờởỡợụủứừửữựỳỵỷỹ"
)

PDF_SCALE = 1.5
OCR_LANGUAGE = "vie"
MAX_FILE_SIZE = 50 * 1024 * 1024  # 50MB
MAX_OCR_RETRIES = 3
OCR_RETRY_DELAY = 1.0  # seconds, multiplied by the attempt number

WORK_DIR_PREFIX = "pdf-to-epub-"
DEFAULT_AUTHOR = "pdf-to-epub"
EPUB_LANGUAGE = "vi"

CORRECTION_DICTIONARY_FILE = "correction-dictionary.json"
VIETNAMESE_DICTIONARY_FILE = "vietnamese-dictionary.txt"
IGNORE_WORDS_FILE = "ignore-words.txt"
SECONDARY_DICTIONARY_FILE = "secondary-dictionary.txt"
STYLESHEET_FILE = "epub-style.css"

_HASH_RE = re.compile(r"^[a-f0-9]{32}$", re.IGNORECASE)


def temp_root():
    return Path(os.environ.get("PDF2EPUB_TEMP_DIR") or DEFAULT_TEMP_ROOT)


def resources_root():
    return Path(os.environ.get("PDF2EPUB_RESOURCES_DIR") or DEFAULT_RESOURCES_ROOT)


def ocr_language():
    return os.environ.get("PDF2EPUB_OCR_LANGUAGE") or OCR_LANGUAGE


def tessdata_dir():
    value = os.environ.get("PDF2EPUB_TESSDATA_DIR")
    return Path(value) if value else None


def file_name_hash(file_name: str) -> str:
    return hashlib.md5(file_name.encode("utf-8")).hexdigest()


def is_valid_hash(value: str) -> bool:
    """True for a 32 hex digit md5 string."""
    return bool(_HASH_RE.match(value or ""))


def work_dir_for(file_name: str) -> Path:
    """Per-book cache directory, keyed by the uploaded PDF's file name."""
    return temp_root() / f"{WORK_DIR_PREFIX}{file_name_hash(file_name)}"


def work_dir_from_hash(value: str) -> Path:
    if not is_valid_hash(value):
        raise ValueError(f"Invalid hash format: {value!r}")
    return temp_root() / f"{WORK_DIR_PREFIX}{value.lower()}"


def list_work_dirs():
    """Return sorted per-book work directories under the temp root."""
    root = temp_root()
    if not root.exists():
        return []
    return sorted(
        p for p in root.iterdir() if p.is_dir() and p.name.startswith(WORK_DIR_PREFIX)
    )
