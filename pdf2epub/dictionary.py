"""OCR text correction and out-of-dictionary ("abnormal") word detection."""

import json
import re
import unicodedata

from .project import (
    CORRECTION_DICTIONARY_FILE,
    IGNORE_WORDS_FILE,
    SECONDARY_DICTIONARY_FILE,
    VIETNAMESE_CHARACTERS,
    VIETNAMESE_DICTIONARY_FILE,
    resources_root,
)

_NON_ALPHABET_RE = re.compile(f"[^{VIETNAMESE_CHARACTERS}]")
_UPPERCASE_RE = re.compile(f"[{VIETNAMESE_CHARACTERS.upper()}]")
_WORD_RE = re.compile(f"[{VIETNAMESE_CHARACTERS}]+")


# ---------------------------------------------------------------------------
# Corrections
# ---------------------------------------------------------------------------


def capitalize_first(text):
    if not text:
        return text
    return text[0].upper() + text[1:]


def is_complex_pattern(wrong):
    """True if ``wrong`` holds anything besides letters (spaces, punctuation...)."""
    return bool(_NON_ALPHABET_RE.search(wrong))


def _compile_correction(wrong):
    escaped = re.escape(wrong)
    # Complex patterns already carry their own structure; word boundaries
    # around punctuation would stop them from matching.
    if is_complex_pattern(wrong):
        return re.compile(escaped, re.IGNORECASE)
    return re.compile(rf"\b{escaped}\b", re.IGNORECASE)


def apply_corrections(text: str, dictionary: dict[str, str]) -> str:
    """Replace every ``wrong`` with ``correct``, case-insensitively.

    Entries are applied in dictionary order, each one seeing the output of the
    previous. A match starting with an uppercase letter gets its replacement
    capitalized ("Apple" -> "Táo" for ``{"apple": "táo"}``).
    """
    corrected = text

    for wrong, correct in dictionary.items():
        if not wrong:
            continue
        pattern = _compile_correction(wrong)

        def _replace(match, correct=correct):
            if _UPPERCASE_RE.match(match.group(0)[0]):
                return capitalize_first(correct)
            return correct

        corrected = pattern.sub(_replace, corrected)

    return corrected


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_correction_dictionary(path=None, progress=print):
    """Returns ``(dictionary, loaded)``. A missing or broken file is not an error."""
    path = path or resources_root() / CORRECTION_DICTIONARY_FILE
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            dictionary = json.load(f)
    except (OSError, ValueError) as exc:
        progress(f"Warning: Correction dictionary not loaded: {exc}")
        return {}, False

    if not isinstance(dictionary, dict):
        progress(f"Warning: Correction dictionary not loaded: {path} is not a JSON object")
        return {}, False
    return {str(k): str(v) for k, v in dictionary.items()}, True


def load_word_set(path, label="Word list", progress=print):
    """Read one word per line into a lowercase set. Returns ``(words, loaded)``."""
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as exc:
        progress(f"Warning: {label} not loaded: {exc}")
        return set(), False

    words = {
        unicodedata.normalize("NFC", line.strip()).lower() for line in content.splitlines()
    }
    words.discard("")
    return words, True


def load_vocabulary(root=None, progress=print):
    """Load the reference dictionary plus the optional ignore and secondary lists.

    Returns ``(vocabulary, ignore_words, secondary_words, loaded)`` where
    ``loaded`` reflects the reference dictionary only.
    """
    root = root or resources_root()
    vocabulary, loaded = load_word_set(
        root / VIETNAMESE_DICTIONARY_FILE, "Vietnamese dictionary", progress
    )
    ignore_words = set()
    secondary_words = set()
    if (root / IGNORE_WORDS_FILE).exists():
        ignore_words, _ = load_word_set(root / IGNORE_WORDS_FILE, "Ignore list", progress)
    if (root / SECONDARY_DICTIONARY_FILE).exists():
        secondary_words, _ = load_word_set(
            root / SECONDARY_DICTIONARY_FILE, "Secondary dictionary", progress
        )
    return vocabulary, ignore_words, secondary_words, loaded


# ---------------------------------------------------------------------------
# Abnormal words
# ---------------------------------------------------------------------------


def find_abnormal_words(
    text, vocabulary, page_number, abnormal_words, ignore_words=None, secondary_words=None
):
    """Record words of ``text`` missing from every reference list.

    ``abnormal_words`` maps word -> set of book pages and is updated in place.
    An empty ``vocabulary`` means no dictionary is available, so nothing is
    recorded.
    """
    if not vocabulary:
        return

    ignore_words = ignore_words or set()
    secondary_words = secondary_words or set()

    words = _WORD_RE.findall(unicodedata.normalize("NFC", text).lower())
    for word in words:
        if len(word) <= 1:
            continue
        if word in vocabulary or word in ignore_words or word in secondary_words:
            continue
        abnormal_words.setdefault(word, set()).add(page_number)


def _collation_key(word):
    # Accented letters sort next to their base letter, then by exact form.
    base = unicodedata.normalize("NFD", word.replace("đ", "d"))
    base = "".join(c for c in base if not unicodedata.combining(c))
    return base, word


def format_abnormal_words(abnormal_words):
    """Report lines ``word: 3, 7, 12``, sorted by word."""
    return [
        f"{word}: {', '.join(str(p) for p in sorted(abnormal_words[word]))}"
        for word in sorted(abnormal_words, key=_collation_key)
    ]
