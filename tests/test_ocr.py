"""Tests for the OCR step and the correction pass, with Tesseract stubbed out."""

import pytest
from PIL import Image

from pdf2epub import ocr


@pytest.fixture
def images(tmp_path):
    image_dir = tmp_path / "images"
    image_dir.mkdir()
    for i in (1, 2, 3):
        Image.new("RGB", (8, 8), "white").save(image_dir / f"page-{i}.png")
    return image_dir


@pytest.fixture
def no_sleep(monkeypatch):
    delays = []
    monkeypatch.setattr(ocr.time, "sleep", delays.append)
    return delays


class TestRecognizeWithRetry:
    def test_retries_then_succeeds(self, images, monkeypatch, no_sleep):
        attempts = []

        def flaky(img, lang=None, config=""):
            attempts.append(lang)
            if len(attempts) < 3:
                raise RuntimeError("busy")
            return "text"

        monkeypatch.setattr(ocr.pytesseract, "image_to_string", flaky)
        assert ocr.recognize_with_retry(images / "page-1.png", lang="vie") == "text"
        assert attempts == ["vie", "vie", "vie"]
        assert no_sleep == [ocr.OCR_RETRY_DELAY * 1, ocr.OCR_RETRY_DELAY * 2]

    def test_gives_up(self, images, monkeypatch, no_sleep):
        def broken(img, lang=None, config=""):
            raise RuntimeError("no traineddata")

        monkeypatch.setattr(ocr.pytesseract, "image_to_string", broken)
        with pytest.raises(RuntimeError, match="failed after 3 attempts"):
            ocr.recognize_with_retry(images / "page-1.png", lang="vie")
        assert len(no_sleep) == 2

    def test_language_from_environment(self, images, monkeypatch):
        seen = []
        monkeypatch.setenv("PDF2EPUB_OCR_LANGUAGE", "eng")
        monkeypatch.setattr(
            ocr.pytesseract,
            "image_to_string",
            lambda img, lang=None, config="": seen.append(lang) or "",
        )
        ocr.recognize_with_retry(images / "page-1.png")
        assert seen == ["eng"]


class TestPerformOcr:
    def test_only_missing_pages_are_recognized(self, images, tmp_path, monkeypatch):
        ocr_dir = tmp_path / "ocr"
        ocr_dir.mkdir()
        (ocr_dir / "page-2.txt").write_text("cached", encoding="utf-8")

        recognized = []

        def fake(image_path, lang=None):
            recognized.append(image_path.name)
            return f"text of {image_path.stem}"

        monkeypatch.setattr(ocr, "recognize_with_retry", fake)
        messages = []
        ocr.perform_ocr(images, ocr_dir, messages.append)

        assert recognized == ["page-1.png", "page-3.png"]
        assert (ocr_dir / "page-1.txt").read_text(encoding="utf-8") == "text of page-1"
        assert (ocr_dir / "page-2.txt").read_text(encoding="utf-8") == "cached"
        assert "OCR for 1/3 pages already exists." in messages

    def test_nothing_to_do(self, images, tmp_path, monkeypatch):
        ocr_dir = tmp_path / "ocr"
        ocr_dir.mkdir()
        for i in (1, 2, 3):
            (ocr_dir / f"page-{i}.txt").write_text("", encoding="utf-8")

        def fail(*args, **kwargs):
            raise AssertionError("should not run")

        monkeypatch.setattr(ocr, "recognize_with_retry", fail)
        ocr.perform_ocr(images, ocr_dir, lambda msg: None)


class TestApplyCorrectionsToOcrFiles:
    def test_writes_corrected_copies(self, tmp_path):
        source = tmp_path / "ocr"
        source.mkdir()
        (source / "page-1.txt").write_text("Teh cat", encoding="utf-8")
        (source / "page-2.txt").write_text("no change", encoding="utf-8")
        dest = tmp_path / "corrected"

        assert ocr.apply_corrections_to_ocr_files(source, dest, {"teh": "the"}, lambda m: None)
        assert (dest / "page-1.txt").read_text(encoding="utf-8") == "The cat"
        assert (dest / "page-2.txt").read_text(encoding="utf-8") == "no change"
        assert (source / "page-1.txt").read_text(encoding="utf-8") == "Teh cat"

    def test_skipped_without_dictionary(self, tmp_path):
        messages = []
        dest = tmp_path / "corrected"
        assert not ocr.apply_corrections_to_ocr_files(tmp_path, dest, {}, messages.append)
        assert not dest.exists()
        assert messages == ["No correction dictionary loaded, skipping correction step."]

    def test_unreadable_file_is_reported(self, tmp_path):
        source = tmp_path / "ocr"
        source.mkdir()
        (source / "page-1.txt").write_bytes(b"\xff\xfe\xfa bad")
        (source / "page-2.txt").write_text("fine teh", encoding="utf-8")
        messages = []
        ocr.apply_corrections_to_ocr_files(
            source, tmp_path / "corrected", {"teh": "the"}, messages.append
        )
        assert any(m.startswith("Warning: Could not correct file page-1.txt") for m in messages)
        assert (tmp_path / "corrected" / "page-2.txt").read_text(encoding="utf-8") == "fine the"
