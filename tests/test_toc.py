"""Tests for TOC validation and chapter reconciliation."""

import pytest

from pdf2epub.errors import TocError
from pdf2epub.pages import PageRange
from pdf2epub.toc import Chapter, generate_final_chapters, validate_toc


class TestValidateToc:
    def test_chapters_in_file_order(self):
        toc = "Mở đầu: 1-10\n\n   Chapter 2 : 11-20  \nChapter 3:21-40\n"
        assert validate_toc(toc) == [
            Chapter("Mở đầu", "1-10"),
            Chapter("Chapter 2", "11-20"),
            Chapter("Chapter 3", "21-40"),
        ]

    def test_order_is_not_sorted(self):
        chapters = validate_toc("Later: 50-60\nEarlier: 1-10")
        assert [c.title for c in chapters] == ["Later", "Earlier"]

    def test_windows_line_endings(self):
        assert len(validate_toc("A: 1-2\r\nB: 3-4\r\n")) == 2

    def test_blank_input(self):
        assert validate_toc("\n  \n") == []

    def test_missing_colon(self):
        with pytest.raises(TocError) as exc:
            validate_toc("Chapter 1 1-10")
        assert str(exc.value) == (
            'Invalid TOC line: "Chapter 1 1-10". Expected format: "Chapter Title: 1-10"'
        )

    def test_two_colons(self):
        with pytest.raises(TocError, match="Invalid TOC line"):
            validate_toc("Part 1: Intro: 1-10")

    def test_empty_title(self):
        with pytest.raises(TocError) as exc:
            validate_toc(": 1-10")
        assert str(exc.value) == 'Empty chapter title in line: ": 1-10"'

    def test_bad_page_range(self):
        with pytest.raises(TocError) as exc:
            validate_toc("Chapter 1: 1-x")
        assert str(exc.value) == 'Invalid page range: "1-x". Expected format: "1-10"'

    def test_non_ascii_digits_in_page_range(self):
        with pytest.raises(TocError, match="Invalid page range"):
            validate_toc("Chapter 1: ١-٥")

    def test_reversed_page_range(self):
        with pytest.raises(TocError, match="Start page must not exceed end page"):
            validate_toc("Chapter 1: 10-1")

    def test_first_bad_line_aborts_everything(self):
        with pytest.raises(TocError, match="Part two"):
            validate_toc("Part one: 1-10\nPart two 11-20\nPart three: 21-30")


class TestGenerateFinalChapters:
    def test_gaps_at_both_ends(self):
        result = generate_final_chapters([Chapter("Ch1", "10-20")], 1, 30, "MyBook")
        assert result == [
            Chapter("Introduction", "1-9"),
            Chapter("Ch1", "10-20"),
            Chapter("Appendices", "21-30"),
        ]

    def test_no_toc_is_one_chapter(self):
        assert generate_final_chapters([], 1, 30, "MyBook") == [Chapter("MyBook", "1-30")]

    def test_full_coverage_is_unchanged(self):
        chapters = [Chapter("All", "1-30")]
        assert generate_final_chapters(chapters, 1, 30, "MyBook") == chapters

    def test_sorted_by_start_page(self):
        chapters = [Chapter("B", "11-30"), Chapter("A", "1-10")]
        result = generate_final_chapters(chapters, 1, 30, "MyBook")
        assert [c.title for c in result] == ["A", "B"]

    def test_numeric_not_lexical_sort(self):
        chapters = [Chapter("Ten", "10-30"), Chapter("Two", "2-9")]
        result = generate_final_chapters(chapters, 2, 30, "MyBook")
        assert [c.title for c in result] == ["Two", "Ten"]

    def test_ties_keep_input_order(self):
        chapters = [Chapter("First", "5-10"), Chapter("Second", "5-8")]
        result = generate_final_chapters(chapters, 5, 10, "MyBook")
        assert [c.title for c in result] == ["First", "Second", "Appendices"]
        assert result[-1] == Chapter("Appendices", "9-10")

    def test_inner_gaps_are_left_alone(self):
        chapters = [Chapter("A", "1-5"), Chapter("B", "10-20")]
        assert generate_final_chapters(chapters, 1, 20, "MyBook") == chapters

    def test_last_end_comes_from_last_chapter(self):
        chapters = [Chapter("Long", "1-50"), Chapter("Short", "10-20")]
        result = generate_final_chapters(chapters, 1, 50, "MyBook")
        assert result[-1] == Chapter("Appendices", "21-50")

    def test_input_list_is_not_mutated(self):
        chapters = [Chapter("B", "11-30"), Chapter("A", "1-10")]
        generate_final_chapters(chapters, 1, 30, "MyBook")
        assert [c.title for c in chapters] == ["B", "A"]

    def test_front_matter_before_book_page_one(self):
        # PDF page 1 is book page -3 when the offset is 4.
        result = generate_final_chapters([Chapter("Ch1", "1-20")], -3, 26, "MyBook")
        assert result[0] == Chapter("Introduction", "-3-0")
        assert result[0].page_range == PageRange(-3, 0)
        assert result[-1] == Chapter("Appendices", "21-26")

    def test_coverage_has_no_holes(self):
        chapters = [Chapter("A", "5-9"), Chapter("B", "10-14")]
        result = generate_final_chapters(chapters, 1, 20, "MyBook")
        covered = [p for c in result for p in c.page_range.pages()]
        assert covered == list(range(1, 21))
