from __future__ import annotations

import fitz
import pytest

from pdf_config import RedactorConfig
from pdf_extract import extract_text
from pdf_geometry import find_label_rects, redact_by_geometry, to_page_rect
from pdf_models import DecodeError, RedactionRect
from tests.pdf_factory import build_text_pdf, run


class TestFindLabelRects:
    def test_content_runs_on_label_row(self):
        page = [
            run("Languages:", 72, 700, width=55, height=11),
            run("English,", 140, 700, width=40, height=11),
            run("French", 185, 700.5, width=35, height=12),
            run("Hobbies: chess", 72, 680, width=80),
        ]
        (rect,) = find_label_rects([page], "languages")
        assert rect == RedactionRect(page_index=0, x=140, y=700, width=80, height=12)

    def test_label_without_colon_ignored_when_not_splitting(self):
        page = [run("Country Vietnam", 72, 700)]
        assert find_label_rects([page], "country", RedactorConfig(split_inline_labels=False)) == []

    def test_label_needs_content(self):
        assert find_label_rects([[run("Country:", 72, 700)]], "country") == []

    def test_inline_value_inside_one_run(self):
        page = [run("Country: Vietnam", 100, 500, width=160, height=10)]
        (rect,) = find_label_rects([page], "country")
        assert rect.x == pytest.approx(190)
        assert rect.width == pytest.approx(70)
        assert (rect.y, rect.height) == (500, 10)

    def test_inline_split_can_be_disabled(self):
        page = [run("Country: Vietnam", 100, 500, width=160)]
        assert find_label_rects([page], "country", RedactorConfig(split_inline_labels=False)) == []

    def test_stops_at_next_label_on_row(self):
        page = [
            run("Name:", 72, 700, width=30),
            run("Ann", 110, 700, width=20),
            run("Country:", 200, 700, width=45),
            run("VN", 250, 700, width=15),
        ]
        rects = find_label_rects([page], "name")
        assert [(r.x, r.width) for r in rects] == [(110, 20)]

    def test_other_rows_not_collected(self):
        page = [run("Country:", 72, 700), run("Vietnam", 72, 690)]
        assert find_label_rects([page], "country") == []

    def test_substring_and_case_insensitive(self):
        page = [run("SPOKEN LANGUAGES:", 72, 700, width=90), run("English", 170, 700)]
        (rect,) = find_label_rects([page], "languages")
        assert rect.x == 170

    def test_pages_in_order(self):
        pages = [
            [run("Country:", 72, 700), run("VN", 150, 700)],
            [run("Country:", 72, 300, page=1), run("FR", 150, 300, page=1)],
        ]
        assert [r.page_index for r in find_label_rects(pages, "country")] == [0, 1]

    def test_blank_field_name(self):
        assert find_label_rects([[run("Country:", 72, 700), run("VN", 150, 700)]], " ") == []


def test_to_page_rect_flips_y_axis():
    with fitz.open() as doc:
        page = doc.new_page(width=595, height=842)
        rect = to_page_rect(page, RedactionRect(page_index=0, x=100, y=700, width=50, height=10))
    assert tuple(rect) == (100, 132, 150, 142)


def test_box_lands_on_value_of_cropped_page():
    data = build_text_pdf([[(72, 300, "Country:"), (160, 300, "Vietnam")]])
    with fitz.open(stream=data, filetype="pdf") as doc:
        doc[0].set_cropbox(fitz.Rect(0, 0, 595, 500))
        cropped = doc.tobytes()

    result = redact_by_geometry(cropped, "country")
    assert result.found
    with fitz.open(stream=result.data, filetype="pdf") as doc:
        page = doc[0]
        (word,) = page.search_for("Vietnam")
        (drawing,) = page.get_drawings()
    box = drawing["rect"]
    assert box.intersects(word)
    assert box.x0 == pytest.approx(word.x0, abs=1.5)


class TestRedactByGeometry:
    def test_box_drawn_over_row_content(self, languages_pdf):
        result = redact_by_geometry(languages_pdf, "languages")
        assert result.found

        with fitz.open(stream=result.data, filetype="pdf") as doc:
            drawings = doc[0].get_drawings()
        assert len(drawings) == 1
        box = drawings[0]["rect"]
        assert box.x0 == pytest.approx(150, abs=1.5)
        # "Languages:" itself stays visible
        assert box.x0 > 130

    def test_text_under_box_is_kept(self, languages_pdf):
        result = redact_by_geometry(languages_pdf, "languages")
        assert "English, French" in extract_text(result.data)

    def test_inline_label_in_single_run(self, cv_pdf):
        result = redact_by_geometry(cv_pdf, "country")
        assert result.found
        with fitz.open(stream=result.data, filetype="pdf") as doc:
            assert len(doc[0].get_drawings()) == 1

    def test_no_match_returns_original_bytes(self, languages_pdf):
        result = redact_by_geometry(languages_pdf, "passport")
        assert not result.found
        assert result.data == languages_pdf

    def test_multi_page(self):
        data = build_text_pdf([
            [(72, 100, "Country:"), (160, 100, "Vietnam")],
            [(72, 200, "Phone:"), (160, 200, "555")],
            [(72, 300, "Country:"), (160, 300, "France")],
        ])
        result = redact_by_geometry(data, "country")
        assert result.found
        with fitz.open(stream=result.data, filetype="pdf") as doc:
            assert [len(page.get_drawings()) for page in doc] == [1, 0, 1]

    def test_garbage_raises_decode_error(self):
        with pytest.raises(DecodeError):
            redact_by_geometry(b"%PDF-nonsense", "country")
