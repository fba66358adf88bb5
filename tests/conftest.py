from __future__ import annotations

import pytest

from tests.pdf_factory import build_form_pdf, build_text_pdf


@pytest.fixture
def cv_pdf() -> bytes:
    return build_text_pdf([
        [
            (72, 100, "Country: Vietnam"),
            (72, 120, "Age: 30"),
        ],
    ])


@pytest.fixture
def languages_pdf() -> bytes:
    """No form; label and value written as two runs on one row."""
    return build_text_pdf([
        [
            (72, 100, "Languages:"),
            (150, 100, "English, French"),
            (72, 130, "Hobbies: chess"),
        ],
    ])


@pytest.fixture
def country_form_pdf() -> bytes:
    return build_form_pdf([
        {"name": "Country", "value": "France"},
        {"name": "City", "value": "Lyon"},
    ])
