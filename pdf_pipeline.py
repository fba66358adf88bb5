from __future__ import annotations

import logging
from pathlib import Path

from pdf_config import DEFAULT_CONFIG, RedactorConfig
from pdf_fonts import FontLoader
from pdf_forms import redact_form_field
from pdf_geometry import redact_by_geometry
from pdf_models import RedactResult

logger = logging.getLogger(__name__)

COMMON_FIELDS = (
    "country",
    "languages",
    "phone",
    "email",
    "address",
    "birthdate",
    "ssn",
    "passport",
    "id",
    "salary",
    "experience",
    "education",
)

MODES = ("auto", "form", "geometry")


def redact_pdf(
    pdf_bytes: bytes,
    field_name: str,
    mode: str = "auto",
    config: RedactorConfig = DEFAULT_CONFIG,
    font_loader: FontLoader | None = None,
) -> RedactResult:
    """Redact *field_name* inside a PDF.

    ``form`` masks AcroForm fields, ``geometry`` covers labelled values on
    the page, and ``auto`` tries the form first and falls back to geometry
    when no form field matched.
    """
    if mode not in MODES:
        raise ValueError(f"unknown redaction mode {mode!r}; expected one of {', '.join(MODES)}")

    if mode in ("auto", "form"):
        result = redact_form_field(pdf_bytes, field_name, config, font_loader)
        if result.found or mode == "form":
            return result
        logger.info("no form field matched %r; trying label geometry", field_name)

    return redact_by_geometry(pdf_bytes, field_name, config)


def redacted_filename(name: str | Path) -> str:
    """``cv.pdf`` -> ``cv__redacted.pdf``."""
    base = Path(name).name
    stem = base[:-4] if base.lower().endswith(".pdf") else base
    return f"{stem or 'document'}__redacted.pdf"
