from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from pathlib import Path

import fitz  # PyMuPDF
import httpx

from pdf_config import DEFAULT_CONFIG, RedactorConfig
from pdf_document import MUPDF_ERRORS
from pdf_models import FontLoadError, ResolvedFont
from pdf_redact_text import to_ascii_mask

logger = logging.getLogger(__name__)

FontLoader = Callable[[str], bytes]

BASIC_FONT = "Helv"
EMBEDDED_FONT_NAME = "MaskFont"


def load_font_resource(location: str, timeout: float = 10.0) -> bytes:
    """Read a font from a local path or an http(s) URL."""
    if location.startswith(("http://", "https://")):
        try:
            response = httpx.get(location, timeout=timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise FontLoadError(f"{location}: {exc}") from exc
        return response.content

    try:
        return Path(location).expanduser().read_bytes()
    except OSError as exc:
        raise FontLoadError(f"{location}: {exc}") from exc


def basic_font(mask_char: str) -> ResolvedFont:
    return ResolvedFont(
        name=BASIC_FONT,
        buffer=None,
        source="base-14 Helvetica",
        supports_mask=to_ascii_mask(mask_char) == mask_char,
    )


def resolve_mask_font(
    config: RedactorConfig = DEFAULT_CONFIG,
    loader: FontLoader | None = None,
) -> ResolvedFont:
    """Walk ``config.font_sources`` until one font can draw ``config.mask_char``.

    Falls back to Helvetica, which only draws ASCII; callers then switch to
    an ASCII mask.
    """
    fallback = basic_font(config.mask_char)
    if fallback.supports_mask:
        return fallback

    if loader is None:
        loader = functools.partial(load_font_resource, timeout=config.font_timeout)

    for source in config.font_sources:
        try:
            buffer = loader(source)
            font = fitz.Font(fontbuffer=buffer)
        except FontLoadError as exc:
            logger.debug("font source skipped: %s", exc)
            continue
        except MUPDF_ERRORS as exc:
            logger.warning("font source %s is not a usable font: %s", source, exc)
            continue

        if all(font.has_glyph(ord(ch)) for ch in config.mask_char):
            logger.debug("mask font resolved from %s", source)
            return ResolvedFont(
                name=EMBEDDED_FONT_NAME, buffer=buffer, source=source, supports_mask=True
            )
        logger.debug("font %s has no glyph for %r", source, config.mask_char)

    logger.warning("no font source can draw %r; using an ASCII mask", config.mask_char)
    return fallback
