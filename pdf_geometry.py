from __future__ import annotations

import logging
from collections.abc import Sequence

import fitz  # PyMuPDF

from pdf_config import DEFAULT_CONFIG, RedactorConfig
from pdf_document import open_document, serialize
from pdf_extract import extract_runs, group_lines
from pdf_models import Line, PositionedTextRun, RedactionRect, RedactResult

logger = logging.getLogger(__name__)


def _is_label(text: str) -> bool:
    return text.rstrip().endswith(":")


def _value_start(text: str, needle: str, split_inline: bool) -> int | None:
    """Index in *text* where the labelled value begins, or None if *text* is no label.

    ``len(text)`` means the whole value lives in the following runs.
    """
    lowered = text.lower()
    if _is_label(text) and needle in lowered:
        return len(text)
    if not split_inline:
        return None

    idx = lowered.find(needle)
    if idx < 0:
        return None
    colon = text.find(":", idx + len(needle))
    if colon < 0 or text[idx + len(needle):colon].strip():
        return None
    start = colon + 1
    while start < len(text) and text[start].isspace():
        start += 1
    return start


def _line_rects(line: Line, needle: str, config: RedactorConfig) -> list[RedactionRect]:
    runs = [r for r in line.runs if r.text.strip()]
    rects: list[RedactionRect] = []
    for i, label in enumerate(runs):
        start = _value_start(label.text, needle, config.split_inline_labels)
        if start is None:
            continue

        spans: list[tuple[float, float]] = []
        heights = [label.height]
        if start < len(label.text):
            # no per-glyph positions inside a run; assume even advance widths
            offset = label.width * start / len(label.text)
            spans.append((label.x + offset, label.x + label.width))

        for run in runs[i + 1:]:
            if abs(run.y - label.y) > config.line_tolerance:
                continue
            if _is_label(run.text):
                break
            spans.append((run.x, run.x + run.width))
            heights.append(run.height)

        if not spans:
            continue
        x0 = min(s[0] for s in spans)
        x1 = max(s[1] for s in spans)
        rects.append(RedactionRect(label.page_index, x0, label.y, x1 - x0, max(heights)))
    return rects


def find_label_rects(
    pages: Sequence[Sequence[PositionedTextRun]],
    field_name: str,
    config: RedactorConfig = DEFAULT_CONFIG,
) -> list[RedactionRect]:
    """Locate the content that follows each ``<field>:`` label on its visual row.

    Pages are scanned in order, lines top to bottom, so the result order is
    deterministic.
    """
    needle = field_name.strip().lower()
    if not needle:
        return []
    rects: list[RedactionRect] = []
    for runs in pages:
        for line in group_lines(runs, config.line_tolerance):
            rects.extend(_line_rects(line, needle, config))
    return rects


def to_page_rect(page: fitz.Page, rect: RedactionRect) -> fitz.Rect:
    """Convert bottom-left PDF user space to PyMuPDF's top-left page space.

    The page's transformation matrix accounts for a CropBox that does not
    start at the MediaBox origin.
    """
    pdf_rect = fitz.Rect(rect.x, rect.y, rect.x + rect.width, rect.y + rect.height)
    return pdf_rect * page.transformation_matrix


def redact_by_geometry(
    pdf_bytes: bytes,
    field_name: str,
    config: RedactorConfig = DEFAULT_CONFIG,
) -> RedactResult:
    """Cover the value next to each matching label with an opaque box.

    Works on documents without a form. The text underneath stays in the
    content stream; the box only hides it visually.
    """
    original = bytes(pdf_bytes)
    rects = find_label_rects(extract_runs(original), field_name, config)
    if not rects:
        return RedactResult(data=original, found=False)

    with open_document(original) as doc:
        for rect in rects:
            page = doc[rect.page_index]
            page.draw_rect(
                to_page_rect(page, rect),
                color=config.fill_color,
                fill=config.fill_color,
                overlay=True,
            )
            logger.debug("covered %s", rect)
        return RedactResult(data=serialize(doc), found=True)
