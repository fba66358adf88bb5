from __future__ import annotations

import io
import logging
import warnings
from collections.abc import Iterable, Sequence

import pdfplumber
from pdfminer.pdfparser import PDFSyntaxError
from pdfminer.psparser import PSException
from pdfplumber.utils.exceptions import PdfminerException

from pdf_config import DEFAULT_CONFIG, RedactorConfig
from pdf_models import DecodeError, Line, PositionedTextRun

logging.getLogger("pdfminer").setLevel(logging.ERROR)
warnings.filterwarnings("ignore", module="pdfminer")

logger = logging.getLogger(__name__)

_BASELINE_EPSILON = 0.5
_MIN_RUN_GAP = 4.0


def _breaks_run(current: list[dict], c: dict) -> bool:
    prev = current[-1]
    if abs(c["y0"] - prev["y0"]) > _BASELINE_EPSILON:
        return True
    if c.get("fontname") != prev.get("fontname") or c.get("size") != prev.get("size"):
        return True
    if c["x0"] < prev["x0"]:
        return True
    avg_char_width = (prev["x1"] - current[0]["x0"]) / len(current)
    gap = c["x0"] - prev["x1"]
    return gap > max(avg_char_width * 1.5, _MIN_RUN_GAP)


def _make_run(chars: list[dict], page_index: int) -> PositionedTextRun:
    x0 = chars[0]["x0"]
    return PositionedTextRun(
        text="".join(c["text"] for c in chars),
        x=float(x0),
        y=float(min(c["y0"] for c in chars)),
        width=float(max(c["x1"] for c in chars) - x0),
        height=float(max(c["height"] for c in chars)),
        page_index=page_index,
    )


def chars_to_runs(chars: Iterable[dict], page_index: int) -> list[PositionedTextRun]:
    """Rebuild text runs from pdfplumber ``page.chars`` in content-stream order.

    Consecutive characters stay in one run until the baseline moves, the font
    or size changes, the pen jumps backwards, or the horizontal gap grows past
    1.5 average character widths.
    """
    runs: list[PositionedTextRun] = []
    current: list[dict] = []
    for c in chars:
        if current and _breaks_run(current, c):
            runs.append(_make_run(current, page_index))
            current = []
        current.append(c)
    if current:
        runs.append(_make_run(current, page_index))
    return runs


def extract_runs(pdf_bytes: bytes) -> list[list[PositionedTextRun]]:
    """Decode *pdf_bytes* into one list of positioned runs per page."""
    try:
        with pdfplumber.open(io.BytesIO(bytes(pdf_bytes))) as pdf:
            pages = [chars_to_runs(page.chars, index) for index, page in enumerate(pdf.pages)]
    except (PdfminerException, PDFSyntaxError, PSException) as exc:
        raise DecodeError(f"cannot read PDF content: {exc}") from exc
    logger.debug("decoded %d page(s), %d run(s)", len(pages), sum(len(p) for p in pages))
    return pages


def group_lines(runs: Sequence[PositionedTextRun], tolerance: float = 2.0) -> list[Line]:
    """Cluster runs into visual lines, top of the page first.

    A run joins the first line whose recorded ``y`` lies within *tolerance*
    of its own; otherwise it starts a new line. Both sorts are stable, so
    runs sharing an ``x`` keep their input order.
    """
    lines: list[Line] = []
    for run in runs:
        if not isinstance(run.text, str) or not run.text:
            continue
        line = next((ln for ln in lines if abs(ln.y - run.y) <= tolerance), None)
        if line is None:
            line = Line(y=run.y, runs=[])
            lines.append(line)
        line.runs.append(run)

    for line in lines:
        line.runs.sort(key=lambda r: r.x)
    lines.sort(key=lambda ln: ln.y, reverse=True)
    return lines


def reconstruct(runs: Sequence[PositionedTextRun], tolerance: float = 2.0) -> str:
    """Return the plain text of one page, one visual line per text line."""
    return "\n".join(line.text for line in group_lines(runs, tolerance))


def reconstruct_document(pages: Sequence[Sequence[PositionedTextRun]], tolerance: float = 2.0) -> str:
    """Join reconstructed pages with a blank line between them."""
    return "\n\n".join(reconstruct(runs, tolerance) for runs in pages)


def extract_text(pdf_bytes: bytes, config: RedactorConfig = DEFAULT_CONFIG) -> str:
    return reconstruct_document(extract_runs(pdf_bytes), config.line_tolerance)
