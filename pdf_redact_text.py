"""Mask-token policy and field redaction over reconstructed plain text.

The text is scanned once, line by line. Each line is classified by the first
layout that fits and masked spans are never revisited:

  1. quoted key           "country": "Vietnam"
  2. label + separator    Country: Vietnam  /  Country = Vietnam
  3. bare label           Country Vietnam   (label starts the line)
  4. block                Country:  (or a bare label) ending its line, with
                          the value on the following lines up to a blank
                          line, the next "Label:" line, a one-word section
                          heading such as "Education" or the end of text.
                          A block that opens with bullet items ends at the
                          first line that is not a bullet.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from pdf_config import DEFAULT_CONFIG, RedactorConfig

_BULLET_RE = re.compile(r"^(\s*[•\-\*]\s*)(.*)$")
_LABEL_LINE_RE = re.compile(r"^\s*[A-Z][^\s:=]*(?:[ \t]+[^\s:=]+){0,3}[ \t]*[:=]")
_HEADING_RE = re.compile(r"^\s*[A-Z][a-z]+\s*$")


def make_mask(value: str, char: str, fallback_length: int) -> str:
    """Return *char* repeated once per character of the stripped *value*."""
    return char * (len(value.strip()) or fallback_length)


def to_ascii_mask(token: str, replacement: str = "#") -> str:
    """Replace every non-ASCII or non-printable character of *token*."""
    return "".join(ch if ch.isascii() and ch.isprintable() else replacement for ch in token)


@dataclass(frozen=True)
class _LabelPatterns:
    quoted: re.Pattern
    separated: re.Pattern
    bare: re.Pattern


def _compile_label(field_name: str) -> _LabelPatterns:
    name = r"\s+".join(re.escape(part) for part in field_name.split())
    return _LabelPatterns(
        quoted=re.compile(rf'("{name}"\s*:\s*")(.*?)(")', re.IGNORECASE),
        separated=re.compile(rf"(?<!\w){name}(?!\w)\s*[:=]\s*", re.IGNORECASE),
        bare=re.compile(rf"^\s*(?:[•\-\*]\s*)?{name}(?!\w)", re.IGNORECASE),
    )


def _split_eol(line: str) -> tuple[str, str]:
    body = line.rstrip("\r\n")
    return body, line[len(body):]


def _mask_span(span: str, mask: Callable[[str], str]) -> str:
    """Mask *span* in place, keeping its surrounding whitespace."""
    lead = len(span) - len(span.lstrip())
    trail = len(span.rstrip())
    return span[:lead] + mask(span) + span[trail:]


def _redact_line(body: str, labels: _LabelPatterns, mask: Callable[[str], str]) -> tuple[str, bool]:
    """Mask an inline value on *body*; the flag is True when a block value follows."""
    masked, count = labels.quoted.subn(lambda m: m.group(1) + mask(m.group(2)) + m.group(3), body)
    if count:
        return masked, False

    m = labels.separated.search(body)
    if m:
        value = body[m.end():]
        if value.strip():
            return body[: m.end()] + _mask_span(value, mask), False
        return body, True

    m = labels.bare.match(body)
    if m:
        rest = body[m.end():]
        if not rest.strip():
            return body, True
        if rest[0].isspace():
            return body[: m.end()] + _mask_span(rest, mask), False

    return body, False


def _is_heading(lines: list[str], index: int) -> bool:
    """A lone capitalised word that introduces a line which is not one itself."""
    body, _ = _split_eol(lines[index])
    if not _HEADING_RE.match(body) or index + 1 >= len(lines):
        return False
    following, _ = _split_eol(lines[index + 1])
    return bool(following.strip()) and not _HEADING_RE.match(following)


def _block_end(lines: list[str], start: int) -> int:
    end = start
    bullets: bool | None = None
    while end < len(lines):
        body, _ = _split_eol(lines[end])
        if not body.strip() or _LABEL_LINE_RE.match(body):
            break
        if end > start and _is_heading(lines, end):
            break
        is_bullet = _BULLET_RE.match(body) is not None
        if bullets is None:
            bullets = is_bullet
        elif bullets and not is_bullet:
            break
        end += 1
    return end


def _redact_block_line(line: str, mask: Callable[[str], str]) -> str:
    body, eol = _split_eol(line)
    m = _BULLET_RE.match(body)
    if m:
        return m.group(1) + _mask_span(m.group(2), mask) + eol
    return _mask_span(body, mask) + eol


def redact_field(text: str, field_name: str, config: RedactorConfig = DEFAULT_CONFIG) -> str:
    """Mask the value labelled *field_name* wherever it appears in *text*.

    Matching is case-insensitive and bounded on word characters, so
    ``"guage"`` never matches inside ``"Languages"``. Text with no match is
    returned unchanged.
    """
    if not text or not field_name or not field_name.strip():
        return text

    labels = _compile_label(field_name.strip())

    def mask(value: str) -> str:
        return make_mask(value, config.text_mask_char, config.text_fallback_length)

    lines = text.splitlines(keepends=True)
    out: list[str] = []
    i = 0
    while i < len(lines):
        body, eol = _split_eol(lines[i])
        masked, opens_block = _redact_line(body, labels, mask)
        out.append(masked + eol)
        i += 1
        if opens_block:
            end = _block_end(lines, i)
            out.extend(_redact_block_line(line, mask) for line in lines[i:end])
            i = end
    return "".join(out)
