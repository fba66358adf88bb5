from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class DecodeError(Exception):
    """The input bytes could not be parsed as a PDF document."""


class FontLoadError(Exception):
    """A candidate font resource could not be loaded or used."""


@dataclass(frozen=True)
class PositionedTextRun:
    """A contiguous piece of rendered text at a known position on a page.

    Coordinates are PDF user space: origin at the bottom-left corner, ``y``
    growing upwards. ``y`` is the bottom edge of the run's glyph boxes.
    """

    text: str
    x: float
    y: float
    width: float
    height: float
    page_index: int


@dataclass
class Line:
    """Runs sharing one visual row, ordered left to right."""

    y: float
    runs: list[PositionedTextRun]

    @property
    def text(self) -> str:
        return " ".join(" ".join(r.text for r in self.runs).split())


@dataclass(frozen=True)
class RedactionRect:
    """An area to cover with an opaque box, in bottom-left page coordinates."""

    page_index: int
    x: float
    y: float
    width: float
    height: float


class FieldKind(enum.Enum):
    TEXT = "text"
    CHOICE = "choice"
    OTHER = "other"


@dataclass
class FormField:
    """One widget of an AcroForm field, classified once at enumeration."""

    primary_name: str
    aliases: frozenset[str]
    kind: FieldKind
    current_value: str
    page_index: int
    xref: int
    widget: Any = field(default=None, repr=False, compare=False)

    def matches(self, needle: str) -> bool:
        """Case-insensitive substring match against the name and every alias."""
        needle = needle.lower()
        return any(needle in name.lower() for name in (self.primary_name, *self.aliases))


@dataclass(frozen=True)
class ResolvedFont:
    """Outcome of the mask-glyph font fallback chain."""

    name: str
    buffer: bytes | None
    source: str
    supports_mask: bool

    @property
    def is_embedded(self) -> bool:
        return self.buffer is not None


@dataclass(frozen=True)
class RedactResult:
    """New document bytes and whether anything was redacted."""

    data: bytes
    found: bool
