from __future__ import annotations

from dataclasses import dataclass, replace

BLOCK_GLYPH = "\u2588"

# Tried in order; the first readable font that contains the mask glyph is embedded.
DEFAULT_FONT_SOURCES: tuple[str, ...] = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/noto/NotoSansMono-Regular.ttf",
    "/Library/Fonts/Arial Unicode.ttf",
    "C:\\Windows\\Fonts\\seguisym.ttf",
)


@dataclass(frozen=True)
class RedactorConfig:
    """Tunables shared by the extraction and redaction entry points.

    ``line_tolerance`` and the label heuristics were tuned on CV-style
    documents; they are not layout rules.
    """

    line_tolerance: float = 2.0
    mask_char: str = BLOCK_GLYPH
    ascii_mask_char: str = "#"
    text_mask_char: str = "#"
    text_fallback_length: int = 8
    form_fallback_length: int = 6
    font_sources: tuple[str, ...] = DEFAULT_FONT_SOURCES
    font_timeout: float = 10.0
    split_inline_labels: bool = True
    fill_color: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def with_overrides(self, **changes) -> RedactorConfig:
        """Return a copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


DEFAULT_CONFIG = RedactorConfig()
