from __future__ import annotations

import logging

import fitz  # PyMuPDF

from pdf_config import DEFAULT_CONFIG, RedactorConfig
from pdf_document import MUPDF_ERRORS, open_document, serialize
from pdf_fonts import FontLoader, resolve_mask_font
from pdf_models import FieldKind, FormField, RedactResult, ResolvedFont
from pdf_redact_text import make_mask, to_ascii_mask

logger = logging.getLogger(__name__)

_KIND_BY_WIDGET_TYPE = {
    fitz.PDF_WIDGET_TYPE_TEXT: FieldKind.TEXT,
    fitz.PDF_WIDGET_TYPE_COMBOBOX: FieldKind.CHOICE,
    fitz.PDF_WIDGET_TYPE_LISTBOX: FieldKind.CHOICE,
}

_TEXT_INSET = 2.0
_MAX_FONT_SIZE = 12.0


def field_aliases(full_name: str, alternate_name: str | None) -> frozenset[str]:
    """Fully-qualified name, partial (last) name and the alternate/tooltip name."""
    names = {full_name, full_name.rsplit(".", 1)[-1], alternate_name or ""}
    return frozenset(n for n in names if n)


def page_fields(page: fitz.Page) -> list[FormField]:
    fields: list[FormField] = []
    for widget in page.widgets():
        name = widget.field_name or ""
        fields.append(
            FormField(
                primary_name=name,
                aliases=field_aliases(name, widget.field_label),
                kind=_KIND_BY_WIDGET_TYPE.get(widget.field_type, FieldKind.OTHER),
                current_value=str(widget.field_value or ""),
                page_index=page.number,
                xref=widget.xref,
                widget=widget,
            )
        )
    return fields


def _mask_text(form_field: FormField, font: ResolvedFont, config: RedactorConfig) -> str:
    token = make_mask(form_field.current_value, config.mask_char, config.form_fallback_length)
    if not font.supports_mask:
        token = to_ascii_mask(token, config.ascii_mask_char)
    if font.is_embedded:
        # painted onto the page when the form is flattened
        return token
    widget = form_field.widget
    widget.field_value = token
    widget.text_font = font.name
    widget.update()
    return token


def _mask_choice(form_field: FormField, font: ResolvedFont, config: RedactorConfig) -> str:
    # Option lists always get an ASCII mask.
    token = make_mask(form_field.current_value, config.ascii_mask_char, config.form_fallback_length)
    widget = form_field.widget
    widget.choice_values = [token]
    widget.field_value = token
    widget.update()
    return token


_MASKERS = {
    FieldKind.TEXT: _mask_text,
    FieldKind.CHOICE: _mask_choice,
}


def _paint_with_font(page: fitz.Page, xref: int, token: str, font: ResolvedFont) -> None:
    """Replace a masked widget by static text drawn with the embedded mask font."""
    widget = page.load_widget(xref)
    rect = fitz.Rect(widget.rect)
    fontsize = widget.text_fontsize or min(rect.height * 0.7, _MAX_FONT_SIZE)
    page.delete_widget(widget)

    text_length = fitz.Font(fontbuffer=font.buffer).text_length(token, fontsize=fontsize)
    room = rect.width - 2 * _TEXT_INSET
    if text_length > room > 0:
        fontsize *= room / text_length
    baseline = rect.y0 + (rect.height + fontsize * 0.7) / 2
    page.insert_font(fontname=font.name, fontbuffer=font.buffer)
    page.insert_text(
        fitz.Point(rect.x0 + _TEXT_INSET, baseline),
        token,
        fontname=font.name,
        fontsize=fontsize,
        color=(0, 0, 0),
    )


def redact_form_field(
    pdf_bytes: bytes,
    field_name: str,
    config: RedactorConfig = DEFAULT_CONFIG,
    font_loader: FontLoader | None = None,
) -> RedactResult:
    """Mask every AcroForm field whose name or alias contains *field_name*.

    The form is flattened afterwards so the masks become page content. A
    document without a form, or without a matching field, comes back
    byte-for-byte unchanged with ``found=False``.
    """
    original = bytes(pdf_bytes)
    needle = field_name.strip()
    with open_document(original) as doc:
        if not needle or not doc.is_form_pdf:
            logger.debug("no form structure or empty field name; nothing to mask")
            return RedactResult(data=original, found=False)

        font: ResolvedFont | None = None
        masked = 0
        for page in doc:
            deferred: list[tuple[FormField, str]] = []
            for form_field in page_fields(page):
                masker = _MASKERS.get(form_field.kind)
                if masker is None or not form_field.matches(needle):
                    continue
                if font is None:
                    font = resolve_mask_font(config, font_loader)
                try:
                    token = masker(form_field, font, config)
                except MUPDF_ERRORS as exc:
                    logger.warning("could not mask field %r: %s", form_field.primary_name, exc)
                    continue
                if form_field.kind is FieldKind.TEXT and font.is_embedded:
                    deferred.append((form_field, token))
                    continue
                logger.debug(
                    "masked %s field %r on page %d",
                    form_field.kind.value,
                    form_field.primary_name,
                    page.number,
                )
                masked += 1

            for form_field, token in deferred:
                try:
                    _paint_with_font(page, form_field.xref, token, font)
                except MUPDF_ERRORS as exc:
                    logger.warning("could not draw mask for field %r: %s", form_field.primary_name, exc)
                    continue
                logger.debug(
                    "painted mask over field %r on page %d", form_field.primary_name, page.number
                )
                masked += 1

        if not masked:
            return RedactResult(data=original, found=False)

        doc.bake(annots=False, widgets=True)
        return RedactResult(data=serialize(doc), found=True)
