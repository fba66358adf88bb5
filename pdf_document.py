from __future__ import annotations

import fitz  # PyMuPDF

from pdf_models import DecodeError

# MuPDF's own failures surface as FzErrorBase, which is not a RuntimeError.
MUPDF_ERRORS = (RuntimeError, ValueError, fitz.mupdf.FzErrorBase)


def open_document(pdf_bytes: bytes) -> fitz.Document:
    """Open a private, writable copy of *pdf_bytes*."""
    try:
        return fitz.open(stream=bytes(pdf_bytes), filetype="pdf")
    except (fitz.FileDataError, RuntimeError) as exc:
        raise DecodeError(f"cannot read PDF content: {exc}") from exc


def serialize(doc: fitz.Document) -> bytes:
    """Document bytes with compressed object streams disabled."""
    return doc.tobytes(garbage=3, deflate=True, use_objstms=False)
