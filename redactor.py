"""Extract the text of a PDF and redact the value of a named field.

Three ways to hide a field's value:
  1. text      – reconstruct plain text from positioned glyph runs
                 (pdf_extract) and mask the value in that text
                 (pdf_redact_text); the PDF itself is untouched
  2. pdf form  – mask matching AcroForm fields and flatten the form
                 (pdf_forms)
  3. pdf geometry
               – find "<field>:" labels by coordinate and paint an opaque
                 box over the rest of the row (pdf_geometry)

``pdf --mode auto`` runs 2 and falls back to 3 when no form field matches.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pdf_config import DEFAULT_CONFIG, RedactorConfig
from pdf_extract import extract_text
from pdf_models import DecodeError
from pdf_pipeline import COMMON_FIELDS, MODES, redact_pdf, redacted_filename
from pdf_redact_text import redact_field

EXIT_USAGE = 1
EXIT_DECODE = 2


def _read_pdf(pdf_path: str) -> bytes:
    path = Path(pdf_path)
    if not path.is_file():
        print(f"Error: file not found: {path}", file=sys.stderr)
        sys.exit(EXIT_USAGE)
    if path.suffix.lower() != ".pdf":
        print(f"Error: not a .pdf file: {path}", file=sys.stderr)
        sys.exit(EXIT_USAGE)
    return path.read_bytes()


def _config_from_args(args: argparse.Namespace) -> RedactorConfig:
    return DEFAULT_CONFIG.with_overrides(
        line_tolerance=args.tolerance,
        font_sources=tuple(args.font_source) if args.font_source else None,
    )


def cmd_extract(args: argparse.Namespace) -> int:
    print(extract_text(_read_pdf(args.pdf), _config_from_args(args)))
    return 0


def cmd_text(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    text = extract_text(_read_pdf(args.pdf), config)
    redacted = redact_field(text, args.field, config)
    if redacted == text:
        print(f'Warning: field "{args.field}" not found in the text', file=sys.stderr)
    print(redacted)
    return 0


def cmd_pdf(args: argparse.Namespace) -> int:
    data = _read_pdf(args.pdf)
    result = redact_pdf(data, args.field, mode=args.mode, config=_config_from_args(args))

    out = Path(args.output) if args.output else Path(args.pdf).with_name(redacted_filename(args.pdf))
    out.write_bytes(result.data)

    if result.found:
        print(f'Redacted field "{args.field}" -> {out}')
    else:
        print(f'Warning: field "{args.field}" not found; wrote unmodified copy to {out}', file=sys.stderr)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("pdf", help="Path to the PDF file")
    common.add_argument(
        "--tolerance",
        type=float, default=None, metavar="PT",
        help=f"Same-row tolerance in points (default: {DEFAULT_CONFIG.line_tolerance:g})",
    )
    common.add_argument(
        "--font-source",
        action="append", metavar="PATH_OR_URL",
        help="Font able to draw the block mask glyph; repeat to try several in order",
    )
    common.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log each matched field, font attempt and drawn box",
    )

    field_help = f"Field to redact, e.g. {', '.join(COMMON_FIELDS)}"

    parser = argparse.ArgumentParser(
        description="Extract PDF text and redact the value of a named field.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("extract", parents=[common], help="Print the reconstructed text")
    p.set_defaults(func=cmd_extract)

    p = sub.add_parser("text", parents=[common], help="Print the text with a field's value masked")
    p.add_argument("-f", "--field", required=True, help=field_help)
    p.set_defaults(func=cmd_text)

    p = sub.add_parser("pdf", parents=[common], help="Write a PDF with a field's value masked")
    p.add_argument("-f", "--field", required=True, help=field_help)
    p.add_argument(
        "-m", "--mode",
        choices=MODES, default="auto",
        help="form fields, label geometry, or form then geometry (default: auto)",
    )
    p.add_argument("-o", "--output", help="Output path (default: <name>__redacted.pdf)")
    p.set_defaults(func=cmd_pdf)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except DecodeError as exc:
        print(f"Error: cannot read PDF content ({exc})", file=sys.stderr)
        return EXIT_DECODE


if __name__ == "__main__":
    sys.exit(main())
