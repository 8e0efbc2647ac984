"""Command-line entrypoint: render an invoice JSON file to PDF."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, List, Optional

from .rendering import InvoiceRenderError, RenderOptions, render_invoice_pdf


def _load_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m invoice_pdf",
        description="Render an invoice JSON document to a single-page PDF.",
    )
    parser.add_argument("invoice", help="Path to the invoice JSON file")
    parser.add_argument("-o", "--output", help="Output PDF path (default: <invoice>.pdf)")
    parser.add_argument("--settings", help="Path to a print settings JSON file")
    parser.add_argument("--logo-url", help="Logo URL or local path, overrides the print settings")
    parser.add_argument("--invoice-number", help="Override the invoice number")
    parser.add_argument("--invoice-date", help="Override the invoice date")
    parser.add_argument("--due-date", help="Override the due date")
    parser.add_argument(
        "--base64",
        action="store_true",
        help="Write the PDF as base64 text to stdout instead of a file",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        invoice = _load_json(args.invoice)
        settings = _load_json(args.settings) if args.settings else None
    except (OSError, ValueError) as exc:
        print(f"Could not read input: {exc}", file=sys.stderr)
        return 1
    if not isinstance(invoice, dict):
        print("Invoice JSON must be an object", file=sys.stderr)
        return 1

    options = RenderOptions(
        invoice_number=args.invoice_number,
        invoice_date=args.invoice_date,
        due_date=args.due_date,
        print_settings=settings if isinstance(settings, dict) else None,
        logo_url=args.logo_url,
    )
    try:
        result = render_invoice_pdf(invoice, options)
    except InvoiceRenderError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    if args.base64:
        sys.stdout.write(result.base64 + "\n")
        return 0

    output = args.output or os.path.splitext(args.invoice)[0] + ".pdf"
    try:
        with open(output, "wb") as fh:
            fh.write(result.pdf_bytes)
    except OSError as exc:
        print(f"Could not write {output}: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
