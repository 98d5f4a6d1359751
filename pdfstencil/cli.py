#!/usr/bin/env python3
"""
pdfstencil command line.

Usage:
    pdfstencil detect form.pdf --out fields.json
    pdfstencil fill form.pdf fields.json data.json --out filled.pdf
    pdfstencil export form.pdf fields.json --out fillable.pdf
    pdfstencil serve --port 8000
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from pydantic import TypeAdapter

from . import config
from .detect import detect_form_fields
from .engine import export_fillable, fill_pdf
from .errors import DocumentParseError
from .models import FieldStyle, PdfField

_fields_adapter = TypeAdapter(List[PdfField])


def load_fields(path: Path) -> List[PdfField]:
    return _fields_adapter.validate_json(path.read_text(encoding="utf-8"))


def load_data(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def cmd_detect(args) -> None:
    fields = detect_form_fields(Path(args.pdf).read_bytes())
    payload = json.dumps([f.model_dump(mode="json", by_alias=True, exclude_none=True) for f in fields], indent=2)
    if args.out:
        Path(args.out).write_text(payload, encoding="utf-8")
        print(f"✓ Wrote {len(fields)} detected field(s) → {args.out}")
    else:
        print(payload)


def cmd_fill(args) -> None:
    out = fill_pdf(
        Path(args.pdf).read_bytes(),
        load_fields(Path(args.fields)),
        load_data(Path(args.data)),
        flatten=not args.no_flatten,
        default_style=FieldStyle(font_size=args.font_size, color=args.color),
    )
    Path(args.out).write_bytes(out)
    print(f"✓ Saved filled PDF: {args.out}")


def cmd_export(args) -> None:
    out = export_fillable(Path(args.pdf).read_bytes(), load_fields(Path(args.fields)))
    Path(args.out).write_bytes(out)
    print(f"✓ Saved fillable PDF: {args.out}")


def cmd_serve(args) -> None:
    import uvicorn

    uvicorn.run("pdfstencil.api:app", host=args.host, port=args.port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pdfstencil", description="Fill PDFs from field templates")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("detect", help="List existing form widgets as template fields")
    p.add_argument("pdf")
    p.add_argument("--out", help="Where to write the fields JSON (default: stdout)")
    p.set_defaults(func=cmd_detect)

    p = sub.add_parser("fill", help="Draw data values onto the PDF")
    p.add_argument("pdf")
    p.add_argument("fields", help="Fields JSON")
    p.add_argument("data", help="Data JSON object (key -> value)")
    p.add_argument("--out", required=True)
    p.add_argument("--no-flatten", action="store_true", help="Keep existing form widgets interactive")
    p.add_argument("--font-size", type=float, default=config.DEFAULT_FONT_SIZE)
    p.add_argument("--color", default=config.DEFAULT_COLOR)
    p.set_defaults(func=cmd_fill)

    p = sub.add_parser("export", help="Write the fields as an interactive form")
    p.add_argument("pdf")
    p.add_argument("fields", help="Fields JSON")
    p.add_argument("--out", required=True)
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("serve", help="Run the HTTP API")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8000)
    p.set_defaults(func=cmd_serve)

    return parser


def main(argv=None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=config.LOG_LEVEL)
    try:
        args.func(args)
    except DocumentParseError as exc:
        sys.exit(f"Error: {exc}")


if __name__ == "__main__":
    main()
