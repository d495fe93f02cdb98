#!/usr/bin/env python3
"""Convert a Word "Save as Web Page" export into normalized HTML.

Citation fields embedded by the reference manager are replaced with
``<span class="cite" data-info="...">`` markers, and each cited item's
bibliographic data is written once to ``<build>/static/itemdata/<id>.json``.

Usage::

    python3 scripts/convert_document.py sample.html
    python3 scripts/convert_document.py sample.html \
        --juris-maps ../JM/jurism/juris-maps --build-dir build --verbose

Environment:
    IB_JURIS_MAPS_DIR  default for --juris-maps
    IB_BUILD_DIR       default for --build-dir
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from ibconvert.config import DEFAULT_BUILD_DIR, DEFAULT_JURIS_MAPS_DIR, DEFAULT_TITLE, ConvertConfig
from ibconvert.converter import convert_file, render_document
from ibconvert.errors import ConversionError

log = logging.getLogger("convert_document")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert Word HTML export to normalized HTML with citation records",
    )
    parser.add_argument("input", type=Path, help="Word HTML export (e.g. sample.html)")
    parser.add_argument(
        "--juris-maps", type=Path,
        default=Path(os.environ.get("IB_JURIS_MAPS_DIR") or DEFAULT_JURIS_MAPS_DIR),
        help="Directory holding juris-<code>-map.json files",
    )
    parser.add_argument(
        "--build-dir", type=Path,
        default=Path(os.environ.get("IB_BUILD_DIR") or DEFAULT_BUILD_DIR),
        help="Output directory (default: build)",
    )
    parser.add_argument("--title", default=DEFAULT_TITLE, help="Output document title")
    parser.add_argument(
        "--compact", action="store_true",
        help="Write unindented HTML and JSON",
    )
    parser.add_argument(
        "--print", dest="print_output", action="store_true",
        help="Also print the converted document to stdout",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def config_from_args(args: argparse.Namespace) -> ConvertConfig:
    return ConvertConfig(
        juris_maps_dir=args.juris_maps,
        build_dir=args.build_dir,
        title=args.title,
        pretty=not args.compact,
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    if not args.input.exists():
        print(f"Error: input not found: {args.input}", file=sys.stderr)
        return 1

    config = config_from_args(args)
    try:
        result = convert_file(args.input, config)
    except ConversionError as exc:
        log.error("Conversion failed: %s", exc)
        return 1
    except OSError as exc:
        log.error("Cannot read or write %s: %s", exc.filename or args.input, exc)
        return 1

    if args.print_output:
        print(render_document(result.document, pretty=config.pretty))

    print(
        f"Generated files are at {config.output_path} and under {config.itemdata_dir}",
        file=sys.stderr,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
