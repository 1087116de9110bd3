#!/usr/bin/env python3
"""hamlx/main.py — command line for the HAML → Ruby extractor.

Usage examples
--------------
    # Print the synthetic Ruby script for a document tree dump
    python -m hamlx extract page.haml.sexp

    # Script plus line map as JSON, for a linter wrapper
    python -m hamlx extract page.haml.sexp --format json -o page.json

    # Each synthetic line prefixed with "synthetic:original"
    python -m hamlx extract page.haml.sexp --format annotated

    # Treat :erb filters as Ruby as well
    python -m hamlx extract page.haml.sexp --filter-type ruby --filter-type erb

Exit codes
----------
    0   Success.
    1   The tree could not be extracted (structural error).
    2   Infrastructure failure (missing file, unreadable tree, bad options).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

from hamlx import __version__
from hamlx.errors import HamlxError, StructuralError
from hamlx.extractor import ExtractorConfig, RubyExtractor
from hamlx.loader import load_file
from hamlx.source_map import ExtractionResult

_log = logging.getLogger("hamlx")

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


def _configure_logging(verbosity: int) -> None:
    """Set up the ``hamlx`` logger: 0 → WARNING, 1 → INFO, 2+ → DEBUG."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("hamlx")
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)


def _open_output(dest: Optional[str]) -> TextIO:
    """``None`` or ``"-"`` → stdout; otherwise open *dest* for writing."""
    if dest is None or dest == "-":
        return sys.stdout
    p = Path(dest).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return open(p, "w", encoding="utf-8")


def format_result(result: ExtractionResult, fmt: str) -> str:
    """Render *result* as ``text``, ``json`` or ``annotated``."""
    if fmt == "json":
        return json.dumps(result.to_json(), indent=2)
    if fmt == "annotated":
        width = len(str(len(result.line_map)))
        return "\n".join(
            f"{number:>{width}}:{result.line_map[number]:<4} {line}"
            for number, line in enumerate(result.lines, start=1)
        )
    return result.script


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hamlx",
        description="Extract lintable Ruby from HAML document trees.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    ext = sub.add_parser("extract", help="extract Ruby from a document tree dump")
    ext.add_argument("tree", help="S-expression document tree file")
    ext.add_argument(
        "--format", choices=("text", "json", "annotated"), default="text",
    )
    ext.add_argument("-o", "--output", default=None, help="output file (default: stdout)")
    ext.add_argument(
        "--filter-type", action="append", dest="filter_types", metavar="NAME",
        help="filter type holding Ruby (repeatable; default: ruby)",
    )
    ext.add_argument("--indent-width", type=int, default=2)
    ext.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="increase log verbosity (-v info, -vv debug)",
    )
    return parser


def _cmd_extract(args: argparse.Namespace) -> int:
    path = Path(args.tree).expanduser()
    if not path.exists():
        _log.error("tree file not found: %s", path)
        return EXIT_INFRA

    try:
        config = ExtractorConfig(indent_width=args.indent_width)
        if args.filter_types:
            config.host_filter_types = frozenset(args.filter_types)
        extractor = RubyExtractor(config, filename=str(path))
        tree = load_file(path)
        result = extractor.extract(tree)
    except (OSError, UnicodeDecodeError) as exc:
        _log.error("cannot read tree file %s: %s", path, exc)
        return EXIT_INFRA
    except StructuralError as exc:
        _log.error("%s", exc)
        return EXIT_ERROR
    except HamlxError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA

    _log.info("%s: %d synthetic line(s)", path, len(result.line_map))
    stream = _open_output(args.output)
    try:
        stream.write(format_result(result, args.format))
        stream.write("\n")
    finally:
        if stream is not sys.stdout:
            stream.close()
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    _configure_logging(args.verbose)
    return _cmd_extract(args)
