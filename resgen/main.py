#!/usr/bin/env python3
"""resgen/main.py — CLI entry-point for the resource generator.

Usage examples
--------------
    # Generate kern_resources.cpp from a resource directory
    resgen Resources kern_resources.cpp

    # Same, with progress output and a fixed banner timestamp
    resgen -v Resources kern_resources.cpp --timestamp "2018.04.13 12:00:00"

    # Indent with four spaces instead of tabs
    resgen Resources kern_resources.cpp --indent 4

Exit codes
----------
    0   Success.
    1   A table or bundle could not be loaded or compiled.
    2   The output file could not be written.
    3   The tables are structurally inconsistent (a patch refers to a kext
        the kext table does not declare).

The module doubles as ``python -m resgen`` via ``resgen/__main__.py``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from termcolor import colored, cprint

from resgen import __version__
from resgen.compiler import ResourceGenerator
from resgen.config import TIMESTAMP_FORMAT, GeneratorConfig
from resgen.errors import (
    CompileError,
    LoadError,
    OutputError,
    ResgenError,
    StructuralInconsistencyError,
)

_log = logging.getLogger("resgen")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_OUTPUT: int = 2
EXIT_INCONSISTENT: int = 3


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``resgen`` logger.

    0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
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
    root = logging.getLogger("resgen")
    root.setLevel(level)
    root.addHandler(handler)


def _parse_timestamp(raw: str) -> datetime:
    try:
        return datetime.strptime(raw, TIMESTAMP_FORMAT)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected a timestamp like '2018.04.13 12:00:00', got {raw!r}"
        )


def _parse_indent(raw: str) -> str:
    """``tab`` or a number of spaces."""
    if raw == "tab":
        return "\t"
    try:
        width = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected 'tab' or a number, got {raw!r}")
    if width < 0:
        raise argparse.ArgumentTypeError("indent width must not be negative")
    return " " * width


def _fail(exc: ResgenError) -> None:
    cprint(f"Error: {exc}", "red", attrs=["bold"], file=sys.stderr)


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resgen",
        description=(
            "Compile an AppleALC resource directory (codec lookup, kext and\n"
            "controller tables plus codec bundles) into kern_resources.cpp."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )
    parser.add_argument(
        "resource_dir",
        metavar="<ResourceDirectory>",
        help="Directory holding CodecLookup.plist, Controllers.plist, "
             "Kexts.plist and the codec bundles.",
    )
    parser.add_argument(
        "output",
        metavar="<OutputPath>",
        help="Path of the C++ file to generate.",
    )
    parser.add_argument(
        "--indent",
        type=_parse_indent,
        default="tab",
        help="Indentation: 'tab' (default) or a number of spaces.",
    )
    parser.add_argument(
        "--timestamp",
        type=_parse_timestamp,
        default=None,
        help="Fixed banner timestamp (yyyy.mm.dd HH:MM:SS) for "
             "reproducible output.",
    )
    return parser


# ===========================================================================
# Main
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the resgen CLI and return its exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    config = GeneratorConfig(indent=args.indent, timestamp=args.timestamp)

    print(f"Working Directory: {args.resource_dir}")
    print(f"Output C++ file: {args.output}")

    resource_dir = Path(args.resource_dir)
    if not resource_dir.is_dir():
        cprint(
            f"Error: {resource_dir} is not a directory",
            "red", attrs=["bold"], file=sys.stderr,
        )
        return EXIT_ERROR

    try:
        generator = ResourceGenerator(resource_dir, config)
        generator.write(args.output)
    except StructuralInconsistencyError as exc:
        _fail(exc)
        return EXIT_INCONSISTENT
    except (LoadError, CompileError) as exc:
        _fail(exc)
        return EXIT_ERROR
    except OutputError as exc:
        _fail(exc)
        return EXIT_OUTPUT
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except Exception as exc:
        _log.error("Unhandled exception: %s", exc, exc_info=True)
        return EXIT_ERROR

    print(colored("Done", "green", attrs=["bold"]))
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
