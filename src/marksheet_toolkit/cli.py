"""
Module: cli

Purpose:
    `marksheet-report` command: load a saved sheet payload, validate it and
    print per-student totals with the sheet maxima.

Usage:
    marksheet-report sheet.json [--override 80] [--strict] [-v]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from marksheet_toolkit import __version__
from marksheet_toolkit.core.schemas.validator import ValidationError
from marksheet_toolkit.engine import build_report, format_report, read_payload, sheet_from_payload

logger = logging.getLogger("marksheet")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="marksheet-report",
        description="Print question totals and grand totals for an exam sheet",
    )
    parser.add_argument("sheet", type=Path, help="Path to the sheet JSON payload")
    parser.add_argument(
        "--override",
        type=float,
        default=None,
        help="Cap for the displayed maximum (defaults to max_total_override in the file)",
    )
    parser.add_argument("--strict", action="store_true", help="Validate against the full JSON schema")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s | %(message)s",
    )

    try:
        data = read_payload(args.sheet)
        sheet = sheet_from_payload(data, strict=args.strict)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except ValidationError as e:
        where = f" at {e.path}" if e.path else ""
        logger.error(f"Invalid sheet{where}: {e}")
        return 1

    override = args.override if args.override is not None else data.get("max_total_override")
    report = build_report(sheet, override)
    print(format_report(report))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
