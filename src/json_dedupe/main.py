#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from json_dedupe import __version__
from json_dedupe.app import deduplicate_inputs
from json_dedupe.config import configure_logging, level_for
from json_dedupe.domain.model import EMAIL_FIELD, ID_FIELD

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

_EPILOG = """\
examples:
  json-dedupe leads.json
  json-dedupe -o clean.json -l changes.json leads1.json leads2.json
  cat leads.json | json-dedupe -
  json-dedupe -v --dry-run leads.json

exit codes:
  0  success
  1  validation errors
  2  I/O, parse or configuration errors
  3  general errors
"""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="json-dedupe",
        description="Deduplicate JSON lead records on _id and email, keeping the newest entry",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "input_files",
        nargs="*",
        metavar="input-files",
        help="JSON files containing a 'leads' array ('-' reads stdin)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        help="Output file name (default: <input>_deduplicated_<timestamp>.json)",
    )
    parser.add_argument(
        "-l",
        "--log-file",
        type=str,
        help="Change log file name (default: <output>_changes.log.json)",
    )
    parser.add_argument(
        "-t",
        "--timestamp-key",
        type=str,
        default=None,
        help="Field holding the entry date (defaults to config, usually entryDate)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only report problems")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Process the input without writing any files",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = _build_parser()
    args = parser.parse_args(list(argv))

    if args.verbose and args.quiet:
        parser.error("Cannot use both --verbose and --quiet options")
    if args.timestamp_key is not None:
        if not args.timestamp_key.strip():
            parser.error("Timestamp key cannot be empty")
        if args.timestamp_key in (ID_FIELD, EMAIL_FIELD):
            parser.error(f"Timestamp key cannot be {args.timestamp_key}")
    if not args.input_files:
        if sys.stdin.isatty():
            parser.error("No input files specified. Use --help for usage information.")
        args.input_files = ["-"]
    return args


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    level = level_for(verbose=parsed_args.verbose, quiet=parsed_args.quiet)
    configure_logging(level=level, force=True)

    result = deduplicate_inputs(
        parsed_args.input_files,
        output_file=parsed_args.output,
        log_file=parsed_args.log_file,
        timestamp_key=parsed_args.timestamp_key,
        dry_run=parsed_args.dry_run,
    )

    if result.success:
        if not parsed_args.quiet:
            print(result.message)
    else:
        print(f"Error: {result.message}", file=sys.stderr)
    sys.exit(int(result.exit_code))


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
