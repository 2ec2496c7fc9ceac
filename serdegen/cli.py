"""Command-line entry point of serdegen."""

from __future__ import annotations

import argparse
import logging
import sys

from .codegen.cli_integration import add_codegen_args, handle_codegen_command
from .logging_config import configure_logging, get_logger

logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser of the ``serdegen`` command."""
    parser = argparse.ArgumentParser(
        prog="serdegen",
        description="Generate types and binary serialization code from a format registry",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  serdegen registry.yaml --language python --output generated.py
  serdegen registry.yaml -l rust --encoding canonical --install-dir my_crate --with-runtime
  serdegen --list-languages
  serdegen --language-info cpp
        """.strip(),
    )
    add_codegen_args(parser)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the command line.

    Args:
        argv: Arguments without the program name (default: ``sys.argv[1:]``).

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
    logger.debug("Parsed arguments: %s", args)

    return handle_codegen_command(args)


if __name__ == "__main__":
    sys.exit(main())
