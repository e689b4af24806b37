"""Command-line entry for inkbase."""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn

from . import run_server


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the inkbase CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="inkbase",
        description="inkbase - e-ink display layout and render server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m inkbase                        # Start server on default port (8080)
  python -m inkbase --port 3000            # Start server on port 3000
  python -m inkbase --host 127.0.0.1 --debug
        """,
    )

    parser.add_argument(
        "--host",
        metavar="HOST",
        help="Interface to bind (default: 0.0.0.0, or from INKBASE_WEB_HOST env var)",
    )
    parser.add_argument(
        "--port",
        type=int,
        metavar="PORT",
        help="Port number for the web server (default: 8080, or from INKBASE_WEB_PORT env var)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging for inkbase modules",
    )

    return parser


def main() -> NoReturn:
    """Run the inkbase CLI."""
    parser = _create_parser()
    args = parser.parse_args()
    run_server(args)
    sys.exit(0)


if __name__ == "__main__":
    main()
