# main.py

"""Entry point for the dk_search headless CLI."""

import argparse
import asyncio
import logging
import sys

from dk_search.config.logging_config import setup_logging
from dk_search.config.settings import Settings

logger = logging.getLogger("dk_search.main")


def _positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="dk_search",
        description="Digikala product search with query expansion.",
    )
    parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Free-text shopping query (Persian, English or mixed).",
    )
    parser.add_argument(
        "-n",
        "--limit",
        type=_positive_int,
        default=Settings.DEFAULT_LIMIT,
        help=f"Maximum number of products (default: {Settings.DEFAULT_LIMIT}).",
    )
    parser.add_argument(
        "-t",
        "--term",
        default=None,
        dest="override_term",
        help="Search this exact term instead of expanding the query.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=_positive_int,
        default=None,
        dest="max_workers",
        help="Candidate terms fetched concurrently (default: "
        f"{Settings.MAX_CONCURRENT_FETCHES}).",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Run a connectivity health check on the site's endpoints.",
    )
    return parser


def _run_cli(args: argparse.Namespace) -> None:
    """Run headless CLI search and exit."""
    from dk_search.cli.runner import cli_search

    exit_code = asyncio.run(
        cli_search(
            query=args.query,
            limit=args.limit,
            override_term=args.override_term,
            output_format=args.output_format,
            max_workers=args.max_workers,
        )
    )
    sys.exit(exit_code)


def _run_health_check() -> None:
    """Run endpoint connectivity health check."""
    from dk_search.cli.runner import run_health_check

    exit_code = asyncio.run(run_health_check())
    sys.exit(exit_code)


def main() -> None:
    """Route to the health check or a headless search."""
    log_file = setup_logging()
    logger.info("dk_search starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    if args.health:
        _run_health_check()
    elif args.query is None:
        parser.error("a query is required unless --health is given")
    else:
        _run_cli(args)


if __name__ == "__main__":
    main()
