"""Command-line entry point: ``imagery-index build | dist | stats``.

This module is purely the wiring layer between the command line and the
orchestrators: it loads configuration, configures logging, runs one
command and turns any ``CatalogError`` into an error report and exit
status 1.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Sequence
from typing import Any

from imagery_index import __version__
from imagery_index.core.config import IndexConfig, validate_config
from imagery_index.core.exceptions import CatalogError
from imagery_index.orchestrators.build import run_build
from imagery_index.orchestrators.dist import run_dist
from imagery_index.orchestrators.stats import run_stats

logger = logging.getLogger("imagery_index.cli")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s | %(message)s"

LOCATION_HELP = (
    'locationSet refs may be region ids from features/ ("togo.geojson"), '
    'the whole world ("001", "Q2", "world") or points [lon, lat, radius_km]. '
    'Country and region codes such as "de" or "Q183" are not resolved and fail '
    "the build with LOCATION_UNRESOLVABLE."
)

COMMANDS: dict[str, Callable[[IndexConfig], Any]] = {
    "build": run_build,
    "dist": run_dist,
    "stats": run_stats,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imagery-index",
        description="Validate, canonicalize and publish the imagery index.",
        epilog=LOCATION_HELP,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--root",
        default=None,
        help="Project root containing features/ and sources/ (default: IMAGERY_INDEX_ROOT or .).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("build", help="Validate and canonicalize records, write dist/ and i18n/.")
    subparsers.add_parser("dist", help="Write minified, combined and legacy artifacts.")
    subparsers.add_parser("stats", help="Print input file sizes.")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def report_error(exc: CatalogError) -> None:
    """Print ``Error - <message> in:`` followed by the file and any detail lines."""
    print(f"Error - {exc.message} in:" if exc.path else f"Error - {exc.message}", file=sys.stderr)
    details = exc.details()
    if exc.path and exc.path not in details:
        print(f"  {exc.path}", file=sys.stderr)
    for line in details:
        print(f"  {line}", file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    """Run one command and return the process exit status."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = IndexConfig.from_env()
        if args.root is not None:
            config = config.with_root(args.root)
            validate_config(config)
        COMMANDS[args.command](config)
    except CatalogError as exc:
        logger.debug("Command failed | command=%s | error=%s", args.command, exc.to_error_dict())
        report_error(exc)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
