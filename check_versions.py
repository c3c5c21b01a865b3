#!/usr/bin/env python3
"""
Container Versions - check pinned tool versions against upstream releases.

Scans the Dockerfile, feature scripts and CI workflow of a dev-container
project for version pins and reports which ones are outdated.

Usage:
    check_versions.py                  # Table on stdout, progress on stderr
    check_versions.py --json           # JSON report on stdout
    check_versions.py --no-cache       # Bypass the HTTP response cache

Exit status is 1 when any tool is outdated, 0 otherwise.
"""

import argparse
import os
import sys

from container_versions.catalog import all_tools
from container_versions.check import build_fetcher, run_check
from container_versions.common import load_env_file, resolve_project_root
from container_versions.config import ConfigError, load_config, validate_config
from container_versions.logging_config import setup_logging, get_logger
from container_versions.render import YELLOW, colorize, print_summary, render_table
from container_versions.report import build_report, dumps_report

DEBUG_MODE = os.environ.get("CONTAINER_VERSIONS_DEBUG", "0") == "1"


def non_negative_int(value: str) -> int:
    """argparse type for counts and durations."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return number


def positive_int(value: str) -> int:
    number = non_negative_int(value)
    if number == 0:
        raise argparse.ArgumentTypeError("must be greater than zero")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="check-versions",
        description="Check dev-container version pins against their latest upstream releases",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Environment: GITHUB_TOKEN raises the GitHub API rate limit.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Write a JSON report to stdout instead of the table",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Do not read or write the HTTP response cache",
    )
    parser.add_argument(
        "--cache-duration",
        type=non_negative_int,
        metavar="SECONDS",
        help="Cache time-to-live in seconds (default: 3600)",
    )
    parser.add_argument(
        "--timeout",
        type=positive_int,
        metavar="SECONDS",
        help="Per-request HTTP timeout in seconds (default: 10)",
    )
    parser.add_argument(
        "--project-root",
        metavar="DIR",
        help="Project root to scan (default: current directory)",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="Configuration file (YAML or JSON)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    return parser


def main(argv=None) -> int:
    """Main entry point for check-versions."""
    args = build_parser().parse_args(argv)

    setup_logging(verbose=args.verbose or DEBUG_MODE)
    logger = get_logger()

    project_root = resolve_project_root(args.project_root)
    load_env_file(project_root, verbose=args.verbose)

    try:
        config = load_config(project_root, args.config, verbose=args.verbose)
    except ConfigError as e:
        logger.error(str(e))
        return 1

    for warning in validate_config(config, {t.name for t in all_tools()}):
        logger.warning(warning)

    progress = None if args.json else sys.stderr

    if progress is not None and not os.environ.get("GITHUB_TOKEN"):
        print(
            colorize("Warning: GITHUB_TOKEN not set, GitHub API requests may be rate limited", YELLOW),
            file=progress,
        )

    fetcher = build_fetcher(
        config,
        use_cache=False if args.no_cache else None,
        cache_duration=args.cache_duration,
        timeout=args.timeout,
    )
    records = run_check(project_root, config, fetcher, progress=progress)
    logger.debug(f"{fetcher.requests} upstream request(s) made")

    report = build_report(records)

    if args.json:
        print(dumps_report(report))
        return report["exit_code"]

    if not records:
        print(f"No version pins found in {project_root}")
        return 0

    render_table(records)
    print_summary(report["summary"])
    return report["exit_code"]


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
