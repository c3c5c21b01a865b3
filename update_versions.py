#!/usr/bin/env python3
"""
Container Versions - rewrite outdated version pins.

Reads a check report (``--input``) or runs the check in-process, rewrites
the pins of every outdated tool, then commits the changes and releases a
patch version.

Usage:
    update_versions.py                       # Check, update, commit, bump
    update_versions.py --dry-run             # Show what would change
    update_versions.py --input report.json   # Use a saved check-versions --json report
    update_versions.py --no-commit           # Leave changes in the working tree
"""

import argparse
import os
import sys
from pathlib import Path

from container_versions.check import build_fetcher, run_check
from container_versions.common import load_env_file, resolve_project_root
from container_versions.config import ConfigError, load_config
from container_versions.git import GitError
from container_versions.logging_config import setup_logging, get_logger
from container_versions.release import ReleaseError
from container_versions.render import BLUE, GREEN, YELLOW, colorize
from container_versions.report import ReportError, load_report, report_records
from container_versions.update import apply_updates, commit_updates, outdated_updates

DEBUG_MODE = os.environ.get("CONTAINER_VERSIONS_DEBUG", "0") == "1"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="update-versions",
        description="Update outdated dev-container version pins",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be updated without modifying files",
    )
    parser.add_argument(
        "--no-commit",
        action="store_true",
        help="Do not commit the changes",
    )
    parser.add_argument(
        "--no-bump",
        action="store_true",
        help="Do not bump the project patch version after committing",
    )
    parser.add_argument(
        "--input",
        metavar="FILE",
        help="Read a check-versions --json report instead of running the check",
    )
    parser.add_argument(
        "--project-root",
        metavar="DIR",
        help="Project root to update (default: current directory)",
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
    """Main entry point for update-versions."""
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

    if args.input:
        try:
            records = report_records(load_report(Path(args.input)))
        except ReportError as e:
            logger.error(str(e))
            return 1
    else:
        print(colorize("Checking for version updates...", BLUE), file=sys.stderr)
        records = run_check(project_root, config, build_fetcher(config), progress=sys.stderr)

    updates = outdated_updates(records)
    if not updates:
        print(colorize("All tools are up to date!", GREEN))
        return 0

    print(colorize(f"Found {len(updates)} tool(s) to update:", BLUE))
    for update in updates:
        print(f"  - {update.tool}: {update.version_jump_description()}")

    if args.dry_run:
        print(colorize("\nDry run mode: no files will be modified", YELLOW))

    summary = apply_updates(updates, project_root, dry_run=args.dry_run)
    print(summary.summary())

    if args.dry_run:
        return 0

    if not summary.files_changed:
        print("No files were changed")
        return 0

    if args.no_commit or not config.update.auto_commit:
        print(colorize("Changes applied but not committed", YELLOW))
        return 0

    try:
        new_version = commit_updates(
            project_root,
            summary,
            bump=config.update.bump_version and not args.no_bump,
        )
    except (GitError, ReleaseError) as e:
        logger.error(f"Commit failed, changes left in the working tree: {e}")
        return 1

    print(colorize("Changes committed", GREEN))
    if new_version:
        print(colorize(f"Released version {new_version}", GREEN))
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
