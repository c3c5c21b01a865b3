"""
Text rendering of check results.
"""

import os
import sys
from typing import TextIO

from .tools import ToolRecord
from .versions import STATUS_CURRENT, STATUS_ERROR, STATUS_MANUAL, STATUS_OUTDATED


# None defers to CONTAINER_VERSIONS_COLOR / NO_COLOR at render time
USE_COLOR: bool | None = None

# ANSI color codes
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
BLUE = "\033[0;34m"
RED = "\033[0;31m"
RESET = "\033[0m"

ROW_FORMAT = "{:<20} {:<15} {:<15} {:<20} {}"

STATUS_MARKERS = {
    STATUS_CURRENT: ("✓ current", GREEN),
    STATUS_OUTDATED: ("⚠ outdated", YELLOW),
    STATUS_ERROR: ("✗ error", RED),
    STATUS_MANUAL: ("ℹ manual", BLUE),
}


def use_color() -> bool:
    """Whether ANSI colors are enabled for this run."""
    if USE_COLOR is not None:
        return USE_COLOR
    return os.environ.get("CONTAINER_VERSIONS_COLOR", "1") == "1" and "NO_COLOR" not in os.environ


def colorize(text: str, color: str) -> str:
    """Apply color to text.

    Returns:
        Colored text or plain text if colors disabled
    """
    if not use_color() or not text:
        return text
    return f"{color}{text}{RESET}"


def status_marker(status: str) -> str:
    """Colored status marker for the table's last column."""
    label, color = STATUS_MARKERS.get(status, ("unchecked", ""))
    if not color:
        return label
    return colorize(label, color)


def render_table(records: list[ToolRecord], out: TextIO | None = None) -> None:
    """Render results as a fixed-width table.

    Args:
        records: Checked tool records
        out: Output stream (stdout by default)
    """
    out = out or sys.stdout
    print("", file=out)
    print(colorize("=== Version Check Results ===", BLUE), file=out)
    print("", file=out)
    print(ROW_FORMAT.format("Tool", "Current", "Latest", "File", "Status"), file=out)
    print(ROW_FORMAT.format("----", "-------", "------", "----", "------"), file=out)

    for record in records:
        print(
            ROW_FORMAT.format(
                record.name,
                record.current_version,
                record.latest_version or "unknown",
                record.source_file,
                status_marker(record.status),
            ),
            file=out,
        )


def print_summary(summary: dict[str, int], out: TextIO | None = None) -> None:
    """Print the summary block and the outdated note.

    Args:
        summary: Counts from report.summarize
        out: Output stream (stdout by default)
    """
    out = out or sys.stdout
    print("", file=out)
    print(colorize("Summary:", BLUE), file=out)
    print(f"  Current: {colorize(str(summary['current']), GREEN)}", file=out)
    print(f"  Outdated: {colorize(str(summary['outdated']), YELLOW)}", file=out)
    print(f"  Errors: {colorize(str(summary['errors']), RED)}", file=out)
    print(f"  Manual Check: {colorize(str(summary['manual_check']), BLUE)}", file=out)

    if summary["outdated"] > 0:
        print("", file=out)
        print(colorize(f"Note: {summary['outdated']} tool(s) have newer versions available", YELLOW), file=out)
