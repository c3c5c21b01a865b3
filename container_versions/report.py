"""
JSON report produced by check-versions and consumed by update-versions.

Document shape::

    {
      "timestamp": "2025-01-01T12:00:00+00:00",
      "tools": [{"tool", "current", "latest", "file", "status"}, ...],
      "summary": {"total", "current", "outdated", "errors", "manual_check"},
      "exit_code": 0 | 1
    }
"""

from __future__ import annotations

import datetime
import json
import logging
from pathlib import Path
from typing import Any, Iterable

from .tools import ToolRecord
from .versions import STATUS_CURRENT, STATUS_ERROR, STATUS_MANUAL, STATUS_OUTDATED

logger = logging.getLogger(__name__)


class ReportError(Exception):
    """Raised when a report document cannot be read."""
    pass


def now_timestamp() -> str:
    """Local time, second precision, with UTC offset."""
    return datetime.datetime.now().astimezone().replace(microsecond=0).isoformat()


def summarize(records: Iterable[ToolRecord]) -> dict[str, int]:
    """Count records per status."""
    records = list(records)
    return {
        "total": len(records),
        "current": sum(1 for r in records if r.status == STATUS_CURRENT),
        "outdated": sum(1 for r in records if r.status == STATUS_OUTDATED),
        "errors": sum(1 for r in records if r.status == STATUS_ERROR),
        "manual_check": sum(1 for r in records if r.status == STATUS_MANUAL),
    }


def exit_code_for(summary: dict[str, int]) -> int:
    """1 when anything is outdated, else 0."""
    return 1 if summary.get("outdated", 0) > 0 else 0


def build_report(records: list[ToolRecord], timestamp: str | None = None) -> dict[str, Any]:
    """Build the report document for a finished run."""
    summary = summarize(records)
    return {
        "timestamp": timestamp or now_timestamp(),
        "tools": [r.to_dict() for r in records],
        "summary": summary,
        "exit_code": exit_code_for(summary),
    }


def dumps_report(report: dict[str, Any]) -> str:
    """Serialize a report for stdout."""
    return json.dumps(report, indent=2, ensure_ascii=False)


def parse_report(text: str) -> dict[str, Any]:
    """Parse and sanity-check a report document.

    Raises:
        ReportError: If the text is not a report
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ReportError(f"Invalid report JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("tools"), list):
        raise ReportError("Report must be an object with a 'tools' array")
    return data


def load_report(path: Path) -> dict[str, Any]:
    """Read a report document from a file.

    Raises:
        ReportError: If the file is missing, unreadable or malformed
    """
    if not path.is_file():
        raise ReportError(f"Input file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ReportError(f"Could not read {path}: {e}") from e
    return parse_report(text)


def report_records(report: dict[str, Any]) -> list[ToolRecord]:
    """Tool records from a report document (malformed entries are dropped)."""
    records = []
    for entry in report.get("tools", []):
        if not isinstance(entry, dict) or not entry.get("tool"):
            continue
        try:
            records.append(ToolRecord.from_dict(entry))
        except ValueError as e:
            logger.debug(f"Dropping report entry {entry.get('tool')}: {e}")
    return records
