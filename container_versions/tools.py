"""
Tool records produced by pin discovery and consumed by the reporter.

A run holds an ordered list of ``ToolRecord`` instances, one per discovered
version pin. Each record is created ``unchecked`` and mutated exactly once
when its upstream check completes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .versions import (
    MANUAL_SENTINEL,
    STATUS_MANUAL,
    STATUS_UNCHECKED,
    STATUSES,
    classify,
    normalize_latest,
)


@dataclass
class ToolRecord:
    """A discovered version pin and the result of its upstream check."""

    name: str
    current_version: str
    source_file: str
    latest_version: str = ""
    status: str = STATUS_UNCHECKED

    def __post_init__(self):
        if self.status not in STATUSES:
            raise ValueError(f"Invalid status for {self.name}: {self.status}")

    def set_latest(self, latest: str | None) -> str:
        """Record the upstream version and classify the pin.

        Unusable values ("", "null", "undefined") are stored as "error".

        Returns:
            The new status
        """
        latest = normalize_latest(latest)
        self.latest_version = latest
        self.status = classify(self.current_version, latest)
        return self.status

    def mark_manual(self) -> None:
        """Flag the pin as needing a manual upstream check."""
        self.latest_version = MANUAL_SENTINEL
        self.status = STATUS_MANUAL

    def to_dict(self) -> dict[str, str]:
        """Convert to the report's per-tool JSON object."""
        return {
            "tool": self.name,
            "current": self.current_version,
            "latest": self.latest_version,
            "file": self.source_file,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolRecord":
        """Create from a report entry."""
        return cls(
            name=str(data.get("tool", "")),
            current_version=str(data.get("current", "")),
            source_file=str(data.get("file", "")),
            latest_version=str(data.get("latest", "")),
            status=str(data.get("status", STATUS_UNCHECKED)),
        )


def find_record(records: list[ToolRecord], name: str) -> ToolRecord | None:
    """Look up a record by tool name."""
    for record in records:
        if record.name == name:
            return record
    return None
