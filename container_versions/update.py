"""
Update management: apply outdated versions from a check report to the
project tree, then commit and release.

Each outdated entry is dispatched on the tool registry to its updater. A
failing entry is skipped with a warning and the batch continues; nothing is
rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from . import git
from .catalog import get_tool
from .release import bump_project_version
from .tools import ToolRecord
from .updaters import UpdateSkipped
from .versions import STATUS_OUTDATED, validate_version

logger = logging.getLogger(__name__)

OUTCOME_UPDATED = "updated"
OUTCOME_PLANNED = "planned"
OUTCOME_UNCHANGED = "unchanged"
OUTCOME_SKIPPED = "skipped"

UPDATE_COMMIT_SUBJECT = "chore: Update dependency versions"
RELEASE_COMMIT_MESSAGE = (
    "chore: Release patch version with dependency updates\n\n"
    "Automated dependency updates applied."
)


@dataclass(frozen=True)
class UpdateRecord:
    """
    One outdated pin to rewrite.

    Attributes:
        tool: Tool name (registry key)
        current: Pinned version
        latest: Version to write
        file: File name reported by the check
    """
    tool: str
    current: str
    latest: str
    file: str

    @staticmethod
    def from_record(record: ToolRecord) -> UpdateRecord:
        return UpdateRecord(
            tool=record.name,
            current=record.current_version,
            latest=record.latest_version,
            file=record.source_file,
        )

    def version_jump_description(self) -> str:
        """Human-readable version jump description."""
        return f"{self.current} → {self.latest}"


@dataclass(frozen=True)
class UpdateResult:
    """
    Result of updating a single pin.

    Attributes:
        record: The requested update
        outcome: updated, planned (dry-run), unchanged or skipped
        message: Reason for a skip or a note for unchanged pins
        changed_paths: Files rewritten (or that would be, in dry-run mode)
    """
    record: UpdateRecord
    outcome: str
    message: str = ""
    changed_paths: tuple[Path, ...] = ()

    @property
    def changed(self) -> bool:
        return self.outcome in (OUTCOME_UPDATED, OUTCOME_PLANNED)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "tool": self.record.tool,
            "current": self.record.current,
            "latest": self.record.latest,
            "outcome": self.outcome,
            "message": self.message,
            "changed_paths": [str(p) for p in self.changed_paths],
        }


@dataclass(frozen=True)
class UpdateSummary:
    """
    Result of a batch update.

    Attributes:
        results: Per-pin results in report order
        dry_run: Whether the batch ran without writing
    """
    results: tuple[UpdateResult, ...]
    dry_run: bool = False

    def by_outcome(self, outcome: str) -> list[UpdateResult]:
        return [r for r in self.results if r.outcome == outcome]

    @property
    def changed(self) -> list[UpdateResult]:
        return [r for r in self.results if r.changed]

    @property
    def files_changed(self) -> bool:
        return any(r.changed_paths for r in self.changed)

    def summary(self) -> str:
        """Human-readable summary."""
        updated = len(self.by_outcome(OUTCOME_PLANNED if self.dry_run else OUTCOME_UPDATED))
        label = "Would update" if self.dry_run else "Updated"
        return (
            "\nUpdate Summary:\n"
            f"  {label}: {updated}\n"
            f"  Unchanged: {len(self.by_outcome(OUTCOME_UNCHANGED))}\n"
            f"  Skipped: {len(self.by_outcome(OUTCOME_SKIPPED))}\n"
        )


def outdated_updates(records: list[ToolRecord]) -> list[UpdateRecord]:
    """Only the records whose status is outdated."""
    return [UpdateRecord.from_record(r) for r in records if r.status == STATUS_OUTDATED]


def _skip(record: UpdateRecord, message: str) -> UpdateResult:
    logger.warning(f"Skipping {record.tool}: {message}")
    return UpdateResult(record=record, outcome=OUTCOME_SKIPPED, message=message)


def apply_update(record: UpdateRecord, project_root: Path, dry_run: bool = False) -> UpdateResult:
    """
    Rewrite one tool's pin to its latest version.

    Args:
        record: Outdated pin from the report
        project_root: Project root directory
        dry_run: Compute the change without writing it

    Returns:
        UpdateResult; failures are reported as skipped, never raised
    """
    if not validate_version(record.latest):
        return _skip(record, f"invalid version format: {record.latest!r}")

    if record.current == record.latest:
        return UpdateResult(record=record, outcome=OUTCOME_UNCHANGED, message="already at latest")

    definition = get_tool(record.tool)
    if definition is None:
        return _skip(record, "no update mapping for this tool")

    if record.file and record.file != definition.source_file:
        return _skip(record, f"file {record.file} does not match {definition.source_file}")

    if definition.updater.is_noop:
        logger.info(f"{record.tool}: {definition.updater.note}, nothing to rewrite")
        return UpdateResult(record=record, outcome=OUTCOME_UNCHANGED, message=definition.updater.note)

    try:
        changed = definition.apply_update(project_root, record.latest, dry_run=dry_run)
    except UpdateSkipped as e:
        return _skip(record, str(e))
    except OSError as e:
        return _skip(record, f"could not rewrite pin: {e}")

    if not changed:
        return UpdateResult(record=record, outcome=OUTCOME_UNCHANGED, message="pin already up to date")

    outcome = OUTCOME_PLANNED if dry_run else OUTCOME_UPDATED
    verb = "Would update" if dry_run else "Updated"
    logger.info(f"{verb} {record.tool}: {record.version_jump_description()}")
    return UpdateResult(record=record, outcome=outcome, changed_paths=tuple(changed))


def apply_updates(
    records: list[UpdateRecord],
    project_root: Path,
    dry_run: bool = False,
) -> UpdateSummary:
    """Apply every update in order; one failure never stops the batch."""
    results = tuple(apply_update(r, project_root, dry_run=dry_run) for r in records)
    return UpdateSummary(results=results, dry_run=dry_run)


def commit_message(results: list[UpdateResult]) -> str:
    """Commit message listing the updated tools."""
    lines = [UPDATE_COMMIT_SUBJECT, "", "Updated versions:"]
    for result in results:
        if result.outcome == OUTCOME_UPDATED:
            lines.append(f"- {result.record.tool}: {result.record.version_jump_description()}")
    return "\n".join(lines)


def commit_updates(project_root: Path, summary: UpdateSummary, bump: bool = True) -> str | None:
    """
    Commit rewritten pins and optionally release a patch version.

    Args:
        project_root: Project root (a git work tree)
        summary: Result of a non-dry-run batch
        bump: Bump the patch version and commit the release

    Returns:
        The new project version when bumped, else None

    Raises:
        git.GitError: If a git command fails
        release.ReleaseError: If the VERSION file cannot be bumped
    """
    git.stage_all(project_root)
    git.commit(project_root, commit_message(list(summary.results)))
    logger.info("Committed dependency updates")

    if not bump:
        return None

    _old, new = bump_project_version(project_root, "patch")
    git.stage_all(project_root)
    git.commit(project_root, RELEASE_COMMIT_MESSAGE)
    logger.info(f"Committed release {new}")
    return new
