"""
Targeted text substitutions that rewrite version pins.

Each tool owns an ``Updater``: a list of regex substitutions over files in
the project tree. The contract is narrow:

- only the pin lines named by the patterns are touched;
- applying the same version twice leaves the file unchanged;
- a pattern that matches nothing is a no-op, reported to the caller.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


class UpdateSkipped(Exception):
    """Raised when an update cannot be applied (missing file, no matching pin)."""
    pass


@dataclass(frozen=True)
class Substitution:
    """One regex rewrite in one file.

    Attributes:
        path: File path relative to the project root
        pattern: Regular expression (compiled with re.MULTILINE)
        template: Replacement text; ``{version}`` is replaced by the new version
        optional: Missing file or no match is silently ignored
    """

    path: str
    pattern: str
    template: str
    optional: bool = False

    def apply(self, text: str, version: str) -> tuple[str, int]:
        """Apply to text, returning the new text and the number of matches."""
        replacement = self.template.replace("{version}", version)
        return re.subn(self.pattern, lambda _m: replacement, text, flags=re.MULTILINE)


@dataclass(frozen=True)
class UpdatePlan:
    """Outcome of computing an update.

    Attributes:
        changes: New content per file, for files whose content changes
        matched: Whether every required substitution matched
    """

    changes: dict[Path, str] = field(default_factory=dict)
    matched: bool = True


@dataclass(frozen=True)
class Updater:
    """Ordered substitutions applied for one tool."""

    substitutions: tuple[Substitution, ...] = ()
    note: str = ""

    @property
    def is_noop(self) -> bool:
        return not self.substitutions

    def plan(self, project_root: Path, version: str) -> UpdatePlan:
        """Compute the rewritten file contents without touching the disk.

        Raises:
            UpdateSkipped: If a required file is missing or no required
                substitution matches
        """
        contents: dict[Path, str] = {}
        originals: dict[Path, str] = {}
        required_matches = 0
        required_total = 0

        for sub in self.substitutions:
            file_path = project_root / sub.path
            if file_path not in contents:
                if not file_path.is_file():
                    if sub.optional:
                        continue
                    raise UpdateSkipped(f"file not found: {sub.path}")
                try:
                    originals[file_path] = file_path.read_text(encoding="utf-8")
                except UnicodeDecodeError as e:
                    raise UpdateSkipped(f"{sub.path} is not valid UTF-8: {e}") from e
                contents[file_path] = originals[file_path]

            new_text, count = sub.apply(contents[file_path], version)
            contents[file_path] = new_text
            if not sub.optional:
                required_total += 1
                required_matches += count

        if required_total and required_matches == 0:
            raise UpdateSkipped("no version pin matched in " + ", ".join(
                sorted({s.path for s in self.substitutions if not s.optional})
            ))

        changes = {p: text for p, text in contents.items() if text != originals[p]}
        return UpdatePlan(changes=changes)

    def apply(self, project_root: Path, version: str, dry_run: bool = False) -> list[Path]:
        """Rewrite the pins to a new version.

        Args:
            project_root: Project root directory
            version: New version string (already validated)
            dry_run: Compute changes without writing them

        Returns:
            Paths whose content changed (or would change in dry-run mode)

        Raises:
            UpdateSkipped: See ``plan``
        """
        plan = self.plan(project_root, version)
        if not dry_run:
            for file_path, text in plan.changes.items():
                file_path.write_text(text, encoding="utf-8")
                logger.debug(f"Rewrote {file_path}")
        return sorted(plan.changes)


def dockerfile_arg(name: str, *extra: Substitution, path: str = "Dockerfile") -> Updater:
    """Replace ``ARG NAME=...`` lines in the Dockerfile."""
    return Updater(
        substitutions=(
            Substitution(path, rf"^ARG {re.escape(name)}=.*$", f"ARG {name}={{version}}"),
        ) + extra,
    )


def default_expansion(path: str, name: str, optional: bool = False) -> Substitution:
    """Rewrite the default inside ``NAME="${NAME:-...}"``."""
    n = re.escape(name)
    return Substitution(
        path,
        rf'{n}="\$\{{{n}:-[^}}]*\}}"',
        f'{name}="${{{name}:-{{version}}}}"',
        optional=optional,
    )


def shell_var(path: str, name: str, *extra: Substitution, plain_anchored: bool = True) -> Updater:
    """Rewrite a shell variable pin in a feature or base script.

    A ``${NAME:-default}`` form keeps its shape with the new default; a
    plain ``NAME="1.2.3"`` at line start becomes ``NAME="${NAME:-<new>}"``.
    With ``plain_anchored=False`` the plain form may be indented and keeps
    its plain shape.
    """
    n = re.escape(name)
    if plain_anchored:
        plain = Substitution(path, rf'^{n}="[0-9][^"]*"', f'{name}="${{{name}:-{{version}}}}"')
    else:
        plain = Substitution(path, rf'{n}="[0-9][^"]*"', f'{name}="{{version}}"')
    return Updater(substitutions=(default_expansion(path, name), plain) + extra)


def workflow_action(path: str, action: str) -> Updater:
    """Rewrite ``uses: owner/action@X.Y.Z`` references in a workflow file."""
    return Updater(
        substitutions=(
            Substitution(path, rf"uses: {re.escape(action)}@[0-9.]*", f"uses: {action}@{{version}}"),
        ),
    )


def noop(note: str) -> Updater:
    """Updater for pins that are informational only."""
    return Updater(note=note)
