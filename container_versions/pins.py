"""
Version pin discovery.

Pins live in three shapes:

- Dockerfile build args:        ``ARG PYTHON_VERSION=3.13.7``
- shell variable assignments:   ``LAZYGIT_VERSION="0.56.0"`` or
                                ``UV_VERSION="${UV_VERSION:-0.8.4}"``
- GitHub workflow actions:      ``uses: aquasecurity/trivy-action@0.28.0``
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

KIND_DOCKERFILE_ARG = "dockerfile_arg"
KIND_SHELL_VAR = "shell_var"
KIND_WORKFLOW_ACTION = "workflow_action"

_PARAM_EXPANSION = re.compile(r"\$\{[^:]*:-([^}]+)\}")


def extract_version_from_line(line: str) -> str:
    """Extract the pinned value from a variable assignment line.

    Handles plain assignments (``VAR="1.2.3"``) and parameter expansion
    defaults (``VAR="${VAR:-1.2.3}"``). Only the text between the first and
    second ``=`` is considered, with double quotes removed.
    """
    if "=" not in line:
        return ""
    value = line.split("=")[1].replace('"', "").strip()
    match = _PARAM_EXPANSION.search(value)
    if match:
        value = match.group(1)
    return value


@dataclass(frozen=True)
class PinSpec:
    """Where a tool's version is pinned and how to read it.

    Attributes:
        kind: One of KIND_DOCKERFILE_ARG, KIND_SHELL_VAR, KIND_WORKFLOW_ACTION
        path: File path relative to the project root
        name: ARG/variable name, or "owner/action" for workflow actions
        anchored: Shell variables only; require the assignment at line start
        ignore: Values that mean "not pinned" (e.g. "latest", "master")
    """

    kind: str
    path: str
    name: str
    anchored: bool = True
    ignore: tuple[str, ...] = ()

    def _pattern(self) -> re.Pattern[str]:
        if self.kind == KIND_DOCKERFILE_ARG:
            return re.compile(rf"^ARG {re.escape(self.name)}=.*$", re.MULTILINE)
        if self.kind == KIND_SHELL_VAR:
            prefix = "^" if self.anchored else "^.*?"
            return re.compile(rf"{prefix}{re.escape(self.name)}=.*$", re.MULTILINE)
        if self.kind == KIND_WORKFLOW_ACTION:
            return re.compile(rf"uses: {re.escape(self.name)}@(.*)$", re.MULTILINE)
        raise ValueError(f"Unknown pin kind: {self.kind}")

    def parse(self, text: str) -> str:
        """Extract the pinned version from file content ("" when absent)."""
        match = self._pattern().search(text)
        if not match:
            return ""

        if self.kind == KIND_DOCKERFILE_ARG:
            value = match.group(0).split("=")[1].replace('"', "").strip()
        elif self.kind == KIND_SHELL_VAR:
            line = match.group(0)
            # Unanchored lookups match the variable anywhere on the line
            line = line[line.index(f"{self.name}="):]
            value = extract_version_from_line(line)
        else:
            value = match.group(1).replace(" ", "").strip()

        if value in self.ignore:
            return ""
        return value

    def read(self, project_root: Path) -> str:
        """Read the pinned version from the project tree ("" when absent)."""
        file_path = project_root / self.path
        if not file_path.is_file():
            logger.debug(f"Pin file not found: {file_path}")
            return ""
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {file_path}: {e}")
            return ""
        return self.parse(text)
