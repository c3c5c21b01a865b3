"""
Project version bumping.

The project version lives in a ``VERSION`` file at the repository root and is
mirrored in a ``# Version:`` header comment of the Dockerfile and in the test
framework's version constant.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .versions import bump_version, validate_version

logger = logging.getLogger(__name__)

VERSION_FILE = "VERSION"

# (relative path, pattern, replacement template) kept in sync with VERSION
VERSION_MIRRORS: tuple[tuple[str, str, str], ...] = (
    ("Dockerfile", r"^# Version: .*$", "# Version: {version}"),
    (
        "tests/framework.sh",
        r"^readonly TEST_FRAMEWORK_VERSION=.*$",
        'readonly TEST_FRAMEWORK_VERSION="{version}"',
    ),
    ("tests/framework.sh", r"^# Version: .*$", "# Version: {version}"),
)


class ReleaseError(Exception):
    """Raised when the project version cannot be bumped."""
    pass


def read_project_version(project_root: Path) -> str:
    """Read and validate the VERSION file.

    Raises:
        ReleaseError: If the file is missing or holds an invalid version
    """
    path = project_root / VERSION_FILE
    if not path.is_file():
        raise ReleaseError(f"VERSION file not found: {path}")
    current = path.read_text(encoding="utf-8").strip()
    if not validate_version(current):
        raise ReleaseError(f"Invalid version in {path}: {current!r}")
    return current


def bump_project_version(project_root: Path, kind: str = "patch") -> tuple[str, str]:
    """Bump the project version and sync mirrored version strings.

    Args:
        project_root: Project root directory
        kind: "major", "minor" or "patch"

    Returns:
        Tuple of (previous_version, new_version)

    Raises:
        ReleaseError: If VERSION is missing, invalid, or not X.Y.Z
    """
    current = read_project_version(project_root)
    try:
        new = bump_version(current, kind)
    except ValueError as e:
        raise ReleaseError(str(e)) from e

    (project_root / VERSION_FILE).write_text(new + "\n", encoding="utf-8")
    logger.info(f"Updated VERSION: {current} → {new}")

    for rel_path, pattern, template in VERSION_MIRRORS:
        path = project_root / rel_path
        if not path.is_file():
            continue
        text = path.read_text(encoding="utf-8")
        replacement = template.format(version=new)
        updated = re.sub(pattern, lambda _m: replacement, text, flags=re.MULTILINE)
        if updated != text:
            path.write_text(updated, encoding="utf-8")
            logger.debug(f"Synced version in {rel_path}")

    return current, new
