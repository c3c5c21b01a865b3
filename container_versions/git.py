"""
Thin wrapper around the ``git`` command line.

git is an external collaborator: every operation is a blocking subprocess
call in the project root and failures surface as ``GitError``.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Raised when a git command fails."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str = ""):
        self.command = ["git", *args]
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"{' '.join(self.command)} exited with {returncode}{detail}")


def run_git(args: Sequence[str], cwd: Path, timeout: int = 60) -> str:
    """Run a git command and return its stdout.

    Raises:
        GitError: On a non-zero exit, a missing git binary or a timeout
    """
    logger.debug(f"git {' '.join(args)} (in {cwd})")
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise GitError(args, 127, str(e)) from e
    except subprocess.TimeoutExpired as e:
        raise GitError(args, 124, f"timed out after {timeout}s") from e

    if result.returncode != 0:
        raise GitError(args, result.returncode, result.stderr)
    return result.stdout


def stage_all(cwd: Path) -> None:
    """``git add -A``"""
    run_git(["add", "-A"], cwd)


def commit(cwd: Path, message: str) -> None:
    """Create a commit with the given message."""
    run_git(["commit", "-m", message], cwd)
