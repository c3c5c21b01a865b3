"""
Common utilities shared across container_versions modules.
"""

from __future__ import annotations

import os
from pathlib import Path


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log verbose message using structured logging.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or os.environ.get("CONTAINER_VERSIONS_DEBUG", "0") == "1":
        from .logging_config import get_logger
        get_logger().info(msg)


def resolve_project_root(explicit: str | None = None) -> Path:
    """
    Resolve the project root holding the Dockerfile and feature scripts.

    Precedence: explicit argument, CONTAINER_VERSIONS_PROJECT_ROOT,
    PROJECT_ROOT_OVERRIDE, current working directory.
    """
    for candidate in (
        explicit,
        os.environ.get("CONTAINER_VERSIONS_PROJECT_ROOT"),
        os.environ.get("PROJECT_ROOT_OVERRIDE"),
    ):
        if candidate:
            return Path(candidate).expanduser().resolve()
    return Path.cwd()


def parse_env_file(path: Path) -> dict[str, str]:
    """
    Parse a simple KEY=VALUE ``.env`` file.

    Comment lines and blank keys are ignored; one pair of surrounding double
    quotes is stripped from values.

    Args:
        path: Path to the .env file

    Returns:
        Mapping of variable names to values (empty if the file is missing)
    """
    values: dict[str, str] = {}
    if not path.is_file():
        return values

    for raw in path.read_text(encoding="utf-8").splitlines():
        key, sep, value = raw.partition("=")
        key = key.strip()
        if not sep or not key or key.startswith("#"):
            continue
        if key.startswith("export "):
            key = key[len("export "):].strip()
        if value.endswith('"'):
            value = value[:-1]
        if value.startswith('"'):
            value = value[1:]
        values[key] = value
    return values


def load_env_file(project_root: Path, verbose: bool = False) -> int:
    """
    Export variables from ``<project_root>/.env`` into the process environment.

    Variables already present in the environment win.

    Returns:
        Number of variables exported
    """
    env_path = project_root / ".env"
    exported = 0
    for key, value in parse_env_file(env_path).items():
        if key in os.environ:
            continue
        os.environ[key] = value
        exported += 1
    if exported:
        vlog(f"Loaded {exported} variable(s) from {env_path}", verbose)
    return exported
