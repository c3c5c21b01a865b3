"""
Version string normalization, validation, classification and bumping.

These rules decide whether a pinned version is current. They are kept
deliberately textual: a pin of ``22`` is satisfied by ``22.18.0`` but not by
``220.0.0``, and nothing here tries to interpret pre-release suffixes.
"""

from __future__ import annotations

import re
from typing import Iterable

from packaging import version as pkg_version

# Status values carried by ToolRecord and the JSON report
STATUS_UNCHECKED = "unchecked"
STATUS_CURRENT = "current"
STATUS_OUTDATED = "outdated"
STATUS_ERROR = "error"
STATUS_MANUAL = "manual"

STATUSES = (STATUS_UNCHECKED, STATUS_CURRENT, STATUS_OUTDATED, STATUS_ERROR, STATUS_MANUAL)

# Sentinel stored as latest_version when an upstream value is unusable
ERROR_SENTINEL = "error"
MANUAL_SENTINEL = "check manually"

_UNUSABLE = ("", "null", "undefined")

_VERSION_SHAPE = re.compile(r"[0-9]+(\.([0-9]+|[xX]))*([+-][0-9A-Za-z._+-]*)?|[0-9]{4}-[0-9]{2}-[0-9]{2}")
_LOOSE_VERSION_SHAPE = re.compile(r"[0-9]+[._][0-9]+[0-9A-Za-z._+-]*")
_SEMVER = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")

BUMP_KINDS = ("major", "minor", "patch")


def normalize_latest(value: str | None) -> str:
    """Map empty, ``null`` and ``undefined`` upstream values to the error sentinel."""
    if value is None:
        return ERROR_SENTINEL
    value = value.strip()
    if value in _UNUSABLE:
        return ERROR_SENTINEL
    return value


def version_matches(current: str, latest: str) -> bool:
    """Check whether a pinned version is satisfied by the latest upstream version.

    Exact matches count, and so does a partial pin followed by a dot
    boundary: ``"22"`` matches ``"22.18.0"`` but not ``"220.0.0"``.

    Args:
        current: Pinned version, possibly partial (e.g. "22", "3.12")
        latest: Latest upstream version (e.g. "22.18.0")

    Returns:
        True if the pin is up to date
    """
    if current == latest:
        return True
    return latest.startswith(current + ".")


def classify(current: str, latest: str | None) -> str:
    """Classify a pin as current, outdated or error.

    Args:
        current: Pinned version
        latest: Latest upstream version (raw, normalized here)

    Returns:
        One of STATUS_CURRENT, STATUS_OUTDATED, STATUS_ERROR
    """
    latest = normalize_latest(latest)
    if latest == ERROR_SENTINEL:
        return STATUS_ERROR
    if version_matches(current, latest):
        return STATUS_CURRENT
    return STATUS_OUTDATED


def validate_version(value: str | None) -> bool:
    """Check that a version string is safe to write into a pin.

    Accepts dotted numeric versions (with ``x`` wildcards and a ``+``/``-``
    suffix), ISO dates and ``N_N``/``N.N`` prefixed strings. Rejects
    sentinels, anything without digits and anything containing whitespace
    or shell metacharacters.
    """
    if value is None:
        return False
    if value in ("", "null", "undefined", ERROR_SENTINEL):
        return False
    if not re.search(r"[0-9]", value):
        return False
    if re.search(r"\s", value):
        return False
    if _VERSION_SHAPE.fullmatch(value):
        return True
    if _LOOSE_VERSION_SHAPE.fullmatch(value):
        return True
    return False


def strip_v_prefix(tag: str) -> str:
    """Remove a single leading ``v`` from a release tag."""
    tag = tag.strip()
    if tag.startswith("v"):
        return tag[1:]
    return tag


def _sort_key(value: str) -> tuple:
    try:
        return (1, pkg_version.parse(value), ())
    except pkg_version.InvalidVersion:
        parts = tuple(int(p) for p in re.findall(r"\d+", value))
        return (0, pkg_version.parse("0"), parts)


def max_version(candidates: Iterable[str]) -> str:
    """Return the highest version from candidates, or "" if there are none.

    PEP 440 parsing is used where possible; anything else falls back to
    comparing its numeric components.
    """
    values = [c for c in candidates if c]
    if not values:
        return ""
    return max(values, key=_sort_key)


def bump_version(current: str, kind: str) -> str:
    """Increment a semantic version.

    Args:
        current: Version in X.Y.Z form
        kind: "major", "minor" or "patch"

    Returns:
        The bumped version

    Raises:
        ValueError: If the kind is unknown or the version is not X.Y.Z
    """
    if kind not in BUMP_KINDS:
        raise ValueError(f"Invalid bump type: {kind}. Must be one of: {', '.join(BUMP_KINDS)}")

    match = _SEMVER.match(current.strip())
    if not match:
        raise ValueError(f"Not a semantic version: {current!r}")

    major, minor, patch = (int(p) for p in match.groups())
    if kind == "major":
        major, minor, patch = major + 1, 0, 0
    elif kind == "minor":
        minor, patch = minor + 1, 0
    else:
        patch += 1
    return f"{major}.{minor}.{patch}"
