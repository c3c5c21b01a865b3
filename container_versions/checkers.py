"""
Per-tool upstream version extraction.

A checker is a callable ``(fetcher, current) -> str`` returning the raw
latest version for one tool. Checkers never raise; an empty string (or
"null") means the upstream could not be read, and the record is later
classified as ``error``. Where a secondary endpoint exists it is tried
before giving up.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from .collectors import (
    Fetcher,
    collect_github_latest,
    collect_github_releases,
    collect_gitlab_latest,
    collect_maven_central,
)
from .versions import max_version, strip_v_prefix

logger = logging.getLogger(__name__)

Checker = Callable[[Fetcher, str], str]

_SEMVER_TAG = re.compile(r"^[0-9]+\.[0-9]+\.[0-9]+$")
_TRIPLE = re.compile(r"[0-9]+\.[0-9]+\.[0-9]+")


def _unusable(value: str) -> bool:
    return value in ("", "null")


def github_release(repo: str, strip_v: bool = True) -> Checker:
    """Checker reading ``tag_name`` of a GitHub repository's latest release."""

    def check(fetcher: Fetcher, current: str) -> str:
        tag = collect_github_latest(fetcher, repo)
        if _unusable(tag) or not strip_v:
            return tag
        return strip_v_prefix(tag)

    check.__name__ = f"github_release[{repo}]"
    return check


def gitlab_release(project_id: str) -> Checker:
    """Checker reading the newest release tag of a GitLab project."""

    def check(fetcher: Fetcher, current: str) -> str:
        tag = collect_gitlab_latest(fetcher, project_id)
        if _unusable(tag):
            return tag
        return strip_v_prefix(tag)

    check.__name__ = f"gitlab_release[{project_id}]"
    return check


def maven_central(group_id: str, artifact_id: str) -> Checker:
    """Checker reading ``latestVersion`` from Maven Central search."""

    def check(fetcher: Fetcher, current: str) -> str:
        return collect_maven_central(fetcher, group_id, artifact_id)

    check.__name__ = f"maven_central[{group_id}:{artifact_id}]"
    return check


def check_python(fetcher: Fetcher, current: str) -> str:
    """Newest Python 3 release from endoflife.date."""
    data = fetcher.fetch_json("https://endoflife.date/api/python.json")
    if not isinstance(data, list):
        return ""
    cycles = [c for c in data if isinstance(c, dict) and str(c.get("cycle", "")).startswith("3.")]
    if not cycles:
        return "null"
    return str(cycles[0].get("latest") or "null")


def check_nodejs(fetcher: Fetcher, current: str) -> str:
    """Newest Node.js LTS, restricted to the pinned major when only a major is pinned."""
    data = fetcher.fetch_json("https://nodejs.org/dist/index.json")
    if not isinstance(data, list):
        return ""
    releases = [r for r in data if isinstance(r, dict) and isinstance(r.get("version"), str)]

    def first(candidates: list[dict]) -> str:
        if not candidates:
            return ""
        return strip_v_prefix(candidates[0]["version"])

    if re.fullmatch(r"[0-9]+", current):
        in_major = [r for r in releases if r["version"].startswith(f"v{current}.")]
        latest = first([r for r in in_major if r.get("lts") is not False])
        if latest:
            return latest
        return first(in_major)

    return first([r for r in releases if r.get("lts") is not False])


def check_go(fetcher: Fetcher, current: str) -> str:
    """Current Go release from go.dev."""
    body = fetcher.fetch_url("https://go.dev/VERSION?m=text")
    if not body:
        return ""
    line = body.splitlines()[0].strip()
    if line.startswith("go"):
        line = line[2:]
    return line


def check_rust(fetcher: Fetcher, current: str) -> str:
    """Newest stable Rust release, falling back to the channel layout page."""
    for release in collect_github_releases(fetcher, "rust-lang/rust"):
        tag = str(release.get("tag_name", ""))
        if _SEMVER_TAG.match(tag):
            return tag

    body = fetcher.fetch_url("https://forge.rust-lang.org/infra/channel-layout.html")
    match = re.search(r"stable.*?([0-9]+\.[0-9]+\.[0-9]+)", body)
    return match.group(1) if match else ""


def check_ruby(fetcher: Fetcher, current: str) -> str:
    """Latest Ruby release; tags look like ``v3_4_5``."""
    tag = collect_github_latest(fetcher, "ruby/ruby")
    if _unusable(tag):
        return tag
    return strip_v_prefix(tag).replace("_", ".")


def check_java(fetcher: Fetcher, current: str) -> str:
    """Latest GA Temurin release for the pinned Java major version."""
    data = fetcher.fetch_json(
        "https://api.adoptium.net/v3/info/release_versions"
        f"?release_type=ga&version={current}"
    )
    if isinstance(data, dict):
        versions = data.get("versions") or []
        if versions and isinstance(versions[0], dict) and versions[0].get("semver"):
            return str(versions[0]["semver"]).split("+", 1)[0]

    data = fetcher.fetch_json(f"https://api.adoptium.net/v3/assets/latest/{current}/hotspot")
    if isinstance(data, list) and data and isinstance(data[0], dict):
        name = data[0].get("release_name")
        if name:
            return str(name).replace("jdk-", "", 1).split("+", 1)[0]
    return ""


def check_r(fetcher: Fetcher, current: str) -> str:
    """Latest R release from the CRAN sources page."""
    body = fetcher.fetch_url("https://cran.r-project.org/sources.html", timeout=8)
    match = re.search(r"R-([0-9]+\.[0-9]+\.[0-9]+)\.tar\.gz", body)
    return match.group(1) if match else ""


def check_kubectl(fetcher: Fetcher, current: str) -> str:
    """Newest kubectl patch release in the pinned minor, else newest stable."""
    releases = [r for r in collect_github_releases(fetcher, "kubernetes/kubernetes") if not r.get("prerelease")]

    match = re.match(r"^([0-9]+\.[0-9]+)", current)
    if match:
        prefix = f"v{match.group(1)}."
        for release in releases:
            tag = str(release.get("tag_name", ""))
            if tag.startswith(prefix):
                return strip_v_prefix(tag)

    if releases:
        return strip_v_prefix(str(releases[0].get("tag_name", "")))
    return ""


def check_jdtls(fetcher: Fetcher, current: str) -> str:
    """Highest jdtls milestone listed on download.eclipse.org."""
    body = fetcher.fetch_url("https://download.eclipse.org/jdtls/milestones/", timeout=10)
    return max_version(_TRIPLE.findall(body))


def check_android_cmdline_tools(fetcher: Fetcher, current: str) -> str:
    """Build number of the current Android command-line tools download."""
    body = fetcher.fetch_url("https://developer.android.com/studio", timeout=10)
    match = re.search(r"commandlinetools-linux-([0-9]+)_latest\.zip", body)
    return match.group(1) if match else ""


def _ndk_key(release: str) -> tuple[int, str]:
    match = re.match(r"r([0-9]+)([a-z]?)", release)
    if not match:
        return (0, "")
    return (int(match.group(1)), match.group(2))


def check_android_ndk(fetcher: Fetcher, current: str) -> str:
    """Compare the newest NDK release major against the pinned major.

    The SDK manager version (e.g. 29.0.14206865) cannot be derived from the
    release name (r29), so a matching major reports the pin itself and a
    newer major reports ``NN.x.x (rNN)`` for reference.
    """
    body = fetcher.fetch_url("https://developer.android.com/ndk/downloads", timeout=10)
    releases = re.findall(r"android-ndk-(r[0-9]+[a-z]?)", body)
    if not releases:
        return ""

    newest = max(releases, key=_ndk_key)
    major = str(_ndk_key(newest)[0])
    if major == current.split(".", 1)[0]:
        return current
    return f"{major}.x.x ({newest})"


def check_entr(fetcher: Fetcher, current: str) -> str:
    """Latest entr tarball from the project page."""
    body = fetcher.fetch_url("http://eradman.com/entrproject/")
    match = re.search(r"entr-([0-9]+\.[0-9]+)\.tar\.gz", body)
    return match.group(1) if match else ""


def check_biome(fetcher: Fetcher, current: str) -> str:
    """Latest Biome CLI release; tags moved from ``cli/vX`` to ``@biomejs/biome@X``."""
    releases = collect_github_releases(fetcher, "biomejs/biome")
    for prefix in ("@biomejs/biome@", "cli/v"):
        for release in releases:
            tag = str(release.get("tag_name", ""))
            if tag.startswith(prefix):
                return tag[len(prefix):]
    return ""
