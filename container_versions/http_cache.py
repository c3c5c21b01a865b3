"""
On-disk cache of upstream HTTP responses.

Each response body is stored as a flat file named by the SHA-256 of its URL
under ``${XDG_CACHE_HOME:-~/.cache}/container-version-checker/``. Entries are
valid while their mtime is younger than the configured TTL; stale entries are
ignored and overwritten by the next successful fetch, never deleted.

The cache has a single writer per run and no locking: concurrent runs
against the same directory race and the last writer wins.
"""

from __future__ import annotations

import hashlib
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

CACHE_DIR_NAME = "container-version-checker"

# Default time-to-live (1 hour)
DEFAULT_CACHE_DURATION = 3600


def get_cache_dir() -> Path:
    """Get cache directory from XDG_CACHE_HOME or ~/.cache."""
    base = os.environ.get("XDG_CACHE_HOME") or os.path.join(os.path.expanduser("~"), ".cache")
    return Path(base) / CACHE_DIR_NAME


def url_hash(url: str) -> str:
    """Deterministic cache key for a URL."""
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


@dataclass
class ResponseCache:
    """Flat-file response cache keyed by URL hash.

    Attributes:
        directory: Directory holding one file per URL
        ttl: Validity window in seconds
        enabled: When False, lookups always miss and nothing is written
    """

    directory: Path
    ttl: int = DEFAULT_CACHE_DURATION
    enabled: bool = True

    def path_for(self, url: str) -> Path:
        """Cache file path for a URL."""
        return self.directory / url_hash(url)

    def age(self, url: str, now: float | None = None) -> float | None:
        """Age in seconds of the cached entry, or None if there is none."""
        path = self.path_for(url)
        try:
            mtime = path.stat().st_mtime
        except OSError:
            return None
        if now is None:
            now = time.time()
        return now - mtime

    def is_valid(self, url: str, ttl: int | None = None) -> bool:
        """Check whether a fresh entry exists for the URL."""
        if not self.enabled:
            return False
        age = self.age(url)
        if age is None:
            return False
        return age < (self.ttl if ttl is None else ttl)

    def read(self, url: str) -> str:
        """Read a cached body ("" when missing or unreadable)."""
        try:
            return self.path_for(url).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Cache read failed for {url}: {e}")
            return ""

    def write(self, url: str, body: str) -> bool:
        """Store a response body, skipping empty bodies.

        Returns:
            True if the entry was written
        """
        if not self.enabled or not body:
            return False
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self.path_for(url).write_text(body, encoding="utf-8")
            return True
        except OSError as e:
            logger.debug(f"Cache write failed for {url}: {e}")
            return False

    def get_or_fetch(
        self,
        url: str,
        fetch: Callable[[str], str],
        ttl: int | None = None,
    ) -> str:
        """Return the cached body for a URL, fetching it when missing or stale.

        Args:
            url: Request URL
            fetch: Callable returning the response body or "" on failure
            ttl: Optional TTL override in seconds

        Returns:
            Response body, or "" if no fresh entry exists and the fetch failed
        """
        if self.is_valid(url, ttl):
            logger.debug(f"Cache hit: {url}")
            return self.read(url)

        body = fetch(url)
        if body:
            self.write(url, body)
        return body
