"""
Tests for the HTTP response cache (container_versions/http_cache.py).
"""

import hashlib
import os
import time
from pathlib import Path
from unittest.mock import MagicMock, patch

from container_versions.http_cache import (
    CACHE_DIR_NAME,
    DEFAULT_CACHE_DURATION,
    ResponseCache,
    get_cache_dir,
    url_hash,
)

URL = "https://api.github.com/repos/derailed/k9s/releases/latest"


class TestCacheLocation:
    """Tests for cache directory and key helpers."""

    def test_cache_dir_uses_xdg_cache_home(self, tmp_path):
        """XDG_CACHE_HOME wins over ~/.cache."""
        with patch.dict(os.environ, {"XDG_CACHE_HOME": str(tmp_path)}):
            assert get_cache_dir() == tmp_path / CACHE_DIR_NAME

    def test_cache_dir_defaults_to_home_cache(self):
        """Without XDG_CACHE_HOME the cache lives under ~/.cache."""
        env = {k: v for k, v in os.environ.items() if k != "XDG_CACHE_HOME"}
        with patch.dict(os.environ, env, clear=True):
            expected = Path(os.path.expanduser("~")) / ".cache" / CACHE_DIR_NAME
            assert get_cache_dir() == expected

    def test_url_hash_is_sha256_of_url(self):
        """Cache key is the hex SHA-256 of the URL without a trailing newline."""
        assert url_hash(URL) == hashlib.sha256(URL.encode("utf-8")).hexdigest()

    def test_path_for(self, tmp_path):
        cache = ResponseCache(directory=tmp_path)
        assert cache.path_for(URL) == tmp_path / url_hash(URL)
        assert cache.ttl == DEFAULT_CACHE_DURATION


class TestGetOrFetch:
    """Tests for ResponseCache.get_or_fetch()."""

    def test_miss_fetches_and_writes(self, tmp_path):
        """A missing entry is fetched and stored."""
        cache = ResponseCache(directory=tmp_path)
        fetch = MagicMock(return_value='{"tag_name": "v0.50.0"}')

        body = cache.get_or_fetch(URL, fetch)

        assert body == '{"tag_name": "v0.50.0"}'
        fetch.assert_called_once_with(URL)
        assert cache.path_for(URL).read_text() == body

    def test_fresh_entry_served_without_fetch(self, tmp_path):
        """A fresh entry never touches the network."""
        cache = ResponseCache(directory=tmp_path, ttl=3600)
        cache.write(URL, "cached")
        fetch = MagicMock(return_value="network")

        assert cache.get_or_fetch(URL, fetch) == "cached"
        fetch.assert_not_called()

    def test_stale_entry_is_refetched(self, tmp_path):
        """An entry older than the TTL is refetched and overwritten."""
        cache = ResponseCache(directory=tmp_path, ttl=60)
        cache.write(URL, "old")
        old = time.time() - 3600
        os.utime(cache.path_for(URL), (old, old))
        fetch = MagicMock(return_value="new")

        assert cache.get_or_fetch(URL, fetch) == "new"
        fetch.assert_called_once()
        assert cache.path_for(URL).read_text() == "new"

    def test_empty_response_never_overwrites(self, tmp_path):
        """A failed fetch leaves a stale entry in place."""
        cache = ResponseCache(directory=tmp_path, ttl=60)
        cache.write(URL, "old")
        old = time.time() - 3600
        os.utime(cache.path_for(URL), (old, old))

        assert cache.get_or_fetch(URL, lambda u: "") == ""
        assert cache.path_for(URL).read_text() == "old"

    def test_empty_response_not_written(self, tmp_path):
        cache = ResponseCache(directory=tmp_path)
        assert cache.get_or_fetch(URL, lambda u: "") == ""
        assert not cache.path_for(URL).exists()

    def test_ttl_override(self, tmp_path):
        """A per-call TTL overrides the cache default."""
        cache = ResponseCache(directory=tmp_path, ttl=3600)
        cache.write(URL, "cached")
        old = time.time() - 120
        os.utime(cache.path_for(URL), (old, old))

        assert cache.is_valid(URL)
        assert not cache.is_valid(URL, ttl=60)


class TestDisabledCache:
    """Tests for a disabled cache (--no-cache)."""

    def test_disabled_cache_always_fetches(self, tmp_path):
        enabled = ResponseCache(directory=tmp_path)
        enabled.write(URL, "cached")
        cache = ResponseCache(directory=tmp_path, enabled=False)
        fetch = MagicMock(return_value="network")

        assert cache.get_or_fetch(URL, fetch) == "network"
        fetch.assert_called_once()

    def test_disabled_cache_never_writes(self, tmp_path):
        cache = ResponseCache(directory=tmp_path / "cache", enabled=False)
        assert cache.write(URL, "body") is False
        assert not (tmp_path / "cache").exists()

    def test_write_creates_directory(self, tmp_path):
        cache = ResponseCache(directory=tmp_path / "nested" / "cache")
        assert cache.write(URL, "body") is True
        assert cache.read(URL) == "body"

    def test_read_missing_entry(self, tmp_path):
        cache = ResponseCache(directory=tmp_path)
        assert cache.read(URL) == ""
        assert cache.age(URL) is None
