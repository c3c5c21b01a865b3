"""
Upstream fetching and generic release collectors.

``Fetcher.fetch_url`` is the only way the pipeline talks to the network. It
never raises: any failure (connection error, timeout, non-2xx status,
undecodable body) is reported as an empty string, which downstream code
treats as "unknown".
"""

from __future__ import annotations

import http.client
import json
import logging
import os
import urllib.error
import urllib.request
from typing import Any

from .http_cache import ResponseCache

logger = logging.getLogger(__name__)

USER_AGENT = "container-version-checker/1.0"

# Default per-request timeout in seconds
DEFAULT_TIMEOUT = 10


class CollectionError(Exception):
    """Raised when version collection fails."""
    pass


class NetworkError(CollectionError):
    """Raised when network requests fail."""
    pass


def http_get(url: str, timeout: int = DEFAULT_TIMEOUT, headers: dict[str, str] | None = None) -> bytes:
    """Perform HTTP GET request.

    Args:
        url: URL to fetch
        timeout: Timeout in seconds
        headers: Optional HTTP headers

    Returns:
        Response body as bytes

    Raises:
        NetworkError: If the request fails or returns a non-2xx status
    """
    try:
        default_headers = {"User-Agent": USER_AGENT}
        if headers:
            default_headers.update(headers)

        req = urllib.request.Request(url, headers=default_headers)
        with urllib.request.urlopen(req, timeout=timeout) as response:
            status = getattr(response, "status", 200)
            if status < 200 or status >= 300:
                raise NetworkError(f"Failed to fetch {url}: HTTP {status}")
            return response.read()
    except NetworkError:
        raise
    except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as e:
        raise NetworkError(f"Failed to fetch {url}: {e}") from e


def auth_headers(url: str, token: str | None = None) -> dict[str, str]:
    """Headers to send with a request (GitHub API token when available)."""
    if token is None:
        token = os.environ.get("GITHUB_TOKEN", "")
    if token and "api.github.com" in url:
        return {"Authorization": f"token {token}"}
    return {}


class Fetcher:
    """Serial, cached HTTP fetcher.

    Attributes:
        cache: Response cache (disabled caches always miss and never write)
        timeout: Default per-request timeout in seconds
        github_token: Token for api.github.com requests ("" for anonymous)
    """

    def __init__(
        self,
        cache: ResponseCache,
        timeout: int = DEFAULT_TIMEOUT,
        github_token: str | None = None,
    ):
        self.cache = cache
        self.timeout = timeout
        self.github_token = os.environ.get("GITHUB_TOKEN", "") if github_token is None else github_token
        self.requests = 0

    def _download(self, url: str, timeout: int) -> str:
        self.requests += 1
        try:
            body = http_get(url, timeout=timeout, headers=auth_headers(url, self.github_token))
            return body.decode("utf-8")
        except NetworkError as e:
            logger.debug(str(e))
            return ""
        except UnicodeDecodeError as e:
            logger.debug(f"Undecodable response from {url}: {e}")
            return ""

    def fetch_url(self, url: str, timeout: int | None = None) -> str:
        """Fetch a URL through the cache.

        Args:
            url: URL to fetch
            timeout: Optional timeout override in seconds

        Returns:
            Response body, or "" on any failure
        """
        effective = self.timeout if timeout is None else timeout
        return self.cache.get_or_fetch(url, lambda u: self._download(u, effective))

    def fetch_json(self, url: str, timeout: int | None = None) -> Any:
        """Fetch and decode a JSON document (None on any failure)."""
        body = self.fetch_url(url, timeout)
        if not body:
            return None
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            logger.debug(f"Invalid JSON from {url}: {e}")
            return None


def _string(value: Any) -> str:
    if value is None:
        return "null"
    return str(value)


def collect_github_latest(fetcher: Fetcher, repo: str) -> str:
    """Raw ``tag_name`` of a GitHub repository's latest release.

    Args:
        fetcher: Fetcher to use
        repo: "owner/name"

    Returns:
        Tag name, "null" when the field is missing, or "" when the fetch failed
    """
    data = fetcher.fetch_json(f"https://api.github.com/repos/{repo}/releases/latest")
    if not isinstance(data, dict):
        return ""
    return _string(data.get("tag_name"))


def collect_github_releases(fetcher: Fetcher, repo: str) -> list[dict[str, Any]]:
    """Release list (newest first) of a GitHub repository, or [] on failure."""
    data = fetcher.fetch_json(f"https://api.github.com/repos/{repo}/releases")
    if not isinstance(data, list):
        return []
    return [r for r in data if isinstance(r, dict)]


def collect_gitlab_latest(fetcher: Fetcher, project_id: str) -> str:
    """Raw ``tag_name`` of the newest release of a GitLab project.

    Args:
        fetcher: Fetcher to use
        project_id: URL-encoded project path (e.g. "gitlab-org%2Fcli")
    """
    data = fetcher.fetch_json(f"https://gitlab.com/api/v4/projects/{project_id}/releases")
    if not isinstance(data, list):
        return ""
    if not data or not isinstance(data[0], dict):
        return "null"
    return _string(data[0].get("tag_name"))


def collect_maven_central(fetcher: Fetcher, group_id: str, artifact_id: str) -> str:
    """Latest version of a Maven Central artifact, or "" when unknown."""
    url = (
        "https://search.maven.org/solrsearch/select"
        f"?q=g:{group_id}+AND+a:{artifact_id}&rows=1&wt=json"
    )
    data = fetcher.fetch_json(url)
    if not isinstance(data, dict):
        return ""
    response = data.get("response")
    docs = (response.get("docs") if isinstance(response, dict) else None) or []
    if not isinstance(docs, list) or not docs or not isinstance(docs[0], dict):
        return ""
    latest = docs[0].get("latestVersion")
    if not latest or latest in ("unknown", "null"):
        return ""
    return str(latest)
