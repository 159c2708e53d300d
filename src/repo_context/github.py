"""Open pull-request and issue counts.

The ``gh`` CLI is asked first. When it is not installed and ``origin``
points at GitHub, the public search API is queried with httpx. Every
failure maps to ``None``: the count is unknown, not zero.
"""

from __future__ import annotations

import os
import re
import shutil
from pathlib import Path

import httpx

from .logging import get_logger
from .process import DEFAULT_TIMEOUT, try_command, try_git

GITHUB_API_URL = "https://api.github.com"
API_TIMEOUT = 5.0

logger = get_logger("github")

_GITHUB_REMOTE = re.compile(r"github\.com[:/]([^/\s]+)/([^/\s#?]+?)(?:\.git)?/?$")


def parse_github_slug(remote_url: str) -> str | None:
    """Return ``owner/repo`` for a GitHub remote URL, else ``None``."""
    match = _GITHUB_REMOTE.search(remote_url.strip())
    if not match:
        return None
    return f"{match.group(1)}/{match.group(2)}"


class GitHubClient:
    """Minimal client for the GitHub search API."""

    def __init__(self, base_url: str = GITHUB_API_URL, token: str | None = None):
        self.base_url = base_url.rstrip("/")
        headers = {"Accept": "application/vnd.github+json"}
        token = token if token is not None else os.environ.get("GITHUB_TOKEN")
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(timeout=API_TIMEOUT, headers=headers)

    def open_count(self, slug: str, kind: str) -> int | None:
        """Count open items of ``kind`` ("pr" or "issue") in ``slug``."""
        try:
            resp = self._client.get(
                f"{self.base_url}/search/issues",
                params={"q": f"repo:{slug} type:{kind} state:open", "per_page": 1},
            )
            if resp.status_code != 200:
                logger.debug("GitHub search for %s %s returned %s", slug, kind, resp.status_code)
                return None
            total = resp.json().get("total_count")
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("GitHub search for %s %s failed: %s", slug, kind, e)
            return None
        return total if isinstance(total, int) else None

    def close(self) -> None:
        self._client.close()


def _parse_count(output: str | None) -> int | None:
    if output is None:
        return None
    try:
        return int(output.strip())
    except ValueError:
        return None


def _open_count(
    repo_path: str | Path,
    kind: str,
    timeout: float | None,
    use_api: bool,
) -> int | None:
    if shutil.which("gh") is not None:
        output = try_command(
            ["gh", kind, "list", "--json", "number", "--jq", "length"],
            repo_path,
            timeout=timeout,
        )
        return _parse_count(output)

    if not use_api:
        return None
    slug = parse_github_slug(try_git(repo_path, ["remote", "get-url", "origin"], timeout=timeout))
    if slug is None:
        return None
    client = GitHubClient()
    try:
        return client.open_count(slug, kind)
    finally:
        client.close()


def get_open_pr_count(
    repo_path: str | Path,
    timeout: float | None = DEFAULT_TIMEOUT,
    use_api: bool = True,
) -> int | None:
    return _open_count(repo_path, "pr", timeout, use_api)


def get_open_issue_count(
    repo_path: str | Path,
    timeout: float | None = DEFAULT_TIMEOUT,
    use_api: bool = True,
) -> int | None:
    return _open_count(repo_path, "issue", timeout, use_api)
