# =============================================================================
# core/services/github_service.py - GitHub Repository Reader
# =============================================================================
# Reads the public metadata and README of a repository so a lab page can
# be drafted from it. Uses GITHUB_TOKEN when set (higher rate limits).
# =============================================================================

import logging
import re
from typing import Any

import httpx

from app.config import settings
from app.exceptions import UpstreamServiceError, ValidationFailedError

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
GITHUB_RAW = "https://raw.githubusercontent.com"
GITHUB_TIMEOUT = 15
USER_AGENT = "novique-ai-labs"

_URL_PATTERNS = [
    re.compile(r"github\.com/([^/]+)/([^/?#]+)"),
    re.compile(r"github\.com:([^/]+)/([^/?#]+)"),
]


class GitHubReaderError(UpstreamServiceError):
    """Repository could not be read."""

    def __init__(self, message: str):
        super().__init__("GitHub", message)
        self.code = "GITHUB_ERROR"
        self.suggestion = "Check the repository exists and is public"


def parse_github_url(url: str) -> tuple[str, str] | None:
    """
    Extract (owner, repo) from a GitHub URL.

    Example:
        parse_github_url("https://github.com/acme/tools.git")  # ("acme", "tools")
    """
    for pattern in _URL_PATTERNS:
        match = pattern.search(url)
        if match:
            repo = match.group(2)
            if repo.endswith(".git"):
                repo = repo[:-4]
            return match.group(1), repo
    return None


def _headers() -> dict[str, str]:
    headers = {"Accept": "application/vnd.github.v3+json", "User-Agent": USER_AGENT}
    if settings.GITHUB_TOKEN:
        headers["Authorization"] = f"Bearer {settings.GITHUB_TOKEN}"
    return headers


class GitHubService:
    """Public repository lookups."""

    @staticmethod
    def fetch_metadata(owner: str, repo: str) -> dict[str, Any] | None:
        try:
            response = httpx.get(f"{GITHUB_API}/repos/{owner}/{repo}", headers=_headers(), timeout=GITHUB_TIMEOUT)
        except httpx.HTTPError as e:
            logger.error(f"Error fetching repo metadata: {e}")
            return None

        if not response.is_success:
            logger.warning(f"GitHub metadata for {owner}/{repo} returned {response.status_code}")
            return None

        data = response.json()
        return {
            "full_name": data.get("full_name") or f"{owner}/{repo}",
            "description": data.get("description") or "",
            "default_branch": data.get("default_branch") or "main",
            "language": data.get("language"),
            "topics": data.get("topics") or [],
            "stars": data.get("stargazers_count", 0),
            "forks": data.get("forks_count", 0),
            "license": (data.get("license") or {}).get("spdx_id"),
            "html_url": data.get("html_url"),
            "updated_at": data.get("updated_at"),
        }

    @staticmethod
    def fetch_raw_file(owner: str, repo: str, path: str, branch: str = "main") -> str | None:
        """Raw file contents; retries on master when main is missing."""
        try:
            response = httpx.get(f"{GITHUB_RAW}/{owner}/{repo}/{branch}/{path}", timeout=GITHUB_TIMEOUT)
        except httpx.HTTPError as e:
            logger.error(f"Error fetching {path}: {e}")
            return None

        if response.is_success:
            return response.text
        if branch == "main":
            return GitHubService.fetch_raw_file(owner, repo, path, "master")
        return None

    @staticmethod
    def fetch_readme(owner: str, repo: str, branch: str | None = None) -> str | None:
        """README via the API, falling back to raw main/master."""
        try:
            response = httpx.get(
                f"{GITHUB_API}/repos/{owner}/{repo}/readme",
                headers={**_headers(), "Accept": "application/vnd.github.raw"},
                timeout=GITHUB_TIMEOUT,
            )
            if response.is_success:
                return response.text
        except httpx.HTTPError as e:
            logger.warning(f"README API request failed: {e}")

        return GitHubService.fetch_raw_file(owner, repo, "README.md", branch or "main")

    @staticmethod
    def read_repository(github_url: str) -> dict[str, Any]:
        """
        Read metadata and README for a repository URL.

        Raises:
            ValidationFailedError: URL isn't a GitHub repository URL
            GitHubReaderError: Neither metadata nor README could be read
        """
        if "github.com" not in github_url:
            raise ValidationFailedError("Invalid GitHub URL", suggestion="Use a URL like https://github.com/owner/repo")

        parsed = parse_github_url(github_url)
        if parsed is None:
            raise ValidationFailedError("Invalid GitHub URL", suggestion="Use a URL like https://github.com/owner/repo")
        owner, repo = parsed

        metadata = GitHubService.fetch_metadata(owner, repo)
        branch = metadata["default_branch"] if metadata else None
        readme = GitHubService.fetch_readme(owner, repo, branch)

        if metadata is None and readme is None:
            raise GitHubReaderError(f"Could not read repository {owner}/{repo}")

        return {
            "owner": owner,
            "repo": repo,
            "metadata": metadata or {"full_name": f"{owner}/{repo}", "description": "", "topics": []},
            "readme": readme or "",
        }
