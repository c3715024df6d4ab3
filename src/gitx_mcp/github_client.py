"""GitHub REST backend (github.com and GitHub Enterprise Server)."""

from __future__ import annotations

from .client import USER_AGENT, GitClient
from .config import GITHUB_PUBLIC_URL
from .platform import Platform

GITHUB_API_URL = "https://api.github.com"


class GitHubClient(GitClient):
    """Client for the GitHub REST API.

    Merges and similar idempotent actions are PUTs on GitHub, so
    `post_no_content` sends PUT.
    """

    raw_accept = "application/vnd.github.diff"
    no_content_method = "PUT"
    page_size_param = "per_page"

    @property
    def platform(self) -> Platform:
        return Platform.GITHUB

    @staticmethod
    def api_base_url_for(base_url: str) -> str:
        if base_url == GITHUB_PUBLIC_URL:
            return GITHUB_API_URL
        return f"{base_url}/api/v3"

    def default_headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": USER_AGENT,
        }
