"""Gitea / Forgejo REST backend."""

from __future__ import annotations

from .client import USER_AGENT, GitClient
from .platform import Platform


class GiteaClient(GitClient):
    """Client for the Gitea `/api/v1` REST API (Forgejo is wire-compatible)."""

    raw_accept = "text/plain"
    no_content_method = "POST"
    page_size_param = "limit"

    @property
    def platform(self) -> Platform:
        return Platform.GITEA

    @staticmethod
    def api_base_url_for(base_url: str) -> str:
        return f"{base_url}/api/v1"

    def default_headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"token {token}",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
