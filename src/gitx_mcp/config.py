"""Configuration loading for gitx-mcp.

Configuration is supplied by the host environment (e.g., MCP client config or
a `.env` file loaded by the entry point), not by the agent. Tokens are secrets
and must never be emitted to agents or logs.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from urllib.parse import urlparse

from .errors import GitxError, missing_parameter
from .platform import Platform
from .repo_resolver import read_origin_url

logger = logging.getLogger(__name__)

GITHUB_PUBLIC_URL = "https://github.com"
GITHUB_PUBLIC_HOST = "github.com"

_PLATFORM_ALIASES: dict[str, Platform] = {
    "gitea": Platform.GITEA,
    "forgejo": Platform.GITEA,
    "github": Platform.GITHUB,
}


@dataclass(frozen=True, slots=True)
class LimitsConfig:
    """Transport timeouts. No retries are performed."""

    total_timeout_s: float = 60.0
    connect_timeout_s: float = 5.0
    read_timeout_s: float = 30.0


@dataclass(frozen=True, slots=True)
class Config:
    """Resolved platform binding."""

    base_url: str
    token: str = field(repr=False)
    platform: Platform
    limits: LimitsConfig = field(default_factory=LimitsConfig)


def _first_env(*names: str) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


def _parse_timeout(value: str | None) -> LimitsConfig:
    if not value:
        return LimitsConfig()
    try:
        total = float(value)
    except ValueError as exc:
        raise missing_parameter("GITX_MCP_TIMEOUT_S must be a number of seconds") from exc
    if total <= 0:
        raise missing_parameter("GITX_MCP_TIMEOUT_S must be positive")
    defaults = LimitsConfig()
    return LimitsConfig(total_timeout_s=total, read_timeout_s=min(total, defaults.read_timeout_s))


def _gitea_config(url: str | None, token: str | None, limits: LimitsConfig) -> Config:
    if not url:
        raise missing_parameter("GITEA_URL (or FORGEJO_REMOTE_URL) environment variable is required")
    if not token:
        raise missing_parameter("GITEA_TOKEN (or FORGEJO_AUTH_TOKEN) environment variable is required")
    return Config(base_url=url.rstrip("/"), token=token, platform=Platform.GITEA, limits=limits)


def _github_config(url: str | None, token: str | None, limits: LimitsConfig) -> Config:
    if not token:
        raise missing_parameter("GITHUB_TOKEN (or GH_TOKEN) environment variable is required")
    return Config(base_url=(url or GITHUB_PUBLIC_URL).rstrip("/"), token=token, platform=Platform.GITHUB, limits=limits)


def detect_platform_from_remote(remote_url: str, gitea_url: str) -> Platform | None:
    """Match a remote URL against the known hosts.

    Matching is plain substring containment on the host name.
    """
    if GITHUB_PUBLIC_HOST in remote_url:
        return Platform.GITHUB
    gitea_host = urlparse(gitea_url).hostname or gitea_url
    if gitea_host and gitea_host in remote_url:
        return Platform.GITEA
    return None


def load_config_from_env(directory: str = ".") -> Config:
    """Load and validate configuration from environment variables.

    `directory` is only consulted when credentials for both platforms are set
    and the `origin` remote has to decide between them.

    Raises:
        GitxError: MissingParameter if configuration is missing or ambiguous.
    """
    limits = _parse_timeout(os.getenv("GITX_MCP_TIMEOUT_S"))

    gitea_url = _first_env("GITEA_URL", "FORGEJO_REMOTE_URL")
    gitea_token = _first_env("GITEA_TOKEN", "FORGEJO_AUTH_TOKEN")
    github_url = os.getenv("GITHUB_URL") or None
    github_token = _first_env("GITHUB_TOKEN", "GH_TOKEN")

    override = os.getenv("GITX_PLATFORM")
    if override:
        platform = _PLATFORM_ALIASES.get(override.strip().lower())
        if platform is None:
            raise missing_parameter(f"GITX_PLATFORM has unrecognized value '{override}' (expected gitea, forgejo or github)")
        if platform is Platform.GITHUB:
            return _github_config(github_url, github_token, limits)
        return _gitea_config(gitea_url, gitea_token, limits)

    has_gitea = bool(gitea_url and gitea_token)
    has_github = bool(github_token)

    if has_github and not has_gitea:
        return _github_config(github_url, github_token, limits)

    if has_github and has_gitea:
        try:
            remote_url = read_origin_url(directory)
        except GitxError as exc:
            logger.info("Could not read origin remote for platform detection: %s", exc.message)
            remote_url = ""
        detected = detect_platform_from_remote(remote_url, gitea_url or "") if remote_url else None
        if detected is Platform.GITHUB:
            return _github_config(github_url, github_token, limits)
        if detected is Platform.GITEA:
            return _gitea_config(gitea_url, gitea_token, limits)
        raise missing_parameter(
            "Both Gitea and GitHub credentials are set and the origin remote matches neither; "
            "set GITX_PLATFORM to gitea or github"
        )

    if has_gitea:
        return _gitea_config(gitea_url, gitea_token, limits)

    raise missing_parameter(
        "Set GITEA_URL (or FORGEJO_REMOTE_URL) with GITEA_TOKEN (or FORGEJO_AUTH_TOKEN), "
        "or GITHUB_TOKEN (or GH_TOKEN) with optional GITHUB_URL; "
        "GITX_PLATFORM selects the platform explicitly"
    )
