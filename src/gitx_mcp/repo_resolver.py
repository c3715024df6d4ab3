"""Resolve which repository a tool call targets.

Two pieces live here:

- the locator, which reads `<directory>/.git/config` and turns the
  `[remote "origin"]` URL into an owner/repo pair
- the precedence chain every tool uses (explicit owner+repo, then a
  directory override, then the repository detected at startup, then the
  current working directory)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from .errors import repo_resolution_failed

_ORIGIN_HEADER = '[remote "origin"]'


@dataclass(frozen=True, slots=True)
class RepoInfo:
    """Owner/repository coordinates."""

    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def read_origin_url(directory: str | Path) -> str:
    """Return the `url` of the `origin` remote from a local git config.

    Raises:
        GitxError: RepositoryResolutionFailed when the file or the remote is missing.
    """
    config_path = Path(directory) / ".git" / "config"
    if not config_path.exists():
        raise repo_resolution_failed(f"No .git/config found in {directory}")

    try:
        text = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise repo_resolution_failed(f"Failed to read .git/config: {exc}") from exc

    in_origin = False
    for line in text.splitlines():
        trimmed = line.strip()
        if trimmed.startswith("["):
            if in_origin:
                break
            in_origin = trimmed == _ORIGIN_HEADER
            continue
        if not in_origin or not trimmed.startswith("url"):
            continue
        rest = trimmed[len("url") :].lstrip()
        if rest.startswith("="):
            return rest[1:].strip()

    raise repo_resolution_failed("No remote 'origin' URL found in .git/config")


def parse_remote_url(url: str) -> RepoInfo:
    """Extract owner/repo from a git remote URL.

    Accepts `git@host:owner/repo.git`, `ssh://git@host/owner/repo.git`,
    `https://host/owner/repo` and bare `owner/repo` paths.
    """
    if url.startswith("ssh://"):
        rest = url[len("ssh://") :]
        _, sep, path = rest.partition("/")
        if not sep:
            raise repo_resolution_failed(f"Invalid SSH URL: {url}")
        return _extract_owner_repo(path)

    if url.startswith(("http://", "https://")):
        return _extract_owner_repo(urlparse(url).path.lstrip("/"))

    at = url.find("@")
    if at != -1:
        _, sep, path = url[at + 1 :].partition(":")
        if sep:
            return _extract_owner_repo(path)

    return _extract_owner_repo(url)


def _extract_owner_repo(path: str) -> RepoInfo:
    trimmed = path.removesuffix(".git").strip("/")
    # Segments past the second (nested groups) are dropped.
    parts = trimmed.split("/", 2)
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise repo_resolution_failed(f"Cannot extract owner/repo from path: {path}")
    return RepoInfo(owner=parts[0], repo=parts[1])


def resolve_repo(directory: str | Path) -> RepoInfo:
    """Locate the repository checked out at `directory`."""
    return parse_remote_url(read_origin_url(directory))


def resolve_owner_repo(
    *,
    owner: str | None = None,
    repo: str | None = None,
    directory: str | None = None,
    default: RepoInfo | None = None,
) -> RepoInfo:
    """Pick the target repository for one tool call.

    Empty strings count as absent. A lone owner or repo is ignored.
    """
    if owner and repo:
        return RepoInfo(owner=owner, repo=repo)
    if directory:
        return resolve_repo(directory)
    if default is not None:
        return default
    return resolve_repo(".")
