"""Git hosting platform identity."""

from __future__ import annotations

from enum import Enum


class Platform(str, Enum):
    """Backend family a configuration and its client target."""

    GITEA = "gitea"
    GITHUB = "github"

    @property
    def display_name(self) -> str:
        return "GitHub" if self is Platform.GITHUB else "Gitea"
