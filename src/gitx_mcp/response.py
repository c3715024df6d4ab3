"""Render backend JSON as markdown text for agents.

Both backends return similar but not identical payloads, so every renderer
goes through `lookup` and degrades to omission or a placeholder. Nothing here
raises on unexpected shapes.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

NO_DATA = "No data returned."
NO_ITEMS = "No items found."
UNKNOWN_SHA = "???????"

# Fields that identify a nested object (owner, author, milestone...).
_NESTED_ID_KEYS = ("login", "name", "title", "full_name")
# Fields that name an element of an inline list (labels, assignees...).
_LIST_ITEM_KEYS = ("name", "title", "login")

_MISSING = object()


def lookup(value: Any, *keys: str | int, default: Any = None, kind: type | tuple[type, ...] | None = None) -> Any:
    """Optional nested lookup.

    Walks dict keys and list indexes; returns `default` as soon as a step is
    missing or, when `kind` is given, when the final value is not of that type.
    """
    current = value
    for key in keys:
        if isinstance(key, int) and isinstance(current, list):
            current = current[key] if -len(current) <= key < len(current) else _MISSING
        elif isinstance(current, dict):
            current = current.get(key, _MISSING)
        else:
            current = _MISSING
        if current is _MISSING or current is None:
            return default
    if kind is not None and (not isinstance(current, kind) or (kind is not bool and isinstance(current, bool))):
        return default
    return current


def _str(value: Any, *keys: str | int, default: str | None = None) -> str | None:
    return lookup(value, *keys, default=default, kind=str)


def _int(value: Any, *keys: str | int, default: int | None = None) -> int | None:
    return lookup(value, *keys, default=default, kind=int)


def scalar_text(value: Any) -> str:
    """Text for a JSON scalar: booleans lowercase, strings unquoted."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or value is None:
        return json.dumps(value)
    return str(value)


def short_sha(sha: Any) -> str:
    return sha[:7] if isinstance(sha, str) and sha else UNKNOWN_SHA


def _names(items: Any, key: str) -> list[str]:
    if not isinstance(items, list):
        return []
    return [name for item in items if (name := _str(item, key))]


# Generic rendering


def format_value(value: Any) -> str:
    """Render any JSON value. Never returns an empty string."""
    if value is None:
        return NO_DATA
    if isinstance(value, list):
        if not value:
            return NO_ITEMS
        return "\n---\n".join(_format_object(item) for item in value)
    if isinstance(value, dict):
        return _format_object(value)
    return scalar_text(value) or NO_DATA


def _format_object(value: Any) -> str:
    if not isinstance(value, dict):
        return (scalar_text(value) or NO_DATA) if value is not None else NO_DATA
    lines = [line for key, item in value.items() if (line := format_field(str(key), item))]
    return "\n".join(lines) if lines else NO_DATA


def format_field(key: str, value: Any) -> str:
    """Render one field as `**key:** value`, or "" when it should be omitted."""
    if value is None or value == "":
        return ""
    if isinstance(value, list):
        items: list[str] = []
        for item in value:
            if isinstance(item, dict):
                label = next((v for k in _LIST_ITEM_KEYS if isinstance(v := item.get(k), str)), None)
                if label is not None:
                    items.append(label)
            elif item is not None:
                items.append(scalar_text(item))
        return f"**{key}:** {', '.join(items)}" if items else ""
    if isinstance(value, dict):
        label = next((v for k in _NESTED_ID_KEYS if isinstance(v := value.get(k), str)), None)
        return f"**{key}:** {label}" if label is not None else ""
    return f"**{key}:** {scalar_text(value)}"


# Issues and pull requests


def format_issue(issue: Any) -> str:
    parts: list[str] = []

    number = _int(issue, "number")
    if number is not None:
        title = _str(issue, "title", default="(untitled)")
        state = _str(issue, "state", default="unknown")
        parts.append(f"## #{number} {title} [{state}]")

    author = _str(issue, "user", "login")
    if author:
        parts.append(f"**Author:** {author}")

    labels = _names(lookup(issue, "labels"), "name")
    if labels:
        parts.append(f"**Labels:** {', '.join(labels)}")

    assignees = _names(lookup(issue, "assignees"), "login")
    if assignees:
        parts.append(f"**Assignees:** {', '.join(assignees)}")

    milestone = _str(issue, "milestone", "title")
    if milestone:
        parts.append(f"**Milestone:** {milestone}")

    for key, label in (("created_at", "Created"), ("updated_at", "Updated")):
        stamp = _str(issue, key)
        if stamp:
            parts.append(f"**{label}:** {stamp}")

    body = _str(issue, "body")
    if body:
        parts.append(f"\n{body}")

    return "\n".join(parts) if parts else NO_DATA


def format_issue_list(issues: list[Any]) -> str:
    if not issues:
        return "No issues found."
    lines = []
    for issue in issues:
        number = _int(issue, "number", default=0)
        title = _str(issue, "title", default="(untitled)")
        state = _str(issue, "state", default="unknown")
        labels = _names(lookup(issue, "labels"), "name")
        label_str = f" [{', '.join(labels)}]" if labels else ""
        lines.append(f"- #{number} {title} ({state}){label_str}")
    return "\n".join(lines)


def format_pull_request(pr: Any) -> str:
    parts: list[str] = []

    number = _int(pr, "number")
    if number is not None:
        title = _str(pr, "title", default="(untitled)")
        state = _str(pr, "state", default="unknown")
        parts.append(f"## PR #{number} {title} [{state}]")

    author = _str(pr, "user", "login")
    if author:
        parts.append(f"**Author:** {author}")

    head = _str(pr, "head", "label")
    if head:
        base = _str(pr, "base", "label", default="?")
        parts.append(f"**Branch:** {head} -> {base}")

    mergeable = lookup(pr, "mergeable", kind=bool)
    if mergeable is not None:
        parts.append(f"**Mergeable:** {scalar_text(mergeable)}")

    labels = _names(lookup(pr, "labels"), "name")
    if labels:
        parts.append(f"**Labels:** {', '.join(labels)}")

    created = _str(pr, "created_at")
    if created:
        parts.append(f"**Created:** {created}")

    body = _str(pr, "body")
    if body:
        parts.append(f"\n{body}")

    return "\n".join(parts) if parts else NO_DATA


def format_pr_list(prs: list[Any]) -> str:
    if not prs:
        return "No pull requests found."
    lines = []
    for pr in prs:
        number = _int(pr, "number", default=0)
        title = _str(pr, "title", default="(untitled)")
        state = _str(pr, "state", default="unknown")
        lines.append(f"- PR #{number} {title} ({state})")
    return "\n".join(lines)


# Comments


def format_comment(comment: Any) -> str:
    comment_id = _int(comment, "id", default=0)
    user = _str(comment, "user", "login", default="unknown")
    created = _str(comment, "created_at", default="")
    body = _str(comment, "body", default="")
    return f"**Comment #{comment_id}** by {user} ({created}):\n{body}"


def format_comment_list(comments: list[Any]) -> str:
    if not comments:
        return "No comments found."
    return "\n\n---\n\n".join(format_comment(c) for c in comments)


# Commits and branches


def format_commit(commit: Any) -> str:
    parts = [f"**Commit:** {_str(commit, 'sha', default='unknown')}"]

    message = _str(commit, "commit", "message")
    if message:
        parts.append(f"**Message:** {message}")

    author = _str(commit, "commit", "author", "name")
    if author:
        date = _str(commit, "commit", "author", "date", default="")
        parts.append(f"**Author:** {author} ({date})")

    return "\n".join(parts)


def format_commit_list(commits: list[Any]) -> str:
    if not commits:
        return "No commits found."
    lines = []
    for commit in commits:
        message = _str(commit, "commit", "message", default="")
        first_line = message.splitlines()[0] if message else ""
        lines.append(f"- `{short_sha(lookup(commit, 'sha'))}` {first_line}")
    return "\n".join(lines)


def format_branch(branch: Any) -> str:
    name = _str(branch, "name", default="unknown")
    # Gitea reports the head commit as `id`, GitHub as `sha`.
    sha = _str(branch, "commit", "id") or _str(branch, "commit", "sha")
    protected = lookup(branch, "protected", default=False, kind=bool)
    suffix = " [protected]" if protected else ""
    return f"- {name} (`{short_sha(sha)}`){suffix}"


def format_branch_list(branches: list[Any]) -> str:
    if not branches:
        return "No branches found."
    return "\n".join(format_branch(b) for b in branches)


# Files


def decode_base64_text(content: str) -> str | None:
    """Decode base64 (line breaks allowed) as UTF-8; None if either step fails."""
    try:
        return base64.b64decode(content.replace("\n", ""), validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        return None


def format_file_content(file: Any) -> str:
    name = _str(file, "name", default="unknown")
    path = _str(file, "path", default=name)

    if _str(file, "type", default="file") == "dir":
        return f"**{path}/** (directory)"

    content = _str(file, "content", default="")
    if content:
        decoded = decode_base64_text(content)
        text = decoded if decoded is not None else "(binary content)"
    else:
        text = "(empty file)"

    size = _int(file, "size", default=0)
    sha = _str(file, "sha")
    sha_line = f"\n**SHA:** {sha}" if sha else ""
    return f"**File:** {path} ({size} bytes){sha_line}\n\n```\n{text}\n```"


def format_file_list(entries: list[Any]) -> str:
    if not entries:
        return "No files found."
    lines = []
    for entry in entries:
        name = _str(entry, "name", default="?")
        suffix = "/" if _str(entry, "type") == "dir" else ""
        lines.append(f"- {name}{suffix}")
    return "\n".join(lines)
