"""Tool registry and dispatch layer.

This module:
- defines the tool catalog (public contract surface)
- builds the per-server runtime from host-provided config
- resolves the target repository for every repository-scoped call
- renders every result as text and every failure as an error envelope
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from .client import GitClient, create_client
from .config import Config, load_config_from_env
from .errors import ErrorKind, GitxError, gitx_error_to_result, internal_error, missing_parameter
from .platform import Platform
from .repo_resolver import RepoInfo, resolve_owner_repo, resolve_repo
from .response import (
    decode_base64_text,
    format_branch_list,
    format_comment,
    format_comment_list,
    format_commit,
    format_commit_list,
    format_file_content,
    format_file_list,
    format_issue,
    format_issue_list,
    format_pr_list,
    format_pull_request,
    format_value,
    lookup,
    scalar_text,
    short_sha,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 50
COMPARE_MAX_FILES = 50

WIKI_UNAVAILABLE = "Wiki CRUD is not available on GitHub. GitHub does not expose a wiki API."


# Schema building blocks

_REPO_PROPS: dict[str, Any] = {
    "owner": {"type": "string", "description": "Repository owner (user or organization). Optional if `directory` is provided."},
    "repo": {"type": "string", "description": "Repository name. Optional if `directory` is provided."},
    "directory": {"type": "string", "description": "Local directory whose .git/config origin remote identifies the repository."},
}

_PAGE_PROPS: dict[str, Any] = {
    "page": {"type": "integer", "minimum": 1, "description": "Page number (1-based). Defaults to 1."},
    "limit": {"type": "integer", "minimum": 1, "description": "Items per page (max 50). Defaults to 20."},
}


def _tool(
    description: str,
    properties: dict[str, Any] | None = None,
    required: tuple[str, ...] = (),
    *,
    repo_scoped: bool = True,
    paged: bool = False,
) -> dict[str, Any]:
    props: dict[str, Any] = {}
    if repo_scoped:
        props.update(_REPO_PROPS)
    props.update(properties or {})
    if paged:
        props.update(_PAGE_PROPS)
    return {
        "description": description,
        "inputSchema": {
            "type": "object",
            "required": list(required),
            "properties": props,
            "additionalProperties": False,
        },
    }


def _s(description: str, **extra: Any) -> dict[str, Any]:
    return {"type": "string", "description": description, **extra}


def _i(description: str, **extra: Any) -> dict[str, Any]:
    return {"type": "integer", "description": description, **extra}


def _b(description: str) -> dict[str, Any]:
    return {"type": "boolean", "description": description}


_STATE_FILTER = _s("Filter by state: open, closed, or all. Defaults to open.", enum=["open", "closed", "all"])
_LABEL_IDS = {"type": "array", "items": {"type": "integer"}, "description": "Label IDs (from label_list)."}
_ASSIGNEES = {"type": "array", "items": {"type": "string"}, "description": "Usernames to assign."}

TOOL_METADATA: dict[str, dict[str, Any]] = {
    # Issues
    "issue_list": _tool(
        "List issues in a repository (pull requests excluded).",
        {
            "state": _STATE_FILTER,
            "labels": _s("Comma-separated label names to filter by."),
            "milestone": _s("Milestone name to filter by."),
        },
        paged=True,
    ),
    "issue_get": _tool("Get a single issue.", {"index": _i("Issue number.")}, ("index",)),
    "issue_create": _tool(
        "Create an issue.",
        {
            "title": _s("Issue title.", minLength=1),
            "body": _s("Issue body in markdown."),
            "labels": _LABEL_IDS,
            "milestone": _i("Milestone ID (from milestone_list)."),
            "assignees": _ASSIGNEES,
        },
        ("title",),
    ),
    "issue_edit": _tool(
        "Edit an issue. Omitted fields are left unchanged; labels and assignees replace existing values.",
        {
            "index": _i("Issue number."),
            "title": _s("New title."),
            "body": _s("New body."),
            "state": _s("New state.", enum=["open", "closed"]),
            "labels": _LABEL_IDS,
            "milestone": _i("Milestone ID (from milestone_list)."),
            "assignees": _ASSIGNEES,
        },
        ("index",),
    ),
    "issue_comment_list": _tool("List comments on an issue or pull request.", {"index": _i("Issue number.")}, ("index",)),
    "issue_comment_create": _tool(
        "Comment on an issue or pull request.",
        {"index": _i("Issue number."), "body": _s("Comment body in markdown.", minLength=1)},
        ("index", "body"),
    ),
    # Pull requests
    "pr_list": _tool("List pull requests.", {"state": _STATE_FILTER}, paged=True),
    "pr_get": _tool("Get a single pull request.", {"index": _i("Pull request number.")}, ("index",)),
    "pr_create": _tool(
        "Open a pull request from a head branch into a base branch.",
        {
            "title": _s("Pull request title.", minLength=1),
            "head": _s("Head (source) branch.", minLength=1),
            "base": _s("Base (target) branch.", minLength=1),
            "body": _s("Pull request description."),
            "labels": _LABEL_IDS,
            "milestone": _i("Milestone ID (from milestone_list)."),
            "assignees": _ASSIGNEES,
        },
        ("title", "head", "base"),
    ),
    "pr_edit": _tool(
        "Edit a pull request. Omitted fields are left unchanged.",
        {
            "index": _i("Pull request number."),
            "title": _s("New title."),
            "body": _s("New body."),
            "state": _s("New state.", enum=["open", "closed"]),
            "labels": _LABEL_IDS,
            "assignees": _ASSIGNEES,
        },
        ("index",),
    ),
    "pr_merge": _tool(
        "Merge a pull request.",
        {
            "index": _i("Pull request number."),
            "merge_style": _s("Merge strategy. Defaults to merge.", enum=["merge", "rebase", "squash"]),
            "merge_message": _s("Custom merge commit message."),
            "delete_branch_after_merge": _b("Delete the head branch after merging."),
        },
        ("index",),
    ),
    "pr_review_list": _tool("List reviews on a pull request.", {"index": _i("Pull request number.")}, ("index",)),
    "pr_review_create": _tool(
        "Submit a review on a pull request.",
        {
            "index": _i("Pull request number."),
            "event": _s("Review event: APPROVE, REQUEST_CHANGES or COMMENT.", minLength=1),
            "body": _s("Review body."),
        },
        ("index", "event"),
    ),
    "pr_files": _tool("List files changed by a pull request.", {"index": _i("Pull request number.")}, ("index",)),
    "pr_diff": _tool("Get the unified diff of a pull request.", {"index": _i("Pull request number.")}, ("index",)),
    # Files
    "file_read": _tool(
        "Read a file's content.",
        {"path": _s("File path in the repository.", minLength=1), "ref": _s("Branch, tag or commit. Defaults to the default branch.")},
        ("path",),
    ),
    "file_list": _tool(
        "List a directory.",
        {"path": _s("Directory path. Defaults to the repository root."), "ref": _s("Branch, tag or commit.")},
    ),
    "file_create": _tool(
        "Create a file with a commit.",
        {
            "path": _s("File path.", minLength=1),
            "content": _s("File content (plain text)."),
            "message": _s("Commit message.", minLength=1),
            "branch": _s("Branch to commit to."),
            "new_branch": _s("Create this branch from `branch` for the commit."),
        },
        ("path", "content", "message"),
    ),
    "file_update": _tool(
        "Update a file with a commit.",
        {
            "path": _s("File path.", minLength=1),
            "content": _s("New file content (plain text)."),
            "sha": _s("SHA of the file being replaced (from file_read).", minLength=1),
            "message": _s("Commit message.", minLength=1),
            "branch": _s("Branch to commit to."),
            "new_branch": _s("Create this branch from `branch` for the commit."),
        },
        ("path", "content", "sha", "message"),
    ),
    "file_delete": _tool(
        "Delete a file with a commit.",
        {
            "path": _s("File path.", minLength=1),
            "sha": _s("SHA of the file being deleted (from file_read).", minLength=1),
            "message": _s("Commit message.", minLength=1),
            "branch": _s("Branch to commit to."),
        },
        ("path", "sha", "message"),
    ),
    "tree_get": _tool("List every path in the repository tree.", {"ref": _s("Branch, tag or commit. Defaults to HEAD.")}),
    # Branches
    "branch_list": _tool("List branches.", paged=True),
    "branch_create": _tool(
        "Create a branch.",
        {
            "new_branch_name": _s("Name of the new branch.", minLength=1),
            "old_branch_name": _s("Branch to start from. Defaults to the default branch."),
        },
        ("new_branch_name",),
    ),
    "branch_delete": _tool("Delete a branch.", {"branch": _s("Branch name.", minLength=1)}, ("branch",)),
    "branch_protection_list": _tool("List branch protection rules."),
    "branch_protection_create": _tool(
        "Protect a branch.",
        {
            "branch_name": _s("Branch to protect.", minLength=1),
            "enable_push": _b("Allow direct pushes."),
            "block_on_rejected_reviews": _b("Block merging when a review requests changes."),
        },
        ("branch_name",),
    ),
    # Commits
    "commit_list": _tool(
        "List commits.",
        {"sha": _s("Branch or SHA to start listing from."), "path": _s("Only commits touching this path.")},
        paged=True,
    ),
    "commit_get": _tool("Get a single commit.", {"sha": _s("Commit SHA.", minLength=1)}, ("sha",)),
    "commit_diff": _tool("Get the unified diff of a commit.", {"sha": _s("Commit SHA.", minLength=1)}, ("sha",)),
    "commit_compare": _tool(
        "Compare two refs.",
        {"base": _s("Base ref.", minLength=1), "head": _s("Head ref.", minLength=1)},
        ("base", "head"),
    ),
    # Labels
    "label_list": _tool("List labels with their IDs."),
    "label_create": _tool(
        "Create a label.",
        {
            "name": _s("Label name.", minLength=1),
            "color": _s("Hex color, with or without a leading '#'.", minLength=1),
            "description": _s("Label description."),
        },
        ("name", "color"),
    ),
    "label_edit": _tool(
        "Edit a label.",
        {
            "id": _i("Label ID (from label_list)."),
            "name": _s("New name."),
            "color": _s("New hex color."),
            "description": _s("New description."),
        },
        ("id",),
    ),
    # Milestones
    "milestone_list": _tool("List milestones.", {"state": _STATE_FILTER}, paged=True),
    "milestone_get": _tool("Get a milestone.", {"id": _i("Milestone ID.")}, ("id",)),
    "milestone_create": _tool(
        "Create a milestone.",
        {
            "title": _s("Milestone title.", minLength=1),
            "description": _s("Milestone description."),
            "due_on": _s("Due date (ISO 8601)."),
        },
        ("title",),
    ),
    # Notifications
    "notification_list": _tool(
        "List notifications for the authenticated user.",
        {"status": _s("Filter: unread, read, all or participating.")},
        repo_scoped=False,
        paged=True,
    ),
    "notification_mark_read": _tool(
        "Mark one notification thread, or all notifications, as read.",
        {"id": {"type": ["integer", "string"], "description": "Thread ID. Omit to mark everything read."}},
        repo_scoped=False,
    ),
    # Releases
    "release_list": _tool("List releases.", paged=True),
    "release_get": _tool("Get a release.", {"id": _i("Release ID.")}, ("id",)),
    "release_create": _tool(
        "Create a release.",
        {
            "tag_name": _s("Tag to release.", minLength=1),
            "name": _s("Release title."),
            "body": _s("Release notes."),
            "draft": _b("Create as draft."),
            "prerelease": _b("Mark as prerelease."),
            "target_commitish": _s("Branch or SHA the tag is created from."),
        },
        ("tag_name",),
    ),
    # Repository
    "repo_get": _tool("Get repository details."),
    "repo_search": _tool("Search repositories.", {"q": _s("Search keyword.", minLength=1)}, ("q",), repo_scoped=False, paged=True),
    # Users
    "user_get_me": _tool("Get the authenticated user.", repo_scoped=False),
    "user_get": _tool("Get a user by name.", {"username": _s("Username.", minLength=1)}, ("username",), repo_scoped=False),
    # Tags
    "tag_list": _tool("List tags.", paged=True),
    "tag_create": _tool(
        "Create a tag.",
        {
            "tag_name": _s("Tag name.", minLength=1),
            "target": _s("Branch or SHA to tag. Defaults to the default branch."),
            "message": _s("Annotation message."),
        },
        ("tag_name",),
    ),
    # Wiki
    "wiki_list": _tool("List wiki pages.", paged=True),
    "wiki_get": _tool("Get a wiki page.", {"slug": _s("Page slug (from wiki_list).", minLength=1)}, ("slug",)),
    "wiki_create": _tool(
        "Create a wiki page.",
        {"title": _s("Page title.", minLength=1), "content": _s("Page content in markdown.")},
        ("title", "content"),
    ),
    # Organizations
    "org_list": _tool("List organizations of the authenticated user.", repo_scoped=False),
    "org_get": _tool("Get an organization.", {"org": _s("Organization name.", minLength=1)}, ("org",), repo_scoped=False),
    "org_teams": _tool("List teams of an organization.", {"org": _s("Organization name.", minLength=1)}, ("org",), repo_scoped=False),
    # Actions
    "actions_workflow_list": _tool("List CI workflows."),
    "actions_run_list": _tool("List CI workflow runs.", paged=True),
    "actions_run_get": _tool("Get a CI workflow run.", {"run_id": _i("Run ID.")}, ("run_id",)),
    "actions_job_logs": _tool("Get the log output of a CI job.", {"job_id": _i("Job ID.")}, ("job_id",)),
}


@dataclass(frozen=True, slots=True)
class Runtime:
    """Per-server dependencies shared across tool calls.

    Nothing here is mutated after construction.
    """

    config: Config
    client: GitClient
    default_repo: RepoInfo | None = None

    @property
    def platform(self) -> Platform:
        return self.client.platform


def detect_default_repo(directory: str = ".") -> RepoInfo | None:
    """Best-effort lookup of the repository checked out at `directory`."""
    try:
        return resolve_repo(directory)
    except GitxError as exc:
        logger.info("No default repository detected: %s", exc.message)
        return None


def build_runtime_from_env(directory: str = ".") -> Runtime:
    """Resolve configuration, construct the client and detect the default repository.

    Raises:
        GitxError: If configuration is missing or ambiguous.
    """
    config = load_config_from_env(directory)
    client = create_client(config)
    logger.info("Using %s at %s", config.platform.display_name, config.base_url)

    default_repo = detect_default_repo(directory)
    if default_repo is not None:
        logger.info("Detected repository: %s", default_repo.full_name)
    return Runtime(config=config, client=client, default_repo=default_repo)


_JSON_TYPES: dict[str, type | tuple[type, ...]] = {
    "string": str,
    "integer": int,
    "boolean": bool,
    "array": list,
    "object": dict,
}


def _matches_type(value: Any, expected: str) -> bool:
    py_type = _JSON_TYPES.get(expected)
    if py_type is None:
        return True
    if expected == "integer" and isinstance(value, bool):
        return False
    return isinstance(value, py_type)


def validate_tool_arguments(tool_name: str, arguments: dict[str, Any]) -> None:
    """Validate tool arguments against the tool's declared input schema.

    This is a minimal validator that enforces:
    - required fields
    - no extra properties when additionalProperties=false
    - basic JSON types, enums, minLength and minimum

    It does NOT implement full JSON Schema.
    """
    if tool_name not in TOOL_METADATA:
        raise missing_parameter(f"unknown tool '{tool_name}'")

    schema = TOOL_METADATA[tool_name]["inputSchema"]
    props: dict[str, Any] = schema.get("properties", {})
    required: list[str] = schema.get("required", [])

    for k in required:
        if k not in arguments or arguments[k] is None:
            raise missing_parameter(k)

    if schema.get("additionalProperties", True) is False:
        extras = sorted(k for k in arguments if k not in props)
        if extras:
            raise missing_parameter(f"unexpected fields: {', '.join(extras)}")

    for k, spec in props.items():
        v = arguments.get(k)
        if v is None:
            continue
        expected = spec.get("type")
        if expected is None:
            continue
        allowed = expected if isinstance(expected, list) else [expected]
        if not any(_matches_type(v, t) for t in allowed):
            raise missing_parameter(f"field '{k}' must be of type {' or '.join(allowed)}")

        enum = spec.get("enum")
        if enum is not None and v not in enum:
            raise missing_parameter(f"field '{k}' must be one of {', '.join(enum)}")

        min_len = spec.get("minLength")
        if isinstance(v, str) and isinstance(min_len, int) and len(v) < min_len:
            raise missing_parameter(f"field '{k}' must not be empty")

        minimum = spec.get("minimum")
        if isinstance(v, int) and isinstance(minimum, int) and v < minimum:
            raise missing_parameter(f"field '{k}' must be >= {minimum}")


# Argument helpers


def _require_str(arguments: dict[str, Any], key: str) -> str:
    v = arguments.get(key)
    if not isinstance(v, str) or not v:
        raise missing_parameter(key)
    return v


def _require_int(arguments: dict[str, Any], key: str) -> int:
    v = arguments.get(key)
    if not isinstance(v, int) or isinstance(v, bool):
        raise missing_parameter(key)
    return v


def _opt_str(arguments: dict[str, Any], key: str) -> str | None:
    v = arguments.get(key)
    return v if isinstance(v, str) else None


def _put_optional(body: dict[str, Any], arguments: dict[str, Any], *keys: str) -> dict[str, Any]:
    for key in keys:
        if arguments.get(key) is not None:
            body[key] = arguments[key]
    return body


def _target(runtime: Runtime, arguments: dict[str, Any]) -> RepoInfo:
    return resolve_owner_repo(
        owner=_opt_str(arguments, "owner"),
        repo=_opt_str(arguments, "repo"),
        directory=_opt_str(arguments, "directory"),
        default=runtime.default_repo,
    )


def _repo_path(runtime: Runtime, arguments: dict[str, Any], suffix: str = "") -> str:
    target = _target(runtime, arguments)
    return f"/repos/{target.owner}/{target.repo}{suffix}"


def _page_query(runtime: Runtime, arguments: dict[str, Any]) -> list[tuple[str, str]]:
    page = arguments.get("page") or 1
    limit = min(arguments.get("limit") or DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)
    return [("page", str(page)), (runtime.client.page_size_param, str(limit))]


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _fenced(text: str, lang: str = "") -> str:
    return f"```{lang}\n{text}\n```"


def _encode_content(content: str) -> str:
    return base64.b64encode(content.encode("utf-8")).decode("ascii")


def _is_github(runtime: Runtime) -> bool:
    return runtime.platform is Platform.GITHUB


# Issues


async def _tool_issue_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    path = _repo_path(runtime, arguments, "/issues")
    query: list[tuple[str, str]] = [("state", _opt_str(arguments, "state") or "open")]
    if not _is_github(runtime):
        # Gitea mixes pull requests into /issues unless asked not to.
        query.append(("type", "issues"))
    labels = _opt_str(arguments, "labels")
    if labels:
        query.append(("labels", labels))
    milestone = _opt_str(arguments, "milestone")
    if milestone:
        query.append(("milestones" if not _is_github(runtime) else "milestone", milestone))
    query.extend(_page_query(runtime, arguments))

    items = _as_list(await runtime.client.get_json(path, query))
    if _is_github(runtime):
        items = [i for i in items if not (isinstance(i, dict) and "pull_request" in i)]
    return format_issue_list(items)


async def _tool_issue_get(runtime: Runtime, arguments: dict[str, Any]) -> str:
    index = _require_int(arguments, "index")
    issue = await runtime.client.get_json(_repo_path(runtime, arguments, f"/issues/{index}"))
    return format_issue(issue)


async def _tool_issue_create(runtime: Runtime, arguments: dict[str, Any]) -> str:
    body = _put_optional({"title": _require_str(arguments, "title")}, arguments, "body", "labels", "milestone", "assignees")
    issue = await runtime.client.post_json(_repo_path(runtime, arguments, "/issues"), body)
    return format_issue(issue)


async def _tool_issue_edit(runtime: Runtime, arguments: dict[str, Any]) -> str:
    index = _require_int(arguments, "index")
    body = _put_optional({}, arguments, "title", "body", "state", "labels", "milestone", "assignees")
    issue = await runtime.client.patch_json(_repo_path(runtime, arguments, f"/issues/{index}"), body)
    return format_issue(issue)


async def _tool_issue_comment_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    index = _require_int(arguments, "index")
    comments = await runtime.client.get_json(_repo_path(runtime, arguments, f"/issues/{index}/comments"))
    return format_comment_list(_as_list(comments))


async def _tool_issue_comment_create(runtime: Runtime, arguments: dict[str, Any]) -> str:
    index = _require_int(arguments, "index")
    body = {"body": _require_str(arguments, "body")}
    comment = await runtime.client.post_json(_repo_path(runtime, arguments, f"/issues/{index}/comments"), body)
    return format_comment(comment)


# Pull requests


async def _tool_pr_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    query = [("state", _opt_str(arguments, "state") or "open"), *_page_query(runtime, arguments)]
    prs = await runtime.client.get_json(_repo_path(runtime, arguments, "/pulls"), query)
    return format_pr_list(_as_list(prs))


async def _tool_pr_get(runtime: Runtime, arguments: dict[str, Any]) -> str:
    index = _require_int(arguments, "index")
    pr = await runtime.client.get_json(_repo_path(runtime, arguments, f"/pulls/{index}"))
    return format_pull_request(pr)


async def _tool_pr_create(runtime: Runtime, arguments: dict[str, Any]) -> str:
    body = {
        "title": _require_str(arguments, "title"),
        "head": _require_str(arguments, "head"),
        "base": _require_str(arguments, "base"),
    }
    _put_optional(body, arguments, "body", "labels", "milestone", "assignees")
    pr = await runtime.client.post_json(_repo_path(runtime, arguments, "/pulls"), body)
    return format_pull_request(pr)


async def _tool_pr_edit(runtime: Runtime, arguments: dict[str, Any]) -> str:
    index = _require_int(arguments, "index")
    body = _put_optional({}, arguments, "title", "body", "state", "labels", "assignees")
    pr = await runtime.client.patch_json(_repo_path(runtime, arguments, f"/pulls/{index}"), body)
    return format_pull_request(pr)


async def _tool_pr_merge(runtime: Runtime, arguments: dict[str, Any]) -> str:
    index = _require_int(arguments, "index")
    style = _opt_str(arguments, "merge_style") or "merge"
    message = _opt_str(arguments, "merge_message")

    if _is_github(runtime):
        body: dict[str, Any] = {"merge_method": style}
        if message is not None:
            body["commit_message"] = message
    else:
        body = {"Do": style}
        if message is not None:
            body["merge_message_field"] = message
    _put_optional(body, arguments, "delete_branch_after_merge")

    await runtime.client.post_no_content(_repo_path(runtime, arguments, f"/pulls/{index}/merge"), body)
    return f"Pull request #{index} merged successfully."


async def _tool_pr_review_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    index = _require_int(arguments, "index")
    reviews = _as_list(await runtime.client.get_json(_repo_path(runtime, arguments, f"/pulls/{index}/reviews")))
    if not reviews:
        return "No reviews found."
    lines = []
    for review in reviews:
        review_id = lookup(review, "id", default=0, kind=int)
        user = lookup(review, "user", "login", default="unknown", kind=str)
        state = lookup(review, "state", default="unknown", kind=str)
        line = f"- Review #{review_id} by {user}: {state}"
        text = lookup(review, "body", default="", kind=str)
        lines.append(f"{line}\n  {text}" if text else line)
    return "\n".join(lines)


async def _tool_pr_review_create(runtime: Runtime, arguments: dict[str, Any]) -> str:
    index = _require_int(arguments, "index")
    body = _put_optional({"event": _require_str(arguments, "event")}, arguments, "body")
    review = await runtime.client.post_json(_repo_path(runtime, arguments, f"/pulls/{index}/reviews"), body)
    return f"Review submitted: {lookup(review, 'state', default='submitted', kind=str)}"


async def _tool_pr_files(runtime: Runtime, arguments: dict[str, Any]) -> str:
    index = _require_int(arguments, "index")
    files = _as_list(await runtime.client.get_json(_repo_path(runtime, arguments, f"/pulls/{index}/files")))
    if not files:
        return "No changed files."
    lines = []
    for f in files:
        name = lookup(f, "filename", default="unknown", kind=str)
        status = lookup(f, "status", default="modified", kind=str)
        additions = lookup(f, "additions", default=0, kind=int)
        deletions = lookup(f, "deletions", default=0, kind=int)
        lines.append(f"- {name} ({status}) +{additions} -{deletions}")
    return "\n".join(lines)


async def _tool_pr_diff(runtime: Runtime, arguments: dict[str, Any]) -> str:
    index = _require_int(arguments, "index")
    # GitHub serves the diff from the PR resource itself via the Accept header.
    suffix = f"/pulls/{index}" if _is_github(runtime) else f"/pulls/{index}.diff"
    diff = await runtime.client.get_raw(_repo_path(runtime, arguments, suffix))
    return _fenced(diff, "diff") if diff else "No diff content."


# Files


def _ref_query(arguments: dict[str, Any]) -> list[tuple[str, str]] | None:
    ref = _opt_str(arguments, "ref")
    return [("ref", ref)] if ref else None


async def _tool_file_read(runtime: Runtime, arguments: dict[str, Any]) -> str:
    path = _require_str(arguments, "path").lstrip("/")
    file = await runtime.client.get_json(_repo_path(runtime, arguments, f"/contents/{path}"), _ref_query(arguments))
    if isinstance(file, list):
        return format_file_list(file)
    return format_file_content(file)


async def _tool_file_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    path = (_opt_str(arguments, "path") or "").lstrip("/")
    entries = await runtime.client.get_json(_repo_path(runtime, arguments, f"/contents/{path}"), _ref_query(arguments))
    if isinstance(entries, dict):
        return format_file_content(entries)
    return format_file_list(_as_list(entries))


async def _tool_file_create(runtime: Runtime, arguments: dict[str, Any]) -> str:
    path = _require_str(arguments, "path").lstrip("/")
    body = {"content": _encode_content(arguments.get("content") or ""), "message": _require_str(arguments, "message")}
    _put_optional(body, arguments, "branch", "new_branch")

    url = _repo_path(runtime, arguments, f"/contents/{path}")
    # GitHub creates and updates files with the same PUT endpoint.
    if _is_github(runtime):
        result = await runtime.client.put_json(url, body)
    else:
        result = await runtime.client.post_json(url, body)
    return f"File created: {lookup(result, 'content', 'path', default=path, kind=str)}"


async def _tool_file_update(runtime: Runtime, arguments: dict[str, Any]) -> str:
    path = _require_str(arguments, "path").lstrip("/")
    body = {
        "content": _encode_content(arguments.get("content") or ""),
        "sha": _require_str(arguments, "sha"),
        "message": _require_str(arguments, "message"),
    }
    _put_optional(body, arguments, "branch", "new_branch")
    await runtime.client.put_json(_repo_path(runtime, arguments, f"/contents/{path}"), body)
    return f"File updated: {path}"


async def _tool_file_delete(runtime: Runtime, arguments: dict[str, Any]) -> str:
    path = _require_str(arguments, "path").lstrip("/")
    body = _put_optional(
        {"sha": _require_str(arguments, "sha"), "message": _require_str(arguments, "message")},
        arguments,
        "branch",
    )
    await runtime.client.delete_with_body(_repo_path(runtime, arguments, f"/contents/{path}"), body)
    return f"File deleted: {path}"


async def _tool_tree_get(runtime: Runtime, arguments: dict[str, Any]) -> str:
    ref = _opt_str(arguments, "ref") or "HEAD"
    tree = await runtime.client.get_json(_repo_path(runtime, arguments, f"/git/trees/{ref}"), [("recursive", "true")])
    entries = _as_list(lookup(tree, "tree"))
    if not entries:
        return "No files found in tree."
    lines = []
    for entry in entries:
        path = lookup(entry, "path", default="?", kind=str)
        lines.append(f"{path}/" if lookup(entry, "type") == "tree" else path)
    return "\n".join(lines)


# Branches


async def _default_branch(runtime: Runtime, repo_path: str) -> str:
    repo = await runtime.client.get_json(repo_path)
    branch = lookup(repo, "default_branch", kind=str)
    if not branch:
        raise GitxError(kind=ErrorKind.API_FAILURE, message="Repository has no default branch")
    return branch


async def _commit_sha(runtime: Runtime, repo_path: str, ref: str) -> str:
    commit = await runtime.client.get_json(f"{repo_path}/commits/{ref}")
    sha = lookup(commit, "sha", kind=str)
    if not sha:
        raise GitxError(kind=ErrorKind.API_FAILURE, message=f"Could not resolve ref '{ref}' to a commit")
    return sha


async def _tool_branch_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    branches = await runtime.client.get_json(_repo_path(runtime, arguments, "/branches"), _page_query(runtime, arguments))
    return format_branch_list(_as_list(branches))


async def _tool_branch_create(runtime: Runtime, arguments: dict[str, Any]) -> str:
    new_branch = _require_str(arguments, "new_branch_name")
    old_branch = _opt_str(arguments, "old_branch_name")
    repo_path = _repo_path(runtime, arguments)

    if _is_github(runtime):
        source = old_branch or await _default_branch(runtime, repo_path)
        sha = await _commit_sha(runtime, repo_path, source)
        await runtime.client.post_json(f"{repo_path}/git/refs", {"ref": f"refs/heads/{new_branch}", "sha": sha})
        return f"Branch created: {new_branch}"

    body: dict[str, Any] = {"new_branch_name": new_branch}
    if old_branch:
        body["old_branch_name"] = old_branch
    branch = await runtime.client.post_json(f"{repo_path}/branches", body)
    return f"Branch created: {lookup(branch, 'name', default=new_branch, kind=str)}"


async def _tool_branch_delete(runtime: Runtime, arguments: dict[str, Any]) -> str:
    branch = _require_str(arguments, "branch")
    suffix = f"/git/refs/heads/{branch}" if _is_github(runtime) else f"/branches/{branch}"
    await runtime.client.delete(_repo_path(runtime, arguments, suffix))
    return f"Branch deleted: {branch}"


async def _tool_branch_protection_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    if _is_github(runtime):
        query = [("per_page", "100"), ("protected", "true")]
        branches = _as_list(await runtime.client.get_json(_repo_path(runtime, arguments, "/branches"), query))
        lines = [
            f"- {lookup(b, 'name', default='unknown', kind=str)} [protected]"
            for b in branches
            if lookup(b, "protected", default=False, kind=bool)
        ]
    else:
        rules = _as_list(await runtime.client.get_json(_repo_path(runtime, arguments, "/branch_protections")))
        lines = [
            f"- {lookup(r, 'branch_name', default='unknown', kind=str)} "
            f"(push: {scalar_text(lookup(r, 'enable_push', default=False, kind=bool))})"
            for r in rules
        ]
    return "\n".join(lines) if lines else "No branch protection rules found."


async def _tool_branch_protection_create(runtime: Runtime, arguments: dict[str, Any]) -> str:
    branch = _require_str(arguments, "branch_name")
    enable_push = arguments.get("enable_push")
    block_on_rejected = arguments.get("block_on_rejected_reviews")

    if _is_github(runtime):
        body: dict[str, Any] = {
            "required_status_checks": None,
            "enforce_admins": True,
            "required_pull_request_reviews": None,
            "restrictions": None,
        }
        if enable_push is False:
            body["required_pull_request_reviews"] = {"required_approving_review_count": 1}
        if block_on_rejected is True:
            body["required_pull_request_reviews"] = {"dismiss_stale_reviews": True, "required_approving_review_count": 1}
        await runtime.client.put_json(_repo_path(runtime, arguments, f"/branches/{branch}/protection"), body)
    else:
        body = _put_optional({"branch_name": branch}, arguments, "enable_push", "block_on_rejected_reviews")
        await runtime.client.post_json(_repo_path(runtime, arguments, "/branch_protections"), body)
    return f"Branch protection created for: {branch}"


# Commits


async def _tool_commit_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    query: list[tuple[str, str]] = []
    for key in ("sha", "path"):
        value = _opt_str(arguments, key)
        if value:
            query.append((key, value))
    query.extend(_page_query(runtime, arguments))
    commits = await runtime.client.get_json(_repo_path(runtime, arguments, "/commits"), query)
    return format_commit_list(_as_list(commits))


async def _tool_commit_get(runtime: Runtime, arguments: dict[str, Any]) -> str:
    sha = _require_str(arguments, "sha")
    # GitHub's git-data commit lacks the nested `commit` object; the REST commit has it.
    suffix = f"/commits/{sha}" if _is_github(runtime) else f"/git/commits/{sha}"
    commit = await runtime.client.get_json(_repo_path(runtime, arguments, suffix))
    return format_commit(commit)


async def _tool_commit_diff(runtime: Runtime, arguments: dict[str, Any]) -> str:
    sha = _require_str(arguments, "sha")
    suffix = f"/commits/{sha}" if _is_github(runtime) else f"/git/commits/{sha}.diff"
    diff = await runtime.client.get_raw(_repo_path(runtime, arguments, suffix))
    return _fenced(diff, "diff") if diff else "No diff content."


async def _tool_commit_compare(runtime: Runtime, arguments: dict[str, Any]) -> str:
    base = _require_str(arguments, "base")
    head = _require_str(arguments, "head")
    result = await runtime.client.get_json(_repo_path(runtime, arguments, f"/compare/{base}...{head}"))

    out: list[str] = []
    commits = lookup(result, "commits", kind=list)
    if commits is not None:
        out.append(f"**Commits:** {len(commits)}")
        if commits:
            out.append(format_commit_list(commits))

    files = lookup(result, "files", kind=list)
    if files is not None:
        out.append(f"\n**Changed files:** {len(files)}")
        for f in files[:COMPARE_MAX_FILES]:
            name = lookup(f, "filename", default="unknown", kind=str)
            status = lookup(f, "status", default="modified", kind=str)
            out.append(f"- {name} ({status})")

    return "\n".join(out) if out else "No differences found."


# Labels


def _label_color(runtime: Runtime, color: str) -> str:
    bare = color.lstrip("#")
    return bare if _is_github(runtime) else f"#{bare}"


async def _tool_label_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    labels = _as_list(await runtime.client.get_json(_repo_path(runtime, arguments, "/labels")))
    if not labels:
        return "No labels found."
    lines = []
    for label in labels:
        name = lookup(label, "name", default="?", kind=str)
        color = lookup(label, "color", default="000000", kind=str).lstrip("#")
        label_id = lookup(label, "id", default=0, kind=int)
        desc = lookup(label, "description", default="", kind=str)
        line = f"- {name} (#{color}) [id: {label_id}]"
        lines.append(f"{line} - {desc}" if desc else line)
    return "\n".join(lines)


async def _tool_label_create(runtime: Runtime, arguments: dict[str, Any]) -> str:
    name = _require_str(arguments, "name")
    body = {"name": name, "color": _label_color(runtime, _require_str(arguments, "color"))}
    _put_optional(body, arguments, "description")
    label = await runtime.client.post_json(_repo_path(runtime, arguments, "/labels"), body)
    return f"Label created: {lookup(label, 'name', default=name, kind=str)}"


async def _tool_label_edit(runtime: Runtime, arguments: dict[str, Any]) -> str:
    label_id = _require_int(arguments, "id")
    body = _put_optional({}, arguments, "name", "description")
    color = _opt_str(arguments, "color")
    if color:
        body["color"] = _label_color(runtime, color)
    label = await runtime.client.patch_json(_repo_path(runtime, arguments, f"/labels/{label_id}"), body)
    return f"Label updated: {lookup(label, 'name', default='?', kind=str)}"


# Milestones


async def _tool_milestone_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    query = [("state", _opt_str(arguments, "state") or "open"), *_page_query(runtime, arguments)]
    milestones = _as_list(await runtime.client.get_json(_repo_path(runtime, arguments, "/milestones"), query))
    if not milestones:
        return "No milestones found."
    lines = []
    for m in milestones:
        title = lookup(m, "title", default="?", kind=str)
        state = lookup(m, "state", default="?", kind=str)
        # GitHub addresses milestones by number, Gitea by id.
        ident = lookup(m, "number", kind=int) if _is_github(runtime) else None
        if ident is None:
            ident = lookup(m, "id", default=0, kind=int)
        open_issues = lookup(m, "open_issues", default=0, kind=int)
        closed_issues = lookup(m, "closed_issues", default=0, kind=int)
        lines.append(f"- {title} ({state}) [id: {ident}] - {open_issues} open, {closed_issues} closed")
    return "\n".join(lines)


async def _tool_milestone_get(runtime: Runtime, arguments: dict[str, Any]) -> str:
    milestone_id = _require_int(arguments, "id")
    milestone = await runtime.client.get_json(_repo_path(runtime, arguments, f"/milestones/{milestone_id}"))
    return format_value(milestone)


async def _tool_milestone_create(runtime: Runtime, arguments: dict[str, Any]) -> str:
    title = _require_str(arguments, "title")
    body = _put_optional({"title": title}, arguments, "description", "due_on")
    milestone = await runtime.client.post_json(_repo_path(runtime, arguments, "/milestones"), body)
    return f"Milestone created: {lookup(milestone, 'title', default=title, kind=str)}"


# Notifications


async def _tool_notification_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    query: list[tuple[str, str]] = []
    status = _opt_str(arguments, "status")
    if status:
        if not _is_github(runtime):
            query.append(("status-types", status))
        elif status in ("all", "read"):
            query.append(("all", "true"))
        elif status == "participating":
            query.append(("participating", "true"))
        # "unread" is GitHub's default.
    query.extend(_page_query(runtime, arguments))

    notifications = _as_list(await runtime.client.get_json("/notifications", query))
    if not notifications:
        return "No notifications found."
    lines = []
    for n in notifications:
        thread_id = scalar_text(lookup(n, "id", default=0))
        title = lookup(n, "subject", "title", default="(no title)", kind=str)
        subject_type = lookup(n, "subject", "type", default="unknown", kind=str)
        repo_name = lookup(n, "repository", "full_name", default="unknown", kind=str)
        state = "unread" if lookup(n, "unread", default=False, kind=bool) else "read"
        lines.append(f"- [{state}] #{thread_id} {subject_type}: {title} ({repo_name})")
    return "\n".join(lines)


async def _tool_notification_mark_read(runtime: Runtime, arguments: dict[str, Any]) -> str:
    thread_id = arguments.get("id")
    if thread_id is not None and thread_id != "":
        await runtime.client.patch_json(f"/notifications/threads/{thread_id}", {})
        return f"Notification #{thread_id} marked as read."
    await runtime.client.put_json("/notifications", {})
    return "All notifications marked as read."


# Releases


async def _tool_release_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    releases = _as_list(
        await runtime.client.get_json(_repo_path(runtime, arguments, "/releases"), _page_query(runtime, arguments))
    )
    if not releases:
        return "No releases found."
    lines = []
    for r in releases:
        tag = lookup(r, "tag_name", default="?", kind=str)
        name = lookup(r, "name", kind=str) or tag
        release_id = lookup(r, "id", default=0, kind=int)
        flags = [flag for flag in ("draft", "prerelease") if lookup(r, flag, default=False, kind=bool)]
        flag_str = f" [{', '.join(flags)}]" if flags else ""
        lines.append(f"- {name} ({tag}) [id: {release_id}]{flag_str}")
    return "\n".join(lines)


async def _tool_release_get(runtime: Runtime, arguments: dict[str, Any]) -> str:
    release_id = _require_int(arguments, "id")
    release = await runtime.client.get_json(_repo_path(runtime, arguments, f"/releases/{release_id}"))
    return format_value(release)


async def _tool_release_create(runtime: Runtime, arguments: dict[str, Any]) -> str:
    tag = _require_str(arguments, "tag_name")
    body = _put_optional({"tag_name": tag}, arguments, "name", "body", "draft", "prerelease", "target_commitish")
    release = await runtime.client.post_json(_repo_path(runtime, arguments, "/releases"), body)
    return f"Release created: {lookup(release, 'tag_name', default=tag, kind=str)}"


# Repository


def _stars(repo: Any) -> int:
    stars = lookup(repo, "stars_count", kind=int)
    return stars if stars is not None else lookup(repo, "stargazers_count", default=0, kind=int)


async def _tool_repo_get(runtime: Runtime, arguments: dict[str, Any]) -> str:
    repo = await runtime.client.get_json(_repo_path(runtime, arguments))
    parts = [f"## {lookup(repo, 'full_name', default='unknown', kind=str)}"]
    desc = lookup(repo, "description", kind=str)
    if desc:
        parts.append(f"**Description:** {desc}")
    branch = lookup(repo, "default_branch", kind=str)
    if branch:
        parts.append(f"**Default branch:** {branch}")
    forks = lookup(repo, "forks_count", default=0, kind=int)
    parts.append(f"**Stars:** {_stars(repo)} | **Forks:** {forks}")
    private = lookup(repo, "private", default=False, kind=bool)
    parts.append(f"**Visibility:** {'private' if private else 'public'}")
    language = lookup(repo, "language", kind=str)
    if language:
        parts.append(f"**Language:** {language}")
    return "\n".join(parts)


async def _tool_repo_search(runtime: Runtime, arguments: dict[str, Any]) -> str:
    query = [("q", _require_str(arguments, "q")), *_page_query(runtime, arguments)]
    if _is_github(runtime):
        result = await runtime.client.get_json("/search/repositories", query)
        repos = _as_list(lookup(result, "items"))
    else:
        result = await runtime.client.get_json("/repos/search", query)
        repos = _as_list(lookup(result, "data"))
    if not repos:
        return "No repositories found."
    lines = []
    for r in repos:
        line = f"- {lookup(r, 'full_name', default='?', kind=str)} ({_stars(r)} stars)"
        desc = lookup(r, "description", kind=str)
        lines.append(f"{line} - {desc}" if desc else line)
    return "\n".join(lines)


# Users


def _user_header(user: Any) -> list[str]:
    parts = [f"**Username:** {lookup(user, 'login', default='unknown', kind=str)}"]
    # Gitea: full_name, GitHub: name.
    full_name = lookup(user, "full_name", kind=str) or lookup(user, "name", kind=str)
    if full_name:
        parts.append(f"**Full name:** {full_name}")
    return parts


async def _tool_user_get_me(runtime: Runtime, arguments: dict[str, Any]) -> str:
    user = await runtime.client.get_json("/user")
    parts = _user_header(user)
    email = lookup(user, "email", kind=str)
    if email:
        parts.append(f"**Email:** {email}")
    if lookup(user, "is_admin", default=False, kind=bool) or lookup(user, "site_admin", default=False, kind=bool):
        parts.append("**Role:** admin")
    return "\n".join(parts)


async def _tool_user_get(runtime: Runtime, arguments: dict[str, Any]) -> str:
    username = _require_str(arguments, "username")
    user = await runtime.client.get_json(f"/users/{username}")
    parts = _user_header(user)
    created = lookup(user, "created", kind=str) or lookup(user, "created_at", kind=str)
    if created:
        parts.append(f"**Created:** {created}")
    return "\n".join(parts)


# Tags


async def _tool_tag_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    tags = _as_list(await runtime.client.get_json(_repo_path(runtime, arguments, "/tags"), _page_query(runtime, arguments)))
    if not tags:
        return "No tags found."
    lines = [f"- {lookup(t, 'name', default='?', kind=str)} (`{short_sha(lookup(t, 'commit', 'sha'))}`)" for t in tags]
    return "\n".join(lines)


async def _tool_tag_create(runtime: Runtime, arguments: dict[str, Any]) -> str:
    tag = _require_str(arguments, "tag_name")
    target = _opt_str(arguments, "target")
    repo_path = _repo_path(runtime, arguments)

    if _is_github(runtime):
        # Lightweight tag: a ref pointing at the target commit.
        sha = await _commit_sha(runtime, repo_path, target or await _default_branch(runtime, repo_path))
        await runtime.client.post_json(f"{repo_path}/git/refs", {"ref": f"refs/tags/{tag}", "sha": sha})
        return f"Tag created: {tag}"

    body = _put_optional({"tag_name": tag}, arguments, "target", "message")
    created = await runtime.client.post_json(f"{repo_path}/tags", body)
    return f"Tag created: {lookup(created, 'name', default=tag, kind=str)}"


# Wiki


async def _tool_wiki_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    if _is_github(runtime):
        return WIKI_UNAVAILABLE
    try:
        pages = await runtime.client.get_json(_repo_path(runtime, arguments, "/wiki/pages"), _page_query(runtime, arguments))
    except GitxError as err:
        if err.kind is ErrorKind.NOT_FOUND:
            return "No wiki pages found (wiki may be disabled for this repository)."
        raise
    pages = _as_list(pages)
    if not pages:
        return "No wiki pages found."
    lines = [
        f"- {lookup(p, 'title', default='?', kind=str)} (slug: {lookup(p, 'sub_url', default='?', kind=str)})"
        for p in pages
    ]
    return "\n".join(lines)


async def _tool_wiki_get(runtime: Runtime, arguments: dict[str, Any]) -> str:
    if _is_github(runtime):
        return WIKI_UNAVAILABLE
    slug = _require_str(arguments, "slug")
    page = await runtime.client.get_json(_repo_path(runtime, arguments, f"/wiki/page/{slug}"))
    title = lookup(page, "title", default="(untitled)", kind=str)
    content = lookup(page, "content_base64", default="", kind=str)
    if content:
        decoded = decode_base64_text(content)
        text = decoded if decoded is not None else "(failed to decode content)"
    else:
        text = "(empty page)"
    return f"## {title}\n\n{text}"


async def _tool_wiki_create(runtime: Runtime, arguments: dict[str, Any]) -> str:
    if _is_github(runtime):
        return WIKI_UNAVAILABLE
    title = _require_str(arguments, "title")
    body = {"title": title, "content_base64": _encode_content(arguments.get("content") or "")}
    await runtime.client.post_json(_repo_path(runtime, arguments, "/wiki/new"), body)
    return f"Wiki page created: {title}"


# Organizations


def _org_name(org: Any) -> str:
    # Gitea orgs carry `name`, GitHub orgs `login`.
    return lookup(org, "name", kind=str) or lookup(org, "login", default="?", kind=str)


async def _tool_org_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    orgs = _as_list(await runtime.client.get_json("/user/orgs"))
    if not orgs:
        return "No organizations found."
    lines = []
    for org in orgs:
        name = _org_name(org)
        full_name = lookup(org, "full_name", default="", kind=str)
        lines.append(f"- {name} ({full_name})" if full_name and full_name != name else f"- {name}")
    return "\n".join(lines)


async def _tool_org_get(runtime: Runtime, arguments: dict[str, Any]) -> str:
    org_name = _require_str(arguments, "org")
    org = await runtime.client.get_json(f"/orgs/{org_name}")
    name = _org_name(org)
    parts = [f"## {name}"]
    full_name = lookup(org, "full_name", kind=str)
    if full_name and full_name != name:
        parts.append(f"**Full name:** {full_name}")
    for key, label in (("description", "Description"), ("location", "Location")):
        value = lookup(org, key, kind=str)
        if value:
            parts.append(f"**{label}:** {value}")
    # GitHub calls the website `blog`.
    website = lookup(org, "website", kind=str) or lookup(org, "blog", kind=str)
    if website:
        parts.append(f"**Website:** {website}")
    return "\n".join(parts)


async def _tool_org_teams(runtime: Runtime, arguments: dict[str, Any]) -> str:
    org_name = _require_str(arguments, "org")
    teams = _as_list(await runtime.client.get_json(f"/orgs/{org_name}/teams"))
    if not teams:
        return "No teams found."
    lines = []
    for team in teams:
        name = lookup(team, "name", default="?", kind=str)
        team_id = lookup(team, "id", default=0, kind=int)
        permission = lookup(team, "permission", default="none", kind=str)
        lines.append(f"- {name} (id: {team_id}, permission: {permission})")
    return "\n".join(lines)


# Actions


async def _workflow_files(runtime: Runtime, repo_path: str, directory: str) -> list[str]:
    try:
        entries = await runtime.client.get_json(f"{repo_path}/contents/{directory}")
    except GitxError as err:
        logger.debug("No workflow directory %s: %s", directory, err.message)
        return []
    return [f"- {lookup(e, 'name', default='?', kind=str)}" for e in _as_list(entries)]


async def _tool_actions_workflow_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    repo_path = _repo_path(runtime, arguments)

    if _is_github(runtime):
        workflows = _as_list(lookup(await runtime.client.get_json(f"{repo_path}/actions/workflows"), "workflows"))
        if not workflows:
            return "No workflows found."
        return "\n".join(
            f"- {lookup(w, 'name', default='?', kind=str)} "
            f"({lookup(w, 'state', default='unknown', kind=str)}) [{lookup(w, 'path', default='', kind=str)}]"
            for w in workflows
        )

    # Older Gitea releases have no tasks endpoint; fall back to the workflow files.
    try:
        tasks = await runtime.client.get_json(f"{repo_path}/actions/tasks")
    except GitxError as err:
        logger.debug("Actions tasks unavailable: %s", err.message)
        tasks = None
    runs = _as_list(lookup(tasks, "workflow_runs"))
    if runs:
        return "\n".join(
            f"- {lookup(r, 'name', default='?', kind=str)} ({lookup(r, 'status', default='unknown', kind=str)})"
            for r in runs
        )

    for directory in (".gitea/workflows", ".github/workflows"):
        files = await _workflow_files(runtime, repo_path, directory)
        if files:
            return "Workflow files:\n" + "\n".join(files)
    return "No workflows found."


def _run_title(run: Any) -> str:
    return lookup(run, "display_title", kind=str) or lookup(run, "name", default="(untitled)", kind=str)


def _run_workflow(run: Any) -> str | None:
    path = lookup(run, "path", kind=str)
    return path.split("@", 1)[0] if path is not None else None


async def _tool_actions_run_list(runtime: Runtime, arguments: dict[str, Any]) -> str:
    result = await runtime.client.get_json(_repo_path(runtime, arguments, "/actions/runs"), _page_query(runtime, arguments))
    runs = _as_list(lookup(result, "workflow_runs"))
    if not runs:
        return "No workflow runs found."
    lines = []
    for run in runs:
        number = lookup(run, "run_number", default=0, kind=int)
        state = lookup(run, "conclusion", kind=str) or lookup(run, "status", default="unknown", kind=str)
        lines.append(f"- #{number} [{_run_workflow(run) or '?'}] {_run_title(run)} ({state})")
    return "\n".join(lines)


async def _tool_actions_run_get(runtime: Runtime, arguments: dict[str, Any]) -> str:
    run_id = _require_int(arguments, "run_id")
    run = await runtime.client.get_json(_repo_path(runtime, arguments, f"/actions/runs/{run_id}"))
    number = lookup(run, "run_number", default=0, kind=int)
    status = lookup(run, "status", default="unknown", kind=str)
    parts = [f"## Run #{number}: {_run_title(run)} [{status}]"]

    conclusion = lookup(run, "conclusion", kind=str)
    if conclusion:
        parts.append(f"**Conclusion:** {conclusion}")
    workflow = _run_workflow(run)
    if workflow is not None:
        parts.append(f"**Workflow:** {workflow}")
    for keys, label in (
        (("event",), "Event"),
        (("head_branch",), "Branch"),
        (("actor", "login"), "Actor"),
        (("started_at",), "Started"),
        (("completed_at",), "Completed"),
    ):
        value = lookup(run, *keys, kind=str)
        if value is not None:
            parts.append(f"**{label}:** {value}")
    return "\n".join(parts)


async def _tool_actions_job_logs(runtime: Runtime, arguments: dict[str, Any]) -> str:
    job_id = _require_int(arguments, "job_id")
    logs = await runtime.client.get_raw(_repo_path(runtime, arguments, f"/actions/jobs/{job_id}/logs"))
    return _fenced(logs) if logs else "No logs available."


ToolFunc = Callable[[Runtime, dict[str, Any]], Awaitable[str]]

_TOOL_FUNCS: dict[str, ToolFunc] = {
    "issue_list": _tool_issue_list,
    "issue_get": _tool_issue_get,
    "issue_create": _tool_issue_create,
    "issue_edit": _tool_issue_edit,
    "issue_comment_list": _tool_issue_comment_list,
    "issue_comment_create": _tool_issue_comment_create,
    "pr_list": _tool_pr_list,
    "pr_get": _tool_pr_get,
    "pr_create": _tool_pr_create,
    "pr_edit": _tool_pr_edit,
    "pr_merge": _tool_pr_merge,
    "pr_review_list": _tool_pr_review_list,
    "pr_review_create": _tool_pr_review_create,
    "pr_files": _tool_pr_files,
    "pr_diff": _tool_pr_diff,
    "file_read": _tool_file_read,
    "file_list": _tool_file_list,
    "file_create": _tool_file_create,
    "file_update": _tool_file_update,
    "file_delete": _tool_file_delete,
    "tree_get": _tool_tree_get,
    "branch_list": _tool_branch_list,
    "branch_create": _tool_branch_create,
    "branch_delete": _tool_branch_delete,
    "branch_protection_list": _tool_branch_protection_list,
    "branch_protection_create": _tool_branch_protection_create,
    "commit_list": _tool_commit_list,
    "commit_get": _tool_commit_get,
    "commit_diff": _tool_commit_diff,
    "commit_compare": _tool_commit_compare,
    "label_list": _tool_label_list,
    "label_create": _tool_label_create,
    "label_edit": _tool_label_edit,
    "milestone_list": _tool_milestone_list,
    "milestone_get": _tool_milestone_get,
    "milestone_create": _tool_milestone_create,
    "notification_list": _tool_notification_list,
    "notification_mark_read": _tool_notification_mark_read,
    "release_list": _tool_release_list,
    "release_get": _tool_release_get,
    "release_create": _tool_release_create,
    "repo_get": _tool_repo_get,
    "repo_search": _tool_repo_search,
    "user_get_me": _tool_user_get_me,
    "user_get": _tool_user_get,
    "tag_list": _tool_tag_list,
    "tag_create": _tool_tag_create,
    "wiki_list": _tool_wiki_list,
    "wiki_get": _tool_wiki_get,
    "wiki_create": _tool_wiki_create,
    "org_list": _tool_org_list,
    "org_get": _tool_org_get,
    "org_teams": _tool_org_teams,
    "actions_workflow_list": _tool_actions_workflow_list,
    "actions_run_list": _tool_actions_run_list,
    "actions_run_get": _tool_actions_run_get,
    "actions_job_logs": _tool_actions_job_logs,
}


async def dispatch_tool(runtime: Runtime, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    """Dispatch a tool call.

    Returns `{"ok": True, "text": ...}` on success, or an error envelope whose
    `code` separates caller mistakes (InvalidParams) from system failures
    (Internal).
    """
    try:
        func = _TOOL_FUNCS.get(name)
        if func is None:
            raise GitxError(
                kind=ErrorKind.MISSING_PARAMETER,
                message=f"Unknown tool: {name}. Available tools: {', '.join(sorted(_TOOL_FUNCS))}",
            )
        validate_tool_arguments(name, arguments)
        text = await func(runtime, arguments)
        return {"ok": True, "text": text}
    except GitxError as err:
        logger.warning("Tool %s failed (%s): %s", name, err.kind.value, err.message)
        return gitx_error_to_result(err)
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("Tool %s failed unexpectedly", name)
        return internal_error("Tool execution failed")


def check_catalog() -> None:
    """Fail if a declared tool has no implementation or vice versa."""
    missing = sorted(set(TOOL_METADATA) - set(_TOOL_FUNCS))
    extra = sorted(set(_TOOL_FUNCS) - set(TOOL_METADATA))
    if missing or extra:
        raise RuntimeError(f"Tool catalog mismatch (no implementation: {missing}, undeclared: {extra})")
