"""Markdown rendering tests.

Renderers must accept any JSON shape without raising and never return an
empty string.
"""

from __future__ import annotations

import base64

import pytest
from gitx_mcp.response import (
    NO_DATA,
    NO_ITEMS,
    decode_base64_text,
    format_branch_list,
    format_comment_list,
    format_commit,
    format_commit_list,
    format_field,
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

_RENDERERS = [
    format_value,
    format_issue,
    format_pull_request,
    format_commit,
    format_file_content,
]

_SHAPES = [None, {}, [], "text", 3, True, {"unexpected": {"deeply": [{"nested": None}]}}, [None, 1, {}], "", [""]]


@pytest.mark.parametrize("render", _RENDERERS)
@pytest.mark.parametrize("shape", _SHAPES)
def test_renderers_are_total(render, shape) -> None:
    out = render(shape)
    assert isinstance(out, str)
    assert out != ""


def test_format_value_placeholders() -> None:
    assert format_value(None) == NO_DATA
    assert format_value([]) == NO_ITEMS
    assert format_value({}) == NO_DATA
    assert format_value({"a": None, "b": ""}) == NO_DATA
    assert format_value("") == NO_DATA
    assert format_value([""]) == NO_DATA


def test_format_value_object_fields() -> None:
    value = {
        "title": "v1.0",
        "open": True,
        "count": 4,
        "creator": {"login": "ann", "id": 1},
        "labels": [{"name": "bug"}, {"id": 2}, "raw"],
        "empty": [],
        "missing": None,
    }

    assert format_value(value) == (
        "**title:** v1.0\n**open:** true\n**count:** 4\n**creator:** ann\n**labels:** bug, raw"
    )


def test_format_value_list_separator() -> None:
    assert format_value([{"a": 1}, {"b": 2}]) == "**a:** 1\n---\n**b:** 2"


def test_format_value_is_idempotent() -> None:
    value = {"name": "x", "nested": {"title": "t"}}
    assert format_value(value) == format_value(value)


def test_format_field_omits_unidentifiable_objects() -> None:
    assert format_field("owner", {"id": 3}) == ""
    assert format_field("owner", {"full_name": "Org Inc"}) == "**owner:** Org Inc"


def test_scalar_text_and_short_sha() -> None:
    assert scalar_text(False) == "false"
    assert scalar_text(None) == "null"
    assert scalar_text("plain") == "plain"
    assert short_sha("0123456789") == "0123456"
    assert short_sha(None) == "???????"


def test_lookup_walks_keys_and_indexes() -> None:
    data = {"a": [{"b": "c"}], "flag": True, "n": 1}
    assert lookup(data, "a", 0, "b") == "c"
    assert lookup(data, "a", 5, "b", default="d") == "d"
    assert lookup(data, "flag", kind=int) is None
    assert lookup(data, "n", kind=int) == 1
    assert lookup("scalar", "x", default=0) == 0


def test_format_issue_full() -> None:
    issue = {
        "number": 12,
        "title": "Crash on start",
        "state": "open",
        "user": {"login": "ann"},
        "labels": [{"name": "bug"}, {"name": "p1"}],
        "assignees": [{"login": "bob"}],
        "milestone": {"title": "v2"},
        "created_at": "2024-01-01T00:00:00Z",
        "body": "Steps...",
    }

    assert format_issue(issue) == (
        "## #12 Crash on start [open]\n"
        "**Author:** ann\n"
        "**Labels:** bug, p1\n"
        "**Assignees:** bob\n"
        "**Milestone:** v2\n"
        "**Created:** 2024-01-01T00:00:00Z\n"
        "\nSteps..."
    )


def test_format_pull_request_branch_and_mergeable() -> None:
    pr = {
        "number": 3,
        "title": "Feature",
        "state": "open",
        "head": {"label": "ann:feature"},
        "base": {"label": "main"},
        "mergeable": False,
    }

    assert format_pull_request(pr) == "## PR #3 Feature [open]\n**Branch:** ann:feature -> main\n**Mergeable:** false"


def test_list_renderers_placeholders() -> None:
    assert format_issue_list([]) == "No issues found."
    assert format_pr_list([]) == "No pull requests found."
    assert format_comment_list([]) == "No comments found."
    assert format_commit_list([]) == "No commits found."
    assert format_branch_list([]) == "No branches found."
    assert format_file_list([]) == "No files found."


def test_list_renderers_tolerate_missing_fields() -> None:
    assert format_issue_list([{}]) == "- #0 (untitled) (unknown)"
    assert format_pr_list([{"number": 2}]) == "- PR #2 (untitled) (unknown)"
    assert format_commit_list([{}]) == "- `???????` "


def test_comment_list_separator() -> None:
    comments = [
        {"id": 1, "user": {"login": "a"}, "created_at": "t1", "body": "hi"},
        {"id": 2, "user": {"login": "b"}, "created_at": "t2", "body": "yo"},
    ]

    assert format_comment_list(comments) == "**Comment #1** by a (t1):\nhi\n\n---\n\n**Comment #2** by b (t2):\nyo"


def test_branch_list_uses_either_sha_field() -> None:
    branches = [
        {"name": "main", "commit": {"id": "aaaaaaaaaa"}, "protected": True},
        {"name": "dev", "commit": {"sha": "bbbbbbbbbb"}},
    ]

    assert format_branch_list(branches) == "- main (`aaaaaaa`) [protected]\n- dev (`bbbbbbb`)"


def test_file_content_binary_and_directory() -> None:
    binary = base64.b64encode(b"\xff\xfe\x00").decode("ascii")

    assert "(binary content)" in format_file_content({"path": "img.png", "content": binary})
    assert "(empty file)" in format_file_content({"path": "empty.txt"})
    assert format_file_content({"path": "src", "type": "dir"}) == "**src/** (directory)"


def test_decode_base64_text_accepts_line_breaks() -> None:
    encoded = base64.encodebytes(b"line one\nline two\n" * 8).decode("ascii")

    assert "\n" in encoded
    assert decode_base64_text(encoded) == "line one\nline two\n" * 8
    assert decode_base64_text("!!not base64!!") is None


def test_file_list_marks_directories() -> None:
    assert format_file_list([{"name": "src", "type": "dir"}, {"name": "a.py", "type": "file"}]) == "- src/\n- a.py"
