"""Repository locator and resolution chain tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from gitx_mcp.errors import ErrorKind, GitxError
from gitx_mcp.repo_resolver import RepoInfo, parse_remote_url, read_origin_url, resolve_owner_repo, resolve_repo


def _write_git_config(root: Path, text: str) -> Path:
    git_dir = root / ".git"
    git_dir.mkdir(parents=True, exist_ok=True)
    (git_dir / "config").write_text(text, encoding="utf-8")
    return root


ORIGIN_CONFIG = """\
[core]
\trepositoryformatversion = 0
[remote "upstream"]
\turl = git@example.com:upstream/other.git
[remote "origin"]
\turl = git@git.example.com:org/proj.git
\tfetch = +refs/heads/*:refs/remotes/origin/*
[branch "main"]
\tremote = origin
"""


@pytest.mark.parametrize(
    "url",
    [
        "git@host:org/proj.git",
        "git@host:org/proj",
        "ssh://git@host/org/proj.git",
        "ssh://git@host:2222/org/proj.git",
        "https://host/org/proj",
        "https://host/org/proj.git",
        "http://user@host:3000/org/proj/",
        "org/proj",
    ],
)
def test_parse_remote_url_accepts_common_forms(url: str) -> None:
    assert parse_remote_url(url) == RepoInfo(owner="org", repo="proj")


def test_parse_remote_url_drops_nested_group_segments() -> None:
    assert parse_remote_url("https://host/group/sub/proj.git") == RepoInfo(owner="group", repo="sub")


def test_parse_remote_url_at_without_colon_is_read_as_path() -> None:
    assert parse_remote_url("git@host/org/proj") == RepoInfo(owner="git@host", repo="org")


@pytest.mark.parametrize("url", ["https://host/only", "git@host:proj.git", "https://host/", "proj"])
def test_parse_remote_url_rejects_single_segment(url: str) -> None:
    with pytest.raises(GitxError) as exc:
        parse_remote_url(url)

    assert exc.value.kind is ErrorKind.REPOSITORY_RESOLUTION_FAILED
    assert "Cannot extract owner/repo" in exc.value.message


def test_read_origin_url_picks_origin_section(tmp_path: Path) -> None:
    _write_git_config(tmp_path, ORIGIN_CONFIG)

    assert read_origin_url(tmp_path) == "git@git.example.com:org/proj.git"


def test_read_origin_url_tolerates_whitespace_around_equals(tmp_path: Path) -> None:
    _write_git_config(tmp_path, '[remote "origin"]\n    url=https://h/a/b\n')

    assert read_origin_url(tmp_path) == "https://h/a/b"


def test_read_origin_url_missing_file_names_directory(tmp_path: Path) -> None:
    with pytest.raises(GitxError) as exc:
        read_origin_url(tmp_path)

    assert exc.value.kind is ErrorKind.REPOSITORY_RESOLUTION_FAILED
    assert "No .git/config found" in exc.value.message
    assert str(tmp_path) in exc.value.message


def test_read_origin_url_without_origin_section_fails(tmp_path: Path) -> None:
    _write_git_config(tmp_path, '[core]\n\tbare = false\n[remote "upstream"]\n\turl = git@h:a/b.git\n')

    with pytest.raises(GitxError) as exc:
        read_origin_url(tmp_path)

    assert "No remote 'origin' URL found" in exc.value.message


def test_read_origin_url_does_not_read_url_from_later_section(tmp_path: Path) -> None:
    _write_git_config(tmp_path, '[remote "origin"]\n\tfetch = x\n[remote "other"]\n\turl = git@h:a/b.git\n')

    with pytest.raises(GitxError):
        read_origin_url(tmp_path)


def test_resolve_repo_reads_and_parses(tmp_path: Path) -> None:
    _write_git_config(tmp_path, ORIGIN_CONFIG)

    assert resolve_repo(tmp_path) == RepoInfo(owner="org", repo="proj")


# Resolution chain

DEFAULT = RepoInfo(owner="cached", repo="default")


def test_chain_prefers_explicit_owner_and_repo(tmp_path: Path) -> None:
    _write_git_config(tmp_path, ORIGIN_CONFIG)

    out = resolve_owner_repo(owner="a", repo="b", directory=str(tmp_path), default=DEFAULT)

    assert out == RepoInfo(owner="a", repo="b")


def test_chain_uses_directory_when_explicit_incomplete(tmp_path: Path) -> None:
    _write_git_config(tmp_path, ORIGIN_CONFIG)

    out = resolve_owner_repo(owner="a", repo=None, directory=str(tmp_path), default=DEFAULT)

    assert out == RepoInfo(owner="org", repo="proj")


def test_chain_empty_repo_falls_through_to_cached_default() -> None:
    out = resolve_owner_repo(owner="a", repo="", directory=None, default=DEFAULT)

    assert out == DEFAULT


def test_chain_empty_directory_is_treated_as_absent() -> None:
    out = resolve_owner_repo(owner="", repo="", directory="", default=DEFAULT)

    assert out == DEFAULT


def test_chain_directory_failure_propagates(tmp_path: Path) -> None:
    with pytest.raises(GitxError) as exc:
        resolve_owner_repo(directory=str(tmp_path / "missing"), default=DEFAULT)

    assert exc.value.kind is ErrorKind.REPOSITORY_RESOLUTION_FAILED


def test_chain_falls_back_to_working_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_git_config(tmp_path, ORIGIN_CONFIG)
    monkeypatch.chdir(tmp_path)

    assert resolve_owner_repo() == RepoInfo(owner="org", repo="proj")


def test_chain_working_directory_failure_propagates(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(GitxError) as exc:
        resolve_owner_repo(owner="only-owner")

    assert exc.value.kind is ErrorKind.REPOSITORY_RESOLUTION_FAILED
