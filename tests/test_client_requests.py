"""Backend request construction tests."""

from __future__ import annotations

import json

import httpx
import pytest
from gitx_mcp.client import USER_AGENT, create_client
from gitx_mcp.config import Config, LimitsConfig
from gitx_mcp.gitea_client import GiteaClient
from gitx_mcp.github_client import GitHubClient
from gitx_mcp.platform import Platform


def _recording_transport(seen: list[httpx.Request], response: httpx.Response | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return response if response is not None else httpx.Response(200, json={"ok": True})

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_gitea_client_sends_token_auth_and_api_v1_url() -> None:
    seen: list[httpx.Request] = []
    client = GiteaClient(base_url="https://git.example.com/", token="tok", transport=_recording_transport(seen))

    out = await client.get_json("/repos/team/app")

    assert out == {"ok": True}
    assert str(seen[0].url) == "https://git.example.com/api/v1/repos/team/app"
    assert seen[0].headers["Authorization"] == "token tok"
    assert seen[0].headers["Accept"] == "application/json"
    assert seen[0].headers["User-Agent"] == USER_AGENT


@pytest.mark.asyncio
async def test_github_client_sends_bearer_auth_and_public_api_url() -> None:
    seen: list[httpx.Request] = []
    client = GitHubClient(base_url="https://github.com", token="tok", transport=_recording_transport(seen))

    await client.get_json("/repos/octo/repo")

    assert str(seen[0].url) == "https://api.github.com/repos/octo/repo"
    assert seen[0].headers["Authorization"] == "Bearer tok"
    assert seen[0].headers["Accept"] == "application/vnd.github+json"
    assert seen[0].headers["X-GitHub-Api-Version"] == "2022-11-28"


def test_github_enterprise_uses_api_v3_prefix() -> None:
    client = GitHubClient(base_url="https://ghe.corp.example", token="tok")
    assert client.api_base_url == "https://ghe.corp.example/api/v3"


@pytest.mark.asyncio
async def test_query_parameters_are_encoded() -> None:
    seen: list[httpx.Request] = []
    client = GiteaClient(base_url="https://git.example.com", token="tok", transport=_recording_transport(seen))

    await client.get_json("/repos/team/app/issues", [("state", "open"), ("labels", "bug,help wanted")])

    assert seen[0].url.params["state"] == "open"
    assert seen[0].url.params["labels"] == "bug,help wanted"


@pytest.mark.asyncio
async def test_get_raw_uses_platform_media_type_and_returns_text() -> None:
    diff = "diff --git a/x b/x\n+added\n"
    seen: list[httpx.Request] = []
    gitea = GiteaClient(
        base_url="https://git.example.com",
        token="tok",
        transport=_recording_transport(seen, httpx.Response(200, text=diff)),
    )
    github = GitHubClient(
        base_url="https://github.com",
        token="tok",
        transport=_recording_transport(seen, httpx.Response(200, text=diff)),
    )

    assert await gitea.get_raw("/repos/team/app/pulls/1.diff") == diff
    assert await github.get_raw("/repos/octo/repo/pulls/1") == diff
    assert seen[0].headers["Accept"] == "text/plain"
    assert seen[1].headers["Accept"] == "application/vnd.github.diff"


@pytest.mark.asyncio
async def test_post_no_content_verb_differs_per_platform() -> None:
    seen: list[httpx.Request] = []
    gitea = GiteaClient(
        base_url="https://git.example.com",
        token="tok",
        transport=_recording_transport(seen, httpx.Response(200)),
    )
    github = GitHubClient(
        base_url="https://github.com",
        token="tok",
        transport=_recording_transport(seen, httpx.Response(200)),
    )

    await gitea.post_no_content("/repos/team/app/pulls/3/merge", {"Do": "merge"})
    await github.post_no_content("/repos/octo/repo/pulls/3/merge", {"merge_method": "merge"})

    assert seen[0].method == "POST"
    assert json.loads(seen[0].content) == {"Do": "merge"}
    assert seen[1].method == "PUT"
    assert json.loads(seen[1].content) == {"merge_method": "merge"}


@pytest.mark.asyncio
async def test_write_verbs_send_json_bodies() -> None:
    seen: list[httpx.Request] = []
    client = GiteaClient(base_url="https://git.example.com", token="tok", transport=_recording_transport(seen))

    await client.post_json("/a", {"x": 1})
    await client.put_json("/b", {"y": 2})
    await client.patch_json("/c", {"z": 3})

    assert [r.method for r in seen] == ["POST", "PUT", "PATCH"]
    assert [json.loads(r.content) for r in seen] == [{"x": 1}, {"y": 2}, {"z": 3}]


@pytest.mark.asyncio
async def test_delete_and_delete_with_body() -> None:
    seen: list[httpx.Request] = []
    client = GiteaClient(
        base_url="https://git.example.com",
        token="tok",
        transport=_recording_transport(seen, httpx.Response(204)),
    )

    assert await client.delete("/repos/team/app/labels/4") is None
    assert await client.delete_with_body("/repos/team/app/contents/a.txt", {"sha": "abc", "message": "rm"}) is None

    assert seen[0].method == "DELETE"
    assert seen[0].content == b""
    assert seen[1].method == "DELETE"
    assert json.loads(seen[1].content) == {"sha": "abc", "message": "rm"}


@pytest.mark.asyncio
async def test_empty_success_body_decodes_to_none() -> None:
    client = GiteaClient(
        base_url="https://git.example.com",
        token="tok",
        transport=_recording_transport([], httpx.Response(204)),
    )

    assert await client.patch_json("/notifications/threads/1", {}) is None


def test_create_client_picks_backend_from_config() -> None:
    limits = LimitsConfig()
    gitea = create_client(Config(base_url="https://git.example.com", token="t", platform=Platform.GITEA, limits=limits))
    github = create_client(Config(base_url="https://github.com", token="t", platform=Platform.GITHUB, limits=limits))

    assert isinstance(gitea, GiteaClient)
    assert gitea.platform is Platform.GITEA
    assert isinstance(github, GitHubClient)
    assert github.platform is Platform.GITHUB
    assert github.page_size_param == "per_page"
