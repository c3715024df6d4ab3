"""Smoke tests for the MCP server surface."""

from __future__ import annotations

import json

import pytest
from gitx_mcp.config import Config
from gitx_mcp.gitea_client import GiteaClient
from gitx_mcp.github_client import GitHubClient
from gitx_mcp.platform import Platform
from gitx_mcp.repo_resolver import RepoInfo
from gitx_mcp.server import (
    CAPABILITIES_URI,
    STATUS_URI,
    call_tool,
    create_server,
    list_resources,
    list_tools,
    read_resource,
    test_server as run_self_test,
)
from gitx_mcp.tools import Runtime


def _runtime(platform: Platform = Platform.GITEA) -> Runtime:
    if platform is Platform.GITHUB:
        cfg = Config(base_url="https://github.com", token="ghp_secret", platform=platform)
        client = GitHubClient(base_url=cfg.base_url, token=cfg.token)
    else:
        cfg = Config(base_url="https://git.example.com", token="gitea_secret", platform=platform)
        client = GiteaClient(base_url=cfg.base_url, token=cfg.token)
    return Runtime(config=cfg, client=client, default_repo=RepoInfo(owner="octo", repo="repo"))


@pytest.mark.asyncio
async def test_server_lists_all_tools() -> None:
    tools = await list_tools()
    assert len(tools) == 57
    assert {t.name for t in tools} >= {"issue_list", "pr_merge", "wiki_get", "actions_job_logs"}


@pytest.mark.asyncio
async def test_server_lists_resources_ok() -> None:
    resources = await list_resources()
    assert {str(r.uri).rstrip("/") for r in resources} == {STATUS_URI, CAPABILITIES_URI}


@pytest.mark.asyncio
async def test_tools_do_not_emit_secrets_in_metadata() -> None:
    tools = await list_tools()
    as_json = json.dumps([t.model_dump() for t in tools], sort_keys=True)

    assert "ghp_" not in as_json
    assert "Bearer " not in as_json


@pytest.mark.asyncio
async def test_status_resource_has_no_token() -> None:
    raw = await read_resource(_runtime(Platform.GITHUB), STATUS_URI)
    status = json.loads(raw)

    assert "ghp_secret" not in raw
    assert status["platform"] == "github"
    assert status["api_base_url"] == "https://api.github.com"
    assert status["default_repository"] == "octo/repo"
    assert status["tools_available"] == 57


@pytest.mark.asyncio
async def test_capabilities_resource_reports_wiki_support() -> None:
    gitea = json.loads(await read_resource(_runtime(Platform.GITEA), CAPABILITIES_URI))
    github = json.loads(await read_resource(_runtime(Platform.GITHUB), CAPABILITIES_URI))

    assert gitea["wiki_available"] is True
    assert github["wiki_available"] is False
    assert github["max_page_size"] == 50


@pytest.mark.asyncio
async def test_unknown_resource_is_not_found() -> None:
    out = json.loads(await read_resource(_runtime(), "gitx-mcp://nope"))
    assert out["ok"] is False
    assert out["code"] == "NotFound"


@pytest.mark.asyncio
async def test_call_tool_renders_error_envelope_as_json() -> None:
    content = await call_tool(_runtime(), "issue_get", {})

    assert len(content) == 1
    payload = json.loads(content[0].text)
    assert payload["ok"] is False
    assert payload["code"] == "InvalidParams"
    assert payload["message"] == "Missing required parameter: index"


@pytest.mark.asyncio
async def test_call_tool_returns_plain_text_on_success() -> None:
    content = await call_tool(_runtime(Platform.GITHUB), "wiki_list", None)

    assert content[0].text.startswith("Wiki CRUD is not available on GitHub")


@pytest.mark.asyncio
async def test_self_test_passes() -> None:
    await run_self_test()


def test_create_server_uses_package_name() -> None:
    server = create_server(_runtime())
    assert server.name == "gitx-mcp"


def test_installed_mcp_has_decorator_api() -> None:
    from importlib.metadata import version

    from mcp.types import CallToolRequest, ListResourcesRequest, ListToolsRequest, ReadResourceRequest

    assert int(version("mcp").split(".")[0]) == 1
    server = create_server(_runtime())
    for request_type in (ListToolsRequest, CallToolRequest, ListResourcesRequest, ReadResourceRequest):
        assert request_type in server.request_handlers
