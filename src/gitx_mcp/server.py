"""MCP server wiring for gitx-mcp.

The runtime (config, client, detected repository) is built once at startup
and handed to `create_server`; handlers close over it.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any

from mcp.server import Server
from mcp.types import Resource, TextContent, Tool

from . import __version__
from .errors import GitxError, internal_error
from .platform import Platform
from .tools import MAX_PAGE_SIZE, TOOL_METADATA, Runtime, build_runtime_from_env, check_catalog, dispatch_tool


def _log_level() -> int:
    name = os.getenv("GITX_MCP_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


logging.basicConfig(
    level=_log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger(__name__)

SERVER_NAME = "gitx-mcp"

INSTRUCTIONS = (
    f"Gitea/Forgejo and GitHub MCP server with {len(TOOL_METADATA)} tools covering issues, PRs, files, "
    "branches, commits, labels, milestones, releases, notifications, wiki, organizations, and CI/CD "
    "actions. Use owner+repo params or directory param to auto-detect repository."
)

STATUS_URI = "gitx-mcp://server-status"
CAPABILITIES_URI = "gitx-mcp://capabilities"

RESOURCES = [
    Resource(
        uri=STATUS_URI,
        name="Server Status",
        description="Selected platform, base URL and detected repository (no secrets)",
    ),
    Resource(
        uri=CAPABILITIES_URI,
        name="Capabilities",
        description="Available tools and platform-specific limitations",
    ),
]


async def list_tools() -> list[Tool]:
    """List all available tools."""
    tools = [
        Tool(name=tool_name, description=metadata["description"], inputSchema=metadata["inputSchema"])
        for tool_name, metadata in TOOL_METADATA.items()
    ]
    logger.info("Listed %s tools", len(tools))
    return tools


async def call_tool(runtime: Runtime, name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
    """Execute a tool and return MCP-compliant TextContent.

    Success yields the rendered text; failures yield the JSON error envelope.
    """
    if not isinstance(arguments, dict):
        arguments = {}

    logger.info("Tool called: %s", name)

    try:
        result = await dispatch_tool(runtime, name, arguments)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.error("Tool %s failed: %s", name, exc)
        result = internal_error("Tool execution failed")

    if result.get("ok"):
        text = str(result.get("text", ""))
    else:
        text = json.dumps(result, indent=2, default=str)
    return [TextContent(type="text", text=text)]


async def list_resources() -> list[Resource]:
    """List available resources."""
    return list(RESOURCES)


async def read_resource(runtime: Runtime, uri: Any) -> str:
    """Read resource content."""
    uri_s = uri if isinstance(uri, str) else str(uri)

    if uri_s == CAPABILITIES_URI:
        caps = {
            "server": SERVER_NAME,
            "version": __version__,
            "platform": runtime.platform.value,
            "tools": sorted(TOOL_METADATA.keys()),
            "wiki_available": runtime.platform is not Platform.GITHUB,
            "max_page_size": MAX_PAGE_SIZE,
        }
        return json.dumps(caps, indent=2)

    if uri_s == STATUS_URI:
        status: dict[str, Any] = {
            "server": SERVER_NAME,
            "version": __version__,
            "platform": runtime.platform.value,
            "base_url": runtime.config.base_url,
            "api_base_url": runtime.client.api_base_url,
            "default_repository": runtime.default_repo.full_name if runtime.default_repo else None,
            "tools_available": len(TOOL_METADATA),
            "timeouts": {
                "total_timeout_s": runtime.config.limits.total_timeout_s,
                "connect_timeout_s": runtime.config.limits.connect_timeout_s,
                "read_timeout_s": runtime.config.limits.read_timeout_s,
            },
        }
        return json.dumps(status, indent=2)

    return json.dumps({"ok": False, "code": "NotFound", "message": "Unknown resource"}, indent=2)


def create_server(runtime: Runtime) -> Server:
    """Build an MCP server whose handlers share `runtime`."""
    server: Server = Server(SERVER_NAME, version=__version__, instructions=INSTRUCTIONS)

    @server.list_tools()
    async def _list_tools() -> list[Tool]:
        return await list_tools()

    @server.call_tool()
    async def _call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        return await call_tool(runtime, name, arguments)

    @server.list_resources()
    async def _list_resources() -> list[Resource]:
        return await list_resources()

    @server.read_resource()
    async def _read_resource(uri: Any) -> str:
        return await read_resource(runtime, uri)

    return server


async def run_server() -> None:
    """Run the server over stdio."""
    # Fail fast on invalid/missing host configuration.
    try:
        runtime = build_runtime_from_env()
    except GitxError as exc:
        logger.error("Startup configuration error: %s", exc.message)
        raise

    from mcp.server.stdio import stdio_server

    server = create_server(runtime)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


async def test_server() -> None:
    """Lightweight self-test: the catalog is consistent and every tool is listable."""
    tools = await list_tools()
    check_catalog()
    logger.info("Self-test passed: %s tools, %s resources", len(tools), len(RESOURCES))
