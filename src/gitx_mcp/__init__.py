"""gitx-mcp: one MCP server for Gitea/Forgejo and GitHub repositories."""

__version__ = "0.1.0"
