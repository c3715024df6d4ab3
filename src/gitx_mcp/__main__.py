#!/usr/bin/env python3
"""gitx-mcp MCP Server entry point.

Run:
  python -m gitx_mcp                # start server (stdio)
  python -m gitx_mcp --test         # run lightweight self-tests then exit

A `.env` file in the working directory is loaded before configuration is
resolved; variables already set in the environment take precedence.
"""

import argparse
import asyncio
import sys

from dotenv import find_dotenv, load_dotenv


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(prog="gitx_mcp", add_help=True)
    parser.add_argument(
        "--test",
        action="store_true",
        help="Run built-in server self tests (tool catalog & resource listing) then exit.",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Path to a .env file (default: search from the working directory).",
    )
    return parser.parse_args(argv)


def main() -> None:
    """CLI dispatcher for the MCP server."""
    args = parse_args(sys.argv[1:])
    env_file = args.env_file or find_dotenv(usecwd=True)
    if env_file:
        load_dotenv(env_file, override=False)

    # Imported after the environment is loaded: the server module configures logging on import.
    from gitx_mcp.server import run_server, test_server

    try:
        if args.test:
            asyncio.run(test_server())
        else:
            asyncio.run(run_server())
    except KeyboardInterrupt:
        print("\nServer stopped by user", file=sys.stderr)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        print(f"Server error: {exc}", file=sys.stderr)
        raise


if __name__ == "__main__":
    main()
