"""Entry point tests: argument parsing and .env loading."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from gitx_mcp.__main__ import main, parse_args


def test_parse_args_defaults() -> None:
    args = parse_args([])
    assert args.test is False
    assert args.env_file is None


def test_parse_args_flags() -> None:
    args = parse_args(["--test", "--env-file", "/tmp/x.env"])
    assert args.test is True
    assert args.env_file == "/tmp/x.env"


def test_env_file_is_loaded_without_overriding(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    env_file = tmp_path / "gitx.env"
    env_file.write_text("GITX_TEST_FROM_FILE=loaded\nGITX_TEST_PRESET=from-file\n", encoding="utf-8")

    environ = {k: v for k, v in os.environ.items() if not k.startswith("GITX_TEST_")}
    environ["GITX_TEST_PRESET"] = "from-env"
    monkeypatch.setattr(os, "environ", environ)
    monkeypatch.setattr(sys, "argv", ["gitx-mcp", "--test", "--env-file", str(env_file)])

    main()

    assert environ["GITX_TEST_FROM_FILE"] == "loaded"
    assert environ["GITX_TEST_PRESET"] == "from-env"
