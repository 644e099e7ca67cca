"""Fixtures for tool handler tests."""

from pathlib import Path

import pytest

from chix_mcp.config import Config
from chix_mcp.services import set_config

FAKE_NIX = """#!/bin/sh
for arg in "$@"; do
  if [ "$arg" = "fail" ]; then
    echo "error: step failed" >&2
    exit 2
  fi
done
printf '%s\\n' "$@"
"""


@pytest.fixture
def fake_nix(tmp_path: Path) -> Config:
    """Point the server at a stand-in nix that echoes one argument per line.

    Any argument equal to ``fail`` makes it exit 2 with a message on stderr.
    """
    script = tmp_path / "fake-nix"
    script.write_text(FAKE_NIX)
    script.chmod(0o755)

    config = Config(nix_binary=str(script), command_timeout=10, kill_grace_period=0.5)
    set_config(config)
    return config
