"""MCP tools for chix."""

from chix_mcp.tools.build import nix_build, nix_log
from chix_mcp.tools.eval import nix_eval
from chix_mcp.tools.flake import nix_flake_check, nix_flake_metadata, nix_flake_show
from chix_mcp.tools.hash import nix_hash_file, nix_hash_path
from chix_mcp.tools.registry import TOOLS, ToolSpec
from chix_mcp.tools.run import CommandEntry, nix_develop_run, nix_run

__all__ = [
    "TOOLS",
    "CommandEntry",
    "ToolSpec",
    "nix_build",
    "nix_develop_run",
    "nix_eval",
    "nix_flake_check",
    "nix_flake_metadata",
    "nix_flake_show",
    "nix_hash_file",
    "nix_hash_path",
    "nix_log",
    "nix_run",
]
