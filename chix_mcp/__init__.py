"""chix: MCP server exposing Nix commands as tools."""

__version__ = "0.1.0"
