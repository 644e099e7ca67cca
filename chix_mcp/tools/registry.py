"""Static registry of the tools chix exposes."""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from chix_mcp.tools.build import nix_build, nix_log
from chix_mcp.tools.eval import nix_eval
from chix_mcp.tools.flake import nix_flake_check, nix_flake_metadata, nix_flake_show
from chix_mcp.tools.hash import nix_hash_file, nix_hash_path
from chix_mcp.tools.run import nix_develop_run, nix_run


@dataclass(frozen=True)
class ToolSpec:
    """A named tool, its handler and the description shown to clients."""

    name: str
    handler: Callable[..., Awaitable[dict[str, Any]]]
    description: str


_TOOL_SPECS = (
    ToolSpec(
        name="run",
        handler=nix_run,
        description=(
            "Run a flake app with `nix run`. Arguments after the installable "
            "are passed to the app."
        ),
    ),
    ToolSpec(
        name="develop_run",
        handler=nix_develop_run,
        description=(
            "Run commands sequentially inside a flake's devShell. Each "
            "command runs separately; execution stops at the first failure, "
            "like `&&` in a shell."
        ),
    ),
    ToolSpec(
        name="build",
        handler=nix_build,
        description=(
            "Build a flake installable and return its store paths and build "
            "log. Use log_tail to see only the end of the log."
        ),
    ),
    ToolSpec(
        name="log",
        handler=nix_log,
        description="Get the build log of an installable or store path.",
    ),
    ToolSpec(
        name="eval",
        handler=nix_eval,
        description=(
            "Evaluate a flake attribute or Nix expression and return the "
            "result as JSON. Provide either installable or expr."
        ),
    ),
    ToolSpec(
        name="flake_show",
        handler=nix_flake_show,
        description="Show the outputs provided by a flake.",
    ),
    ToolSpec(
        name="flake_check",
        handler=nix_flake_check,
        description=(
            "Run a flake's checks. Continues past failing checks unless "
            "keep_going is false."
        ),
    ),
    ToolSpec(
        name="flake_metadata",
        handler=nix_flake_metadata,
        description="Show flake metadata: inputs, locked revisions and description.",
    ),
    ToolSpec(
        name="hash_path",
        handler=nix_hash_path,
        description="Compute the NAR hash of a file or directory.",
    ),
    ToolSpec(
        name="hash_file",
        handler=nix_hash_file,
        description="Compute the flat hash of a file's contents.",
    ),
)

# Fixed at import time; never modified while the server runs
TOOLS: Mapping[str, ToolSpec] = MappingProxyType(
    {spec.name: spec for spec in _TOOL_SPECS}
)
