"""Services for chix MCP."""

from chix_mcp.services.executor import (
    ExecutionContext,
    execute_command,
    run_sequence,
)
from chix_mcp.services.runner import run_process
from chix_mcp.services.state import (
    get_config,
    reset_state,
    set_config,
)

__all__ = [
    "ExecutionContext",
    "execute_command",
    "get_config",
    "reset_state",
    "run_process",
    "run_sequence",
    "set_config",
]
