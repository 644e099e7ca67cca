"""Utilities for chix MCP."""

from chix_mcp.utils.console import ColorfulFormatter, MCPRequestFormatter
from chix_mcp.utils.output import (
    DEFAULT_MAX_BYTES,
    OutputLimits,
    limit_stderr,
    limit_text,
    limit_text_output,
)
from chix_mcp.utils.validation import (
    validate_arguments,
    validate_expression,
    validate_hash_type,
    validate_no_shell_metacharacters,
    validate_path,
    validate_output_limits,
    validate_reference,
)

__all__ = [
    "ColorfulFormatter",
    "DEFAULT_MAX_BYTES",
    "limit_stderr",
    "limit_text",
    "limit_text_output",
    "MCPRequestFormatter",
    "OutputLimits",
    "validate_arguments",
    "validate_expression",
    "validate_hash_type",
    "validate_no_shell_metacharacters",
    "validate_path",
    "validate_output_limits",
    "validate_reference",
]
