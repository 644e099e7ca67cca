"""Data models for chix MCP."""

from chix_mcp.models.command import (
    CommandSpec,
    ExecutionOutcome,
    LimitedText,
    ProcessResult,
    SequenceResult,
    TruncationInfo,
)

__all__ = [
    "CommandSpec",
    "ExecutionOutcome",
    "LimitedText",
    "ProcessResult",
    "SequenceResult",
    "TruncationInfo",
]
