"""Shared helpers for chix tool handlers."""

import json
from typing import Any

from chix_mcp.errors import ChixError
from chix_mcp.models import CommandSpec, ExecutionOutcome, LimitedText
from chix_mcp.services import get_config
from chix_mcp.utils.output import OutputLimits


def error_response(error: ChixError) -> dict[str, Any]:
    """Build the payload for a call rejected before anything ran."""
    return {"success": False, "error": error.to_dict()}


def nix_command(*args: str, label: str | None = None) -> CommandSpec:
    """Build a command for the configured nix binary."""
    return CommandSpec.create(get_config().nix_binary, args, label=label)


def output_limits(
    head: int | None = None,
    tail: int | None = None,
    max_bytes: int | None = None,
) -> OutputLimits:
    """Caller limits, falling back to the configured byte budget."""
    if max_bytes is None:
        max_bytes = get_config().max_output_bytes
    return OutputLimits(head=head, tail=tail, max_bytes=max_bytes)


def parse_json_output(text: str) -> Any:
    """Parse JSON output, keeping the raw text when it does not parse.

    Truncated JSON never parses, so callers still see what was returned.
    """
    try:
        return json.loads(text)
    except ValueError:
        return text


def outcome_response(
    outcome: ExecutionOutcome,
    primary: LimitedText | None = None,
    **fields: Any,
) -> dict[str, Any]:
    """Build a tool payload from an outcome and the tool's own fields.

    Truncation details of the primary output take precedence over those of
    stderr.
    """
    data: dict[str, Any] = {"success": outcome.succeeded, **fields}
    data["stderr"] = outcome.stderr.content
    data["exit_code"] = outcome.exit_code

    if outcome.stderr.truncated or (primary is not None and primary.truncated):
        data["truncated"] = True

    info = primary.truncation_info if primary is not None else None
    info = info or outcome.stderr.truncation_info
    if info is not None:
        data["truncation_info"] = info.to_dict()

    if outcome.reason is not None:
        data["error"] = {"reason": outcome.reason.value, "message": outcome.message}
    return data
