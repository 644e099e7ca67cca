"""Flake inspection tools."""

from typing import Any

from chix_mcp.errors import ValidationError
from chix_mcp.services import ExecutionContext, execute_command
from chix_mcp.tools.handlers import (
    error_response,
    nix_command,
    output_limits,
    outcome_response,
    parse_json_output,
)
from chix_mcp.utils.output import limit_text_output
from chix_mcp.utils.validation import (
    validate_output_limits,
    validate_path,
    validate_reference,
)


async def _flake_json(
    nix_args: list[str],
    flake_dir: str | None,
    max_bytes: int | None,
) -> dict[str, Any]:
    outcome = await execute_command(
        nix_command(*nix_args),
        ExecutionContext.from_config(cwd=flake_dir),
    )
    if not outcome.succeeded:
        return outcome_response(outcome, output=None)

    text = limit_text_output(outcome.stdout, output_limits(max_bytes=max_bytes))
    return outcome_response(outcome, text, output=parse_json_output(text.content))


async def nix_flake_show(
    flake_ref: str = ".",
    all_systems: bool = False,
    flake_dir: str | None = None,
    max_bytes: int | None = None,
) -> dict[str, Any]:
    """Show the outputs a flake provides.

    Args:
        flake_ref: Flake reference. Defaults to '.'.
        all_systems: Show outputs for every system, not just the current one.
        flake_dir: Directory containing the flake.
        max_bytes: Maximum bytes of output to return.

    Returns:
        Result with the parsed output tree, or the raw text if it does not
        parse as JSON.
    """
    try:
        validate_reference(flake_ref)
        if flake_dir is not None:
            validate_path(flake_dir)
        validate_output_limits(max_bytes=max_bytes)
    except ValidationError as e:
        return error_response(e)

    nix_args = ["flake", "show", "--json"]
    if all_systems:
        nix_args.append("--all-systems")
    nix_args.append(flake_ref)
    return await _flake_json(nix_args, flake_dir, max_bytes)


async def nix_flake_metadata(
    flake_ref: str = ".",
    flake_dir: str | None = None,
    max_bytes: int | None = None,
) -> dict[str, Any]:
    """Show flake metadata: inputs, locked revisions and description."""
    try:
        validate_reference(flake_ref)
        if flake_dir is not None:
            validate_path(flake_dir)
        validate_output_limits(max_bytes=max_bytes)
    except ValidationError as e:
        return error_response(e)

    return await _flake_json(
        ["flake", "metadata", "--json", flake_ref], flake_dir, max_bytes
    )


async def nix_flake_check(
    flake_ref: str = ".",
    keep_going: bool = True,
    flake_dir: str | None = None,
    max_bytes: int | None = None,
    head: int | None = None,
    tail: int | None = None,
) -> dict[str, Any]:
    """Run a flake's checks.

    Args:
        flake_ref: Flake reference. Defaults to '.'.
        keep_going: Continue after the first failing check.
        flake_dir: Directory containing the flake.
        max_bytes: Maximum bytes of stdout to return.
        head: Only return the first N lines of stdout.
        tail: Only return the last N lines of stdout.

    Returns:
        Result with stdout, limited stderr and exit code.
    """
    try:
        validate_reference(flake_ref)
        if flake_dir is not None:
            validate_path(flake_dir)
        validate_output_limits(max_bytes=max_bytes, head=head, tail=tail)
    except ValidationError as e:
        return error_response(e)

    nix_args = ["flake", "check"]
    if keep_going:
        nix_args.append("--keep-going")
    nix_args.append(flake_ref)

    outcome = await execute_command(
        nix_command(*nix_args),
        ExecutionContext.from_config(cwd=flake_dir),
    )
    text = limit_text_output(outcome.stdout, output_limits(head, tail, max_bytes))
    return outcome_response(outcome, text, stdout=text.content)
