"""Tools that run programs: flake apps and devShell commands."""

import logging
from typing import Any

from pydantic import BaseModel, Field

from chix_mcp.errors import InvalidArgumentError, ValidationError
from chix_mcp.services import ExecutionContext, execute_command, run_sequence
from chix_mcp.tools.handlers import error_response, nix_command, output_limits
from chix_mcp.utils.output import limit_text_output
from chix_mcp.utils.validation import (
    validate_output_limits,
    validate_path,
    validate_reference,
)

logger = logging.getLogger(__name__)


class CommandEntry(BaseModel):
    """One step of a develop_run sequence."""

    command: str = Field(description="Command to run in the devShell.")
    args: list[str] = Field(
        default_factory=list,
        description="Arguments to pass to the command.",
    )

    @property
    def display(self) -> str:
        return " ".join((self.command, *self.args))


async def nix_run(
    installable: str = ".#default",
    args: list[str] | None = None,
    flake_dir: str | None = None,
) -> dict[str, Any]:
    """Run a flake app.

    Args:
        installable: Flake installable to run. Defaults to '.#default'.
        args: Arguments to pass to the app.
        flake_dir: Directory containing the flake. Defaults to the
            current directory.

    Returns:
        Result with stdout, limited stderr and exit code.
    """
    try:
        validate_reference(installable)
        if flake_dir is not None:
            validate_path(flake_dir)
    except ValidationError as e:
        return error_response(e)

    nix_args = ["run", installable]
    if args:
        nix_args.extend(["--", *args])

    outcome = await execute_command(
        nix_command(*nix_args),
        ExecutionContext.from_config(cwd=flake_dir),
    )
    return outcome.to_dict()


async def nix_develop_run(
    commands: list[CommandEntry],
    flake_ref: str = ".",
    flake_dir: str | None = None,
    max_bytes: int | None = None,
    head: int | None = None,
    tail: int | None = None,
) -> dict[str, Any]:
    """Run commands sequentially inside a flake's devShell.

    Each entry runs as its own ``nix develop <flake_ref> -c`` invocation.
    Execution stops at the first failing command, like ``&&`` in a shell.

    Args:
        commands: Commands to run in order.
        flake_ref: Flake reference. Defaults to '.'.
        flake_dir: Working directory for every command.
        max_bytes: Maximum bytes of stdout per command.
        head: Only return the first N lines of stdout per command.
        tail: Only return the last N lines of stdout per command.

    Returns:
        Overall success and one result per attempted command.
    """
    try:
        validate_reference(flake_ref)
        if flake_dir is not None:
            validate_path(flake_dir)
        validate_output_limits(max_bytes=max_bytes, head=head, tail=tail)
        if not commands:
            raise InvalidArgumentError("commands array must not be empty")
    except ValidationError as e:
        return error_response(e)

    specs = [
        nix_command(
            "develop", flake_ref, "-c", entry.command, *entry.args, label=entry.display
        )
        for entry in commands
    ]

    result = await run_sequence(specs, ExecutionContext.from_config(cwd=flake_dir))

    limits = output_limits(head=head, tail=tail, max_bytes=max_bytes)
    data = result.to_dict()
    for item, outcome in zip(data["results"], result.outcomes):
        stdout = limit_text_output(outcome.stdout, limits)
        item["stdout"] = stdout.content
        if stdout.truncation_info is not None:
            # Primary output provenance wins over stderr's
            item["truncated"] = True
            item["truncation_info"] = stdout.truncation_info.to_dict()
            data["truncated"] = True

    logger.info(
        "develop_run finished: %d/%d command(s) attempted, success=%s",
        len(result.outcomes),
        len(specs),
        result.overall_succeeded,
    )
    return data
