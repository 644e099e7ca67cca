"""Nix expression evaluation tool."""

from typing import Any

from chix_mcp.errors import InvalidArgumentError, ValidationError
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
    validate_expression,
    validate_output_limits,
    validate_path,
    validate_reference,
)


async def nix_eval(
    installable: str | None = None,
    expr: str | None = None,
    apply: str | None = None,
    flake_dir: str | None = None,
    max_bytes: int | None = None,
) -> dict[str, Any]:
    """Evaluate a flake attribute or Nix expression as JSON.

    Expressions legitimately contain characters such as ``{`` and ``$`` and
    are passed to nix as a single argument without a shell, so they skip the
    metacharacter check.

    Args:
        installable: Flake attribute to evaluate, e.g. '.#packages'.
        expr: Nix expression to evaluate instead of an installable.
        apply: Function applied to the result, e.g. 'builtins.attrNames'.
        flake_dir: Directory containing the flake.
        max_bytes: Maximum bytes of output to return.

    Returns:
        Result with the evaluated value, parsed from JSON when possible.
    """
    try:
        if installable is None and expr is None:
            raise InvalidArgumentError(
                "either 'installable' or 'expr' must be provided"
            )
        if installable is not None:
            validate_reference(installable)
        if expr is not None:
            validate_expression(expr)
        if apply is not None:
            validate_expression(apply)
        if flake_dir is not None:
            validate_path(flake_dir)
        validate_output_limits(max_bytes=max_bytes)
    except ValidationError as e:
        return error_response(e)

    nix_args = ["eval", "--json"]
    if installable is not None:
        nix_args.append(installable)
    if expr is not None:
        nix_args.extend(["--expr", expr])
    if apply is not None:
        nix_args.extend(["--apply", apply])

    outcome = await execute_command(
        nix_command(*nix_args),
        ExecutionContext.from_config(cwd=flake_dir),
        check_arguments=False,
    )
    if not outcome.succeeded:
        return outcome_response(outcome, value=None)

    text = limit_text_output(outcome.stdout, output_limits(max_bytes=max_bytes))
    return outcome_response(outcome, text, value=parse_json_output(text.content))
