"""Build tools: building installables and reading their build logs."""

import json
import logging
from typing import Any

from chix_mcp.errors import ChixError, ErrorKind, ValidationError
from chix_mcp.services import execute_command, get_config, run_process
from chix_mcp.tools.handlers import (
    error_response,
    nix_command,
    output_limits,
    outcome_response,
)
from chix_mcp.utils.output import OutputLimits, limit_text_output
from chix_mcp.utils.validation import (
    validate_output_limits,
    validate_path,
    validate_reference,
)

logger = logging.getLogger(__name__)

STORE_PREFIX = "/nix/store/"


def parse_json_store_paths(stdout: str) -> list[str]:
    """Extract ``out`` paths from ``nix build --json`` output."""
    try:
        entries = json.loads(stdout)
    except ValueError:
        return []
    if not isinstance(entries, list):
        return []

    paths = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        outputs = entry.get("outputs")
        if isinstance(outputs, dict) and isinstance(outputs.get("out"), str):
            paths.append(outputs["out"])
    return paths


def parse_store_paths(stdout: str) -> list[str]:
    """Extract store paths printed one per line."""
    return [
        line.strip()
        for line in stdout.splitlines()
        if line.strip().startswith(STORE_PREFIX)
    ]


async def nix_build(
    installable: str = ".#default",
    print_build_logs: bool = True,
    flake_dir: str | None = None,
    max_log_bytes: int | None = None,
    log_tail: int | None = None,
) -> dict[str, Any]:
    """Build a flake installable.

    The build log arrives on stderr and is the main thing a caller reads
    when a build fails, so it is shaped by the caller's ``log_tail`` and
    ``max_log_bytes``. It never exceeds the configured stderr budget.

    Args:
        installable: Installable to build. Defaults to '.#default'.
        print_build_logs: Pass ``-L`` to get full build logs.
        flake_dir: Directory containing the flake.
        max_log_bytes: Maximum bytes of build log to return.
        log_tail: Only return the last N lines of the build log.

    Returns:
        Result with store paths, the build log and exit code.
    """
    try:
        validate_reference(installable)
        if flake_dir is not None:
            validate_path(flake_dir)
        validate_output_limits(max_log_bytes=max_log_bytes, log_tail=log_tail)
    except ValidationError as e:
        return error_response(e)

    config = get_config()
    nix_args = ["build", "--json", "--print-out-paths"]
    if print_build_logs:
        nix_args.append("-L")
    nix_args.append(installable)
    spec = nix_command(*nix_args)

    try:
        result = await run_process(spec, cwd=flake_dir)
    except ChixError as e:
        return error_response(e)

    store_paths = parse_json_store_paths(result.stdout) or parse_store_paths(
        result.stdout
    )

    budget = config.max_stderr_bytes
    if max_log_bytes is not None:
        budget = min(max_log_bytes, budget)
    build_log = limit_text_output(
        result.stderr, OutputLimits(tail=log_tail, max_bytes=budget)
    )

    data: dict[str, Any] = {
        "command": spec.display,
        "success": result.succeeded,
        "store_paths": store_paths,
        "stderr": build_log.content,
        "exit_code": result.exit_code,
    }
    if build_log.truncation_info is not None:
        data["truncated"] = True
        data["truncation_info"] = build_log.truncation_info.to_dict()

    if result.termination is ErrorKind.TIMEOUT:
        data["error"] = {
            "reason": ErrorKind.TIMEOUT.value,
            "message": f"command timed out after {config.command_timeout} seconds",
        }
    elif result.termination is ErrorKind.CANCELLED:
        data["error"] = {
            "reason": ErrorKind.CANCELLED.value,
            "message": "command was cancelled",
        }
    elif not result.succeeded:
        data["error"] = {
            "reason": ErrorKind.NON_ZERO_EXIT.value,
            "message": f"command exited with code {result.exit_code}"
            if result.exit_code is not None
            else "command was terminated by a signal",
        }

    logger.info(
        "Build of %s finished: success=%s, %d store path(s)",
        installable,
        result.succeeded,
        len(store_paths),
    )
    return data


async def nix_log(
    installable: str,
    max_bytes: int | None = None,
    head: int | None = None,
    tail: int | None = None,
) -> dict[str, Any]:
    """Fetch the build log of an installable or store path.

    Args:
        installable: Installable or store path.
        max_bytes: Maximum bytes of log to return.
        head: Only return the first N lines.
        tail: Only return the last N lines.

    Returns:
        Result with the log text.
    """
    try:
        validate_reference(installable)
        validate_output_limits(max_bytes=max_bytes, head=head, tail=tail)
    except ValidationError as e:
        return error_response(e)

    outcome = await execute_command(nix_command("log", installable))
    text = limit_text_output(outcome.stdout, output_limits(head, tail, max_bytes))
    return outcome_response(outcome, text, log=text.content)
