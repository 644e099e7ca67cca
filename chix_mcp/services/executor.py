"""Single and sequential command execution.

Wraps the process runner with argument validation and stderr limiting, and
runs ordered command lists with logical-AND semantics: the first failing
command ends the sequence.
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from chix_mcp.config import Config
from chix_mcp.errors import ChixError, ErrorKind
from chix_mcp.models import (
    CommandSpec,
    ExecutionOutcome,
    LimitedText,
    SequenceResult,
)
from chix_mcp.services.runner import run_process
from chix_mcp.services.state import get_config
from chix_mcp.utils.output import limit_stderr
from chix_mcp.utils.validation import validate_arguments

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionContext:
    """Per-invocation settings shared by every command in it.

    Read-only for the duration of the invocation.
    """

    cwd: str | None = None
    env: Mapping[str, str] = field(default_factory=dict)
    timeout: float | None = None
    stderr_budget: int | None = None
    cancel_event: asyncio.Event | None = None

    @classmethod
    def from_config(
        cls,
        config: Config | None = None,
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> "ExecutionContext":
        """Build a context with the configured timeout and stderr budget."""
        config = config or get_config()
        return cls(
            cwd=cwd,
            env=dict(env or {}),
            timeout=config.command_timeout,
            stderr_budget=config.max_stderr_bytes,
            cancel_event=cancel_event,
        )


def _failed_outcome(
    spec: CommandSpec,
    context: ExecutionContext,
    error: ChixError,
) -> ExecutionOutcome:
    """Outcome for a command that never ran."""
    return ExecutionOutcome(
        command_display=spec.display,
        succeeded=False,
        stdout="",
        stderr=LimitedText(content=""),
        exit_code=None,
        reason=error.kind,
        message=limit_stderr(error.message, context.stderr_budget).content,
    )


async def execute_command(
    spec: CommandSpec,
    context: ExecutionContext | None = None,
    *,
    check_arguments: bool = True,
) -> ExecutionOutcome:
    """Validate and run one command.

    Validation and spawn failures are reported as failed outcomes rather
    than raised.

    Args:
        spec: Command to run.
        context: Working directory, environment and limits. Defaults to
            the configured values.
        check_arguments: Apply the shell metacharacter check to every
            argument. Callers that pass Nix expressions validate those
            themselves and turn this off.

    Returns:
        ExecutionOutcome with stderr capped to the diagnostic budget.
    """
    context = context or ExecutionContext.from_config()

    try:
        if check_arguments:
            validate_arguments(spec.args)
        result = await run_process(
            spec,
            cwd=context.cwd,
            env=context.env,
            timeout=context.timeout,
            cancel_event=context.cancel_event,
        )
    except ChixError as e:
        logger.info("Command rejected: %s [%s] %s", spec.display, e.kind.value, e)
        return _failed_outcome(spec, context, e)

    stderr = limit_stderr(result.stderr, context.stderr_budget)

    reason: ErrorKind | None = None
    message: str | None = None
    if result.termination is ErrorKind.TIMEOUT:
        reason = result.termination
        message = f"command timed out after {context.timeout} seconds"
    elif result.termination is ErrorKind.CANCELLED:
        reason = result.termination
        message = "command was cancelled"
    elif not result.succeeded:
        reason = ErrorKind.NON_ZERO_EXIT
        if result.exit_code is None:
            message = "command was terminated by a signal"
        else:
            message = f"command exited with code {result.exit_code}"

    return ExecutionOutcome(
        command_display=spec.display,
        succeeded=result.succeeded,
        stdout=result.stdout,
        stderr=stderr,
        exit_code=result.exit_code,
        reason=reason,
        message=message,
    )


async def run_sequence(
    commands: Sequence[CommandSpec],
    context: ExecutionContext | None = None,
) -> SequenceResult:
    """Run commands in order, stopping after the first failure.

    Later commands may depend on side effects of earlier ones, so they are
    never reordered or run concurrently. An empty list succeeds vacuously.

    Setting ``context.cancel_event`` ends the running step with a
    ``Cancelled`` outcome and keeps the outcomes before it. Cancelling the
    calling task instead kills the running step and propagates
    ``CancelledError``, so the outcomes gathered so far are not returned.
    The tools never set a cancel event; a client cancellation arrives as
    task cancellation.

    Args:
        commands: Commands to run.
        context: Settings shared by every command in the sequence.

    Returns:
        SequenceResult with one outcome per attempted command.
    """
    context = context or ExecutionContext.from_config()
    outcomes: list[ExecutionOutcome] = []

    for index, spec in enumerate(commands):
        outcome = await execute_command(spec, context)
        outcomes.append(outcome)
        if not outcome.succeeded:
            logger.info(
                "Sequence stopped at step %d/%d: %s (%s)",
                index + 1,
                len(commands),
                spec.display,
                outcome.message,
            )
            return SequenceResult(overall_succeeded=False, outcomes=outcomes)

    return SequenceResult(overall_succeeded=True, outcomes=outcomes)
