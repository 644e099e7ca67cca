"""Local process runner with a deadline and guaranteed cleanup.

Programs are spawned directly (``execvp``), never through a shell. Each
child leads its own process group, and whichever way the call ends the
whole group is killed, including descendants the child started. Output
is drained while the process runs, which keeps the partial output of a
killed process available to the caller.
"""

import asyncio
import logging
import os
import signal
import time
from collections.abc import Mapping
from typing import Final

from chix_mcp.errors import ErrorKind, SpawnFailedError
from chix_mcp.models import CommandSpec, ProcessResult
from chix_mcp.services.state import get_config

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE: Final = 65536
# How long to wait for pipe readers after the process group is gone
READER_DRAIN_TIMEOUT: Final = 1.0
REAP_TIMEOUT: Final = 5.0


async def _drain(stream: asyncio.StreamReader | None, buffer: bytearray) -> None:
    """Read a stream to EOF into buffer."""
    if stream is None:
        return
    while chunk := await stream.read(READ_CHUNK_SIZE):
        buffer.extend(chunk)


def _signal_group(proc: asyncio.subprocess.Process, sig: signal.Signals) -> bool:
    """Send a signal to the process group led by proc.

    Returns:
        True if anything received the signal.
    """
    try:
        os.killpg(proc.pid, sig)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Group no longer ours; fall back to the direct child
        try:
            proc.send_signal(sig)
        except ProcessLookupError:
            return False
    return True


async def _terminate(proc: asyncio.subprocess.Process, grace_period: float) -> None:
    """Stop proc and every process left in its group.

    Sends SIGTERM and waits up to grace_period for the child to exit, then
    SIGKILLs the whole group so no descendant outlives the call.
    """
    if proc.returncode is None:
        logger.debug("Sending SIGTERM to process group %d", proc.pid)
        _signal_group(proc, signal.SIGTERM)
        try:
            await asyncio.wait_for(proc.wait(), timeout=grace_period)
        except asyncio.TimeoutError:
            logger.warning(
                "Process %d still running %.1fs after SIGTERM, sending SIGKILL",
                proc.pid,
                grace_period,
            )

    if _signal_group(proc, signal.SIGKILL):
        logger.debug("Killed remaining processes in group %d", proc.pid)
    try:
        await asyncio.wait_for(proc.wait(), timeout=REAP_TIMEOUT)
    except asyncio.TimeoutError:
        # Only possible when a descendant left the group and holds a pipe
        logger.warning("Process %d pipes still open after SIGKILL", proc.pid)


async def _cleanup(
    proc: asyncio.subprocess.Process,
    readers: list["asyncio.Future[None]"],
    grace_period: float,
) -> None:
    """Terminate the process group and collect the pipe readers."""
    await _terminate(proc, grace_period)

    _, pending = await asyncio.wait(readers, timeout=READER_DRAIN_TIMEOUT)
    for task in pending:
        # A descendant escaped the group and still holds the pipe open
        task.cancel()
    await asyncio.gather(*readers, return_exceptions=True)


async def _wait_for_exit(
    proc: asyncio.subprocess.Process,
    timeout: float,
    cancel_event: asyncio.Event | None,
) -> ErrorKind | None:
    """Race process exit against the deadline and the cancel token.

    Returns:
        None on exit, otherwise TIMEOUT or CANCELLED.
    """
    exit_task = asyncio.ensure_future(proc.wait())
    waiters: set["asyncio.Future[object]"] = {exit_task}
    cancel_task: "asyncio.Future[object] | None" = None
    if cancel_event is not None:
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        waiters.add(cancel_task)

    try:
        done, _ = await asyncio.wait(
            waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        for task in waiters:
            if not task.done():
                task.cancel()

    if exit_task in done:
        return None
    if cancel_task is not None and cancel_task in done:
        return ErrorKind.CANCELLED
    return ErrorKind.TIMEOUT


async def run_process(
    spec: CommandSpec,
    *,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
    cancel_event: asyncio.Event | None = None,
    kill_grace_period: float | None = None,
) -> ProcessResult:
    """Run one program to completion, timeout or cancellation.

    Args:
        spec: Program and arguments to execute.
        cwd: Working directory for the child only.
        env: Variables layered over the server's environment for the child.
        timeout: Deadline in seconds. None means the configured default.
        cancel_event: Setting this event stops the process early.
        kill_grace_period: Seconds between SIGTERM and SIGKILL. None means
            the configured default.

    Returns:
        ProcessResult with captured output. When the deadline or the cancel
        token fired, ``termination`` is set and ``exit_code`` is None.

    Raises:
        SpawnFailedError: If the program could not be started.
        asyncio.CancelledError: If the calling task is cancelled; the
            process group is terminated before this propagates.
    """
    config = get_config()
    if timeout is None:
        timeout = config.command_timeout
    if kill_grace_period is None:
        kill_grace_period = config.kill_grace_period

    if cancel_event is not None and cancel_event.is_set():
        logger.info("Not starting %s: invocation already cancelled", spec.display)
        return ProcessResult(
            stdout="", stderr="", exit_code=None, termination=ErrorKind.CANCELLED
        )

    child_env = {**os.environ, **env} if env else None

    try:
        proc = await asyncio.create_subprocess_exec(
            spec.program,
            *spec.args,
            cwd=cwd,
            env=child_env,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
        )
    except (OSError, ValueError) as e:
        logger.warning("Failed to start %s: %s", spec.display, e)
        raise SpawnFailedError(f"failed to start {spec.program!r}: {e}") from e

    logger.debug(
        "Started %s (pid=%d, timeout=%ss, cwd=%s)",
        spec.display,
        proc.pid,
        timeout,
        cwd or ".",
    )

    stdout_buf = bytearray()
    stderr_buf = bytearray()
    readers = [
        asyncio.ensure_future(_drain(proc.stdout, stdout_buf)),
        asyncio.ensure_future(_drain(proc.stderr, stderr_buf)),
    ]

    start = time.perf_counter()
    termination: ErrorKind | None = None
    try:
        termination = await _wait_for_exit(proc, timeout, cancel_event)
    finally:
        # Shielded: a second cancellation returns control early, but the
        # teardown task keeps running to completion in the background
        await asyncio.shield(_cleanup(proc, readers, kill_grace_period))

    duration_ms = (time.perf_counter() - start) * 1000

    if termination is ErrorKind.TIMEOUT:
        logger.warning("Command timed out after %ss: %s", timeout, spec.display)
    elif termination is ErrorKind.CANCELLED:
        logger.info("Command cancelled: %s", spec.display)

    returncode = proc.returncode
    if termination is not None or returncode is None or returncode < 0:
        exit_code = None
    else:
        exit_code = returncode

    logger.debug(
        "Finished %s (exit=%s, %.1fms, stdout=%d bytes, stderr=%d bytes)",
        spec.display,
        exit_code,
        duration_ms,
        len(stdout_buf),
        len(stderr_buf),
    )

    return ProcessResult(
        stdout=stdout_buf.decode("utf-8", errors="replace"),
        stderr=stderr_buf.decode("utf-8", errors="replace"),
        exit_code=exit_code,
        termination=termination,
    )
