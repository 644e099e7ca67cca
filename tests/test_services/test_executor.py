"""Tests for single and sequential command execution."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from chix_mcp.config import Config
from chix_mcp.errors import ErrorKind
from chix_mcp.models import CommandSpec, ProcessResult
from chix_mcp.services.executor import (
    ExecutionContext,
    execute_command,
    run_sequence,
)


class TestExecutionContext:
    """Tests for building contexts from config."""

    def test_from_config(self) -> None:
        config = Config(command_timeout=12, max_stderr_bytes=34)

        context = ExecutionContext.from_config(config, cwd="/tmp", env={"A": "1"})

        assert context.timeout == 12
        assert context.stderr_budget == 34
        assert context.cwd == "/tmp"
        assert context.env == {"A": "1"}
        assert context.cancel_event is None


class TestExecuteCommand:
    """Tests for execute_command."""

    @pytest.mark.asyncio
    async def test_success(self, fast_config: Config) -> None:
        outcome = await execute_command(CommandSpec.create("echo", ["hi"]))

        assert outcome.succeeded
        assert outcome.command_display == "echo hi"
        assert outcome.stdout == "hi\n"
        assert outcome.exit_code == 0
        assert outcome.reason is None
        assert outcome.message is None

    @pytest.mark.asyncio
    async def test_non_zero_exit(self, fast_config: Config) -> None:
        outcome = await execute_command(CommandSpec.create("false"))

        assert not outcome.succeeded
        assert outcome.exit_code == 1
        assert outcome.reason is ErrorKind.NON_ZERO_EXIT
        assert outcome.message == "command exited with code 1"

    @pytest.mark.asyncio
    async def test_unsafe_argument_never_spawns(self, fast_config: Config) -> None:
        with patch(
            "chix_mcp.services.executor.run_process", new_callable=AsyncMock
        ) as mock_run:
            outcome = await execute_command(
                CommandSpec.create("cargo", ["test", "&&", "rm", "-rf", "/"])
            )

        mock_run.assert_not_called()
        assert not outcome.succeeded
        assert outcome.reason is ErrorKind.UNSAFE_ARGUMENT
        assert outcome.exit_code is None
        assert outcome.stderr.content == ""
        assert "argument 1" in outcome.message

    @pytest.mark.asyncio
    async def test_argument_check_can_be_skipped(self, fast_config: Config) -> None:
        outcome = await execute_command(
            CommandSpec.create("echo", ["{ a = 1; }"]), check_arguments=False
        )

        assert outcome.succeeded
        assert outcome.stdout == "{ a = 1; }\n"

    @pytest.mark.asyncio
    async def test_spawn_failure_is_an_outcome(self, fast_config: Config) -> None:
        outcome = await execute_command(
            CommandSpec.create("/nonexistent/chix-test-binary")
        )

        assert not outcome.succeeded
        assert outcome.reason is ErrorKind.SPAWN_FAILED
        assert outcome.exit_code is None

    @pytest.mark.asyncio
    async def test_stderr_is_limited_to_budget(self) -> None:
        """150000 bytes of stderr are cut to the 100000 byte budget."""
        result = ProcessResult(stdout="", stderr="e" * 150_000, exit_code=1)

        with patch(
            "chix_mcp.services.executor.run_process",
            new_callable=AsyncMock,
            return_value=result,
        ):
            outcome = await execute_command(CommandSpec.create("noisy"))

        assert len(outcome.stderr.content) == 100_000
        assert outcome.stderr.truncated
        assert outcome.stderr.truncation_info is not None
        assert outcome.stderr.truncation_info.original_size == 150_000
        assert outcome.stderr.truncation_info.kept_size == 100_000

    @pytest.mark.asyncio
    async def test_stdout_is_not_limited(self) -> None:
        result = ProcessResult(stdout="o" * 150_000, stderr="", exit_code=0)

        with patch(
            "chix_mcp.services.executor.run_process",
            new_callable=AsyncMock,
            return_value=result,
        ):
            outcome = await execute_command(CommandSpec.create("chatty"))

        assert len(outcome.stdout) == 150_000

    @pytest.mark.asyncio
    async def test_timeout_outcome(self) -> None:
        result = ProcessResult(
            stdout="partial", stderr="", exit_code=None, termination=ErrorKind.TIMEOUT
        )
        context = ExecutionContext(timeout=7)

        with patch(
            "chix_mcp.services.executor.run_process",
            new_callable=AsyncMock,
            return_value=result,
        ):
            outcome = await execute_command(CommandSpec.create("slow"), context)

        assert outcome.reason is ErrorKind.TIMEOUT
        assert outcome.message == "command timed out after 7 seconds"
        assert outcome.stdout == "partial"

    @pytest.mark.asyncio
    async def test_context_is_passed_to_runner(self) -> None:
        cancel_event = asyncio.Event()
        context = ExecutionContext(
            cwd="/srv", env={"K": "V"}, timeout=9, cancel_event=cancel_event
        )
        result = ProcessResult(stdout="", stderr="", exit_code=0)

        with patch(
            "chix_mcp.services.executor.run_process",
            new_callable=AsyncMock,
            return_value=result,
        ) as mock_run:
            await execute_command(CommandSpec.create("true"), context)

        mock_run.assert_awaited_once()
        kwargs = mock_run.call_args.kwargs
        assert kwargs["cwd"] == "/srv"
        assert kwargs["env"] == {"K": "V"}
        assert kwargs["timeout"] == 9
        assert kwargs["cancel_event"] is cancel_event


class TestRunSequence:
    """Tests for logical-AND sequencing."""

    @pytest.mark.asyncio
    async def test_true_then_false(self, fast_config: Config) -> None:
        result = await run_sequence(
            [CommandSpec.create("true"), CommandSpec.create("false")]
        )

        assert result.overall_succeeded is False
        assert len(result.outcomes) == 2
        assert result.outcomes[0].succeeded
        assert result.outcomes[0].exit_code == 0
        assert not result.outcomes[1].succeeded
        assert result.outcomes[1].exit_code == 1
        assert result.outcomes[1].reason is ErrorKind.NON_ZERO_EXIT

    @pytest.mark.asyncio
    async def test_stops_at_first_failure(
        self, fast_config: Config, tmp_path: Path
    ) -> None:
        """[true, false, touch] reports two outcomes and never runs touch."""
        sentinel = tmp_path / "sentinel"

        result = await run_sequence(
            [
                CommandSpec.create("true"),
                CommandSpec.create("false"),
                CommandSpec.create("touch", [str(sentinel)]),
            ]
        )

        assert result.overall_succeeded is False
        assert [o.succeeded for o in result.outcomes] == [True, False]
        assert result.outcomes[1].exit_code == 1
        assert not sentinel.exists()

    @pytest.mark.asyncio
    async def test_all_succeed(self, fast_config: Config, tmp_path: Path) -> None:
        first = tmp_path / "first"

        result = await run_sequence(
            [
                CommandSpec.create("touch", [str(first)]),
                CommandSpec.create("test", ["-f", str(first)]),
            ]
        )

        assert result.overall_succeeded is True
        assert len(result.outcomes) == 2

    @pytest.mark.asyncio
    async def test_empty_sequence_succeeds(self, fast_config: Config) -> None:
        result = await run_sequence([])

        assert result.overall_succeeded is True
        assert result.outcomes == []

    @pytest.mark.asyncio
    async def test_validation_failure_stops_sequence(
        self, fast_config: Config, tmp_path: Path
    ) -> None:
        sentinel = tmp_path / "sentinel"

        result = await run_sequence(
            [
                CommandSpec.create("echo", ["$(id)"]),
                CommandSpec.create("touch", [str(sentinel)]),
            ]
        )

        assert not result.overall_succeeded
        assert len(result.outcomes) == 1
        assert result.outcomes[0].reason is ErrorKind.UNSAFE_ARGUMENT
        assert not sentinel.exists()

    @pytest.mark.asyncio
    async def test_cancelled_sequence_keeps_completed_outcomes(
        self, fast_config: Config, tmp_path: Path
    ) -> None:
        sentinel = tmp_path / "sentinel"
        cancel_event = asyncio.Event()
        asyncio.get_running_loop().call_later(0.3, cancel_event.set)
        context = ExecutionContext.from_config(cancel_event=cancel_event)

        result = await run_sequence(
            [
                CommandSpec.create("true"),
                CommandSpec.create("sleep", ["30"]),
                CommandSpec.create("touch", [str(sentinel)]),
            ],
            context,
        )

        assert not result.overall_succeeded
        assert len(result.outcomes) == 2
        assert result.outcomes[0].succeeded
        assert result.outcomes[1].reason is ErrorKind.CANCELLED
        assert not sentinel.exists()

    @pytest.mark.asyncio
    async def test_commands_share_working_directory(
        self, fast_config: Config, tmp_path: Path
    ) -> None:
        context = ExecutionContext.from_config(cwd=str(tmp_path))

        result = await run_sequence(
            [
                CommandSpec.create("touch", ["made-here"]),
                CommandSpec.create("ls"),
            ],
            context,
        )

        assert result.overall_succeeded
        assert "made-here" in result.outcomes[1].stdout
