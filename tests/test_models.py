"""Tests for command data models."""

from chix_mcp.errors import ErrorKind
from chix_mcp.models import (
    CommandSpec,
    ExecutionOutcome,
    LimitedText,
    ProcessResult,
    SequenceResult,
    TruncationInfo,
)


def _outcome(
    succeeded: bool = True,
    stderr: LimitedText | None = None,
    reason: ErrorKind | None = None,
) -> ExecutionOutcome:
    return ExecutionOutcome(
        command_display="cargo test",
        succeeded=succeeded,
        stdout="ok\n",
        stderr=stderr or LimitedText(content=""),
        exit_code=0 if succeeded else 1,
        reason=reason,
        message=None if reason is None else "command exited with code 1",
    )


class TestCommandSpec:
    """Tests for CommandSpec."""

    def test_display_joins_program_and_args(self) -> None:
        spec = CommandSpec.create("nix", ["build", ".#default"])

        assert spec.display == "nix build .#default"
        assert spec.args == ("build", ".#default")

    def test_label_overrides_display(self) -> None:
        spec = CommandSpec.create("nix", ["develop", ".", "-c", "ls"], label="ls")

        assert spec.display == "ls"

    def test_no_args(self) -> None:
        assert CommandSpec.create("true").display == "true"


class TestProcessResult:
    """Tests for ProcessResult success rules."""

    def test_zero_exit_succeeds(self) -> None:
        assert ProcessResult(stdout="", stderr="", exit_code=0).succeeded

    def test_nonzero_exit_fails(self) -> None:
        assert not ProcessResult(stdout="", stderr="", exit_code=2).succeeded

    def test_terminated_fails(self) -> None:
        result = ProcessResult(
            stdout="", stderr="", exit_code=None, termination=ErrorKind.TIMEOUT
        )
        assert not result.succeeded


class TestExecutionOutcome:
    """Tests for outcome serialization."""

    def test_success_payload(self) -> None:
        data = _outcome().to_dict()

        assert data == {
            "command": "cargo test",
            "success": True,
            "stdout": "ok\n",
            "stderr": "",
            "exit_code": 0,
        }

    def test_failure_payload_has_error(self) -> None:
        data = _outcome(succeeded=False, reason=ErrorKind.NON_ZERO_EXIT).to_dict()

        assert data["success"] is False
        assert data["error"] == {
            "reason": "NonZeroExit",
            "message": "command exited with code 1",
        }

    def test_truncated_stderr_payload(self) -> None:
        stderr = LimitedText(
            content="x" * 10,
            truncated=True,
            truncation_info=TruncationInfo(original_size=20, kept_size=10),
        )

        data = _outcome(stderr=stderr).to_dict()

        assert data["truncated"] is True
        assert data["truncation_info"] == {"original_size": 20, "kept_size": 10}


class TestSequenceResult:
    """Tests for sequence serialization."""

    def test_empty_sequence(self) -> None:
        data = SequenceResult(overall_succeeded=True).to_dict()

        assert data == {"success": True, "results": []}

    def test_truncated_when_any_outcome_truncated(self) -> None:
        stderr = LimitedText(
            content="x",
            truncated=True,
            truncation_info=TruncationInfo(original_size=2, kept_size=1),
        )
        result = SequenceResult(
            overall_succeeded=True, outcomes=[_outcome(), _outcome(stderr=stderr)]
        )

        assert result.truncated is True
        assert result.to_dict()["truncated"] is True
