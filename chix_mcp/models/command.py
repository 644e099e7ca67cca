"""Command execution data models."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from chix_mcp.errors import ErrorKind


@dataclass(frozen=True)
class CommandSpec:
    """A program and its ordered argument list.

    ``label`` replaces the joined command line in results, e.g. to show
    ``cargo test`` instead of the full ``nix develop . -c cargo test``.
    """

    program: str
    args: tuple[str, ...] = ()
    label: str | None = None

    @classmethod
    def create(
        cls,
        program: str,
        args: Iterable[str] | None = None,
        label: str | None = None,
    ) -> "CommandSpec":
        """Build a command from any iterable of arguments."""
        return cls(program=program, args=tuple(args or ()), label=label)

    @property
    def display(self) -> str:
        """Human-readable form of the command, for results and logs."""
        if self.label is not None:
            return self.label
        return " ".join((self.program, *self.args))


@dataclass(frozen=True)
class TruncationInfo:
    """Sizes in bytes before and after truncation."""

    original_size: int
    kept_size: int

    def to_dict(self) -> dict[str, int]:
        return {"original_size": self.original_size, "kept_size": self.kept_size}


@dataclass(frozen=True)
class LimitedText:
    """Text capped to a byte budget, with truncation provenance."""

    content: str
    truncated: bool = False
    truncation_info: TruncationInfo | None = None


@dataclass
class ProcessResult:
    """Raw output of a single process run.

    ``termination`` is set when the runner killed the process (timeout or
    cancellation); ``exit_code`` is ``None`` in that case and whenever the
    process died from a signal.
    """

    stdout: str
    stderr: str
    exit_code: int | None
    termination: ErrorKind | None = None

    @property
    def succeeded(self) -> bool:
        return self.termination is None and self.exit_code == 0


@dataclass
class ExecutionOutcome:
    """Result of one attempted command."""

    command_display: str
    succeeded: bool
    stdout: str
    stderr: LimitedText
    exit_code: int | None = None
    reason: ErrorKind | None = None
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the tool response."""
        data: dict[str, Any] = {
            "command": self.command_display,
            "success": self.succeeded,
            "stdout": self.stdout,
            "stderr": self.stderr.content,
            "exit_code": self.exit_code,
        }
        if self.stderr.truncated:
            data["truncated"] = True
        if self.stderr.truncation_info is not None:
            data["truncation_info"] = self.stderr.truncation_info.to_dict()
        if self.reason is not None:
            data["error"] = {"reason": self.reason.value, "message": self.message}
        return data


@dataclass
class SequenceResult:
    """Ordered outcomes of a sequential run.

    ``outcomes`` stops at (and includes) the first failed command.
    """

    overall_succeeded: bool
    outcomes: list[ExecutionOutcome] = field(default_factory=list)

    @property
    def truncated(self) -> bool:
        return any(outcome.stderr.truncated for outcome in self.outcomes)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.overall_succeeded,
            "results": [outcome.to_dict() for outcome in self.outcomes],
        }
        if self.truncated:
            data["truncated"] = True
        return data
