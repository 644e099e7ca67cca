"""Error taxonomy for chix MCP.

Every failure a caller can see carries a stable reason code from
:class:`ErrorKind` so client tooling can branch on the kind of failure
without parsing the message text.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Stable reason codes reported to callers."""

    INVALID_REFERENCE = "InvalidReference"
    INVALID_PATH = "InvalidPath"
    UNSAFE_ARGUMENT = "UnsafeArgument"
    INVALID_EXPRESSION = "InvalidExpression"
    INVALID_ARGUMENT = "InvalidArgument"
    SPAWN_FAILED = "SpawnFailed"
    TIMEOUT = "Timeout"
    CANCELLED = "Cancelled"
    NON_ZERO_EXIT = "NonZeroExit"


class ChixError(Exception):
    """Base class for errors raised by chix MCP."""

    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        """Serialize as an error payload."""
        return {"reason": self.kind.value, "message": self.message}


class ValidationError(ChixError, ValueError):
    """Input rejected before any process was spawned."""


class InvalidReferenceError(ValidationError):
    """Flake reference or installable failed the allow-list."""

    kind = ErrorKind.INVALID_REFERENCE


class InvalidPathError(ValidationError):
    """Filesystem path failed the allow-list."""

    kind = ErrorKind.INVALID_PATH


class UnsafeArgumentError(ValidationError):
    """Argument contains a shell metacharacter."""

    kind = ErrorKind.UNSAFE_ARGUMENT

    def __init__(self, message: str, argument: str, index: int | None = None) -> None:
        super().__init__(message)
        self.argument = argument
        self.index = index


class InvalidExpressionError(ValidationError):
    """Nix expression cannot be passed as a process argument."""

    kind = ErrorKind.INVALID_EXPRESSION


class InvalidArgumentError(ValidationError):
    """Parameter value outside its permitted set."""

    kind = ErrorKind.INVALID_ARGUMENT


class SpawnFailedError(ChixError):
    """The target program could not be started."""

    kind = ErrorKind.SPAWN_FAILED
