"""Input validation for tool parameters.

Commands are always executed directly, never through a shell, so these
checks are a second line of defense: anything a shell would treat as
syntax is rejected outright rather than escaped.
"""

import re
from collections.abc import Sequence
from typing import Final

from chix_mcp.errors import (
    InvalidArgumentError,
    InvalidExpressionError,
    InvalidPathError,
    InvalidReferenceError,
    UnsafeArgumentError,
)

# Flake references and installables: ".#default", "github:NixOS/nixpkgs#hello"
REFERENCE_PATTERN: Final = re.compile(r"^[a-zA-Z0-9._\-/:#+]+$")

# Absolute, relative or ~ paths; no spaces, control or shell characters
PATH_PATTERN: Final = re.compile(r"^[a-zA-Z0-9._\-/~]+$")

# Sequencing, piping, substitution, redirection, grouping, escaping
SHELL_METACHARACTERS: Final = re.compile(r"[;&|`$(){}\\<>!\x00]")

HASH_TYPES: Final[tuple[str, ...]] = ("sha256", "sha512", "sha1", "md5")


def validate_reference(value: str) -> str:
    """Validate a flake reference or installable.

    Args:
        value: Reference such as ``.#default`` or ``nixpkgs#hello``

    Returns:
        The reference, unchanged

    Raises:
        InvalidReferenceError: If the reference is outside the allow-list
    """
    if not REFERENCE_PATTERN.fullmatch(value):
        raise InvalidReferenceError(f"invalid flake reference: {value!r}")
    return value


def validate_path(value: str) -> str:
    """Validate a filesystem path.

    Args:
        value: Absolute, relative or home-relative path

    Returns:
        The path, unchanged

    Raises:
        InvalidPathError: If the path contains disallowed characters
    """
    if not PATH_PATTERN.fullmatch(value):
        raise InvalidPathError(f"invalid path: {value!r}")
    return value


def validate_no_shell_metacharacters(value: str) -> str:
    """Reject a single value containing shell metacharacters."""
    if SHELL_METACHARACTERS.search(value):
        raise UnsafeArgumentError(
            f"shell metacharacters not allowed: {value!r}. Pass each "
            "argument as a separate array entry instead of using shell operators",
            argument=value,
        )
    return value


def validate_arguments(values: Sequence[str]) -> None:
    """Check every argument against the metacharacter block-list.

    Raises:
        UnsafeArgumentError: Naming the first offending argument
    """
    for index, value in enumerate(values):
        if SHELL_METACHARACTERS.search(value):
            raise UnsafeArgumentError(
                f"shell metacharacters not allowed in argument {index}: {value!r}. "
                "Pass each argument as a separate array entry instead of "
                "using shell operators",
                argument=value,
                index=index,
            )


def validate_expression(value: str) -> str:
    """Validate a Nix expression for ``nix eval --expr`` or ``--apply``.

    The expression travels as one literal argv element, so Nix syntax such
    as ``{ }``, ``$`` or ``;`` is harmless. Only NUL bytes, which cannot be
    passed in argv, are rejected.
    """
    if "\x00" in value:
        raise InvalidExpressionError(
            f"nix expression contains invalid characters (null bytes): {value!r}"
        )
    return value


def validate_hash_type(value: str) -> str:
    """Validate a hash algorithm name."""
    if value not in HASH_TYPES:
        raise InvalidArgumentError(
            f"invalid hash type: {value!r}. Must be one of: {', '.join(HASH_TYPES)}"
        )
    return value


def validate_output_limits(**limits: int | None) -> None:
    """Reject negative line counts and byte budgets.

    Raises:
        InvalidArgumentError: Naming the first negative limit
    """
    for name, value in limits.items():
        if value is not None and value < 0:
            raise InvalidArgumentError(f"{name} must be >= 0, got {value}")
