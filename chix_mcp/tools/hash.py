"""Content hashing tools."""

from typing import Any

from chix_mcp.errors import ValidationError
from chix_mcp.services import execute_command
from chix_mcp.tools.handlers import error_response, nix_command, outcome_response
from chix_mcp.utils.validation import validate_hash_type, validate_path


async def _hash(
    mode: str,
    path: str,
    hash_type: str,
    base32: bool,
    sri: bool,
) -> dict[str, Any]:
    try:
        validate_path(path)
        validate_hash_type(hash_type)
    except ValidationError as e:
        return error_response(e)

    nix_args = ["hash", mode]
    # base32 wins when both formats are requested
    if base32:
        nix_args.append("--base32")
    elif sri:
        nix_args.append("--sri")
    nix_args.extend(["--type", hash_type, path])

    outcome = await execute_command(nix_command(*nix_args))
    digest = outcome.stdout.strip() if outcome.succeeded else None
    return outcome_response(outcome, hash=digest)


async def nix_hash_path(
    path: str,
    hash_type: str = "sha256",
    base32: bool = False,
    sri: bool = True,
) -> dict[str, Any]:
    """Hash a file or directory in NAR serialisation.

    Args:
        path: Path to hash.
        hash_type: One of sha256, sha512, sha1, md5.
        base32: Print the hash in Nix base32.
        sri: Print the hash in SRI format. Ignored when ``base32`` is set.
    """
    return await _hash("path", path, hash_type, base32, sri)


async def nix_hash_file(
    path: str,
    hash_type: str = "sha256",
    base32: bool = False,
    sri: bool = True,
) -> dict[str, Any]:
    """Hash the flat contents of a file."""
    return await _hash("file", path, hash_type, base32, sri)
