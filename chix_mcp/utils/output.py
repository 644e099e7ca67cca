"""Output limiting for command results.

Diagnostic output (stderr) is always capped to a fixed byte budget because
no caller parameter bounds it. Primary output can additionally be shaped by
caller-chosen head/tail/max_bytes limits.
"""

from dataclasses import dataclass
from typing import Final

from chix_mcp.models import LimitedText, TruncationInfo

DEFAULT_MAX_BYTES: Final = 100_000


@dataclass(frozen=True)
class OutputLimits:
    """Caller-directed limits for primary output.

    ``head`` takes priority over ``tail``; ``max_bytes`` applies after
    either.
    """

    head: int | None = None
    tail: int | None = None
    max_bytes: int | None = None


def limit_text(text: str, max_bytes: int) -> LimitedText:
    """Cap text to a UTF-8 byte budget.

    Keeps the longest prefix that fits without splitting a multi-byte
    character. Applying it again with the same or a larger budget returns
    the content unchanged.

    Args:
        text: Text to limit
        max_bytes: Maximum encoded size of the result

    Returns:
        LimitedText with truncation details when anything was removed
    """
    if max_bytes < 0:
        raise ValueError(f"max_bytes must be >= 0, got {max_bytes}")

    encoded = text.encode("utf-8")
    original_size = len(encoded)
    if original_size <= max_bytes:
        return LimitedText(content=text)

    # Dropping undecodable bytes only ever removes a partial trailing character
    content = encoded[:max_bytes].decode("utf-8", errors="ignore")
    return LimitedText(
        content=content,
        truncated=True,
        truncation_info=TruncationInfo(
            original_size=original_size,
            kept_size=len(content.encode("utf-8")),
        ),
    )


def limit_stderr(text: str, max_bytes: int | None = None) -> LimitedText:
    """Apply the diagnostic-stream budget to stderr."""
    return limit_text(text, DEFAULT_MAX_BYTES if max_bytes is None else max_bytes)


def limit_text_output(text: str, limits: OutputLimits) -> LimitedText:
    """Shape primary output by line window and byte budget.

    Args:
        text: Full output text
        limits: head/tail line counts and optional byte budget

    Returns:
        LimitedText whose truncation info is relative to ``text``
    """
    content = text
    if limits.head is not None or limits.tail is not None:
        lines = text.splitlines(keepends=True)
        if limits.head is not None:
            if limits.head < len(lines):
                content = "".join(lines[: limits.head])
        elif limits.tail is not None and limits.tail < len(lines):
            content = "".join(lines[len(lines) - limits.tail :])

    if limits.max_bytes is not None:
        content = limit_text(content, limits.max_bytes).content

    if content == text:
        return LimitedText(content=text)

    return LimitedText(
        content=content,
        truncated=True,
        truncation_info=TruncationInfo(
            original_size=len(text.encode("utf-8")),
            kept_size=len(content.encode("utf-8")),
        ),
    )
