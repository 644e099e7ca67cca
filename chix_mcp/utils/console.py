"""Colorful console logging formatter."""

import logging
import re
from datetime import datetime

from chix_mcp.errors import ErrorKind

# ANSI color codes
COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "magenta": "\033[35m",
    "cyan": "\033[36m",
    "white": "\033[37m",
    "bright_black": "\033[90m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_yellow": "\033[93m",
    "bright_blue": "\033[94m",
    "bright_magenta": "\033[95m",
    "bright_cyan": "\033[96m",
    "bg_red": "\033[41m",
}

LEVEL_COLORS = {
    "DEBUG": COLORS["bright_black"],
    "INFO": COLORS["bright_green"],
    "WARNING": COLORS["bright_yellow"],
    "ERROR": COLORS["bright_red"],
    "CRITICAL": COLORS["bg_red"] + COLORS["white"] + COLORS["bold"],
}

# Component colors for logger names
COMPONENT_COLORS = {
    "chix_mcp.server": COLORS["bright_cyan"],
    "chix_mcp.services.runner": COLORS["bright_magenta"],
    "chix_mcp.services.executor": COLORS["magenta"],
    "chix_mcp.tools": COLORS["bright_blue"],
    "chix_mcp.middleware": COLORS["yellow"],
    "chix_mcp.config": COLORS["green"],
    "default": COLORS["white"],
}

DURATION_PATTERN = re.compile(r"(\d+\.?\d*ms)")
EXIT_PATTERN = re.compile(r"(exit=-?\d+|exit=None)")
REASON_PATTERN = re.compile(
    r"\[(" + "|".join(kind.value for kind in ErrorKind) + r")\]"
)


class ColorfulFormatter(logging.Formatter):
    """Log formatter with aligned columns and component highlighting."""

    def __init__(self, use_colors: bool = True) -> None:
        """Initialize the formatter.

        Args:
            use_colors: Whether to use ANSI colors.
        """
        super().__init__()
        self.use_colors = use_colors

    def _colorize(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{color}{text}{COLORS['reset']}"

    def _get_component_color(self, name: str) -> str:
        for prefix, color in COMPONENT_COLORS.items():
            if prefix != "default" and name.startswith(prefix):
                return color
        return COMPONENT_COLORS["default"]

    def _format_timestamp(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created)
        return f"{dt:%H:%M:%S}.{int(record.msecs):03d}"

    def _format_level(self, record: logging.LogRecord) -> str:
        level = record.levelname
        color = LEVEL_COLORS.get(level, COLORS["white"])
        return self._colorize(f"{level:<8}", color)

    def _format_component(self, record: logging.LogRecord) -> str:
        name = record.name
        if name.startswith("chix_mcp."):
            name = name[len("chix_mcp.") :]
        color = self._get_component_color(record.name)
        return self._colorize(f"{name:<20}", color)

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as aligned, optionally colored columns."""
        timestamp = self._colorize(self._format_timestamp(record), COLORS["dim"])
        level = self._format_level(record)
        component = self._format_component(record)
        sep = self._colorize("|", COLORS["dim"])
        message = self._highlight_message(record.getMessage())

        line = f"{timestamp} {sep} {level} {sep} {component} {sep} {message}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line

    def _highlight_message(self, message: str) -> str:
        """Highlight durations, exit codes and reason codes."""
        if not self.use_colors:
            return message

        message = DURATION_PATTERN.sub(
            f"{COLORS['bright_yellow']}\\1{COLORS['reset']}", message
        )
        message = EXIT_PATTERN.sub(
            f"{COLORS['bright_magenta']}\\1{COLORS['reset']}", message
        )
        return REASON_PATTERN.sub(
            f"[{COLORS['bright_red']}\\1{COLORS['reset']}]", message
        )


class MCPRequestFormatter(ColorfulFormatter):
    """Formatter that prefixes lifecycle and tool-call events with markers."""

    def format(self, record: logging.LogRecord) -> str:
        """Format with a leading marker for notable events."""
        base = super().format(record)

        if not self.use_colors:
            return base

        message = record.getMessage()
        lowered = message.lower()

        if message.startswith(">>>") or "starting" in lowered or "ready" in lowered:
            return f"{COLORS['bright_green']}>>>{COLORS['reset']} {base}"
        if message.startswith("<<<") or "shutdown" in lowered:
            return f"{COLORS['bright_cyan']}<<<{COLORS['reset']} {base}"
        if message.startswith("!!!") or "failed" in lowered or "error" in lowered:
            return f"{COLORS['bright_red']}!!{COLORS['reset']}  {base}"
        if "timed out" in lowered or "slow" in lowered or "cancelled" in lowered:
            return f"{COLORS['bright_yellow']}!{COLORS['reset']}   {base}"

        return f"    {base}"
