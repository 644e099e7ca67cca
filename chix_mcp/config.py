"""Configuration management for chix MCP."""

import logging
import os
from contextlib import suppress
from dataclasses import dataclass

from chix_mcp.utils.output import DEFAULT_MAX_BYTES

logger = logging.getLogger(__name__)


def _get_env_int(key: str) -> int | None:
    if val := os.getenv(key):
        with suppress(ValueError):
            return int(val)
    return None


def _get_env_float(key: str) -> float | None:
    if val := os.getenv(key):
        with suppress(ValueError):
            return float(val)
    return None


@dataclass
class Config:
    """chix MCP configuration.

    Values are fixed for the lifetime of the server; nothing here can be
    changed per tool call.
    """

    command_timeout: int = 300  # seconds
    max_stderr_bytes: int = DEFAULT_MAX_BYTES
    # Default byte budget for primary output when the caller sets none
    max_output_bytes: int = DEFAULT_MAX_BYTES
    kill_grace_period: float = 5.0  # seconds between SIGTERM and SIGKILL
    nix_binary: str = "nix"
    # Transport configuration
    transport: str = "stdio"  # "stdio" or "http"
    http_host: str = "127.0.0.1"
    http_port: int = 8000

    def __post_init__(self) -> None:
        """Apply environment variable overrides."""
        val = _get_env_int("CHIX_COMMAND_TIMEOUT")
        if val is not None:
            if val <= 0:
                logger.warning(
                    "CHIX_COMMAND_TIMEOUT must be > 0, got %d. Using default: %d",
                    val,
                    self.command_timeout,
                )
            else:
                self.command_timeout = val

        val = _get_env_int("CHIX_MAX_STDERR_BYTES")
        if val is not None:
            if val <= 0:
                logger.warning(
                    "CHIX_MAX_STDERR_BYTES must be > 0, got %d. Using default: %d",
                    val,
                    self.max_stderr_bytes,
                )
            else:
                self.max_stderr_bytes = val

        val = _get_env_int("CHIX_MAX_OUTPUT_BYTES")
        if val is not None:
            if val <= 0:
                logger.warning(
                    "CHIX_MAX_OUTPUT_BYTES must be > 0, got %d. Using default: %d",
                    val,
                    self.max_output_bytes,
                )
            else:
                self.max_output_bytes = val

        grace = _get_env_float("CHIX_KILL_GRACE_PERIOD")
        if grace is not None:
            if grace < 0:
                logger.warning(
                    "CHIX_KILL_GRACE_PERIOD must be >= 0, got %s. Using default: %s",
                    grace,
                    self.kill_grace_period,
                )
            else:
                self.kill_grace_period = grace

        if nix_binary := os.getenv("CHIX_NIX_BIN"):
            self.nix_binary = nix_binary

        transport = os.getenv("CHIX_TRANSPORT", "").lower()
        if transport in ("http", "stdio"):
            self.transport = transport

        if http_host := os.getenv("CHIX_HTTP_HOST"):
            self.http_host = http_host

        http_port = _get_env_int("CHIX_HTTP_PORT")
        if http_port is not None:
            self.http_port = http_port

        logger.debug(
            "Config initialized: transport=%s, command_timeout=%d, "
            "max_stderr_bytes=%d, nix_binary=%s",
            self.transport,
            self.command_timeout,
            self.max_stderr_bytes,
            self.nix_binary,
        )
