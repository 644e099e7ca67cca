"""chix MCP FastMCP server.

A thin wrapper that wires the MCP server to the tool registry. All command
handling is delegated to the tools/ and services/ modules.
"""

import logging
import os
import shutil
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from chix_mcp.middleware import ErrorHandlingMiddleware, LoggingMiddleware
from chix_mcp.services import get_config
from chix_mcp.tools import TOOLS
from chix_mcp.utils.console import MCPRequestFormatter


def _configure_logging() -> None:
    """Configure colorful logging for the chix_mcp package.

    Called at module load time so logging is set up before any logger is
    used, however the server is started. Logs go to stderr; on the stdio
    transport stdout belongs to the protocol.
    """
    log_level = os.getenv("CHIX_LOG_LEVEL", "INFO").upper()
    use_colors = os.getenv("CHIX_LOG_COLORS", "true").lower() != "false"

    if not sys.stderr.isatty():
        use_colors = False

    chix_logger = logging.getLogger("chix_mcp")
    chix_logger.setLevel(getattr(logging, log_level, logging.INFO))

    # Only add handler if not already configured
    if not chix_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(MCPRequestFormatter(use_colors=use_colors))
        chix_logger.addHandler(handler)
        chix_logger.propagate = False

    for noisy_logger in [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "httpx",
        "httpcore",
        "fastmcp",
        "starlette",
        "anyio",
    ]:
        lg = logging.getLogger(noisy_logger)
        lg.setLevel(logging.WARNING)
        lg.handlers = []
        lg.propagate = False

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(logging.WARNING)


_configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Report configuration at startup.

    A missing nix binary is only a warning: every tool call will then fail
    with SpawnFailed, which the caller sees in the tool result.

    Args:
        server: The FastMCP server instance

    Yields:
        Dict with the resolved nix binary path
    """
    config = get_config()
    logger.info("chix MCP server starting up")

    nix_path = shutil.which(config.nix_binary)
    if nix_path is None:
        logger.warning(
            "nix binary %r not found on PATH; tool calls will fail",
            config.nix_binary,
        )
    else:
        logger.info("Using nix binary: %s", nix_path)

    logger.info(
        "Limits: command_timeout=%ds, max_stderr_bytes=%d, max_output_bytes=%d",
        config.command_timeout,
        config.max_stderr_bytes,
        config.max_output_bytes,
    )
    logger.info("Registered %d tool(s): %s", len(TOOLS), ", ".join(sorted(TOOLS)))

    try:
        yield {"nix_binary": nix_path}
    finally:
        logger.info("chix MCP server shutdown complete")


def configure_middleware(server: FastMCP) -> None:
    """Configure middleware stack for the server.

    Adds middleware in order: ErrorHandling -> Logging (with integrated timing)

    Environment variables:
        CHIX_LOG_PAYLOADS: Set to "true" to log request/response payloads
        CHIX_SLOW_THRESHOLD_MS: Threshold for slow call warnings (default: 30000)
        CHIX_INCLUDE_TRACEBACK: Set to "true" to include tracebacks in error logs

    Args:
        server: The FastMCP server to configure.
    """
    log_payloads = os.getenv("CHIX_LOG_PAYLOADS", "").lower() == "true"
    include_traceback = os.getenv("CHIX_INCLUDE_TRACEBACK", "").lower() == "true"
    try:
        slow_threshold = float(os.getenv("CHIX_SLOW_THRESHOLD_MS", "30000"))
    except ValueError:
        logger.warning("Invalid CHIX_SLOW_THRESHOLD_MS, using 30000")
        slow_threshold = 30000.0

    # First added = innermost
    server.add_middleware(ErrorHandlingMiddleware(include_traceback=include_traceback))
    server.add_middleware(
        LoggingMiddleware(
            include_payloads=log_payloads,
            slow_threshold_ms=slow_threshold,
        )
    )


def create_server() -> FastMCP:
    """Create and configure the MCP server with middleware and tools.

    Returns:
        Configured FastMCP server instance
    """
    server = FastMCP("chix", lifespan=app_lifespan)

    configure_middleware(server)

    for spec in TOOLS.values():
        server.tool(name=spec.name, description=spec.description)(spec.handler)

    @server.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> PlainTextResponse:
        """Health check endpoint."""
        client_host = request.client.host if request.client else "unknown"
        logger.debug("Health check from %s", client_host)
        return PlainTextResponse("OK")

    return server


# Default server instance
mcp = create_server()
