"""chix MCP middleware components."""

from chix_mcp.middleware.base import ChixMiddleware
from chix_mcp.middleware.errors import ErrorHandlingMiddleware
from chix_mcp.middleware.logging import LoggingMiddleware

__all__ = [
    "ChixMiddleware",
    "ErrorHandlingMiddleware",
    "LoggingMiddleware",
]
