"""Error handling middleware for unexpected failures.

Expected failures (bad input, non-zero exits, timeouts) come back from tools
as structured payloads. Anything that reaches this middleware as an exception
escaped a handler, so it is logged and counted before being re-raised.
"""

import logging
import traceback
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from fastmcp.server.middleware import MiddlewareContext

from chix_mcp.errors import ChixError
from chix_mcp.middleware.base import ChixMiddleware

ErrorCallback = Callable[[Exception, MiddlewareContext], None]


def _error_key(error: Exception) -> str:
    """Statistics key: the error kind for chix errors, else the type name."""
    if isinstance(error, ChixError):
        return error.kind.value
    return type(error).__name__


class ErrorHandlingMiddleware(ChixMiddleware):
    """Logs, counts and re-raises exceptions from request handling.

    Example:
        >>> def on_error(exc, ctx):
        ...     print(f"{ctx.method} failed: {exc}")
        >>> mcp.add_middleware(ErrorHandlingMiddleware(error_callback=on_error))
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_traceback: bool = False,
        error_callback: ErrorCallback | None = None,
    ) -> None:
        """Initialize error handling middleware.

        Args:
            logger: Optional custom logger.
            include_traceback: Whether to log the full traceback.
            error_callback: Called with (exception, context) on each error.
        """
        super().__init__(logger=logger)
        self.include_traceback = include_traceback
        self.error_callback = error_callback
        self._error_counts: dict[str, int] = defaultdict(int)

    def get_error_stats(self) -> dict[str, int]:
        """Error counts keyed by error kind or exception type name."""
        return dict(self._error_counts)

    def reset_stats(self) -> None:
        self._error_counts.clear()

    async def on_message(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        try:
            return await call_next(context)

        except Exception as e:
            key = _error_key(e)
            self._error_counts[key] += 1

            tool_name = getattr(context.message, "name", None)
            target = f"{context.method} ({tool_name})" if tool_name else context.method

            if self.include_traceback:
                self.logger.error(
                    "Error in %s: %s: %s\n%s",
                    target,
                    key,
                    e,
                    traceback.format_exc(),
                )
            else:
                self.logger.error("Error in %s: %s: %s", target, key, e)

            if self.error_callback:
                try:
                    self.error_callback(e, context)
                except Exception as callback_error:
                    self.logger.warning("Error callback failed: %s", callback_error)

            raise
