"""Logging middleware for tool call tracking."""

import json
import logging
import time
from typing import Any

from fastmcp.server.middleware import MiddlewareContext

from chix_mcp.middleware.base import ChixMiddleware

# Methods with dedicated handlers below
_HANDLED_METHODS = ("tools/call", "tools/list")


class LoggingMiddleware(ChixMiddleware):
    """Logs tool calls with arguments, outcome and duration.

    Nix builds routinely run for minutes, so the slow threshold is only a
    hint for spotting unusually long calls; a slow call is logged at
    WARNING but otherwise treated normally.

    Example:
        >>> mcp.add_middleware(LoggingMiddleware(slow_threshold_ms=60_000))
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_payloads: bool = False,
        max_payload_length: int = 1000,
        slow_threshold_ms: float = 30_000.0,
    ) -> None:
        """Initialize logging middleware.

        Args:
            logger: Optional custom logger.
            include_payloads: Whether to log argument and result payloads.
            max_payload_length: Maximum logged payload length.
            slow_threshold_ms: Duration in ms above which a call is slow.
        """
        super().__init__(logger=logger)
        self.include_payloads = include_payloads
        self.max_payload_length = max_payload_length
        self.slow_threshold_ms = slow_threshold_ms

    def _truncate(self, data: Any) -> str:
        try:
            text = json.dumps(data, default=str)
        except (TypeError, ValueError):
            text = str(data)

        if len(text) > self.max_payload_length:
            return text[: self.max_payload_length] + "... [truncated]"
        return text

    def _format_args(self, args: dict[str, Any] | None) -> str:
        if not args:
            return "()"
        parts = []
        for key, value in args.items():
            if isinstance(value, str) and len(value) > 50:
                value = value[:50] + "..."
            parts.append(f"{key}={value!r}")
        return f"({', '.join(parts)})"

    def _format_duration(self, duration_ms: float) -> str:
        if duration_ms >= self.slow_threshold_ms:
            return f"{duration_ms:.1f}ms SLOW!"
        return f"{duration_ms:.1f}ms"

    def _payload(self, result: Any) -> dict[str, Any] | None:
        """The structured tool payload, if the result carries one."""
        if isinstance(result, dict):
            return result
        structured = getattr(result, "structured_content", None)
        if isinstance(structured, dict):
            return structured
        return None

    def _summarize_result(self, result: Any) -> tuple[str, bool]:
        """Brief summary of a tool result and whether the tool failed."""
        payload = self._payload(result)
        if payload is None:
            if result is None:
                return "null", False
            return type(result).__name__, False

        if payload.get("success", True):
            summary = "ok"
            if "results" in payload:
                summary += f", {len(payload['results'])} command(s)"
            if payload.get("truncated"):
                summary += ", truncated"
            return summary, False

        error = payload.get("error") or {}
        reason = error.get("reason", "failed")
        if payload.get("exit_code") is not None:
            return f"failed {reason} (exit {payload['exit_code']})", True
        return f"failed {reason}", True

    async def on_call_tool(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        """Log tool calls with name, arguments, outcome and timing."""
        start = time.perf_counter()
        tool_name = getattr(context.message, "name", "unknown")
        args = getattr(context.message, "arguments", None)

        self.logger.info(">>> TOOL: %s%s", tool_name, self._format_args(args))

        if self.include_payloads and args:
            self.logger.debug("    Args: %s", self._truncate(args))

        try:
            result = await call_next(context)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            self.logger.error(
                "!!! TOOL: %s -> %s: %s [%s]",
                tool_name,
                type(e).__name__,
                e,
                self._format_duration(duration_ms),
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        summary, failed = self._summarize_result(result)

        log_level = logging.INFO
        if failed or duration_ms >= self.slow_threshold_ms:
            log_level = logging.WARNING
        self.logger.log(
            log_level,
            "<<< TOOL: %s -> %s [%s]",
            tool_name,
            summary,
            self._format_duration(duration_ms),
        )

        if self.include_payloads and result is not None:
            self.logger.debug(
                "    Result: %s", self._truncate(self._payload(result) or result)
            )

        return result

    async def on_list_tools(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        start = time.perf_counter()
        self.logger.info(">>> LIST TOOLS")

        try:
            result = await call_next(context)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            self.logger.error(
                "!!! LIST TOOLS -> %s: %s [%s]",
                type(e).__name__,
                e,
                self._format_duration(duration_ms),
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        tool_count: int | str = "?"
        if hasattr(result, "tools"):
            tool_count = len(result.tools)
        elif isinstance(result, (list, tuple)):
            tool_count = len(result)

        self.logger.info(
            "<<< LIST TOOLS -> %s tool(s) [%s]",
            tool_count,
            self._format_duration(duration_ms),
        )
        return result

    async def on_message(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        """Log other protocol messages at debug level."""
        method = context.method
        if method in _HANDLED_METHODS:
            return await call_next(context)

        start = time.perf_counter()
        self.logger.debug(">>> MCP: %s", method)

        try:
            result = await call_next(context)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            self.logger.error(
                "!!! MCP: %s -> %s: %s [%s]",
                method,
                type(e).__name__,
                e,
                self._format_duration(duration_ms),
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        self.logger.debug("<<< MCP: %s [%s]", method, self._format_duration(duration_ms))
        return result
