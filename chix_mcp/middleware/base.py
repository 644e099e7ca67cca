"""Base middleware class for chix MCP."""

import logging

from fastmcp.server.middleware import Middleware


class ChixMiddleware(Middleware):
    """Base middleware that carries a configurable logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        """Initialize middleware.

        Args:
            logger: Optional custom logger. Defaults to module logger.
        """
        self.logger = logger or logging.getLogger(__name__)
