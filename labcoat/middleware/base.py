"""Base middleware class for labcoat."""

import logging
import time

from fastmcp.server.middleware import Middleware


class LabcoatMiddleware(Middleware):
    """Base middleware holding a logger and a timing helper."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        """Initialize middleware.

        Args:
            logger: Optional custom logger. Defaults to module logger.
        """
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def elapsed_ms(start: float) -> float:
        """Milliseconds since a ``time.perf_counter()`` reading."""
        return (time.perf_counter() - start) * 1000
