"""Error handling middleware for MCP requests."""

import logging
from collections import Counter
from collections.abc import Callable
from typing import Any

from fastmcp.server.middleware import MiddlewareContext

from labcoat.middleware.base import LabcoatMiddleware
from labcoat.services import FleetError

ErrorCallback = Callable[[Exception, MiddlewareContext], None]


class ErrorHandlingMiddleware(LabcoatMiddleware):
    """Log and count exceptions escaping request handlers, then re-raise them.

    Fleet errors are expected operator mistakes (unknown host, unreachable
    target) and are logged as warnings; anything else is logged as an error.

    Example:
        >>> middleware = ErrorHandlingMiddleware(include_traceback=True)
        >>> mcp.add_middleware(middleware)
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
            include_traceback: Whether to log the full traceback of unexpected errors.
            error_callback: Optional callback receiving (exception, context).
        """
        super().__init__(logger=logger)
        self.include_traceback = include_traceback
        self.error_callback = error_callback
        self._error_counts: Counter[str] = Counter()

    def get_error_stats(self) -> dict[str, int]:
        """Return occurrence counts keyed by exception type name."""
        return dict(self._error_counts)

    def reset_stats(self) -> None:
        self._error_counts.clear()

    async def on_message(self, context: MiddlewareContext, call_next: Any) -> Any:
        """Run the next handler, recording any exception it raises."""
        try:
            return await call_next(context)
        except Exception as e:
            self._record(e, context)
            raise

    def _record(self, error: Exception, context: MiddlewareContext) -> None:
        error_type = type(error).__name__
        self._error_counts[error_type] += 1

        if isinstance(error, FleetError):
            self.logger.warning("%s failed: %s: %s", context.method, error_type, error)
        else:
            self.logger.error(
                "Error in %s: %s: %s",
                context.method,
                error_type,
                error,
                exc_info=error if self.include_traceback else None,
            )

        if self.error_callback:
            try:
                self.error_callback(error, context)
            except Exception as callback_error:
                self.logger.warning("Error callback failed: %s", callback_error)
