"""Labcoat MCP middleware components."""

from labcoat.middleware.base import LabcoatMiddleware
from labcoat.middleware.errors import ErrorHandlingMiddleware
from labcoat.middleware.logging import LoggingMiddleware

__all__ = [
    "ErrorHandlingMiddleware",
    "LabcoatMiddleware",
    "LoggingMiddleware",
]
