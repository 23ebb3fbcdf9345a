"""Labcoat FastMCP server.

This is a thin wrapper that wires together the MCP server with tools and resources.
All fleet logic is delegated to the tools/, resources/, and services/ modules.
"""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from labcoat.config import Settings
from labcoat.middleware import ErrorHandlingMiddleware, LoggingMiddleware
from labcoat.resources import host_view_resource, list_hosts_resource
from labcoat.services import NixError, WorkerTimeoutError, get_config, get_fleet
from labcoat.tools import (
    host_cancel,
    host_deploy,
    host_export,
    host_output,
    host_reboot,
    host_run,
    host_status,
    hosts,
)
from labcoat.utils.console import ColorfulFormatter

NOISY_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
    "httpcore",
    "fastmcp",
    "starlette",
    "anyio",
)


def _configure_logging(settings: Settings) -> None:
    """Configure colorful logging for the labcoat package.

    This is called at module load time to ensure logging is configured
    before any loggers are used, regardless of how the server is started.
    """
    # Disable colors if not a TTY
    use_colors = settings.log_colors and sys.stderr.isatty()

    labcoat_logger = logging.getLogger("labcoat")
    labcoat_logger.setLevel(getattr(logging, settings.log_level, logging.INFO))

    # Only add handlers if not already configured
    if not labcoat_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorfulFormatter(use_colors=use_colors))
        labcoat_logger.addHandler(handler)

        if settings.log_file:
            file_handler = logging.FileHandler(settings.log_file)
            file_handler.setFormatter(ColorfulFormatter(use_colors=False))
            labcoat_logger.addHandler(file_handler)

        labcoat_logger.propagate = False

    for name in NOISY_LOGGERS:
        lg = logging.getLogger(name)
        lg.setLevel(logging.WARNING)
        lg.handlers = []
        lg.propagate = False

    # Suppress root logger - this prevents uvicorn's default output
    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(logging.WARNING)


# Configure logging at module load time
_configure_logging(Settings.from_env())

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Load the fleet's hosts at startup and stop running actions on shutdown.

    A flake that cannot be evaluated leaves the host list empty rather than
    preventing startup.

    Args:
        server: The FastMCP server instance

    Yields:
        Dict with host names
    """
    logger.info("Labcoat server starting up")

    fleet = get_fleet()
    names: list[str] = []
    try:
        names = await fleet.load_hosts()
    except WorkerTimeoutError as e:
        logger.error("Could not load hosts: %s", e)
    except NixError as e:
        logger.error("Could not load hosts: %s", e.detail)

    logger.info("Loaded %d host(s): %s", len(names), ", ".join(names) or "(none)")
    logger.info("Labcoat server ready to accept connections")

    try:
        yield {"hosts": names}
    finally:
        logger.info("Labcoat server shutting down")
        await fleet.close()
        logger.info("Labcoat server shutdown complete")


def configure_middleware(server: FastMCP, settings: Settings) -> None:
    """Configure middleware stack for the server.

    Adds middleware in order: ErrorHandling -> Logging (with integrated timing)

    Args:
        server: The FastMCP server to configure.
        settings: Logging options from the environment.
    """
    # First added = innermost
    server.add_middleware(
        ErrorHandlingMiddleware(include_traceback=settings.include_traceback)
    )
    server.add_middleware(
        LoggingMiddleware(
            include_payloads=settings.log_payloads,
            slow_threshold_ms=settings.slow_threshold_ms,
        )
    )


def create_server() -> FastMCP:
    """Create and configure the MCP server with all middleware and resources.

    Returns:
        Configured FastMCP server instance
    """
    server = FastMCP(
        "labcoat",
        lifespan=app_lifespan,
    )

    configure_middleware(server, get_config().settings)

    # host_output may return UIResource content, which needs no outputSchema
    server.tool(output_schema=None)(host_output)
    for tool in (
        hosts,
        host_status,
        host_deploy,
        host_run,
        host_reboot,
        host_cancel,
        host_export,
    ):
        server.tool()(tool)

    server.resource("hosts://list")(list_hosts_resource)
    server.resource("labcoat://{host}/{tab}")(host_view_resource)

    @server.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> PlainTextResponse:
        """Health check endpoint."""
        client_host = request.client.host if request.client else "unknown"
        logger.debug("Health check from %s", client_host)
        return PlainTextResponse("OK")

    return server


# Default server instance
mcp = create_server()
