"""MCP tools for labcoat."""

from labcoat.tools.fleet import (
    host_cancel,
    host_deploy,
    host_export,
    host_output,
    host_reboot,
    host_run,
    host_status,
    hosts,
)

__all__ = [
    "host_cancel",
    "host_deploy",
    "host_export",
    "host_output",
    "host_reboot",
    "host_run",
    "host_status",
    "hosts",
]
