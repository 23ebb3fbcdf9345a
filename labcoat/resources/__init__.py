"""MCP resources for labcoat."""

from labcoat.resources.hosts import host_view_resource, list_hosts_resource

__all__ = ["host_view_resource", "list_hosts_resource"]
