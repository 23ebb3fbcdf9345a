"""Host resources: the fleet listing and per-host output views."""

import logging

from labcoat.models import HostTab
from labcoat.services import get_fleet

logger = logging.getLogger(__name__)


async def list_hosts_resource() -> str:
    """List the flake's hosts with their deploy targets and resource URIs."""
    fleet = get_fleet()
    if not fleet.hosts:
        return "No hosts loaded."

    lines = ["Fleet Hosts", "=" * 40, ""]
    for host in fleet.hosts:
        mark = "✓" if host.status_collected else " "
        target = host.target.ssh_target if host.target else "(not resolved)"
        lines.append(f"[{mark}] {host.name}")
        lines.append(f"    Target:   {target}")
        for tab in HostTab:
            lines.append(f"    {tab.title + ':':<12}labcoat://{host.name}/{tab.value}")
        lines.append("")

    return "\n".join(lines)


async def host_view_resource(host: str, tab: str) -> str:
    """Read one output view of a host.

    Reading the status view of a host whose status was never collected
    schedules a delayed collection.
    """
    fleet = get_fleet()
    try:
        view_tab = HostTab(tab)
    except ValueError:
        raise ValueError(f"Unknown view: {tab}") from None

    if view_tab == HostTab.STATUS and fleet.hover(host):
        logger.debug("Scheduled status collection (host=%s)", host)

    return fleet.output(host, view_tab)
