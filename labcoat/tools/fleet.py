"""Fleet tools: status, deploy, run and inspect output on NixOS hosts."""

import logging

from mcp_ui_server.core import UIResource

from labcoat.models import HostModel, HostTab
from labcoat.services import FleetError, get_config, get_fleet
from labcoat.ui import create_output_ui

logger = logging.getLogger(__name__)

TAB_NAMES = ", ".join(tab.value for tab in HostTab)


def _parse_tab(tab: str) -> HostTab:
    try:
        return HostTab(tab.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown view '{tab}'. Use one of: {TAB_NAMES}") from None


def _started(host: str, tab: HostTab, started: bool) -> str:
    if not started:
        return f"{tab.title} already running on {host}; use host_output to follow it."
    return f"{tab.title} started on {host}; use host_output to follow it."


def _describe(host: HostModel) -> str:
    target = host.target.ssh_target if host.target else "(target not resolved)"
    running = [tab.value for tab, view in host.views.items() if view.running]
    line = f"{host.name}  {target}"
    if host.status_collected:
        line += "  [status ok]"
    if running:
        line += f"  [running: {', '.join(running)}]"
    return line


async def hosts() -> str:
    """List the hosts defined in the flake.

    Shows each host's deploy target once resolved, whether its status was
    collected successfully, and which actions are running.
    """
    fleet = get_fleet()
    if not fleet.hosts:
        return "No hosts loaded."
    return "\n".join(_describe(h) for h in fleet.hosts)


async def host_status(host: str) -> str:
    """Collect status from a host by running the configured status commands.

    Args:
        host: Host name as defined in the flake.

    Returns:
        Whether collection started; read it with host_output(host, "status").
    """
    try:
        started = await get_fleet().status(host)
    except FleetError as e:
        return f"Error: {e}"
    return _started(host, HostTab.STATUS, started)


async def host_deploy(host: str) -> str:
    """Deploy the flake's configuration to a host with nixos-rebuild switch.

    Args:
        host: Host name as defined in the flake.
    """
    try:
        started = await get_fleet().deploy(host)
    except FleetError as e:
        return f"Error: {e}"
    return _started(host, HostTab.DEPLOY, started)


async def host_run(host: str, command: str) -> str:
    """Run a shell command on a host over ssh.

    Args:
        host: Host name as defined in the flake.
        command: Command line passed to the remote shell.
    """
    if not command.strip():
        return "Error: command must not be empty"
    try:
        started = await get_fleet().run_command(host, command)
    except FleetError as e:
        return f"Error: {e}"
    return _started(host, HostTab.RUN, started)


async def host_reboot(host: str, confirm: bool = False) -> str:
    """Reboot a host.

    Args:
        host: Host name as defined in the flake.
        confirm: Must be true; rebooting interrupts every service on the host.
    """
    if not confirm:
        return f"Error: rebooting {host} requires confirm=true"
    try:
        started = await get_fleet().reboot(host)
    except FleetError as e:
        return f"Error: {e}"
    return _started(host, HostTab.RUN, started)


async def host_output(
    host: str, tab: str = "status", wait: float = 0
) -> list[UIResource] | str:
    """Show the output of a host's status, deploy or run view.

    Args:
        host: Host name as defined in the flake.
        tab: One of "status", "deploy" or "run".
        wait: Seconds to wait for a running action to finish first.

    Returns:
        Command line and output, ending with [Done] or [Failed] once finished.
    """
    fleet = get_fleet()
    try:
        view_tab = _parse_tab(tab)
        if wait > 0 and not await fleet.wait(host, view_tab, wait):
            logger.debug("Still running after %ss (host=%s, tab=%s)", wait, host, tab)
        text = fleet.output(host, view_tab)
        view = fleet.get_host(host).view(view_tab)
    except (FleetError, ValueError) as e:
        return f"Error: {e}"

    if view.runner is None:
        return f"No {view_tab.title.lower()} output for {host} yet."
    if get_config().settings.enable_ui:
        return [create_output_ui(host, view_tab, view)]
    return text


async def host_cancel(host: str, tab: str = "run") -> str:
    """Cancel the action running in one of a host's views.

    Args:
        host: Host name as defined in the flake.
        tab: One of "status", "deploy" or "run".
    """
    try:
        view_tab = _parse_tab(tab)
        cancelled = get_fleet().cancel(host, view_tab)
    except (FleetError, ValueError) as e:
        return f"Error: {e}"

    if not cancelled:
        return f"Nothing running in {view_tab.value} on {host}."
    return f"Cancelled {view_tab.title.lower()} on {host}."


async def host_export(host: str, tab: str = "status") -> str:
    """Write the raw output of a host view to a temporary file.

    Args:
        host: Host name as defined in the flake.
        tab: One of "status", "deploy" or "run".

    Returns:
        Path of the file, suitable for a pager.
    """
    try:
        view_tab = _parse_tab(tab)
        path = get_fleet().export(host, view_tab)
    except (FleetError, ValueError) as e:
        return f"Error: {e}"
    except OSError as e:
        return f"Error: cannot write export file: {e}"

    if path is None:
        return f"No {view_tab.title.lower()} output for {host} yet."
    return str(path)
