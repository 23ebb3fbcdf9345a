"""Fleet of NixOS hosts and the actions run against them.

The fleet owns one :class:`HostModel` per host defined in the flake. Every
action builds a fresh :class:`Runner`, stores it on the matching host view,
and starts a follow task that pulls output updates and re-renders the view.

Action methods return True when a runner was started and False when the
view already has one running; a second request for the same action is a
no-op, not an error.
"""

import asyncio
import logging
import tempfile
from pathlib import Path
from typing import Any

from labcoat.config import Config
from labcoat.models import HostModel, HostTab, HostView, RunnerEvent, TargetInfo
from labcoat.runner import (
    Runner,
    format_output,
    new_local,
    new_remote,
    new_remote_script,
    new_script,
)
from labcoat.services import nix
from labcoat.services.pool import WorkerPool, WorkerTimeoutError
from labcoat.ui.styles import PLAIN_STYLES, Styles
from labcoat.utils.shell import SSH_OPTIONS

logger = logging.getLogger(__name__)

STATUS_SCRIPT_NAME = "host status (script)"
REBOOT_COMMAND = "/run/current-system/sw/bin/reboot"


class FleetError(Exception):
    """An action could not be carried out on the fleet."""


class UnknownHostError(FleetError):
    """Host name is not defined in the flake."""

    def __init__(self, host_name: str):
        self.host_name = host_name
        super().__init__(f"Unknown host: {host_name}")


class TargetUnavailableError(FleetError):
    """Deploy target of a host could not be determined."""

    def __init__(self, host_name: str, reason: str):
        """Initialize target error.

        Args:
            host_name: Host whose target was requested
            reason: Why the lookup failed
        """
        self.host_name = host_name
        self.reason = reason
        super().__init__(f"Cannot resolve deploy target for {host_name}: {reason}")


class Fleet:
    """Hosts of one flake plus their running and finished actions."""

    def __init__(
        self,
        config: Config,
        nix_pool: WorkerPool,
        styles: Styles = PLAIN_STYLES,
    ) -> None:
        """Initialize fleet.

        Args:
            config: Application configuration
            nix_pool: Pool bounding concurrent ``nix eval`` invocations
            styles: Renderers for labels and intro text
        """
        self.config = config
        self.nix_pool = nix_pool
        self.styles = styles
        self._hosts: dict[str, HostModel] = {}
        self._hover_tasks: dict[str, asyncio.Task[None]] = {}

    @property
    def hosts(self) -> list[HostModel]:
        """Known hosts in flake order."""
        return list(self._hosts.values())

    def set_hosts(self, names: list[str]) -> None:
        """Replace the host list, keeping state for hosts that remain."""
        self._hosts = {name: self._hosts.get(name) or HostModel(name) for name in names}

    def get_host(self, name: str) -> HostModel:
        """Look up a host by name.

        Raises:
            UnknownHostError: If the host is not in the fleet
        """
        try:
            return self._hosts[name]
        except KeyError:
            raise UnknownHostError(name) from None

    async def load_hosts(self) -> list[str]:
        """Enumerate host names from the flake.

        Raises:
            WorkerTimeoutError: If no nix worker became free in time
            nix.NixError: If evaluation failed
        """
        async with self.nix_pool.worker(self.config.nix_timeout):
            names = await nix.get_names(self.config.flake_path)

        self.set_hosts(names)
        logger.info("Loaded %d hosts (flake=%s)", len(names), self.config.flake_path)
        return names

    async def fetch_target(self, name: str, refresh: bool = False) -> TargetInfo:
        """Return where and as whom a host is deployed.

        The result is cached on the host; pass ``refresh`` to query again.

        Raises:
            UnknownHostError: If the host is not in the fleet
            TargetUnavailableError: If nix could not answer in time or failed
        """
        host = self.get_host(name)
        if host.target is not None and not refresh:
            return host.target

        try:
            async with self.nix_pool.worker(self.config.nix_timeout) as w:
                logger.debug("Fetching target info (host=%s, worker=%s)", name, w)
                info = await nix.get_target_info(
                    self.config.flake_path, name, self.config.hosts
                )
        except WorkerTimeoutError as e:
            logger.warning("Timed out fetching target info (host=%s)", name)
            raise TargetUnavailableError(name, str(e)) from e
        except nix.NixError as e:
            logger.error("Target info failed (host=%s): %s", name, e.detail)
            raise TargetUnavailableError(name, str(e)) from e

        host.target = self._apply_defaults(info)
        logger.info("Target resolved (host=%s, target=%s)", name, host.target.ssh_target)
        return host.target

    def _apply_defaults(self, info: TargetInfo) -> TargetInfo:
        hosts = self.config.hosts
        deploy_host = info.deploy_host
        if hosts.default_ssh_domain and "." not in deploy_host:
            deploy_host = f"{deploy_host}.{hosts.default_ssh_domain}"
        return TargetInfo(
            deploy_host=deploy_host,
            deploy_user=info.deploy_user or hosts.default_ssh_user,
        )

    async def status(self, name: str) -> bool:
        """Collect host status by running the status commands remotely."""
        host = self.get_host(name)
        if host.view(HostTab.STATUS).running:
            return False

        target = await self.fetch_target(name)
        script = new_script(self.config.commands.status_cmds)
        runner = new_remote_script(
            self._updater(name, HostTab.STATUS),
            target.deploy_host,
            target.deploy_user,
            STATUS_SCRIPT_NAME,
            script,
        )
        return self._launch(host, HostTab.STATUS, runner)

    async def deploy(self, name: str) -> bool:
        """Build and switch the host to the flake's configuration."""
        host = self.get_host(name)
        if host.view(HostTab.DEPLOY).running:
            return False

        target = await self.fetch_target(name)
        args = [
            "--flake",
            f".#{name}",
            "--target-host",
            target.ssh_target,
        ]
        if build_host := self.config.nix.default_build_host:
            args += ["--build-host", build_host]
        args.append("switch")

        runner = new_local(
            self._updater(name, HostTab.DEPLOY),
            self.config.flake_path,
            "nixos-rebuild",
            *args,
        )
        runner.pass_env("PATH")
        runner.set_env("NIX_SSHOPTS", " ".join(SSH_OPTIONS))
        return self._launch(host, HostTab.DEPLOY, runner)

    async def run_command(self, name: str, command: str) -> bool:
        """Run an operator-supplied command on the host.

        The command is handed to the remote shell as typed.
        """
        host = self.get_host(name)
        if host.view(HostTab.RUN).running:
            return False

        target = await self.fetch_target(name)
        runner = new_remote(
            self._updater(name, HostTab.RUN),
            target.deploy_host,
            target.deploy_user,
            command,
        )
        return self._launch(host, HostTab.RUN, runner)

    async def reboot(self, name: str) -> bool:
        """Reboot the host; output shows up in the run view."""
        host = self.get_host(name)
        if host.view(HostTab.RUN).running:
            return False

        target = await self.fetch_target(name)
        runner = new_remote(
            self._updater(name, HostTab.RUN),
            target.deploy_host,
            target.deploy_user,
            REBOOT_COMMAND,
        )
        return self._launch(host, HostTab.RUN, runner)

    def _updater(self, name: str, tab: HostTab):
        def on_update(runner: Runner) -> RunnerEvent:
            return RunnerEvent(host=name, tab=tab, final=runner.complete)

        return on_update

    def _launch(self, host: HostModel, tab: HostTab, runner: Runner) -> bool:
        view = host.view(tab)
        # Another request may have started while the target was resolved.
        if view.running:
            logger.info("%s already running (host=%s)", tab.title, host.name)
            return False

        runner.suffix_style = self.styles.subtle
        view.intro = self.styles.subtle(f"{runner} @ {runner.destination}") + "\n"
        view.content = ""
        view.runner = runner

        task = runner.start()
        view.follow_task = asyncio.create_task(
            self._follow(host, tab, runner, task),
            name=f"follow:{host.name}:{tab.value}",
        )
        return True

    async def _follow(
        self, host: HostModel, tab: HostTab, runner: Runner, task: "asyncio.Task[Any]"
    ) -> None:
        """Pull updates from a runner until it has nothing more to report."""
        try:
            while await runner.wait_for_output() is not None:
                self._refresh(host.view(tab), runner)
            # Final render includes the status suffix.
            self._refresh(host.view(tab), runner)
            if tab == HostTab.STATUS and host.view(tab).runner is runner:
                host.status_collected = runner.successful
        finally:
            try:
                await task
            except asyncio.CancelledError:
                logger.debug("Runner task cancelled (host=%s, tab=%s)", host.name, tab.value)

    def _refresh(self, view: HostView, runner: Runner) -> None:
        # A newer action replaced this runner.
        if view.runner is not runner:
            return
        view.content = format_output(runner.view(), self.styles.label).replace("\r", "")

    def cancel(self, name: str, tab: HostTab) -> bool:
        """Cancel the action running in a host view.

        Returns:
            True if a running action was cancelled
        """
        view = self.get_host(name).view(tab)
        if not view.running or view.runner is None:
            return False
        view.runner.cancel()
        return True

    def output(self, name: str, tab: HostTab) -> str:
        """Return the rendered intro and output of a host view."""
        return self.get_host(name).view(tab).render()

    async def wait(self, name: str, tab: HostTab, timeout: float | None = None) -> bool:
        """Wait until the host view's action has finished rendering.

        Returns:
            True if nothing is left running, False if the timeout elapsed
        """
        task = self.get_host(name).view(tab).follow_task
        if task is None:
            return True
        done, _ = await asyncio.wait({task}, timeout=timeout)
        return bool(done)

    def export(self, name: str, tab: HostTab) -> Path | None:
        """Copy the raw output of a host view to a temporary file.

        Returns:
            Path of the file, or None if the view has no output yet
        """
        runner = self.get_host(name).view(tab).runner
        if runner is None:
            return None

        with tempfile.NamedTemporaryFile(
            prefix=f"labcoat-{name}-{tab.value}-", suffix=".txt", delete=False
        ) as f:
            size = runner.copy_to(f)

        logger.info("Exported %d bytes (host=%s, tab=%s, path=%s)", size, name, tab.value, f.name)
        return Path(f.name)

    def hover(self, name: str) -> bool:
        """Collect status for a host shortly after it gets focus.

        Status is collected at most once per host this way; the delay lets
        quickly skipped hosts go unqueried.

        Returns:
            True if a delayed collection was scheduled
        """
        host = self.get_host(name)
        if host.status_collected or name in self._hover_tasks:
            return False
        if host.view(HostTab.STATUS).runner is not None:
            return False

        self._hover_tasks[name] = asyncio.create_task(
            self._hover(name), name=f"hover:{name}"
        )
        return True

    def unhover(self, name: str) -> None:
        """Drop a pending delayed collection for a host."""
        task = self._hover_tasks.pop(name, None)
        if task is not None:
            task.cancel()

    async def _hover(self, name: str) -> None:
        try:
            await asyncio.sleep(self.config.settings.hover_delay)
            await self.status(name)
        except FleetError as e:
            logger.warning("Hover status failed (host=%s): %s", name, e)
        finally:
            # A newer hover may already own the slot.
            if self._hover_tasks.get(name) is asyncio.current_task():
                del self._hover_tasks[name]

    async def close(self) -> None:
        """Cancel running actions and wait for their follow tasks."""
        for task in list(self._hover_tasks.values()):
            task.cancel()
        self._hover_tasks.clear()

        tasks = []
        for host in self._hosts.values():
            for view in host.views.values():
                if view.running and view.runner is not None:
                    view.runner.cancel()
                if view.follow_task is not None:
                    tasks.append(view.follow_task)

        if tasks:
            logger.info("Waiting for %d runner(s) to finish", len(tasks))
            await asyncio.gather(*tasks, return_exceptions=True)
