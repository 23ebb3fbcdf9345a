"""Tests for fleet MCP tools."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from labcoat.config import Config, Settings
from labcoat.models import HostModel, HostTab, TargetInfo
from labcoat.runner import new_local
from labcoat.services import TargetUnavailableError, UnknownHostError
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


@pytest.fixture
def mock_fleet() -> MagicMock:
    fleet = MagicMock()
    fleet.status = AsyncMock(return_value=True)
    fleet.deploy = AsyncMock(return_value=True)
    fleet.run_command = AsyncMock(return_value=True)
    fleet.reboot = AsyncMock(return_value=True)
    fleet.wait = AsyncMock(return_value=True)
    with patch("labcoat.tools.fleet.get_fleet", return_value=fleet):
        yield fleet


@pytest.fixture
def config() -> Config:
    config = Config(settings=Settings())
    with patch("labcoat.tools.fleet.get_config", return_value=config):
        yield config


class TestActionTools:
    """Tools that start actions."""

    @pytest.mark.asyncio
    async def test_host_status_started(self, mock_fleet: MagicMock) -> None:
        result = await host_status("web1")

        mock_fleet.status.assert_awaited_once_with("web1")
        assert result == "Host Status started on web1; use host_output to follow it."

    @pytest.mark.asyncio
    async def test_host_status_already_running(self, mock_fleet: MagicMock) -> None:
        mock_fleet.status.return_value = False

        assert "already running" in await host_status("web1")

    @pytest.mark.asyncio
    async def test_unknown_host_returns_error(self, mock_fleet: MagicMock) -> None:
        mock_fleet.deploy.side_effect = UnknownHostError("nope")

        assert await host_deploy("nope") == "Error: Unknown host: nope"

    @pytest.mark.asyncio
    async def test_unresolvable_target_returns_error(self, mock_fleet: MagicMock) -> None:
        mock_fleet.run_command.side_effect = TargetUnavailableError("web1", "nix failed")

        result = await host_run("web1", "uptime")

        assert result.startswith("Error: Cannot resolve deploy target for web1")

    @pytest.mark.asyncio
    async def test_host_run(self, mock_fleet: MagicMock) -> None:
        result = await host_run("web1", "uptime")

        mock_fleet.run_command.assert_awaited_once_with("web1", "uptime")
        assert result.startswith("Run Command started on web1")

    @pytest.mark.asyncio
    async def test_host_run_rejects_empty_command(self, mock_fleet: MagicMock) -> None:
        assert await host_run("web1", "  ") == "Error: command must not be empty"
        mock_fleet.run_command.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_host_reboot_requires_confirm(self, mock_fleet: MagicMock) -> None:
        assert "requires confirm=true" in await host_reboot("web1")
        mock_fleet.reboot.assert_not_awaited()

        await host_reboot("web1", confirm=True)
        mock_fleet.reboot.assert_awaited_once_with("web1")


class TestOutputTools:
    """Tools that inspect views."""

    @pytest.mark.asyncio
    async def test_hosts_listing(self, mock_fleet: MagicMock) -> None:
        web1 = HostModel("web1", target=TargetInfo("web1.lan", "root"), status_collected=True)
        web1.view(HostTab.DEPLOY).runner = new_local(lambda r: None, None, "true")
        mock_fleet.hosts = [web1, HostModel("db1")]

        result = await hosts()

        assert result == (
            "web1  root@web1.lan  [status ok]  [running: deploy]\n"
            "db1  (target not resolved)"
        )

    @pytest.mark.asyncio
    async def test_hosts_empty(self, mock_fleet: MagicMock) -> None:
        mock_fleet.hosts = []

        assert await hosts() == "No hosts loaded."

    @pytest.mark.asyncio
    async def test_host_output_text(self, mock_fleet: MagicMock, config: Config) -> None:
        host = HostModel("web1")
        host.view(HostTab.RUN).runner = MagicMock()
        mock_fleet.get_host.return_value = host
        mock_fleet.output.return_value = "uptime @ ssh://web1\nup\n[Done]"

        result = await host_output("web1", "run", wait=2)

        mock_fleet.wait.assert_awaited_once_with("web1", HostTab.RUN, 2)
        assert result == "uptime @ ssh://web1\nup\n[Done]"

    @pytest.mark.asyncio
    async def test_host_output_ui(self, mock_fleet: MagicMock, config: Config) -> None:
        config.settings.enable_ui = True
        host = HostModel("web1")
        host.view(HostTab.STATUS).runner = new_local(lambda r: None, None, "uptime")
        mock_fleet.get_host.return_value = host

        result = await host_output("web1")

        assert isinstance(result, list)
        assert str(result[0].resource.uri) == "ui://labcoat/web1/status"

    @pytest.mark.asyncio
    async def test_host_output_no_runner(self, mock_fleet: MagicMock, config: Config) -> None:
        mock_fleet.get_host.return_value = HostModel("web1")

        assert await host_output("web1", "deploy") == "No deploy output for web1 yet."
        mock_fleet.wait.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_host_output_bad_tab(self, mock_fleet: MagicMock) -> None:
        result = await host_output("web1", "logs")

        assert result == "Error: Unknown view 'logs'. Use one of: status, deploy, run"

    @pytest.mark.asyncio
    async def test_host_cancel(self, mock_fleet: MagicMock) -> None:
        mock_fleet.cancel.return_value = True
        assert await host_cancel("web1", "deploy") == "Cancelled deploy on web1."
        mock_fleet.cancel.assert_called_once_with("web1", HostTab.DEPLOY)

        mock_fleet.cancel.return_value = False
        assert await host_cancel("web1") == "Nothing running in run on web1."

    @pytest.mark.asyncio
    async def test_host_export(self, mock_fleet: MagicMock, tmp_path: Path) -> None:
        mock_fleet.export.return_value = tmp_path / "out.txt"
        assert await host_export("web1", "status") == str(tmp_path / "out.txt")

        mock_fleet.export.return_value = None
        assert await host_export("web1", "status") == "No host status output for web1 yet."
