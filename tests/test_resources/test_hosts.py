"""Tests for host resources."""

from unittest.mock import MagicMock, patch

import pytest

from labcoat.models import HostModel, HostTab, TargetInfo
from labcoat.resources import host_view_resource, list_hosts_resource


@pytest.fixture
def mock_fleet() -> MagicMock:
    fleet = MagicMock()
    with patch("labcoat.resources.hosts.get_fleet", return_value=fleet):
        yield fleet


@pytest.mark.asyncio
async def test_list_hosts(mock_fleet: MagicMock) -> None:
    mock_fleet.hosts = [
        HostModel("web1", target=TargetInfo("web1.lan", "root"), status_collected=True),
        HostModel("db1"),
    ]

    result = await list_hosts_resource()

    assert "[✓] web1" in result
    assert "Target:   root@web1.lan" in result
    assert "[ ] db1" in result
    assert "labcoat://db1/deploy" in result


@pytest.mark.asyncio
async def test_list_hosts_empty(mock_fleet: MagicMock) -> None:
    mock_fleet.hosts = []

    assert await list_hosts_resource() == "No hosts loaded."


@pytest.mark.asyncio
async def test_status_view_schedules_collection(mock_fleet: MagicMock) -> None:
    mock_fleet.output.return_value = ""

    await host_view_resource("web1", "status")

    mock_fleet.hover.assert_called_once_with("web1")
    mock_fleet.output.assert_called_once_with("web1", HostTab.STATUS)


@pytest.mark.asyncio
async def test_other_views_do_not_collect(mock_fleet: MagicMock) -> None:
    mock_fleet.output.return_value = "nixos-rebuild ..."

    assert await host_view_resource("web1", "deploy") == "nixos-rebuild ..."
    mock_fleet.hover.assert_not_called()


@pytest.mark.asyncio
async def test_unknown_view(mock_fleet: MagicMock) -> None:
    with pytest.raises(ValueError, match="Unknown view: logs"):
        await host_view_resource("web1", "logs")
