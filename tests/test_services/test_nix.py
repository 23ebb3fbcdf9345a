"""Tests for nix host introspection."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from labcoat.config import Hosts
from labcoat.models import TargetInfo
from labcoat.services import nix
from labcoat.services.nix import NixError


class TestScripts:
    """Rendering of nix expressions."""

    def test_names_script(self) -> None:
        script = nix.names_script("/srv/fleet")

        assert 'builtins.getFlake "path:/srv/fleet"' in script
        assert "builtins.attrNames flake.nixosConfigurations" in script

    def test_target_info_script_uses_configured_attrs(self) -> None:
        hosts = Hosts(
            deploy_host_attr="target.config.networking.hostName",
            deploy_user_attr='"deploy"',
        )

        script = nix.target_info_script("/srv/fleet", "web1", hosts)

        assert 'key = "web1";' in script
        assert "target = flake.nixosConfigurations.${key};" in script
        assert "deployHost = target.config.networking.hostName;" in script
        assert 'deployUser = "deploy";' in script

    def test_target_info_script_empty_user_attr(self) -> None:
        script = nix.target_info_script("/srv/fleet", "web1", Hosts())

        assert 'deployUser = "";' in script

    def test_host_name_is_quoted(self) -> None:
        """Host names cannot break out of the string literal."""
        script = nix.target_info_script("/srv/fleet", 'a"${b}', Hosts())

        assert 'key = "a\\"\\${b}";' in script


class TestRunScript:
    """Invocation of nix eval."""

    @pytest.mark.asyncio
    async def test_returns_stdout(self) -> None:
        proc = MagicMock()
        proc.returncode = 0
        proc.communicate = AsyncMock(return_value=(b'["web1"]', b""))

        with patch(
            "labcoat.services.nix.asyncio.create_subprocess_exec",
            AsyncMock(return_value=proc),
        ) as spawn:
            result = await nix.run_script("1 + 1")

        assert result == b'["web1"]'
        assert spawn.call_args.args == nix.NIX_EVAL_ARGV
        proc.communicate.assert_awaited_once_with(b"1 + 1")

    @pytest.mark.asyncio
    async def test_nonzero_exit_raises(self) -> None:
        proc = MagicMock()
        proc.returncode = 1
        proc.communicate = AsyncMock(return_value=(b"", b"error: attribute missing"))

        with patch(
            "labcoat.services.nix.asyncio.create_subprocess_exec",
            AsyncMock(return_value=proc),
        ), pytest.raises(NixError) as exc_info:
            await nix.run_script("bad")

        assert "exit status 1" in str(exc_info.value)
        assert exc_info.value.script == "bad"
        assert "attribute missing" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_missing_nix_raises(self) -> None:
        with patch(
            "labcoat.services.nix.asyncio.create_subprocess_exec",
            AsyncMock(side_effect=FileNotFoundError("nix")),
        ), pytest.raises(NixError, match="nix run failed"):
            await nix.run_script("1")


class TestQueries:
    """Decoding of nix results."""

    @pytest.mark.asyncio
    async def test_get_names(self) -> None:
        with patch(
            "labcoat.services.nix.run_script",
            AsyncMock(return_value=json.dumps(["web1", "db1"]).encode()),
        ):
            assert await nix.get_names("/srv/fleet") == ["web1", "db1"]

    @pytest.mark.asyncio
    async def test_get_names_rejects_non_list(self) -> None:
        with patch(
            "labcoat.services.nix.run_script", AsyncMock(return_value=b'{"a": 1}')
        ), pytest.raises(NixError, match="unexpected host list"):
            await nix.get_names("/srv/fleet")

    @pytest.mark.asyncio
    async def test_get_names_invalid_json(self) -> None:
        with patch(
            "labcoat.services.nix.run_script", AsyncMock(return_value=b"not json")
        ), pytest.raises(NixError, match="decode failed"):
            await nix.get_names("/srv/fleet")

    @pytest.mark.asyncio
    async def test_get_target_info(self) -> None:
        payload = {"deployHost": "web1.lan", "deployUser": "admin"}
        with patch(
            "labcoat.services.nix.run_script",
            AsyncMock(return_value=json.dumps(payload).encode()),
        ):
            info = await nix.get_target_info("/srv/fleet", "web1", Hosts())

        assert info == TargetInfo(deploy_host="web1.lan", deploy_user="admin")
