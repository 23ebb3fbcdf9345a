"""Host introspection through ``nix eval``.

Each query renders a small Nix expression against the fleet's flake and
evaluates it with ``nix eval --file - --json``. Evaluations are slow and
memory hungry, so callers gate them with a :class:`WorkerPool`.
"""

import asyncio
import json
import logging
import subprocess
from pathlib import Path

from labcoat.config import Hosts
from labcoat.models import TargetInfo

logger = logging.getLogger(__name__)

NIX_EVAL_ARGV = ("nix", "eval", "--file", "-", "--json")


class NixError(Exception):
    """A nix evaluation failed or returned unexpected output."""

    def __init__(self, message: str, script: str = "", output: str = ""):
        """Initialize nix error.

        Args:
            message: Short description of the failure
            script: Nix expression that was evaluated
            output: stderr or stdout captured from nix
        """
        self.script = script
        self.output = output
        super().__init__(message)

    @property
    def detail(self) -> str:
        """Full report including the script and nix output."""
        parts = [str(self)]
        if self.script:
            parts.append(f"Script:\n{self.script}")
        if self.output:
            parts.append(f"Output:\n{self.output}")
        return "\n\n".join(parts)


def _nix_string(value: str) -> str:
    """Quote a value as a Nix string literal."""
    return json.dumps(value).replace("${", "\\${")


def names_script(flake_path: Path | str) -> str:
    """Render the expression listing the flake's nixosConfigurations."""
    flake = _nix_string(f"path:{flake_path}")
    return f"""
let
  flake = builtins.getFlake {flake};
in
builtins.attrNames flake.nixosConfigurations
"""


def target_info_script(flake_path: Path | str, host_name: str, hosts: Hosts) -> str:
    """Render the expression resolving a host's deploy address and user.

    ``flake`` and ``target`` are in scope for the configured attr paths.
    """
    flake = _nix_string(f"path:{flake_path}")
    user_expr = hosts.deploy_user_attr or '""'
    return f"""
let
  flake = builtins.getFlake {flake};
  key = {_nix_string(host_name)};
  target = flake.nixosConfigurations.${{key}};
in
{{
  deployHost = {hosts.deploy_host_attr};
  deployUser = {user_expr};
}}
"""


async def run_script(script: str) -> bytes:
    """Evaluate a Nix expression and return its JSON output.

    Raises:
        NixError: If nix cannot be started or exits with an error
    """
    logger.debug("Running nix script: %s", script)

    try:
        proc = await asyncio.create_subprocess_exec(
            *NIX_EVAL_ARGV,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as e:
        raise NixError(f"nix run failed: {e}", script) from e

    stdout, stderr = await proc.communicate(script.encode())
    if proc.returncode != 0:
        raise NixError(
            f"nix run failed: exit status {proc.returncode}",
            script,
            stderr.decode("utf-8", errors="replace"),
        )

    return stdout


def _decode(output: bytes, script: str) -> object:
    try:
        return json.loads(output)
    except ValueError as e:
        raise NixError(
            f"nix decode failed: {e}",
            script,
            output.decode("utf-8", errors="replace"),
        ) from e


async def get_names(flake_path: Path | str) -> list[str]:
    """List the host names defined by the flake.

    Raises:
        NixError: If evaluation fails or does not return a list of names
    """
    script = names_script(flake_path)
    names = _decode(await run_script(script), script)

    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise NixError("nix returned an unexpected host list", script, json.dumps(names))
    return names


async def get_target_info(
    flake_path: Path | str, host_name: str, hosts: Hosts
) -> TargetInfo:
    """Query where and as whom a host is deployed.

    Raises:
        NixError: If evaluation fails or does not return an attribute set
    """
    script = target_info_script(flake_path, host_name, hosts)
    data = _decode(await run_script(script), script)

    if not isinstance(data, dict):
        raise NixError("nix returned unexpected target info", script, json.dumps(data))
    return TargetInfo.from_json(data)
