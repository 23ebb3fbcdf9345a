"""Entry point for labcoat: the MCP server plus a few terminal commands."""

import argparse
import asyncio
import logging
import shlex
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import TextIO

from labcoat.dependencies import Dependencies
from labcoat.runner import format_output, new_remote_script, new_script
from labcoat.server import mcp  # This import also configures logging
from labcoat.services import FleetError, get_config
from labcoat.services.fleet import STATUS_SCRIPT_NAME, Fleet
from labcoat.ui import Styles, get_styles

logger = logging.getLogger(__name__)


def run_server() -> None:
    """Run the MCP server with configured transport."""
    config = get_config()

    if config.transport == "stdio":
        logger.info("Starting labcoat server (transport=stdio, flake=%s)", config.flake_path)
        mcp.run(transport="stdio")
    else:
        logger.info(
            "Starting labcoat server (transport=http, host=%s, port=%d, flake=%s)",
            config.http_host,
            config.http_port,
            config.flake_path,
        )
        mcp.run(
            transport="http",
            host=config.http_host,
            port=config.http_port,
        )


def _emit(text: str, printed: int, out: TextIO, final: bool) -> int:
    """Write rendered text past ``printed``; hold back a trailing partial line."""
    end = len(text) if final else text.rfind("\n") + 1
    if end > printed:
        out.write(text[printed:end])
        out.flush()
        return end
    return printed


async def stream_status(fleet: Fleet, name: str, out: TextIO) -> bool:
    """Collect status from one host, writing output as it arrives.

    Returns:
        True if every status command ran and the script exited cleanly
    """
    target = await fleet.fetch_target(name)
    styles: Styles = fleet.styles

    runner = new_remote_script(
        lambda r: r.complete,
        target.deploy_host,
        target.deploy_user,
        STATUS_SCRIPT_NAME,
        new_script(fleet.config.commands.status_cmds),
    )
    runner.suffix_style = styles.subtle
    out.write(styles.subtle(f"{runner} @ {runner.destination}") + "\n")

    task = runner.start()
    printed = 0
    while await runner.wait_for_output() is not None:
        text = format_output(runner.view(), styles.label).replace("\r", "")
        printed = _emit(text, printed, out, final=False)

    text = format_output(runner.view(), styles.label).replace("\r", "")
    _emit(text + "\n", printed, out, final=True)
    await task
    return runner.successful


async def _status(name: str, page: bool = False) -> int:
    deps = Dependencies.create(get_styles(sys.stdout.isatty() and not page))
    deps.fleet.set_hosts([name])
    try:
        if not page:
            ok = await stream_status(deps.fleet, name, sys.stdout)
        else:
            with tempfile.NamedTemporaryFile(
                "w", prefix=f"labcoat-{name}-status-", suffix=".txt", delete=False
            ) as f:
                ok = await stream_status(deps.fleet, name, f)
            open_pager(deps.config.general.pager, Path(f.name))
    finally:
        await deps.cleanup()
    return 0 if ok else 1


def open_pager(pager: str, path: Path) -> int:
    """Show a file in the configured pager, inheriting the terminal."""
    logger.debug("Opening pager (pager=%s, path=%s)", pager, path)
    return subprocess.run([*shlex.split(pager), str(path)]).returncode


async def _resolve(name: str) -> str:
    deps = Dependencies.create()
    try:
        deps.fleet.set_hosts([name])
        target = await deps.fleet.fetch_target(name)
    finally:
        await deps.cleanup()
    return target.ssh_target


def open_ssh(name: str) -> int:
    """Open an interactive ssh session to a host, inheriting the terminal."""
    target = asyncio.run(_resolve(name))
    logger.info("Opening ssh session (host=%s, target=%s)", name, target)
    return subprocess.run(["ssh", target]).returncode


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="labcoat",
        description="Status, deploy and run commands across a NixOS flake's hosts.",
    )
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("serve", help="run the MCP server (default)")

    status = sub.add_parser("status", help="collect status from a host")
    status.add_argument("host")
    status.add_argument(
        "--page", action="store_true", help="show the output in the configured pager"
    )

    ssh = sub.add_parser("ssh", help="open an interactive ssh session to a host")
    ssh.add_argument("host")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the requested command.

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)

    try:
        if args.command == "status":
            return asyncio.run(_status(args.host, args.page))
        if args.command == "ssh":
            return open_ssh(args.host)
    except FleetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130

    run_server()
    return 0


if __name__ == "__main__":
    sys.exit(main())
