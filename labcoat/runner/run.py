"""Runner for local and remote commands.

A runner launches one external process, collects its combined stdout and
stderr into an :class:`OutputBuffer`, and tracks its lifecycle.

Output delivery is pull based: the caller awaits :meth:`Runner.wait_for_output`
to receive one update event, and must call it again to receive the next. Bursts
of writes between two calls collapse into a single wakeup, since the caller
always re-reads the whole buffer.

Locking Strategy:
- The buffer has its own lock; snapshot reads never wait on process execution
- ``_lock`` protects the small lifecycle fields (state, error, closed)
- The buffer lock may be taken while holding ``_lock``, never the reverse
"""

import asyncio
import logging
import os
import subprocess
import threading
from collections.abc import Callable
from contextlib import suppress
from pathlib import Path
from typing import Any, BinaryIO

from labcoat.runner.buffer import OutputBuffer
from labcoat.runner.state import RunnerState, state_to_string
from labcoat.utils.shell import ssh_argv, ssh_destination

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096
INTERRUPT_MARKER = "\n[Interrupt]\n"

UpdateFn = Callable[["Runner"], Any]


class RunnerCancelledError(Exception):
    """Runner was cancelled before its process could run to completion."""


class Runner:
    """One external process plus its captured output and lifecycle state.

    Use :func:`new_local`, :func:`new_remote` or :func:`new_remote_script` to
    construct runners. Construction never starts the process.
    """

    def __init__(
        self,
        on_update: UpdateFn,
        argv: list[str],
        destination: str,
        prog: str,
        *args: str,
        cwd: str | Path | None = None,
        stdin: bytes | None = None,
    ) -> None:
        """Initialize a runner.

        Args:
            on_update: Builds the application event delivered for new output
            argv: Argument vector actually executed
            destination: ``local`` or ``ssh://[user@]host``, for display
            prog: Program shown to the operator
            *args: Arguments shown to the operator
            cwd: Working directory for the process
            stdin: Data fed to the process on standard input
        """
        self.prog = prog
        self.args = tuple(args)
        self.suffix_style: Callable[[str], str] = lambda s: s

        self._argv = list(argv)
        self._destination = destination
        self._cwd = cwd
        self._stdin = stdin
        self._env: dict[str, str] | None = None

        self._lock = threading.Lock()
        self._state = RunnerState.NOT_STARTED
        self._error: BaseException | None = None
        self._closed = False  # No more writes accepted when true.

        self._on_update = on_update
        self._notify: asyncio.Queue[None] = asyncio.Queue(maxsize=1)
        self.output = OutputBuffer(self._signal)

        self._cancel: Callable[[], None] | None = None
        self._cancelled = False
        self._proc: asyncio.subprocess.Process | None = None
        self._task: asyncio.Task[Any] | None = None

    def _signal(self) -> None:
        """Wake a pending waiter, dropping the wakeup if one is already queued."""
        with suppress(asyncio.QueueFull):
            self._notify.put_nowait(None)

    @property
    def destination(self) -> str:
        """The SSH URL or ``local``."""
        return self._destination

    @property
    def state(self) -> RunnerState:
        with self._lock:
            return self._state

    @property
    def error(self) -> BaseException | None:
        """Terminal error of the process, None on success or while running."""
        with self._lock:
            return self._error

    @property
    def running(self) -> bool:
        """True if in not-started or running state."""
        with self._lock:
            return not self._state.is_terminal

    @property
    def complete(self) -> bool:
        """True if in done or failed state."""
        with self._lock:
            return self._state.is_terminal

    @property
    def successful(self) -> bool:
        """True if done, not failed."""
        with self._lock:
            return self._state == RunnerState.DONE

    def state_string(self) -> str:
        """Return the current state as a human readable string."""
        return state_to_string(self.state)

    def pass_env(self, name: str) -> None:
        """Copy a parent environment variable for use by the child process."""
        self.set_env(name, os.environ.get(name, ""))

    def set_env(self, name: str, value: str) -> None:
        """Add an environment variable definition for the child process.

        The first call to this stops the parent environment from being
        passed to the child process; use :meth:`pass_env` for anything the
        child still needs, ``PATH`` in particular.
        """
        with self._lock:
            if self._env is None:
                self._env = {}
            self._env[name] = value

    def start(self) -> "asyncio.Task[Any]":
        """Launch the process on a background task.

        Must be called from a running event loop, at most once; check
        :attr:`running` before starting a fresh action.

        Returns:
            Task resolving to the final update event once the process exits.
        """
        with self._lock:
            self._state = RunnerState.RUNNING

        self._task = asyncio.create_task(self._run(), name=f"runner:{self}")
        return self._task

    async def _run(self) -> Any:
        logger.info("Running %s (dest=%s)", self, self._destination)

        error: BaseException | None = None
        try:
            await self._execute()
        except asyncio.CancelledError:
            self._kill()
            self._finish(RunnerCancelledError(f"{self} task was cancelled"))
            raise
        except Exception as e:
            # Spawn errors of any kind end the runner as FAILED.
            error = e

        self._finish(error)
        return self._on_update(self)

    async def _execute(self) -> None:
        if self._cancelled:
            raise RunnerCancelledError(f"{self} cancelled before launch")

        proc = await asyncio.create_subprocess_exec(
            *self._argv,
            cwd=self._cwd,
            env=self._env,
            stdin=subprocess.PIPE if self._stdin is not None else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
        self._proc = proc
        if self._cancelled:
            self._kill()

        assert proc.stdout is not None
        pumps = [self._pump(proc.stdout)]
        if self._stdin is not None:
            assert proc.stdin is not None
            pumps.append(self._feed(proc.stdin, self._stdin))
        await asyncio.gather(*pumps)

        returncode = await proc.wait()
        if returncode != 0:
            raise subprocess.CalledProcessError(returncode, self._argv)

    async def _pump(self, stream: asyncio.StreamReader) -> None:
        while chunk := await stream.read(READ_CHUNK_SIZE):
            self.output.write(chunk)

    async def _feed(self, stream: asyncio.StreamWriter, data: bytes) -> None:
        try:
            stream.write(data)
            await stream.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            logger.warning("%s stopped reading its input: %s", self, e)
        finally:
            stream.close()

    def _finish(self, error: BaseException | None) -> None:
        with self._lock:
            self._error = error
            self._state = RunnerState.DONE if error is None else RunnerState.FAILED
            state = self._state

        if error is None:
            logger.info("%s completed (dest=%s)", self, self._destination)
        else:
            logger.warning("%s failed (dest=%s): %s", self, self._destination, error)

        # Wake any waiter so the host application learns the terminal state.
        self._signal()

        logger.debug("%s is now %s", self, state_to_string(state))

    async def wait_for_output(self) -> Any:
        """Wait for the next output update.

        Once the runner is complete, the first call appends the status suffix
        (``\\n[Done]`` or ``\\n[Failed]``) and every call returns None without
        waiting. This never re-arms itself; callers invoke it again after each
        event they handle.

        Returns:
            The ``on_update`` event, or None when there is nothing left to wait for.
        """
        with self._lock:
            if self._state.is_terminal:
                if not self._closed:
                    # Render status text and stop waiting for output.
                    self._closed = True
                    suffix = self.suffix_style("\n[" + state_to_string(self._state) + "]")
                    self.output.write(suffix.encode())
                return None

        await self._notify.get()
        return self._on_update(self)

    def _kill(self) -> None:
        self._cancelled = True
        proc = self._proc
        if proc is not None and proc.returncode is None:
            with suppress(ProcessLookupError):
                proc.kill()

    def cancel(self) -> None:
        """Cancel the running process.

        The state is not changed here; the runner becomes FAILED once the
        process has actually exited.
        """
        if self._cancel is None:
            return

        logger.info("Cancelling %s (dest=%s)", self, self._destination)
        self._cancel()

        with self._lock:
            self.output.write(INTERRUPT_MARKER.encode())

    def view(self) -> str:
        """Return the buffered output as text."""
        return str(self.output)

    def copy_to(self, sink: BinaryIO) -> int:
        """Write a snapshot of the buffered output to ``sink``.

        Returns:
            Number of bytes written.
        """
        data = self.output.getvalue()
        sink.write(data)
        return len(data)

    def __str__(self) -> str:
        """Return the requested command line."""
        return " ".join([self.prog, *self.args])

    def __repr__(self) -> str:
        return (
            f"<Runner {str(self)!r} dest={self._destination} "
            f"state={state_to_string(self.state)}>"
        )


def new_local(
    on_update: UpdateFn, cwd: str | Path | None, prog: str, *args: str
) -> Runner:
    """Construct a runner for a local command."""
    r = Runner(on_update, [prog, *args], "local", prog, *args, cwd=cwd)
    r._cancel = r._kill

    logger.debug("Local runner created (prog=%s, args=%s)", prog, args)
    return r


def new_remote(
    on_update: UpdateFn, host: str, user: str, prog: str, *args: str
) -> Runner:
    """Construct a runner for a command executed over ssh."""
    dest = ssh_destination(host, user)
    r = Runner(on_update, ssh_argv(host, user, prog, *args), dest, prog, *args)
    r._cancel = r._kill

    logger.debug("Remote runner created (prog=%s, args=%s, dest=%s)", prog, args, dest)
    return r


def new_remote_script(
    on_update: UpdateFn, host: str, user: str, name: str, script: str
) -> Runner:
    """Construct a runner feeding a script to ``bash -s`` over ssh.

    Args:
        on_update: Builds the application event delivered for new output
        host: Remote host
        user: Remote user, or empty for ssh's default
        name: Label shown as the runner's program
        script: Script text, e.g. from :func:`labcoat.runner.script.new_script`
    """
    dest = ssh_destination(host, user)
    r = Runner(
        on_update,
        ssh_argv(host, user, "bash", "-s"),
        dest,
        name,
        stdin=script.encode(),
    )
    r._cancel = r._kill

    logger.debug("Remote script runner created (script=%s, dest=%s)", name, dest)
    return r
