"""Worker pool bounding concurrent use of an expensive external tool.

A pool holds a fixed number of interchangeable workers. A caller must get a
worker before invoking the tool and return it afterwards, so at most ``size``
invocations run at once.

Checkout Tracking:
- Available workers wait in a FIFO queue; ``get`` hands out the first one
- ``_checked_out`` records worker ids currently held by callers
- Returning a worker that is not checked out is ignored, so a double
  release can never raise the pool above its configured size
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)


class WorkerTimeoutError(TimeoutError):
    """No worker became available before the timeout elapsed."""

    def __init__(self, pool_name: str, timeout: float):
        """Initialize timeout error.

        Args:
            pool_name: Name of the exhausted pool
            timeout: Seconds waited for a worker
        """
        self.pool_name = pool_name
        self.timeout = timeout
        super().__init__(f"No {pool_name} worker available after {timeout:g}s")


class Worker:
    """Permission to do one unit of work."""

    def __init__(self, pool: "WorkerPool", worker_id: str) -> None:
        self.id = worker_id
        self._pool = pool

    def done(self) -> None:
        """Return this worker to the pool."""
        self._pool.release(self)

    def __str__(self) -> str:
        """Return the name & index of this worker."""
        return self.id

    def __repr__(self) -> str:
        return f"<Worker {self.id}>"


class WorkerPool:
    """Fixed-size pool of interchangeable workers."""

    def __init__(self, name: str, size: int) -> None:
        """Initialize pool with ``size`` workers named ``<name>:<i>``.

        Args:
            name: Label used in worker ids and log messages
            size: Number of workers (must be > 0)

        Raises:
            ValueError: If size is not positive
        """
        if size <= 0:
            raise ValueError(f"size must be > 0, got {size}")

        self.name = name
        self.size = size
        self._avail: asyncio.Queue[Worker] = asyncio.Queue(maxsize=size)
        self._checked_out: set[str] = set()

        for i in range(size):
            self._avail.put_nowait(Worker(self, f"{name}:{i + 1}"))

        logger.debug("WorkerPool %s initialized (size=%d)", name, size)

    async def get(self, timeout: float | None = None) -> Worker:
        """Wait for an available worker.

        Args:
            timeout: Seconds to wait, or None to wait indefinitely

        Returns:
            A checked-out worker; hand it back with ``done()``

        Raises:
            WorkerTimeoutError: If no worker became available in time
        """
        try:
            worker = await asyncio.wait_for(self._avail.get(), timeout)
        except TimeoutError:
            logger.warning(
                "Timed out waiting for %s worker (timeout=%ss, in_use=%d/%d)",
                self.name,
                timeout,
                self.in_use,
                self.size,
            )
            raise WorkerTimeoutError(self.name, timeout or 0) from None

        self._checked_out.add(worker.id)
        logger.debug("Worker %s checked out (in_use=%d/%d)", worker, self.in_use, self.size)
        return worker

    def release(self, worker: Worker) -> None:
        """Return a worker to the pool.

        Releasing a worker that is not checked out logs a warning and does
        nothing.
        """
        if worker.id not in self._checked_out:
            logger.warning("Ignoring release of %s, not checked out (bug)", worker)
            return

        self._checked_out.discard(worker.id)
        self._avail.put_nowait(worker)
        logger.debug("Worker %s released (in_use=%d/%d)", worker, self.in_use, self.size)

    @asynccontextmanager
    async def worker(self, timeout: float | None = None) -> AsyncIterator[Worker]:
        """Hold a worker for the duration of a block.

        Example:
            async with pool.worker(timeout=30) as w:
                await run_tool(w)
        """
        w = await self.get(timeout)
        try:
            yield w
        finally:
            w.done()

    @property
    def in_use(self) -> int:
        """Number of workers currently checked out."""
        return len(self._checked_out)

    @property
    def available(self) -> int:
        """Number of workers waiting in the pool."""
        return self._avail.qsize()
