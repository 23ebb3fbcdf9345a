"""Append-only output buffer with write notification."""

import threading
from collections.abc import Callable


class OutputBuffer:
    """Thread-safe byte accumulator shared by a runner and its readers.

    Writes only ever append. After each non-empty write the ``notify`` hook is
    called while the write lock is still held, so the hook must be cheap and
    must not block.

    A single exclusive lock guards both writers and readers. Readers only
    copy the bytes out, so a shared read lock would buy nothing here.
    """

    def __init__(self, notify: Callable[[], None]) -> None:
        """Initialize an empty buffer.

        Args:
            notify: Called after data is written to this buffer.
        """
        self._lock = threading.Lock()
        self._buf = bytearray()
        self._notify = notify

    def write(self, data: bytes) -> int:
        """Append data, returning the number of bytes written."""
        n = len(data)
        if n > 0:
            with self._lock:
                self._buf += data
                self._notify()
        return n

    def getvalue(self) -> bytes:
        """Return a snapshot of everything written so far."""
        with self._lock:
            return bytes(self._buf)

    def __len__(self) -> int:
        with self._lock:
            return len(self._buf)

    def __str__(self) -> str:
        return self.getvalue().decode("utf-8", errors="replace")
