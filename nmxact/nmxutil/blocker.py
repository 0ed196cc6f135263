"""Blocks any number of waiters until a value is released to them."""

from __future__ import annotations

import threading
import time
from typing import Any

_POLL_INTERVAL = 0.01


class BlockerAbortedError(Exception):
    """The wait was abandoned because the stop event was set."""


class Blocker:
    """Waiters block between ``start()`` and ``unblock()``.

    While not started, waiters return the last unblock value immediately.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._event: threading.Event | None = None
        self._val: Any = None

    def _unblock_no_lock(self, val: Any) -> None:
        if self._event is not None:
            self._val = val
            self._event.set()
            self._event = None

    def _start_no_lock(self) -> None:
        if self._event is None:
            self._event = threading.Event()

    def started(self) -> bool:
        with self._lock:
            return self._event is not None

    def wait(
        self,
        timeout: float | None,
        stop_event: threading.Event | None = None,
    ) -> Any:
        """Return the unblock value.

        Raises TimeoutError after ``timeout`` seconds and BlockerAbortedError
        if ``stop_event`` becomes set first.
        """
        with self._lock:
            event = self._event
        if event is None:
            return self._val

        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            remaining = None if deadline is None else deadline - time.monotonic()
            step = remaining
            if stop_event is not None:
                step = _POLL_INTERVAL if step is None else min(step, _POLL_INTERVAL)
            if event.wait(None if step is None else max(step, 0)):
                return self._val
            if stop_event is not None and stop_event.is_set():
                raise BlockerAbortedError("aborted")
            if deadline is not None and time.monotonic() >= deadline:
                raise TimeoutError(f"timeout after {timeout}s")

    def start(self) -> None:
        with self._lock:
            self._start_no_lock()

    def unblock(self, val: Any) -> None:
        with self._lock:
            self._unblock_no_lock(val)

    def unblock_and_restart(self, val: Any) -> None:
        with self._lock:
            self._unblock_no_lock(val)
            self._start_no_lock()