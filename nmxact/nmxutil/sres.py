"""A resource held by one owner at a time, with a FIFO of waiters."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any


@dataclass
class _Waiter:
    token: Any
    future: Future = field(default_factory=Future)


def _deliver(fut: Future, err: BaseException | None) -> None:
    if err is None:
        fut.set_result(None)
    else:
        fut.set_exception(err)


class SingleResource:
    """Grants exclusive ownership in request order."""

    def __init__(self) -> None:
        self._acquired = False
        self._wait_queue: list[_Waiter] = []
        self._lock = threading.Lock()

    def acquire(self, token: Any) -> Future:
        """Request the resource.

        The returned future completes when the resource is granted, or raises
        the error passed to ``stop_waiting`` or ``abort``.  It is already done
        if the resource was free.
        """
        with self._lock:
            if not self._acquired:
                self._acquired = True
                fut: Future = Future()
                fut.set_result(None)
                return fut

            waiter = _Waiter(token)
            self._wait_queue.append(waiter)
            return waiter.future

    def release(self) -> bool:
        """Pass the resource to the next waiter.

        Returns True if a waiter took it, False if it is now free.
        """
        with self._lock:
            if not self._acquired:
                raise RuntimeError("SingleResource release without acquire")
            if not self._wait_queue:
                self._acquired = False
                return False
            waiter = self._wait_queue.pop(0)

        waiter.future.set_result(None)
        return True

    def stop_waiting(self, token: Any, err: BaseException | None) -> None:
        """Remove the waiter with ``token`` and hand it ``err``."""
        with self._lock:
            for i, w in enumerate(self._wait_queue):
                if w.token == token:
                    waiter = self._wait_queue.pop(i)
                    break
            else:
                return

        _deliver(waiter.future, err)

    def abort(self, err: BaseException | None) -> None:
        """Hand ``err`` to every waiter and empty the queue."""
        with self._lock:
            waiters = self._wait_queue
            self._wait_queue = []
        for w in waiters:
            _deliver(w.future, err)

    def acquired(self) -> bool:
        with self._lock:
            return self._acquired