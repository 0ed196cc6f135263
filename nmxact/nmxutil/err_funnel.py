"""Aggregates errors that occur close in time, reporting the most severe."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Callable

ErrLessFn = Callable[[BaseException, BaseException], bool]


class ErrFunnel:
    """Collects errors for ``accum_delay`` seconds, then delivers the worst.

    ``less_cb(a, b)`` returns True when ``b`` is more severe than ``a``.
    Each future returned by ``wait()`` receives the chosen error as its result.
    """

    def __init__(self, less_cb: ErrLessFn, accum_delay: float) -> None:
        self.less_cb = less_cb
        self.accum_delay = accum_delay
        self._lock = threading.Lock()
        self._cur_err: BaseException | None = None
        self._timer: threading.Timer | None = None
        self._generation = 0
        self._waiters: list[Future] = []

    def _arm_timer(self) -> None:
        self._generation += 1
        self._timer = threading.Timer(
            self.accum_delay, self._timer_exp, args=(self._generation,)
        )
        self._timer.daemon = True
        self._timer.start()

    def insert(self, err: BaseException) -> None:
        if err is None:
            raise ValueError("ErrFunnel nil insert")

        with self._lock:
            if self._cur_err is None:
                self._cur_err = err
                self._arm_timer()
            elif self.less_cb(self._cur_err, err):
                if self._timer is not None:
                    self._timer.cancel()
                self._cur_err = err
                self._arm_timer()

    def _timer_exp(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._cur_err is None:
                return
            err = self._cur_err
            self._cur_err = None
            self._timer = None
            waiters = self._waiters
            self._waiters = []

        for w in waiters:
            w.set_result(err)

    def wait(self) -> Future:
        """Return a future resolved with the next reported error."""
        fut: Future = Future()
        with self._lock:
            self._waiters.append(fut)
        return fut