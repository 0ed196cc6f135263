"""Fan-out of values to any number of listening channels."""

from __future__ import annotations

import threading
from collections import deque
from typing import Any, Iterator


class ChannelClosed(Exception):
    """Raised when reading from a closed, drained channel or writing to one."""


class BroadcastChannel:
    """A closable FIFO of values.

    ``depth`` bounds the number of pending values; ``put`` blocks while the
    channel is full.  A depth of zero means unbounded.
    """

    def __init__(self, depth: int = 0) -> None:
        self._maxsize = depth
        self._items: deque[Any] = deque()
        self._cond = threading.Condition()
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def put(self, val: Any) -> None:
        with self._cond:
            self._cond.wait_for(
                lambda: self._closed
                or self._maxsize <= 0
                or len(self._items) < self._maxsize
            )
            if self._closed:
                raise ChannelClosed("send on closed channel")
            self._items.append(val)
            self._cond.notify_all()

    def get(self, timeout: float | None = None) -> Any:
        """Return the next value; raise ChannelClosed once closed and empty."""
        with self._cond:
            if not self._cond.wait_for(
                lambda: self._items or self._closed, timeout
            ):
                raise TimeoutError("no value received")
            if self._items:
                val = self._items.popleft()
                self._cond.notify_all()
                return val
            raise ChannelClosed("channel closed")

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[Any]:
        while True:
            try:
                yield self.get()
            except ChannelClosed:
                return


class Broadcaster:
    """Sends every value to all currently registered channels."""

    def __init__(self) -> None:
        self._chans: list[BroadcastChannel] = []
        self._lock = threading.Lock()

    @staticmethod
    def _send_to(chans: list[BroadcastChannel], val: Any) -> None:
        for ch in chans:
            try:
                ch.put(val)
            except ChannelClosed:
                pass

    def _clear_no_lock(self) -> None:
        for ch in self._chans:
            ch.close()
        self._chans = []

    def listen(self, depth: int) -> BroadcastChannel:
        ch = BroadcastChannel(depth)
        with self._lock:
            self._chans.append(ch)
        return ch

    def send(self, val: Any) -> None:
        with self._lock:
            chans = list(self._chans)
        self._send_to(chans, val)

    def stop_listening(self, ch: BroadcastChannel) -> None:
        with self._lock:
            if ch in self._chans:
                self._chans.remove(ch)
                ch.close()

    def clear(self) -> None:
        with self._lock:
            self._clear_no_lock()

    def send_and_clear(self, val: Any) -> None:
        with self._lock:
            self._send_to(list(self._chans), val)
            self._clear_no_lock()