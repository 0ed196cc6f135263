"""Listeners for BLE host messages and the map that indexes them."""

from __future__ import annotations

import queue
import threading
import time
from dataclasses import dataclass
from typing import Any, Optional

# Sequence number carried by keys that match on type and connection handle.
BLE_SEQ_NONE = -1

_MSG_DEPTH = 16


@dataclass(frozen=True)
class ListenerKey:
    """Matches by sequence number, or by message type and connection handle."""

    seq: int = BLE_SEQ_NONE
    type: int = -1
    conn_handle: int = -1


def seq_key(seq: int) -> ListenerKey:
    """Key that matches messages by sequence number."""
    return ListenerKey(seq=seq, type=-1, conn_handle=-1)


def tch_key(typ: int, conn_handle: int) -> ListenerKey:
    """Key that matches messages by type and connection handle."""
    return ListenerKey(seq=BLE_SEQ_NONE, type=typ, conn_handle=conn_handle)


def _drain(q: queue.Queue) -> None:
    while True:
        try:
            q.get_nowait()
        except queue.Empty:
            return


class Listener:
    """Receives messages, an error or a timeout for one key."""

    def __init__(self) -> None:
        self.msg_queue: queue.Queue = queue.Queue(_MSG_DEPTH)
        self.err_queue: queue.Queue = queue.Queue(1)
        self.tmo_queue: queue.Queue = queue.Queue(1)
        self.acked = False
        self.closed = False
        self._timer: Optional[threading.Timer] = None

    def after_timeout(self, tmo: float) -> queue.Queue:
        """Put the current time on the returned queue after ``tmo`` seconds.

        Nothing arrives if the listener is acked or closed before then.
        """

        def fire() -> None:
            if not self.acked:
                try:
                    self.tmo_queue.put_nowait(time.time())
                except queue.Full:
                    pass

        self._timer = threading.Timer(tmo, fire)
        self._timer.daemon = True
        self._timer.start()
        return self.tmo_queue

    def close(self) -> None:
        """Stop the timer and discard anything still queued."""
        if self._timer is not None:
            self._timer.cancel()
        # If the timer fires anyway, nothing will be delivered.
        self.acked = True
        self.closed = True
        _drain(self.msg_queue)
        _drain(self.err_queue)
        _drain(self.tmo_queue)


class ListenerMap:
    """Two-way index between keys and listeners; not thread safe."""

    def __init__(self) -> None:
        self._k2l: dict[ListenerKey, Listener] = {}
        self._l2k: dict[Listener, ListenerKey] = {}

    def __len__(self) -> int:
        return len(self._k2l)

    def find_listener(
        self, seq: int, typ: int, conn_handle: int
    ) -> tuple[ListenerKey, Optional[Listener]]:
        """Look up by sequence number first, then by type and handle."""
        key = seq_key(seq)
        listener = self._k2l.get(key)
        if listener is not None:
            return key, listener

        key = tch_key(typ, conn_handle)
        listener = self._k2l.get(key)
        if listener is not None:
            return key, listener

        key = tch_key(typ, -1)
        return key, self._k2l.get(key)

    def add_listener(self, key: ListenerKey, listener: Listener) -> None:
        """Register ``listener`` under ``key``; raise ValueError on duplicates."""
        if key in self._k2l or listener in self._l2k:
            raise ValueError(f"Duplicate BLE listener: {key!r}")
        self._k2l[key] = listener
        self._l2k[listener] = key

    def remove_listener(self, listener: Listener) -> Optional[ListenerKey]:
        """Unregister ``listener``; return its key, or None if unknown."""
        key = self._l2k.pop(listener, None)
        if key is None:
            return None
        self._k2l.pop(key, None)
        return key

    def remove_key(self, key: ListenerKey) -> Optional[Listener]:
        """Unregister the listener under ``key``; return it, or None."""
        listener = self._k2l.pop(key, None)
        if listener is None:
            return None
        self._l2k.pop(listener, None)
        return listener

    def extract_all(self) -> list[Listener]:
        """Remove and return every listener."""
        listeners = list(self._l2k)
        self._k2l = {}
        self._l2k = {}
        return listeners

    def __contains__(self, item: Any) -> bool:
        return item in self._k2l or item in self._l2k