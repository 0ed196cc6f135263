"""Tracks the listeners one client has registered with a BLE transport."""

from __future__ import annotations

import threading
from typing import Any, Optional

from nmxact.nmble.listen import Listener, ListenerKey, ListenerMap
from nmxact.nmxutil.util import log_add_listener, log_remove_listener


class Receiver:
    """Records listeners so their lifetimes can be followed and removed.

    The receiver never writes to its listeners.  ``transport`` must provide
    ``add_listener(key)``, ``remove_key(key)`` and ``remove_listener(listener)``.
    """

    def __init__(self, id_: int, transport: Any, log_depth: int = 0) -> None:
        self.id = id_
        self._bx = transport
        self._log_depth = log_depth + 3
        self._lm = ListenerMap()
        self._lock = threading.Lock()
        self._outstanding = 0
        self._idle = threading.Condition(threading.Lock())

    def _inc(self) -> None:
        with self._idle:
            self._outstanding += 1

    def _done(self) -> None:
        with self._idle:
            self._outstanding -= 1
            if self._outstanding <= 0:
                self._idle.notify_all()

    def add_listener(self, name: str, key: ListenerKey) -> Listener:
        log_add_listener(key, self.id, name)
        with self._lock:
            bl = self._bx.add_listener(key)
            self._lm.add_listener(key, bl)
            self._inc()
            return bl

    def remove_key(self, name: str, key: ListenerKey) -> Optional[Listener]:
        with self._lock:
            self._bx.remove_key(key)
            bl = self._lm.remove_key(key)
            if bl is None:
                return None
            log_remove_listener(key, self.id, name)
            self._done()
            return bl

    def remove_listener(self, name: str, listener: Listener) -> Optional[ListenerKey]:
        with self._lock:
            self._bx.remove_listener(listener)
            key = self._lm.remove_listener(listener)
            if key is None:
                return None
            log_remove_listener(key, self.id, name)
            self._done()
            return key

    def remove_all(self, name: str) -> None:
        with self._lock:
            listeners = self._lm.extract_all()

        for bl in listeners:
            key = self._bx.remove_listener(bl)
            if key is not None:
                log_remove_listener(key, self.id, name)
            self._done()

    def wait_until_no_listeners(self, timeout: Optional[float] = None) -> bool:
        """Block until every listener is removed; False if ``timeout`` expires."""
        with self._idle:
            return self._idle.wait_for(lambda: self._outstanding <= 0, timeout)