"""Routes incoming CoAP messages to listeners by token and path."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from nmxact.nmcoap.listener import (
    Listener,
    MsgCriteria,
    compare_msg_criteria,
    criteria_from_msg,
    match_msg_criteria,
    sort_listeners,
)
from nmxact.nmcoap.message import CoapMessage
from nmxact.nmcoap.receiver import Receiver
from nmxact.nmxutil.util import log_add_coap_listener, log_remove_coap_listener

log = logging.getLogger("nmxact.nmcoap")


class Dispatcher:
    """Owns its listeners; only the dispatcher writes to them."""

    def __init__(self, is_tcp: bool, log_depth: int = 0) -> None:
        self._listeners: list[Listener] = []
        self._rxer = Receiver(is_tcp)
        self._log_depth = log_depth + 2
        self._lock = threading.Lock()

    def _find_listener_idx(self, mc: MsgCriteria) -> int:
        for i, lner in enumerate(self._listeners):
            if compare_msg_criteria(lner.criteria, mc) == 0:
                return i
        return -1

    def _match_listener(self, mc: MsgCriteria) -> Optional[Listener]:
        for lner in self._listeners:
            if match_msg_criteria(lner.criteria, mc):
                return lner
        return None

    def add_listener(self, mc: MsgCriteria) -> Listener:
        """Register a listener; raise ValueError if the criteria are taken."""
        log_add_coap_listener(str(mc))
        with self._lock:
            if self._find_listener_idx(mc) != -1:
                raise ValueError(f"duplicate CoAP listener: {mc}")
            lner = Listener(mc)
            self._listeners.append(lner)
            sort_listeners(self._listeners)
            return lner

    def remove_listener(self, mc: MsgCriteria) -> Optional[Listener]:
        with self._lock:
            idx = self._find_listener_idx(mc)
            if idx == -1:
                return None
            lner = self._listeners.pop(idx)
            log_remove_coap_listener(str(mc))
            lner.close()
            return lner

    def dispatch(self, data: bytes) -> bool:
        """Feed received data; return True if a message reached a listener."""
        msg = self._rxer.rx(data)
        if msg is None:
            return False

        with self._lock:
            mc = criteria_from_msg(msg)
            lner = self._match_listener(mc)
            if lner is None:
                log.debug("no listener for incoming CoAP message: %s", mc)
                return False
            lner.rsp_chan.put(msg)
            return True

    def process_coap_req(self, data: bytes) -> Optional[CoapMessage]:
        """Return the request completed by ``data``, if any."""
        return self._rxer.rx(data)

    def error_one(self, mc: MsgCriteria, err: BaseException) -> None:
        """Send ``err`` to the matching listener; raise ValueError if none."""
        with self._lock:
            lner = self._match_listener(mc)
            if lner is None:
                raise ValueError(f"no CoAP listener: {mc}")
            lner.err_chan.put(err)

    def error_all(self, err: BaseException) -> None:
        with self._lock:
            for lner in self._listeners:
                lner.err_chan.put(err)