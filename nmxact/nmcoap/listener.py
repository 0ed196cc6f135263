"""Criteria matching incoming CoAP messages and the listeners using them."""

from __future__ import annotations

import functools
import threading
import time
from dataclasses import dataclass
from typing import Optional

from nmxact.nmcoap.message import CoapMessage
from nmxact.nmxutil.bcast import BroadcastChannel, ChannelClosed


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


@dataclass(frozen=True)
class MsgCriteria:
    token: Optional[bytes] = None
    path: str = ""

    def __str__(self) -> str:
        token = "nil" if self.token is None else self.token.hex()
        path = "nil" if self.path == "" else self.path
        return f"token={token} path={path}"


def compare_msg_criteria(mc1: MsgCriteria, mc2: MsgCriteria) -> int:
    """Order by path, then token; a missing token sorts first."""
    diff = _cmp(mc1.path, mc2.path)
    if diff:
        return diff

    if mc1.token is None and mc2.token is not None:
        return -1
    if mc1.token is not None and mc2.token is None:
        return 1
    if mc1.token is not None:
        return _cmp(bytes(mc1.token), bytes(mc2.token))
    return 0


def match_msg_criteria(listenc: MsgCriteria, msgc: MsgCriteria) -> bool:
    """Return True if a listener with ``listenc`` accepts a message."""
    if listenc.path != "" and listenc.path != msgc.path:
        return False
    if listenc.token is not None and bytes(listenc.token) != bytes(msgc.token or b""):
        return False
    return True


def criteria_from_msg(msg: CoapMessage) -> MsgCriteria:
    return MsgCriteria(token=bytes(msg.token), path=msg.path_string())


class Listener:
    """Receives messages, errors or a timeout for one set of criteria."""

    def __init__(self, criteria: MsgCriteria) -> None:
        self.criteria = criteria
        self.rsp_chan = BroadcastChannel(1)
        self.err_chan = BroadcastChannel(1)
        self._tmo_chan = BroadcastChannel(1)
        self._timer: Optional[threading.Timer] = None

    def after_timeout(self, tmo: float) -> BroadcastChannel:
        """Arrange for the current time to arrive on the returned channel."""

        def fire() -> None:
            try:
                self._tmo_chan.put(time.time())
            except ChannelClosed:
                pass

        self._timer = threading.Timer(tmo, fire)
        self._timer.daemon = True
        self._timer.start()
        return self._tmo_chan

    def close(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self.rsp_chan.close()
        self.err_chan.close()
        self._tmo_chan.close()


def sort_listeners(listeners: list[Listener]) -> None:
    """Sort in place so that the most specific criteria come first."""
    listeners.sort(
        key=functools.cmp_to_key(
            lambda a, b: compare_msg_criteria(a.criteria, b.criteria)
        ),
        reverse=True,
    )