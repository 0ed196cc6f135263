"""Routes incoming NMP responses to listeners keyed by sequence number."""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from nmxact.nmp.decode import decode_rsp_body
from nmxact.nmp.frag import Reassembler
from nmxact.nmp.header import NMP_HDR_SIZE, NmpOp, NmpRsp, decode_nmp_hdr
from nmxact.nmxutil.bcast import BroadcastChannel, ChannelClosed
from nmxact.nmxutil.util import log_add_nmp_listener, log_remove_nmp_listener

log = logging.getLogger("nmxact.nmp")


class Listener:
    """Receives the response, error or timeout for one request."""

    def __init__(self) -> None:
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


def decode_rsp(pkt: bytes) -> Optional[NmpRsp]:
    """Decode a full packet; return None if it is not a response."""
    hdr = decode_nmp_hdr(pkt)

    # Devices may echo requests back over serial; ignore them.
    if hdr.op not in (NmpOp.READ_RSP, NmpOp.WRITE_RSP):
        return None

    return decode_rsp_body(hdr, pkt[NMP_HDR_SIZE:])


class Dispatcher:
    """Owns its listeners; only the dispatcher writes to them."""

    def __init__(self, log_depth: int = 0) -> None:
        self._listeners: dict[int, Listener] = {}
        self._reassembler = Reassembler()
        self._log_depth = log_depth + 2
        self._lock = threading.Lock()

    def add_listener(self, seq: int) -> Listener:
        log_add_nmp_listener(seq)
        with self._lock:
            if seq in self._listeners:
                raise ValueError(f"Duplicate NMP listener; seq={seq}")
            nl = Listener()
            self._listeners[seq] = nl
            return nl

    def remove_listener(self, seq: int) -> Optional[Listener]:
        log_remove_nmp_listener(seq)
        with self._lock:
            nl = self._listeners.pop(seq, None)
            if nl is not None:
                nl.close()
            return nl

    def dispatch_rsp(self, rsp: NmpRsp) -> bool:
        """Hand ``rsp`` to its listener; return True if there was one."""
        with self._lock:
            log.debug("Received nmp rsp: %r", rsp)
            nl = self._listeners.get(rsp.hdr.seq)
            if nl is None:
                log.debug("No listener for incoming NMP message")
                return False
            nl.rsp_chan.put(rsp)
            return True

    def dispatch(self, data: bytes) -> bool:
        """Feed a fragment; return True if it completed a dispatched response."""
        pkt = self._reassembler.rx_frag(data)
        if pkt is None:
            return False

        try:
            rsp = decode_rsp(pkt)
        except ValueError as exc:
            log.debug("Failure decoding NMP rsp: %s\npacket=\n%s", exc, data.hex())
            return False

        if rsp is None:
            return False

        return self.dispatch_rsp(rsp)

    def error_one(self, seq: int, err: BaseException) -> None:
        """Send ``err`` to the listener for ``seq``; raise ValueError if none."""
        with self._lock:
            nl = self._listeners.get(seq)
            if nl is None:
                raise ValueError(f"No NMP listener for seq {seq}")
            nl.err_chan.put(err)

    def error_all(self, err: BaseException) -> None:
        with self._lock:
            for nl in self._listeners.values():
                nl.err_chan.put(err)