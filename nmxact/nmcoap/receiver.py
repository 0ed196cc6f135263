"""Turns received bytes into CoAP messages for datagram and stream links."""

from __future__ import annotations

import logging
from typing import Optional

from nmxact.nmcoap.message import CoapMessage, parse_dgram_message, pull_tcp

log = logging.getLogger("nmxact.nmcoap")


class Reassembler:
    """Accumulates stream fragments until a whole message is present."""

    def __init__(self) -> None:
        self._cur = b""

    def rx_frag(self, frag: bytes) -> Optional[CoapMessage]:
        """Add a fragment; return a message once one is complete.

        Raises ValueError if the accumulated data is not valid CoAP.
        """
        self._cur += bytes(frag)
        try:
            msg, self._cur = pull_tcp(self._cur)
        except ValueError as exc:
            log.debug("received invalid CoAP-TCP packet: %s", exc)
            self._cur = b""
            raise

        if msg is None:
            return None

        self._cur = b""
        return msg


class Receiver:
    def __init__(self, is_tcp: bool) -> None:
        self._reassembler = Reassembler() if is_tcp else None

    def rx(self, data: bytes) -> Optional[CoapMessage]:
        """Return the message completed by ``data``, if any."""
        if self._reassembler is not None:
            return self._reassembler.rx_frag(data)

        try:
            return parse_dgram_message(data)
        except ValueError as exc:
            log.debug("CoAP parse failure: %s", exc)
            return None