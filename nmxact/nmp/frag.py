"""Reassembly of NMP packets from fragments."""

from __future__ import annotations

import logging
from typing import Optional

from nmxact.nmp.header import NMP_HDR_SIZE, decode_nmp_hdr

log = logging.getLogger("nmxact.nmp")


class Reassembler:
    """Accumulates fragments until the header's length is satisfied."""

    def __init__(self) -> None:
        self._cur = bytearray()

    def rx_frag(self, frag: bytes) -> Optional[bytes]:
        """Add a fragment; return the whole packet once it is complete."""
        self._cur += frag

        try:
            hdr = decode_nmp_hdr(self._cur)
        except ValueError:
            # Incomplete header.
            return None

        actual_len = len(self._cur) - NMP_HDR_SIZE
        if actual_len > hdr.len:
            log.debug(
                "received invalid nmp packet; hdr.len=%d actualLen=%d",
                hdr.len,
                actual_len,
            )
            self._cur = bytearray()
            return None

        if actual_len < hdr.len:
            return None

        pkt = bytes(self._cur)
        self._cur = bytearray()
        return pkt