"""Serial transport: base64 framing with a length prefix and CRC-16."""

from __future__ import annotations

import base64
import binascii
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import serial

from nmxact.nmserial.packet import Packet
from nmxact.nmxutil.errors import XportError

log = logging.getLogger("nmxact.nmserial")

FRAME_START = bytes([6, 9])
FRAME_CONT = bytes([4, 20])
TIMEOUT_MESSAGE = "Timeout reading from serial connection"
_SEGMENT_DELAY = 0.02

Handler = Callable[[Optional[bytes], Optional[BaseException]], None]


@dataclass
class XportCfg:
    dev_path: str = ""
    baud: int = 0
    mtu: int = 128
    read_timeout: float = 10.0


def crc16(data: bytes) -> int:
    """CRC-16/CCITT with polynomial 0x1021 and initial value 0."""
    crc = 0
    for b in data:
        crc ^= b << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = ((crc << 1) ^ 0x1021) & 0xFFFF
            else:
                crc = (crc << 1) & 0xFFFF
    return crc


def encode_frames(data: bytes, mtu: int) -> list[bytes]:
    """Return the lines, newline included, that carry ``data`` on the wire."""
    chunk = mtu - 4
    if chunk <= 0:
        raise ValueError(f"invalid serial mtu: {mtu}")

    body = bytes(data) + crc16(data).to_bytes(2, "big")
    if len(body) > 0xFFFF:
        raise ValueError(f"packet too large: {len(body)} bytes")
    b64 = base64.b64encode(len(body).to_bytes(2, "big") + body)

    return [
        (FRAME_START if off == 0 else FRAME_CONT) + b64[off:off + chunk] + b"\n"
        for off in range(0, len(b64), chunk)
    ]


class FrameDecoder:
    """Reassembles packets from received lines."""

    def __init__(self) -> None:
        self._pkt: Optional[Packet] = None

    def feed_line(self, line: bytes) -> Optional[bytes]:
        """Process one line; return a packet's payload once it is complete.

        Raises ValueError on undecodable base64 or a CRC mismatch.
        """
        line = bytes(line).rstrip(b"\r\n")
        while len(line) > 1 and line[:1] == b"\r":
            line = line[1:]

        if len(line) < 2 or line[:2] not in (FRAME_START, FRAME_CONT):
            return None

        b64 = line[2:].replace(b"\r", b"").replace(b"\n", b"")
        try:
            data = base64.b64decode(b64, validate=True)
        except binascii.Error as exc:
            raise ValueError(
                f"Couldn't decode base64 string: {b64!r}\nPacket: {line.hex()}"
            ) from exc

        if line[:2] == FRAME_START:
            if len(data) < 2:
                return None
            self._pkt = Packet(int.from_bytes(data[:2], "big"))
            data = data[2:]

        if self._pkt is None:
            return None

        if not self._pkt.add_bytes(data):
            return None

        if crc16(self._pkt.get_bytes()) != 0:
            raise ValueError("CRC error")

        self._pkt.trim_end(2)
        out = self._pkt.get_bytes()
        self._pkt = None
        log.debug("Decoded input: %s", out.hex())
        return out


def _open_port(cfg: XportCfg) -> Any:
    return serial.Serial(
        port=cfg.dev_path, baudrate=cfg.baud, timeout=cfg.read_timeout
    )


class SerialXport:
    """A serial link carrying framed management packets.

    ``port_factory`` opens the port from the configuration; by default a
    serial device is opened.
    """

    def __init__(
        self,
        cfg: Optional[XportCfg] = None,
        port_factory: Optional[Callable[[XportCfg], Any]] = None,
    ) -> None:
        self.cfg = cfg if cfg is not None else XportCfg()
        self._port_factory = port_factory or _open_port
        self._port: Any = None
        self._decoder = FrameDecoder()
        self._thread: Optional[threading.Thread] = None
        self._closing = False
        self._tx_lock = threading.Lock()

    def start(self, handler: Handler) -> None:
        """Open the port and deliver each received packet to ``handler``.

        The handler is called as ``handler(packet, None)`` for a packet and
        ``handler(None, error)`` for a receive error.
        """
        if self._port is not None:
            return

        port = self._port_factory(self.cfg)
        port.reset_input_buffer()
        self._port = port

        self._thread = threading.Thread(
            target=self._reader, args=(handler,), daemon=True
        )
        self._thread.start()

    def _reader(self, handler: Handler) -> None:
        while True:
            msg: Optional[bytes] = None
            err: Optional[BaseException] = None
            try:
                msg = self.rx()
            except (ValueError, OSError, XportError) as exc:
                err = exc

            if self._closing:
                return
            if err is not None:
                handler(None, err)
            elif msg is not None:
                handler(msg, None)

    def stop(self) -> None:
        """Close the port and wait for the reader to finish."""
        if self._port is None:
            return
        self._closing = True
        try:
            self._port.close()
        finally:
            if self._thread is not None:
                self._thread.join()
            self._thread = None
            self._port = None
            self._closing = False

    def tx(self, data: bytes) -> None:
        """Frame and write ``data``, pausing between segments."""
        port = self._port
        if port is None:
            raise XportError("Serial transport not started")

        log.debug("Base64 encoding request: %s", bytes(data).hex())
        with self._tx_lock:
            for i, frame in enumerate(encode_frames(data, self.cfg.mtu)):
                if i:
                    # Slow receivers need time to process each segment.
                    time.sleep(_SEGMENT_DELAY)
                log.debug("Tx serial: %s", frame.hex())
                port.write(frame)

    def rx(self) -> bytes:
        """Block until a whole packet is received.

        Raises TimeoutError when a read times out.
        """
        port = self._port
        if port is None:
            raise XportError("Serial transport not started")

        while True:
            line = port.readline()
            if not line:
                raise TimeoutError(TIMEOUT_MESSAGE)
            log.debug("Rx serial: %s", bytes(line).hex())
            msg = self._decoder.feed_line(line)
            if msg is not None:
                return msg