import base64
import queue
import time
from collections import deque

import pytest

from nmxact.nmserial.serial_xport import (
    FRAME_CONT,
    FRAME_START,
    FrameDecoder,
    SerialXport,
    XportCfg,
    crc16,
    encode_frames,
)
from nmxact.nmxutil.errors import XportError


class FakePort:
    def __init__(self, lines=()):
        self.lines = deque(lines)
        self.written = bytearray()
        self.closed = False
        self.flushed = False

    def reset_input_buffer(self):
        self.flushed = True

    def readline(self):
        if self.lines:
            return self.lines.popleft()
        time.sleep(0.01)
        return b""

    def write(self, data):
        self.written += data
        return len(data)

    def close(self):
        self.closed = True


def test_crc16_check_value():
    assert crc16(b"123456789") == 0x31C3


def test_crc16_residue_is_zero():
    data = b"some payload bytes"
    assert crc16(data + crc16(data).to_bytes(2, "big")) == 0


def test_encode_frames_layout():
    frames = encode_frames(b"x" * 200, 32)
    assert len(frames) > 1
    assert frames[0].startswith(FRAME_START)
    assert all(f.startswith(FRAME_CONT) for f in frames[1:])
    assert all(f.endswith(b"\n") and len(f) <= 32 - 4 + 3 for f in frames)


def test_encode_frames_invalid_mtu():
    with pytest.raises(ValueError):
        encode_frames(b"abc", 4)


@pytest.mark.parametrize("mtu", [16, 128])
def test_decoder_round_trip(mtu):
    data = bytes(range(150))
    dec = FrameDecoder()
    results = [dec.feed_line(f) for f in encode_frames(data, mtu)]
    assert results[-1] == data
    assert all(r is None for r in results[:-1])


def test_decoder_ignores_noise_and_leading_cr():
    data = b"hello"
    dec = FrameDecoder()
    assert dec.feed_line(b"console output\n") is None
    frame = encode_frames(data, 128)[0]
    assert dec.feed_line(b"\r\r" + frame) == data


def test_decoder_crc_error():
    body = b"abc" + b"\x00\x00"
    pkt = len(body).to_bytes(2, "big") + body
    line = FRAME_START + base64.b64encode(pkt) + b"\n"
    with pytest.raises(ValueError, match="CRC error"):
        FrameDecoder().feed_line(line)


def test_decoder_bad_base64():
    with pytest.raises(ValueError):
        FrameDecoder().feed_line(FRAME_START + b"!!!!\n")


def test_tx_writes_frames():
    port = FakePort()
    sx = SerialXport(XportCfg(mtu=24), port_factory=lambda cfg: port)
    sx.start(lambda msg, err: None)
    data = b"payload" * 5
    sx.tx(data)
    sx.stop()
    assert bytes(port.written) == b"".join(encode_frames(data, 24))
    assert port.closed and port.flushed


def test_tx_before_start():
    with pytest.raises(XportError):
        SerialXport(XportCfg()).tx(b"abc")


def test_rx_reads_packet_and_times_out():
    data = b"response"
    port = FakePort(encode_frames(data, 20))
    sx = SerialXport(XportCfg(mtu=20), port_factory=lambda cfg: port)
    sx._port = port
    assert sx.rx() == data
    with pytest.raises(TimeoutError):
        sx.rx()


def test_start_delivers_to_handler():
    data = b"incoming"
    port = FakePort(encode_frames(data, 128))
    received = queue.Queue()
    sx = SerialXport(XportCfg(), port_factory=lambda cfg: port)
    sx.start(lambda msg, err: received.put(msg) if msg is not None else None)
    try:
        assert received.get(timeout=2) == data
    finally:
        sx.stop()
    assert port.closed