"""Sequence numbers, CBOR helpers, fragmentation and listener logging."""

from __future__ import annotations

import logging
import random
import threading
from typing import Any

import cbor2

DURATION_FOREVER = float("inf")
OMP_RES = "/omgr"

# When true, failed internal assertions raise.
DEBUG = False

log = logging.getLogger("nmxact")
listen_log = logging.getLogger("nmxact.listen")
listen_log.setLevel(logging.DEBUG)

_seq_lock = threading.Lock()
_next_nmp_seq: int | None = None
_next_oic_seq: int | None = None

_id_lock = threading.Lock()
_next_id = 0


def set_log_level(level: int | str) -> None:
    """Set the level of the package logger and the listener logger."""
    log.setLevel(level)
    listen_log.setLevel(level)


def nmx_assert(cond: bool) -> None:
    """Raise AssertionError on a false condition when debugging is enabled."""
    if DEBUG and not cond:
        raise AssertionError("Failed assertion")


def next_nmp_seq() -> int:
    """Return the next NMP sequence number; the first one is random."""
    global _next_nmp_seq
    with _seq_lock:
        if _next_nmp_seq is None:
            _next_nmp_seq = random.getrandbits(8)
        val = _next_nmp_seq
        _next_nmp_seq = (val + 1) & 0xFF
        return val


def seq_to_token(seq: int) -> bytes:
    """Convert a sequence number to a one-byte CoAP token."""
    return bytes([seq & 0xFF])


def next_token() -> bytes:
    """Return the next CoAP token; the first one is random."""
    global _next_oic_seq
    with _seq_lock:
        if _next_oic_seq is None:
            _next_oic_seq = random.getrandbits(8)
        token = seq_to_token(_next_oic_seq)
        _next_oic_seq = (_next_oic_seq + 1) & 0xFF
        return token


def decode_cbor(data: bytes) -> Any:
    """Decode a CBOR item; raise ValueError on malformed input."""
    try:
        return cbor2.loads(data)
    except (cbor2.CBORDecodeError, EOFError) as exc:
        log.debug("Attempt to decode invalid cbor: %r", data)
        raise ValueError(f"failure decoding cbor; {exc}") from exc


def decode_cbor_map(data: bytes) -> dict:
    """Decode a CBOR map; raise ValueError if the data is not one."""
    value = decode_cbor(data)
    if not isinstance(value, dict):
        log.debug("Attempt to decode invalid cbor: %r", data)
        raise ValueError(
            f"failure decoding cbor; expected map, got {type(value).__name__}"
        )
    return value


def encode_cbor(value: Any) -> bytes:
    """Encode a value as CBOR; raise ValueError if it cannot be encoded."""
    try:
        return cbor2.dumps(value)
    except cbor2.CBOREncodeError as exc:
        raise ValueError(f"failure encoding cbor; {exc}") from exc


def encode_cbor_map(value: dict) -> bytes:
    """Encode a mapping as CBOR."""
    return encode_cbor(value)


def fragment(data: bytes, mtu: int) -> list[bytes]:
    """Split ``data`` into consecutive chunks of at most ``mtu`` bytes."""
    if mtu <= 0:
        raise ValueError(f"invalid mtu: {mtu}")
    return [data[off:off + mtu] for off in range(0, len(data), mtu)]


def get_next_id() -> int:
    """Return a process-wide unique 32-bit identifier, starting at 0."""
    global _next_id
    with _id_lock:
        val = _next_id
        _next_id = (_next_id + 1) & 0xFFFFFFFF
        return val


def log_listener(title: str, extra: str) -> None:
    """Log a listener event, attributed to the caller's caller."""
    listen_log.debug("{%s} %s", title, extra, stacklevel=3)


def log_add_nmp_listener(seq: int) -> None:
    log_listener("add-nmp-listener", f"seq={seq}")


def log_remove_nmp_listener(seq: int) -> None:
    log_listener("remove-nmp-listener", f"seq={seq}")


def log_add_coap_listener(desc: str) -> None:
    log_listener("add-oic-listener", f"desc={desc}")


def log_remove_coap_listener(desc: str) -> None:
    log_listener("remove-oic-listener", f"desc={desc}")


def log_add_listener(key: Any, id_: int, name: str) -> None:
    log_listener("add-ble-listener", f"[{id_}] {name}: base={key!r}")


def log_remove_listener(key: Any, id_: int, name: str) -> None:
    log_listener("remove-ble-listener", f"[{id_}] {name}: base={key!r}")