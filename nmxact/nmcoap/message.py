"""CoAP messages over datagrams and streams, and helpers to build them."""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass, field
from typing import Optional

from nmxact.nmxutil.util import next_token

OPTION_OBSERVE = 6
OPTION_URI_PATH = 11
OPTION_URI_QUERY = 15

_PAYLOAD_MARKER = 0xFF
_COAP_VERSION = 1


class CoapCode(enum.IntEnum):
    EMPTY = 0
    GET = 1
    POST = 2
    PUT = 3
    DELETE = 4
    CREATED = 65
    DELETED = 66
    VALID = 67
    CHANGED = 68
    CONTENT = 69
    BAD_REQUEST = 128
    UNAUTHORIZED = 129
    BAD_OPTION = 130
    FORBIDDEN = 131
    NOT_FOUND = 132
    METHOD_NOT_ALLOWED = 133
    NOT_ACCEPTABLE = 134
    PRECONDITION_FAILED = 140
    REQUEST_ENTITY_TOO_LARGE = 141
    UNSUPPORTED_MEDIA_TYPE = 143
    INTERNAL_SERVER_ERROR = 160
    NOT_IMPLEMENTED = 161
    BAD_GATEWAY = 162
    SERVICE_UNAVAILABLE = 163
    GATEWAY_TIMEOUT = 164
    PROXYING_NOT_SUPPORTED = 165


class CoapType(enum.IntEnum):
    CONFIRMABLE = 0
    NON_CONFIRMABLE = 1
    ACKNOWLEDGEMENT = 2
    RESET = 3


class ObserveCode(enum.IntEnum):
    """Observe actions; the zero value means no observe action."""

    NONE = 0
    START = 1
    STOP = 2

    def spec(self) -> int:
        """Return the observe option value defined by the CoAP spec."""
        if self is ObserveCode.START:
            return 0
        if self is ObserveCode.STOP:
            return 1
        return -1


_OP_NAMES = {
    CoapCode.GET: "GET",
    CoapCode.PUT: "PUT",
    CoapCode.POST: "POST",
    CoapCode.DELETE: "DELETE",
}

_msg_id_lock = threading.Lock()
_next_msg_id = 0


def _uint_bytes(val: int) -> bytes:
    return val.to_bytes((val.bit_length() + 7) // 8, "big")


def _validate_token(token: bytes) -> None:
    if len(token) > 8:
        raise ValueError(f"Invalid token; len={len(token)}, must be <= 8")


def _ext_nibble(n: int) -> tuple[int, bytes]:
    if n < 13:
        return n, b""
    if n < 269:
        return 13, bytes([n - 13])
    if n < 65805:
        return 14, (n - 269).to_bytes(2, "big")
    raise ValueError(f"option field too large: {n}")


def _read_ext(nib: int, data: bytes, pos: int) -> tuple[int, int]:
    if nib < 13:
        return nib, pos
    if nib == 13:
        if pos + 1 > len(data):
            raise ValueError("truncated option header")
        return data[pos] + 13, pos + 1
    if nib == 14:
        if pos + 2 > len(data):
            raise ValueError("truncated option header")
        return int.from_bytes(data[pos:pos + 2], "big") + 269, pos + 2
    raise ValueError("invalid option header nibble 15")


def _encode_options(options: list[tuple[int, bytes]]) -> bytes:
    out = bytearray()
    prev = 0
    for num, val in sorted(options, key=lambda o: o[0]):
        dnib, dext = _ext_nibble(num - prev)
        lnib, lext = _ext_nibble(len(val))
        out.append(dnib << 4 | lnib)
        out += dext
        out += lext
        out += val
        prev = num
    return bytes(out)


def _decode_options(data: bytes, pos: int) -> tuple[list[tuple[int, bytes]], bytes]:
    options: list[tuple[int, bytes]] = []
    num = 0
    while pos < len(data):
        b = data[pos]
        pos += 1
        if b == _PAYLOAD_MARKER:
            payload = data[pos:]
            if not payload:
                raise ValueError("payload marker followed by empty payload")
            return options, bytes(payload)
        delta, pos = _read_ext(b >> 4, data, pos)
        length, pos = _read_ext(b & 0x0F, data, pos)
        if pos + length > len(data):
            raise ValueError("truncated option value")
        num += delta
        options.append((num, bytes(data[pos:pos + length])))
        pos += length
    return options, b""


@dataclass
class CoapMessage:
    """A CoAP message; ``is_tcp`` selects the stream (RFC 8323) encoding."""

    code: int = CoapCode.EMPTY
    type: int = CoapType.CONFIRMABLE
    message_id: int = 0
    token: bytes = b""
    payload: bytes = b""
    options: list = field(default_factory=list)
    is_tcp: bool = False

    def option_values(self, num: int) -> list[bytes]:
        return [val for n, val in self.options if n == num]

    def _replace_option(self, num: int, values: list[bytes]) -> None:
        kept = [o for o in self.options if o[0] != num]
        kept.extend((num, v) for v in values)
        kept.sort(key=lambda o: o[0])
        self.options = kept

    def path(self) -> list[str]:
        return [v.decode("utf-8") for v in self.option_values(OPTION_URI_PATH)]

    def path_string(self) -> str:
        return "/".join(self.path())

    def set_path_string(self, path: str) -> None:
        while len(path) > 1 and path[0] == "/":
            path = path[1:]
        self._replace_option(
            OPTION_URI_PATH, [p.encode("utf-8") for p in path.split("/")]
        )

    def set_uri_query(self, query: str) -> None:
        self._replace_option(OPTION_URI_QUERY, [query.encode("utf-8")])

    def set_observe(self, value: int) -> None:
        self._replace_option(OPTION_OBSERVE, [_uint_bytes(value)])

    def _body(self) -> bytes:
        body = _encode_options(self.options)
        if self.payload:
            body += bytes([_PAYLOAD_MARKER]) + bytes(self.payload)
        return body

    def to_bytes(self) -> bytes:
        """Serialise the message; raise ValueError if it cannot be encoded."""
        token = bytes(self.token)
        _validate_token(token)
        body = self._body()
        if self.is_tcp:
            n = len(body)
            if n < 13:
                nib, ext = n, b""
            elif n < 269:
                nib, ext = 13, bytes([n - 13])
            elif n < 65805:
                nib, ext = 14, (n - 269).to_bytes(2, "big")
            else:
                nib, ext = 15, (n - 65805).to_bytes(4, "big")
            return bytes([nib << 4 | len(token)]) + ext + bytes([self.code]) + token + body

        first = _COAP_VERSION << 6 | (self.type & 0x03) << 4 | len(token)
        return (
            bytes([first, self.code & 0xFF])
            + (self.message_id & 0xFFFF).to_bytes(2, "big")
            + token
            + body
        )


@dataclass
class MsgParams:
    code: int
    uri: str = ""
    observe: ObserveCode = ObserveCode.NONE
    token: Optional[bytes] = None
    payload: bytes = b""


def parse_op(op: str) -> CoapCode:
    """Parse a method name, ignoring case; raise ValueError if unknown."""
    for code, name in _OP_NAMES.items():
        if op.lower() == name.lower():
            return code
    raise ValueError(f'invalid CoAP op: "{op}"')


def next_message_id() -> int:
    """Return the next 16-bit message identifier."""
    global _next_msg_id
    with _msg_id_lock:
        val = _next_msg_id
        _next_msg_id = (_next_msg_id + 1) & 0xFFFF
        return val


def encode(msg: CoapMessage) -> bytes:
    try:
        return msg.to_bytes()
    except ValueError as exc:
        raise ValueError(f"Failed to encode CoAP: {exc}") from exc


def create_msg(is_tcp: bool, params: MsgParams) -> CoapMessage:
    """Build a confirmable message; a token is allocated if none is given."""
    token = params.token if params.token is not None else next_token()
    msg = CoapMessage(
        code=params.code,
        type=CoapType.CONFIRMABLE,
        token=bytes(token),
        payload=bytes(params.payload or b""),
        is_tcp=is_tcp,
    )

    path, sep, query = params.uri.partition("?")
    msg.set_path_string(path)
    if sep:
        msg.set_uri_query(query)

    if params.observe != ObserveCode.NONE:
        msg.set_observe(ObserveCode(params.observe).spec())

    return msg


def parse_dgram_message(data: bytes) -> CoapMessage:
    """Parse a datagram message; raise ValueError if it is malformed."""
    data = bytes(data)
    if len(data) < 4:
        raise ValueError("short CoAP packet")
    if data[0] >> 6 != _COAP_VERSION:
        raise ValueError(f"invalid CoAP version: {data[0] >> 6}")
    tkl = data[0] & 0x0F
    if tkl > 8:
        raise ValueError(f"invalid token length: {tkl}")
    if len(data) < 4 + tkl:
        raise ValueError("truncated CoAP token")

    options, payload = _decode_options(data, 4 + tkl)
    return CoapMessage(
        code=data[1],
        type=(data[0] >> 4) & 0x03,
        message_id=int.from_bytes(data[2:4], "big"),
        token=data[4:4 + tkl],
        payload=payload,
        options=options,
        is_tcp=False,
    )


_TCP_EXT = {13: (1, 13), 14: (2, 269), 15: (4, 65805)}


def pull_tcp(data: bytes) -> tuple[Optional[CoapMessage], bytes]:
    """Extract one stream message from the front of ``data``.

    Returns the message and the remaining bytes, or None and ``data`` if the
    message is incomplete.  Raises ValueError if the data is malformed.
    """
    data = bytes(data)
    if not data:
        return None, data

    tkl = data[0] & 0x0F
    if tkl > 8:
        raise ValueError(f"invalid token length: {tkl}")

    nib = data[0] >> 4
    ext_len, offset = _TCP_EXT.get(nib, (0, 0))
    if len(data) < 1 + ext_len:
        return None, data
    if ext_len:
        length = int.from_bytes(data[1:1 + ext_len], "big") + offset
    else:
        length = nib

    start = 1 + ext_len
    total = start + 1 + tkl + length
    if len(data) < total:
        return None, data

    options, payload = _decode_options(data[start + 1 + tkl:total], 0)
    msg = CoapMessage(
        code=data[start],
        token=data[start + 1:start + 1 + tkl],
        payload=payload,
        options=options,
        is_tcp=True,
    )
    return msg, data[total:]