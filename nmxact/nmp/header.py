"""NMP protocol constants, the 8-byte header and the message base classes."""

from __future__ import annotations

import dataclasses
import enum
import logging
import struct
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Optional

from nmxact.nmxutil.util import encode_cbor, next_nmp_seq

log = logging.getLogger("nmxact.nmp")

NMP_HDR_SIZE = 8
_HDR_STRUCT = struct.Struct(">BBHHBB")


class NmpOp(enum.IntEnum):
    READ = 0
    READ_RSP = 1
    WRITE = 2
    WRITE_RSP = 3


class NmpErr(enum.IntEnum):
    OK = 0
    EUNKNOWN = 1
    ENOMEM = 2
    EINVAL = 3
    ETIMEOUT = 4
    ENOENT = 5


class NmpGroup(enum.IntEnum):
    """Command groups; the first 64 are reserved for system commands."""

    DEFAULT = 0
    IMAGE = 1
    STAT = 2
    CONFIG = 3
    LOG = 4
    CRASH = 5
    SPLIT = 6
    RUN = 7
    FS = 8
    SHELL = 9
    PERUSER = 64


# Default group.
NMP_ID_DEF_ECHO = 0
NMP_ID_DEF_CONS_ECHO_CTRL = 1
NMP_ID_DEF_TASKSTAT = 2
NMP_ID_DEF_MPSTAT = 3
NMP_ID_DEF_DATETIME_STR = 4
NMP_ID_DEF_RESET = 5

# Image group.
NMP_ID_IMAGE_STATE = 0
NMP_ID_IMAGE_UPLOAD = 1
NMP_ID_IMAGE_CORELIST = 3
NMP_ID_IMAGE_CORELOAD = 4
NMP_ID_IMAGE_ERASE = 5

# Stat group.
NMP_ID_STAT_READ = 0
NMP_ID_STAT_LIST = 1

# Config group.
NMP_ID_CONFIG_VAL = 0

# Log group.
NMP_ID_LOG_SHOW = 0
NMP_ID_LOG_CLEAR = 1
NMP_ID_LOG_APPEND = 2
NMP_ID_LOG_MODULE_LIST = 3
NMP_ID_LOG_LEVEL_LIST = 4
NMP_ID_LOG_LIST = 5

# Crash group.
NMP_ID_CRASH_TRIGGER = 0

# Run group.
NMP_ID_RUN_TEST = 0
NMP_ID_RUN_LIST = 1

# File system group.
NMP_ID_FS_FILE = 0

# Shell group.
NMP_ID_SHELL_EXEC = 0


@dataclass
class NmpHdr:
    op: int = 0
    flags: int = 0
    len: int = 0
    group: int = 0
    seq: int = 0
    id: int = 0

    def to_bytes(self) -> bytes:
        """Serialise the header as 8 big-endian bytes."""
        return _HDR_STRUCT.pack(
            self.op & 0xFF,
            self.flags & 0xFF,
            self.len & 0xFFFF,
            self.group & 0xFFFF,
            self.seq & 0xFF,
            self.id & 0xFF,
        )


def decode_nmp_hdr(data: bytes) -> NmpHdr:
    """Parse the header at the start of ``data``; raise ValueError if short."""
    if len(data) < NMP_HDR_SIZE:
        raise ValueError(f"Newtmgr request buffer too small {len(data)} bytes")
    op, flags, length, group, seq, id_ = _HDR_STRUCT.unpack_from(data)
    return NmpHdr(op=op, flags=flags, len=length, group=group, seq=seq, id=id_)


def _cbor_field(
    key: str,
    default: Any = dataclasses.MISSING,
    *,
    default_factory: Any = dataclasses.MISSING,
    omitempty: bool = False,
    encode: Optional[Callable[[Any], Any]] = None,
    decode: Optional[Callable[[Any], Any]] = None,
) -> Any:
    """Declare a message field carried under ``key`` in the CBOR body."""
    metadata = {"key": key, "omitempty": omitempty}
    if encode is not None:
        metadata["encode"] = encode
    if decode is not None:
        metadata["decode"] = decode
    return field(default=default, default_factory=default_factory, metadata=metadata)


@dataclass
class NmpMsg:
    hdr: NmpHdr
    body: Any


@dataclass
class NmpBase:
    """Common part of requests and responses: a header plus CBOR fields."""

    hdr: Optional[NmpHdr] = field(
        default=None, kw_only=True, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if self.hdr is None:
            self.hdr = NmpHdr()

    def body(self) -> dict:
        """Return the mapping that forms the CBOR body of this message."""
        out: dict = {}
        for f in dataclasses.fields(self):
            key = f.metadata.get("key")
            if key is None:
                continue
            val = getattr(self, f.name)
            if f.metadata.get("omitempty") and not val:
                continue
            enc = f.metadata.get("encode")
            out[key] = enc(val) if enc is not None else val
        return out

    def msg(self) -> NmpMsg:
        """Return a message holding a copy of the header and this body."""
        return NmpMsg(hdr=dataclasses.replace(self.hdr), body=self)

    @classmethod
    def _from_body(cls, data: dict, hdr: Optional[NmpHdr] = None) -> "NmpBase":
        """Build an instance from a decoded CBOR map; unknown keys are ignored."""
        by_key = {
            f.metadata["key"]: f
            for f in dataclasses.fields(cls)
            if "key" in f.metadata and f.init
        }
        kwargs = {}
        for key, val in data.items():
            f = by_key.get(key)
            if f is None:
                continue
            dec = f.metadata.get("decode")
            kwargs[f.name] = dec(val) if dec is not None else val
        hdr = dataclasses.replace(hdr) if hdr is not None else NmpHdr()
        return cls(**kwargs, hdr=hdr)


@dataclass
class NmpReq(NmpBase):
    """A request; its header is filled from OP, GROUP and ID."""

    OP: ClassVar[int] = NmpOp.READ
    GROUP: ClassVar[int] = NmpGroup.DEFAULT
    ID: ClassVar[int] = 0

    def __post_init__(self) -> None:
        if self.hdr is None:
            self.hdr = self._make_hdr(next_nmp_seq())

    @classmethod
    def _make_hdr(cls, seq: int) -> NmpHdr:
        return NmpHdr(op=cls.OP, flags=0, len=0, group=cls.GROUP, seq=seq, id=cls.ID)

    @classmethod
    def _with_seq(cls, seq: int, *args: Any, **kwargs: Any) -> "NmpReq":
        """Create a request with an explicit sequence number."""
        return cls(*args, hdr=cls._make_hdr(seq), **kwargs)


@dataclass
class NmpRsp(NmpBase):
    """A response; its header is set by the decoder."""


def body_bytes(body: Any) -> bytes:
    """Encode a message body (a message object or a mapping) as CBOR."""
    value = body.body() if isinstance(body, NmpBase) else body
    try:
        data = encode_cbor(value)
    except ValueError as exc:
        raise ValueError(f"Failed to encode message {exc}") from exc
    log.debug("Encoded %r to: %s", value, data.hex())
    return data


def encode_nmp_plain(msg: NmpMsg) -> bytes:
    """Encode header and body; the header length is updated in place."""
    bb = body_bytes(msg.body)
    msg.hdr.len = len(bb)
    data = msg.hdr.to_bytes() + bb
    log.debug("Encoded: %s", data.hex())
    return data