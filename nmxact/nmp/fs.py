"""File-system group commands: download and upload."""

from __future__ import annotations

from dataclasses import dataclass

from nmxact.nmp.header import (
    NMP_ID_FS_FILE,
    NmpGroup,
    NmpOp,
    NmpReq,
    NmpRsp,
    _cbor_field,
)


@dataclass
class FsDownloadReq(NmpReq):
    OP = NmpOp.READ
    GROUP = NmpGroup.FS
    ID = NMP_ID_FS_FILE

    name: str = _cbor_field("name", "")
    off: int = _cbor_field("off", 0)


@dataclass
class FsDownloadRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)
    off: int = _cbor_field("off", 0)
    length: int = _cbor_field("len", 0)
    data: bytes = _cbor_field("data", b"")


@dataclass
class FsUploadReq(NmpReq):
    OP = NmpOp.WRITE
    GROUP = NmpGroup.FS
    ID = NMP_ID_FS_FILE

    name: str = _cbor_field("name", "")
    length: int = _cbor_field("len", 0)
    off: int = _cbor_field("off", 0)
    data: bytes = _cbor_field("data", b"")


@dataclass
class FsUploadRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)
    off: int = _cbor_field("off", 0)