"""Image group commands: upload, state, core dump access and erase."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Union

from nmxact.nmp.header import (
    NMP_ID_IMAGE_CORELIST,
    NMP_ID_IMAGE_CORELOAD,
    NMP_ID_IMAGE_ERASE,
    NMP_ID_IMAGE_STATE,
    NMP_ID_IMAGE_UPLOAD,
    NmpBase,
    NmpGroup,
    NmpOp,
    NmpReq,
    NmpRsp,
    _cbor_field,
)

# $upload


@dataclass
class ImageUploadReq(NmpReq):
    OP = NmpOp.WRITE
    GROUP = NmpGroup.IMAGE
    ID = NMP_ID_IMAGE_UPLOAD

    image_num: int = _cbor_field("image", 0)
    off: int = _cbor_field("off", 0)
    length: int = _cbor_field("len", 0, omitempty=True)
    data_sha: bytes = _cbor_field("sha", b"", omitempty=True)
    upgrade: bool = _cbor_field("upgrade", False, omitempty=True)
    data: bytes = _cbor_field("data", b"")


@dataclass
class ImageUploadRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)
    off: int = _cbor_field("off", 0)


# $state


class SplitStatus(enum.IntEnum):
    NOT_APPLICABLE = 0
    NOT_MATCHING = 1
    MATCHING = 2

    def __str__(self) -> str:
        return _SPLIT_STATUS_NAMES.get(self, "Unknown!")


_SPLIT_STATUS_NAMES = {
    SplitStatus.NOT_APPLICABLE: "N/A",
    SplitStatus.NOT_MATCHING: "non-matching",
    SplitStatus.MATCHING: "matching",
}


def _decode_split_status(val: Any) -> Union[SplitStatus, int]:
    try:
        return SplitStatus(val)
    except ValueError:
        return val


@dataclass
class ImageStateEntry(NmpBase):
    image: int = _cbor_field("image", 0)
    slot: int = _cbor_field("slot", 0)
    version: str = _cbor_field("version", "")
    hash: bytes = _cbor_field("hash", b"")
    bootable: bool = _cbor_field("bootable", False)
    pending: bool = _cbor_field("pending", False)
    confirmed: bool = _cbor_field("confirmed", False)
    active: bool = _cbor_field("active", False)
    permanent: bool = _cbor_field("permanent", False)


def _encode_entries(entries: list) -> list:
    return [e.body() for e in entries]


def _decode_entries(raw: Any) -> list:
    return [ImageStateEntry._from_body(d) for d in (raw or [])]


@dataclass
class ImageStateReadReq(NmpReq):
    OP = NmpOp.READ
    GROUP = NmpGroup.IMAGE
    ID = NMP_ID_IMAGE_STATE


@dataclass
class ImageStateWriteReq(NmpReq):
    OP = NmpOp.WRITE
    GROUP = NmpGroup.IMAGE
    ID = NMP_ID_IMAGE_STATE

    hash: bytes = _cbor_field("hash", b"")
    confirm: bool = _cbor_field("confirm", False)


@dataclass
class ImageStateRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)
    images: list = _cbor_field(
        "images",
        default_factory=list,
        encode=_encode_entries,
        decode=_decode_entries,
    )
    split_status: Union[SplitStatus, int] = _cbor_field(
        "splitStatus",
        SplitStatus.NOT_APPLICABLE,
        encode=int,
        decode=_decode_split_status,
    )


# $corelist


@dataclass
class CoreListReq(NmpReq):
    OP = NmpOp.READ
    GROUP = NmpGroup.IMAGE
    ID = NMP_ID_IMAGE_CORELIST


@dataclass
class CoreListRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)


# $coreload


@dataclass
class CoreLoadReq(NmpReq):
    OP = NmpOp.READ
    GROUP = NmpGroup.IMAGE
    ID = NMP_ID_IMAGE_CORELOAD

    off: int = _cbor_field("off", 0)


@dataclass
class CoreLoadRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)
    off: int = _cbor_field("off", 0)
    length: int = _cbor_field("len", 0)
    data: bytes = _cbor_field("data", b"")


# $coreerase


@dataclass
class CoreEraseReq(NmpReq):
    OP = NmpOp.WRITE
    GROUP = NmpGroup.IMAGE
    ID = NMP_ID_IMAGE_CORELOAD


@dataclass
class CoreEraseRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)


# $erase


@dataclass
class ImageEraseReq(NmpReq):
    OP = NmpOp.WRITE
    GROUP = NmpGroup.IMAGE
    ID = NMP_ID_IMAGE_ERASE


@dataclass
class ImageEraseRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)