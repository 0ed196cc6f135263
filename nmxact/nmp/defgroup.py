"""Default-group commands: echo, date-time, reset, mempool and task stats."""

from __future__ import annotations

from dataclasses import dataclass

from nmxact.nmp.header import (
    NMP_ID_DEF_DATETIME_STR,
    NMP_ID_DEF_ECHO,
    NMP_ID_DEF_MPSTAT,
    NMP_ID_DEF_RESET,
    NMP_ID_DEF_TASKSTAT,
    NmpGroup,
    NmpOp,
    NmpReq,
    NmpRsp,
    _cbor_field,
)


@dataclass
class EchoReq(NmpReq):
    OP = NmpOp.WRITE
    GROUP = NmpGroup.DEFAULT
    ID = NMP_ID_DEF_ECHO

    payload: str = _cbor_field("d", "")


@dataclass
class EchoRsp(NmpRsp):
    payload: str = _cbor_field("r", "")
    rc: int = _cbor_field("rc", 0)


@dataclass
class DateTimeReadReq(NmpReq):
    OP = NmpOp.READ
    GROUP = NmpGroup.DEFAULT
    ID = NMP_ID_DEF_DATETIME_STR


@dataclass
class DateTimeReadRsp(NmpRsp):
    date_time: str = _cbor_field("datetime", "")
    rc: int = _cbor_field("rc", 0)


@dataclass
class DateTimeWriteReq(NmpReq):
    OP = NmpOp.WRITE
    GROUP = NmpGroup.DEFAULT
    ID = NMP_ID_DEF_DATETIME_STR

    date_time: str = _cbor_field("datetime", "")


@dataclass
class DateTimeWriteRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)


@dataclass
class ResetReq(NmpReq):
    OP = NmpOp.WRITE
    GROUP = NmpGroup.DEFAULT
    ID = NMP_ID_DEF_RESET


@dataclass
class ResetRsp(NmpRsp):
    pass


@dataclass
class MempoolStatReq(NmpReq):
    OP = NmpOp.READ
    GROUP = NmpGroup.DEFAULT
    ID = NMP_ID_DEF_MPSTAT


@dataclass
class MempoolStatRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)
    mpools: dict = _cbor_field("mpools", default_factory=dict)


@dataclass
class TaskStatReq(NmpReq):
    OP = NmpOp.READ
    GROUP = NmpGroup.DEFAULT
    ID = NMP_ID_DEF_TASKSTAT


@dataclass
class TaskStatRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)
    tasks: dict = _cbor_field("tasks", default_factory=dict)