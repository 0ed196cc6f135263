"""Config, crash, run, shell and stat group commands."""

from __future__ import annotations

from dataclasses import dataclass

from nmxact.nmp.header import (
    NMP_ID_CONFIG_VAL,
    NMP_ID_CRASH_TRIGGER,
    NMP_ID_RUN_LIST,
    NMP_ID_RUN_TEST,
    NMP_ID_SHELL_EXEC,
    NMP_ID_STAT_LIST,
    NMP_ID_STAT_READ,
    NmpGroup,
    NmpOp,
    NmpReq,
    NmpRsp,
    _cbor_field,
)

# $config read


@dataclass
class ConfigReadReq(NmpReq):
    OP = NmpOp.READ
    GROUP = NmpGroup.CONFIG
    ID = NMP_ID_CONFIG_VAL

    name: str = _cbor_field("name", "")


@dataclass
class ConfigReadRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)
    val: str = _cbor_field("val", "")


# $config write


@dataclass
class ConfigWriteReq(NmpReq):
    OP = NmpOp.WRITE
    GROUP = NmpGroup.CONFIG
    ID = NMP_ID_CONFIG_VAL

    name: str = _cbor_field("name", "", omitempty=True)
    val: str = _cbor_field("val", "", omitempty=True)
    save: bool = _cbor_field("save", False, omitempty=True)


@dataclass
class ConfigWriteRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)


# $crash


@dataclass
class CrashReq(NmpReq):
    OP = NmpOp.WRITE
    GROUP = NmpGroup.CRASH
    ID = NMP_ID_CRASH_TRIGGER

    crash_type: str = _cbor_field("t", "")


@dataclass
class CrashRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)


# $run test


@dataclass
class RunTestReq(NmpReq):
    OP = NmpOp.WRITE
    GROUP = NmpGroup.RUN
    ID = NMP_ID_RUN_TEST

    testname: str = _cbor_field("testname", "")
    token: str = _cbor_field("token", "")


@dataclass
class RunTestRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)


# $run list


@dataclass
class RunListReq(NmpReq):
    OP = NmpOp.READ
    GROUP = NmpGroup.RUN
    ID = NMP_ID_RUN_LIST


@dataclass
class RunListRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)
    list: list = _cbor_field("run_list", default_factory=list)


# $shell exec


@dataclass
class ShellExecReq(NmpReq):
    OP = NmpOp.WRITE
    GROUP = NmpGroup.SHELL
    ID = NMP_ID_SHELL_EXEC

    argv: list = _cbor_field("argv", default_factory=list)


@dataclass
class ShellExecRsp(NmpRsp):
    o: str = _cbor_field("o", "")
    rc: int = _cbor_field("rc", 0)


# $stat read


@dataclass
class StatReadReq(NmpReq):
    OP = NmpOp.READ
    GROUP = NmpGroup.STAT
    ID = NMP_ID_STAT_READ

    name: str = _cbor_field("name", "")


@dataclass
class StatReadRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)
    name: str = _cbor_field("name", "")
    group: str = _cbor_field("group", "")
    fields: dict = _cbor_field("fields", default_factory=dict)


# $stat list


@dataclass
class StatListReq(NmpReq):
    OP = NmpOp.READ
    GROUP = NmpGroup.STAT
    ID = NMP_ID_STAT_LIST


@dataclass
class StatListRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)
    list: list = _cbor_field("stat_list", default_factory=list)