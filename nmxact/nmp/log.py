"""Log group commands and log naming helpers."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Union

from nmxact.nmp.header import (
    NMP_ID_LOG_CLEAR,
    NMP_ID_LOG_LEVEL_LIST,
    NMP_ID_LOG_LIST,
    NMP_ID_LOG_MODULE_LIST,
    NMP_ID_LOG_SHOW,
    NmpGroup,
    NmpOp,
    NmpReq,
    NmpRsp,
    _cbor_field,
)

LEVEL_DEBUG = 0
LEVEL_INFO = 1
LEVEL_WARN = 2
LEVEL_ERROR = 3
LEVEL_CRITICAL = 4
LEVEL_MAX = 255

STREAM_LOG = 0
MEMORY_LOG = 1
STORAGE_LOG = 2

MODULE_DEFAULT = 0
MODULE_OS = 1
MODULE_NEWTMGR = 2
MODULE_NIMBLE_CTLR = 3
MODULE_NIMBLE_HOST = 4
MODULE_NFFS = 5
MODULE_REBOOT = 6
MODULE_TEST = 8
MODULE_MAX = 255

LOG_MODULE_NAME_MAP = {
    MODULE_DEFAULT: "DEFAULT",
    MODULE_OS: "OS",
    MODULE_NEWTMGR: "NEWTMGR",
    MODULE_NIMBLE_CTLR: "NIMBLE_CTLR",
    MODULE_NIMBLE_HOST: "NIMBLE_HOST",
    MODULE_NFFS: "NFFS",
    MODULE_REBOOT: "REBOOT",
    MODULE_TEST: "TEST",
}

LOG_LEVEL_NAME_MAP = {
    LEVEL_DEBUG: "DEBUG",
    LEVEL_INFO: "INFO",
    LEVEL_WARN: "WARN",
    LEVEL_ERROR: "ERROR",
    LEVEL_CRITICAL: "CRITICAL",
}

LOG_TYPE_NAME_MAP = {
    STREAM_LOG: "STREAM",
    MEMORY_LOG: "MEMORY",
    STORAGE_LOG: "STORAGE",
}


def log_module_to_string(lm: int) -> str:
    return LOG_MODULE_NAME_MAP.get(lm, "CUSTOM")


def log_level_to_string(lm: int) -> str:
    return LOG_LEVEL_NAME_MAP.get(lm, "CUSTOM")


def log_type_to_string(lt: int) -> str:
    return LOG_TYPE_NAME_MAP.get(lt, "UNDEFINED")


# $show


class LogEntryType(enum.IntEnum):
    STRING = 0
    CBOR = 1
    BINARY = 2

    def __str__(self) -> str:
        return _LOG_ENTRY_TYPE_NAMES.get(self, "???")


_LOG_ENTRY_TYPE_NAMES = {
    LogEntryType.STRING: "str",
    LogEntryType.CBOR: "cbor",
    LogEntryType.BINARY: "bin",
}


def log_entry_type_from_string(s: str) -> LogEntryType:
    """Parse an entry type name; raise ValueError for an unknown one."""
    for typ, name in _LOG_ENTRY_TYPE_NAMES.items():
        if s == name:
            return typ
    raise ValueError(f"Invalid LogEntryType string: {s}")


def _decode_entry_type(val: Any) -> Union[LogEntryType, int]:
    if isinstance(val, (bytes, bytearray)):
        val = bytes(val).decode("utf-8", errors="replace")
    if isinstance(val, str):
        return log_entry_type_from_string(val)
    try:
        return LogEntryType(val)
    except ValueError:
        return val


@dataclass
class LogShowReq(NmpReq):
    OP = NmpOp.READ
    GROUP = NmpGroup.LOG
    ID = NMP_ID_LOG_SHOW

    name: str = _cbor_field("log_name", "")
    timestamp: int = _cbor_field("ts", 0)
    index: int = _cbor_field("index", 0)


@dataclass
class LogEntry:
    index: int = 0
    timestamp: int = 0
    module: int = 0
    level: int = 0
    type: Union[LogEntryType, int] = LogEntryType.STRING
    img_hash: bytes = b""
    msg: bytes = b""

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "ts": self.timestamp,
            "module": self.module,
            "level": self.level,
            "type": str(self.type) if isinstance(self.type, LogEntryType) else self.type,
            "imghash": self.img_hash,
            "msg": self.msg,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LogEntry":
        entry = cls(
            index=data.get("index", 0),
            timestamp=data.get("ts", 0),
            module=data.get("module", 0),
            level=data.get("level", 0),
            img_hash=data.get("imghash", b"") or b"",
            msg=data.get("msg", b"") or b"",
        )
        if "type" in data:
            entry.type = _decode_entry_type(data["type"])
        return entry


@dataclass
class LogShowLog:
    name: str = ""
    type: int = 0
    entries: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.type,
            "entries": [e.to_dict() for e in self.entries],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LogShowLog":
        return cls(
            name=data.get("name", ""),
            type=data.get("type", 0),
            entries=[LogEntry.from_dict(e) for e in (data.get("entries") or [])],
        )


def _encode_logs(logs: list) -> list:
    return [lg.to_dict() for lg in logs]


def _decode_logs(raw: Any) -> list:
    return [LogShowLog.from_dict(lg) for lg in (raw or [])]


@dataclass
class LogShowRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)
    next_index: int = _cbor_field("next_index", 0)
    logs: list = _cbor_field(
        "logs", default_factory=list, encode=_encode_logs, decode=_decode_logs
    )


# $list


@dataclass
class LogListReq(NmpReq):
    OP = NmpOp.READ
    GROUP = NmpGroup.LOG
    ID = NMP_ID_LOG_LIST


@dataclass
class LogListRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)
    list: list = _cbor_field("log_list", default_factory=list)


# $module list


@dataclass
class LogModuleListReq(NmpReq):
    OP = NmpOp.READ
    GROUP = NmpGroup.LOG
    ID = NMP_ID_LOG_MODULE_LIST


@dataclass
class LogModuleListRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)
    map: dict = _cbor_field("module_map", default_factory=dict)


# $level list


@dataclass
class LogLevelListReq(NmpReq):
    OP = NmpOp.READ
    GROUP = NmpGroup.LOG
    ID = NMP_ID_LOG_LEVEL_LIST


@dataclass
class LogLevelListRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)
    map: dict = _cbor_field("level_map", default_factory=dict)


# $clear


@dataclass
class LogClearReq(NmpReq):
    OP = NmpOp.WRITE
    GROUP = NmpGroup.LOG
    ID = NMP_ID_LOG_CLEAR


@dataclass
class LogClearRsp(NmpRsp):
    rc: int = _cbor_field("rc", 0)