"""Decoding of NMP response bodies by op, group and id."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Type

from nmxact.nmp import defgroup, fs, image, log, misc
from nmxact.nmp.header import (
    NMP_ID_CONFIG_VAL,
    NMP_ID_CRASH_TRIGGER,
    NMP_ID_DEF_DATETIME_STR,
    NMP_ID_DEF_ECHO,
    NMP_ID_DEF_MPSTAT,
    NMP_ID_DEF_RESET,
    NMP_ID_DEF_TASKSTAT,
    NMP_ID_FS_FILE,
    NMP_ID_IMAGE_CORELIST,
    NMP_ID_IMAGE_CORELOAD,
    NMP_ID_IMAGE_ERASE,
    NMP_ID_IMAGE_STATE,
    NMP_ID_IMAGE_UPLOAD,
    NMP_ID_LOG_CLEAR,
    NMP_ID_LOG_LEVEL_LIST,
    NMP_ID_LOG_LIST,
    NMP_ID_LOG_MODULE_LIST,
    NMP_ID_LOG_SHOW,
    NMP_ID_RUN_LIST,
    NMP_ID_RUN_TEST,
    NMP_ID_SHELL_EXEC,
    NMP_ID_STAT_LIST,
    NMP_ID_STAT_READ,
    NmpGroup,
    NmpHdr,
    NmpOp,
    NmpRsp,
)
from nmxact.nmxutil.util import decode_cbor_map


@dataclass(frozen=True)
class Ogi:
    """An op, group and id triple identifying a response type."""

    op: int
    group: int
    id: int


_RR = NmpOp.READ_RSP
_WR = NmpOp.WRITE_RSP

_rsp_ctor_map: dict[Ogi, Type[NmpRsp]] = {
    Ogi(_WR, NmpGroup.DEFAULT, NMP_ID_DEF_ECHO): defgroup.EchoRsp,
    Ogi(_RR, NmpGroup.DEFAULT, NMP_ID_DEF_TASKSTAT): defgroup.TaskStatRsp,
    Ogi(_RR, NmpGroup.DEFAULT, NMP_ID_DEF_MPSTAT): defgroup.MempoolStatRsp,
    Ogi(_RR, NmpGroup.DEFAULT, NMP_ID_DEF_DATETIME_STR): defgroup.DateTimeReadRsp,
    Ogi(_WR, NmpGroup.DEFAULT, NMP_ID_DEF_DATETIME_STR): defgroup.DateTimeWriteRsp,
    Ogi(_WR, NmpGroup.DEFAULT, NMP_ID_DEF_RESET): defgroup.ResetRsp,
    Ogi(_WR, NmpGroup.IMAGE, NMP_ID_IMAGE_UPLOAD): image.ImageUploadRsp,
    Ogi(_RR, NmpGroup.IMAGE, NMP_ID_IMAGE_STATE): image.ImageStateRsp,
    Ogi(_WR, NmpGroup.IMAGE, NMP_ID_IMAGE_STATE): image.ImageStateRsp,
    Ogi(_RR, NmpGroup.IMAGE, NMP_ID_IMAGE_CORELIST): image.CoreListRsp,
    Ogi(_RR, NmpGroup.IMAGE, NMP_ID_IMAGE_CORELOAD): image.CoreLoadRsp,
    Ogi(_WR, NmpGroup.IMAGE, NMP_ID_IMAGE_CORELOAD): image.CoreEraseRsp,
    Ogi(_WR, NmpGroup.IMAGE, NMP_ID_IMAGE_ERASE): image.ImageEraseRsp,
    Ogi(_RR, NmpGroup.STAT, NMP_ID_STAT_READ): misc.StatReadRsp,
    Ogi(_RR, NmpGroup.STAT, NMP_ID_STAT_LIST): misc.StatListRsp,
    Ogi(_RR, NmpGroup.LOG, NMP_ID_LOG_SHOW): log.LogShowRsp,
    Ogi(_RR, NmpGroup.LOG, NMP_ID_LOG_LIST): log.LogListRsp,
    Ogi(_RR, NmpGroup.LOG, NMP_ID_LOG_MODULE_LIST): log.LogModuleListRsp,
    Ogi(_RR, NmpGroup.LOG, NMP_ID_LOG_LEVEL_LIST): log.LogLevelListRsp,
    Ogi(_WR, NmpGroup.LOG, NMP_ID_LOG_CLEAR): log.LogClearRsp,
    Ogi(_WR, NmpGroup.CRASH, NMP_ID_CRASH_TRIGGER): misc.CrashRsp,
    Ogi(_WR, NmpGroup.RUN, NMP_ID_RUN_TEST): misc.RunTestRsp,
    Ogi(_RR, NmpGroup.RUN, NMP_ID_RUN_LIST): misc.RunListRsp,
    Ogi(_RR, NmpGroup.FS, NMP_ID_FS_FILE): fs.FsDownloadRsp,
    Ogi(_WR, NmpGroup.FS, NMP_ID_FS_FILE): fs.FsUploadRsp,
    Ogi(_RR, NmpGroup.CONFIG, NMP_ID_CONFIG_VAL): misc.ConfigReadRsp,
    Ogi(_WR, NmpGroup.CONFIG, NMP_ID_CONFIG_VAL): misc.ConfigWriteRsp,
    Ogi(_WR, NmpGroup.SHELL, NMP_ID_SHELL_EXEC): misc.ShellExecRsp,
}


def decode_rsp_body(hdr: NmpHdr, body: bytes) -> NmpRsp:
    """Decode a response body of the type named by ``hdr``.

    Raises ValueError for an unknown op/group/id or a malformed body.
    """
    ctor = _rsp_ctor_map.get(Ogi(hdr.op, hdr.group, hdr.id))
    if ctor is None:
        raise ValueError(
            f"Unrecognized NMP op+group+id: {hdr.op}, {hdr.group}, {hdr.id}"
        )

    try:
        data = decode_cbor_map(body)
        return ctor._from_body(data, hdr)
    except (ValueError, TypeError) as exc:
        raise ValueError(f"Invalid response: {exc}") from exc


def register_response_handler(ogi: Ogi, ctor: Type[NmpRsp]) -> None:
    """Register a response class for ``ogi`` unless one is already known."""
    _rsp_ctor_map.setdefault(ogi, ctor)