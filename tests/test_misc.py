import pytest

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
)
from nmxact.nmp.misc import (
    ConfigReadReq,
    ConfigReadRsp,
    ConfigWriteReq,
    CrashReq,
    RunListReq,
    RunListRsp,
    RunTestReq,
    ShellExecReq,
    ShellExecRsp,
    StatListReq,
    StatListRsp,
    StatReadReq,
    StatReadRsp,
)


@pytest.mark.parametrize(
    "cls, op, group, id_",
    [
        (ConfigReadReq, NmpOp.READ, NmpGroup.CONFIG, NMP_ID_CONFIG_VAL),
        (ConfigWriteReq, NmpOp.WRITE, NmpGroup.CONFIG, NMP_ID_CONFIG_VAL),
        (CrashReq, NmpOp.WRITE, NmpGroup.CRASH, NMP_ID_CRASH_TRIGGER),
        (RunTestReq, NmpOp.WRITE, NmpGroup.RUN, NMP_ID_RUN_TEST),
        (RunListReq, NmpOp.READ, NmpGroup.RUN, NMP_ID_RUN_LIST),
        (ShellExecReq, NmpOp.WRITE, NmpGroup.SHELL, NMP_ID_SHELL_EXEC),
        (StatReadReq, NmpOp.READ, NmpGroup.STAT, NMP_ID_STAT_READ),
        (StatListReq, NmpOp.READ, NmpGroup.STAT, NMP_ID_STAT_LIST),
    ],
)
def test_request_headers(cls, op, group, id_):
    req = cls()
    assert (req.hdr.op, req.hdr.group, req.hdr.id) == (op, group, id_)
    assert req.hdr.len == 0


def test_requests_get_successive_seqs():
    a = ConfigReadReq()
    b = ConfigReadReq()
    assert b.hdr.seq == (a.hdr.seq + 1) & 0xFF


def test_config_write_omits_empty_fields():
    assert ConfigWriteReq().body() == {}
    body = ConfigWriteReq(name="a", val="b", save=True).body()
    assert body == {"name": "a", "val": "b", "save": True}


def test_config_read_req_body():
    assert ConfigReadReq(name="x/y").body() == {"name": "x/y"}


def test_crash_req_uses_t_key():
    assert CrashReq(crash_type="div0").body() == {"t": "div0"}


def test_run_test_req_body():
    body = RunTestReq(testname="all", token="token").body()
    assert body == {"testname": "all", "token": "token"}


def test_shell_exec_req_body():
    assert ShellExecReq(argv=["echo", "hi"]).body() == {"argv": ["echo", "hi"]}


def test_responses_from_body_round_trip():
    rsp = StatReadRsp(rc=0, name="s", group="g", fields={"a": 1})
    assert StatReadRsp._from_body(rsp.body()) == rsp

    shell = ShellExecRsp(o="out", rc=2)
    assert ShellExecRsp._from_body(shell.body()) == shell


def test_list_responses_use_own_keys():
    assert RunListRsp._from_body({"run_list": ["t1"]}).list == ["t1"]
    assert StatListRsp._from_body({"stat_list": ["s1", "s2"]}).list == ["s1", "s2"]
    assert ConfigReadRsp._from_body({"val": "v", "rc": 0}).val == "v"


def test_msg_holds_header_copy():
    req = StatReadReq(name="n")
    m = req.msg()
    assert m.body is req
    assert m.hdr == req.hdr
    m.hdr.len = 99
    assert req.hdr.len == 0