import cbor2
import pytest

from nmxact.nmp.defgroup import (
    DateTimeReadReq,
    DateTimeReadRsp,
    DateTimeWriteReq,
    EchoReq,
    EchoRsp,
    MempoolStatReq,
    MempoolStatRsp,
    ResetReq,
    TaskStatReq,
    TaskStatRsp,
)
from nmxact.nmp.header import (
    NMP_HDR_SIZE,
    NMP_ID_DEF_DATETIME_STR,
    NMP_ID_DEF_ECHO,
    NMP_ID_DEF_MPSTAT,
    NMP_ID_DEF_RESET,
    NMP_ID_DEF_TASKSTAT,
    NmpGroup,
    NmpOp,
    decode_nmp_hdr,
    encode_nmp_plain,
)


@pytest.mark.parametrize(
    "req,op,id_",
    [
        (EchoReq("x"), NmpOp.WRITE, NMP_ID_DEF_ECHO),
        (DateTimeReadReq(), NmpOp.READ, NMP_ID_DEF_DATETIME_STR),
        (DateTimeWriteReq("now"), NmpOp.WRITE, NMP_ID_DEF_DATETIME_STR),
        (ResetReq(), NmpOp.WRITE, NMP_ID_DEF_RESET),
        (MempoolStatReq(), NmpOp.READ, NMP_ID_DEF_MPSTAT),
        (TaskStatReq(), NmpOp.READ, NMP_ID_DEF_TASKSTAT),
    ],
)
def test_request_headers(req, op, id_):
    assert req.hdr.op == op
    assert req.hdr.group == NmpGroup.DEFAULT
    assert req.hdr.id == id_


def test_echo_body_key():
    assert EchoReq("hello").body() == {"d": "hello"}


def test_echo_encoding_round_trip():
    data = encode_nmp_plain(EchoReq("hello").msg())
    hdr = decode_nmp_hdr(data)
    assert hdr.len == len(data) - NMP_HDR_SIZE
    assert cbor2.loads(data[NMP_HDR_SIZE:]) == {"d": "hello"}


def test_empty_request_encodes_empty_map():
    data = encode_nmp_plain(ResetReq().msg())
    assert data[NMP_HDR_SIZE:] == b"\xa0"


def test_datetime_write_key():
    assert DateTimeWriteReq("2020-01-01T00:00:00").body() == {
        "datetime": "2020-01-01T00:00:00"
    }


def test_echo_rsp_from_body():
    rsp = EchoRsp._from_body({"r": "hi", "rc": 0})
    assert rsp == EchoRsp(payload="hi", rc=0)


def test_datetime_rsp_from_body():
    rsp = DateTimeReadRsp._from_body({"datetime": "t", "rc": 1})
    assert rsp.date_time == "t"
    assert rsp.rc == 1


def test_stat_rsps_from_body():
    pools = {"msys": {"blksiz": 16, "nblks": 4}}
    assert MempoolStatRsp._from_body({"rc": 0, "mpools": pools}).mpools == pools
    tasks = {"idle": {"prio": 255}}
    assert TaskStatRsp._from_body({"tasks": tasks}).tasks == tasks