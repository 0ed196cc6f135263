import pytest

from nmxact.nmp.defgroup import EchoReq, EchoRsp
from nmxact.nmp.dispatch import Dispatcher, Listener, decode_rsp
from nmxact.nmp.header import (
    NMP_ID_DEF_ECHO,
    NmpGroup,
    NmpHdr,
    NmpOp,
    encode_nmp_plain,
)
from nmxact.nmxutil.bcast import ChannelClosed


def _echo_pkt(seq, payload="hi"):
    rsp = EchoRsp(
        payload=payload,
        rc=0,
        hdr=NmpHdr(
            op=NmpOp.WRITE_RSP, group=NmpGroup.DEFAULT, seq=seq, id=NMP_ID_DEF_ECHO
        ),
    )
    return rsp, encode_nmp_plain(rsp.msg())


def test_decode_rsp_returns_response():
    rsp, pkt = _echo_pkt(3)
    decoded = decode_rsp(pkt)
    assert decoded == rsp
    assert decoded.hdr.seq == 3


def test_decode_rsp_ignores_requests():
    req = EchoReq(payload="x")
    assert decode_rsp(encode_nmp_plain(req.msg())) is None


def test_decode_rsp_short_packet_raises():
    with pytest.raises(ValueError):
        decode_rsp(b"\x01\x02")


def test_dispatch_delivers_to_listener():
    d = Dispatcher()
    nl = d.add_listener(9)
    rsp, pkt = _echo_pkt(9)
    assert d.dispatch(pkt) is True
    got = nl.rsp_chan.get(timeout=1)
    assert got == rsp
    assert got.hdr.seq == 9


def test_dispatch_fragments():
    d = Dispatcher()
    nl = d.add_listener(4)
    rsp, pkt = _echo_pkt(4, payload="fragmented payload")
    assert d.dispatch(pkt[:5]) is False
    assert d.dispatch(pkt[5:12]) is False
    assert d.dispatch(pkt[12:]) is True
    assert nl.rsp_chan.get(timeout=1).payload == "fragmented payload"


def test_dispatch_without_listener():
    d = Dispatcher()
    _, pkt = _echo_pkt(1)
    assert d.dispatch(pkt) is False


def test_dispatch_ignores_request_packets():
    d = Dispatcher()
    req = EchoReq(payload="x")
    d.add_listener(req.hdr.seq)
    assert d.dispatch(encode_nmp_plain(req.msg())) is False


def test_duplicate_listener_raises():
    d = Dispatcher()
    d.add_listener(1)
    with pytest.raises(ValueError, match="Duplicate NMP listener"):
        d.add_listener(1)


def test_remove_listener_closes_it():
    d = Dispatcher()
    nl = d.add_listener(2)
    assert d.remove_listener(2) is nl
    with pytest.raises(ChannelClosed):
        nl.rsp_chan.get(timeout=1)
    assert d.remove_listener(2) is None
    _, pkt = _echo_pkt(2)
    assert d.dispatch(pkt) is False


def test_error_one():
    d = Dispatcher()
    nl = d.add_listener(6)
    err = RuntimeError("boom")
    d.error_one(6, err)
    assert nl.err_chan.get(timeout=1) is err
    with pytest.raises(ValueError, match="No NMP listener"):
        d.error_one(7, err)


def test_error_all():
    d = Dispatcher()
    listeners = [d.add_listener(seq) for seq in (10, 11, 12)]
    err = RuntimeError("down")
    d.error_all(err)
    assert [nl.err_chan.get(timeout=1) for nl in listeners] == [err, err, err]


def test_after_timeout_fires():
    nl = Listener()
    ch = nl.after_timeout(0.01)
    stamp = ch.get(timeout=2)
    assert stamp > 0
    nl.close()
    assert ch.closed is True


def test_close_before_timeout_suppresses_it():
    nl = Listener()
    ch = nl.after_timeout(5)
    nl.close()
    with pytest.raises(ChannelClosed):
        ch.get(timeout=1)