from nmxact.nmp.frag import Reassembler
from nmxact.nmp.header import NmpHdr


def _packet(body: bytes) -> bytes:
    return NmpHdr(op=1, len=len(body), group=0, seq=4, id=0).to_bytes() + body


def test_single_fragment_packet():
    pkt = _packet(b"\xa1\x61\x72\x00")
    assert Reassembler().rx_frag(pkt) == pkt


def test_reassembles_multiple_fragments():
    pkt = _packet(b"abcdefghij")
    r = Reassembler()
    assert r.rx_frag(pkt[:3]) is None
    assert r.rx_frag(pkt[3:12]) is None
    assert r.rx_frag(pkt[12:]) == pkt


def test_state_reset_after_complete_packet():
    first = _packet(b"xy")
    second = _packet(b"z")
    r = Reassembler()
    assert r.rx_frag(first) == first
    assert r.rx_frag(second) == second


def test_excess_data_discards_packet():
    pkt = _packet(b"ab") + b"extra"
    r = Reassembler()
    assert r.rx_frag(pkt) is None
    good = _packet(b"q")
    assert r.rx_frag(good) == good


def test_empty_body_packet():
    pkt = _packet(b"")
    assert Reassembler().rx_frag(pkt) == pkt