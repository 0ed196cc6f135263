import queue

import pytest

from nmxact.nmble.listen import (
    BLE_SEQ_NONE,
    Listener,
    ListenerKey,
    ListenerMap,
    seq_key,
    tch_key,
)


def test_seq_key_fields():
    assert seq_key(7) == ListenerKey(seq=7, type=-1, conn_handle=-1)


def test_tch_key_fields():
    key = tch_key(3, 5)
    assert key.seq == BLE_SEQ_NONE
    assert (key.type, key.conn_handle) == (3, 5)


def test_find_prefers_seq_key():
    lm = ListenerMap()
    by_seq = Listener()
    by_tch = Listener()
    lm.add_listener(seq_key(10), by_seq)
    lm.add_listener(tch_key(2, 1), by_tch)
    key, found = lm.find_listener(10, 2, 1)
    assert found is by_seq
    assert key == seq_key(10)


def test_find_falls_back_to_tch_then_wildcard():
    lm = ListenerMap()
    exact = Listener()
    wildcard = Listener()
    lm.add_listener(tch_key(2, 1), exact)
    lm.add_listener(tch_key(2, -1), wildcard)
    assert lm.find_listener(99, 2, 1)[1] is exact
    assert lm.find_listener(99, 2, 4)[1] is wildcard


def test_find_missing_returns_none():
    lm = ListenerMap()
    key, found = lm.find_listener(1, 2, 3)
    assert found is None
    assert key == tch_key(2, -1)


def test_duplicate_key_rejected():
    lm = ListenerMap()
    lm.add_listener(seq_key(1), Listener())
    with pytest.raises(ValueError):
        lm.add_listener(seq_key(1), Listener())


def test_duplicate_listener_rejected():
    lm = ListenerMap()
    bl = Listener()
    lm.add_listener(seq_key(1), bl)
    with pytest.raises(ValueError):
        lm.add_listener(seq_key(2), bl)


def test_remove_listener_and_key():
    lm = ListenerMap()
    a, b = Listener(), Listener()
    lm.add_listener(seq_key(1), a)
    lm.add_listener(seq_key(2), b)
    assert lm.remove_listener(a) == seq_key(1)
    assert lm.remove_listener(a) is None
    assert lm.remove_key(seq_key(2)) is b
    assert lm.remove_key(seq_key(2)) is None
    assert len(lm) == 0


def test_extract_all_empties_map():
    lm = ListenerMap()
    a, b = Listener(), Listener()
    lm.add_listener(seq_key(1), a)
    lm.add_listener(seq_key(2), b)
    extracted = lm.extract_all()
    assert set(extracted) == {a, b}
    assert len(lm) == 0
    assert lm.find_listener(1, -1, -1)[1] is None


def test_close_drains_and_acks():
    bl = Listener()
    bl.msg_queue.put("msg")
    bl.err_queue.put(RuntimeError("x"))
    bl.close()
    assert bl.acked
    assert bl.msg_queue.empty()
    assert bl.err_queue.empty()


def test_after_timeout_delivers_time():
    bl = Listener()
    q = bl.after_timeout(0.01)
    stamp = q.get(timeout=2)
    assert stamp > 0


def test_after_timeout_suppressed_when_acked():
    bl = Listener()
    bl.acked = True
    q = bl.after_timeout(0.01)
    with pytest.raises(queue.Empty):
        q.get(timeout=0.2)