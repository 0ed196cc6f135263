import threading

import pytest

from nmxact.nmble.listen import Listener, ListenerMap, seq_key, tch_key
from nmxact.nmble.receiver import Receiver


class _FakeTransport:
    def __init__(self):
        self.lm = ListenerMap()

    def add_listener(self, key):
        bl = Listener()
        self.lm.add_listener(key, bl)
        return bl

    def remove_key(self, key):
        bl = self.lm.remove_key(key)
        if bl is not None:
            bl.close()
        return bl

    def remove_listener(self, listener):
        key = self.lm.remove_listener(listener)
        if key is not None:
            listener.close()
        return key


def test_add_registers_with_transport():
    bx = _FakeTransport()
    r = Receiver(1, bx)
    bl = r.add_listener("x", seq_key(5))
    assert bx.lm.find_listener(5, -1, -1)[1] is bl
    assert r.wait_until_no_listeners(timeout=0) is False


def test_remove_listener_returns_key():
    bx = _FakeTransport()
    r = Receiver(1, bx)
    bl = r.add_listener("x", seq_key(5))
    assert r.remove_listener("x", bl) == seq_key(5)
    assert bl.closed
    assert r.remove_listener("x", bl) is None
    assert r.wait_until_no_listeners(timeout=0) is True


def test_remove_key():
    bx = _FakeTransport()
    r = Receiver(1, bx)
    key = tch_key(3, 7)
    bl = r.add_listener("x", key)
    assert r.remove_key("x", key) is bl
    assert r.remove_key("x", key) is None
    assert len(bx.lm) == 0


def test_duplicate_add_raises_and_is_not_counted():
    bx = _FakeTransport()
    r = Receiver(1, bx)
    bl = r.add_listener("x", seq_key(1))
    with pytest.raises(ValueError):
        r.add_listener("x", seq_key(1))
    r.remove_listener("x", bl)
    assert r.wait_until_no_listeners(timeout=0) is True


def test_remove_all():
    bx = _FakeTransport()
    r = Receiver(1, bx)
    r.add_listener("a", seq_key(1))
    r.add_listener("b", seq_key(2))
    r.remove_all("shutdown")
    assert len(bx.lm) == 0
    assert r.wait_until_no_listeners(timeout=0) is True


def test_wait_unblocks_on_removal():
    bx = _FakeTransport()
    r = Receiver(1, bx)
    bl = r.add_listener("x", seq_key(9))
    assert r.wait_until_no_listeners(timeout=0) is False

    result = {}

    def waiter():
        result["ok"] = r.wait_until_no_listeners(5)

    t = threading.Thread(target=waiter, daemon=True)
    t.start()
    assert r.remove_listener("x", bl) == seq_key(9)
    t.join(5)
    assert result == {"ok": True}