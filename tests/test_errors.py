import pytest

from nmxact.nmxutil.errors import (
    AlreadyError,
    BleHostError,
    BleSecurityError,
    BleSesnDisconnectError,
    NmxError,
    RspTimeoutError,
    ScanTmoError,
    SesnAlreadyOpenError,
    SesnClosedError,
    XportError,
    to_ble_host,
    to_ble_security,
)


@pytest.mark.parametrize(
    "cls",
    [
        RspTimeoutError,
        SesnAlreadyOpenError,
        SesnClosedError,
        ScanTmoError,
        XportError,
        AlreadyError,
        BleSecurityError,
    ],
)
def test_text_errors_carry_text(cls):
    err = cls("something failed")
    assert str(err) == "something failed"
    assert err.text == "something failed"
    assert isinstance(err, NmxError)


def test_disconnect_error_has_reason():
    err = BleSesnDisconnectError(19, "peer gone")
    assert err.reason == 19
    assert str(err) == "peer gone"


def test_host_error_has_status():
    err = BleHostError(7, "host says no")
    assert err.status == 7
    assert str(err) == "host says no"


def test_to_ble_host():
    err = BleHostError(3, "x")
    assert to_ble_host(err) is err
    assert to_ble_host(XportError("y")) is None
    assert to_ble_host(None) is None


def test_to_ble_security():
    err = BleSecurityError("bad key")
    assert to_ble_security(err) is err
    assert to_ble_security(BleHostError(1, "z")) is None


def test_errors_can_be_raised_and_caught_as_base():
    err = SesnClosedError("closed")
    with pytest.raises(NmxError, match="closed") as info:
        raise err
    assert info.value is err
    assert info.value.text == "closed"
    assert to_ble_host(info.value) is None