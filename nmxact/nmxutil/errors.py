"""Error types raised by the management transaction layer."""

from __future__ import annotations


class NmxError(Exception):
    """Base class for all errors carrying a text description."""

    def __init__(self, text: str) -> None:
        super().__init__(text)
        self.text = text

    def __str__(self) -> str:
        return self.text


class RspTimeoutError(NmxError):
    """An application-layer request was sent but no response arrived."""


class BleSesnDisconnectError(NmxError):
    """The BLE peer disconnected; ``reason`` holds the HCI reason code."""

    def __init__(self, reason: int, text: str) -> None:
        super().__init__(text)
        self.reason = reason


class SesnAlreadyOpenError(NmxError):
    """Attempt to open a session that is already open."""


class SesnClosedError(NmxError):
    """Attempt to use or close a session that is closed."""


class ScanTmoError(NmxError):
    """A BLE scan ended without finding what was sought."""


class XportError(NmxError):
    """A low-level transport failure."""


class BleHostError(NmxError):
    """An error reported by the BLE host; ``status`` holds its code."""

    def __init__(self, status: int, text: str) -> None:
        super().__init__(text)
        self.status = status


class AlreadyError(NmxError):
    """Attempt to transition to the state that is already current."""


class BleSecurityError(NmxError):
    """A pairing failure due to missing or mismatched key material."""


def to_ble_host(err: BaseException | None) -> BleHostError | None:
    """Return ``err`` if it is a BLE host error, otherwise None."""
    return err if isinstance(err, BleHostError) else None


def to_ble_security(err: BaseException | None) -> BleSecurityError | None:
    """Return ``err`` if it is a BLE security error, otherwise None."""
    return err if isinstance(err, BleSecurityError) else None