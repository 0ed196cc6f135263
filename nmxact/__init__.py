"""Newtmgr management building blocks: NMP, CoAP, serial framing and BLE helpers."""

__version__ = "0.1.0"