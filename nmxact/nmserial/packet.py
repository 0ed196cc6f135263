"""Accumulation buffer for one incoming serial packet."""

from __future__ import annotations


class Packet:
    """Collects bytes until ``expected_len`` of them have arrived."""

    def __init__(self, expected_len: int) -> None:
        self.expected_len = expected_len
        self._buffer = bytearray()

    def add_bytes(self, data: bytes) -> bool:
        """Append data; return True once the packet is complete."""
        self._buffer += data
        return len(self._buffer) >= self.expected_len

    def get_bytes(self) -> bytes:
        return bytes(self._buffer)

    def trim_end(self, count: int) -> None:
        """Drop up to ``count`` bytes from the end."""
        count = min(count, len(self._buffer))
        if count > 0:
            del self._buffer[-count:]