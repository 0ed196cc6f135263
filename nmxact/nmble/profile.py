"""The GATT profile discovered on a BLE peer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Hashable, Optional

# Characteristic property bits defined by the Bluetooth specification.
CHR_PROP_NOTIFY = 0x10
CHR_PROP_INDICATE = 0x20


@dataclass(frozen=True)
class ChrId:
    """Identifies a characteristic by its service and characteristic UUIDs."""

    svc_uuid: Hashable
    chr_uuid: Hashable

    def __str__(self) -> str:
        return f"s={self.svc_uuid} c={self.chr_uuid}"


@dataclass(eq=False)
class Descriptor:
    uuid: Hashable
    handle: int
    att_flags: int = 0


@dataclass(eq=False)
class Characteristic:
    uuid: Hashable
    def_handle: int = 0
    val_handle: int = 0
    properties: int = 0
    dscs: list = field(default_factory=list)

    def __str__(self) -> str:
        return str(self.uuid)

    def subscribe_type(self) -> int:
        """Return the notify or indicate bit to subscribe with, or 0."""
        if self.properties & CHR_PROP_NOTIFY:
            return CHR_PROP_NOTIFY
        return self.properties & CHR_PROP_INDICATE


@dataclass(eq=False)
class Service:
    uuid: Hashable
    start_handle: int = 0
    end_handle: int = 0
    chrs: list = field(default_factory=list)


class Profile:
    def __init__(self) -> None:
        self._svcs: list[Service] = []
        self._chrs: dict[ChrId, Characteristic] = {}
        self._attrs: dict[int, Characteristic] = {}

    def services(self) -> list[Service]:
        return self._svcs

    def set_services(self, svcs: list[Service]) -> None:
        """Replace the profile and rebuild its lookup tables."""
        self._svcs = svcs
        self._chrs = {}
        self._attrs = {}
        for svc in svcs:
            for chr_ in svc.chrs:
                self._chrs[ChrId(svc.uuid, chr_.uuid)] = chr_
                self._attrs[chr_.val_handle] = chr_

    def find_chr_by_uuid(self, chr_id: ChrId) -> Optional[Characteristic]:
        return self._chrs.get(chr_id)

    def find_chr_by_handle(self, handle: int) -> Optional[Characteristic]:
        return self._attrs.get(handle)


def find_dsc_by_uuid(chr_: Characteristic, uuid: Any) -> Optional[Descriptor]:
    """Return the first descriptor of ``chr_`` with ``uuid``, if any."""
    return next((d for d in chr_.dscs if d.uuid == uuid), None)