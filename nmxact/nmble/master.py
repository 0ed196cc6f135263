"""Arbitration of the BLE device's master role between clients.

Only one master procedure (connecting or scanning) may run at a time.
Waiting primaries are served in request order and preempt an active
secondary; a secondary is served only when no primary is waiting.
"""

from __future__ import annotations

import enum
import logging
import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

log = logging.getLogger("nmxact.nmble")


class MasterState(enum.IntEnum):
    IDLE = 0
    SECONDARY = 1
    PRIMARY = 2
    PRIMARY_SECONDARY_PENDING = 3

    def __str__(self) -> str:
        return self.name.lower()


class Preemptable(ABC):
    """A secondary client that can be asked to give up the master role."""

    @abstractmethod
    def preempt(self) -> None:
        ...


@dataclass
class _Primary:
    token: Any
    ch: queue.Queue = field(default_factory=queue.Queue)


class Master:
    def __init__(self) -> None:
        self._primaries: list[_Primary] = []
        self._secondary: Optional[Preemptable] = None
        self._state = MasterState.IDLE
        self._secondary_ready: queue.Queue = queue.Queue()
        self._lock = threading.Lock()

    @property
    def state(self) -> MasterState:
        with self._lock:
            return self._state

    @property
    def secondary(self) -> Optional[Preemptable]:
        return self._secondary

    @property
    def waiting_primaries(self) -> int:
        with self._lock:
            return len(self._primaries)

    def set_secondary(self, secondary: Optional[Preemptable]) -> None:
        """Replace the secondary; raise RuntimeError while it is in use."""
        with self._lock:
            if self._state in (
                MasterState.SECONDARY,
                MasterState.PRIMARY_SECONDARY_PENDING,
            ):
                raise RuntimeError(
                    "cannot replace master secondary while it is in use"
                )
            self._secondary = secondary

    def _set_state(self, state: MasterState) -> None:
        log.debug("Master state change: %s --> %s", self._state, state)
        self._state = state

    def _preempt_secondary(self) -> None:
        secondary = self._secondary
        if secondary is not None:
            threading.Thread(target=secondary.preempt, daemon=True).start()

    def acquire_primary(self, token: Any) -> None:
        """Block until the master is held for ``token``; raise on abort."""
        with self._lock:
            if self._state == MasterState.IDLE:
                self._set_state(MasterState.PRIMARY)
                return
            waiter = _Primary(token)
            self._primaries.append(waiter)
            if self._state == MasterState.SECONDARY:
                self._preempt_secondary()

        err = waiter.ch.get()
        if err is not None:
            raise err

    def acquire_secondary(self) -> None:
        """Block until the secondary holds the master; raise on abort."""
        with self._lock:
            if self._state == MasterState.IDLE:
                self._set_state(MasterState.SECONDARY)
                return
            if self._state in (
                MasterState.SECONDARY,
                MasterState.PRIMARY_SECONDARY_PENDING,
            ):
                raise RuntimeError(
                    "Attempt to perform more than one secondary master procedure"
                )
            self._set_state(MasterState.PRIMARY_SECONDARY_PENDING)

        err = self._secondary_ready.get()
        if err is not None:
            raise err

    def _service_secondary(self, err: Optional[BaseException]) -> None:
        self._secondary_ready.put(err)

    def _service_primary(self, err: Optional[BaseException]) -> None:
        nxt = self._primaries.pop(0)
        nxt.ch.put(err)

    def release(self) -> None:
        """Give up the master; the next waiter, if any, takes it."""
        with self._lock:
            state = self._state
            if state == MasterState.IDLE:
                raise RuntimeError("master released while not held")
            if state == MasterState.SECONDARY:
                if not self._primaries:
                    self._set_state(MasterState.IDLE)
                else:
                    self._set_state(MasterState.PRIMARY)
                    self._service_primary(None)
            elif state == MasterState.PRIMARY:
                if not self._primaries:
                    self._set_state(MasterState.IDLE)
                else:
                    self._service_primary(None)
            else:
                if not self._primaries:
                    self._set_state(MasterState.SECONDARY)
                    self._service_secondary(None)
                else:
                    self._service_primary(None)

    def stop_waiting_primary(self, token: Any, err: BaseException) -> None:
        """Remove ``token`` from the wait queue; its waiter receives ``err``."""
        with self._lock:
            for i, waiter in enumerate(self._primaries):
                if waiter.token == token:
                    del self._primaries[i]
                    waiter.ch.put(err)
                    return

    def stop_waiting_secondary(self, err: BaseException) -> None:
        """Abandon a pending secondary acquisition."""
        with self._lock:
            if self._state == MasterState.PRIMARY_SECONDARY_PENDING:
                self._set_state(MasterState.PRIMARY)
                self._service_secondary(
                    RuntimeError("secondary aborted master acquisition")
                )

    def abort(self, err: BaseException) -> None:
        """Fail every waiter with ``err``; the current owner must still release."""
        with self._lock:
            if self._state == MasterState.SECONDARY:
                self._preempt_secondary()
            elif self._state == MasterState.PRIMARY_SECONDARY_PENDING:
                self._service_secondary(err)
                self._set_state(MasterState.PRIMARY)

            while self._primaries:
                self._service_primary(err)