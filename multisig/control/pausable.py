"""
multisig.control.pausable
=========================

Global pause switch for the wallet.

Key Points
----------
- The paused flag is **global to the wallet** (single boolean in the store).
- Changing pause state requires the pausing capability, chosen at
  initialization by `PausePolicy`:
    * `OWNER`  : any OWNER_ROLE holder
    * `PAUSER` : any PAUSER_ROLE holder
- Transitions are strict: pausing while paused raises `AlreadyPaused`,
  unpausing while unpaused raises `NotPaused`.
- Notifications: `Paused {account}`, `Unpaused {account}`.

Guards
------
- `require_not_paused()` raises `Paused`; every mutating Approval Engine
  operation calls it.
- `require_paused()` raises `MustBePausedForUpgrade`; the Upgrade Gate calls it.
"""

from __future__ import annotations

import logging

from ..access.roles import RoleRegistry
from ..errors import AlreadyPaused, MustBePausedForUpgrade, NotPaused, Paused
from ..runtime.event_sink import NotificationSink
from ..state.store import MultisigStore
from ..types import events as ev
from ..types.events import Notification

log = logging.getLogger("multisig.control")


class PauseSwitch:
    def __init__(self, store: MultisigStore, roles: RoleRegistry, sink: NotificationSink) -> None:
        self._store = store
        self._roles = roles
        self._sink = sink

    @property
    def pauser_role(self) -> bytes:
        return self._store.pause_policy.role

    def is_paused(self) -> bool:
        return self._store.paused

    def require_not_paused(self) -> None:
        if self._store.paused:
            raise Paused()

    def require_paused(self) -> None:
        if not self._store.paused:
            raise MustBePausedForUpgrade()

    def pause(self, caller: bytes) -> None:
        self._roles.require_role(self.pauser_role, caller)
        if self._store.paused:
            raise AlreadyPaused()
        self._store.set_paused(True)
        self._sink.emit(Notification.make(ev.PAUSED, account=bytes(caller)))
        log.info("paused")

    def unpause(self, caller: bytes) -> None:
        self._roles.require_role(self.pauser_role, caller)
        if not self._store.paused:
            raise NotPaused()
        self._store.set_paused(False)
        self._sink.emit(Notification.make(ev.UNPAUSED, account=bytes(caller)))
        log.info("unpaused")


__all__ = ["PauseSwitch"]
