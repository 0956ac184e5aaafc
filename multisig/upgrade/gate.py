"""
multisig.upgrade.gate — role- and pause-gated replacement of the logic module.

`authorize_upgrade(caller, new_logic)` checks, in this order:
  1. caller holds UPGRADER_ROLE                      → Unauthorized
  2. the pause switch is engaged                     → MustBePausedForUpgrade
  3. new_logic advertises the active module's UUID   → InvalidConfiguration

On success the store's implementation pointer is replaced and
`Upgraded {implementation}` is emitted. Nothing else in the store changes.
Re-installing the active module is accepted.
"""

from __future__ import annotations

import logging
from typing import Any

from ..access.roles import RoleRegistry
from ..control.pausable import PauseSwitch
from ..errors import InvalidConfiguration
from ..runtime.event_sink import NotificationSink
from ..state.store import MultisigStore
from ..types import events as ev
from ..types.events import Notification
from ..types.roles import UPGRADER_ROLE

log = logging.getLogger("multisig.upgrade")


def _ident(module: Any) -> str:
    ident = getattr(module, "ident", None)
    if ident:
        return str(ident)
    return f"{getattr(module, 'name', type(module).__name__)}@{getattr(module, 'version', '?')}"


class UpgradeGate:
    def __init__(
        self,
        store: MultisigStore,
        roles: RoleRegistry,
        pause: PauseSwitch,
        sink: NotificationSink,
    ) -> None:
        self._store = store
        self._roles = roles
        self._pause = pause
        self._sink = sink

    def authorize_upgrade(self, caller: bytes, new_logic: Any) -> None:
        self._roles.require_role(UPGRADER_ROLE, caller)
        self._pause.require_paused()

        uuid_fn = getattr(new_logic, "proxiable_uuid", None)
        if not callable(uuid_fn) or not callable(getattr(new_logic, "bind", None)):
            raise InvalidConfiguration("new implementation is not a logic module")
        current = self._store.implementation
        new_uuid = uuid_fn()
        if current is not None and new_uuid != current.proxiable_uuid():
            raise InvalidConfiguration(
                "incompatible logic module",
                data={
                    "expected": "0x" + current.proxiable_uuid().hex(),
                    "got": "0x" + bytes(new_uuid).hex(),
                },
            )

        previous = _ident(current) if current is not None else None
        self._store.set_implementation(new_logic)
        self._sink.emit(Notification.make(ev.UPGRADED, implementation=_ident(new_logic)))
        log.info("logic module upgraded", extra={"from": previous, "to": _ident(new_logic)})


__all__ = ["UpgradeGate"]
