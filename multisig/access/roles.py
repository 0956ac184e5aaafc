"""
multisig.access.roles
=====================

Role-Based Access Control over the wallet store.

Design
------
- **Bytes32 role identifiers** (see `multisig.types.roles`).
- **Admin policy** decides who may grant/revoke a role:
    * `AdminPolicy.SUPER_ADMIN`  : holders of `DEFAULT_ADMIN_ROLE` administer
      every role, unless `set_role_admin` bound a specific admin role.
    * `AdminPolicy.ROLE_MEMBERS` : members of a role administer that role,
      unless `set_role_admin` bound a specific admin role.
- **Idempotent mutations**: granting an existing member or revoking a missing
  one is a no-op and emits nothing. Authorization is still checked first.
- **Independent roles**: revoking OWNER never touches UPGRADER or PAUSER.

API surface
-----------
- Queries: `has_role`, `get_role_admin`, `is_admin_for_role`, `members`
- Guards:  `require_role` (raises Unauthorized)
- Mutations: `grant_role`, `revoke_role`, `renounce_role`, `set_role_admin`

Notifications
-------------
- RoleGranted      : {role, account, sender}
- RoleRevoked      : {role, account, sender}
- RoleAdminChanged : {role, previous_admin_role, new_admin_role}

Risks
-----
Revoking the last OWNER, or enough owners that the threshold becomes
unreachable, is permitted. Both situations are logged as warnings.
"""

from __future__ import annotations

import logging
from typing import Tuple

from ..errors import InvalidConfiguration, Unauthorized
from ..runtime.event_sink import NotificationSink
from ..state.store import MultisigStore
from ..types import events as ev
from ..types.address import is_null, short
from ..types.events import Notification
from ..types.roles import (DEFAULT_ADMIN_ROLE, OWNER_ROLE, AdminPolicy,
                           normalize_role, role_name)

log = logging.getLogger("multisig.access")


class RoleRegistry:
    def __init__(self, store: MultisigStore, sink: NotificationSink) -> None:
        self._store = store
        self._sink = sink

    # ---- Queries ------------------------------------------------------------

    def has_role(self, role: bytes, account: bytes) -> bool:
        """Pure lookup; never raises for well-formed input."""
        if is_null(account):
            return False
        return self._store.is_member(bytes(role), bytes(account))

    def members(self, role: bytes) -> Tuple[bytes, ...]:
        return self._store.members(bytes(role))

    def get_role_admin(self, role: bytes) -> bytes:
        """
        Admin role-id for `role`: the explicitly bound one, else the policy default
        (DEFAULT_ADMIN_ROLE under SUPER_ADMIN, the role itself under ROLE_MEMBERS).
        """
        role = normalize_role(role)
        bound = self._store.role_admin(role)
        if bound is not None:
            return bound
        if self._store.admin_policy is AdminPolicy.ROLE_MEMBERS:
            return role
        return DEFAULT_ADMIN_ROLE

    def is_admin_for_role(self, role: bytes, caller: bytes) -> bool:
        return self.has_role(self.get_role_admin(role), caller)

    def require_role(self, role: bytes, caller: bytes) -> None:
        if not self.has_role(role, caller):
            raise Unauthorized(caller=caller, role=role_name(role))

    # ---- Mutations ----------------------------------------------------------

    def grant_role(self, caller: bytes, role: bytes, account: bytes) -> bool:
        """
        Grant `role` to `account`. Only callable by an admin of `role`.
        Returns True if membership changed.
        """
        role = normalize_role(role)
        self._require_admin(role, caller)
        if is_null(account):
            raise InvalidConfiguration("cannot grant a role to a null account")
        if not self._store.add_member(role, bytes(account)):
            return False
        self._sink.emit(
            Notification.make(ev.ROLE_GRANTED, role=role, account=bytes(account), sender=bytes(caller))
        )
        log.info(
            "role granted",
            extra={"role": role_name(role), "account": short(account)},
        )
        return True

    def revoke_role(self, caller: bytes, role: bytes, account: bytes) -> bool:
        """
        Revoke `role` from `account`. Only callable by an admin of `role`.
        Returns True if membership changed.
        """
        role = normalize_role(role)
        self._require_admin(role, caller)
        return self._remove(role, bytes(account), sender=bytes(caller))

    def renounce_role(self, caller: bytes, role: bytes) -> bool:
        """Caller removes itself from `role`. No admin capability needed."""
        role = normalize_role(role)
        return self._remove(role, bytes(caller), sender=bytes(caller))

    def set_role_admin(self, caller: bytes, role: bytes, admin_role: bytes) -> None:
        """
        Bind `admin_role` as the administering role of `role`.
        Only callable by the *current* admin of `role`. No-op if unchanged.
        """
        role = normalize_role(role)
        admin_role = normalize_role(admin_role)
        self._require_admin(role, caller)
        prev = self.get_role_admin(role)
        if prev == admin_role:
            return
        self._store.set_role_admin(role, admin_role)
        self._sink.emit(
            Notification.make(
                ev.ROLE_ADMIN_CHANGED,
                role=role,
                previous_admin_role=prev,
                new_admin_role=admin_role,
            )
        )
        log.info(
            "role admin changed",
            extra={"role": role_name(role), "admin_role": role_name(admin_role)},
        )

    def seed(self, role: bytes, account: bytes) -> bool:
        """
        Unchecked grant used while the wallet initializes. The sender recorded in
        the notification is the wallet itself.
        """
        role = normalize_role(role)
        if not self._store.add_member(role, bytes(account)):
            return False
        self._sink.emit(
            Notification.make(
                ev.ROLE_GRANTED, role=role, account=bytes(account), sender=self._store.address
            )
        )
        return True

    # ---- Internals ----------------------------------------------------------

    def _require_admin(self, role: bytes, caller: bytes) -> None:
        if not self.is_admin_for_role(role, caller):
            raise Unauthorized(
                "caller is not an admin for role",
                caller=caller,
                role=role_name(self.get_role_admin(role)),
            )

    def _remove(self, role: bytes, account: bytes, *, sender: bytes) -> bool:
        if not self._store.remove_member(role, account):
            return False
        self._sink.emit(Notification.make(ev.ROLE_REVOKED, role=role, account=account, sender=sender))
        log.info("role revoked", extra={"role": role_name(role), "account": short(account)})
        if role == OWNER_ROLE:
            self._warn_owner_risks()
        return True

    def _warn_owner_risks(self) -> None:
        remaining = len(self._store.members(OWNER_ROLE))
        if remaining == 0:
            log.warning("no owners remain; submit/confirm/execute are permanently unavailable")
        elif remaining < self._store.threshold:
            log.warning(
                "threshold unreachable with remaining owners",
                extra={"owners": remaining, "threshold": self._store.threshold},
            )


__all__ = ["RoleRegistry"]
