"""
multisig.wallet — the wallet facade.

`MultisigWallet` wires the pieces together and is the only entry point callers
need:

    store   : MultisigStore      all persistent state (stable across upgrades)
    roles   : RoleRegistry       membership and admin capability
    pauser  : PauseSwitch        global pause gate
    gate    : UpgradeGate        role/pause-gated logic replacement
    logic   : store.implementation, resolved on every approval call

Call discipline
---------------
Every operation runs inside `_call()`:
  * a per-wallet re-entrant lock serializes threads; reentrant calls made by
    the executor on the same thread proceed and meet the ordering guards
  * a journal checkpoint and a notification mark are taken up front
  * if the operation raises, store writes since the checkpoint are undone and
    notifications staged since the mark are dropped before the error propagates
  * when the outermost call returns, staged notifications are published

Example
-------
    w = MultisigWallet()
    w.initialize([a, b, c], 2)
    tx = w.submit(a, dest, 10)
    w.confirm(a, tx); w.confirm(b, tx)
    result = w.execute(a, tx)
"""

from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager
from typing import (Any, Callable, Iterable, Iterator, List, Optional,
                    Sequence, Tuple, Union)

from .access.roles import RoleRegistry
from .config import MultisigConfig, get_config
from .control.pausable import PauseSwitch
from .engine.approvals import ApprovalEngine, EngineContext
from .errors import (AlreadyInitialized, InvalidConfiguration, MultisigError,
                     NotInitialized)
from .logging import trace_scope
from .runtime.event_sink import NotificationSink, Subscriber
from .runtime.executor import ActionExecutor, InMemoryLedger
from .state.store import MultisigStore
from .types import events as ev
from .types.address import PrincipalLike, is_null, short, to_principal
from .types.events import Notification
from .types.result import CallResult
from .types.roles import (DEFAULT_ADMIN_ROLE, OWNER_ROLE, PAUSER_ROLE,
                          UPGRADER_ROLE, AdminPolicy, PausePolicy,
                          normalize_role, role_from_name)
from .types.tx import TransactionRecord, TxState
from .upgrade.gate import UpgradeGate
from .upgrade.logic import ApprovalLogic, LogicModule

log = logging.getLogger("multisig.wallet")

RoleLike = Union[str, bytes]


def _principal(v: Optional[PrincipalLike], what: str = "principal") -> bytes:
    try:
        return to_principal(v)
    except (TypeError, ValueError) as e:
        raise InvalidConfiguration(f"invalid {what}: {e}") from e


def _role(v: RoleLike) -> bytes:
    try:
        if isinstance(v, str):
            return role_from_name(v)
        return normalize_role(v)
    except ValueError as e:
        raise InvalidConfiguration(str(e)) from e


def _principals(items: Iterable[PrincipalLike], what: str) -> List[bytes]:
    out: List[bytes] = []
    for item in items:
        p = _principal(item, what)
        if is_null(p):
            raise InvalidConfiguration(f"{what} must not be null")
        if p in out:
            raise InvalidConfiguration(f"duplicate {what}", data={what: "0x" + p.hex()})
        out.append(p)
    return out


class MultisigWallet:
    def __init__(
        self,
        address: Optional[PrincipalLike] = None,
        *,
        executor: Optional[ActionExecutor] = None,
        config: Optional[MultisigConfig] = None,
        logic: Optional[LogicModule] = None,
    ) -> None:
        self.config = config or get_config()
        self.address = _principal(address, "address") if address is not None else os.urandom(20)
        self._lock = threading.RLock()
        self._depth = 0

        self.store = MultisigStore(self.address)
        self.sink = NotificationSink()
        self.roles = RoleRegistry(self.store, self.sink)
        self.pauser = PauseSwitch(self.store, self.roles, self.sink)
        self.gate = UpgradeGate(self.store, self.roles, self.pauser, self.sink)
        self.executor: ActionExecutor = executor if executor is not None else InMemoryLedger(self.address)
        self._ctx = EngineContext(
            store=self.store,
            roles=self.roles,
            pause=self.pauser,
            sink=self.sink,
            executor=self.executor,
            limits=self.config.limits,
        )
        # Outside any checkpoint, so not journaled.
        self.store.set_implementation(logic if logic is not None else ApprovalLogic())

    # ------------------------------------------------------------------ plumbing

    @contextmanager
    def _call(self, op: str, caller: Optional[bytes] = None, *, require_init: bool = True) -> Iterator[None]:
        with self._lock:
            fields = {"wallet": short(self.address), "op": op}
            if caller is not None:
                fields["caller"] = short(caller)
            with trace_scope(**fields):
                journal = self.store.journal
                marker = journal.checkpoint()
                mark = self.sink.mark()
                self._depth += 1
                try:
                    if require_init and not self.store.initialized:
                        raise NotInitialized()
                    yield
                except BaseException as exc:
                    journal.revert(marker)
                    self.sink.truncate(mark)
                    code = exc.code if isinstance(exc, MultisigError) else type(exc).__name__
                    log.debug("call rejected", extra={"code": code})
                    raise
                else:
                    journal.commit(marker)
                finally:
                    self._depth -= 1
                if self._depth == 0:
                    self.sink.flush()

    def _engine(self) -> ApprovalEngine:
        return self.store.implementation.bind(self._ctx)

    # ------------------------------------------------------------------ lifecycle

    def initialize(
        self,
        owners: Sequence[PrincipalLike],
        threshold: int,
        *,
        upgraders: Iterable[PrincipalLike] = (),
        pausers: Optional[Iterable[PrincipalLike]] = None,
        admins: Optional[Iterable[PrincipalLike]] = None,
        pause_policy: Union[PausePolicy, str, None] = None,
        admin_policy: Union[AdminPolicy, str, None] = None,
    ) -> None:
        """
        One-time setup: owners, threshold, capability holders and policies.

        Defaults:
          pause_policy / admin_policy come from the loaded config.
          pausers default to the owners (used under PausePolicy.PAUSER only).
          admins (DEFAULT_ADMIN holders) default to the upgraders if any,
          otherwise to the owners. They are seeded under SUPER_ADMIN only,
          unless given explicitly.

        Raises:
            AlreadyInitialized   on a second call
            InvalidConfiguration for empty/duplicate/null owners, too many owners,
                                 or threshold outside 1..len(owners)
        """
        with self._call("initialize", require_init=False):
            if self.store.initialized:
                raise AlreadyInitialized()

            owner_list = _principals(owners, "owner")
            if not owner_list:
                raise InvalidConfiguration("owners must not be empty")
            max_owners = self.config.limits.max_owners
            if len(owner_list) > max_owners:
                raise InvalidConfiguration(
                    "too many owners", data={"owners": len(owner_list), "max": max_owners}
                )
            if isinstance(threshold, bool) or not isinstance(threshold, int):
                raise InvalidConfiguration("threshold must be an integer")
            if not 1 <= threshold <= len(owner_list):
                raise InvalidConfiguration(
                    "threshold out of range", data={"threshold": threshold, "owners": len(owner_list)}
                )

            try:
                pp = (
                    pause_policy
                    if isinstance(pause_policy, PausePolicy)
                    else PausePolicy.from_str(pause_policy or "", default=self.config.policies.pause_policy)
                )
                ap = (
                    admin_policy
                    if isinstance(admin_policy, AdminPolicy)
                    else AdminPolicy.from_str(admin_policy or "", default=self.config.policies.admin_policy)
                )
            except ValueError as e:
                raise InvalidConfiguration(str(e)) from e

            upgrader_list = _principals(upgraders, "upgrader")
            if pausers is not None:
                pauser_list = _principals(pausers, "pauser")
            else:
                pauser_list = list(owner_list) if pp is PausePolicy.PAUSER else []
            if admins is not None:
                admin_list = _principals(admins, "admin")
            elif ap is AdminPolicy.SUPER_ADMIN:
                admin_list = list(upgrader_list or owner_list)
            else:
                admin_list = []

            self.store.set_initialized(threshold, pp, ap)
            for role, members in (
                (OWNER_ROLE, owner_list),
                (UPGRADER_ROLE, upgrader_list),
                (PAUSER_ROLE, pauser_list),
                (DEFAULT_ADMIN_ROLE, admin_list),
            ):
                for m in members:
                    self.roles.seed(role, m)

            self.sink.emit(
                Notification.make(
                    ev.INITIALIZED,
                    owners=tuple(owner_list),
                    threshold=threshold,
                    pause_policy=pp.value,
                    admin_policy=ap.value,
                )
            )
            log.info(
                "wallet initialized",
                extra={"owners": len(owner_list), "threshold": threshold, "pause_policy": pp.value},
            )

    @property
    def initialized(self) -> bool:
        return self.store.initialized

    # ------------------------------------------------------------------ approvals

    def submit(
        self, caller: PrincipalLike, destination: PrincipalLike, value: int, payload: bytes = b""
    ) -> int:
        c = _principal(caller, "caller")
        with self._call("submit", c):
            return self._engine().submit(c, _principal(destination, "destination"), value, payload)

    def confirm(self, caller: PrincipalLike, tx_id: int) -> int:
        c = _principal(caller, "caller")
        with self._call("confirm", c):
            return self._engine().confirm(c, tx_id)

    def execute(self, caller: PrincipalLike, tx_id: int) -> CallResult:
        c = _principal(caller, "caller")
        with self._call("execute", c):
            return self._engine().execute(c, tx_id)

    # ------------------------------------------------------------------ pause

    def pause(self, caller: PrincipalLike) -> None:
        c = _principal(caller, "caller")
        with self._call("pause", c):
            self.pauser.pause(c)

    def unpause(self, caller: PrincipalLike) -> None:
        c = _principal(caller, "caller")
        with self._call("unpause", c):
            self.pauser.unpause(c)

    def is_paused(self) -> bool:
        with self._lock:
            return self.pauser.is_paused()

    # ------------------------------------------------------------------ roles

    def grant_role(self, caller: PrincipalLike, role: RoleLike, account: PrincipalLike) -> bool:
        c = _principal(caller, "caller")
        with self._call("grant_role", c):
            return self.roles.grant_role(c, _role(role), _principal(account, "account"))

    def revoke_role(self, caller: PrincipalLike, role: RoleLike, account: PrincipalLike) -> bool:
        c = _principal(caller, "caller")
        with self._call("revoke_role", c):
            return self.roles.revoke_role(c, _role(role), _principal(account, "account"))

    def renounce_role(self, caller: PrincipalLike, role: RoleLike) -> bool:
        c = _principal(caller, "caller")
        with self._call("renounce_role", c):
            return self.roles.renounce_role(c, _role(role))

    def set_role_admin(self, caller: PrincipalLike, role: RoleLike, admin_role: RoleLike) -> None:
        c = _principal(caller, "caller")
        with self._call("set_role_admin", c):
            self.roles.set_role_admin(c, _role(role), _role(admin_role))

    def has_role(self, role: RoleLike, account: PrincipalLike) -> bool:
        """Membership test; unparseable roles or accounts are simply not members."""
        try:
            r, a = _role(role), _principal(account, "account")
        except InvalidConfiguration:
            return False
        with self._lock:
            return self.roles.has_role(r, a)

    def role_members(self, role: RoleLike) -> Tuple[bytes, ...]:
        with self._lock:
            return self.roles.members(_role(role))

    def get_role_admin(self, role: RoleLike) -> bytes:
        with self._lock:
            return self.roles.get_role_admin(_role(role))

    # ------------------------------------------------------------------ upgrade

    def authorize_upgrade(self, caller: PrincipalLike, new_logic: LogicModule) -> None:
        c = _principal(caller, "caller")
        with self._call("authorize_upgrade", c):
            self.gate.authorize_upgrade(c, new_logic)

    upgrade_to = authorize_upgrade

    @property
    def implementation(self) -> Any:
        return self.store.implementation

    # ------------------------------------------------------------------ queries

    def required(self) -> int:
        return self.store.threshold

    @property
    def threshold(self) -> int:
        return self.store.threshold

    def transaction_count(self) -> int:
        with self._lock:
            return self.store.transaction_count()

    def get_transaction(self, tx_id: int) -> TransactionRecord:
        with self._lock:
            return self._engine().get_transaction(tx_id)

    def is_confirmed(self, tx_id: int, account: PrincipalLike) -> bool:
        with self._lock:
            return self._engine().is_confirmed(tx_id, _principal(account, "account"))

    def get_confirmations(self, tx_id: int) -> Tuple[bytes, ...]:
        with self._lock:
            return self._engine().get_confirmations(tx_id)

    def transaction_state(self, tx_id: int) -> TxState:
        with self._lock:
            return self._engine().transaction_state(tx_id)

    def transaction_ids(self, *, pending: bool = True, executed: bool = False) -> List[int]:
        with self._lock:
            return self._engine().transaction_ids(pending=pending, executed=executed)

    # ------------------------------------------------------------------ notifications

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        return self.sink.subscribe(fn)

    @property
    def notifications(self) -> Tuple[Notification, ...]:
        return self.sink.history


__all__ = ["MultisigWallet"]
