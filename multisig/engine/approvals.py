"""
multisig.engine.approvals
=========================

The approval state machine: transaction ledger, confirmation bookkeeping and
the submit → confirm → execute flow.

States (derived, see `multisig.types.tx.TxState`)
-------------------------------------------------
    PENDING  --confirm (count ≥ threshold)-->  READY  --execute ok-->  EXECUTED
                                                 ^                       |
                                                 +---- executor fails ---+

Check order
-----------
Every mutating operation checks, in order:
  1. caller holds OWNER_ROLE           → Unauthorized
  2. pause switch is not engaged       → Paused
  3. operation-specific checks         → NotFound / AlreadyExecuted / ...

Execution ordering
------------------
`execute` marks the record executed *before* calling the Action Executor. A
reentrant `execute` of the same id therefore sees AlreadyExecuted, which is the
only reentrancy defense. When the executor reports failure (or raises), the
flag goes back to False, `ExecutionFailure` is emitted and the failed
CallResult is returned; the record stays READY and may be executed again.

No self-confirmation on submit: proposing and confirming are separate duties.

The engine is stateless apart from the references in its `EngineContext`; all
persistent data lives in the `MultisigStore`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple

from ..access.roles import RoleRegistry
from ..config import Limits
from ..control.pausable import PauseSwitch
from ..errors import (AlreadyConfirmed, AlreadyExecuted,
                      InsufficientConfirmations, InvalidConfiguration, NotFound)
from ..runtime.event_sink import NotificationSink
from ..runtime.executor import ActionExecutor
from ..state.store import MultisigStore
from ..types import events as ev
from ..types.address import is_null, short
from ..types.events import Notification
from ..types.result import CallResult
from ..types.roles import OWNER_ROLE
from ..types.tx import TransactionRecord, TxState

log = logging.getLogger("multisig.engine")


@dataclass
class EngineContext:
    """Collaborators a logic module operates on. Owned by the wallet facade."""

    store: MultisigStore
    roles: RoleRegistry
    pause: PauseSwitch
    sink: NotificationSink
    executor: ActionExecutor
    limits: Limits


class ApprovalEngine:
    def __init__(self, ctx: EngineContext) -> None:
        self._ctx = ctx
        self._store = ctx.store

    # ---- guards -------------------------------------------------------------

    def _guard(self, caller: bytes) -> None:
        self._ctx.roles.require_role(OWNER_ROLE, caller)
        self._ctx.pause.require_not_paused()

    def _record(self, tx_id: int) -> TransactionRecord:
        rec = self._store.get_transaction(tx_id)
        if rec is None:
            raise NotFound(tx_id=tx_id)
        return rec

    # ---- submit -------------------------------------------------------------

    def submit(self, caller: bytes, destination: bytes, value: int, payload: bytes = b"") -> int:
        """
        Record a new transaction with zero confirmations.

        Returns:
            The new transaction id (ids start at 0 and are never reused).
        """
        self._guard(caller)
        if is_null(destination):
            raise InvalidConfiguration("destination must not be null")
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidConfiguration("value must be a non-negative integer", data={"value": repr(value)})
        if not isinstance(payload, (bytes, bytearray)):
            raise InvalidConfiguration("payload must be bytes")
        limit = self._ctx.limits.max_payload_bytes
        if len(payload) > limit:
            raise InvalidConfiguration(
                "payload too large", data={"size": len(payload), "limit": limit}
            )

        tx_id = self._store.append_transaction(
            TransactionRecord(destination=bytes(destination), value=value, payload=bytes(payload))
        )
        self._ctx.sink.emit(Notification.make(ev.SUBMISSION, tx_id=tx_id))
        log.info(
            "transaction submitted",
            extra={"tx_id": tx_id, "destination": short(destination), "value": value},
        )
        return tx_id

    # ---- confirm ------------------------------------------------------------

    def confirm(self, caller: bytes, tx_id: int) -> int:
        """
        Record the caller's confirmation. A repeated confirmation fails.

        Returns:
            The confirmation count after this call.
        """
        self._guard(caller)
        rec = self._record(tx_id)
        if rec.executed:
            raise AlreadyExecuted(tx_id=tx_id)
        caller = bytes(caller)
        if self._store.is_confirmed(tx_id, caller):
            raise AlreadyConfirmed(tx_id=tx_id, owner=caller)

        count = self._store.add_confirmation(tx_id, caller)
        self._ctx.sink.emit(Notification.make(ev.CONFIRMATION, owner=caller, tx_id=tx_id))
        log.info(
            "transaction confirmed",
            extra={"tx_id": tx_id, "confirmations": count, "required": self._store.threshold},
        )
        return count

    # ---- execute ------------------------------------------------------------

    def execute(self, caller: bytes, tx_id: int) -> CallResult:
        self._guard(caller)
        rec = self._record(tx_id)
        if rec.executed:
            raise AlreadyExecuted(tx_id=tx_id)
        required = self._store.threshold
        if rec.confirmations < required:
            raise InsufficientConfirmations(
                tx_id=tx_id, confirmations=rec.confirmations, required=required
            )

        # Mark before the call; the executor may re-enter.
        self._store.set_executed(tx_id, True)
        try:
            result = CallResult.coerce(self._ctx.executor.call(rec.destination, rec.value, rec.payload))
        except Exception as exc:
            log.warning(
                "executor raised",
                extra={"tx_id": tx_id, "error": f"{type(exc).__name__}: {exc}"},
            )
            result = CallResult.failed(f"{type(exc).__name__}: {exc}")

        if result.success:
            self._ctx.sink.emit(Notification.make(ev.EXECUTION, tx_id=tx_id))
            log.info("transaction executed", extra={"tx_id": tx_id})
        else:
            self._store.set_executed(tx_id, False)
            self._ctx.sink.emit(Notification.make(ev.EXECUTION_FAILURE, tx_id=tx_id))
            log.warning("transaction execution failed", extra={"tx_id": tx_id, "reason": result.reason})
        return result

    # ---- queries ------------------------------------------------------------

    def required(self) -> int:
        return self._store.threshold

    def transaction_count(self) -> int:
        return self._store.transaction_count()

    def get_transaction(self, tx_id: int) -> TransactionRecord:
        """Snapshot copy of the record; mutating it does not touch the ledger."""
        return self._record(tx_id).snapshot()

    def is_confirmed(self, tx_id: int, account: bytes) -> bool:
        self._record(tx_id)
        return self._store.is_confirmed(tx_id, bytes(account))

    def get_confirmations(self, tx_id: int) -> Tuple[bytes, ...]:
        self._record(tx_id)
        return self._store.confirmers(tx_id)

    def transaction_state(self, tx_id: int) -> TxState:
        return self._record(tx_id).state(self._store.threshold)

    def transaction_ids(self, *, pending: bool = True, executed: bool = False) -> List[int]:
        """Ids filtered by executed flag, in submission order."""
        out: List[int] = []
        for tx_id in range(self._store.transaction_count()):
            rec = self._store.get_transaction(tx_id)
            if rec is None:
                continue
            if (pending and not rec.executed) or (executed and rec.executed):
                out.append(tx_id)
        return out


__all__ = ["ApprovalEngine", "EngineContext"]
