"""
multisig.state.store — the wallet's stable storage.

`MultisigStore` owns every piece of persistent state: role membership, pause
flag, threshold, the transaction ledger, confirmation marks and the pointer to
the active logic module. Logic modules are stateless; swapping one leaves all of
this untouched.

Storage layout
--------------
- initialized      : bool, set once
- threshold        : int, fixed at initialization
- pause_policy     : PausePolicy chosen at initialization
- admin_policy     : AdminPolicy chosen at initialization
- paused           : bool
- roles            : role id → ordered {principal: None}
- role_admins      : role id → admin role id (absent → policy default)
- transactions     : list[TransactionRecord], index == tx id
- confirmations    : tx id → ordered {principal: None}
- implementation   : active logic module

Mutators record undo steps in the attached Journal so a failed call can be
rolled back completely. Readers never record anything.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from ..types.roles import AdminPolicy, PausePolicy
from ..types.tx import TransactionRecord
from .journal import Journal


class MultisigStore:
    def __init__(self, address: bytes, journal: Optional[Journal] = None) -> None:
        self.address = bytes(address)
        self.journal = journal or Journal()

        self._initialized = False
        self._threshold = 0
        self._pause_policy = PausePolicy.OWNER
        self._admin_policy = AdminPolicy.SUPER_ADMIN
        self._paused = False
        self._roles: Dict[bytes, Dict[bytes, None]] = {}
        self._role_admins: Dict[bytes, bytes] = {}
        self._transactions: List[TransactionRecord] = []
        self._confirmations: Dict[int, Dict[bytes, None]] = {}
        self._implementation: Any = None

    # ------------------------------------------------------------------ setup

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def pause_policy(self) -> PausePolicy:
        return self._pause_policy

    @property
    def admin_policy(self) -> AdminPolicy:
        return self._admin_policy

    def set_initialized(
        self, threshold: int, pause_policy: PausePolicy, admin_policy: AdminPolicy
    ) -> None:
        prev = (self._initialized, self._threshold, self._pause_policy, self._admin_policy)

        def undo() -> None:
            self._initialized, self._threshold, self._pause_policy, self._admin_policy = prev

        self._initialized = True
        self._threshold = int(threshold)
        self._pause_policy = pause_policy
        self._admin_policy = admin_policy
        self.journal.record(undo)

    # ------------------------------------------------------------------ pause

    @property
    def paused(self) -> bool:
        return self._paused

    def set_paused(self, flag: bool) -> None:
        prev = self._paused

        def undo() -> None:
            self._paused = prev

        self._paused = bool(flag)
        self.journal.record(undo)

    # ------------------------------------------------------------------ roles

    def is_member(self, role: bytes, account: bytes) -> bool:
        return account in self._roles.get(role, {})

    def members(self, role: bytes) -> Tuple[bytes, ...]:
        return tuple(self._roles.get(role, {}))

    def add_member(self, role: bytes, account: bytes) -> bool:
        bucket = self._roles.setdefault(role, {})
        if account in bucket:
            return False
        bucket[account] = None
        self.journal.record(lambda: self._roles[role].pop(account, None))
        return True

    def remove_member(self, role: bytes, account: bytes) -> bool:
        bucket = self._roles.get(role)
        if not bucket or account not in bucket:
            return False
        # Rebuild on undo so the original grant order is preserved.
        before = dict(bucket)
        del bucket[account]

        def undo() -> None:
            self._roles[role] = before

        self.journal.record(undo)
        return True

    def role_admin(self, role: bytes) -> Optional[bytes]:
        return self._role_admins.get(role)

    def set_role_admin(self, role: bytes, admin_role: bytes) -> None:
        had = role in self._role_admins
        prev = self._role_admins.get(role)

        def undo() -> None:
            if had:
                self._role_admins[role] = prev  # type: ignore[assignment]
            else:
                self._role_admins.pop(role, None)

        self._role_admins[role] = admin_role
        self.journal.record(undo)

    # ------------------------------------------------------------------ ledger

    def transaction_count(self) -> int:
        return len(self._transactions)

    def get_transaction(self, tx_id: int) -> Optional[TransactionRecord]:
        if not isinstance(tx_id, int) or tx_id < 0 or tx_id >= len(self._transactions):
            return None
        return self._transactions[tx_id]

    def append_transaction(self, record: TransactionRecord) -> int:
        tx_id = len(self._transactions)
        self._transactions.append(record)
        self._confirmations[tx_id] = {}

        def undo() -> None:
            self._transactions.pop()
            self._confirmations.pop(tx_id, None)

        self.journal.record(undo)
        return tx_id

    def set_executed(self, tx_id: int, flag: bool) -> None:
        rec = self._transactions[tx_id]
        prev = rec.executed

        def undo() -> None:
            rec.executed = prev

        rec.executed = bool(flag)
        self.journal.record(undo)

    def is_confirmed(self, tx_id: int, account: bytes) -> bool:
        return account in self._confirmations.get(tx_id, {})

    def confirmers(self, tx_id: int) -> Tuple[bytes, ...]:
        return tuple(self._confirmations.get(tx_id, {}))

    def add_confirmation(self, tx_id: int, account: bytes) -> int:
        """Set the mark and bump the count together; returns the new count."""
        rec = self._transactions[tx_id]
        marks = self._confirmations.setdefault(tx_id, {})
        marks[account] = None
        rec.confirmations += 1

        def undo() -> None:
            marks.pop(account, None)
            rec.confirmations -= 1

        self.journal.record(undo)
        return rec.confirmations

    # ------------------------------------------------------------------ logic

    @property
    def implementation(self) -> Any:
        return self._implementation

    def set_implementation(self, module: Any) -> None:
        prev = self._implementation

        def undo() -> None:
            self._implementation = prev

        self._implementation = module
        self.journal.record(undo)


__all__ = ["MultisigStore"]
