"""
multisig.types.tx — transaction records and their lifecycle state.

`TransactionRecord` is the ledger entry the Approval Engine owns. The store keeps
the mutable instance; queries hand out `snapshot()` copies so callers can never
mutate the ledger behind the engine's back.

TxState is *derived*, never stored:
  - PENDING  : confirmations < threshold
  - READY    : confirmations ≥ threshold, not executed
  - EXECUTED : executed (terminal)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict


class TxState(str, Enum):
    PENDING = "pending"
    READY = "ready"
    EXECUTED = "executed"

    @property
    def code(self) -> str:
        return self.value.upper()

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.value


@dataclass
class TransactionRecord:
    """
    Attributes:
        destination:   bytes: non-null target identifier
        value:         int  : non-negative amount
        payload:       bytes: opaque call data
        executed:      bool : True once a call succeeded
        confirmations: int  : number of owners that confirmed
    """

    destination: bytes
    value: int
    payload: bytes = b""
    executed: bool = False
    confirmations: int = 0

    def state(self, threshold: int) -> TxState:
        if self.executed:
            return TxState.EXECUTED
        if self.confirmations >= threshold:
            return TxState.READY
        return TxState.PENDING

    def snapshot(self) -> "TransactionRecord":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "destination": "0x" + self.destination.hex(),
            "value": self.value,
            "payload": "0x" + self.payload.hex(),
            "executed": self.executed,
            "confirmations": self.confirmations,
        }


__all__ = ["TxState", "TransactionRecord"]
