"""
multisig.errors — typed failures of the approval gateway.

Every rejected call raises one of these exceptions synchronously. The wallet
facade reverts any staged state and drops queued notifications before the
exception leaves the call, so a failed call never leaves partial mutation.

Hierarchy
---------
MultisigError (base)
 ├─ Unauthorized               : caller lacks the capability (role) for the call
 ├─ Paused                     : mutation attempted while the pause switch is set
 ├─ NotPaused                  : unpause attempted while not paused
 ├─ AlreadyPaused              : pause attempted while already paused
 ├─ MustBePausedForUpgrade     : upgrade authorization attempted while unpaused
 ├─ NotFound                   : transaction id was never submitted
 ├─ AlreadyExecuted            : transaction already executed (terminal)
 ├─ AlreadyConfirmed           : caller already confirmed this transaction
 ├─ InsufficientConfirmations  : confirmations below the required threshold
 ├─ InvalidConfiguration       : bad initialization / submission arguments
 ├─ AlreadyInitialized         : a second initialization attempt
 └─ NotInitialized             : call before initialization

Notes
-----
* Executor failures are *not* errors: `execute` reports them through the
  returned CallResult and an `ExecutionFailure` notification.
* `code` strings are stable and safe to match on in tooling.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class MultisigError(Exception):
    """
    Base gateway error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'UNAUTHORIZED', 'PAUSED').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "multisig error"
    code: str = "MULTISIG_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for logs and CLI output."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


def _details(data: Optional[Dict[str, Any]], **fields: Any) -> Optional[Dict[str, Any]]:
    d: Dict[str, Any] = {}
    if data:
        d.update(data)
    for k, v in fields.items():
        if v is None:
            continue
        if isinstance(v, (bytes, bytearray)):
            v = "0x" + bytes(v).hex()
        d.setdefault(k, v)
    return d or None


class Unauthorized(MultisigError):
    """Caller does not hold the role required for the operation."""

    def __init__(
        self,
        message: str = "caller lacks required role",
        *,
        caller: Optional[bytes] = None,
        role: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message, code="UNAUTHORIZED", data=_details(data, caller=caller, role=role)
        )


class Paused(MultisigError):
    def __init__(self, message: str = "wallet is paused", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="PAUSED", data=data)


class NotPaused(MultisigError):
    def __init__(self, message: str = "wallet is not paused", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="NOT_PAUSED", data=data)


class AlreadyPaused(MultisigError):
    def __init__(self, message: str = "wallet is already paused", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="ALREADY_PAUSED", data=data)


class MustBePausedForUpgrade(MultisigError):
    """Upgrades are only authorized while the pause switch is engaged."""

    def __init__(
        self, message: str = "wallet must be paused for upgrade", *, data: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, code="MUST_BE_PAUSED_FOR_UPGRADE", data=data)


class NotFound(MultisigError):
    def __init__(
        self,
        message: str = "transaction does not exist",
        *,
        tx_id: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="NOT_FOUND", data=_details(data, tx_id=tx_id))


class AlreadyExecuted(MultisigError):
    def __init__(
        self,
        message: str = "transaction already executed",
        *,
        tx_id: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="ALREADY_EXECUTED", data=_details(data, tx_id=tx_id))


class AlreadyConfirmed(MultisigError):
    def __init__(
        self,
        message: str = "transaction already confirmed by caller",
        *,
        tx_id: Optional[int] = None,
        owner: Optional[bytes] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message, code="ALREADY_CONFIRMED", data=_details(data, tx_id=tx_id, owner=owner)
        )


class InsufficientConfirmations(MultisigError):
    def __init__(
        self,
        message: str = "not enough confirmations",
        *,
        tx_id: Optional[int] = None,
        confirmations: Optional[int] = None,
        required: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="INSUFFICIENT_CONFIRMATIONS",
            data=_details(data, tx_id=tx_id, confirmations=confirmations, required=required),
        )


class InvalidConfiguration(MultisigError):
    """
    Bad arguments: empty/duplicate/null owners, threshold out of range,
    null destination, negative value, oversized payload, incompatible logic module.
    """

    def __init__(self, message: str = "invalid configuration", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_CONFIGURATION", data=data)


class AlreadyInitialized(MultisigError):
    def __init__(self, message: str = "wallet already initialized", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="ALREADY_INITIALIZED", data=data)


class NotInitialized(MultisigError):
    def __init__(self, message: str = "wallet not initialized", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="NOT_INITIALIZED", data=data)


# -------- helper utilities ---------------------------------------------------


def error_to_result_fields(err: MultisigError) -> Dict[str, Any]:
    """
    Map a MultisigError to the step-result fields used by the CLI and logs.

    Returns:
        {"status": "REJECTED", "error": {code, message, data?}}
    """
    return {"status": "REJECTED", "error": err.to_dict()}


__all__ = [
    "MultisigError",
    "Unauthorized",
    "Paused",
    "NotPaused",
    "AlreadyPaused",
    "MustBePausedForUpgrade",
    "NotFound",
    "AlreadyExecuted",
    "AlreadyConfirmed",
    "InsufficientConfirmations",
    "InvalidConfiguration",
    "AlreadyInitialized",
    "NotInitialized",
    "error_to_result_fields",
]
