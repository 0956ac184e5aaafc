"""
multisig.types — small, dependency-free types shared across the gateway.

Public surface (re-exported):
    Principal, to_principal, is_null     : principal identifiers
    OWNER_ROLE, UPGRADER_ROLE, ...       : role ids and capability policies
    TransactionRecord, TxState           : ledger entries and derived state
    CallResult                           : Action Executor outcome
    Notification                         : observable events
"""

from __future__ import annotations

from .address import Principal, is_null, to_hex, to_principal
from .events import Notification
from .result import CallResult
from .roles import (DEFAULT_ADMIN_ROLE, OWNER_ROLE, PAUSER_ROLE,
                    UPGRADER_ROLE, AdminPolicy, PausePolicy, role_name)
from .tx import TransactionRecord, TxState

__all__ = [
    "Principal",
    "to_principal",
    "to_hex",
    "is_null",
    "DEFAULT_ADMIN_ROLE",
    "OWNER_ROLE",
    "UPGRADER_ROLE",
    "PAUSER_ROLE",
    "AdminPolicy",
    "PausePolicy",
    "role_name",
    "TransactionRecord",
    "TxState",
    "CallResult",
    "Notification",
]
