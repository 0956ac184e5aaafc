"""
multisig.state — storage that outlives logic-module upgrades.

    MultisigStore : roles, pause flag, threshold, ledger, confirmations, logic pointer
    Journal       : undo journal with nested checkpoints (revert on failed calls)
"""

from __future__ import annotations

from .journal import Journal
from .store import MultisigStore

__all__ = ["Journal", "MultisigStore"]
