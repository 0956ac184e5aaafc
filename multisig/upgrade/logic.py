"""
multisig.upgrade.logic — replaceable logic modules.

A logic module is the *behavior* half of the wallet: it binds an
`ApprovalEngine` to the wallet's collaborators for the duration of one call and
keeps no state of its own. The wallet facade resolves the module through
`store.implementation` on every call, so replacing the pointer swaps behavior
while ledger, roles and pause state stay in the store.

Compatibility
-------------
Every module advertises a *proxiable UUID* derived from an upgrade namespace
tag. The Upgrade Gate only accepts a replacement whose UUID equals the active
module's UUID, so a module built for a different storage layout cannot be
swapped in.
"""

from __future__ import annotations

import hashlib
from typing import Any, Dict, Protocol, runtime_checkable

from ..engine.approvals import ApprovalEngine, EngineContext

#: Namespace tag that anchors the proxiable UUID of the v1 storage layout.
UPGRADE_NAMESPACE: bytes = b"multisig/upgrade/v1"


def proxiable_uuid(namespace: bytes = UPGRADE_NAMESPACE) -> bytes:
    """sha3_256 of the namespace tag."""
    return hashlib.sha3_256(namespace).digest()


@runtime_checkable
class LogicModule(Protocol):
    name: str
    version: str

    def proxiable_uuid(self) -> bytes: ...

    def bind(self, ctx: EngineContext) -> ApprovalEngine: ...


class ApprovalLogic:
    """
    Stock logic module. Subclass and override `engine_cls` (or `bind`) to ship a
    new behavior over the same storage layout.
    """

    name = "approval-logic"
    version = "1"
    namespace = UPGRADE_NAMESPACE
    engine_cls = ApprovalEngine

    def proxiable_uuid(self) -> bytes:
        return proxiable_uuid(self.namespace)

    def bind(self, ctx: EngineContext) -> ApprovalEngine:
        return self.engine_cls(ctx)

    @property
    def ident(self) -> str:
        return f"{self.name}@{self.version}"

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "uuid": "0x" + self.proxiable_uuid().hex(),
        }

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f"<{type(self).__name__} {self.ident}>"


__all__ = ["UPGRADE_NAMESPACE", "proxiable_uuid", "LogicModule", "ApprovalLogic"]
