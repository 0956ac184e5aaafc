"""
multisig.types.events — notifications observable by external parties.

A `Notification` is an immutable (name, args) pair. Args hold raw Python values
(bytes for principals/roles, int for ids); `to_dict()` renders a JSON-friendly
form with 0x-hex for byte strings.

Names
-----
Initialized, Submission, Confirmation, Execution, ExecutionFailure,
Paused, Unpaused, RoleGranted, RoleRevoked, RoleAdminChanged, Upgraded
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

INITIALIZED = "Initialized"
SUBMISSION = "Submission"
CONFIRMATION = "Confirmation"
EXECUTION = "Execution"
EXECUTION_FAILURE = "ExecutionFailure"
PAUSED = "Paused"
UNPAUSED = "Unpaused"
ROLE_GRANTED = "RoleGranted"
ROLE_REVOKED = "RoleRevoked"
ROLE_ADMIN_CHANGED = "RoleAdminChanged"
UPGRADED = "Upgraded"


def _jsonable(v: Any) -> Any:
    if isinstance(v, (bytes, bytearray, memoryview)):
        return "0x" + bytes(v).hex()
    if isinstance(v, (list, tuple)):
        return [_jsonable(x) for x in v]
    if isinstance(v, Mapping):
        return {str(k): _jsonable(x) for k, x in v.items()}
    return v


@dataclass(frozen=True)
class Notification:
    name: str
    args: Tuple[Tuple[str, Any], ...] = field(default=())

    @classmethod
    def make(cls, name: str, **args: Any) -> "Notification":
        return cls(name=name, args=tuple(args.items()))

    def get(self, key: str, default: Any = None) -> Any:
        for k, v in self.args:
            if k == key:
                return v
        return default

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "args": {k: _jsonable(v) for k, v in self.args}}

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        inner = ", ".join(f"{k}={_jsonable(v)}" for k, v in self.args)
        return f"{self.name}({inner})"


__all__ = [
    "Notification",
    "INITIALIZED",
    "SUBMISSION",
    "CONFIRMATION",
    "EXECUTION",
    "EXECUTION_FAILURE",
    "PAUSED",
    "UNPAUSED",
    "ROLE_GRANTED",
    "ROLE_REVOKED",
    "ROLE_ADMIN_CHANGED",
    "UPGRADED",
]
