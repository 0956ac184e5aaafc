"""
multisig.types.roles — role identifiers and capability policies.

Role ids are 32 bytes, derived deterministically as sha3_256(name). The
super-admin role is 32 zero bytes, matching the usual access-control layout.

Roles
-----
- OWNER_ROLE          : submit / confirm / execute (and pause under PausePolicy.OWNER)
- UPGRADER_ROLE       : authorize replacement of the logic module
- PAUSER_ROLE         : pause / unpause under PausePolicy.PAUSER
- DEFAULT_ADMIN_ROLE  : administers every role under AdminPolicy.SUPER_ADMIN

Policies
--------
Both policies are chosen once, at initialization, and persisted in the store.
"""

from __future__ import annotations

import hashlib
from enum import Enum
from typing import Dict, Optional


def derive_role_id(name: bytes) -> bytes:
    """Deterministic role id derivation: sha3_256(name) → bytes32."""
    return hashlib.sha3_256(name).digest()


DEFAULT_ADMIN_ROLE: bytes = b"\x00" * 32
OWNER_ROLE: bytes = derive_role_id(b"OWNER_ROLE")
UPGRADER_ROLE: bytes = derive_role_id(b"UPGRADER_ROLE")
PAUSER_ROLE: bytes = derive_role_id(b"PAUSER_ROLE")

_ROLE_NAMES: Dict[bytes, str] = {
    DEFAULT_ADMIN_ROLE: "DEFAULT_ADMIN",
    OWNER_ROLE: "OWNER",
    UPGRADER_ROLE: "UPGRADER",
    PAUSER_ROLE: "PAUSER",
}


def normalize_role(role: bytes) -> bytes:
    """Ensure `role` is exactly 32 bytes; otherwise raise ValueError."""
    if not isinstance(role, (bytes, bytearray)) or len(role) != 32:
        raise ValueError("role id must be 32 bytes")
    return bytes(role)


def role_name(role: bytes) -> str:
    """Readable name for well-known roles, hex for anything else."""
    return _ROLE_NAMES.get(bytes(role), "0x" + bytes(role).hex())


def role_from_name(name: str) -> bytes:
    """
    Resolve 'OWNER' / 'owner' / 'OWNER_ROLE' / a 0x-hex id to a role id.

    Raises:
        ValueError for unknown names.
    """
    s = name.strip()
    if s.startswith(("0x", "0X")):
        return normalize_role(bytes.fromhex(s[2:]))
    key = s.upper()
    if key.endswith("_ROLE"):
        key = key[: -len("_ROLE")]
    for rid, n in _ROLE_NAMES.items():
        if n == key:
            return rid
    raise ValueError(f"unknown role: {name!r}")


class PausePolicy(str, Enum):
    """Which role holds the pausing capability."""

    OWNER = "owner"
    PAUSER = "pauser"

    @property
    def role(self) -> bytes:
        return OWNER_ROLE if self is PausePolicy.OWNER else PAUSER_ROLE

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.value

    @classmethod
    def from_str(cls, s: str, *, default: Optional["PausePolicy"] = None) -> "PausePolicy":
        norm = (s or "").strip().lower()
        if not norm and default is not None:
            return default
        try:
            return cls(norm)
        except ValueError:
            raise ValueError(f"unknown pause policy: {s!r}") from None


class AdminPolicy(str, Enum):
    """Who administers (grants/revokes) a role."""

    SUPER_ADMIN = "super_admin"
    ROLE_MEMBERS = "role_members"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.value

    @classmethod
    def from_str(cls, s: str, *, default: Optional["AdminPolicy"] = None) -> "AdminPolicy":
        norm = (s or "").strip().lower().replace("-", "_")
        if not norm and default is not None:
            return default
        if norm in {"super", "superadmin", "default_admin"}:
            return cls.SUPER_ADMIN
        if norm in {"self", "members"}:
            return cls.ROLE_MEMBERS
        try:
            return cls(norm)
        except ValueError:
            raise ValueError(f"unknown admin policy: {s!r}") from None


__all__ = [
    "derive_role_id",
    "normalize_role",
    "role_name",
    "role_from_name",
    "DEFAULT_ADMIN_ROLE",
    "OWNER_ROLE",
    "UPGRADER_ROLE",
    "PAUSER_ROLE",
    "PausePolicy",
    "AdminPolicy",
]
