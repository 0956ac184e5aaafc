"""
multisig.types.address — principal identifiers.

A principal is an opaque `bytes` value. Boundaries (CLI, scenario files,
provisioning) accept hex strings with or without `0x` and normalize them here.

Null principals
---------------
`None`, empty bytes and all-zero bytes are *null*. They can never hold a role
and can never be a submission destination.
"""

from __future__ import annotations

import re
from typing import Optional, Union

Principal = bytes
PrincipalLike = Union[str, bytes, bytearray, memoryview]

#: Canonical 20-byte hex account format used by the deployment environment.
ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


def to_principal(v: Optional[PrincipalLike]) -> Principal:
    """
    Normalize a principal-like value to bytes.

    Raises:
        TypeError  for unsupported input types
        ValueError for malformed hex strings
    """
    if v is None:
        return b""
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v)
    if isinstance(v, str):
        s = v.strip()
        if s.startswith(("0x", "0X")):
            s = s[2:]
        if len(s) % 2:
            s = "0" + s
        try:
            return bytes.fromhex(s)
        except ValueError as e:
            raise ValueError(f"invalid hex principal: {v!r}") from e
    raise TypeError(f"expected bytes or hex string, got {type(v).__name__}")


def is_null(p: Optional[bytes]) -> bool:
    return p is None or len(p) == 0 or not any(p)


def is_valid_address(s: str) -> bool:
    """True if `s` is a 0x-prefixed 20-byte hex account."""
    return bool(ADDRESS_RE.match(s or ""))


def to_hex(p: Optional[bytes]) -> Optional[str]:
    if p is None:
        return None
    return "0x" + bytes(p).hex()


def short(p: Optional[bytes], n: int = 10) -> str:
    """Short hex form for log lines, e.g. '0xaaaaaa…'."""
    h = to_hex(p) or "-"
    if len(h) <= n:
        return h
    return h[: n - 1] + "…"


__all__ = [
    "Principal",
    "PrincipalLike",
    "ADDRESS_RE",
    "to_principal",
    "is_null",
    "is_valid_address",
    "to_hex",
    "short",
]
