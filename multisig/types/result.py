"""
multisig.types.result — outcome of an Action Executor call.

`CallResult` is what the executor reports and what `execute` returns. A failed
call is a normal outcome, not an exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CallResult:
    success: bool
    return_data: bytes = b""
    reason: Optional[str] = None

    @classmethod
    def ok(cls, return_data: bytes = b"") -> "CallResult":
        return cls(success=True, return_data=bytes(return_data))

    @classmethod
    def failed(cls, reason: str, return_data: bytes = b"") -> "CallResult":
        return cls(success=False, return_data=bytes(return_data), reason=reason)

    @classmethod
    def coerce(cls, value: Any) -> "CallResult":
        """
        Normalize an executor's return value.

        Accepts a CallResult or a ``(success, return_data)`` pair. Anything else
        is reported as a failed call rather than raised.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, tuple) and len(value) == 2:
            success, data = value
            if isinstance(success, bool) and isinstance(data, (bytes, bytearray)):
                return cls.ok(data) if success else cls.failed("call reverted", data)
        return cls.failed(f"unexpected executor result: {type(value).__name__}")

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "success": self.success,
            "returnData": "0x" + self.return_data.hex(),
        }
        if self.reason is not None:
            out["reason"] = self.reason
        return out


__all__ = ["CallResult"]
