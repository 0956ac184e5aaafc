"""
multisig.runtime.executor — the Action Executor boundary and a reference ledger.

The Approval Engine hands a ready transaction to an *Action Executor*:

    executor.call(destination, value, payload) -> CallResult | (success, return_data)

The executor belongs to the surrounding environment. It may mutate other
systems before it returns and it may call back into the wallet (reentrancy);
the engine never assumes it is atomic.

`InMemoryLedger` is the reference implementation used by the CLI and tests:

- balances per account (bytes → int)
- optional per-destination handlers, `handler(ledger, value, payload) -> bytes | None`
- a call moves `value` from the bound account to `destination`, then runs the
  destination's handler if one is registered
- insufficient balance, or a handler that raises, yields a failed CallResult and
  undoes this ledger's own transfer (side effects a handler caused elsewhere are
  not undone)
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Protocol, Tuple, Union, runtime_checkable

from ..types.address import short
from ..types.result import CallResult

log = logging.getLogger("multisig.executor")

Handler = Callable[["InMemoryLedger", int, bytes], Optional[bytes]]


@runtime_checkable
class ActionExecutor(Protocol):
    def call(self, destination: bytes, value: int, payload: bytes) -> Union[CallResult, Tuple[bool, bytes]]: ...


class InMemoryLedger:
    """
    Reference executor: value transfers between in-memory balances plus
    optional destination handlers standing in for contract code.
    """

    def __init__(self, account: bytes, balances: Optional[Dict[bytes, int]] = None) -> None:
        self.account = bytes(account)
        self._balances: Dict[bytes, int] = {bytes(k): int(v) for k, v in (balances or {}).items()}
        self._handlers: Dict[bytes, Handler] = {}
        self.calls: List[Tuple[bytes, int, bytes, bool]] = []

    # ------------------------------------------------------------------ balances

    def balance_of(self, who: bytes) -> int:
        return self._balances.get(bytes(who), 0)

    def deposit(self, who: bytes, amount: int) -> int:
        if amount < 0:
            raise ValueError("deposit amount must be non-negative")
        who = bytes(who)
        self._balances[who] = self._balances.get(who, 0) + int(amount)
        return self._balances[who]

    def _move(self, src: bytes, dst: bytes, amount: int) -> None:
        self._balances[src] = self._balances.get(src, 0) - amount
        self._balances[dst] = self._balances.get(dst, 0) + amount

    # ------------------------------------------------------------------ handlers

    def register(self, destination: bytes, handler: Handler) -> None:
        """Attach code to `destination`; it runs after the value transfer."""
        self._handlers[bytes(destination)] = handler

    def unregister(self, destination: bytes) -> None:
        self._handlers.pop(bytes(destination), None)

    # ------------------------------------------------------------------ executor

    def call(self, destination: bytes, value: int, payload: bytes) -> CallResult:
        destination = bytes(destination)
        if self.balance_of(self.account) < value:
            log.debug(
                "call failed: insufficient balance",
                extra={"destination": short(destination), "value": value},
            )
            self.calls.append((destination, value, bytes(payload), False))
            return CallResult.failed("insufficient balance")

        self._move(self.account, destination, value)
        handler = self._handlers.get(destination)
        ret = b""
        if handler is not None:
            try:
                ret = handler(self, value, bytes(payload)) or b""
            except Exception as exc:
                self._move(destination, self.account, value)
                log.debug(
                    "call failed: handler raised",
                    extra={"destination": short(destination), "error": repr(exc)},
                )
                self.calls.append((destination, value, bytes(payload), False))
                return CallResult.failed(f"{type(exc).__name__}: {exc}")

        self.calls.append((destination, value, bytes(payload), True))
        return CallResult.ok(ret)


__all__ = ["ActionExecutor", "InMemoryLedger", "Handler"]
