from __future__ import annotations

import pytest

from multisig.errors import AlreadyExecuted, MultisigError
from multisig.types.result import CallResult
from multisig.types.tx import TxState
from multisig.wallet import MultisigWallet

from .conftest import A, B, C, DEST, STRANGER, addr


def _ready(w: MultisigWallet, value: int = 10, dest: bytes = DEST) -> int:
    tx = w.submit(A, dest, value)
    w.confirm(A, tx)
    w.confirm(B, tx)
    return tx


class _RaisingExecutor:
    def __init__(self) -> None:
        self.calls = 0

    def call(self, destination, value, payload):
        self.calls += 1
        raise RuntimeError("boom")


class _ScriptedExecutor:
    """Returns the queued results in order."""

    def __init__(self, *results: CallResult) -> None:
        self.results = list(results)

    def call(self, destination, value, payload):
        return self.results.pop(0)


def test_reported_failure_leaves_record_retryable(wallet):
    tx = _ready(wallet, value=5000)  # wallet only holds 1000
    result = wallet.execute(A, tx)
    assert not result.success
    assert result.reason == "insufficient balance"
    assert wallet.get_transaction(tx).executed is False
    assert wallet.transaction_state(tx) is TxState.READY
    assert wallet.notifications[-1].name == "ExecutionFailure"
    assert wallet.notifications[-1].get("tx_id") == tx

    wallet.executor.deposit(wallet.address, 4000)
    assert wallet.execute(C, tx).success
    assert wallet.get_transaction(tx).executed is True
    assert wallet.executor.balance_of(DEST) == 5000


def test_failed_execution_keeps_confirmations(wallet):
    tx = _ready(wallet, value=5000)
    wallet.execute(A, tx)
    assert wallet.get_transaction(tx).confirmations == 2
    assert wallet.get_confirmations(tx) == (A, B)


def test_executor_exception_is_a_failure_not_an_error(cfg):
    ex = _RaisingExecutor()
    w = MultisigWallet(config=cfg, executor=ex)
    w.initialize([A, B, C], 2)
    tx = _ready(w)
    result = w.execute(A, tx)
    assert ex.calls == 1
    assert result.success is False
    assert "RuntimeError: boom" in result.reason
    assert w.get_transaction(tx).executed is False
    assert w.notifications[-1].name == "ExecutionFailure"


def test_retry_after_scripted_failure(cfg):
    ex = _ScriptedExecutor(CallResult.failed("nope"), CallResult.ok(b"\x01"))
    w = MultisigWallet(config=cfg, executor=ex)
    w.initialize([A, B, C], 2)
    tx = _ready(w)
    assert not w.execute(A, tx).success
    second = w.execute(A, tx)
    assert second.success and second.return_data == b"\x01"
    names = [n.name for n in w.notifications if n.name.startswith("Execution")]
    assert names == ["ExecutionFailure", "Execution"]


def test_handler_failure_undoes_ledger_transfer(wallet):
    def handler(ledger, value, payload):
        raise ValueError("rejecting")

    wallet.executor.register(DEST, handler)
    tx = _ready(wallet, value=10)
    result = wallet.execute(A, tx)
    assert not result.success
    assert wallet.executor.balance_of(DEST) == 0
    assert wallet.executor.balance_of(wallet.address) == 1000


def test_reentrant_execute_sees_already_executed(wallet):
    observed = []
    tx_holder = {}

    def handler(ledger, value, payload):
        try:
            wallet.execute(C, tx_holder["tx"])
        except MultisigError as err:
            observed.append(type(err))
            # the flag is already set while the executor runs
            observed.append(wallet.get_transaction(tx_holder["tx"]).executed)
        return b""

    wallet.executor.register(DEST, handler)
    tx_holder["tx"] = _ready(wallet, value=10)
    result = wallet.execute(A, tx_holder["tx"])

    assert result.success
    assert observed == [AlreadyExecuted, True]
    assert wallet.executor.balance_of(DEST) == 10
    assert [n.name for n in wallet.notifications].count("Execution") == 1


def test_reentrant_failure_only_reverts_its_own_writes(wallet):
    sink = addr(0x99)

    def handler(ledger, value, payload):
        try:
            wallet.submit(STRANGER, sink, 1)
        except MultisigError:
            pass
        wallet.submit(A, sink, 2)
        return b""

    wallet.executor.register(DEST, handler)
    tx = _ready(wallet)
    assert wallet.execute(A, tx).success

    assert wallet.transaction_count() == 2
    nested = wallet.get_transaction(1)
    assert nested.destination == sink and nested.value == 2
    assert wallet.get_transaction(tx).executed is True
    tail = [n.name for n in wallet.notifications][-2:]
    assert tail == ["Submission", "Execution"]


def test_notifications_published_only_after_outer_call(wallet):
    delivered = []
    seen_during_handler = []

    def handler(ledger, value, payload):
        seen_during_handler.append(len(delivered))
        return b""

    wallet.executor.register(DEST, handler)
    tx = _ready(wallet)
    wallet.subscribe(lambda n: delivered.append(n.name))
    wallet.execute(A, tx)
    assert seen_during_handler == [0]
    assert delivered == ["Execution"]


def test_rejected_call_publishes_nothing(wallet, ready_tx):
    delivered = []
    wallet.subscribe(delivered.append)
    before = len(wallet.notifications)
    with pytest.raises(MultisigError):
        wallet.confirm(A, ready_tx)
    assert delivered == []
    assert len(wallet.notifications) == before


class _TupleExecutor:
    """Reports outcomes as (success, return_data) pairs."""

    def __init__(self, *results) -> None:
        self.results = list(results)
        self.calls = 0

    def call(self, destination, value, payload):
        self.calls += 1
        return self.results.pop(0)


def test_tuple_result_marks_executed_once(cfg):
    ex = _TupleExecutor((True, b"\x2a"))
    w = MultisigWallet(config=cfg, executor=ex)
    w.initialize([A, B, C], 2)
    tx = _ready(w)

    result = w.execute(A, tx)
    assert result == CallResult.ok(b"\x2a")
    assert w.get_transaction(tx).executed is True
    with pytest.raises(AlreadyExecuted):
        w.execute(B, tx)
    assert ex.calls == 1


def test_tuple_failure_and_unexpected_result_are_retryable(cfg):
    ex = _TupleExecutor((False, b"\x01"), None, (True, b""))
    w = MultisigWallet(config=cfg, executor=ex)
    w.initialize([A, B, C], 2)
    tx = _ready(w)

    first = w.execute(A, tx)
    assert first.success is False and first.return_data == b"\x01"
    second = w.execute(A, tx)
    assert second.success is False
    assert "NoneType" in second.reason
    assert w.get_transaction(tx).executed is False

    assert w.execute(A, tx).success
    names = [n.name for n in w.notifications if n.name.startswith("Execution")]
    assert names == ["ExecutionFailure", "ExecutionFailure", "Execution"]


class _InterruptingExecutor:
    def call(self, destination, value, payload):
        raise KeyboardInterrupt


def test_interrupt_during_execute_rolls_back_call(cfg):
    w = MultisigWallet(config=cfg, executor=_InterruptingExecutor())
    w.initialize([A, B, C], 2)
    tx = _ready(w)
    before = len(w.notifications)

    with pytest.raises(KeyboardInterrupt):
        w.execute(A, tx)

    assert w.store.journal.active is False
    assert w.store.journal.depth() == 0
    assert w.get_transaction(tx).executed is False
    assert len(w.notifications) == before

    # staged notifications from the interrupted call are not published later
    w.submit(A, DEST, 1)
    assert [n.name for n in w.notifications[before:]] == ["Submission"]
