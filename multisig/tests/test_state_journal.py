from __future__ import annotations

import pytest

from multisig.runtime.event_sink import NotificationSink
from multisig.state.journal import Journal
from multisig.state.store import MultisigStore
from multisig.types.events import Notification
from multisig.types.roles import OWNER_ROLE, AdminPolicy, PausePolicy
from multisig.types.tx import TransactionRecord

A = b"\xa1" * 20
B = b"\xb2" * 20


def test_revert_restores_every_write():
    store = MultisigStore(b"\x01" * 20)
    j = store.journal
    m = j.checkpoint()
    store.set_initialized(2, PausePolicy.OWNER, AdminPolicy.SUPER_ADMIN)
    store.add_member(OWNER_ROLE, A)
    tx = store.append_transaction(TransactionRecord(destination=B, value=1))
    store.add_confirmation(tx, A)
    store.set_paused(True)
    j.revert(m)

    assert not store.initialized
    assert store.members(OWNER_ROLE) == ()
    assert store.transaction_count() == 0
    assert store.paused is False
    assert not j.active and j.depth() == 0


def test_nested_revert_keeps_outer_writes():
    store = MultisigStore(b"\x01" * 20)
    j = store.journal
    outer = j.checkpoint()
    store.add_member(OWNER_ROLE, A)
    inner = j.checkpoint()
    store.add_member(OWNER_ROLE, B)
    store.remove_member(OWNER_ROLE, A)
    j.revert(inner)
    assert store.members(OWNER_ROLE) == (A,)
    j.commit(outer)
    assert store.members(OWNER_ROLE) == (A,)
    assert j.depth() == 0


def test_remove_then_revert_preserves_order():
    store = MultisigStore(b"\x01" * 20)
    for p in (A, B, b"\xc3" * 20):
        store.add_member(OWNER_ROLE, p)
    j = store.journal
    m = j.checkpoint()
    store.remove_member(OWNER_ROLE, A)
    j.revert(m)
    assert store.members(OWNER_ROLE) == (A, B, b"\xc3" * 20)


def test_writes_outside_checkpoint_are_not_journaled():
    j = Journal()
    j.record(lambda: None)
    assert j.depth() == 0


def test_underflow_and_bad_marker():
    j = Journal()
    with pytest.raises(RuntimeError):
        j.commit(0)
    j.checkpoint()
    with pytest.raises(ValueError):
        j.revert(5)


def test_sink_stages_until_flush():
    sink = NotificationSink()
    got = []
    unsubscribe = sink.subscribe(got.append)
    mark = sink.mark()
    sink.emit(Notification.make("Submission", tx_id=0))
    sink.emit(Notification.make("Confirmation", tx_id=0, owner=A))
    assert got == [] and len(sink) == 0
    sink.truncate(mark + 1)
    out = sink.flush()
    assert [n.name for n in out] == ["Submission"]
    assert sink.names() == ["Submission"]
    assert got[0].get("tx_id") == 0

    unsubscribe()
    sink.emit(Notification.make("Submission", tx_id=1))
    sink.flush()
    assert len(got) == 1
    assert len(sink) == 2


def test_failing_subscriber_does_not_block_others():
    sink = NotificationSink()
    got = []

    def bad(_n):
        raise RuntimeError("subscriber bug")

    sink.subscribe(bad)
    sink.subscribe(got.append)
    sink.emit(Notification.make("Paused", account=A))
    sink.flush()
    assert [n.name for n in got] == ["Paused"]


def test_notification_to_dict_hexifies():
    n = Notification.make("Confirmation", owner=A, tx_id=3)
    assert n.to_dict() == {"name": "Confirmation", "args": {"owner": "0x" + A.hex(), "tx_id": 3}}
