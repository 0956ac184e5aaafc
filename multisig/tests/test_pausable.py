from __future__ import annotations

import pytest

from multisig.errors import AlreadyPaused, NotPaused, Paused, Unauthorized
from multisig.types.roles import PAUSER_ROLE, PausePolicy
from multisig.wallet import MultisigWallet

from .conftest import A, B, C, D, DEST, STRANGER


def test_pause_blocks_mutations(wallet, ready_tx):
    pending = wallet.submit(A, DEST, 1)
    wallet.pause(A)
    assert wallet.is_paused()
    assert wallet.notifications[-1].name == "Paused"
    assert wallet.notifications[-1].get("account") == A

    with pytest.raises(Paused):
        wallet.submit(A, DEST, 1)
    with pytest.raises(Paused):
        wallet.confirm(C, pending)
    with pytest.raises(Paused):
        wallet.execute(A, ready_tx)

    # queries keep working
    assert wallet.get_transaction(ready_tx).confirmations == 2
    assert wallet.transaction_count() == 2

    wallet.unpause(B)
    assert not wallet.is_paused()
    assert wallet.notifications[-1].name == "Unpaused"
    assert wallet.execute(A, ready_tx).success


def test_redundant_transitions_rejected(wallet):
    with pytest.raises(NotPaused):
        wallet.unpause(A)
    wallet.pause(A)
    with pytest.raises(AlreadyPaused):
        wallet.pause(B)
    assert [n.name for n in wallet.notifications].count("Paused") == 1


def test_non_owner_cannot_pause_under_owner_policy(wallet):
    with pytest.raises(Unauthorized):
        wallet.pause(STRANGER)
    assert not wallet.is_paused()


def test_authorization_checked_before_pause_state(wallet):
    wallet.pause(A)
    with pytest.raises(Unauthorized):
        wallet.submit(STRANGER, DEST, 1)
    with pytest.raises(Unauthorized):
        wallet.unpause(STRANGER)


def test_pauser_policy(cfg):
    w = MultisigWallet(config=cfg)
    w.initialize([A, B, C], 2, pausers=[D], pause_policy="pauser")
    assert w.store.pause_policy is PausePolicy.PAUSER
    assert w.has_role(PAUSER_ROLE, D)

    with pytest.raises(Unauthorized):
        w.pause(A)
    w.pause(D)
    assert w.is_paused()
    with pytest.raises(Unauthorized):
        w.submit(D, DEST, 1)
    w.unpause(D)
    assert not w.is_paused()


def test_pauser_policy_defaults_pausers_to_owners(cfg):
    w = MultisigWallet(config=cfg)
    w.initialize([A, B], 1, pause_policy=PausePolicy.PAUSER)
    assert w.role_members("pauser") == (A, B)
    w.pause(B)
    assert w.is_paused()


def test_pause_policy_from_config():
    from multisig.config import load_config

    cfg = load_config(env={"MULTISIG_PAUSE_POLICY": "pauser"})
    w = MultisigWallet(config=cfg)
    w.initialize([A], 1, pausers=[D])
    with pytest.raises(Unauthorized):
        w.pause(A)
    w.pause(D)
