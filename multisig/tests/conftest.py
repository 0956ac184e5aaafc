from __future__ import annotations

import logging
from typing import Dict

import pytest

from multisig.config import load_config
from multisig.wallet import MultisigWallet


def addr(tag: int) -> bytes:
    """Deterministic 20-byte principal."""
    return bytes([tag]) * 20


A = addr(0xA1)
B = addr(0xB2)
C = addr(0xC3)
D = addr(0xD4)
ADMIN = addr(0xAD)
UPG = addr(0x0E)
DEST = addr(0xDE)
STRANGER = addr(0x55)


@pytest.fixture(autouse=True)
def _reset_multisig_logger():
    """CLI tests configure the package logger; keep it propagating to caplog."""
    logger = logging.getLogger("multisig")
    yield
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture()
def cfg():
    return load_config(env={})


@pytest.fixture()
def principals() -> Dict[str, bytes]:
    return {"A": A, "B": B, "C": C, "D": D, "ADMIN": ADMIN, "UPG": UPG, "DEST": DEST, "STRANGER": STRANGER}


@pytest.fixture()
def wallet(cfg) -> MultisigWallet:
    """Owners A, B, C; threshold 2; UPG holds UPGRADER and DEFAULT_ADMIN; 1000 units funded."""
    w = MultisigWallet(addr(0x77), config=cfg)
    w.executor.deposit(w.address, 1000)
    w.initialize([A, B, C], 2, upgraders=[UPG])
    return w


@pytest.fixture()
def ready_tx(wallet: MultisigWallet) -> int:
    tx_id = wallet.submit(A, DEST, 10)
    wallet.confirm(A, tx_id)
    wallet.confirm(B, tx_id)
    return tx_id
