from __future__ import annotations

import pytest

from multisig.engine.approvals import ApprovalEngine
from multisig.errors import (InvalidConfiguration, MustBePausedForUpgrade,
                             Unauthorized)
from multisig.types.roles import OWNER_ROLE
from multisig.upgrade.logic import ApprovalLogic, proxiable_uuid

from .conftest import A, B, C, DEST, UPG


class _AuditingEngine(ApprovalEngine):
    submitted = []

    def submit(self, caller, destination, value, payload=b""):
        tx_id = super().submit(caller, destination, value, payload)
        self.submitted.append(tx_id)
        return tx_id


class ApprovalLogicV2(ApprovalLogic):
    version = "2"
    engine_cls = _AuditingEngine


class ForeignLogic(ApprovalLogic):
    name = "foreign"
    namespace = b"someone-else/upgrade/v1"


@pytest.fixture(autouse=True)
def _clear_audit():
    _AuditingEngine.submitted = []
    yield


def test_upgrade_requires_pause(wallet):
    with pytest.raises(MustBePausedForUpgrade):
        wallet.authorize_upgrade(UPG, ApprovalLogicV2())
    assert wallet.implementation.version == "1"


def test_upgrade_requires_upgrader_even_when_paused(wallet):
    wallet.pause(A)
    with pytest.raises(Unauthorized):
        wallet.authorize_upgrade(A, ApprovalLogicV2())


def test_role_checked_before_pause(wallet):
    with pytest.raises(Unauthorized):
        wallet.authorize_upgrade(B, ApprovalLogicV2())


def test_upgrade_preserves_state_and_swaps_behavior(wallet, ready_tx):
    wallet.pause(A)
    new_logic = ApprovalLogicV2()
    wallet.authorize_upgrade(UPG, new_logic)

    assert wallet.implementation is new_logic
    upgraded = wallet.notifications[-1]
    assert upgraded.name == "Upgraded"
    assert upgraded.get("implementation") == "approval-logic@2"

    # storage untouched: still paused, ledger and roles intact
    assert wallet.is_paused()
    rec = wallet.get_transaction(ready_tx)
    assert rec.confirmations == 2 and rec.executed is False
    assert wallet.role_members(OWNER_ROLE) == (A, B, C)

    wallet.unpause(A)
    tx = wallet.submit(B, DEST, 1)
    assert _AuditingEngine.submitted == [tx]
    assert wallet.execute(A, ready_tx).success


def test_incompatible_module_rejected(wallet):
    wallet.pause(A)
    current = wallet.implementation
    with pytest.raises(InvalidConfiguration):
        wallet.authorize_upgrade(UPG, ForeignLogic())
    assert wallet.implementation is current
    assert wallet.notifications[-1].name == "Paused"


def test_not_a_logic_module_rejected(wallet):
    wallet.pause(A)
    with pytest.raises(InvalidConfiguration):
        wallet.authorize_upgrade(UPG, object())


def test_reinstalling_same_module_is_accepted(wallet):
    wallet.pause(A)
    wallet.upgrade_to(UPG, ApprovalLogic())
    assert wallet.notifications[-1].name == "Upgraded"


def test_uuid_is_namespace_hash():
    assert ApprovalLogic().proxiable_uuid() == proxiable_uuid(b"multisig/upgrade/v1")
    assert ForeignLogic().proxiable_uuid() != ApprovalLogic().proxiable_uuid()
    assert ApprovalLogicV2().describe()["version"] == "2"
