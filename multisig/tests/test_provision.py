from __future__ import annotations

import pytest

from multisig.errors import InvalidConfiguration
from multisig.provision import DeploymentSettings, provision_wallet
from multisig.types.address import to_principal
from multisig.types.roles import DEFAULT_ADMIN_ROLE, OWNER_ROLE, UPGRADER_ROLE

O1 = "0x" + "11" * 20
O2 = "0x" + "22" * 20
O3 = "0x" + "33" * 20
O4 = "0x" + "44" * 20
SAFE = "0x" + "5a" * 20


def _env(**extra):
    env = {"OWNER1": O1, "OWNER2": O2, "OWNER3": O3}
    env.update(extra)
    return env


def test_minimal_test_network():
    s = DeploymentSettings.from_env(_env())
    assert s.network == "test" and s.is_test
    assert s.owners == (O1, O2, O3)
    assert s.threshold == 2
    assert s.admin_safe is None


def test_mainnet_with_safe():
    s = DeploymentSettings.from_env(_env(NETWORK="mainnet", GNOSIS_SAFE=SAFE, OWNER4=O4, THRESHOLD="3"))
    assert s.owners == (O1, O2, O3, O4)
    assert s.threshold == 3
    assert s.to_dict()["gnosis_safe"] == SAFE


def test_errors_are_collected():
    env = {
        "NETWORK": "sepolia",
        "OWNER1": O1,
        "OWNER2": "0x1234",
        "THRESHOLD": "x",
    }
    with pytest.raises(InvalidConfiguration) as ei:
        DeploymentSettings.from_env(env)
    errors = ei.value.data["errors"]
    assert any("OWNER2 is not a valid address" in e for e in errors)
    assert any("at least 3 owners" in e for e in errors)
    assert any("THRESHOLD must be an integer" in e for e in errors)
    assert any("GNOSIS_SAFE is required" in e for e in errors)


@pytest.mark.parametrize(
    "extra,needle",
    [
        ({"NETWORK": "ropsten"}, "NETWORK must be one of"),
        ({"OWNER5": O4}, "numbered contiguously"),
        ({"OWNER3": O1}, "duplicates"),
        ({"THRESHOLD": "4"}, "between 1 and 3"),
        ({"THRESHOLD": "0"}, "between 1 and 3"),
        ({"GNOSIS_SAFE": "safe.eth"}, "GNOSIS_SAFE is not a valid address"),
    ],
)
def test_single_problem(extra, needle):
    with pytest.raises(InvalidConfiguration) as ei:
        DeploymentSettings.from_env(_env(**extra))
    assert any(needle in e for e in ei.value.data["errors"])


def test_provision_wallet_roles(cfg):
    s = DeploymentSettings.from_env(_env(NETWORK="goerli", GNOSIS_SAFE=SAFE))
    w = provision_wallet(s, config=cfg)
    safe = to_principal(SAFE)
    assert w.threshold == 2
    assert w.role_members(OWNER_ROLE) == tuple(to_principal(o) for o in (O1, O2, O3))
    assert w.role_members(UPGRADER_ROLE) == (safe,)
    assert w.role_members(DEFAULT_ADMIN_ROLE) == (safe,)
    assert not w.has_role(OWNER_ROLE, safe)


def test_provision_without_safe_on_test(cfg):
    w = provision_wallet(DeploymentSettings.from_env(_env()), config=cfg)
    assert w.role_members(UPGRADER_ROLE) == ()
    assert w.role_members(DEFAULT_ADMIN_ROLE) == w.role_members(OWNER_ROLE)
