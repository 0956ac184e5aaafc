"""
multisig.cli.scenario — scenario files for `multisig run`.

A scenario is a JSON document describing a wallet and a list of steps applied
to it in order. Models are validated with pydantic before anything runs, so a
malformed file never produces partial output.

    {
      "wallet":    {"address": "0x…", "balance": 1000},
      "owners":    ["0x…", "0x…", "0x…"],
      "threshold": 2,
      "upgraders": ["0x…"],
      "pause_policy": "owner",
      "steps": [
        {"op": "submit",  "caller": "0x…", "destination": "0x…", "value": 10},
        {"op": "confirm", "caller": "0x…", "tx_id": 0},
        {"op": "execute", "caller": "0x…", "tx_id": 0, "expect": "INSUFFICIENT_CONFIRMATIONS"}
      ]
    }

Outcomes
--------
Each step yields an outcome string: ``ok``, ``failed`` (executor reported
failure) or the error code of the rejection (e.g. ``ALREADY_EXECUTED``). A
step's optional ``expect`` is compared case-insensitively to that outcome.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..config import MultisigConfig
from ..errors import MultisigError, error_to_result_fields
from ..runtime.executor import InMemoryLedger
from ..types.address import is_null, to_principal
from ..types.roles import role_from_name
from ..upgrade.logic import ApprovalLogic
from ..wallet import MultisigWallet

Op = Literal[
    "submit",
    "confirm",
    "execute",
    "pause",
    "unpause",
    "grant_role",
    "revoke_role",
    "renounce_role",
    "set_role_admin",
    "upgrade",
    "deposit",
]

_NEEDS_TX = {"confirm", "execute"}
_NEEDS_ROLE = {"grant_role", "revoke_role", "renounce_role", "set_role_admin"}
_NEEDS_ACCOUNT = {"grant_role", "revoke_role", "deposit"}


def _hex_principal(v: str) -> str:
    try:
        p = to_principal(v)
    except (TypeError, ValueError) as e:
        raise ValueError(str(e)) from e
    if is_null(p):
        raise ValueError("principal must not be null")
    return "0x" + p.hex()


def _hex_bytes(v: str) -> str:
    s = v[2:] if v.startswith(("0x", "0X")) else v
    try:
        bytes.fromhex(s)
    except ValueError as e:
        raise ValueError(f"invalid hex payload: {v!r}") from e
    return "0x" + s.lower()


class WalletSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    address: Optional[str] = None
    balance: int = Field(default=0, ge=0)

    @field_validator("address")
    @classmethod
    def _addr_ok(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _hex_principal(v)


class Step(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    op: Op
    caller: Optional[str] = None
    destination: Optional[str] = None
    value: int = Field(default=0, ge=0)
    payload: str = "0x"
    tx_id: Optional[int] = Field(default=None, ge=0)
    role: Optional[str] = None
    admin_role: Optional[str] = None
    account: Optional[str] = None
    namespace: Optional[str] = None
    expect: Optional[str] = None

    @field_validator("caller", "destination", "account")
    @classmethod
    def _principal_ok(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _hex_principal(v)

    @field_validator("payload")
    @classmethod
    def _payload_hex(cls, v: str) -> str:
        return _hex_bytes(v)

    @field_validator("role", "admin_role")
    @classmethod
    def _role_ok(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            role_from_name(v)
        return v

    @model_validator(mode="after")
    def _required_fields(self) -> "Step":
        if self.op != "deposit" and self.caller is None:
            raise ValueError(f"`caller` is required for {self.op}")
        if self.op == "submit" and self.destination is None:
            raise ValueError("`destination` is required for submit")
        if self.op in _NEEDS_TX and self.tx_id is None:
            raise ValueError(f"`tx_id` is required for {self.op}")
        if self.op in _NEEDS_ROLE and self.role is None:
            raise ValueError(f"`role` is required for {self.op}")
        if self.op == "set_role_admin" and self.admin_role is None:
            raise ValueError("`admin_role` is required for set_role_admin")
        if self.op in _NEEDS_ACCOUNT and self.account is None:
            raise ValueError(f"`account` is required for {self.op}")
        return self


class Scenario(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    wallet: WalletSettings = Field(default_factory=WalletSettings)
    owners: List[str] = Field(min_length=1)
    threshold: int
    upgraders: List[str] = Field(default_factory=list)
    pausers: Optional[List[str]] = None
    admins: Optional[List[str]] = None
    pause_policy: Optional[str] = None
    admin_policy: Optional[str] = None
    steps: List[Step] = Field(default_factory=list)

    @field_validator("owners", "upgraders")
    @classmethod
    def _principals_ok(cls, v: List[str]) -> List[str]:
        return [_hex_principal(x) for x in v]

    @field_validator("pausers", "admins")
    @classmethod
    def _opt_principals_ok(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return None if v is None else [_hex_principal(x) for x in v]

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Scenario":
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


def _jsonable(v: Any) -> Any:
    if isinstance(v, (bytes, bytearray)):
        return "0x" + bytes(v).hex()
    if hasattr(v, "to_dict"):
        return v.to_dict()
    return v


def _apply(wallet: MultisigWallet, ledger: InMemoryLedger, step: Step) -> Any:
    c = step.caller
    if step.op == "submit":
        return wallet.submit(c, step.destination, step.value, to_principal(step.payload))
    if step.op == "confirm":
        return wallet.confirm(c, step.tx_id)
    if step.op == "execute":
        return wallet.execute(c, step.tx_id)
    if step.op == "pause":
        return wallet.pause(c)
    if step.op == "unpause":
        return wallet.unpause(c)
    if step.op == "grant_role":
        return wallet.grant_role(c, step.role, step.account)
    if step.op == "revoke_role":
        return wallet.revoke_role(c, step.role, step.account)
    if step.op == "renounce_role":
        return wallet.renounce_role(c, step.role)
    if step.op == "set_role_admin":
        return wallet.set_role_admin(c, step.role, step.admin_role)
    if step.op == "upgrade":
        logic = ApprovalLogic()
        if step.namespace:
            logic.namespace = step.namespace.encode("utf-8")
        return wallet.authorize_upgrade(c, logic)
    if step.op == "deposit":
        return ledger.deposit(to_principal(step.account), step.value)
    raise ValueError(f"unsupported op: {step.op}")  # pragma: no cover - guarded by Literal


def build_wallet(scenario: Scenario, *, config: Optional[MultisigConfig] = None) -> MultisigWallet:
    """Construct and initialize the wallet a scenario describes."""
    address = scenario.wallet.address
    wallet = MultisigWallet(address, config=config)
    ledger = wallet.executor
    if scenario.wallet.balance and isinstance(ledger, InMemoryLedger):
        ledger.deposit(wallet.address, scenario.wallet.balance)
    wallet.initialize(
        scenario.owners,
        scenario.threshold,
        upgraders=scenario.upgraders,
        pausers=scenario.pausers,
        admins=scenario.admins,
        pause_policy=scenario.pause_policy,
        admin_policy=scenario.admin_policy,
    )
    return wallet


def run_scenario(scenario: Scenario, *, config: Optional[MultisigConfig] = None) -> Dict[str, Any]:
    """
    Apply every step and return a report:

        {"steps": [{index, op, outcome, status, result?, error?, expect?, matched}],
         "notifications": [...], "mismatches": int}

    Raises:
        MultisigError if the wallet itself cannot be initialized.
        TypeError if the wallet is not backed by an InMemoryLedger.
    """
    wallet = build_wallet(scenario, config=config)
    ledger = wallet.executor
    if not isinstance(ledger, InMemoryLedger):
        raise TypeError(f"scenarios need an InMemoryLedger executor, got {type(ledger).__name__}")

    rows: List[Dict[str, Any]] = []
    mismatches = 0
    for i, step in enumerate(scenario.steps):
        row: Dict[str, Any] = {"index": i, "op": step.op}
        try:
            res = _apply(wallet, ledger, step)
        except MultisigError as err:
            row.update(error_to_result_fields(err))
            outcome = err.code
        else:
            row["status"] = "OK"
            outcome = "ok"
            if res is not None:
                row["result"] = _jsonable(res)
            if getattr(res, "success", True) is False:
                row["status"] = "FAILED"
                outcome = "failed"
        row["outcome"] = outcome
        if step.expect is not None:
            row["expect"] = step.expect
            row["matched"] = step.expect.strip().lower() == outcome.lower()
        else:
            row["matched"] = outcome == "ok"
        if not row["matched"]:
            mismatches += 1
        rows.append(row)

    return {
        "wallet": "0x" + wallet.address.hex(),
        "steps": rows,
        "notifications": [n.to_dict() for n in wallet.notifications],
        "mismatches": mismatches,
    }


def load_and_run(path: Union[str, Path], *, config: Optional[MultisigConfig] = None) -> Dict[str, Any]:
    return run_scenario(Scenario.load(path), config=config)


def dumps(report: Dict[str, Any]) -> str:
    return json.dumps(report, indent=2, sort_keys=False)


__all__ = ["Scenario", "Step", "WalletSettings", "build_wallet", "run_scenario", "load_and_run", "dumps"]
