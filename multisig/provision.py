"""
multisig.provision — environment-driven wallet provisioning.

Reads the deployment environment, validates it, and builds an initialized
`MultisigWallet` in which the external admin multisig holds UPGRADER and
DEFAULT_ADMIN while the listed owners hold OWNER.

Environment
-----------
  NETWORK        test | mainnet | goerli | sepolia         (default: test)
  OWNER1..OWNERn owner accounts, at least three, numbered contiguously from 1
  THRESHOLD      confirmations required                    (default: 2)
  GNOSIS_SAFE    admin multisig account; required unless NETWORK=test

Every account must match ``^0x[a-fA-F0-9]{40}$``. All problems are collected
and reported together in a single InvalidConfiguration whose `data["errors"]`
lists them.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .config import MultisigConfig
from .errors import InvalidConfiguration
from .runtime.executor import ActionExecutor
from .types.address import is_valid_address, to_principal
from .wallet import MultisigWallet

log = logging.getLogger("multisig.provision")

NETWORKS = ("test", "mainnet", "goerli", "sepolia")
MIN_OWNERS = 3
DEFAULT_THRESHOLD = 2


@dataclass(frozen=True)
class DeploymentSettings:
    network: str
    owners: Tuple[str, ...]
    threshold: int = DEFAULT_THRESHOLD
    admin_safe: Optional[str] = None

    @property
    def is_test(self) -> bool:
        return self.network == "test"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "DeploymentSettings":
        """
        Parse and validate deployment variables.

        Raises:
            InvalidConfiguration listing every problem found.
        """
        env = os.environ if env is None else env
        errors: List[str] = []

        network = (env.get("NETWORK") or "test").strip().lower()
        if network not in NETWORKS:
            errors.append(f"NETWORK must be one of {', '.join(NETWORKS)} (got {network!r})")

        owners: List[str] = []
        i = 1
        while True:
            raw = env.get(f"OWNER{i}")
            if raw is None or not raw.strip():
                break
            addr = raw.strip()
            if not is_valid_address(addr):
                errors.append(f"OWNER{i} is not a valid address: {addr!r}")
            elif addr.lower() in (o.lower() for o in owners):
                errors.append(f"OWNER{i} duplicates an earlier owner: {addr}")
            owners.append(addr)
            i += 1
        stray = sorted(
            k for k in env
            if k.startswith("OWNER") and k[5:].isdigit() and int(k[5:]) > i
        )
        if stray:
            errors.append(f"owner variables must be numbered contiguously from OWNER1 (stray: {', '.join(stray)})")
        if len(owners) < MIN_OWNERS:
            errors.append(f"at least {MIN_OWNERS} owners required (OWNER1..OWNER{MIN_OWNERS}), got {len(owners)}")

        threshold = DEFAULT_THRESHOLD
        raw_threshold = (env.get("THRESHOLD") or "").strip()
        if raw_threshold:
            try:
                threshold = int(raw_threshold)
            except ValueError:
                errors.append(f"THRESHOLD must be an integer (got {raw_threshold!r})")
        if owners and not 1 <= threshold <= len(owners):
            errors.append(f"THRESHOLD must be between 1 and {len(owners)} (got {threshold})")

        safe = (env.get("GNOSIS_SAFE") or "").strip() or None
        if safe is None:
            if network != "test":
                errors.append("GNOSIS_SAFE is required unless NETWORK=test")
        elif not is_valid_address(safe):
            errors.append(f"GNOSIS_SAFE is not a valid address: {safe!r}")

        if errors:
            raise InvalidConfiguration("invalid deployment environment", data={"errors": errors})

        return cls(network=network, owners=tuple(owners), threshold=threshold, admin_safe=safe)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "network": self.network,
            "owners": list(self.owners),
            "threshold": self.threshold,
            "gnosis_safe": self.admin_safe,
        }


def provision_wallet(
    settings: DeploymentSettings,
    *,
    executor: Optional[ActionExecutor] = None,
    config: Optional[MultisigConfig] = None,
    address: Optional[str] = None,
) -> MultisigWallet:
    """
    Build and initialize a wallet from validated settings.

    The admin safe (if any) holds UPGRADER and DEFAULT_ADMIN. On a test network
    without a safe, the owners administer roles and nobody can upgrade until an
    admin grants UPGRADER.
    """
    wallet = MultisigWallet(address, executor=executor, config=config)
    upgraders = [to_principal(settings.admin_safe)] if settings.admin_safe else []
    wallet.initialize(
        [to_principal(o) for o in settings.owners],
        settings.threshold,
        upgraders=upgraders,
        admins=upgraders or None,
    )
    log.info("wallet provisioned", extra={"network": settings.network, "owners": len(settings.owners)})
    return wallet


__all__ = ["DeploymentSettings", "provision_wallet", "NETWORKS", "MIN_OWNERS", "DEFAULT_THRESHOLD"]
