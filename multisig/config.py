"""
multisig.config — runtime configuration for the approval gateway.

This module centralizes knobs for:
  • Capability policies (who may pause, who administers roles)
  • Limits (owner count, payload size)
  • Logging (level, format)

Configuration may be provided via environment variables. Safe defaults are chosen so a
local developer run works out of the box.

Environment variables (all optional):
  MULTISIG_PAUSE_POLICY        -> owner | pauser                (default: owner)
  MULTISIG_ADMIN_POLICY        -> super_admin | role_members    (default: super_admin)
  MULTISIG_MAX_OWNERS          -> integer                       (default: 50)
  MULTISIG_MAX_PAYLOAD_BYTES   -> e.g. "128KiB", "65536"        (default: 128KiB)
  MULTISIG_LOG_LEVEL           -> DEBUG | INFO | WARNING ...    (default: INFO)
  MULTISIG_LOG_FORMAT          -> json | text                   (default: auto)

Programmatic usage:
    from multisig.config import get_config
    cfg = get_config()
    if cfg.policies.pause_policy is PausePolicy.PAUSER:
        ...

The policies here are *defaults*: `MultisigWallet.initialize` may override them, and
the values actually chosen are persisted in the wallet's store.
"""

from __future__ import annotations

import os
import re
from dataclasses import asdict, dataclass, field
from functools import lru_cache
from typing import Dict, Mapping, Optional, Union

from .types.roles import AdminPolicy, PausePolicy

# ----------------------------- helpers -------------------------------------


_SIZE_RE = re.compile(r"^\s*(\d+)\s*([kKmM]i?[bB]|[bB])?\s*$")

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}


def _parse_size_bytes(s: Union[str, int]) -> int:
    """
    Parse human-friendly byte sizes:
      "128KiB", "64KB", "1MiB", "131072", 131072 -> bytes (int)
    """
    if isinstance(s, int):
        if s < 0:
            raise ValueError("size must be non-negative")
        return s

    m = _SIZE_RE.match(str(s))
    if not m:
        raise ValueError(f"invalid size: {s!r}")

    num = int(m.group(1))
    unit = (m.group(2) or "B").lower()
    mult = {
        "b": 1,
        "kb": 1000,
        "kib": 1024,
        "mb": 1000**2,
        "mib": 1024**2,
    }.get(unit)
    if mult is None:
        raise ValueError(f"unknown size unit: {unit}")
    return num * mult


# ------------------------------ dataclasses ---------------------------------


@dataclass(frozen=True)
class Policies:
    pause_policy: PausePolicy = PausePolicy.OWNER
    admin_policy: AdminPolicy = AdminPolicy.SUPER_ADMIN


@dataclass(frozen=True)
class Limits:
    max_owners: int = 50
    max_payload_bytes: int = 128 * 1024  # 128 KiB


@dataclass(frozen=True)
class LogSettings:
    level: str = "INFO"
    fmt: Optional[str] = None  # None → decide by TTY


@dataclass(frozen=True)
class MultisigConfig:
    policies: Policies = field(default_factory=Policies)
    limits: Limits = field(default_factory=Limits)
    logging: LogSettings = field(default_factory=LogSettings)

    def to_dict(self) -> Dict[str, object]:
        d = asdict(self)
        d["policies"] = {
            "pause_policy": self.policies.pause_policy.value,
            "admin_policy": self.policies.admin_policy.value,
        }
        return d


# ------------------------------ loader --------------------------------------


def _validate(cfg: MultisigConfig) -> MultisigConfig:
    if cfg.limits.max_owners < 1:
        raise ValueError("max_owners must be ≥ 1")
    if cfg.limits.max_payload_bytes < 0:
        raise ValueError("max_payload_bytes must be ≥ 0")
    if cfg.logging.level.upper() not in _LOG_LEVELS:
        raise ValueError(f"unknown log level: {cfg.logging.level!r}")
    if cfg.logging.fmt not in (None, "json", "text"):
        raise ValueError(f"log format must be json or text, got {cfg.logging.fmt!r}")
    return cfg


def load_config(
    env: Optional[Mapping[str, str]] = None,
    *,
    overrides: Optional[Mapping[str, Union[str, int, PausePolicy, AdminPolicy]]] = None,
) -> MultisigConfig:
    """
    Build a MultisigConfig from environment and optional overrides.

    Args:
        env: mapping to read variables from (default: os.environ)
        overrides: explicit field overrides; keys support:
          'pause_policy', 'admin_policy', 'max_owners', 'max_payload_bytes',
          'log_level', 'log_format'

    Raises:
        ValueError on unparseable or out-of-range values.
    """
    env = os.environ if env is None else env
    overrides = dict(overrides or {})

    pause_raw = overrides.get("pause_policy", env.get("MULTISIG_PAUSE_POLICY", ""))
    admin_raw = overrides.get("admin_policy", env.get("MULTISIG_ADMIN_POLICY", ""))
    policies = Policies(
        pause_policy=(
            pause_raw
            if isinstance(pause_raw, PausePolicy)
            else PausePolicy.from_str(str(pause_raw), default=PausePolicy.OWNER)
        ),
        admin_policy=(
            admin_raw
            if isinstance(admin_raw, AdminPolicy)
            else AdminPolicy.from_str(str(admin_raw), default=AdminPolicy.SUPER_ADMIN)
        ),
    )

    limits = Limits(
        max_owners=int(overrides.get("max_owners", env.get("MULTISIG_MAX_OWNERS", 50))),
        max_payload_bytes=_parse_size_bytes(
            overrides.get("max_payload_bytes", env.get("MULTISIG_MAX_PAYLOAD_BYTES", 128 * 1024))
        ),
    )

    fmt_raw = str(overrides.get("log_format", env.get("MULTISIG_LOG_FORMAT", ""))).strip().lower()
    logging_settings = LogSettings(
        level=str(overrides.get("log_level", env.get("MULTISIG_LOG_LEVEL", "INFO"))).strip().upper(),
        fmt=fmt_raw or None,
    )

    return _validate(MultisigConfig(policies=policies, limits=limits, logging=logging_settings))


@lru_cache(maxsize=1)
def get_config() -> MultisigConfig:
    """
    Cached global config. Suitable for application bootstraps and module-level consumers.
    """
    return load_config()


# ----------------------------- pretty-print ---------------------------------


def _fmt_bytes(n: int) -> str:
    for unit, div in (("MiB", 1024**2), ("KiB", 1024)):
        if n >= div and n % div == 0:
            return f"{n // div}{unit}"
    return f"{n}B"


def summary(cfg: Optional[MultisigConfig] = None) -> str:
    """
    Return a one-line summary of the most important knobs.
    """
    cfg = cfg or get_config()
    return (
        "multisig{"
        f"pause={cfg.policies.pause_policy.value}, admin={cfg.policies.admin_policy.value}, "
        f"max_owners={cfg.limits.max_owners}, payload={_fmt_bytes(cfg.limits.max_payload_bytes)}, "
        f"log={cfg.logging.level}/{cfg.logging.fmt or 'auto'}"
        "}"
    )


__all__ = [
    "Policies",
    "Limits",
    "LogSettings",
    "MultisigConfig",
    "load_config",
    "get_config",
    "summary",
]
