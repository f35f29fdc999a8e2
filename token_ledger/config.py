from __future__ import annotations
"""
token_ledger.config — configuration for the token ledger

Covers:
- Default total supply used when no genesis overrides it
- Seeding policy: "explicit" (one-shot init by a caller) or "genesis" (bootstrap seed)
- Integer width of balances/allowances/supply (default 64-bit unsigned)
- Burn reachability and observability toggles

Environment overrides (all optional; sensible defaults provided):

  TOKEN_LEDGER_TOTAL_SUPPLY=20000000
  TOKEN_LEDGER_SEEDING=explicit           # or "genesis"
  TOKEN_LEDGER_WIDTH_BITS=64
  TOKEN_LEDGER_ALLOW_PUBLIC_BURN=0
  TOKEN_LEDGER_EMIT_BURN_EVENTS=1
  TOKEN_LEDGER_METRICS=1

You can also load from a JSON or YAML file via
`TOKEN_LEDGER_CONFIG_FILE=/path/to/config.(json|yaml|yml)`.
File values override defaults; environment overrides the file.
"""


from dataclasses import dataclass, asdict, replace
from typing import Any, Dict, Optional
import json
import os
from pathlib import Path

import yaml

from .errors import ConfigError
from .state.supply import DEFAULT_TOTAL_SUPPLY

SEEDING_EXPLICIT = "explicit"
SEEDING_GENESIS = "genesis"
_SEEDING_POLICIES = (SEEDING_EXPLICIT, SEEDING_GENESIS)

_BOOL_TRUE = {"1", "true", "t", "yes", "y", "on"}
_BOOL_FALSE = {"0", "false", "f", "no", "n", "off"}


# -------------------------- Data classes --------------------------


@dataclass(frozen=True)
class LedgerConfig:
    """Top-level configuration container."""
    total_supply: int = DEFAULT_TOTAL_SUPPLY
    seeding: str = SEEDING_EXPLICIT
    width_bits: int = 64
    allow_public_burn: bool = False
    emit_burn_events: bool = True
    metrics_enabled: bool = True

    @property
    def max_value(self) -> int:
        return (1 << self.width_bits) - 1

    def validate(self) -> "LedgerConfig":
        if self.seeding not in _SEEDING_POLICIES:
            raise ConfigError(f"seeding must be one of {_SEEDING_POLICIES} (got {self.seeding!r}).")
        if not isinstance(self.width_bits, int) or not (8 <= self.width_bits <= 256):
            raise ConfigError(f"width_bits must be an int in [8, 256] (got {self.width_bits!r}).")
        if isinstance(self.total_supply, bool) or not isinstance(self.total_supply, int):
            raise ConfigError(f"total_supply must be an int (got {self.total_supply!r}).")
        if not (0 <= self.total_supply <= self.max_value):
            raise ConfigError(
                f"total_supply must be in [0, {self.max_value}] for width_bits={self.width_bits} "
                f"(got {self.total_supply})."
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# -------------------------- Loaders --------------------------


def _getenv_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(str(v).replace("_", ""))
    except ValueError as e:
        raise ConfigError(f"Invalid int for {name}: {v!r}") from e


def _getenv_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return default
    s = v.strip().lower()
    if s in _BOOL_TRUE:
        return True
    if s in _BOOL_FALSE:
        return False
    raise ConfigError(f"Invalid bool for {name}: {v!r}")


def from_env(base: Optional[LedgerConfig] = None, prefix: str = "TOKEN_LEDGER_") -> LedgerConfig:
    """
    Build a LedgerConfig from environment variables, optionally layering on top of `base`.
    """
    cfg = base or LedgerConfig()
    seeding = os.getenv(f"{prefix}SEEDING")
    new_cfg = LedgerConfig(
        total_supply=_getenv_int(f"{prefix}TOTAL_SUPPLY", cfg.total_supply),
        seeding=seeding.strip().lower() if seeding else cfg.seeding,
        width_bits=_getenv_int(f"{prefix}WIDTH_BITS", cfg.width_bits),
        allow_public_burn=_getenv_bool(f"{prefix}ALLOW_PUBLIC_BURN", cfg.allow_public_burn),
        emit_burn_events=_getenv_bool(f"{prefix}EMIT_BURN_EVENTS", cfg.emit_burn_events),
        metrics_enabled=_getenv_bool(f"{prefix}METRICS", cfg.metrics_enabled),
    )
    return new_cfg.validate()


def from_file(path: str | os.PathLike[str]) -> LedgerConfig:
    """
    Load configuration from a JSON or YAML file. Unknown keys are rejected.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)

    text = p.read_text(encoding="utf-8")
    try:
        if p.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text or "{}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"cannot parse config file {p}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config file {p} must contain a mapping at top level")
    known = set(LedgerConfig.__dataclass_fields__)
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown config keys in {p}: {unknown}")

    return replace(LedgerConfig(), **data).validate()


def load() -> LedgerConfig:
    """
    Load configuration using the following precedence:
      1) File at $TOKEN_LEDGER_CONFIG_FILE (JSON/YAML)
      2) Environment variables (TOKEN_LEDGER_*), applied on top of defaults or file values
    """
    file_path = os.getenv("TOKEN_LEDGER_CONFIG_FILE")
    base = from_file(file_path) if file_path else LedgerConfig()
    return from_env(base=base)


# -------------------------- Utilities --------------------------


def pretty(cfg: Optional[LedgerConfig] = None) -> str:
    """Return a human-readable JSON string of the current config."""
    obj = (cfg or load()).to_dict()
    return json.dumps(obj, indent=2, sort_keys=True)


__all__ = [
    "SEEDING_EXPLICIT",
    "SEEDING_GENESIS",
    "LedgerConfig",
    "from_env",
    "from_file",
    "load",
    "pretty",
]
