"""
token_ledger.genesis — bootstrap seed for genesis-seeded ledgers.

A genesis seed is the pair ``{total_supply, supply_owner?}`` consumed exactly once,
before the ledger accepts any operation. This module only loads and validates it;
applying it is `runtime.seeding.plan_genesis_seed`.

File format (JSON or YAML)::

    {
      "total_supply": 20000000,     # optional, defaults to 20_000_000
      "supply_owner": "alice"       # optional; no owner → supply is set, no balance minted
    }

camelCase keys (``totalSupply``, ``supplyOwner``) are accepted as aliases.

Usage (library):
    from token_ledger.genesis import load_genesis
    genesis = load_genesis("genesis.json")
    ledger = TokenLedger.from_genesis(genesis)
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Hashable, Mapping, Optional

import yaml

from .errors import ConfigError
from .math.safe_uint import U64_MAX, is_uint
from .state.supply import DEFAULT_TOTAL_SUPPLY
from .types.events import render_account

_ALIASES = {
    "totalSupply": "total_supply",
    "supplyOwner": "supply_owner",
}


@dataclass(frozen=True)
class GenesisConfig:
    total_supply: int = DEFAULT_TOTAL_SUPPLY
    supply_owner: Optional[Hashable] = None

    def validate(self, max_value: int = U64_MAX) -> "GenesisConfig":
        if not is_uint(self.total_supply, max_value):
            raise ConfigError(
                f"genesis total_supply must be an integer in [0, {max_value}] (got {self.total_supply!r})"
            )
        if self.supply_owner is not None:
            try:
                hash(self.supply_owner)
            except TypeError as e:
                raise ConfigError(f"genesis supply_owner must be hashable (got {self.supply_owner!r})") from e
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_supply": self.total_supply,
            "supply_owner": render_account(self.supply_owner),
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GenesisConfig":
        norm = {_ALIASES.get(k, k): v for k, v in data.items()}
        unknown = sorted(set(norm) - {"total_supply", "supply_owner"})
        if unknown:
            raise ConfigError(f"unknown genesis keys: {unknown}")
        supply = norm.get("total_supply", DEFAULT_TOTAL_SUPPLY)
        if isinstance(supply, str):
            try:
                supply = int(supply.replace("_", ""), 0)
            except ValueError as e:
                raise ConfigError(f"genesis total_supply is not an integer: {supply!r}") from e
        owner = norm.get("supply_owner")
        if owner == "":
            owner = None
        return cls(total_supply=supply, supply_owner=owner).validate()


def load_genesis(path: str | Path, *, max_value: int = U64_MAX) -> GenesisConfig:
    """Read, parse and validate a genesis file (.json, .yaml or .yml)."""
    p = Path(path).expanduser()
    if not p.is_file():
        raise FileNotFoundError(str(p))
    text = p.read_text(encoding="utf-8")
    try:
        if p.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text or "{}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"cannot parse genesis file {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"genesis file {p} must contain a mapping at top level")
    return GenesisConfig.from_mapping(data).validate(max_value)


__all__ = ["GenesisConfig", "load_genesis"]
