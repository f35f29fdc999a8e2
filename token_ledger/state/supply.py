"""
token_ledger.state.supply — total-supply counter and the one-shot seeding guard.

The supply starts at the configured default (20,000,000 unless overridden) and only
ever goes down after seeding (burn). `initialized` flips to True exactly once, when
the ledger is seeded either by an explicit `init` or by genesis, and never reverts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

DEFAULT_TOTAL_SUPPLY: Final[int] = 20_000_000


@dataclass
class SupplyTracker:
    total_supply: int = DEFAULT_TOTAL_SUPPLY
    initialized: bool = False

    def _put_total(self, value: int) -> None:
        self.total_supply = value

    def _mark_initialized(self) -> None:
        self.initialized = True


__all__ = ["DEFAULT_TOTAL_SUPPLY", "SupplyTracker"]
