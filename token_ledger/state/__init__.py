"""
token_ledger.state — in-memory ledger stores and the staged-write commit model.

Exports:
    BalanceStore, AllowanceStore, SupplyTracker : the three sub-stores
    LedgerState                                 : the stores treated as one unit
    WriteSet                                    : values staged by one operation
    DEFAULT_TOTAL_SUPPLY                        : 20_000_000
"""

from __future__ import annotations

from .allowances import AllowanceKey, AllowanceStore
from .balances import BalanceStore
from .ledger_state import LedgerState, WriteSet
from .supply import DEFAULT_TOTAL_SUPPLY, SupplyTracker

__all__ = [
    "AllowanceKey",
    "AllowanceStore",
    "BalanceStore",
    "SupplyTracker",
    "LedgerState",
    "WriteSet",
    "DEFAULT_TOTAL_SUPPLY",
]
