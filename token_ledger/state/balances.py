"""
token_ledger.state.balances — per-account balance table.

A plain mapping AccountId -> int with default-valued lookup: an account that was
never written reads as 0 (not a missing-key error). Zero balances are not stored,
so two stores holding the same balances compare equal regardless of history.

Writes go through `_put`, which only `LedgerState.apply` calls during the commit
phase of an operation; the store itself performs no economic checks.
"""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional, Tuple

from ..types.events import AccountId


class BalanceStore:
    __slots__ = ("_balances",)

    def __init__(self, initial: Optional[Mapping[AccountId, int]] = None) -> None:
        self._balances: Dict[AccountId, int] = {}
        for account, value in (initial or {}).items():
            self._put(account, value)

    def get(self, account: AccountId) -> int:
        return self._balances.get(account, 0)

    def _put(self, account: AccountId, value: int) -> None:
        if value:
            self._balances[account] = value
        else:
            self._balances.pop(account, None)

    def items(self) -> Iterator[Tuple[AccountId, int]]:
        return iter(list(self._balances.items()))

    def total(self) -> int:
        """Sum of all balances (bounded above by the total supply)."""
        return sum(self._balances.values())

    def copy(self) -> "BalanceStore":
        return BalanceStore(self._balances)

    def __contains__(self, account: object) -> bool:
        return account in self._balances

    def __len__(self) -> int:
        return len(self._balances)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BalanceStore):
            return NotImplemented
        return self._balances == other._balances

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f"BalanceStore(accounts={len(self._balances)}, total={self.total()})"


__all__ = ["BalanceStore"]
