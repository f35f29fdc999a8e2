"""
token_ledger.state.allowances — (owner, spender) -> remaining spend limit.

Keys are ordered pairs: the allowance of (alice, bob) says how much bob may move out
of alice's balance, and is unrelated to (bob, alice). Absent pairs read as 0.
Values are only replaced by approve and only consumed by transfer_from; both write
through `_put` from the commit phase.
"""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional, Tuple

from ..types.events import AccountId

AllowanceKey = Tuple[AccountId, AccountId]


class AllowanceStore:
    __slots__ = ("_allowances",)

    def __init__(self, initial: Optional[Mapping[AllowanceKey, int]] = None) -> None:
        self._allowances: Dict[AllowanceKey, int] = {}
        for key, value in (initial or {}).items():
            self._put(key, value)

    def get(self, owner: AccountId, spender: AccountId) -> int:
        return self._allowances.get((owner, spender), 0)

    def _put(self, key: AllowanceKey, value: int) -> None:
        if value:
            self._allowances[key] = value
        else:
            self._allowances.pop(key, None)

    def items(self) -> Iterator[Tuple[AllowanceKey, int]]:
        return iter(list(self._allowances.items()))

    def copy(self) -> "AllowanceStore":
        return AllowanceStore(self._allowances)

    def __len__(self) -> int:
        return len(self._allowances)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AllowanceStore):
            return NotImplemented
        return self._allowances == other._allowances


__all__ = ["AllowanceKey", "AllowanceStore"]
