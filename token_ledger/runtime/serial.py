"""
token_ledger.runtime.serial — serialized access to one ledger from many threads.

The ledger core assumes one operation at a time: it reads, validates and commits
balances, allowances and supply as a single unit. Hosts that call it from a thread
pool or web server wrap it in a SerialLedger, which holds one re-entrant lock around
every operation, every read and every dispatched call, so a read never observes a
half-applied batch and two transfers never interleave.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Iterable, List, Optional

from ..genesis import GenesisConfig
from ..types.events import AccountId
from ..types.result import CallResult
from .dispatcher import apply_batch, dispatch
from .ledger import Events, TokenLedger


class SerialLedger:
    def __init__(self, ledger: Optional[TokenLedger] = None) -> None:
        self.ledger = ledger if ledger is not None else TokenLedger()
        self._lock = threading.RLock()

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    # mutations

    def init(self, caller: AccountId) -> Events:
        with self._lock:
            return self.ledger.init(caller)

    def seed(self, genesis: GenesisConfig) -> Events:
        with self._lock:
            return self.ledger.seed(genesis)

    def transfer(self, caller: AccountId, to: AccountId, value: int) -> Events:
        with self._lock:
            return self.ledger.transfer(caller, to, value)

    def approve(self, caller: AccountId, spender: AccountId, value: int) -> Events:
        with self._lock:
            return self.ledger.approve(caller, spender, value)

    def transfer_from(self, caller: AccountId, from_: AccountId, to: AccountId, value: int) -> Events:
        with self._lock:
            return self.ledger.transfer_from(caller, from_, to, value)

    def burn(self, account: AccountId, amount: int) -> Events:
        with self._lock:
            return self.ledger.burn(account, amount)

    # reads

    def balance_of(self, account: AccountId) -> int:
        with self._lock:
            return self.ledger.balance_of(account)

    def allowance(self, owner: AccountId, spender: AccountId) -> int:
        with self._lock:
            return self.ledger.allowance(owner, spender)

    def total_supply(self) -> int:
        with self._lock:
            return self.ledger.total_supply()

    def is_initialized(self) -> bool:
        with self._lock:
            return self.ledger.is_initialized()

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return self.ledger.snapshot()

    # dispatch

    def dispatch(self, call: Any, *, admin: bool = False) -> CallResult:
        with self._lock:
            return dispatch(self.ledger, call, admin=admin)

    def apply_batch(self, calls: Iterable[Any], *, admin: bool = False) -> List[CallResult]:
        """The whole batch runs under one lock acquisition."""
        with self._lock:
            return apply_batch(self.ledger, calls, admin=admin)


__all__ = ["SerialLedger"]
