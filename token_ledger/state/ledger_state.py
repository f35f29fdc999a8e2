"""
token_ledger.state.ledger_state — the three stores as one unit, plus staged writes.

`LedgerState` bundles the BalanceStore, AllowanceStore and SupplyTracker that every
operation reads and writes together. Operations never touch the stores directly:
they read through the public getters, stage every resulting value in a `WriteSet`
during validation, and hand the finished WriteSet to `LedgerState.apply()`.

Key properties
--------------
- `apply()` is the commit phase: it only assigns precomputed values and cannot fail,
  so a WriteSet is either fully applied or (if validation raised) never built.
- The WriteSet holds *final* values, not deltas; applying it twice is harmless.
- `to_dict()` / `from_dict()` give a deterministic, JSON-friendly view (keys sorted
  by their rendered form); `state_root()` hashes that view with SHA3-256.
- `validate()` rejects restored state no operation sequence could produce (negative
  or oversized amounts, balances adding up past the supply); `from_dict()` runs it.

Intended usage
--------------
    ws = WriteSet()
    ws.set_balance(alice, new_alice)
    ws.set_balance(bob, new_bob)
    ws.emit(Transferred(from_=alice, to=bob, value=v))
    state.apply(ws)
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..errors import ArithmeticOverflow, ConfigError
from ..math.safe_uint import U64_MAX, is_uint, u64_add
from ..types.events import AccountId, LedgerEvent, render_account
from .allowances import AllowanceKey, AllowanceStore
from .balances import BalanceStore
from .supply import DEFAULT_TOTAL_SUPPLY, SupplyTracker


@dataclass
class WriteSet:
    """Final values staged by one operation, committed together or not at all."""

    balances: Dict[AccountId, int] = field(default_factory=dict)
    allowances: Dict[AllowanceKey, int] = field(default_factory=dict)
    total_supply: Optional[int] = None
    initialize: bool = False
    events: List[LedgerEvent] = field(default_factory=list)

    def set_balance(self, account: AccountId, value: int) -> None:
        self.balances[account] = value

    def set_allowance(self, owner: AccountId, spender: AccountId, value: int) -> None:
        self.allowances[(owner, spender)] = value

    def set_total_supply(self, value: int) -> None:
        self.total_supply = value

    def mark_initialized(self) -> None:
        self.initialize = True

    def emit(self, event: LedgerEvent) -> None:
        self.events.append(event)

    def is_empty(self) -> bool:
        return not (self.balances or self.allowances or self.total_supply is not None or self.initialize)


class LedgerState:
    """
    Mutable ledger state: balances, allowances, total supply and the seeding guard.

    Created empty (supply at its default, guard unset); afterwards mutated only via
    `apply()`. Several independent LedgerState instances may coexist.
    """

    __slots__ = ("balances", "allowances", "supply")

    def __init__(
        self,
        *,
        total_supply: int = DEFAULT_TOTAL_SUPPLY,
        balances: Optional[BalanceStore] = None,
        allowances: Optional[AllowanceStore] = None,
        initialized: bool = False,
    ) -> None:
        self.balances = balances if balances is not None else BalanceStore()
        self.allowances = allowances if allowances is not None else AllowanceStore()
        self.supply = SupplyTracker(total_supply=total_supply, initialized=initialized)

    # ----------------------------- reads -------------------------------------

    def balance_of(self, account: AccountId) -> int:
        return self.balances.get(account)

    def allowance(self, owner: AccountId, spender: AccountId) -> int:
        return self.allowances.get(owner, spender)

    @property
    def total_supply(self) -> int:
        return self.supply.total_supply

    @property
    def initialized(self) -> bool:
        return self.supply.initialized

    # ----------------------------- commit ------------------------------------

    def apply(self, ws: WriteSet) -> None:
        """Commit every staged value. Assignments only; never raises."""
        for account, value in ws.balances.items():
            self.balances._put(account, value)
        for key, value in ws.allowances.items():
            self.allowances._put(key, value)
        if ws.total_supply is not None:
            self.supply._put_total(ws.total_supply)
        if ws.initialize:
            self.supply._mark_initialized()

    # ----------------------------- snapshots ---------------------------------

    def copy(self) -> "LedgerState":
        st = LedgerState(
            total_supply=self.supply.total_supply,
            balances=self.balances.copy(),
            allowances=self.allowances.copy(),
            initialized=self.supply.initialized,
        )
        return st

    def snapshot(self) -> Dict[str, Any]:
        """Point-in-time view; later commits do not alter the returned dict."""
        return self.to_dict()

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-friendly view:

            {
              "total_supply": 20000000,
              "initialized": true,
              "balances":   {"alice": 19999800, "bob": 200},
              "allowances": {"alice": {"bob": 200}}
            }
        """
        balances = {
            str(render_account(a)): v for a, v in self.balances.items()
        }
        allowances: Dict[str, Dict[str, int]] = {}
        for (owner, spender), v in self.allowances.items():
            allowances.setdefault(str(render_account(owner)), {})[str(render_account(spender))] = v
        return {
            "total_supply": self.supply.total_supply,
            "initialized": self.supply.initialized,
            "balances": dict(sorted(balances.items())),
            "allowances": {o: dict(sorted(s.items())) for o, s in sorted(allowances.items())},
        }

    def validate(self, max_value: int = U64_MAX) -> "LedgerState":
        """
        Check that this state could have been produced by ledger operations:
        every amount is an unsigned int within `max_value` and the balances add up
        to no more than the total supply. Raises ConfigError; returns self.
        """
        if not is_uint(self.supply.total_supply, max_value):
            raise ConfigError(
                f"total_supply must be an integer in [0, {max_value}]",
                details={"total_supply": self.supply.total_supply},
            )
        held = 0
        for account, value in self.balances.items():
            if not is_uint(value, max_value):
                raise ConfigError(
                    f"balance must be an integer in [0, {max_value}]",
                    details={"account": render_account(account), "value": value},
                )
            try:
                held = u64_add(held, value, max_value)
            except ArithmeticOverflow as e:
                raise ConfigError("balances overflow max_value", details={"max_value": max_value}) from e
        if held > self.supply.total_supply:
            raise ConfigError(
                "balances exceed total_supply",
                details={"balances": held, "total_supply": self.supply.total_supply},
            )
        for (owner, spender), value in self.allowances.items():
            if not is_uint(value, max_value):
                raise ConfigError(
                    f"allowance must be an integer in [0, {max_value}]",
                    details={
                        "owner": render_account(owner),
                        "spender": render_account(spender),
                        "value": value,
                    },
                )
        return self

    @classmethod
    def from_dict(
        cls,
        d: Mapping[str, Any],
        *,
        max_value: int = U64_MAX,
        hex_accounts: bool = False,
    ) -> "LedgerState":
        """
        Rebuild from `to_dict()` output and `validate()` the result.

        Account ids come back as the strings `to_dict()` rendered. Bytes ids are
        rendered as ``0x``-hex, so pass ``hex_accounts=True`` to turn every
        ``0x``-prefixed key back into bytes (string ids must then not start with
        ``0x``). Values are taken as-is; non-int amounts fail validation.
        """
        def account(key: Any) -> AccountId:
            if hex_accounts and isinstance(key, str) and key.startswith("0x"):
                try:
                    return bytes.fromhex(key[2:])
                except ValueError as e:
                    raise ConfigError("malformed hex account id", details={"account": key}) from e
            return key

        balances = BalanceStore({account(a): v for a, v in (d.get("balances") or {}).items()})
        allowances = AllowanceStore(
            {
                (account(owner), account(spender)): v
                for owner, per_spender in (d.get("allowances") or {}).items()
                for spender, v in per_spender.items()
            }
        )
        st = cls(
            total_supply=d.get("total_supply", DEFAULT_TOTAL_SUPPLY),
            balances=balances,
            allowances=allowances,
            initialized=bool(d.get("initialized", False)),
        )
        return st.validate(max_value)
    def state_root(self) -> str:
        """SHA3-256 over the canonical JSON of `to_dict()`, 0x-prefixed."""
        blob = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":")).encode("utf-8")
        return "0x" + hashlib.sha3_256(blob).hexdigest()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LedgerState):
            return NotImplemented
        return (
            self.balances == other.balances
            and self.allowances == other.allowances
            and self.supply == other.supply
        )

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return (
            f"LedgerState(total_supply={self.supply.total_supply}, "
            f"initialized={self.supply.initialized}, accounts={len(self.balances)}, "
            f"allowances={len(self.allowances)})"
        )


__all__ = ["LedgerState", "WriteSet"]
