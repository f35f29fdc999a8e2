"""
token_ledger.runtime.ledger — TokenLedger, the operation surface of the ledger.

Every mutating operation follows the same two phases:

1. **plan**: read current state, check every precondition, compute every resulting
   value and stage it in a `WriteSet` (plus the events to emit). Any failure raises a
   `LedgerError` here, before anything is written.
2. **commit**: `LedgerState.apply(ws)` assigns the staged values (cannot fail), then
   the staged events are pushed to the sink in order.

So an operation either applies all of its writes and emits all of its events, or it
raises and leaves balances, allowances, supply, guard and sink untouched.

Policies
--------
- Sufficiency is ``>=`` everywhere: an account may move, approve or burn its exact
  balance.
- Amounts must be ints in ``[0, config.max_value]`` (bools rejected) else
  `InvalidAmount`. A receiver credit past ``max_value`` is `ArithmeticOverflow`.
- Until the ledger is seeded (explicit `init`, or genesis `seed`) every mutating
  operation other than seeding raises `NotInitialized`. Reads are always allowed.

Usage
-----
    ledger = TokenLedger()
    ledger.init("alice")
    ledger.transfer("alice", "bob", 200)
    ledger.approve("alice", "bob", 200)
    ledger.transfer_from("bob", "alice", "charlie", 200)
    ledger.balance_of("charlie")            # 200
"""

from __future__ import annotations

from contextlib import nullcontext
from dataclasses import replace
from typing import Any, Callable, Dict, Optional, Tuple

from .. import metrics
from ..config import SEEDING_GENESIS, LedgerConfig
from ..errors import (ArithmeticOverflow, ArithmeticUnderflow, InsufficientAllowance,
                      InsufficientBalance, InvalidApprover, InvalidReceiver,
                      InvalidSender, InvalidSpender, LedgerError,
                      NegativeTotalSupply, NoTokenInAccount, NotInitialized)
from ..genesis import GenesisConfig
from ..logging import get_logger, short_uuid
from ..math.safe_uint import require_uint, try_add, try_sub, u64_sub
from ..state.ledger_state import LedgerState, WriteSet
from ..types.events import (AccountId, Approved, Burned, LedgerEvent,
                            Transferred, is_account_id, render_account)
from .event_sink import EventSink
from .seeding import plan_explicit_init, plan_genesis_seed

Events = Tuple[LedgerEvent, ...]


class TokenLedger:
    """
    One ledger instance: config + state + event sink.

    Parameters
    ----------
    config : LedgerConfig, optional
        Defaults to ``LedgerConfig()`` (explicit seeding, 20M supply, u64).
    genesis : GenesisConfig, optional
        Seed applied immediately; requires ``config.seeding == "genesis"``.
    state : LedgerState, optional
        Existing state to operate on (e.g. restored via ``LedgerState.from_dict``).
        Checked with ``LedgerState.validate``; ConfigError if it is inconsistent.
    sink : EventSink-like, optional
        Anything with ``emit(event)``. Defaults to a fresh EventSink.
    ledger_id : str, optional
        Label attached to log records.
    """

    def __init__(
        self,
        config: Optional[LedgerConfig] = None,
        *,
        genesis: Optional[GenesisConfig] = None,
        state: Optional[LedgerState] = None,
        sink: Any = None,
        ledger_id: Optional[str] = None,
    ) -> None:
        self.config = (config or LedgerConfig()).validate()
        if state is not None:
            state.validate(self.config.max_value)
        self.state = state if state is not None else LedgerState(total_supply=self.config.total_supply)
        self.sink = sink if sink is not None else EventSink()
        self.ledger_id = ledger_id or short_uuid()
        self._max = self.config.max_value
        self._log = get_logger(__name__, ledger_id=self.ledger_id)
        if genesis is not None:
            self.seed(genesis)

    @classmethod
    def from_genesis(
        cls,
        genesis: GenesisConfig,
        config: Optional[LedgerConfig] = None,
        **kwargs: Any,
    ) -> "TokenLedger":
        """Build a genesis-seeded ledger; `config.seeding` is forced to "genesis"."""
        cfg = replace(config or LedgerConfig(), seeding=SEEDING_GENESIS)
        return cls(cfg, genesis=genesis, **kwargs)

    # ------------------------------------------------------------------ seeding

    def init(self, caller: AccountId) -> Events:
        """Explicit one-shot seeding: credit the whole supply to `caller`."""
        def plan() -> WriteSet:
            return plan_explicit_init(self.state, caller, policy=self.config.seeding)

        return self._execute("init", plan, caller=caller)

    def seed(self, genesis: GenesisConfig) -> Events:
        """Genesis seeding: set supply and (optionally) credit it to the owner."""
        def plan() -> WriteSet:
            return plan_genesis_seed(self.state, genesis, policy=self.config.seeding, max_value=self._max)

        return self._execute("seed", plan, caller=genesis.supply_owner)

    # ---------------------------------------------------------------- mutations

    def transfer(self, caller: AccountId, to: AccountId, value: int) -> Events:
        def plan() -> WriteSet:
            self._require_seeded()
            if not is_account_id(caller):
                raise InvalidSender("transfer requires a sender")
            if not is_account_id(to):
                raise InvalidReceiver("transfer requires a receiver")
            amount = require_uint(value, self._max, name="value")

            balance = self.state.balance_of(caller)
            new_sender = try_sub(balance, amount, self._max)
            if new_sender is None:
                raise InsufficientBalance(account=caller, balance=balance, required=amount)

            ws = WriteSet()
            # self-transfer: validated above, balances unchanged
            if to != caller:
                received = self.state.balance_of(to)
                new_receiver = try_add(received, amount, self._max)
                if new_receiver is None:
                    raise ArithmeticOverflow(lhs=received, rhs=amount, max_value=self._max)
                ws.set_balance(caller, new_sender)
                ws.set_balance(to, new_receiver)
            ws.emit(Transferred(from_=caller, to=to, value=amount))
            return ws

        return self._execute("transfer", plan, caller=caller, amount=value)

    def approve(self, caller: AccountId, spender: AccountId, value: int) -> Events:
        """Set (replace) the allowance `caller` grants `spender`."""
        def plan() -> WriteSet:
            self._require_seeded()
            if not is_account_id(caller):
                raise InvalidApprover("approve requires an owner")
            if not is_account_id(spender):
                raise InvalidSpender("approve requires a spender")
            if spender == caller:
                raise InvalidApprover("an account cannot approve itself", details={"owner": render_account(caller)})
            amount = require_uint(value, self._max, name="value")

            balance = self.state.balance_of(caller)
            if balance < amount:
                raise InsufficientBalance(account=caller, balance=balance, required=amount)

            ws = WriteSet()
            ws.set_allowance(caller, spender, amount)
            ws.emit(Approved(owner=caller, spender=spender, value=amount))
            return ws

        return self._execute("approve", plan, caller=caller)

    def transfer_from(self, caller: AccountId, from_: AccountId, to: AccountId, value: int) -> Events:
        """
        Spend `value` of `from_`'s balance on its behalf, moving it to `to`.

        Check order: spender holds tokens, owner holds tokens, allowance covers
        `value`, owner balance covers `value`, receiver credit fits.
        """
        def plan() -> WriteSet:
            self._require_seeded()
            if not is_account_id(caller):
                raise InvalidSpender("transfer_from requires a spender")
            if not is_account_id(from_):
                raise InvalidSender("transfer_from requires an owner")
            if not is_account_id(to):
                raise InvalidReceiver("transfer_from requires a receiver")
            amount = require_uint(value, self._max, name="value")

            spender_balance = self.state.balance_of(caller)
            if spender_balance == 0:
                raise InsufficientAllowance(
                    "spender holds no tokens", owner=from_, spender=caller, required=amount
                )
            owner_balance = self.state.balance_of(from_)
            if owner_balance == 0:
                raise InsufficientBalance(account=from_, balance=0, required=amount)

            allowed = self.state.allowance(from_, caller)
            new_allowance = try_sub(allowed, amount, self._max)
            if new_allowance is None:
                raise InsufficientAllowance(owner=from_, spender=caller, allowance=allowed, required=amount)
            new_owner = try_sub(owner_balance, amount, self._max)
            if new_owner is None:
                raise InsufficientBalance(account=from_, balance=owner_balance, required=amount)

            ws = WriteSet()
            if to != from_:
                received = self.state.balance_of(to)
                new_receiver = try_add(received, amount, self._max)
                if new_receiver is None:
                    raise ArithmeticOverflow(lhs=received, rhs=amount, max_value=self._max)
                ws.set_balance(from_, new_owner)
                ws.set_balance(to, new_receiver)
            ws.set_allowance(from_, caller, new_allowance)
            ws.emit(Transferred(from_=from_, to=to, value=amount))
            return ws

        return self._execute("transfer_from", plan, caller=caller, amount=value)

    def burn(self, account: AccountId, amount: int) -> Events:
        """
        Destroy `amount` of `account`'s tokens, shrinking the total supply.

        Administrative: callers reaching this through the dispatcher must be
        permitted by `allow_public_burn` or an admin dispatch.
        """
        def plan() -> WriteSet:
            self._require_seeded()
            if not is_account_id(account):
                raise InvalidSender("burn requires an account")
            qty = require_uint(amount, self._max, name="amount")

            balance = self.state.balance_of(account)
            new_balance = try_sub(balance, qty, self._max)
            if new_balance is None:
                raise NoTokenInAccount(account=account, balance=balance, required=qty)
            supply = self.state.total_supply
            try:
                new_supply = u64_sub(supply, qty, self._max)
            except ArithmeticUnderflow as e:
                raise NegativeTotalSupply(total_supply=supply, required=qty) from e

            ws = WriteSet()
            ws.set_balance(account, new_balance)
            ws.set_total_supply(new_supply)
            if self.config.emit_burn_events:
                ws.emit(Burned(who=account, amount=qty))
            return ws

        return self._execute("burn", plan, caller=account, amount=amount)

    # -------------------------------------------------------------------- reads

    def balance_of(self, account: AccountId) -> int:
        return self.state.balance_of(account)

    def allowance(self, owner: AccountId, spender: AccountId) -> int:
        return self.state.allowance(owner, spender)

    def total_supply(self) -> int:
        return self.state.total_supply

    def is_initialized(self) -> bool:
        return self.state.initialized

    def snapshot(self) -> Dict[str, Any]:
        return self.state.snapshot()

    def state_root(self) -> str:
        return self.state.state_root()

    # ---------------------------------------------------------------- internals

    def _require_seeded(self) -> None:
        if not self.state.initialized:
            raise NotInitialized(details={"seeding": self.config.seeding})

    def _execute(
        self,
        op: str,
        plan: Callable[[], WriteSet],
        *,
        caller: Any = None,
        amount: Any = None,
    ) -> Events:
        timer = metrics.time_op(op) if self.config.metrics_enabled else nullcontext()
        with timer:
            try:
                ws = plan()
            except LedgerError as e:
                if self.config.metrics_enabled:
                    metrics.observe_op(op, error_code=e.code)
                self._log.info(
                    "operation rejected",
                    op=op,
                    caller=render_account(caller),
                    code=e.code,
                    details=e.details,
                )
                raise

            if not ws.is_empty():
                self.state.apply(ws)
            for ev in ws.events:
                self.sink.emit(ev)

        if self.config.metrics_enabled:
            metrics.observe_op(op, amount=amount if isinstance(amount, int) else None)
            for ev in ws.events:
                metrics.observe_event(ev.name)
            metrics.set_total_supply(self.state.total_supply)
        self._log.debug(
            "operation committed",
            op=op,
            caller=render_account(caller),
            events=[ev.name for ev in ws.events],
            total_supply=self.state.total_supply,
        )
        return tuple(ws.events)

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f"TokenLedger(id={self.ledger_id!r}, seeding={self.config.seeding!r}, state={self.state!r})"


__all__ = ["TokenLedger"]
