"""
token_ledger.runtime.seeding — the two ways a ledger gets its initial balance.

Both policies produce a `WriteSet` and set the initialization guard, so whichever
one runs first makes every later seeding attempt fail with AlreadyInitialized.

* explicit : `init(caller)` credits the whole current supply to the caller and
             emits `Initialized{who}`.
* genesis  : a `GenesisConfig` sets the supply and, when an owner is named,
             credits it to that owner. No event (there is no caller).

Checks run in a fixed order: seeding guard, then policy, then the caller / genesis
input. A seeded ledger therefore always reports AlreadyInitialized, and an
unseeded ledger asked for the wrong entrypoint reports ConfigError whatever the
arguments.
"""

from __future__ import annotations

from typing import Dict

from ..config import SEEDING_EXPLICIT, SEEDING_GENESIS
from ..errors import AlreadyInitialized, ConfigError, InvalidSender
from ..genesis import GenesisConfig
from ..state.ledger_state import LedgerState, WriteSet
from ..types.events import AccountId, Initialized, is_account_id

# Which public entrypoint each policy enables.
POLICY_ENTRYPOINTS: Dict[str, str] = {
    SEEDING_EXPLICIT: "init",
    SEEDING_GENESIS: "seed",
}


def _require_unseeded(state: LedgerState) -> None:
    if state.initialized:
        raise AlreadyInitialized(details={"total_supply": state.total_supply})


def require_policy(policy: str, entrypoint: str) -> None:
    """Reject `init` on a genesis ledger and `seed` on an explicit one."""
    expected = POLICY_ENTRYPOINTS.get(policy)
    if expected != entrypoint:
        raise ConfigError(
            f"{entrypoint}() is not available with seeding={policy!r}",
            details={"seeding": policy, "entrypoint": entrypoint},
        )


def plan_explicit_init(state: LedgerState, caller: AccountId, *, policy: str) -> WriteSet:
    _require_unseeded(state)
    require_policy(policy, "init")
    if not is_account_id(caller):
        raise InvalidSender("init requires a hashable caller id")
    ws = WriteSet()
    ws.set_balance(caller, state.total_supply)
    ws.mark_initialized()
    ws.emit(Initialized(who=caller))
    return ws


def plan_genesis_seed(state: LedgerState, genesis: GenesisConfig, *, policy: str, max_value: int) -> WriteSet:
    _require_unseeded(state)
    require_policy(policy, "seed")
    genesis.validate(max_value)
    ws = WriteSet()
    ws.set_total_supply(genesis.total_supply)
    if genesis.supply_owner is not None:
        ws.set_balance(genesis.supply_owner, genesis.total_supply)
    ws.mark_initialized()
    return ws


__all__ = [
    "plan_explicit_init",
    "plan_genesis_seed",
    "require_policy",
    "POLICY_ENTRYPOINTS",
]
