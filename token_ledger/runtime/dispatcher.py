"""
token_ledger.runtime.dispatcher — route a call to the matching ledger operation.

A call names an operation, the authenticated caller and the operation's arguments:

    {"op": "transfer", "caller": "alice", "args": {"to": "bob", "value": 200}}

`dispatch()` resolves the op name (aliases included), pulls the arguments, invokes
the ledger and wraps the outcome in a `CallResult`. Ledger errors (InsufficientBalance,
NotInitialized, …) are captured into the result so the collaborator reporting back
to clients never sees an exception for a rejected operation. Problems with the call
itself (unknown op, missing argument, unhashable account id, administrative op
without permission) raise `DispatchError`. `apply_batch()` records those as failed
results too, so one malformed call never hides the results of the calls before it.

`seed` is always administrative; `burn` is administrative unless the ledger config
sets `allow_public_burn`.

Argument names per op
---------------------
    init           —
    seed           total_supply?, supply_owner?
    transfer       to, value
    approve        spender, value
    transfer_from  from (alias owner), to, value
    burn           amount, account? (defaults to caller)
    balance_of     account? (defaults to caller)
    allowance      owner, spender
    total_supply   —
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Tuple

from ..errors import DispatchError, LedgerError, error_to_result_fields
from ..genesis import GenesisConfig
from ..types.events import LedgerEvent, is_account_id
from ..types.result import CallResult
from .ledger import TokenLedger

# --------------------------------------------------------------------------------------
# Call shape
# --------------------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerCall:
    op: str
    caller: Any = None
    args: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_obj(cls, obj: Any) -> "LedgerCall":
        if isinstance(obj, LedgerCall):
            return obj
        if not isinstance(obj, Mapping):
            raise DispatchError(f"call must be a mapping or LedgerCall (got {type(obj).__name__})")
        op = obj.get("op", obj.get("method"))
        if not isinstance(op, str) or not op:
            raise DispatchError("call is missing an 'op' name")
        args = obj.get("args", {})
        if args is None:
            args = {}
        if not isinstance(args, Mapping):
            raise DispatchError(f"args for {op!r} must be a mapping")
        return cls(op=op, caller=obj.get("caller"), args=dict(args))


_MISSING = object()


def _arg(call: LedgerCall, *names: str, default: Any = _MISSING) -> Any:
    for n in names:
        if n in call.args:
            return call.args[n]
    if default is _MISSING:
        raise DispatchError(
            f"{call.op}: missing argument {names[0]!r}",
            details={"op": call.op, "argument": names[0]},
        )
    return default


def _account(call: LedgerCall, *names: str, default: Any = _MISSING) -> Any:
    a = _arg(call, *names, default=default)
    if not is_account_id(a):
        raise DispatchError(
            f"{call.op}: argument {names[0]!r} is not a valid account id",
            details={"op": call.op, "argument": names[0]},
        )
    return a


# --------------------------------------------------------------------------------------
# Handlers: (ledger, call) -> (value, events)
# --------------------------------------------------------------------------------------

Handler = Callable[[TokenLedger, LedgerCall], Tuple[Any, Tuple[LedgerEvent, ...]]]


def _h_init(ledger: TokenLedger, call: LedgerCall):
    return None, ledger.init(call.caller)


def _h_seed(ledger: TokenLedger, call: LedgerCall):
    return None, ledger.seed(GenesisConfig.from_mapping(call.args))


def _h_transfer(ledger: TokenLedger, call: LedgerCall):
    return None, ledger.transfer(call.caller, _arg(call, "to"), _arg(call, "value"))


def _h_approve(ledger: TokenLedger, call: LedgerCall):
    return None, ledger.approve(call.caller, _arg(call, "spender"), _arg(call, "value"))


def _h_transfer_from(ledger: TokenLedger, call: LedgerCall):
    owner = _arg(call, "from", "from_", "owner")
    return None, ledger.transfer_from(call.caller, owner, _arg(call, "to"), _arg(call, "value"))


def _h_burn(ledger: TokenLedger, call: LedgerCall):
    account = _arg(call, "account", "who", default=call.caller)
    return None, ledger.burn(account, _arg(call, "amount", "value"))


def _h_balance_of(ledger: TokenLedger, call: LedgerCall):
    return ledger.balance_of(_account(call, "account", "who", default=call.caller)), ()


def _h_allowance(ledger: TokenLedger, call: LedgerCall):
    return ledger.allowance(_account(call, "owner"), _account(call, "spender")), ()


def _h_total_supply(ledger: TokenLedger, call: LedgerCall):
    return ledger.total_supply(), ()


DISPATCH_TABLE: Dict[str, Handler] = {
    "init": _h_init,
    "seed": _h_seed,
    "transfer": _h_transfer,
    "approve": _h_approve,
    "transfer_from": _h_transfer_from,
    "burn": _h_burn,
    "balance_of": _h_balance_of,
    "allowance": _h_allowance,
    "total_supply": _h_total_supply,
}

_ALIAS_OP = {
    "transferFrom": "transfer_from",
    "balanceOf": "balance_of",
    "totalSupply": "total_supply",
    "initialize": "init",
}

ADMIN_OPS = frozenset({"burn", "seed"})


def resolve_op(name: str) -> str:
    """Canonical op name for `name`, or DispatchError if nothing matches."""
    if name in DISPATCH_TABLE:
        return name
    if name in _ALIAS_OP:
        return _ALIAS_OP[name]
    raise DispatchError(f"unknown operation {name!r}", details={"op": name})


def _permitted(ledger: TokenLedger, op: str, admin: bool) -> bool:
    if op not in ADMIN_OPS or admin:
        return True
    return op == "burn" and ledger.config.allow_public_burn


# --------------------------------------------------------------------------------------
# Public entrypoints
# --------------------------------------------------------------------------------------


def dispatch(ledger: TokenLedger, call: Any, *, admin: bool = False) -> CallResult:
    """
    Route one call. Returns a CallResult; raises DispatchError only for calls that
    cannot be routed.
    """
    c = LedgerCall.from_obj(call)
    op = resolve_op(c.op)
    if not _permitted(ledger, op, admin):
        raise DispatchError(f"{op} is an administrative operation", details={"op": op})
    if op != c.op:
        c = LedgerCall(op=op, caller=c.caller, args=c.args)

    try:
        value, events = DISPATCH_TABLE[op](ledger, c)
    except DispatchError:
        raise
    except LedgerError as e:
        return CallResult.failure(op, error_to_result_fields(e)["error"])
    return CallResult.success(op, value=value, events=events)


def apply_batch(ledger: TokenLedger, calls: Iterable[Any], *, admin: bool = False) -> List[CallResult]:
    """
    Dispatch `calls` in order, one result per call. Neither a rejected operation
    nor a malformed call stops the batch; the latter becomes a DISPATCH_ERROR result.
    """
    results: List[CallResult] = []
    for call in calls:
        try:
            results.append(dispatch(ledger, call, admin=admin))
        except DispatchError as e:
            results.append(CallResult.failure(_op_label(call), e.to_dict()))
    return results


def _op_label(call: Any) -> str:
    if isinstance(call, LedgerCall):
        return call.op
    if isinstance(call, Mapping):
        op = call.get("op", call.get("method"))
        if isinstance(op, str) and op:
            return _ALIAS_OP.get(op, op)
    return "?"


__all__ = [
    "LedgerCall",
    "DISPATCH_TABLE",
    "ADMIN_OPS",
    "resolve_op",
    "dispatch",
    "apply_batch",
]
