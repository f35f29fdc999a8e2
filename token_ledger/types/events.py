"""
token_ledger.types.events — notification records emitted by committed operations.

Each event is a small frozen dataclass with a stable `name` and a JSON-friendly
`to_dict()`. Events are produced only after an operation has validated; a failed
operation never emits.

Canonical names
---------------
* ``Transferred``  {from, to, value}     — transfer / transfer_from
* ``Approved``     {owner, spender, value}
* ``Initialized``  {who}                 — explicit one-shot init
* ``Burned``       {who, amount}

Account ids are opaque: `bytes` are rendered as 0x-hex in `to_dict()`, anything else
is passed through unchanged (strings, ints) or rendered with `str()`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Hashable, Union

AccountId = Hashable


def is_account_id(a: Any) -> bool:
    """Non-None and hashable all the way down (a tuple holding a list is not)."""
    if a is None:
        return False
    try:
        hash(a)
    except TypeError:
        return False
    return True


def render_account(a: Any) -> Any:
    """JSON-friendly rendering of an opaque account id."""
    if isinstance(a, (bytes, bytearray, memoryview)):
        return "0x" + bytes(a).hex()
    if a is None or isinstance(a, (str, int)):
        return a
    return str(a)


@dataclass(frozen=True)
class Transferred:
    """Balance moved from `from_` to `to`. For transfer_from, `from_` is the owner."""

    name: ClassVar[str] = "Transferred"

    from_: AccountId
    to: AccountId
    value: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "from": render_account(self.from_),
            "to": render_account(self.to),
            "value": self.value,
        }


@dataclass(frozen=True)
class Approved:
    name: ClassVar[str] = "Approved"

    owner: AccountId
    spender: AccountId
    value: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "owner": render_account(self.owner),
            "spender": render_account(self.spender),
            "value": self.value,
        }


@dataclass(frozen=True)
class Initialized:
    name: ClassVar[str] = "Initialized"

    who: AccountId

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.name, "who": render_account(self.who)}


@dataclass(frozen=True)
class Burned:
    name: ClassVar[str] = "Burned"

    who: AccountId
    amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.name, "who": render_account(self.who), "amount": self.amount}


LedgerEvent = Union[Transferred, Approved, Initialized, Burned]

__all__ = [
    "AccountId",
    "render_account",
    "is_account_id",
    "Transferred",
    "Approved",
    "Initialized",
    "Burned",
    "LedgerEvent",
]
