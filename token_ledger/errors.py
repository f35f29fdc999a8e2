"""
token_ledger.errors — typed failures for the token ledger.

Every ledger operation reports failure by raising one of these exceptions during its
validation phase, before any store is written. The dispatch layer converts them into
structured result payloads (see `error_to_result_fields`). They are pure-Python and
import nothing from the rest of the package so low-level modules (safe_uint, state)
can raise them without cycles.

Hierarchy
---------
LedgerError (base)
 ├─ InsufficientBalance    : account cannot cover the amount
 ├─ InsufficientAllowance  : spender not authorized for the amount
 ├─ InvalidSender          : missing sender identity
 ├─ InvalidReceiver        : missing receiver identity
 ├─ InvalidApprover        : owner tried to approve itself / missing owner
 ├─ InvalidSpender         : missing spender identity
 ├─ AlreadyInitialized     : seeding attempted twice
 ├─ NotInitialized         : operation before explicit init
 ├─ NoTokenInAccount       : burn larger than the burner's balance
 ├─ NegativeTotalSupply    : burn would take the supply below zero
 ├─ ArithmeticOverflow     : checked add/sub left the integer domain
 │   └─ ArithmeticUnderflow
 ├─ InvalidAmount          : negative / non-int / too-wide amount
 ├─ DispatchError          : unknown operation or malformed call
 └─ ConfigError            : invalid configuration or genesis input
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional


class LedgerError(Exception):
    """Base class for ledger domain errors."""

    code: str = "LEDGER_ERROR"

    def __init__(self, message: str = "", *, details: Optional[Mapping[str, Any]] = None) -> None:
        self.message = message or self.__class__.__name__
        self.details = dict(details or {})
        super().__init__(self.__str__())

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.details:
            try:
                packed = json.dumps(self.details, sort_keys=True, separators=(",", ":"), default=str)
            except (TypeError, ValueError):
                packed = str(self.details)
            return f"{self.code}: {self.message} [{packed}]"
        return f"{self.code}: {self.message}"


def _with(details: Optional[Mapping[str, Any]], **fields: Any) -> Dict[str, Any]:
    d = dict(details or {})
    for k, v in fields.items():
        if v is not None:
            d.setdefault(k, v if isinstance(v, (int, str, bool)) else repr(v))
    return d


class InsufficientBalance(LedgerError):
    """An account balance cannot cover the requested amount."""
    code = "INSUFFICIENT_BALANCE"

    def __init__(
        self,
        message: str = "insufficient balance",
        *,
        account: Any = None,
        balance: Optional[int] = None,
        required: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=_with(details, account=account, balance=balance, required=required))


class InsufficientAllowance(LedgerError):
    """The spender has no (or too small an) allowance from the owner."""
    code = "INSUFFICIENT_ALLOWANCE"

    def __init__(
        self,
        message: str = "insufficient allowance",
        *,
        owner: Any = None,
        spender: Any = None,
        allowance: Optional[int] = None,
        required: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            details=_with(details, owner=owner, spender=spender, allowance=allowance, required=required),
        )


class InvalidSender(LedgerError):
    code = "INVALID_SENDER"


class InvalidReceiver(LedgerError):
    code = "INVALID_RECEIVER"


class InvalidApprover(LedgerError):
    """An owner may not approve itself as its own spender."""
    code = "INVALID_APPROVER"


class InvalidSpender(LedgerError):
    code = "INVALID_SPENDER"


class AlreadyInitialized(LedgerError):
    """Seeding runs at most once per ledger."""
    code = "ALREADY_INITIALIZED"

    def __init__(self, message: str = "ledger already initialized", *, details: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message, details=details)


class NotInitialized(LedgerError):
    code = "NOT_INITIALIZED"

    def __init__(self, message: str = "ledger not initialized", *, details: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message, details=details)


class NoTokenInAccount(LedgerError):
    """Burn amount exceeds the burner's balance."""
    code = "NO_TOKEN_IN_ACCOUNT"

    def __init__(
        self,
        message: str = "not enough tokens in account",
        *,
        account: Any = None,
        balance: Optional[int] = None,
        required: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=_with(details, account=account, balance=balance, required=required))


class NegativeTotalSupply(LedgerError):
    code = "NEGATIVE_TOTAL_SUPPLY"

    def __init__(
        self,
        message: str = "total supply would become negative",
        *,
        total_supply: Optional[int] = None,
        required: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=_with(details, total_supply=total_supply, required=required))


class ArithmeticOverflow(LedgerError):
    """
    Checked arithmetic left the configured unsigned domain.

    Recoverable: the operation that hit it fails and nothing is written.
    """
    code = "ARITHMETIC_OVERFLOW"
    direction = "overflow"

    def __init__(
        self,
        message: str = "",
        *,
        lhs: Optional[int] = None,
        rhs: Optional[int] = None,
        max_value: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = _with(details, lhs=lhs, rhs=rhs, max_value=max_value)
        d.setdefault("direction", self.direction)
        super().__init__(message or f"arithmetic {self.direction}", details=d)


class ArithmeticUnderflow(ArithmeticOverflow):
    direction = "underflow"


class InvalidAmount(LedgerError):
    code = "INVALID_AMOUNT"

    def __init__(self, message: str = "invalid amount", *, value: Any = None, details: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message, details=_with(details, value=value))


class DispatchError(LedgerError):
    """Raised when a call cannot be classified or routed."""
    code = "DISPATCH_ERROR"


class ConfigError(LedgerError):
    code = "CONFIG_ERROR"


# -------- helper utilities ---------------------------------------------------


def error_to_result_fields(err: LedgerError) -> Dict[str, Any]:
    """
    Map a LedgerError to canonical result fields for the dispatch collaborator.

    Returns:
        {"status": "ERROR", "error": {code, message, details}}
    """
    return {"status": "ERROR", "error": err.to_dict()}


__all__ = [
    "LedgerError",
    "InsufficientBalance",
    "InsufficientAllowance",
    "InvalidSender",
    "InvalidReceiver",
    "InvalidApprover",
    "InvalidSpender",
    "AlreadyInitialized",
    "NotInitialized",
    "NoTokenInAccount",
    "NegativeTotalSupply",
    "ArithmeticOverflow",
    "ArithmeticUnderflow",
    "InvalidAmount",
    "DispatchError",
    "ConfigError",
    "error_to_result_fields",
]
