"""
token_ledger.types — small, dependency-light records shared across the ledger.

Public surface (re-exported):
    Transferred, Approved, Initialized, Burned : event dataclasses
    LedgerEvent                                : union of the above
    CallResult                                 : dispatcher return value
"""

from __future__ import annotations

from .events import (AccountId, Approved, Burned, Initialized, LedgerEvent,
                     Transferred)
from .result import CallResult

__all__ = [
    "AccountId",
    "Transferred",
    "Approved",
    "Initialized",
    "Burned",
    "LedgerEvent",
    "CallResult",
]
