"""
token_ledger.runtime — the operating side of the ledger.

    TokenLedger   validate → commit for init/seed/transfer/approve/transfer_from/burn
    EventSink     collects events of committed operations
    dispatch      op name → ledger call → CallResult
    SerialLedger  lock-guarded wrapper for concurrent hosts
"""

from .dispatcher import DISPATCH_TABLE, LedgerCall, apply_batch, dispatch, resolve_op
from .event_sink import EventSink
from .ledger import TokenLedger
from .serial import SerialLedger

__all__ = [
    "TokenLedger",
    "EventSink",
    "LedgerCall",
    "DISPATCH_TABLE",
    "dispatch",
    "apply_batch",
    "resolve_op",
    "SerialLedger",
]
