"""
token_ledger.types.result — CallResult container returned by the dispatcher.

`CallResult` is the dependency-light object the dispatch layer hands back to its
collaborator after routing one call into the ledger.

Fields
------
* op      : str            — canonical operation name ("transfer", "balance_of", …)
* ok      : bool           — True when the operation committed (or the read succeeded)
* value   : Any            — read accessors return their value here; mutations return None
* error   : Optional[dict] — `LedgerError.to_dict()` when ok is False
* events  : tuple[LedgerEvent, ...] — events emitted by this call, in order
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from .events import LedgerEvent


@dataclass(frozen=True)
class CallResult:
    op: str
    ok: bool
    value: Any = None
    error: Optional[Dict[str, Any]] = None
    events: Tuple[LedgerEvent, ...] = ()

    @classmethod
    def success(cls, op: str, value: Any = None, events: Iterable[LedgerEvent] = ()) -> "CallResult":
        return cls(op=op, ok=True, value=value, error=None, events=tuple(events))

    @classmethod
    def failure(cls, op: str, error: Dict[str, Any]) -> "CallResult":
        return cls(op=op, ok=False, value=None, error=dict(error), events=())

    @property
    def error_code(self) -> Optional[str]:
        return None if self.error is None else self.error.get("code")

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "op": self.op,
            "status": "SUCCESS" if self.ok else "ERROR",
            "events": [ev.to_dict() for ev in self.events],
        }
        if self.value is not None:
            out["value"] = self.value
        if self.error is not None:
            out["error"] = self.error
        return out


__all__ = ["CallResult"]
