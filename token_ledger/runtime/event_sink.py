"""
token_ledger.runtime.event_sink — collect ledger notifications, compute a digest.

The ledger pushes every event of a committed operation into an EventSink, in
emission order. Failed operations never reach the sink. A sink can be shared by
several ledgers or replaced by any object with an ``emit(event)`` method supplied
by the host.

Digest
------
`digest()` is SHA3-256 over the canonical JSON (sorted keys, compact separators)
of ``[event.to_dict() for event in events]``. Two sinks that saw the same events in
the same order have the same digest. Cached until the next mutation.
"""

from __future__ import annotations

import hashlib
import json
from typing import Iterable, List, Optional

from ..types.events import LedgerEvent


class EventSink:
    """
    Typical use:
        sink = EventSink()
        ledger = TokenLedger(sink=sink)
        ledger.init("alice")
        [ev.name for ev in sink.events]   # ["Initialized"]
        sink.digest()
    """

    __slots__ = ["_events", "_cached_digest"]

    def __init__(self) -> None:
        self._events: List[LedgerEvent] = []
        self._cached_digest: Optional[str] = None

    # ------------------------ mutation ------------------------

    def emit(self, event: LedgerEvent) -> int:
        """Append an event. Returns its index."""
        self._events.append(event)
        self._cached_digest = None
        return len(self._events) - 1

    def extend(self, events: Iterable[LedgerEvent]) -> None:
        for ev in events:
            self._events.append(ev)
        self._cached_digest = None

    def clear(self) -> None:
        self._events.clear()
        self._cached_digest = None

    # ------------------------ accessors ------------------------

    @property
    def events(self) -> List[LedgerEvent]:
        return list(self._events)

    def by_name(self, name: str) -> List[LedgerEvent]:
        return [ev for ev in self._events if ev.name == name]

    def last(self) -> Optional[LedgerEvent]:
        return self._events[-1] if self._events else None

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._events)

    def __iter__(self):
        return iter(list(self._events))

    # ------------------------ digest ------------------------

    def digest(self) -> str:
        if self._cached_digest is None:
            blob = json.dumps(
                [ev.to_dict() for ev in self._events],
                sort_keys=True,
                separators=(",", ":"),
            ).encode("utf-8")
            self._cached_digest = "0x" + hashlib.sha3_256(blob).hexdigest()
        return self._cached_digest


__all__ = ["EventSink"]
