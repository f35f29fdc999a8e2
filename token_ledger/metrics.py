from __future__ import annotations

"""
Prometheus metrics for the token ledger.

We expose counters, histograms and a gauge covering:
- ops: every ledger operation by name and result (ok / error code)
- amounts: distribution of moved / burned values
- supply: current total supply of the most recently observed ledger
- latency: wall time spent inside an operation (validate + commit)

The registry is dedicated so embedding apps can merge it or expose it directly.
"""


import time
from contextlib import contextmanager
from typing import Iterator, Optional

from prometheus_client import (CONTENT_TYPE_LATEST, CollectorRegistry, Counter,
                               Gauge, Histogram, generate_latest)

REGISTRY = CollectorRegistry()

# ────────────────────────────────────────────────────────────────────────────────
# Label conventions
#   op:     "init" | "seed" | "transfer" | "approve" | "transfer_from" | "burn"
#   result: "ok" | lower-cased LedgerError code (e.g. "insufficient_balance")
# ────────────────────────────────────────────────────────────────────────────────

OPS_TOTAL = Counter(
    "token_ledger_ops_total",
    "Total ledger operations by name and result.",
    labelnames=("op", "result"),
    registry=REGISTRY,
)

EVENTS_EMITTED = Counter(
    "token_ledger_events_emitted_total",
    "Total events emitted by committed operations, by event name.",
    labelnames=("event",),
    registry=REGISTRY,
)

_AMOUNT_BUCKETS = (
    1,
    10,
    100,
    1_000,
    10_000,
    100_000,
    1_000_000,
    10_000_000,
    100_000_000,
    1_000_000_000,
)

AMOUNT = Histogram(
    "token_ledger_amount",
    "Distribution of amounts moved (transfer/transfer_from) or burned, by op.",
    labelnames=("op",),
    buckets=_AMOUNT_BUCKETS,
    registry=REGISTRY,
)

_LATENCY_BUCKETS = (
    0.00001,
    0.00005,
    0.0001,
    0.0005,
    0.001,
    0.005,
    0.01,
    0.05,
    0.1,
)

OP_SECONDS = Histogram(
    "token_ledger_op_seconds",
    "Time spent inside a ledger operation, by op.",
    labelnames=("op",),
    buckets=_LATENCY_BUCKETS,
    registry=REGISTRY,
)

TOTAL_SUPPLY = Gauge(
    "token_ledger_total_supply",
    "Total supply of the most recently updated ledger.",
    registry=REGISTRY,
)


# ────────────────────────────────────────────────────────────────────────────────
# Helpers
# ────────────────────────────────────────────────────────────────────────────────


def observe_op(op: str, *, error_code: Optional[str] = None, amount: Optional[int] = None) -> None:
    result = "ok" if error_code is None else error_code.lower()
    OPS_TOTAL.labels(op=op, result=result).inc()
    if error_code is None and amount is not None:
        AMOUNT.labels(op=op).observe(float(amount))


def observe_event(event_name: str) -> None:
    EVENTS_EMITTED.labels(event=event_name).inc()


def set_total_supply(value: int) -> None:
    TOTAL_SUPPLY.set(float(value))


@contextmanager
def time_op(op: str) -> Iterator[None]:
    t0 = time.perf_counter()
    try:
        yield
    finally:
        OP_SECONDS.labels(op=op).observe(time.perf_counter() - t0)


def generate_latest_text() -> bytes:
    """Exposition-format bytes for this module's registry."""
    return generate_latest(REGISTRY)


def content_type() -> str:
    return CONTENT_TYPE_LATEST


__all__ = [
    "REGISTRY",
    "OPS_TOTAL",
    "EVENTS_EMITTED",
    "AMOUNT",
    "OP_SECONDS",
    "TOTAL_SUPPLY",
    "observe_op",
    "observe_event",
    "set_total_supply",
    "time_op",
    "generate_latest_text",
    "content_type",
]
