# -*- coding: utf-8 -*-
"""
token_ledger.math.safe_uint
===========================

Checked unsigned-integer helpers shared by every ledger mutation.

Goals
-----
- Integer-only arithmetic; no floats, no wrapping, no silent saturation.
- Two styles:
  1) **Checked** (`u64_add`, `u64_sub`): raise `ArithmeticOverflow` /
     `ArithmeticUnderflow` when the result leaves ``[0, max_value]``.
  2) **try_*** (`try_add`, `try_sub`): return ``None`` instead of raising, so
     validation code can map the failure onto the domain error of the step
     (e.g. a short balance is ``InsufficientBalance``, not an underflow).
- The upper bound defaults to ``U64_MAX`` but every helper accepts an explicit
  ``max_value`` so ledgers configured with a different width share one code path.
"""

from __future__ import annotations

from typing import Final, Optional

from ..errors import ArithmeticOverflow, ArithmeticUnderflow, InvalidAmount

U64_MAX: Final[int] = 2**64 - 1


def max_for_width(bits: int) -> int:
    """Largest unsigned value representable in `bits` bits."""
    if not isinstance(bits, int) or isinstance(bits, bool) or bits <= 0:
        raise ValueError(f"width must be a positive int, got {bits!r}")
    return (1 << bits) - 1


def is_uint(x: object, max_value: int = U64_MAX) -> bool:
    # bool is an int subclass; amounts must be real integers.
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= max_value


def require_uint(x: object, max_value: int = U64_MAX, *, name: str = "amount") -> int:
    """Return `x` unchanged if it is an in-range unsigned int, else raise InvalidAmount."""
    if not is_uint(x, max_value):
        raise InvalidAmount(f"{name} must be an integer in [0, {max_value}]", value=x)
    return x  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Checked (fail-fast)
# ---------------------------------------------------------------------------

def u64_add(x: int, y: int, max_value: int = U64_MAX) -> int:
    """Checked add: raise ArithmeticOverflow if x + y > max_value."""
    require_uint(x, max_value, name="lhs")
    require_uint(y, max_value, name="rhs")
    s = x + y
    if s > max_value:
        raise ArithmeticOverflow(lhs=x, rhs=y, max_value=max_value)
    return s


def u64_sub(x: int, y: int, max_value: int = U64_MAX) -> int:
    """Checked sub: raise ArithmeticUnderflow if y > x."""
    require_uint(x, max_value, name="lhs")
    require_uint(y, max_value, name="rhs")
    if y > x:
        raise ArithmeticUnderflow(lhs=x, rhs=y, max_value=max_value)
    return x - y


# ---------------------------------------------------------------------------
# try_* (no raise; return Optional[int])
# ---------------------------------------------------------------------------

def try_add(x: int, y: int, max_value: int = U64_MAX) -> Optional[int]:
    """Return x+y or None on overflow/out-of-domain input."""
    if not (is_uint(x, max_value) and is_uint(y, max_value)):
        return None
    s = x + y
    return s if s <= max_value else None


def try_sub(x: int, y: int, max_value: int = U64_MAX) -> Optional[int]:
    """Return x-y or None on underflow/out-of-domain input."""
    if not (is_uint(x, max_value) and is_uint(y, max_value)):
        return None
    return x - y if x >= y else None


__all__ = [
    "U64_MAX",
    "max_for_width",
    "is_uint",
    "require_uint",
    "u64_add",
    "u64_sub",
    "try_add",
    "try_sub",
]
