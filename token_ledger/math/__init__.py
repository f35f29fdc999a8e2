"""Integer math helpers for the token ledger (checked, wrap-free)."""

from .safe_uint import (U64_MAX, is_uint, max_for_width, require_uint,
                        try_add, try_sub, u64_add, u64_sub)

__all__ = [
    "U64_MAX",
    "is_uint",
    "max_for_width",
    "require_uint",
    "try_add",
    "try_sub",
    "u64_add",
    "u64_sub",
]
