"""
token_ledger — fungible-token accounting engine.

Tracks per-account balances, a total supply and delegated spending allowances, and
applies init/seed, transfer, approve, transfer_from and burn under all-or-nothing
semantics. Authentication, client-facing dispatch and persistent event sinks are left
to the host; the ledger only consumes the authenticated caller identity.

This package exposes only lightweight metadata at import time. Import the runtime
explicitly:

    from token_ledger.runtime.ledger import TokenLedger
"""

from .version import __version__, get_version

__all__ = ["__version__", "get_version"]
