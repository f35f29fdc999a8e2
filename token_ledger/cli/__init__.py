"""
token_ledger.cli — Typer command-line tools.

Entry point:
  - token-ledger → token_ledger.cli.main:app
"""

from .main import app

__all__ = ["app"]
