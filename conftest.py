import logging

import pytest

from token_ledger import logging as llog


@pytest.fixture(autouse=True)
def _isolate_logging():
    """CLI invocations reconfigure the root logger; undo that and any bound context."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    llog.clear_context()
    yield
    llog.clear_context()
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)


@pytest.fixture
def ledger():
    """Explicit-seeding ledger already initialized by "alice" (20M supply)."""
    from token_ledger.runtime.ledger import TokenLedger

    lg = TokenLedger()
    lg.init("alice")
    return lg
