import pytest

from token_ledger.config import LedgerConfig
from token_ledger.errors import (ArithmeticOverflow, InsufficientBalance,
                                 InvalidAmount, InvalidReceiver, InvalidSender)
from token_ledger.genesis import GenesisConfig
from token_ledger.runtime.ledger import TokenLedger
from token_ledger.types.events import Transferred

ALICE = "alice"
BOB = "bob"
CHARLIE = "charlie"


def mk_small_ledger(supply: int = 200, owner: str = ALICE) -> TokenLedger:
    """8-bit ledger so receiver overflow is reachable."""
    cfg = LedgerConfig(width_bits=8, total_supply=supply)
    return TokenLedger.from_genesis(GenesisConfig(total_supply=supply, supply_owner=owner), cfg)


def test_transfer_moves_value_and_emits(ledger):
    events = ledger.transfer(ALICE, BOB, 200)
    assert events == (Transferred(from_=ALICE, to=BOB, value=200),)
    assert ledger.balance_of(ALICE) == 19_999_800
    assert ledger.balance_of(BOB) == 200
    assert ledger.total_supply() == 20_000_000


def test_transfer_exact_balance_allowed(ledger):
    ledger.transfer(ALICE, BOB, 20_000_000)
    assert ledger.balance_of(ALICE) == 0
    assert ledger.balance_of(BOB) == 20_000_000


def test_insufficient_balance_writes_nothing(ledger):
    ledger.transfer(ALICE, BOB, 50)
    before = ledger.snapshot()
    n_events = len(ledger.sink.events)
    with pytest.raises(InsufficientBalance) as ei:
        ledger.transfer(BOB, CHARLIE, 51)
    assert ei.value.details["balance"] == 50
    assert ei.value.details["required"] == 51
    assert ledger.snapshot() == before
    assert len(ledger.sink.events) == n_events


def test_zero_value_transfer_is_valid(ledger):
    events = ledger.transfer(BOB, CHARLIE, 0)
    assert events == (Transferred(from_=BOB, to=CHARLIE, value=0),)
    assert ledger.balance_of(BOB) == 0
    assert ledger.balance_of(CHARLIE) == 0


def test_self_transfer_no_net_change(ledger):
    root = ledger.state_root()
    events = ledger.transfer(ALICE, ALICE, 1_000)
    assert events == (Transferred(from_=ALICE, to=ALICE, value=1_000),)
    assert ledger.balance_of(ALICE) == 20_000_000
    assert ledger.state_root() == root


def test_self_transfer_still_checks_balance(ledger):
    with pytest.raises(InsufficientBalance):
        ledger.transfer(ALICE, ALICE, 20_000_001)


def test_receiver_overflow_is_recoverable():
    lg = mk_small_ledger(supply=200)
    lg.state.balances._put(BOB, 250)  # out-of-band credit pushes bob near the 8-bit max
    before = lg.snapshot()
    with pytest.raises(ArithmeticOverflow) as ei:
        lg.transfer(ALICE, BOB, 6)
    assert ei.value.details["max_value"] == 255
    assert lg.snapshot() == before
    lg.transfer(ALICE, BOB, 5)
    assert lg.balance_of(BOB) == 255


@pytest.mark.parametrize("bad", [-1, 2**64, 1.5, "10", True])
def test_invalid_amounts(ledger, bad):
    with pytest.raises(InvalidAmount):
        ledger.transfer(ALICE, BOB, bad)
    assert ledger.balance_of(BOB) == 0


def test_missing_ids(ledger):
    with pytest.raises(InvalidSender):
        ledger.transfer(None, BOB, 1)
    with pytest.raises(InvalidReceiver):
        ledger.transfer(ALICE, None, 1)


def test_bytes_account_ids(ledger):
    a = b"\xaa" * 20
    ledger.transfer(ALICE, a, 7)
    assert ledger.balance_of(a) == 7
    assert ledger.snapshot()["balances"]["0x" + "aa" * 20] == 7
