import pytest

from token_ledger.config import LedgerConfig
from token_ledger.errors import (ArithmeticOverflow, InsufficientAllowance,
                                 InsufficientBalance, InvalidApprover,
                                 InvalidReceiver, InvalidSender, InvalidSpender)
from token_ledger.genesis import GenesisConfig
from token_ledger.runtime.ledger import TokenLedger
from token_ledger.types.events import Approved, Initialized, Transferred

ALICE = "alice"
BOB = "bob"
CHARLIE = "charlie"


# ----------------------------------------------------------------- approve


def test_approve_sets_allowance(ledger):
    events = ledger.approve(ALICE, BOB, 200)
    assert events == (Approved(owner=ALICE, spender=BOB, value=200),)
    assert ledger.allowance(ALICE, BOB) == 200
    assert ledger.balance_of(ALICE) == 20_000_000


def test_approve_replaces_not_adds(ledger):
    ledger.approve(ALICE, BOB, 200)
    ledger.approve(ALICE, BOB, 50)
    assert ledger.allowance(ALICE, BOB) == 50
    ledger.approve(ALICE, BOB, 0)
    assert ledger.allowance(ALICE, BOB) == 0
    assert ledger.snapshot()["allowances"] == {}


def test_approve_exact_balance_allowed(ledger):
    ledger.approve(ALICE, BOB, 20_000_000)
    assert ledger.allowance(ALICE, BOB) == 20_000_000


def test_approve_beyond_balance_rejected(ledger):
    with pytest.raises(InsufficientBalance):
        ledger.approve(ALICE, BOB, 20_000_001)
    assert ledger.allowance(ALICE, BOB) == 0


def test_self_approve_rejected(ledger):
    with pytest.raises(InvalidApprover):
        ledger.approve(ALICE, ALICE, 1)
    assert ledger.allowance(ALICE, ALICE) == 0


def test_approve_missing_ids(ledger):
    with pytest.raises(InvalidSpender):
        ledger.approve(ALICE, None, 1)
    with pytest.raises(InvalidApprover):
        ledger.approve(None, BOB, 1)


# ----------------------------------------------------------- transfer_from


def mk_scenario() -> TokenLedger:
    """alice seeded, bob holds 200 and may spend 200 of alice's."""
    lg = TokenLedger()
    lg.init(ALICE)
    lg.transfer(ALICE, BOB, 200)
    lg.approve(ALICE, BOB, 200)
    return lg


def test_concrete_scenario():
    lg = TokenLedger()
    lg.init(ALICE)
    assert lg.balance_of(ALICE) == 20_000_000
    lg.transfer(ALICE, BOB, 200)
    assert lg.balance_of(ALICE) == 19_999_800
    assert lg.balance_of(BOB) == 200
    lg.approve(ALICE, BOB, 200)
    assert lg.allowance(ALICE, BOB) == 200
    lg.transfer_from(BOB, ALICE, CHARLIE, 200)
    assert lg.balance_of(ALICE) == 19_999_600
    assert lg.balance_of(BOB) == 200
    assert lg.balance_of(CHARLIE) == 200
    assert lg.allowance(ALICE, BOB) == 0
    assert lg.total_supply() == 20_000_000
    assert [ev.name for ev in lg.sink.events] == ["Initialized", "Transferred", "Approved", "Transferred"]
    assert lg.sink.events[0] == Initialized(who=ALICE)


def test_transfer_from_event_names_owner():
    lg = mk_scenario()
    events = lg.transfer_from(BOB, ALICE, CHARLIE, 150)
    assert events == (Transferred(from_=ALICE, to=CHARLIE, value=150),)
    assert lg.allowance(ALICE, BOB) == 50


def test_allowance_exact_drain_allowed():
    lg = mk_scenario()
    lg.transfer_from(BOB, ALICE, CHARLIE, 200)
    assert lg.allowance(ALICE, BOB) == 0


def test_allowance_exceeded_writes_nothing():
    lg = mk_scenario()
    before = lg.snapshot()
    with pytest.raises(InsufficientAllowance) as ei:
        lg.transfer_from(BOB, ALICE, CHARLIE, 201)
    assert ei.value.details["allowance"] == 200
    assert lg.snapshot() == before


def test_spender_without_tokens_rejected():
    lg = TokenLedger()
    lg.init(ALICE)
    lg.approve(ALICE, BOB, 100)
    with pytest.raises(InsufficientAllowance):
        lg.transfer_from(BOB, ALICE, CHARLIE, 10)
    assert lg.allowance(ALICE, BOB) == 100


def test_owner_without_tokens_rejected():
    lg = mk_scenario()
    with pytest.raises(InsufficientBalance):
        lg.transfer_from(BOB, CHARLIE, BOB, 0)


def test_owner_balance_shortfall_after_allowance_check():
    lg = mk_scenario()
    # alice approves more than she later keeps
    lg.approve(ALICE, BOB, 20_000_000 - 200)
    lg.transfer(ALICE, CHARLIE, 19_999_000)
    before = lg.snapshot()
    with pytest.raises(InsufficientBalance) as ei:
        lg.transfer_from(BOB, ALICE, CHARLIE, 801)
    assert ei.value.details["balance"] == 800
    assert lg.snapshot() == before


def test_zero_value_transfer_from_needs_sanity_gates():
    lg = mk_scenario()
    events = lg.transfer_from(BOB, ALICE, CHARLIE, 0)
    assert events == (Transferred(from_=ALICE, to=CHARLIE, value=0),)
    assert lg.allowance(ALICE, BOB) == 200


def test_transfer_from_to_owner_consumes_allowance_only():
    lg = mk_scenario()
    lg.transfer_from(BOB, ALICE, ALICE, 100)
    assert lg.balance_of(ALICE) == 19_999_800
    assert lg.allowance(ALICE, BOB) == 100


def test_transfer_from_receiver_overflow():
    cfg = LedgerConfig(width_bits=8, total_supply=200)
    lg = TokenLedger.from_genesis(GenesisConfig(total_supply=200, supply_owner=ALICE), cfg)
    lg.transfer(ALICE, BOB, 10)
    lg.approve(ALICE, BOB, 100)
    lg.state.balances._put(CHARLIE, 250)
    before = lg.snapshot()
    with pytest.raises(ArithmeticOverflow):
        lg.transfer_from(BOB, ALICE, CHARLIE, 6)
    assert lg.snapshot() == before
    assert lg.allowance(ALICE, BOB) == 100


def test_transfer_from_missing_ids():
    lg = mk_scenario()
    with pytest.raises(InvalidSpender):
        lg.transfer_from(None, ALICE, CHARLIE, 1)
    with pytest.raises(InvalidSender):
        lg.transfer_from(BOB, None, CHARLIE, 1)
    with pytest.raises(InvalidReceiver):
        lg.transfer_from(BOB, ALICE, None, 1)


def test_transfer_from_without_approval():
    lg = TokenLedger()
    lg.init(ALICE)
    lg.transfer(ALICE, BOB, 200)
    before = lg.snapshot()
    with pytest.raises(InsufficientAllowance) as ei:
        lg.transfer_from(BOB, ALICE, CHARLIE, 1)
    assert ei.value.details["allowance"] == 0
    assert lg.snapshot() == before
