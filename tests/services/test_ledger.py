"""Tests for conditional coin balance updates."""

from coinsms.services.ledger import CoinLedger


def test_debit_takes_coins_when_balance_covers_cost(db_session, make_profile):
    profile = make_profile(10)
    ledger = CoinLedger(db_session)

    assert ledger.debit(profile.id, 3) == 7
    assert ledger.balance_of(profile.id) == 7


def test_debit_of_entire_balance_leaves_zero(db_session, make_profile):
    profile = make_profile(3)
    ledger = CoinLedger(db_session)

    assert ledger.debit(profile.id, 3) == 0


def test_debit_refuses_when_balance_is_short(db_session, make_profile):
    profile = make_profile(2)
    ledger = CoinLedger(db_session)

    assert ledger.debit(profile.id, 3) is None
    assert ledger.balance_of(profile.id) == 2


def test_debit_of_unknown_account_is_refused(db_session):
    ledger = CoinLedger(db_session)
    assert ledger.debit("missing", 1) is None
    assert ledger.balance_of("missing") is None


def test_sequential_debits_never_overspend(db_session, make_profile):
    profile = make_profile(5)
    ledger = CoinLedger(db_session)

    outcomes = [ledger.debit(profile.id, 2) for _ in range(4)]
    assert outcomes == [3, 1, None, None]
    assert ledger.balance_of(profile.id) == 1


def test_credit_adds_and_subtracts(db_session, make_profile):
    profile = make_profile(5)
    ledger = CoinLedger(db_session)

    assert ledger.credit(profile.id, 10) == 15
    assert ledger.credit(profile.id, -15) == 0


def test_negative_credit_cannot_go_below_zero(db_session, make_profile):
    profile = make_profile(5)
    ledger = CoinLedger(db_session)

    assert ledger.credit(profile.id, -6) is None
    assert ledger.balance_of(profile.id) == 5


def test_get_profile_reflects_committed_balance(db_session, make_profile):
    profile = make_profile(10)
    ledger = CoinLedger(db_session)
    ledger.debit(profile.id, 4)

    assert ledger.get_profile(profile.id).credits_balance == 6
