"""Unit tests for recurring-charge detection"""

import pytest
from datetime import date
from insights_gateway.domain.recurrence import coefficient_of_variation, find_recurring_charges


def test_consistent_amounts_are_recurring(make_txn):
    """Test [100, 101, 99] (variation ~0.008) is classified recurring"""
    transactions = [
        make_txn(100, date(2025, 3, 1), merchant="Gym"),
        make_txn(101, date(2025, 4, 1), merchant="Gym"),
        make_txn(99, date(2025, 5, 1), merchant="Gym"),
    ]

    recurring = find_recurring_charges(transactions)

    assert len(recurring) == 1
    assert recurring[0].merchant == "Gym"
    assert recurring[0].amount == pytest.approx(100)
    assert recurring[0].frequency == pytest.approx(1.0)


def test_variable_amounts_are_not_recurring(make_txn):
    """Test [100, 150, 50] (variation ~0.41) is not recurring"""
    transactions = [
        make_txn(100, date(2025, 3, 1), merchant="Hardware"),
        make_txn(150, date(2025, 4, 1), merchant="Hardware"),
        make_txn(50, date(2025, 5, 1), merchant="Hardware"),
    ]

    assert find_recurring_charges(transactions) == []


def test_fewer_than_three_occurrences_ignored(make_txn):
    transactions = [
        make_txn(15, date(2025, 4, 1), merchant="Music"),
        make_txn(15, date(2025, 5, 1), merchant="Music"),
    ]

    assert find_recurring_charges(transactions) == []


def test_missing_merchant_excluded(make_txn):
    transactions = [make_txn(20, date(2025, m, 1), merchant=None) for m in (3, 4, 5)]
    transactions += [make_txn(20, date(2025, m, 1), merchant="") for m in (3, 4, 5)]

    assert find_recurring_charges(transactions) == []


def test_last_date_is_newest_regardless_of_input_order(make_txn):
    """Test detector sorts internally instead of trusting caller ordering"""
    transactions = [
        make_txn(9.99, date(2025, 2, 4), merchant="StreamFlix"),
        make_txn(9.99, date(2025, 4, 4), merchant="StreamFlix"),
        make_txn(9.99, date(2025, 1, 4), merchant="StreamFlix"),
        make_txn(9.99, date(2025, 3, 4), merchant="StreamFlix"),
    ]

    recurring = find_recurring_charges(transactions)

    assert recurring[0].last_date == date(2025, 4, 4)
    assert recurring[0].frequency == pytest.approx(4 / 3)


def test_results_ordered_by_merchant(make_txn):
    transactions = []
    for merchant in ("Zumba", "Acme"):
        transactions += [make_txn(30, date(2025, m, 1), merchant=merchant) for m in (3, 4, 5)]

    assert [r.merchant for r in find_recurring_charges(transactions)] == ["Acme", "Zumba"]


def test_coefficient_of_variation_zero_mean():
    assert coefficient_of_variation([0, 0, 0]) is None
    assert coefficient_of_variation([]) is None
    assert coefficient_of_variation([100, 150, 50]) == pytest.approx(0.408, abs=0.001)
