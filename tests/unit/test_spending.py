"""Unit tests for spending-pattern insights"""

import pytest
from datetime import date, timedelta
from insights_gateway.domain.models import (
    CategorySpending,
    InsightPriority,
    InsightSeverity,
    TransactionType,
)
from insights_gateway.domain.spending import analyze_spending_patterns


def groceries(total: float) -> CategorySpending:
    return CategorySpending("cat_groceries", "Groceries", total, 2, total / 2)


def by_id(insights, insight_id):
    return next((i for i in insights if i.insight_id == insight_id), None)


def test_category_change_exactly_25_percent_triggers(make_txn, now):
    """Test 25.0% month-over-month increase is reported"""
    transactions = [
        make_txn(100.00, date(2025, 4, 15), category_id="cat_groceries"),
        make_txn(125.00, date(2025, 5, 15), category_id="cat_groceries"),
    ]

    insights = analyze_spending_patterns(transactions, [groceries(225.00)], now)
    insight = by_id(insights, "spending-change-cat_groceries")

    assert insight is not None
    assert insight.value == pytest.approx(25.0)
    assert insight.severity == InsightSeverity.WARNING
    assert insight.priority == InsightPriority.MEDIUM
    assert insight.expires_at == now + timedelta(days=7)
    assert insight.metadata["previous_amount"] == pytest.approx(100.00)


def test_category_change_just_under_25_percent_ignored(make_txn, now):
    """Test 24.99% change does not trigger"""
    transactions = [
        make_txn(100.00, date(2025, 4, 15), category_id="cat_groceries"),
        make_txn(124.99, date(2025, 5, 15), category_id="cat_groceries"),
    ]

    insights = analyze_spending_patterns(transactions, [groceries(224.99)], now)

    assert by_id(insights, "spending-change-cat_groceries") is None


def test_large_increase_is_high_priority(make_txn, now):
    transactions = [
        make_txn(100.00, date(2025, 4, 10), category_id="cat_groceries"),
        make_txn(120.00, date(2025, 5, 10), category_id="cat_groceries"),
        make_txn(40.00, date(2025, 6, 3), category_id="cat_groceries"),
    ]

    insight = by_id(analyze_spending_patterns(transactions, [groceries(260.00)], now), "spending-change-cat_groceries")

    assert insight.value == pytest.approx(60.0)
    assert insight.priority == InsightPriority.HIGH
    assert insight.title == "Groceries Spending Increased"


def test_decrease_is_positive(make_txn, now):
    transactions = [
        make_txn(200.00, date(2025, 4, 10), category_id="cat_groceries"),
        make_txn(120.00, date(2025, 5, 10), category_id="cat_groceries"),
    ]

    insight = by_id(analyze_spending_patterns(transactions, [groceries(320.00)], now), "spending-change-cat_groceries")

    assert insight.severity == InsightSeverity.POSITIVE
    assert insight.value == pytest.approx(-40.0)
    assert "decreased by 40%" in insight.description


def test_no_previous_month_spending_skips_category(make_txn, now):
    transactions = [make_txn(300.00, date(2025, 5, 10), category_id="cat_groceries")]

    assert by_id(analyze_spending_patterns(transactions, [groceries(300.00)], now), "spending-change-cat_groceries") is None


def test_income_ignored_for_category_changes(make_txn, now):
    transactions = [
        make_txn(100.00, date(2025, 4, 10), category_id="cat_groceries"),
        make_txn(100.00, date(2025, 5, 10), category_id="cat_groceries"),
        make_txn(900.00, date(2025, 5, 11), TransactionType.INCOME, category_id="cat_groceries"),
    ]

    assert by_id(analyze_spending_patterns(transactions, [groceries(200.00)], now), "spending-change-cat_groceries") is None


def test_weekend_spending_pattern(make_txn, now):
    """Test weekend daily average 30%+ above weekday average is reported"""
    transactions = [
        make_txn(100.00, date(2025, 6, 14)),  # Saturday
        make_txn(100.00, date(2025, 6, 15)),  # Sunday
    ]
    transactions += [make_txn(20.00, date(2025, 6, day)) for day in range(9, 14)]  # Mon-Fri

    insight = by_id(analyze_spending_patterns(transactions, [], now), "weekend-spending-pattern")

    assert insight is not None
    assert insight.priority == InsightPriority.LOW
    assert insight.metadata["avg_weekend_spending"] == pytest.approx(100.0)
    assert insight.metadata["avg_weekday_spending"] == pytest.approx(20.0)
    assert insight.value == pytest.approx(80.0)
    assert insight.expires_at == now + timedelta(days=30)


def test_weekend_pattern_requires_weekday_spending(make_txn, now):
    """Test all-weekend spending does not divide by zero"""
    transactions = [make_txn(100.00, date(2025, 6, 14)), make_txn(80.00, date(2025, 6, 15))]

    assert by_id(analyze_spending_patterns(transactions, [], now), "weekend-spending-pattern") is None


def test_balanced_week_has_no_weekend_pattern(make_txn, now):
    transactions = [make_txn(50.00, date(2025, 6, day)) for day in range(9, 16)]

    assert by_id(analyze_spending_patterns(transactions, [], now), "weekend-spending-pattern") is None


def test_frequent_small_purchases(make_txn, now):
    """Test 12 coffee runs adding up to >= $50/month are reported"""
    transactions = [make_txn(5.00, date(2025, 6, 2) + timedelta(days=i), merchant="Bean There") for i in range(12)]

    insight = by_id(analyze_spending_patterns(transactions, [], now), "recurring-expense-Bean There")

    assert insight is not None
    assert insight.priority == InsightPriority.MEDIUM
    assert insight.metadata["count"] == 12
    assert insight.value == pytest.approx(150.0)
    assert [a.kind.value for a in insight.actions] == ["view_merchant", "create_budget"]


def test_fewer_than_ten_small_purchases_ignored(make_txn, now):
    transactions = [make_txn(5.00, date(2025, 6, 2) + timedelta(days=i), merchant="Bean There") for i in range(9)]

    assert by_id(analyze_spending_patterns(transactions, [], now), "recurring-expense-Bean There") is None


def test_small_purchase_estimate_counts_every_charge_at_merchant(make_txn, now):
    """Test a large charge at a coffee shop still adds to its monthly estimate"""
    start = date(2025, 5, 1)
    transactions = [make_txn(3.00, start + timedelta(days=i), merchant="Cafe") for i in range(10)]
    transactions.append(make_txn(100.00, date(2025, 5, 20), merchant="Cafe"))
    transactions += [make_txn(500.00, start + timedelta(days=i), merchant="Furniture Co") for i in range(10)]

    insight = by_id(analyze_spending_patterns(transactions, [], now), "recurring-expense-Cafe")

    assert insight is not None
    assert insight.metadata["count"] == 10
    assert insight.metadata["total"] == pytest.approx(130.00)
    assert insight.value == pytest.approx(130.00 / 21 * 30)


def test_empty_input(now):
    assert analyze_spending_patterns([], [], now) == []
